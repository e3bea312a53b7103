from __future__ import annotations

import argparse
import logging
import sys
from datetime import date
from pathlib import Path

import uvicorn

from bizsuite.app.core.config import settings
from bizsuite.app.core.logging_setup import configure_logging
from bizsuite.app.core.paths import resolve_home_path
from bizsuite.services.client_config import (
    default_config_path,
    effective_base_url,
    effective_credentials_path,
    format_token_for_log,
    load_client_config,
)
from bizsuite.services.credentials import CredentialStore
from bizsuite.services.errors import PortalError

logger = logging.getLogger(__name__)


def _credentials(config_path: str | None) -> CredentialStore:
    path = Path(config_path) if config_path else default_config_path()
    return CredentialStore(effective_credentials_path(load_client_config(path, logger=logger)))


def print_paths(config_path: str | None = None) -> None:
    path = Path(config_path) if config_path else default_config_path()
    config = load_client_config(path, logger=logger)
    print(f"config:      {path}")
    print(f"credentials: {effective_credentials_path(config)}")
    print(f"base_url:    {effective_base_url(config)}")
    print(f"mock_data:   {resolve_home_path(settings.MOCK_DATA_DIR)}")


def run_mock_server(
    *,
    host: str | None = None,
    port: int | None = None,
    data_dir: str | None = None,
    require_auth: bool | None = None,
) -> None:
    from bizsuite.app.main import create_app

    uvicorn.run(
        create_app(data_dir=data_dir, require_auth=require_auth),
        host=host or settings.MOCK_HOST,
        port=port or settings.MOCK_PORT,
        log_level="info",
    )


def export_audit(
    *,
    company_id: str,
    output: str | None = None,
    from_date: date | None = None,
    to_date: date | None = None,
    entity_type: str | None = None,
    config_path: str | None = None,
) -> Path:
    from bizsuite.services.connection import create_portal_connection
    from bizsuite.services.container import create_services

    conn = create_portal_connection(config_path=config_path, logger=logger)
    services = create_services(conn.http)
    return services.audit_trail.download_csv(
        output, company_id, from_date=from_date, to_date=to_date, entity_type=entity_type
    )


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(prog="bizsuite", description="BizSuite portal client tools")
    parser.add_argument("--config", default=None, help="client config file (default: ~/.bizsuite/config.json)")
    parser.add_argument("--log-level", default=None)
    sub = parser.add_subparsers(dest="cmd", required=True)

    p_login = sub.add_parser("login", help="store a bearer token for later requests")
    p_login.add_argument("--token", required=True)

    sub.add_parser("logout", help="forget the stored bearer token")
    sub.add_parser("paths", help="print the resolved config / credential paths")

    p_export = sub.add_parser("export-audit", help="download the audit trail as CSV")
    p_export.add_argument("--company-id", required=True)
    p_export.add_argument("--from-date", type=date.fromisoformat, default=None, help="YYYY-MM-DD")
    p_export.add_argument("--to-date", type=date.fromisoformat, default=None, help="YYYY-MM-DD")
    p_export.add_argument("--entity-type", default=None)
    p_export.add_argument("--output", "-o", default=None)

    p_mock = sub.add_parser("mock-server", help="run the mock API with uvicorn")
    p_mock.add_argument("--host", default=None)
    p_mock.add_argument("--port", type=int, default=None)
    p_mock.add_argument("--data-dir", default=None)
    p_mock.add_argument("--no-auth", action="store_true", help="accept requests without a bearer token")

    args = parser.parse_args(argv)
    configure_logging(level=args.log_level)

    if args.cmd == "login":
        store = _credentials(args.config)
        store.save_token(args.token)
        print(f"[OK] token saved: {format_token_for_log(args.token)} -> {store.path}")
        return

    if args.cmd == "logout":
        store = _credentials(args.config)
        if store.clear():
            print(f"[OK] token removed: {store.path}")
        else:
            print(f"[OK] no token stored at {store.path}")
        return

    if args.cmd == "paths":
        print_paths(args.config)
        return

    if args.cmd == "export-audit":
        try:
            out = export_audit(
                company_id=args.company_id,
                output=args.output,
                from_date=args.from_date,
                to_date=args.to_date,
                entity_type=args.entity_type,
                config_path=args.config,
            )
        except PortalError as exc:
            print(f"[ERROR] {exc}", file=sys.stderr)
            raise SystemExit(1)
        print(f"[OK] audit trail exported: {out}")
        return

    if args.cmd == "mock-server":
        run_mock_server(
            host=args.host,
            port=args.port,
            data_dir=args.data_dir,
            require_auth=False if args.no_auth else None,
        )
        return

    raise SystemExit(2)


if __name__ == "__main__":
    main()
