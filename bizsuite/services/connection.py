from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .client_config import (
    default_config_path,
    effective_base_url,
    effective_credentials_path,
    effective_timeout,
    format_token_for_log,
    load_client_config,
)
from .credentials import CredentialStore
from .http_client import PortalHttpClient, PortalHttpClientConfig, TokenProvider


@dataclass(frozen=True)
class PortalConnection:
    config_path: Path
    config: dict[str, Any]
    http: PortalHttpClient
    credentials: TokenProvider


def create_portal_connection(
    *,
    config_path: str | Path | None = None,
    credentials: TokenProvider | None = None,
    session: Any = None,
    logger: logging.Logger | None = None,
) -> PortalConnection:
    log = logger or logging.getLogger(__name__)
    path = Path(config_path) if config_path is not None else default_config_path()
    config = load_client_config(path, logger=log)
    base_url = effective_base_url(config)
    timeout_s = effective_timeout(config)
    creds = credentials if credentials is not None else CredentialStore(effective_credentials_path(config))
    config["base_url"] = base_url
    config["timeout"] = timeout_s

    log.info(
        "Portal config loaded: path=%s base_url=%s token=%s",
        path,
        base_url,
        format_token_for_log(creds.load_token()),
    )
    http = PortalHttpClient(
        PortalHttpClientConfig(base_url=base_url, timeout_s=timeout_s),
        credentials=creds,
        session=session,
        logger=log,
    )
    return PortalConnection(config_path=path, config=config, http=http, credentials=creds)
