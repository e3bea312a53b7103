from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Protocol

import requests
from pydantic import BaseModel

from bizsuite.models.common import PagedResponse
from bizsuite.services.errors import ApiError, TransportError, error_for_status


class TokenProvider(Protocol):
    def load_token(self) -> str | None: ...


@dataclass(frozen=True)
class PortalHttpClientConfig:
    base_url: str
    timeout_s: float = 30.0


def encode_params(params: Mapping[str, Any] | BaseModel | None) -> dict[str, Any]:
    """
    Turn filter params into a query-string mapping.

    Models are dumped by alias (camelCase); None values are dropped, booleans become
    `true` / `false` and dates are sent in ISO format.
    """
    if params is None:
        return {}
    if isinstance(params, BaseModel):
        raw = params.model_dump(mode="json", by_alias=True, exclude_none=True)
    else:
        raw = dict(params)
    out: dict[str, Any] = {}
    for key, value in raw.items():
        if value is None:
            continue
        if isinstance(value, bool):
            out[key] = "true" if value else "false"
        elif hasattr(value, "isoformat"):
            out[key] = value.isoformat()
        else:
            out[key] = value
    return out


def _error_message(resp: Any) -> tuple[str, list[str], str | None]:
    try:
        payload = resp.json()
    except ValueError:
        payload = None
    if isinstance(payload, dict):
        message = payload.get("message") or payload.get("title") or payload.get("detail")
        errors = payload.get("errors") or payload.get("details") or []
        if isinstance(errors, dict):
            details = [f"{k}: {v}" for k, v in errors.items()]
        elif isinstance(errors, list):
            details = [str(e) for e in errors]
        else:
            details = [str(errors)]
        if message is not None and not isinstance(message, str):
            message = str(message)
        return message or f"HTTP {resp.status_code}", details, payload.get("type")
    text = (getattr(resp, "text", "") or "").strip()
    return text[:500] or f"HTTP {resp.status_code}", [], None


class PortalHttpClient:
    """
    Shared HTTP client for every resource service.

    Reads the bearer token from `credentials` on each request, so a token saved after
    construction is picked up without rebuilding the client. `session` is any object
    with a requests-compatible `request()`; the `requests` module is used by default.
    """

    def __init__(
        self,
        config: PortalHttpClientConfig,
        *,
        credentials: TokenProvider | None = None,
        session: Any = None,
        logger: logging.Logger | None = None,
    ):
        self._config = config
        self._credentials = credentials
        self._session = session if session is not None else requests
        self._logger = logger or logging.getLogger(__name__)

    @property
    def config(self) -> PortalHttpClientConfig:
        return self._config

    def set_config(self, config: PortalHttpClientConfig) -> None:
        self._config = config

    def headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        token = self._credentials.load_token() if self._credentials is not None else None
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    def url(self, path: str) -> str:
        return f"{self._config.base_url.rstrip('/')}/{path.lstrip('/')}"

    def request(
        self,
        method: str,
        path: str,
        *,
        params: Mapping[str, Any] | BaseModel | None = None,
        json: Any = None,
        files: Any = None,
        data: Any = None,
    ) -> Any:
        """Send one request and return the raw response; HTTP errors raise `ApiError`."""
        url = self.url(path)
        try:
            resp = self._session.request(
                method,
                url,
                params=encode_params(params) or None,
                json=json,
                files=files,
                data=data,
                headers=self.headers(),
                timeout=float(self._config.timeout_s),
            )
        except requests.RequestException as exc:
            self._logger.error("%s %s failed: %s", method, url, exc)
            raise TransportError(str(exc), url=url) from exc

        if resp.status_code >= 400:
            message, details, error_type = _error_message(resp)
            log = self._logger.error if resp.status_code >= 500 else self._logger.warning
            log("%s %s failed: HTTP %s %s", method, url, resp.status_code, message)
            raise error_for_status(resp.status_code, message, details=details, error_type=error_type, url=url)
        return resp

    def _json_or_none(self, resp: Any, method: str, path: str) -> Any:
        if resp.status_code == 204 or not resp.content:
            return None
        try:
            return resp.json()
        except ValueError as exc:
            self._logger.error("%s %s invalid JSON: %s", method, path, exc)
            raise ApiError(resp.status_code, f"invalid JSON response: {exc}", url=self.url(path)) from exc

    def get_json(self, path: str, *, params: Mapping[str, Any] | BaseModel | None = None) -> Any:
        return self._json_or_none(self.request("GET", path, params=params), "GET", path)

    def post_json(
        self, path: str, *, body: Any = None, params: Mapping[str, Any] | BaseModel | None = None
    ) -> Any:
        return self._json_or_none(self.request("POST", path, params=params, json=_body(body)), "POST", path)

    def put_json(self, path: str, *, body: Any = None) -> Any:
        return self._json_or_none(self.request("PUT", path, json=_body(body)), "PUT", path)

    def delete_json(self, path: str, *, params: Mapping[str, Any] | BaseModel | None = None) -> Any:
        return self._json_or_none(self.request("DELETE", path, params=params), "DELETE", path)

    def get_bytes(self, path: str, *, params: Mapping[str, Any] | BaseModel | None = None) -> bytes:
        return bytes(self.request("GET", path, params=params).content)

    def post_multipart(
        self,
        path: str,
        *,
        files: Mapping[str, Any],
        data: Mapping[str, Any] | None = None,
    ) -> Any:
        form = {k: v for k, v in (data or {}).items() if v is not None}
        resp = self.request("POST", path, files=dict(files), data=form or None)
        return self._json_or_none(resp, "POST", path)

    def coerce_list(self, value: Any, *, context: str) -> list[dict[str, Any]]:
        if value is None:
            return []
        if isinstance(value, list):
            return [item for item in value if isinstance(item, dict)]
        self._logger.error("Unexpected %s response type: %s", context, type(value).__name__)
        return []

    def get_list(
        self, path: str, *, params: Mapping[str, Any] | BaseModel | None = None, context: str
    ) -> list[dict[str, Any]]:
        return self.coerce_list(self.get_json(path, params=params), context=context)

    def get_paged(
        self,
        path: str,
        params: Mapping[str, Any] | BaseModel | None,
        item_model: type[BaseModel],
    ) -> PagedResponse:
        payload = self.get_json(path, params=params)
        if not isinstance(payload, dict):
            raise ApiError(None, f"unexpected paged response type: {type(payload).__name__}", url=self.url(path))
        return PagedResponse[item_model].model_validate(payload)  # type: ignore[valid-type]


def _body(body: Any) -> Any:
    if isinstance(body, BaseModel):
        return body.model_dump(mode="json", by_alias=True, exclude_none=True)
    return body
