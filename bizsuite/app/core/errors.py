from __future__ import annotations

import logging

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError

logger = logging.getLogger(__name__)

_TYPE_BY_STATUS = {
    400: "Validation",
    401: "Unauthorized",
    403: "Forbidden",
    404: "NotFound",
    409: "Conflict",
    413: "Validation",
    422: "Validation",
}


class MockApiError(Exception):
    """Error raised by mock handlers; rendered as `{type, message, errors}` JSON."""

    def __init__(self, status_code: int, message: str, *, errors: list[str] | None = None):
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.errors = list(errors or [])

    @property
    def error_type(self) -> str:
        return _TYPE_BY_STATUS.get(self.status_code, "Failure")


def not_found(entity: str, record_id: str) -> MockApiError:
    return MockApiError(404, f"{entity} with id {record_id} not found")


def validation_errors(exc: ValidationError) -> list[str]:
    out = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()))
        out.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    return out


def _body(status_code: int, message: str, errors: list[str] | None = None) -> dict:
    body = {"type": _TYPE_BY_STATUS.get(status_code, "Failure"), "message": message}
    if errors:
        body["errors"] = errors
    return body


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(MockApiError)
    async def _mock_api_error(_: Request, exc: MockApiError):
        return JSONResponse(status_code=exc.status_code, content=_body(exc.status_code, exc.message, exc.errors))

    @app.exception_handler(ValidationError)
    async def _validation_error(_: Request, exc: ValidationError):
        return JSONResponse(status_code=400, content=_body(400, "Validation failed", validation_errors(exc)))

    @app.exception_handler(RequestValidationError)
    async def _request_validation_error(_: Request, exc: RequestValidationError):
        errors = [f"{'.'.join(str(p) for p in e.get('loc', ()))}: {e.get('msg')}" for e in exc.errors()]
        return JSONResponse(status_code=400, content=_body(400, "Validation failed", errors))

    @app.exception_handler(HTTPException)
    async def _http_exception(_: Request, exc: HTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content=_body(exc.status_code, str(exc.detail)),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def _unhandled(_: Request, exc: Exception):
        logger.exception("Unhandled mock API error: %s", exc)
        return JSONResponse(status_code=500, content=_body(500, "Internal server error"))
