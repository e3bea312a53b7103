from __future__ import annotations

from typing import Any, Optional


class PortalError(Exception):
    """Base class for client-side errors."""


class ApiError(PortalError):
    """The API answered with an HTTP error status."""

    def __init__(
        self,
        status_code: Optional[int],
        message: str,
        *,
        details: Optional[list[str]] = None,
        error_type: Optional[str] = None,
        url: Optional[str] = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.details = list(details or [])
        self.error_type = error_type
        self.url = url

    def __str__(self) -> str:
        if self.status_code is None:
            return self.message
        return f"HTTP {self.status_code}: {self.message}"


class BadRequestError(ApiError):
    pass


class UnauthorizedError(ApiError):
    pass


class ForbiddenError(ApiError):
    pass


class NotFoundError(ApiError):
    pass


class ConflictError(ApiError):
    pass


class ServerError(ApiError):
    pass


class TransportError(ApiError):
    """The request never produced an HTTP response (DNS, connect, timeout...)."""

    def __init__(self, message: str, *, url: Optional[str] = None):
        super().__init__(None, message, url=url)


class ExportFailedError(PortalError):
    """A file export (CSV download) could not be produced."""


_STATUS_ERRORS: dict[int, type[ApiError]] = {
    400: BadRequestError,
    401: UnauthorizedError,
    403: ForbiddenError,
    404: NotFoundError,
    409: ConflictError,
    422: BadRequestError,
}


def error_for_status(status_code: int, message: str, **kwargs: Any) -> ApiError:
    if status_code >= 500:
        return ServerError(status_code, message, **kwargs)
    cls = _STATUS_ERRORS.get(status_code, ApiError)
    return cls(status_code, message, **kwargs)
