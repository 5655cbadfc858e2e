"""Custom exception classes and the terminal error handlers.

Every failure that reaches the end of the request chain is answered with the
same envelope:

    {"error": "<message>"}

The status code comes from the failure itself (`status_code`, or a `status`
attribute set by a collaborator) and defaults to 500.
"""
from typing import Any, Optional

from fastapi import Request, status
from fastapi.responses import JSONResponse

from ciudadano_digital.config.sentry import add_breadcrumb, capture_exception
from ciudadano_digital.utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_ERROR_MESSAGE = "Error interno del servidor"


class AppError(Exception):
    """Base application error."""

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        code: Optional[str] = None,
        details: Optional[dict] = None,
    ):
        self.message = message
        self.status_code = status_code
        self.code = code or "APP_ERROR"
        self.details = details or {}
        super().__init__(self.message)


class BadRequestError(AppError):
    """Malformed request."""

    def __init__(self, message: str = "Bad request", details: Optional[dict] = None):
        super().__init__(
            message=message,
            status_code=status.HTTP_400_BAD_REQUEST,
            code="BAD_REQUEST",
            details=details,
        )


class UnauthorizedError(AppError):
    """Unauthorized access error."""

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(
            message=message,
            status_code=status.HTTP_401_UNAUTHORIZED,
            code="UNAUTHORIZED",
        )


class ForbiddenError(AppError):
    """Forbidden access error."""

    def __init__(self, message: str = "Forbidden"):
        super().__init__(
            message=message,
            status_code=status.HTTP_403_FORBIDDEN,
            code="FORBIDDEN",
        )


class NotFoundError(AppError):
    """Resource not found error."""

    def __init__(self, resource: str, identifier: Optional[str] = None):
        message = f"{resource} not found"
        if identifier:
            message += f" (id: {identifier})"
        super().__init__(
            message=message,
            status_code=status.HTTP_404_NOT_FOUND,
            code="NOT_FOUND",
        )


class PayloadTooLargeError(AppError):
    """Request body above the configured limit."""

    def __init__(self, limit: int):
        super().__init__(
            message="Request entity too large",
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            code="PAYLOAD_TOO_LARGE",
            details={"limit": limit},
        )


class DatabaseUnavailableError(AppError):
    """The datastore was never initialised."""

    def __init__(self, message: str = "Database not initialized"):
        super().__init__(message=message, code="DATABASE_UNAVAILABLE")


def error_status(exc: BaseException) -> int:
    """Status declared by the failure, 500 when it declares none."""
    for attr in ("status_code", "status"):
        value = getattr(exc, attr, None)
        if isinstance(value, int) and 400 <= value <= 599:
            return value
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def error_message(exc: BaseException) -> str:
    """Message carried by the failure, the generic message when it is empty."""
    message: Any = getattr(exc, "message", None) or str(exc)
    return str(message) if message else DEFAULT_ERROR_MESSAGE


def error_response(exc: BaseException) -> JSONResponse:
    """Build the `{"error": ...}` envelope for a failure."""
    return JSONResponse(
        status_code=error_status(exc),
        content={"error": error_message(exc)},
    )


def _report(request: Request, exc: BaseException, status_code: int) -> None:
    add_breadcrumb(
        message=f"Request failed: {type(exc).__name__}",
        category="error",
        level="warning" if status_code < 500 else "error",
        data={
            "path": request.url.path,
            "method": request.method,
            "status_code": status_code,
        },
    )
    if status_code >= 500:
        capture_exception(
            exc,
            context={
                "request": {
                    "path": request.url.path,
                    "method": request.method,
                    "query_params": dict(request.query_params),
                },
            },
            tags={
                "error_type": type(exc).__name__,
                "status_code": str(status_code),
            },
        )


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Handle application errors."""
    status_code = error_status(exc)
    logger.warning(
        "Application error",
        error=exc.code,
        message=exc.message,
        path=request.url.path,
        status_code=status_code,
    )
    _report(request, exc, status_code)
    return error_response(exc)


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle anything else that escaped the routers."""
    status_code = error_status(exc)
    logger.error(
        "Unhandled request error",
        error=str(exc),
        error_type=type(exc).__name__,
        path=request.url.path,
        status_code=status_code,
        exc_info=exc,
    )
    _report(request, exc, status_code)
    return error_response(exc)
