"""Error envelope middleware.

Installed innermost, so failures that escape the routers are answered with
the `{"error": ...}` envelope while the cross-origin middleware can still add
its headers to the response.
"""
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from ciudadano_digital.utils.errors import general_exception_handler


class ErrorEnvelopeMiddleware(BaseHTTPMiddleware):
    """
    Convert any exception raised below it into the error envelope.

    `AppError` and framework HTTP exceptions never get here: the exception
    middleware inside the router stack already answered them.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        try:
            return await call_next(request)
        except Exception as e:
            return await general_exception_handler(request, e)
