"""Request body parsing middleware.

Parses JSON and URL-encoded bodies for every request before it is routed and
stores the result on `request.state.body`. Other content types (multipart
uploads, binary payloads) are left alone and `request.state.body` is `{}`.
"""
import json
from typing import Any, Callable, Dict
from urllib.parse import parse_qsl

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from ciudadano_digital.utils.errors import (
    BadRequestError,
    PayloadTooLargeError,
    error_response,
)
from ciudadano_digital.utils.logger import get_logger

logger = get_logger(__name__)

BODY_METHODS = ("POST", "PUT", "PATCH", "DELETE")


def _media_type(request: Request) -> str:
    return request.headers.get("content-type", "").split(";")[0].strip().lower()


def is_json_media_type(media_type: str) -> bool:
    return media_type == "application/json" or media_type.endswith("+json")


def is_form_media_type(media_type: str) -> bool:
    return media_type == "application/x-www-form-urlencoded"


def parse_json_body(raw: bytes) -> Any:
    """Decode a JSON body; only objects and arrays are accepted at the top level."""
    try:
        value = json.loads(raw)
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise BadRequestError(f"Invalid JSON body: {e}") from e
    if not isinstance(value, (dict, list)):
        raise BadRequestError("Invalid JSON body: expected an object or an array")
    return value


def parse_form_body(raw: bytes) -> Dict[str, Any]:
    """
    Decode an URL-encoded body.

    Repeated keys collect into a list: `a=1&a=2` -> {"a": ["1", "2"]}.
    """
    try:
        pairs = parse_qsl(raw.decode("utf-8"), keep_blank_values=True, strict_parsing=False)
    except UnicodeDecodeError as e:
        raise BadRequestError("Invalid URL-encoded body") from e

    parsed: Dict[str, Any] = {}
    for key, value in pairs:
        if key not in parsed:
            parsed[key] = value
        elif isinstance(parsed[key], list):
            parsed[key].append(value)
        else:
            parsed[key] = [parsed[key], value]
    return parsed


class BodyParserMiddleware(BaseHTTPMiddleware):
    """
    Parse JSON and URL-encoded request bodies.

    Malformed bodies are answered with a 400 envelope and bodies above
    `limit` bytes with a 413 envelope; in both cases the router is never
    called. The raw body stays readable downstream.
    """

    def __init__(self, app, limit: int = 100 * 1024):
        super().__init__(app)
        self.limit = limit

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request.state.body = {}

        media_type = _media_type(request)
        parse_json = is_json_media_type(media_type)
        parse_form = is_form_media_type(media_type)

        if request.method not in BODY_METHODS or not (parse_json or parse_form):
            return await call_next(request)

        try:
            declared_length = int(request.headers.get("content-length", "0") or 0)
        except ValueError:
            declared_length = 0

        try:
            if declared_length > self.limit:
                raise PayloadTooLargeError(self.limit)

            raw = await request.body()
            if len(raw) > self.limit:
                raise PayloadTooLargeError(self.limit)

            if raw:
                request.state.body = parse_json_body(raw) if parse_json else parse_form_body(raw)
        except (BadRequestError, PayloadTooLargeError) as e:
            logger.warning(
                "Rejected request body",
                path=request.url.path,
                media_type=media_type,
                status_code=e.status_code,
                message=e.message,
            )
            return error_response(e)

        return await call_next(request)


def get_parsed_body(request: Request) -> Any:
    """Dependency returning the body parsed by `BodyParserMiddleware`."""
    return getattr(request.state, "body", {})


