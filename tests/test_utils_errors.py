"""Tests for error classes and handlers."""
import json
from unittest.mock import MagicMock, patch

import pytest
from fastapi import Request, status

from ciudadano_digital.utils.errors import (
    DEFAULT_ERROR_MESSAGE,
    AppError,
    BadRequestError,
    DatabaseUnavailableError,
    ForbiddenError,
    NotFoundError,
    PayloadTooLargeError,
    UnauthorizedError,
    app_error_handler,
    error_message,
    error_response,
    error_status,
    general_exception_handler,
)


def make_request(path="/api/chat/1", method="GET"):
    request = MagicMock(spec=Request)
    request.url.path = path
    request.method = method
    request.query_params = {}
    return request


@pytest.mark.unit
class TestAppError:
    """Tests for AppError and subclasses."""

    def test_app_error_basic(self):
        error = AppError("Test error message")

        assert error.message == "Test error message"
        assert error.status_code == 500
        assert error.code == "APP_ERROR"
        assert error.details == {}
        assert str(error) == "Test error message"

    def test_app_error_custom(self):
        error = AppError("Gone", status_code=410, code="GONE", details={"id": 1})

        assert error.status_code == 410
        assert error.code == "GONE"
        assert error.details == {"id": 1}

    @pytest.mark.parametrize(
        "error,expected_status,expected_code",
        [
            (BadRequestError(), status.HTTP_400_BAD_REQUEST, "BAD_REQUEST"),
            (UnauthorizedError(), status.HTTP_401_UNAUTHORIZED, "UNAUTHORIZED"),
            (ForbiddenError(), status.HTTP_403_FORBIDDEN, "FORBIDDEN"),
            (NotFoundError("Chat"), status.HTTP_404_NOT_FOUND, "NOT_FOUND"),
            (PayloadTooLargeError(10), status.HTTP_413_REQUEST_ENTITY_TOO_LARGE, "PAYLOAD_TOO_LARGE"),
            (DatabaseUnavailableError(), status.HTTP_500_INTERNAL_SERVER_ERROR, "DATABASE_UNAVAILABLE"),
        ],
    )
    def test_subclasses(self, error, expected_status, expected_code):
        assert isinstance(error, AppError)
        assert error.status_code == expected_status
        assert error.code == expected_code

    def test_not_found_with_identifier(self):
        assert NotFoundError("Chat", identifier="7").message == "Chat not found (id: 7)"


@pytest.mark.unit
class TestErrorStatus:
    """Tests for error_status()."""

    def test_status_code_attribute(self):
        assert error_status(AppError("x", status_code=404)) == 404

    def test_status_attribute(self):
        exc = Exception("x")
        exc.status = 422
        assert error_status(exc) == 422

    def test_status_code_preferred_over_status(self):
        exc = Exception("x")
        exc.status_code = 401
        exc.status = 403
        assert error_status(exc) == 401

    def test_default_500(self):
        assert error_status(ValueError("x")) == 500

    @pytest.mark.parametrize("value", [200, 302, 99, 700, "404", None])
    def test_non_error_status_ignored(self, value):
        exc = Exception("x")
        exc.status = value
        assert error_status(exc) == 500


@pytest.mark.unit
class TestErrorMessage:
    """Tests for error_message()."""

    def test_message_attribute(self):
        assert error_message(AppError("Not found")) == "Not found"

    def test_str_fallback(self):
        assert error_message(ValueError("bad value")) == "bad value"

    def test_default_message(self):
        assert error_message(Exception()) == DEFAULT_ERROR_MESSAGE == "Error interno del servidor"

    def test_empty_message_attribute(self):
        exc = Exception()
        exc.message = ""
        assert error_message(exc) == DEFAULT_ERROR_MESSAGE


@pytest.mark.unit
class TestErrorResponse:
    """Tests for the envelope."""

    def test_envelope(self):
        response = error_response(AppError("Not found", status_code=404))

        assert response.status_code == 404
        assert json.loads(response.body) == {"error": "Not found"}


@pytest.mark.unit
class TestHandlers:
    """Tests for the terminal handlers."""

    async def test_app_error_handler(self):
        request = make_request()
        with patch("ciudadano_digital.utils.errors.logger") as mock_logger, \
             patch("ciudadano_digital.utils.errors.capture_exception") as mock_capture:
            response = await app_error_handler(request, NotFoundError("Chat"))

        assert response.status_code == 404
        assert json.loads(response.body) == {"error": "Chat not found"}
        mock_logger.warning.assert_called_once()
        mock_capture.assert_not_called()

    async def test_app_error_handler_reports_server_errors(self):
        request = make_request()
        with patch("ciudadano_digital.utils.errors.logger"), \
             patch("ciudadano_digital.utils.errors.capture_exception") as mock_capture:
            await app_error_handler(request, DatabaseUnavailableError())

        mock_capture.assert_called_once()

    async def test_general_exception_handler(self):
        request = make_request(method="POST")
        exc = RuntimeError()
        with patch("ciudadano_digital.utils.errors.logger") as mock_logger, \
             patch("ciudadano_digital.utils.errors.capture_exception") as mock_capture:
            response = await general_exception_handler(request, exc)

        assert response.status_code == 500
        assert json.loads(response.body) == {"error": "Error interno del servidor"}
        mock_logger.error.assert_called_once()
        assert mock_logger.error.call_args.kwargs["path"] == "/api/chat/1"
        mock_capture.assert_called_once()
        assert mock_capture.call_args.args[0] is exc

    async def test_general_exception_handler_with_status(self):
        request = make_request()
        exc = Exception("Not found")
        exc.status = 404
        with patch("ciudadano_digital.utils.errors.logger"), \
             patch("ciudadano_digital.utils.errors.capture_exception") as mock_capture:
            response = await general_exception_handler(request, exc)

        assert response.status_code == 404
        assert json.loads(response.body) == {"error": "Not found"}
        mock_capture.assert_not_called()
