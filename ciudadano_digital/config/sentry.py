"""Sentry error tracking configuration."""
import os
from typing import Any, Dict, Optional

import sentry_sdk
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.logging import LoggingIntegration
from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration
from sentry_sdk.integrations.starlette import StarletteIntegration

from ciudadano_digital.config.settings import Settings
from ciudadano_digital.utils.logger import get_logger

logger = get_logger(__name__)

# Headers never sent to Sentry
SENSITIVE_HEADERS = ("authorization", "cookie", "x-api-key", "x-auth-token")


def init_sentry(settings: Settings) -> bool:
    """
    Initialize Sentry error tracking.

    Called from `setup_application()` before the FastAPI app is created so
    that import-time and startup errors are captured too.

    Sentry stays disabled when `SENTRY_DSN` is unset or when running under
    the test suite (`TESTING=true`).

    Returns:
        True if the SDK was initialised
    """
    if not settings.sentry_dsn:
        logger.info("Sentry DSN not configured, error tracking disabled")
        return False

    if os.getenv("TESTING") == "true":
        logger.info("Skipping Sentry initialization in test environment")
        return False

    sentry_sdk.init(
        dsn=settings.sentry_dsn,
        environment=settings.environment,
        traces_sample_rate=settings.sentry_traces_sample_rate,
        send_default_pii=False,
        integrations=[
            StarletteIntegration(),
            FastApiIntegration(),
            SqlalchemyIntegration(),
            # Logs become breadcrumbs; errors are captured explicitly
            LoggingIntegration(level=None, event_level=None),
        ],
        before_send=filter_sensitive_data,
    )

    logger.info("Sentry initialized", environment=settings.environment)
    return True


def filter_sensitive_data(event: Dict[str, Any], hint: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """Strip credentials from request headers before an event leaves the process."""
    headers = event.get("request", {}).get("headers")
    if headers:
        for key in [h for h in headers if h.lower() in SENSITIVE_HEADERS]:
            headers.pop(key, None)
    return event


def capture_exception(
    exception: BaseException,
    context: Optional[Dict[str, Any]] = None,
    tags: Optional[Dict[str, str]] = None,
) -> Optional[str]:
    """
    Capture an exception to Sentry with additional context.

    Returns:
        Event ID if Sentry is configured, None otherwise
    """
    with sentry_sdk.new_scope() as scope:
        for key, value in (context or {}).items():
            scope.set_context(key, value if isinstance(value, dict) else {"value": value})
        for key, value in (tags or {}).items():
            scope.set_tag(key, value)
        return sentry_sdk.capture_exception(exception)


def add_breadcrumb(
    message: str,
    category: str = "default",
    level: str = "info",
    data: Optional[Dict[str, Any]] = None,
) -> None:
    """Add a breadcrumb to Sentry."""
    sentry_sdk.add_breadcrumb(
        message=message,
        category=category,
        level=level,
        data=data or {},
    )
