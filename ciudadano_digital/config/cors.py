"""
Cross-origin policies.

Two policies exist:

- the default policy, always installed: any origin, credentials, and a fixed
  set of methods and headers used by the web and mobile clients;
- the permissive policy, layered behind the default one when `AVOID_CORS` is
  enabled: any origin, any header and the common methods.

Both are installed when `AVOID_CORS` is on. The default policy sees every
request first, so it answers preflights; on simple requests both add their
headers. The overlap is kept as is.
"""
from typing import Any, Dict, List

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ciudadano_digital.config.settings import Settings
from ciudadano_digital.utils.logger import get_logger

logger = get_logger(__name__)

CORS_ALLOWED_METHODS = ["GET", "POST", "PUT", "DELETE", "OPTIONS"]
CORS_ALLOWED_HEADERS = ["Content-Type", "Authorization", "X-Client-Type"]

PERMISSIVE_CORS_METHODS = ["GET", "HEAD", "PUT", "PATCH", "POST", "DELETE"]


def get_default_cors_options() -> Dict[str, Any]:
    """Options for the policy that is always installed."""
    return {
        "allow_origins": ["*"],
        "allow_credentials": True,
        "allow_methods": list(CORS_ALLOWED_METHODS),
        "allow_headers": list(CORS_ALLOWED_HEADERS),
    }


def get_permissive_cors_options() -> Dict[str, Any]:
    """Options for the `AVOID_CORS` overlay."""
    return {
        "allow_origins": ["*"],
        "allow_methods": list(PERMISSIVE_CORS_METHODS),
        "allow_headers": ["*"],
    }


def get_cors_policies(settings: Settings) -> List[Dict[str, Any]]:
    """Policies in the order a request meets them."""
    policies = [get_default_cors_options()]
    if settings.avoid_cors:
        policies.append(get_permissive_cors_options())
    return policies


def setup_cors(app: FastAPI, settings: Settings) -> None:
    """
    Install the cross-origin policies on the application.

    Starlette runs the most recently added middleware first, so the policies
    are added in reverse to keep the default policy in front.
    """
    policies = get_cors_policies(settings)
    for options in reversed(policies):
        app.add_middleware(CORSMiddleware, **options)

    logger.info(
        "CORS configured",
        permissive_overlay=settings.avoid_cors,
        methods=CORS_ALLOWED_METHODS,
    )
