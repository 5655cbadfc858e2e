"""
Route modules.

The five feature routers are mounted under the configured API prefix, in the
order listed in `get_feature_routers()`.
"""
from typing import Dict

from fastapi import APIRouter


def get_feature_routers() -> Dict[str, APIRouter]:
    """Feature routers keyed by the path segment they are mounted at."""
    from ciudadano_digital.api.routes import auth, user, chat, message, document

    return {
        "auth": auth.router,
        "user": user.router,
        "chat": chat.router,
        "message": message.router,
        "document": document.router,
    }
