"""Authentication endpoints (sign-in, tokens, sessions).

Mounted by the application factory under `{API_PATH}/auth`. Handlers use
`get_db` for the datastore and `get_parsed_body` for the request body.
"""
from fastapi import APIRouter

router = APIRouter(tags=["auth"])
