"""Chat message endpoints.

Mounted by the application factory under `{API_PATH}/message`. Handlers use
`get_db` for the datastore and `get_parsed_body` for the request body.
"""
from fastapi import APIRouter

router = APIRouter(tags=["message"])
