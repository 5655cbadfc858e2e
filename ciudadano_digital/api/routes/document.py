"""Citizen document endpoints.

Mounted by the application factory under `{API_PATH}/document`. Handlers use
`get_db` for the datastore and `get_parsed_body` for the request body.
"""
from fastapi import APIRouter

router = APIRouter(tags=["document"])
