"""Request-side helpers for the same-origin proxy routes."""

import json
import logging
from typing import Any, Dict, Optional

from fastapi import Request
from fastapi.responses import JSONResponse

from proconnect_web.core.errors import INVALID_BODY_MESSAGE
from proconnect_web.services.backend_client import BackendClient, BackendResponse

logger = logging.getLogger(__name__)


class InvalidJSONBody(Exception):
    """The browser sent a body that is not valid JSON."""


async def read_json_body(request: Request) -> Any:
    raw = await request.body()
    if not raw:
        raise InvalidJSONBody()
    try:
        return json.loads(raw)
    except (ValueError, UnicodeDecodeError) as exc:
        raise InvalidJSONBody() from exc


async def forward_json(
    request: Request,
    client: BackendClient,
    path: str,
    headers: Optional[Dict[str, str]] = None,
) -> BackendResponse:
    """Forward the incoming JSON body to ``path`` using the incoming method."""
    body = await read_json_body(request)
    return await client.request(request.method, path, json=body, headers=headers)


async def invalid_json_body_handler(request: Request, exc: InvalidJSONBody) -> JSONResponse:
    logger.info("Rejected non-JSON body for %s %s", request.method, request.url.path)
    return JSONResponse(status_code=400, content={"error": INVALID_BODY_MESSAGE})
