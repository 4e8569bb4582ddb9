"""
Review-by-token proxy endpoints.

``GET`` always answers 200 with a complete validation object, even when the
backend is down or answers with something unusable, so the review page can
show "invalid link" without special cases. ``POST`` relays the backend
answer unchanged.
"""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from proconnect_web.api.proxy import forward_json
from proconnect_web.core.config import settings
from proconnect_web.core.limiter import limiter
from proconnect_web.services import backend_api, review
from proconnect_web.services.backend_client import BackendClient, get_backend_client

router = APIRouter(tags=["review"])


@router.get("/{token}")
@limiter.limit(settings.rate_limit_read_endpoints)
async def validate_review_token(
    token: str,
    request: Request,
    client: BackendClient = Depends(get_backend_client),
):
    """Whether the review link is usable, and for which professional."""
    validation = await review.check_token(client, token)
    return JSONResponse(status_code=200, content=validation.to_public())


@router.post("/{token}")
@limiter.limit(settings.rate_limit_review_endpoints)
async def submit_review(
    token: str,
    request: Request,
    client: BackendClient = Depends(get_backend_client),
):
    """Submit a rating and optional comment for the review link."""
    backend = await forward_json(request, client, backend_api.review_path(token))
    return backend.to_response()
