"""
Professional profile and dashboard proxy endpoints.

Public profile reads pass straight through. ``/me`` routes require the
session cookie and forward it to the backend as a bearer token.
"""

from urllib.parse import quote

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from proconnect_web.api.proxy import forward_json
from proconnect_web.core.cache import TTLCache
from proconnect_web.core.config import settings
from proconnect_web.core.limiter import limiter
from proconnect_web.core.session_cookie import bearer_headers, get_session_token
from proconnect_web.services.backend_client import BackendClient, get_backend_client

router = APIRouter(tags=["professionals"])
skills_router = APIRouter(tags=["skills"])

CATEGORIES_CACHE_KEY = "categories"


def _unauthorized() -> JSONResponse:
    return JSONResponse(status_code=401, content={"error": "Unauthorized"})


# /me routes are declared before /{professional_id} so "me" is not captured as an id.

@router.get("/me")
@limiter.limit(settings.rate_limit_read_endpoints)
async def get_my_profile(request: Request, client: BackendClient = Depends(get_backend_client)):
    token = get_session_token(request)
    if not token:
        return _unauthorized()
    backend = await client.get("/api/professionals/me", headers=bearer_headers(token))
    return backend.to_response()


@router.put("/me")
@limiter.limit(settings.rate_limit_read_endpoints)
async def update_my_profile(request: Request, client: BackendClient = Depends(get_backend_client)):
    token = get_session_token(request)
    if not token:
        return _unauthorized()
    backend = await forward_json(request, client, "/api/professionals/me", headers=bearer_headers(token))
    return backend.to_response()


@router.get("/me/stats")
@limiter.limit(settings.rate_limit_read_endpoints)
async def get_my_stats(request: Request, client: BackendClient = Depends(get_backend_client)):
    token = get_session_token(request)
    if not token:
        return _unauthorized()
    backend = await client.get("/api/professionals/me/stats", headers=bearer_headers(token))
    return backend.to_response()


@router.patch("/me/availability")
@limiter.limit(settings.rate_limit_read_endpoints)
async def update_my_availability(request: Request, client: BackendClient = Depends(get_backend_client)):
    token = get_session_token(request)
    if not token:
        return _unauthorized()
    backend = await forward_json(
        request, client, "/api/professionals/me/availability", headers=bearer_headers(token)
    )
    return backend.to_response()


@router.get("/{professional_id}")
@limiter.limit(settings.rate_limit_read_endpoints)
async def get_professional(
    professional_id: str,
    request: Request,
    client: BackendClient = Depends(get_backend_client),
):
    """Public profile of one professional."""
    backend = await client.get(f"/api/professionals/{quote(professional_id, safe='')}")
    return backend.to_response()


@skills_router.get("/categories")
@limiter.limit(settings.rate_limit_read_endpoints)
async def get_categories(request: Request, client: BackendClient = Depends(get_backend_client)):
    """
    Skill categories for the search filters.

    Successful answers are cached in-process for ``CATEGORIES_CACHE_TTL``
    seconds; errors are relayed and never cached.
    """
    cache: TTLCache = request.app.state.categories_cache
    cached = cache.get(CATEGORIES_CACHE_KEY)
    if cached is not None:
        return JSONResponse(content=cached, status_code=200)

    backend = await client.get("/api/skills/categories")
    if backend.ok:
        cache.set(CATEGORIES_CACHE_KEY, backend.body)
    return backend.to_response()
