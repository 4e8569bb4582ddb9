"""
Authentication proxy endpoints with rate limiting.

These routes forward the browser's login calls to the backend and bridge the
session token: the backend sets ``proconnect_token`` on its own domain, so
the token is read from the backend's ``Set-Cookie`` and re-set here on the
frontend's domain as an httpOnly cookie.
"""

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from proconnect_web.api.proxy import forward_json
from proconnect_web.core.config import settings
from proconnect_web.core.limiter import limiter
from proconnect_web.core.logging_config import log_security_event
from proconnect_web.core.security import client_ip
from proconnect_web.core.session_cookie import (
    clear_session_cookie,
    extract_session_token,
    get_session_token,
    set_session_cookie,
)
from proconnect_web.services import backend_api
from proconnect_web.services.backend_client import BackendClient, get_backend_client
from proconnect_web.services.identity import IdentityShadow

logger = logging.getLogger(__name__)

router = APIRouter(tags=["authentication"])


@router.post("/request-otp")
@limiter.limit(settings.rate_limit_auth_endpoints)
async def request_otp(request: Request, client: BackendClient = Depends(get_backend_client)):
    """
    Ask the backend to email a one-time login code.

    The backend's status and body are relayed unchanged.

    Args:
        request: FastAPI request object (required for rate limiting)
        client: Shared backend client
    """
    backend = await forward_json(request, client, "/api/auth/request-otp")
    return backend.to_response()


@router.post("/verify-otp")
@limiter.limit(settings.rate_limit_auth_endpoints)
async def verify_otp(request: Request, client: BackendClient = Depends(get_backend_client)):
    """
    Verify a login code and bridge the issued session cookie.

    On success the backend body is returned with status 200 and, when the
    backend issued a token, ``proconnect_token`` is set on this domain.
    Failures are relayed unchanged and never set a cookie.
    """
    backend = await forward_json(request, client, "/api/auth/verify-otp")
    if not backend.ok:
        return backend.to_response()

    response = JSONResponse(content=backend.body, status_code=200)
    token = extract_session_token(backend.set_cookie)
    if token:
        set_session_cookie(response, token)
        log_security_event(
            "login_succeeded",
            "Session cookie bridged after OTP verification",
            ip_address=client_ip(request),
        )
    else:
        logger.warning("Backend verified OTP without issuing %s", settings.session_cookie_name)
    return response


@router.get("/me")
async def me(request: Request, client: BackendClient = Depends(get_backend_client)):
    """
    Return the logged-in professional.

    Without a session cookie, or when the backend rejects the token, the
    answer is 401 with a null body so the browser treats the visitor as
    logged out. Backend outages (5xx) are relayed as-is.
    """
    token = get_session_token(request)
    if not token:
        return JSONResponse(content=None, status_code=401)

    backend = await backend_api.fetch_me(client, token)
    if backend.ok:
        return JSONResponse(content=backend.body, status_code=200)
    if backend.status_code >= 500:
        return backend.to_response()
    return JSONResponse(content=None, status_code=401)


@router.post("/logout")
async def logout(request: Request, client: BackendClient = Depends(get_backend_client)):
    """
    Log out.

    The backend is told about the logout when a token is present, but the
    local cookie is cleared regardless of what the backend answers.
    """
    IdentityShadow(request.session).clear()
    token = get_session_token(request)

    if token:
        try:
            backend = await backend_api.logout(client, token)
            if not backend.ok:
                logger.warning("Backend logout answered %s; clearing cookie anyway", backend.status_code)
        except Exception:
            logger.exception("Backend logout failed; clearing cookie anyway")

    log_security_event("logout", "Session cookie cleared", ip_address=client_ip(request))
    response = JSONResponse(content={"message": "Logged out"}, status_code=200)
    clear_session_cookie(response)
    return response
