"""
Contact reveal proxy endpoints.

The backend meters contact reveals per visitor, so the visitor's address is
forwarded as ``X-Forwarded-For``. Responses, including 429 quota errors, are
relayed unchanged.
"""

from urllib.parse import quote

from fastapi import APIRouter, Depends, Request

from proconnect_web.api.proxy import forward_json
from proconnect_web.core.config import settings
from proconnect_web.core.limiter import limiter
from proconnect_web.core.security import client_ip
from proconnect_web.services.backend_client import BackendClient, get_backend_client

router = APIRouter(tags=["contact"])


def _contact_path(professional_id: str, action: str) -> str:
    return f"/api/contact/professionals/{quote(professional_id, safe='')}/{action}"


@router.post("/professionals/{professional_id}/request-otp")
@limiter.limit(settings.rate_limit_contact_endpoints)
async def request_contact_otp(
    professional_id: str,
    request: Request,
    client: BackendClient = Depends(get_backend_client),
):
    """Send a verification code to the visitor's email."""
    backend = await forward_json(
        request,
        client,
        _contact_path(professional_id, "request-otp"),
        headers={"X-Forwarded-For": client_ip(request)},
    )
    return backend.to_response()


@router.post("/professionals/{professional_id}/verify-otp")
@limiter.limit(settings.rate_limit_contact_endpoints)
async def verify_contact_otp(
    professional_id: str,
    request: Request,
    client: BackendClient = Depends(get_backend_client),
):
    """Verify the code and return the professional's contact details."""
    backend = await forward_json(
        request,
        client,
        _contact_path(professional_id, "verify-otp"),
        headers={"X-Forwarded-For": client_ip(request)},
    )
    return backend.to_response()
