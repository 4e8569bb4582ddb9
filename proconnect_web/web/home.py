"""Home page and public professional profile routes"""

import logging

from fastapi import APIRouter, Depends, Request

from proconnect_web.core.errors import GENERIC_ERROR_MESSAGE
from proconnect_web.core.templates import render
from proconnect_web.services import backend_api
from proconnect_web.services.backend_client import BackendClient, get_backend_client

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/")
async def index(request: Request):
    """Landing page"""
    return render(request, "index.html")


@router.get("/professionals/{professional_id}")
async def professional_profile(
    request: Request,
    professional_id: str,
    client: BackendClient = Depends(get_backend_client),
):
    """Public profile with the "Contact" button that opens the reveal modal"""
    backend = await backend_api.get_professional(client, professional_id)

    if backend.status_code == 404:
        return render(request, "not_found.html", status_code=404)
    if not backend.ok or not isinstance(backend.body, dict):
        logger.warning("Profile %s could not be loaded (status %s)", professional_id, backend.status_code)
        return render(
            request,
            "error.html",
            {"message": backend.error_message(GENERIC_ERROR_MESSAGE)},
            status_code=backend.status_code if not backend.ok else 502,
        )

    return render(
        request,
        "professional.html",
        {"professional": backend.body, "professional_id": professional_id},
    )
