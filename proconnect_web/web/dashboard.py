"""Professional dashboard routes.

The route guard only checks that a session cookie exists. Every dashboard
load asks the backend who the cookie belongs to; a 401 means the cookie is
stale, so it is cleared before bouncing to the login page. Leaving it in
place would make the guard send ``/login`` straight back here.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import RedirectResponse
from pydantic import ValidationError

from proconnect_web.core.errors import (
    GENERIC_ERROR_MESSAGE,
    ErrorKind,
    FlowError,
    classify_status,
    validation_error,
)
from proconnect_web.core.logging_config import log_security_event
from proconnect_web.core.schemas.auth import AuthProfessional
from proconnect_web.core.schemas.profile import ProfileForm, ProfileFormError, form_values
from proconnect_web.core.session_cookie import clear_session_cookie, get_session_token
from proconnect_web.core.templates import is_htmx, redirect, render
from proconnect_web.services import backend_api
from proconnect_web.services.backend_client import BackendClient, get_backend_client
from proconnect_web.services.identity import IdentityShadow
from proconnect_web.web.guard import DASHBOARD_PATH, login_url

logger = logging.getLogger(__name__)

router = APIRouter()

UNAVAILABLE_MESSAGE = "We couldn't load your dashboard right now. Please try again."
AVAILABILITY_FAILED = "Could not update your availability. Please try again."
PROFILE_FAILED = "Could not save your profile. Please try again."
PROFILE_SAVED = "Profile saved."


def _stale_session(request: Request):
    """Forget the identity and cookie, then send the visitor to log in again."""
    IdentityShadow(request.session).clear()
    log_security_event(
        "stale_session",
        "Backend rejected session token; cookie cleared",
        ip_address=request.client.host if request.client else None,
    )
    response = redirect(request, login_url(DASHBOARD_PATH))
    clear_session_cookie(response)
    return response


def _parse_professional(body) -> Optional[AuthProfessional]:
    try:
        return AuthProfessional.model_validate(body)
    except ValidationError:
        return None


@router.get("/dashboard")
async def dashboard(request: Request, client: BackendClient = Depends(get_backend_client)):
    """Dashboard for the logged-in professional"""
    token = get_session_token(request)
    if not token:
        return RedirectResponse(url=login_url(DASHBOARD_PATH), status_code=307)

    shadow = IdentityShadow(request.session)
    backend = await backend_api.fetch_me(client, token)

    if backend.status_code == 401:
        return _stale_session(request)

    professional = _parse_professional(backend.body) if backend.ok else None
    if professional is None:
        logger.warning("Dashboard identity fetch failed (status %s)", backend.status_code)
        error = FlowError(
            kind=classify_status(backend.status_code) if not backend.ok else ErrorKind.TRANSPORT,
            message=UNAVAILABLE_MESSAGE,
        )
        return render(
            request,
            "dashboard.html",
            {"professional": shadow.load(), "stats": None, "error": error},
            status_code=backend.status_code if backend.status_code >= 500 else 502,
        )

    shadow.store(professional)

    stats_response = await backend_api.fetch_my_stats(client, token)
    stats = stats_response.body if stats_response.ok and isinstance(stats_response.body, dict) else None

    profile_response = await backend_api.fetch_my_profile(client, token)
    if profile_response.ok:
        profile = ProfileForm.from_backend(profile_response.body)
    else:
        profile = ProfileForm.from_backend(professional.model_dump(by_alias=True, exclude={"id"}))

    return render(
        request,
        "dashboard.html",
        {
            "professional": professional,
            "stats": stats,
            "error": None,
            "profile_values": form_values(profile),
        },
    )


@router.post("/dashboard/availability")
async def update_availability(
    request: Request,
    is_available: str = Form("false"),
    client: BackendClient = Depends(get_backend_client),
):
    """Toggle whether the professional is shown as available for work"""
    token = get_session_token(request)
    if not token:
        return RedirectResponse(url=login_url(DASHBOARD_PATH), status_code=303)

    wanted = is_available.strip().lower() in ("true", "1", "on", "yes")
    backend = await backend_api.set_availability(client, token, wanted)

    if backend.status_code == 401:
        return _stale_session(request)

    shadow = IdentityShadow(request.session)
    professional = shadow.load()
    error = None
    if backend.ok:
        if professional is not None:
            professional = professional.model_copy(update={"is_available": wanted})
            shadow.store(professional)
    else:
        error = FlowError(
            kind=classify_status(backend.status_code),
            message=backend.error_message(AVAILABILITY_FAILED)
            if backend.status_code < 500
            else GENERIC_ERROR_MESSAGE,
        )

    if not is_htmx(request):
        return RedirectResponse(url=DASHBOARD_PATH, status_code=303)
    return render(
        request,
        "partials/availability_toggle.html",
        {"professional": professional, "is_available": wanted if backend.ok else not wanted, "error": error},
    )


def _render_profile(request: Request, values, error: Optional[FlowError] = None, saved: bool = False):
    context = {"profile_values": values, "profile_error": error, "profile_saved": saved}
    if is_htmx(request):
        return render(request, "partials/profile_form.html", context)
    context.update({"professional": IdentityShadow(request.session).load(), "stats": None, "error": None})
    return render(request, "dashboard.html", context)


@router.post("/dashboard/profile")
async def update_profile(request: Request, client: BackendClient = Depends(get_backend_client)):
    """Save the public profile fields edited on the dashboard"""
    token = get_session_token(request)
    if not token:
        return RedirectResponse(url=login_url(DASHBOARD_PATH), status_code=303)

    form = await request.form()
    try:
        profile = ProfileForm.from_form(form)
    except ProfileFormError as exc:
        return _render_profile(request, form_values(form), error=validation_error(exc.message, field=exc.field))

    payload = profile.to_payload()
    backend = await backend_api.update_my_profile(client, token, payload)

    if backend.status_code == 401:
        return _stale_session(request)

    if not backend.ok:
        logger.warning("Profile update failed (status %s)", backend.status_code)
        error = FlowError(
            kind=classify_status(backend.status_code),
            message=backend.error_message(PROFILE_FAILED) if backend.status_code < 500 else GENERIC_ERROR_MESSAGE,
        )
        return _render_profile(request, form_values(profile), error=error)

    shadow = IdentityShadow(request.session)
    professional = shadow.load()
    if professional is not None:
        shadow.store(
            professional.model_copy(
                update={
                    "display_name": payload["displayName"] or professional.display_name,
                    "headline": profile.headline or None,
                    "avatar_url": profile.avatar_url or None,
                }
            )
        )

    if not is_htmx(request):
        return RedirectResponse(url=DASHBOARD_PATH, status_code=303)
    return _render_profile(request, form_values(profile), saved=True)
