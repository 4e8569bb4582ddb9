"""Contact reveal modal routes.

Each recently opened professional gets its own slot in the flow session, so
two profile tabs do not disturb each other. Only the last few slots are kept.
Opening the modal always starts a fresh reveal.
"""

import logging
from typing import Any, Dict
from urllib.parse import quote

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import HTMLResponse, RedirectResponse

from proconnect_web.core.schemas.auth import OTP_LENGTH
from proconnect_web.core.schemas.contact import NO_CONTACT_MESSAGE
from proconnect_web.core.security import client_ip
from proconnect_web.core.templates import is_htmx, render
from proconnect_web.services.backend_client import BackendClient, get_backend_client
from proconnect_web.services.contact_flow import ContactRevealFlow, RevealState, RevealStep
from proconnect_web.services.flow import InvalidTransition

logger = logging.getLogger(__name__)

router = APIRouter()

SESSION_KEY = "contact"

# Oldest slots are dropped first; the flow cookie must stay under 4 KB.
MAX_SLOTS = 3


def _slots(request: Request) -> Dict[str, Any]:
    return dict(request.session.get(SESSION_KEY) or {})


def _load_state(request: Request, professional_id: str) -> RevealState:
    return RevealState.from_session(professional_id, _slots(request).get(professional_id))


def _save_state(request: Request, state: RevealState) -> None:
    slots = _slots(request)
    slots.pop(state.professional_id, None)
    if state.step is not RevealStep.DONE:
        slots[state.professional_id] = state.to_session()
    while len(slots) > MAX_SLOTS:
        slots.pop(next(iter(slots)))
    request.session[SESSION_KEY] = slots


def _discard_state(request: Request, professional_id: str) -> None:
    slots = _slots(request)
    slots.pop(professional_id, None)
    request.session[SESSION_KEY] = slots


def _flow(request: Request, client: BackendClient, professional_id: str) -> ContactRevealFlow:
    return ContactRevealFlow(
        client,
        professional_id,
        state=_load_state(request, professional_id),
        forwarded_for=client_ip(request),
    )


def _render_modal(request: Request, state: RevealState):
    context = {
        "state": state,
        "professional_id": state.professional_id,
        "otp_length": OTP_LENGTH,
        "no_contact_message": NO_CONTACT_MESSAGE,
    }
    template = "contact/modal.html" if is_htmx(request) else "contact/page.html"
    return render(request, template, context)


@router.get("/professionals/{professional_id}/contact")
async def open_contact(request: Request, professional_id: str):
    """Open the modal at the email step, discarding any earlier attempt."""
    state = RevealState(professional_id=professional_id)
    _save_state(request, state)
    return _render_modal(request, state)


@router.post("/professionals/{professional_id}/contact/request-otp")
async def contact_request_otp(
    request: Request,
    professional_id: str,
    email: str = Form(""),
    client: BackendClient = Depends(get_backend_client),
):
    flow = _flow(request, client, professional_id)
    try:
        await flow.request_code(email)
    except InvalidTransition as e:
        logger.info("Ignored contact request: %s", e)
    _save_state(request, flow.state)
    return _render_modal(request, flow.state)


@router.post("/professionals/{professional_id}/contact/resend")
async def contact_resend(
    request: Request,
    professional_id: str,
    client: BackendClient = Depends(get_backend_client),
):
    flow = _flow(request, client, professional_id)
    try:
        await flow.resend()
    except InvalidTransition as e:
        logger.info("Ignored contact resend: %s", e)
    _save_state(request, flow.state)
    return _render_modal(request, flow.state)


@router.post("/professionals/{professional_id}/contact/verify")
async def contact_verify(
    request: Request,
    professional_id: str,
    otp: str = Form(""),
    client: BackendClient = Depends(get_backend_client),
):
    """Verify the code; the revealed details are rendered once and not stored."""
    flow = _flow(request, client, professional_id)
    try:
        await flow.verify(otp)
    except InvalidTransition as e:
        logger.info("Ignored contact verify: %s", e)
    _save_state(request, flow.state)
    return _render_modal(request, flow.state)


@router.post("/professionals/{professional_id}/contact/change-email")
async def contact_change_email(
    request: Request,
    professional_id: str,
    client: BackendClient = Depends(get_backend_client),
):
    flow = _flow(request, client, professional_id)
    try:
        flow.change_email()
    except InvalidTransition as e:
        logger.info("Ignored contact change-email: %s", e)
    _save_state(request, flow.state)
    return _render_modal(request, flow.state)


@router.post("/professionals/{professional_id}/contact/close")
async def close_contact(request: Request, professional_id: str):
    """Close the modal; the next open starts from the email step."""
    _discard_state(request, professional_id)
    if is_htmx(request):
        return HTMLResponse("")
    return RedirectResponse(url=f"/professionals/{quote(professional_id, safe='')}", status_code=303)
