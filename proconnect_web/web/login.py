"""Professional login and logout pages"""

import logging

from fastapi import APIRouter, Depends, Form, Request

from proconnect_web.core.logging_config import log_security_event
from proconnect_web.core.schemas.auth import OTP_LENGTH
from proconnect_web.core.security import client_ip, safe_redirect_target
from proconnect_web.core.session_cookie import (
    clear_session_cookie,
    get_session_token,
    set_session_cookie,
)
from proconnect_web.core.templates import is_htmx, redirect, render
from proconnect_web.services import backend_api
from proconnect_web.services.backend_client import BackendClient, get_backend_client
from proconnect_web.services.flow import InvalidTransition
from proconnect_web.services.identity import IdentityShadow
from proconnect_web.services.login_flow import DEFAULT_REDIRECT, LoginFlow, LoginState

logger = logging.getLogger(__name__)

router = APIRouter()

SESSION_KEY = "login"


def _load_state(request: Request) -> LoginState:
    return LoginState.from_session(request.session.get(SESSION_KEY))


def _save_state(request: Request, state: LoginState) -> None:
    request.session[SESSION_KEY] = state.to_session()


def _render_card(request: Request, state: LoginState):
    template = "partials/login_card.html" if is_htmx(request) else "login.html"
    return render(request, template, {"state": state, "otp_length": OTP_LENGTH})


@router.get("/login")
async def login_page(request: Request):
    """Login card for the current step.

    ``?redirect=`` is remembered so a successful login returns the visitor to
    the page the route guard bounced them from.
    """
    state = _load_state(request)
    target = request.query_params.get("redirect")
    if target is not None:
        state.redirect_to = safe_redirect_target(target, DEFAULT_REDIRECT)
    _save_state(request, state)
    return render(request, "login.html", {"state": state, "otp_length": OTP_LENGTH})


@router.post("/login/request-otp")
async def login_request_otp(
    request: Request,
    email: str = Form(""),
    client: BackendClient = Depends(get_backend_client),
):
    flow = LoginFlow(client, _load_state(request))
    try:
        await flow.request_otp(email)
    except InvalidTransition as e:
        logger.info("Ignored login request: %s", e)
    _save_state(request, flow.state)
    return _render_card(request, flow.state)


@router.post("/login/resend")
async def login_resend(request: Request, client: BackendClient = Depends(get_backend_client)):
    flow = LoginFlow(client, _load_state(request))
    try:
        await flow.resend()
    except InvalidTransition as e:
        logger.info("Ignored login resend: %s", e)
    _save_state(request, flow.state)
    return _render_card(request, flow.state)


@router.post("/login/verify")
async def login_verify(
    request: Request,
    otp: str = Form(""),
    client: BackendClient = Depends(get_backend_client),
):
    """Redeem the code; on success set the session cookie and leave the login page."""
    flow = LoginFlow(client, _load_state(request))
    try:
        result = await flow.verify(otp)
    except InvalidTransition as e:
        logger.info("Ignored login verify: %s", e)
        result = None

    if result is None:
        _save_state(request, flow.state)
        return _render_card(request, flow.state)

    request.session.pop(SESSION_KEY, None)
    shadow = IdentityShadow(request.session)
    if result.professional is not None:
        shadow.store(result.professional)
    else:
        shadow.clear()

    response = redirect(request, result.redirect_to)
    if result.token:
        set_session_cookie(response, result.token)
    return response


@router.post("/login/change-email")
async def login_change_email(request: Request, client: BackendClient = Depends(get_backend_client)):
    flow = LoginFlow(client, _load_state(request))
    try:
        flow.change_email()
    except InvalidTransition as e:
        logger.info("Ignored change-email: %s", e)
    _save_state(request, flow.state)
    return _render_card(request, flow.state)


@router.post("/logout")
async def logout(request: Request, client: BackendClient = Depends(get_backend_client)):
    """Log out and return to the landing page.

    The cookie is cleared even when the backend call fails.
    """
    IdentityShadow(request.session).clear()
    request.session.pop(SESSION_KEY, None)
    token = get_session_token(request)

    if token:
        try:
            backend = await backend_api.logout(client, token)
            if not backend.ok:
                logger.warning("Backend logout answered %s; clearing cookie anyway", backend.status_code)
        except Exception:
            logger.exception("Backend logout failed; clearing cookie anyway")

    log_security_event("logout", "Session cookie cleared", ip_address=client_ip(request))
    response = redirect(request, "/")
    clear_session_cookie(response)
    return response
