"""Route guard for the professional dashboard.

The check is presence-only: a cookie that exists is enough to reach the
dashboard. Whether the token is actually valid is decided by the backend on
the first authenticated call, which answers 401 for forged or expired tokens.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional
from urllib.parse import urlencode

from fastapi import Request
from fastapi.responses import RedirectResponse
from starlette.middleware.base import BaseHTTPMiddleware

from proconnect_web.core.logging_config import log_security_event
from proconnect_web.core.session_cookie import has_session
from proconnect_web.core.templates import redirect

logger = logging.getLogger(__name__)

LOGIN_PATH = "/login"
DASHBOARD_PATH = "/dashboard"
NAVIGATION_METHODS = ("GET", "HEAD")


class GuardAction(str, Enum):
    ALLOW = "allow"
    REDIRECT_LOGIN = "redirect_login"
    REDIRECT_DASHBOARD = "redirect_dashboard"


@dataclass(frozen=True)
class GuardDecision:
    action: GuardAction
    location: Optional[str] = None
    see_other: bool = False


def is_protected(path: str) -> bool:
    return path == DASHBOARD_PATH or path.startswith(DASHBOARD_PATH + "/")


def login_url(original_path: str) -> str:
    """Login URL that remembers where the visitor was heading."""
    return f"{LOGIN_PATH}?{urlencode({'redirect': original_path})}"


def evaluate_route(path: str, has_session_cookie: bool, method: str = "GET") -> GuardDecision:
    """Decide what to do with a request for ``path``.

    Only page loads are remembered as the post-login target; a form post to a
    dashboard action sends the visitor back to the dashboard itself.
    """
    if is_protected(path) and not has_session_cookie:
        if method.upper() in NAVIGATION_METHODS:
            return GuardDecision(GuardAction.REDIRECT_LOGIN, login_url(path))
        return GuardDecision(GuardAction.REDIRECT_LOGIN, login_url(DASHBOARD_PATH), see_other=True)
    if path == LOGIN_PATH and has_session_cookie:
        return GuardDecision(GuardAction.REDIRECT_DASHBOARD, DASHBOARD_PATH)
    return GuardDecision(GuardAction.ALLOW)


class RouteGuardMiddleware(BaseHTTPMiddleware):
    """Apply ``evaluate_route`` to every request before it reaches a route."""

    async def dispatch(self, request: Request, call_next):
        decision = evaluate_route(request.url.path, has_session(request), request.method)
        if decision.action is GuardAction.ALLOW:
            return await call_next(request)

        if decision.action is GuardAction.REDIRECT_LOGIN:
            log_security_event(
                "guard_redirect",
                "Unauthenticated dashboard access redirected to login",
                ip_address=request.client.host if request.client else None,
                extra_data={"path": request.url.path},
            )
        if decision.see_other:
            return redirect(request, decision.location)
        return RedirectResponse(url=decision.location, status_code=307)
