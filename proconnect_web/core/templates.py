"""Shared template configuration for web routes"""

from pathlib import Path
from typing import Any, Dict, Optional

from fastapi import Request
from fastapi.templating import Jinja2Templates
from starlette.responses import RedirectResponse, Response

from proconnect_web.core.config import settings
from proconnect_web.core.security import get_current_nonce
from proconnect_web.services.identity import IdentityShadow

PACKAGE_DIR = Path(__file__).parent.parent

templates = Jinja2Templates(directory=str(PACKAGE_DIR / "templates"))

templates.env.globals["csp_nonce"] = get_current_nonce
templates.env.globals["app_name"] = settings.app_name


def is_htmx(request: Request) -> bool:
    """True when the request was issued by htmx and expects a fragment."""
    return request.headers.get("HX-Request") == "true"


def render(
    request: Request,
    name: str,
    context: Optional[Dict[str, Any]] = None,
    status_code: int = 200,
    headers: Optional[Dict[str, str]] = None,
) -> Response:
    context = dict(context or {})
    if "session" in request.scope:
        context.setdefault("identity", IdentityShadow(request.session).load())
    return templates.TemplateResponse(
        request,
        name,
        context,
        status_code=status_code,
        headers=headers,
    )


def redirect(request: Request, url: str) -> Response:
    """Full-page navigation to ``url`` for both htmx and plain form posts."""
    if is_htmx(request):
        return Response(status_code=200, headers={"HX-Redirect": url})
    return RedirectResponse(url=url, status_code=303)


__all__ = ["templates", "is_htmx", "render", "redirect"]
