"""Session token cookie handling.

The backend issues the session token as a ``Set-Cookie`` on its own domain.
Because the frontend is served from a different domain, the token is read
out of the backend's raw response headers and re-set here as a same-domain
``httpOnly`` cookie. Every write to the cookie goes through this module.
"""

import re
from typing import Dict, Iterable, Optional, Union

from fastapi import Request, Response

from proconnect_web.core.config import settings


def _token_pattern(cookie_name: str) -> "re.Pattern[str]":
    # Name must start the header or follow a separator so that
    # "xproconnect_token=" does not match "proconnect_token=".
    return re.compile(rf"(?:^|[\s;,]){re.escape(cookie_name)}=([^;,\s]+)")


def extract_session_token(
    set_cookie: Union[None, str, Iterable[str]],
    cookie_name: Optional[str] = None,
) -> Optional[str]:
    """Pull the session token value out of backend ``Set-Cookie`` header(s).

    Accepts a single header value, a list of values (one per ``Set-Cookie``
    line) or None. Returns None when no non-empty token is present; a missing
    or malformed header never raises.
    """
    if not set_cookie:
        return None

    cookie_name = cookie_name or settings.session_cookie_name
    headers = [set_cookie] if isinstance(set_cookie, str) else list(set_cookie)
    pattern = _token_pattern(cookie_name)

    for header in headers:
        if not isinstance(header, str):
            continue
        match = pattern.search(header)
        if match:
            return match.group(1)
    return None


def get_session_token(request: Request) -> Optional[str]:
    """Return the session token from the request cookie, or None if absent/empty."""
    token = request.cookies.get(settings.session_cookie_name)
    return token or None


def has_session(request: Request) -> bool:
    return get_session_token(request) is not None


def set_session_cookie(response: Response, token: str) -> None:
    """Set the bridged session token on the frontend's own domain."""
    response.set_cookie(
        key=settings.session_cookie_name,
        value=token,
        max_age=settings.session_cookie_max_age,
        path="/",
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
    )


def clear_session_cookie(response: Response) -> None:
    """Clear the session token by re-setting it empty with max-age 0."""
    response.set_cookie(
        key=settings.session_cookie_name,
        value="",
        max_age=0,
        path="/",
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
    )


def bearer_headers(token: Optional[str]) -> Dict[str, str]:
    """Authorization header rebuilt from the session cookie."""
    if not token:
        return {}
    return {"Authorization": f"Bearer {token}"}


def cookie_headers(token: Optional[str]) -> Dict[str, str]:
    """Cookie header carrying the session token back to the backend."""
    if not token:
        return {}
    return {"Cookie": f"{settings.session_cookie_name}={token}"}
