"""HTTP client for forwarding requests to the ProConnect backend API."""

import logging
from dataclasses import dataclass, field
from http.cookiejar import CookieJar, DefaultCookiePolicy
from typing import Any, Dict, List, Optional

import httpx
from fastapi import Request
from fastapi.responses import JSONResponse

from proconnect_web.core.errors import NON_JSON_MESSAGE, UNREACHABLE_MESSAGE

logger = logging.getLogger(__name__)


@dataclass
class BackendResponse:
    """Status, decoded JSON body and raw Set-Cookie lines of a backend call."""

    status_code: int
    body: Any
    set_cookie: List[str] = field(default_factory=list)
    # Set when the body was not usable JSON or the backend never answered
    empty: bool = False
    malformed: bool = False
    unreachable: bool = False

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    def error_message(self, default: str) -> str:
        """Backend ``error`` (or ``message``) text verbatim, falling back to ``default``."""
        if isinstance(self.body, dict):
            for key in ("error", "message"):
                value = self.body.get(key)
                if isinstance(value, str) and value.strip():
                    return value
        return default

    def to_response(self) -> JSONResponse:
        """Relay status and body unchanged."""
        return JSONResponse(content=self.body, status_code=self.status_code)


def _decode_body(response: httpx.Response) -> BackendResponse:
    set_cookie = response.headers.get_list("set-cookie")
    if not response.content:
        return BackendResponse(status_code=response.status_code, body={}, set_cookie=set_cookie, empty=True)
    try:
        body = response.json()
    except ValueError:
        status_code = response.status_code if response.status_code >= 400 else 502
        logger.warning(
            "Backend returned non-JSON body for %s %s (status %s)",
            response.request.method,
            response.request.url.path,
            response.status_code,
        )
        return BackendResponse(
            status_code=status_code,
            body={"error": NON_JSON_MESSAGE},
            set_cookie=set_cookie,
            malformed=True,
        )
    return BackendResponse(status_code=response.status_code, body=body, set_cookie=set_cookie)


class BackendClient:
    """Thin async wrapper around one shared ``httpx.AsyncClient``.

    Failures never raise: network errors become a 502 ``BackendResponse`` and
    non-JSON bodies become a JSON error body.
    """

    def __init__(self, base_url: str, transport: Optional[httpx.AsyncBaseTransport] = None):
        # The client is shared by every visitor, so it must never remember
        # cookies the backend sets for one of them.
        no_cookies = CookieJar(policy=DefaultCookiePolicy(allowed_domains=[]))
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            transport=transport,
            cookies=no_cookies,
        )

    async def request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        content: Optional[bytes] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> BackendResponse:
        request_headers = {"Accept": "application/json"}
        if json is not None or content is not None:
            request_headers["Content-Type"] = "application/json"
        request_headers.update(headers or {})

        try:
            response = await self._client.request(
                method,
                path,
                json=json,
                content=content,
                headers=request_headers,
            )
        except httpx.HTTPError as exc:
            logger.warning("Backend %s %s failed: %s", method, path, exc.__class__.__name__)
            return BackendResponse(status_code=502, body={"error": UNREACHABLE_MESSAGE}, unreachable=True)

        return _decode_body(response)

    async def get(self, path: str, **kwargs: Any) -> BackendResponse:
        return await self.request("GET", path, **kwargs)

    async def post(self, path: str, **kwargs: Any) -> BackendResponse:
        return await self.request("POST", path, **kwargs)

    async def put(self, path: str, **kwargs: Any) -> BackendResponse:
        return await self.request("PUT", path, **kwargs)

    async def patch(self, path: str, **kwargs: Any) -> BackendResponse:
        return await self.request("PATCH", path, **kwargs)

    async def aclose(self) -> None:
        await self._client.aclose()


def get_backend_client(request: Request) -> BackendClient:
    """Dependency returning the application's shared backend client"""
    return request.app.state.backend_client
