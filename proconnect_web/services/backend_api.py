"""Backend endpoints used by the proxy routes and the server-rendered flows.

Every function returns the ``BackendResponse`` unchanged so callers decide
how to present failures.
"""

from typing import Any, Dict, Optional
from urllib.parse import quote

from proconnect_web.core.session_cookie import bearer_headers, cookie_headers
from proconnect_web.services.backend_client import BackendClient, BackendResponse


def _segment(value: Any) -> str:
    return quote(str(value), safe="")


def _forwarded(ip: Optional[str]) -> Dict[str, str]:
    return {"X-Forwarded-For": ip} if ip else {}


# Auth

async def request_login_otp(client: BackendClient, email: str) -> BackendResponse:
    return await client.post("/api/auth/request-otp", json={"email": email})


async def verify_login_otp(client: BackendClient, email: str, otp: str) -> BackendResponse:
    return await client.post("/api/auth/verify-otp", json={"email": email, "otp": otp})


async def fetch_me(client: BackendClient, token: str) -> BackendResponse:
    return await client.get("/api/auth/me", headers=bearer_headers(token))


async def logout(client: BackendClient, token: str) -> BackendResponse:
    return await client.post("/api/auth/logout", headers=cookie_headers(token))


# Contact reveal

async def request_contact_otp(
    client: BackendClient, professional_id: Any, email: str, forwarded_for: Optional[str] = None
) -> BackendResponse:
    return await client.post(
        f"/api/contact/professionals/{_segment(professional_id)}/request-otp",
        json={"email": email},
        headers=_forwarded(forwarded_for),
    )


async def verify_contact_otp(
    client: BackendClient,
    professional_id: Any,
    email: str,
    otp: str,
    forwarded_for: Optional[str] = None,
) -> BackendResponse:
    return await client.post(
        f"/api/contact/professionals/{_segment(professional_id)}/verify-otp",
        json={"email": email, "otp": otp},
        headers=_forwarded(forwarded_for),
    )


# Professionals

async def get_professional(client: BackendClient, professional_id: Any) -> BackendResponse:
    return await client.get(f"/api/professionals/{_segment(professional_id)}")


async def fetch_my_stats(client: BackendClient, token: str) -> BackendResponse:
    return await client.get("/api/professionals/me/stats", headers=bearer_headers(token))


async def set_availability(client: BackendClient, token: str, is_available: bool) -> BackendResponse:
    return await client.patch(
        "/api/professionals/me/availability",
        json={"isAvailable": is_available},
        headers=bearer_headers(token),
    )


async def update_my_profile(client: BackendClient, token: str, payload: Dict[str, Any]) -> BackendResponse:
    return await client.put("/api/professionals/me", json=payload, headers=bearer_headers(token))


async def fetch_my_profile(client: BackendClient, token: str) -> BackendResponse:
    return await client.get("/api/professionals/me", headers=bearer_headers(token))


# Reviews

def review_path(token: str) -> str:
    return f"/api/reviews/token/{_segment(token)}"


async def validate_review_token(client: BackendClient, token: str) -> BackendResponse:
    return await client.get(review_path(token))


async def submit_review(client: BackendClient, token: str, payload: Any) -> BackendResponse:
    return await client.post(review_path(token), json=payload)
