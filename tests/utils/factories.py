"""
Test data factories for consistent test data generation

These factories build backend payloads and headers in the shapes the
ProConnect backend API returns them.
"""

from typing import Any, Dict, List


class AuthProfessionalFactory:
    """Factory for /api/auth/me and /api/auth/verify-otp payloads"""

    @staticmethod
    def create_payload(**overrides: Any) -> Dict[str, Any]:
        payload = {
            "id": 42,
            "displayName": "Dana Plumber",
            "email": "dana@example.com",
            "slug": "dana-plumber",
            "isAvailable": True,
            "isVerified": True,
            "avatarUrl": None,
            "headline": "Emergency plumbing, 24/7",
        }
        payload.update(overrides)
        return payload


class ProfessionalFactory:
    """Factory for public profile payloads"""

    @staticmethod
    def create_payload(**overrides: Any) -> Dict[str, Any]:
        payload = {
            "id": "42",
            "displayName": "Dana Plumber",
            "headline": "Emergency plumbing, 24/7",
            "bio": "Fifteen years fixing leaks.",
            "location": {"city": "Austin", "state": "TX", "country": "US", "remote": False},
            "isVerified": True,
            "isAvailable": True,
            "services": [{"name": "Leak repair"}],
        }
        payload.update(overrides)
        return payload


class ContactFactory:
    """Factory for contact reveal payloads"""

    @staticmethod
    def create_full() -> Dict[str, Any]:
        return {"email": "dana@example.com", "phone": "+1 (555) 010-2030", "whatsapp": "+1 555 010 2030"}

    @staticmethod
    def create_empty() -> Dict[str, Any]:
        return {"email": None, "phone": "", "whatsapp": None}


class SetCookieFactory:
    """Factory for backend Set-Cookie header lines"""

    @staticmethod
    def session(token: str = "tok-abc123") -> List[str]:
        return [f"proconnect_token={token}; Path=/; HttpOnly; SameSite=Lax; Max-Age=2592000"]

    @staticmethod
    def with_other_cookies(token: str = "tok-abc123") -> List[str]:
        return [
            "tracking=xyz; Path=/",
            f"proconnect_token={token}; Path=/; HttpOnly",
            "xproconnect_token=decoy; Path=/",
        ]


class ReviewTokenFactory:
    """Factory for /api/reviews/token/{token} validation payloads"""

    @staticmethod
    def valid(**overrides: Any) -> Dict[str, Any]:
        payload = {"valid": True, "professionalName": "Dana Plumber", "professionalId": 42, "message": None}
        payload.update(overrides)
        return payload

    @staticmethod
    def expired() -> Dict[str, Any]:
        return {"valid": False, "message": "This review link has expired."}


class OwnProfileFactory:
    """Factory for GET /api/professionals/me payloads"""

    @staticmethod
    def create_payload(**overrides: Any) -> Dict[str, Any]:
        payload = {
            "id": 42,
            "firstName": "Dana",
            "lastName": "Plumber",
            "displayName": "Dana Plumber",
            "headline": "Emergency plumbing, 24/7",
            "bio": "Fifteen years fixing leaks.",
            "email": "dana@example.com",
            "phone": "+91 98765 43210",
            "whatsapp": None,
            "avatarUrl": None,
            "location": {"city": "Pune", "state": "MH", "country": "India", "remote": True},
            "hourlyRateMin": "500.00",
            "hourlyRateMax": 1500,
            "currency": "INR",
        }
        payload.update(overrides)
        return payload
