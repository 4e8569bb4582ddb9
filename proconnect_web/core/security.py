"""
Security utilities for ProConnect Web

This module provides secret key handling for the signed flow session,
safe redirect-target validation and the security headers middleware.
"""

import logging
import os
import secrets
import string
from contextvars import ContextVar
from typing import Optional

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)

# Context variable to store the current request's nonce
_request_nonce: ContextVar[str] = ContextVar("request_nonce", default="")

SECRET_KEY_FILE = "data/.secret_key"


def generate_secure_secret_key(length: int = 64) -> str:
    """
    Generate a cryptographically secure secret key.

    Args:
        length: Length of the secret key (default: 64 characters)

    Returns:
        A secure random string suitable for signing session cookies
    """
    alphabet = string.ascii_letters + string.digits + "-_"
    return "".join(secrets.choice(alphabet) for _ in range(length))


def get_or_create_secret_key(configured: Optional[str] = None) -> str:
    """
    Get the flow-session signing key.

    Resolution order:
    1. The configured SECRET_KEY setting
    2. A previously generated key in data/.secret_key
    3. A newly generated key, persisted to data/.secret_key when possible

    Returns:
        A validated secret key string

    Raises:
        ValueError: If the configured key doesn't meet security requirements
    """
    if configured:
        logger.info("Using SECRET_KEY from configuration")
        validate_secret_key(configured)
        return configured

    if os.path.exists(SECRET_KEY_FILE):
        try:
            with open(SECRET_KEY_FILE, "r") as f:
                secret_key = f.read().strip()
            if secret_key:
                logger.info("Using SECRET_KEY from secret file")
                validate_secret_key(secret_key)
                return secret_key
        except OSError as e:
            logger.warning("Could not read secret key file: %s", e)

    logger.warning("No SECRET_KEY configured, generating new one")
    secret_key = generate_secure_secret_key()

    try:
        os.makedirs(os.path.dirname(SECRET_KEY_FILE), exist_ok=True)
        with open(SECRET_KEY_FILE, "w") as f:
            f.write(secret_key)
        os.chmod(SECRET_KEY_FILE, 0o600)
        logger.info("Generated new SECRET_KEY and saved to secure file")
    except OSError as e:
        logger.error("Could not save secret key to file: %s", e)
        logger.warning("Using generated key in memory only (will regenerate on restart)")

    return secret_key


def validate_secret_key(secret_key: str) -> None:
    """
    Validate that a secret key meets security requirements.

    Raises:
        ValueError: If the secret key doesn't meet requirements
    """
    if not secret_key:
        raise ValueError("SECRET_KEY cannot be empty")

    if len(secret_key) < 32:
        raise ValueError("SECRET_KEY must be at least 32 characters long")

    insecure_defaults = {
        "your-secret-key-here-change-in-production",
        "change-me",
        "secret",
        "password",
        "123456",
        "admin",
    }
    if secret_key.lower() in insecure_defaults:
        raise ValueError("SECRET_KEY appears to be an insecure default value")

    # At least 8 distinct characters
    if len(set(secret_key.lower())) < 8:
        raise ValueError("SECRET_KEY has insufficient entropy (too repetitive)")


def safe_redirect_target(target: Optional[str], default: str = "/dashboard") -> str:
    """
    Return ``target`` if it is a local absolute path, otherwise ``default``.

    Rejects scheme-relative (``//host``) and backslash tricks so a crafted
    ``?redirect=`` cannot send the user off-site after login.
    """
    if not target or not target.startswith("/"):
        return default
    if target.startswith("//") or "\\" in target:
        return default
    return target


def client_ip(request: Request) -> str:
    """Visitor address to forward to the backend as X-Forwarded-For."""
    forwarded = request.headers.get("x-forwarded-for") or request.headers.get("x-real-ip")
    if forwarded:
        return forwarded
    if request.client and request.client.host:
        return request.client.host
    return "127.0.0.1"


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """
    Middleware to add security headers for XSS and other attack prevention.

    Uses nonce-based CSP to prevent 'unsafe-inline' scripts.
    """

    def _generate_nonce(self) -> str:
        """Generate a cryptographically secure nonce for CSP"""
        return secrets.token_urlsafe(32)

    async def dispatch(self, request: Request, call_next):
        nonce = self._generate_nonce()
        _request_nonce.set(nonce)

        response = await call_next(request)

        security_headers = {
            "X-Content-Type-Options": "nosniff",
            "X-Frame-Options": "DENY",
            "Content-Security-Policy": (
                "default-src 'self'; "
                f"script-src 'self' 'nonce-{nonce}' unpkg.com; "
                "style-src 'self' 'unsafe-inline'; "
                "img-src 'self' data: https:; "
                "connect-src 'self'; "
                "form-action 'self'; "
                "frame-ancestors 'none'; "
                "base-uri 'self'"
            ),
            "Referrer-Policy": "strict-origin-when-cross-origin",
            "Permissions-Policy": "camera=(), microphone=(), geolocation=(), payment=()",
        }

        for header_name, header_value in security_headers.items():
            response.headers[header_name] = header_value

        return response


def get_current_nonce() -> str:
    """
    Get the current request's nonce for use in templates.

    Returns:
        The current request's nonce, or empty string if not available
    """
    return _request_nonce.get()
