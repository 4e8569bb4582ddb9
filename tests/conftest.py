"""
Global test configuration and fixtures for ProConnect Web

This module provides shared fixtures used across all test modules: a fake
backend API served through ``httpx.MockTransport``, a ``BackendClient`` wired
to it, and a FastAPI test client with the backend dependency overridden.
"""

import os

# Settings are read at import time, so the environment must be in place first
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-flow-sessions-0123456789")
os.environ.setdefault("API_URL", "http://backend.test")

from typing import Any, Callable, Dict, List, Optional, Tuple, Union

import httpx
import pytest
from fastapi.testclient import TestClient

from proconnect_web.core.config import settings
from proconnect_web.main import app
from proconnect_web.services.backend_client import BackendClient, get_backend_client
from tests.utils.factories import AuthProfessionalFactory

Handler = Callable[[httpx.Request], httpx.Response]


# ============================================================================
# Fake backend API
# ============================================================================

class FakeBackend:
    """Canned backend responses keyed by (method, path), plus a call log."""

    def __init__(self):
        self.routes: Dict[Tuple[str, str], Union[Handler, Exception]] = {}
        self.calls: List[httpx.Request] = []

    def on(
        self,
        method: str,
        path: str,
        status: int = 200,
        json: Any = None,
        text: Optional[str] = None,
        set_cookie: Optional[List[str]] = None,
    ) -> None:
        headers = [("set-cookie", value) for value in (set_cookie or [])]

        def _respond(request: httpx.Request) -> httpx.Response:
            if text is not None:
                return httpx.Response(status, text=text, headers=headers)
            if json is None:
                return httpx.Response(status, headers=headers)
            return httpx.Response(status, json=json, headers=headers)

        self.routes[(method.upper(), path)] = _respond

    def fail(self, method: str, path: str, exc: Exception) -> None:
        self.routes[(method.upper(), path)] = exc

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        route = self.routes.get((request.method, request.url.path))
        if route is None:
            return httpx.Response(404, json={"error": "Not found"})
        if isinstance(route, Exception):
            raise route
        return route(request)

    def calls_to(self, path: str) -> List[httpx.Request]:
        return [call for call in self.calls if call.url.path == path]


@pytest.fixture(scope="function")
def backend():
    """Fresh fake backend for each test"""
    return FakeBackend()


@pytest.fixture(scope="function")
def backend_client(backend):
    """BackendClient whose transport is the fake backend"""
    return BackendClient(settings.api_url, transport=httpx.MockTransport(backend.handler))


# ============================================================================
# Application Client Fixtures
# ============================================================================

@pytest.fixture(scope="function")
def client(backend_client):
    """Create FastAPI test client talking to the fake backend"""
    app.dependency_overrides[get_backend_client] = lambda: backend_client

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def reset_limiter():
    """Clear rate limit counters so tests do not affect each other"""
    app.state.limiter.reset()
    app.state.categories_cache.invalidate()
    yield
    app.state.limiter.reset()


# ============================================================================
# Data Fixtures
# ============================================================================

@pytest.fixture(scope="function")
def professional_payload():
    """Backend /api/auth/me payload for a logged-in professional"""
    return AuthProfessionalFactory.create_payload()


@pytest.fixture(scope="function")
def logged_in(client):
    """Test client carrying a session cookie"""
    client.cookies.set(settings.session_cookie_name, "tok-abc123")
    return client


# ============================================================================
# Test Markers and Configuration
# ============================================================================

def pytest_configure(config):
    """Configure pytest with custom markers and settings"""
    config.addinivalue_line("markers", "unit: mark test as a unit test")
    config.addinivalue_line("markers", "integration: mark test as an integration test")
    config.addinivalue_line("markers", "critical: mark test as critical path functionality")
    config.addinivalue_line("markers", "security: mark test as security-related")
    config.addinivalue_line("markers", "api: mark test as exercising the JSON proxy routes")
    config.addinivalue_line("markers", "web: mark test as exercising the HTML routes")
    config.addinivalue_line("markers", "auth: mark test as authentication-related")


def pytest_collection_modifyitems(config, items):
    """Modify test collection to add markers based on file location"""
    for item in items:
        if "security" in str(item.fspath):
            item.add_marker(pytest.mark.security)
        if "critical" in str(item.fspath):
            item.add_marker(pytest.mark.critical)
