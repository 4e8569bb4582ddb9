"""
Critical path tests

End-to-end journeys through the application that must keep working after
any change: a professional logging in to the dashboard, and a visitor
revealing a professional's contact details.
"""

import pytest

from tests.utils.factories import (
    AuthProfessionalFactory,
    ContactFactory,
    ProfessionalFactory,
    SetCookieFactory,
)

pytestmark = pytest.mark.critical

HTMX = {"HX-Request": "true"}


class TestCriticalPaths:
    """Test critical application paths to ensure basic functionality"""

    def test_application_health(self, client):
        response = client.get("/api/health")
        assert response.status_code == 200

        data = response.json()
        assert data["status"] == "healthy"
        assert data["services"]["backend_api"]["url"] == "http://backend.test"

    def test_professional_login_to_dashboard(self, client, backend, professional_payload):
        backend.on("POST", "/api/auth/request-otp", json={"message": "OTP sent to your email"})
        backend.on(
            "POST",
            "/api/auth/verify-otp",
            json=AuthProfessionalFactory.create_payload(),
            set_cookie=SetCookieFactory.session("tok-abc123"),
        )
        backend.on("GET", "/api/auth/me", json=professional_payload)
        backend.on("GET", "/api/professionals/me/stats", json={"profileViews": 3})

        guarded = client.get("/dashboard", follow_redirects=False)
        assert guarded.headers["location"] == "/login?redirect=%2Fdashboard"

        client.get(guarded.headers["location"])
        client.post("/login/request-otp", data={"email": "dana@example.com"}, headers=HTMX)
        verified = client.post("/login/verify", data={"otp": "482913"}, headers=HTMX)
        assert verified.headers["HX-Redirect"] == "/dashboard"

        dashboard = client.get("/dashboard")
        assert dashboard.status_code == 200
        assert "Welcome, Dana Plumber" in dashboard.text
        assert backend.calls_to("/api/auth/me")[0].headers["authorization"] == "Bearer tok-abc123"

        client.post("/logout", follow_redirects=False)
        assert client.get("/dashboard", follow_redirects=False).status_code == 307

    def test_visitor_reveals_contact(self, client, backend):
        backend.on("GET", "/api/professionals/42", json=ProfessionalFactory.create_payload())
        backend.on("POST", "/api/contact/professionals/42/request-otp", json={"message": "Code sent"})
        backend.on("POST", "/api/contact/professionals/42/verify-otp", json=ContactFactory.create_full())

        profile = client.get("/professionals/42")
        assert profile.status_code == 200

        modal = client.get("/professionals/42/contact", headers=HTMX)
        assert 'name="email"' in modal.text

        client.post("/professionals/42/contact/request-otp", data={"email": "visitor@example.com"}, headers=HTMX)
        done = client.post("/professionals/42/contact/verify", data={"otp": "482913"}, headers=HTMX)

        assert "mailto:dana@example.com" in done.text
        assert "tel:" in done.text
