"""
Unit tests for the dashboard route guard decision function
"""

import pytest

from proconnect_web.web.guard import GuardAction, evaluate_route, is_protected, login_url

pytestmark = pytest.mark.unit


class TestEvaluateRoute:
    def test_dashboard_without_cookie_redirects_to_login(self):
        decision = evaluate_route("/dashboard", has_session_cookie=False)
        assert decision.action is GuardAction.REDIRECT_LOGIN
        assert decision.location == "/login?redirect=%2Fdashboard"

    def test_nested_dashboard_path_is_preserved(self):
        decision = evaluate_route("/dashboard/settings", has_session_cookie=False)
        assert decision.location == "/login?redirect=%2Fdashboard%2Fsettings"

    def test_dashboard_with_cookie_is_allowed(self):
        assert evaluate_route("/dashboard", has_session_cookie=True).action is GuardAction.ALLOW

    def test_login_with_cookie_redirects_to_dashboard(self):
        decision = evaluate_route("/login", has_session_cookie=True)
        assert decision.action is GuardAction.REDIRECT_DASHBOARD
        assert decision.location == "/dashboard"

    def test_login_without_cookie_is_allowed(self):
        assert evaluate_route("/login", has_session_cookie=False).action is GuardAction.ALLOW

    @pytest.mark.parametrize("path", ["/", "/professionals/1", "/login/verify", "/dashboards", "/api/auth/me"])
    def test_other_paths_pass_through(self, path):
        assert evaluate_route(path, has_session_cookie=False).action is GuardAction.ALLOW
        assert evaluate_route(path, has_session_cookie=True).action is GuardAction.ALLOW


class TestHelpers:
    def test_is_protected(self):
        assert is_protected("/dashboard")
        assert is_protected("/dashboard/")
        assert not is_protected("/dashboard-old")

    def test_login_url_encodes_path(self):
        assert login_url("/dashboard/a b") == "/login?redirect=%2Fdashboard%2Fa+b"


class TestNonNavigationMethods:
    @pytest.mark.parametrize("method", ["POST", "PUT", "PATCH", "DELETE"])
    def test_form_post_is_sent_to_dashboard_login(self, method):
        decision = evaluate_route("/dashboard/availability", has_session_cookie=False, method=method)

        assert decision.action is GuardAction.REDIRECT_LOGIN
        assert decision.location == "/login?redirect=%2Fdashboard"
        assert decision.see_other is True

    def test_head_keeps_original_path(self):
        decision = evaluate_route("/dashboard/settings", has_session_cookie=False, method="HEAD")

        assert decision.location == "/login?redirect=%2Fdashboard%2Fsettings"
        assert decision.see_other is False

    def test_post_with_cookie_is_allowed(self):
        assert evaluate_route("/dashboard/profile", has_session_cookie=True, method="POST").action is GuardAction.ALLOW
