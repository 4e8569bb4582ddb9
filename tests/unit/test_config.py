"""
Unit tests for configuration module
"""

import os
from unittest.mock import patch

import pytest

from proconnect_web.core.config import Settings

pytestmark = pytest.mark.unit


class TestSettings:
    """Test application settings configuration"""

    def test_default_settings(self):
        with patch.dict(os.environ, {}, clear=True):
            settings = Settings(_env_file=None)

        assert settings.app_name == "ProConnect"
        assert settings.environment == "development"
        assert settings.port == 3000
        assert settings.api_url == "http://localhost:8080"
        assert settings.session_cookie_name == "proconnect_token"
        assert settings.session_cookie_max_age == 2592000
        assert settings.flow_cookie_name == "proconnect-flow"
        assert settings.secret_key is None
        assert settings.is_production is False

    def test_environment_variables_are_case_insensitive(self):
        with patch.dict(os.environ, {"api_url": "https://api.proconnect.example"}, clear=True):
            settings = Settings(_env_file=None)
        assert settings.api_url == "https://api.proconnect.example"

    def test_cors_origins_json_parsing(self):
        test_origins = '["https://example.com", "https://app.example.com"]'

        with patch.dict(os.environ, {"CORS_ORIGINS": test_origins}):
            settings = Settings(_env_file=None)
            assert settings.cors_origins == ["https://example.com", "https://app.example.com"]

    def test_cors_origins_comma_separated_parsing(self):
        with patch.dict(os.environ, {"CORS_ORIGINS": "https://example.com, https://app.example.com"}):
            settings = Settings(_env_file=None)
            assert settings.cors_origins == ["https://example.com", "https://app.example.com"]

    def test_parse_cors_origins_directly(self):
        assert Settings.parse_cors_origins("a,,b ") == ["a", "b"]
        assert Settings.parse_cors_origins('["x"]') == ["x"]

    def test_is_production(self):
        assert Settings(_env_file=None, environment="Production").is_production
        assert not Settings(_env_file=None, environment="test").is_production
