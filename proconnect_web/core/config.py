"""
Application configuration using Pydantic Settings.

Configuration values can be set via environment variables or .env file.
"""

import json
from typing import Annotated, Any, List, Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

THIRTY_DAYS = 60 * 60 * 24 * 30


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application settings
    app_name: str = "ProConnect"
    environment: str = "development"
    debug: bool = False
    dev_mode: bool = False
    host: str = "0.0.0.0"
    port: int = 3000

    # Backend API that owns professionals, OTP challenges and sessions
    api_url: str = "http://localhost:8080"

    # Signing key for the flow session cookie. When unset a key is
    # generated and persisted by core.security.get_or_create_secret_key
    secret_key: Optional[str] = None

    # Session token cookie bridged from the backend
    session_cookie_name: str = "proconnect_token"
    session_cookie_max_age: int = THIRTY_DAYS

    # Signed cookie holding login/contact flow state
    flow_cookie_name: str = "proconnect-flow"
    flow_session_max_age: int = 1800  # 30 minutes

    cors_origins: Annotated[List[str], NoDecode] = [
        "http://localhost:3000",
        "http://localhost:8080",
    ]

    # Rate limiting configuration
    rate_limit_auth_endpoints: str = "10/minute"
    rate_limit_contact_endpoints: str = "10/minute"
    rate_limit_read_endpoints: str = "100/minute"
    rate_limit_review_endpoints: str = "10/minute"

    # Optional Redis URL for distributed rate limiting
    # When set, rate limits will be shared across multiple instances
    redis_url: Optional[str] = None

    # Category list served by /api/skills/categories
    categories_cache_ttl: int = 300

    security_headers_enabled: bool = True

    # Optional path for a second, file-based log handler
    log_file: Optional[str] = None

    @field_validator("cors_origins", mode="before")
    @classmethod
    def _split_cors_origins(cls, value: Any) -> Any:
        if isinstance(value, str):
            return cls.parse_cors_origins(value)
        return value

    @staticmethod
    def parse_cors_origins(value: str) -> List[str]:
        """Parse CORS origins from a JSON list or a comma-separated string."""
        value = value.strip()
        if value.startswith("["):
            try:
                parsed = json.loads(value)
                return [str(origin).strip() for origin in parsed if str(origin).strip()]
            except json.JSONDecodeError:
                pass
        return [origin.strip() for origin in value.split(",") if origin.strip()]

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"


# Global settings instance
settings = Settings()
