"""Auth Schemas"""

import re
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel

OTP_LENGTH = 6

_NON_DIGITS = re.compile(r"\D")


def normalize_email(value: str) -> str:
    return (value or "").strip().lower()


def normalize_otp(value: Optional[str]) -> str:
    """Strip every non-digit character and cap the result at six digits."""
    return _NON_DIGITS.sub("", value or "")[:OTP_LENGTH]


def is_complete_otp(value: str) -> bool:
    return len(value) == OTP_LENGTH and value.isdigit()


class EmailSubmission(BaseModel):
    """Email typed into step one of either OTP flow"""

    email: EmailStr = Field(..., description="Address that will receive the one-time code")

    @field_validator("email", mode="before")
    @classmethod
    def _normalize(cls, v: object) -> object:
        if isinstance(v, str):
            return normalize_email(v)
        return v


class AuthProfessional(BaseModel):
    """Minimal identity of the logged-in professional as returned by /api/auth/me"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    id: int
    display_name: str
    email: str
    slug: str
    is_available: bool = True
    is_verified: bool = False
    avatar_url: Optional[str] = None
    headline: Optional[str] = None
