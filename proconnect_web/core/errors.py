"""Error taxonomy shared by the login and contact-reveal flows.

Presentation is decided from the status code, never by parsing message text.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

GENERIC_ERROR_MESSAGE = "Something went wrong. Please try again."
UNREACHABLE_MESSAGE = "Could not reach the server. Please try again."
NON_JSON_MESSAGE = "Backend returned a non-JSON response."
INVALID_BODY_MESSAGE = "Request body must be valid JSON."
RATE_LIMITED_MESSAGE = "Too many attempts. Please wait before trying again."

CONTACT_QUOTA_MESSAGE = (
    "You've reached the contact view limit for this professional. "
    "Please try again in 24 hours."
)


class ErrorKind(str, Enum):
    VALIDATION = "validation"
    RATE_LIMITED = "rate_limited"
    VERIFICATION = "verification"
    TRANSPORT = "transport"
    UNAUTHENTICATED = "unauthenticated"


def classify_status(status_code: int) -> ErrorKind:
    """Map a failed backend status to an error kind.

    401 is only meaningful as "logged out" for the identity fetch; callers
    handling ``/me`` check for it before classifying.
    """
    if status_code == 429:
        return ErrorKind.RATE_LIMITED
    if status_code >= 500:
        return ErrorKind.TRANSPORT
    return ErrorKind.VERIFICATION


@dataclass(frozen=True)
class FlowError:
    """An error ready to show in a flow card."""

    kind: ErrorKind
    message: str
    field: Optional[str] = None

    @property
    def is_quota(self) -> bool:
        return self.kind is ErrorKind.RATE_LIMITED

    @property
    def retry_later(self) -> bool:
        return self.kind in (ErrorKind.RATE_LIMITED, ErrorKind.TRANSPORT)

    def to_dict(self) -> dict:
        return {"kind": self.kind.value, "message": self.message, "field": self.field}

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> Optional["FlowError"]:
        if not data:
            return None
        try:
            return cls(kind=ErrorKind(data["kind"]), message=str(data["message"]), field=data.get("field"))
        except (KeyError, ValueError):
            return None


def validation_error(message: str, field: Optional[str] = None) -> FlowError:
    return FlowError(kind=ErrorKind.VALIDATION, message=message, field=field)
