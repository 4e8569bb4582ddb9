"""Contact reveal: verify a visitor's email before showing a professional's contact details.

Steps run ``email -> otp -> done`` and are scoped to one professional and one
opening of the contact modal. Revealed details live only on the flow object
that produced them; they are never written to the session.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import ValidationError

from proconnect_web.core.errors import (
    CONTACT_QUOTA_MESSAGE,
    GENERIC_ERROR_MESSAGE,
    ErrorKind,
    FlowError,
    classify_status,
    validation_error,
)
from proconnect_web.core.logging_config import log_security_event
from proconnect_web.core.schemas.auth import (
    EmailSubmission,
    is_complete_otp,
    normalize_email,
    normalize_otp,
)
from proconnect_web.core.schemas.contact import ProfessionalContact
from proconnect_web.services import backend_api
from proconnect_web.services.backend_client import BackendClient, BackendResponse
from proconnect_web.services.flow import InFlightGuard, InvalidTransition

logger = logging.getLogger(__name__)

SEND_FAILED = "Failed to send verification code. Please try again."
INVALID_CODE = "Invalid or expired code. Please try again."
INVALID_EMAIL = "Enter a valid email address."
INCOMPLETE_CODE = "Enter the 6-digit code."


class RevealStep(str, Enum):
    EMAIL = "email"
    OTP = "otp"
    DONE = "done"


@dataclass
class RevealState:
    professional_id: str
    step: RevealStep = RevealStep.EMAIL
    email: str = ""
    code: str = ""
    message: str = ""
    error: Optional[FlowError] = None
    challenge_issued: bool = False
    contact: Optional[ProfessionalContact] = None

    def to_session(self) -> Dict[str, Any]:
        # contact is never serialized
        return {
            "professional_id": self.professional_id,
            "step": self.step.value,
            "email": self.email,
            "message": self.message,
            "error": self.error.to_dict() if self.error else None,
            "challenge_issued": self.challenge_issued,
        }

    @classmethod
    def from_session(cls, professional_id: str, data: Optional[Dict[str, Any]]) -> "RevealState":
        """Restore state for ``professional_id``; anything stale or foreign starts fresh."""
        if not data or str(data.get("professional_id")) != str(professional_id):
            return cls(professional_id=str(professional_id))
        try:
            step = RevealStep(data.get("step", RevealStep.EMAIL.value))
        except ValueError:
            step = RevealStep.EMAIL

        state = cls(
            professional_id=str(professional_id),
            step=step,
            email=str(data.get("email") or ""),
            message=str(data.get("message") or ""),
            error=FlowError.from_dict(data.get("error")),
            challenge_issued=bool(data.get("challenge_issued")),
        )
        if state.step is RevealStep.OTP and not (state.challenge_issued and state.email):
            return cls(professional_id=str(professional_id))
        # A finished reveal cannot be restored: the details were never stored.
        if state.step is RevealStep.DONE:
            return cls(professional_id=str(professional_id))
        return state


def _request_error(response: BackendResponse) -> FlowError:
    if response.status_code == 429:
        return FlowError(kind=ErrorKind.RATE_LIMITED, message=CONTACT_QUOTA_MESSAGE)
    return FlowError(kind=classify_status(response.status_code), message=SEND_FAILED)


def _verify_error(response: BackendResponse) -> FlowError:
    kind = classify_status(response.status_code)
    if kind is ErrorKind.RATE_LIMITED:
        return FlowError(kind=kind, message=CONTACT_QUOTA_MESSAGE, field="otp")
    if kind is ErrorKind.TRANSPORT:
        return FlowError(kind=kind, message=GENERIC_ERROR_MESSAGE, field="otp")
    return FlowError(kind=kind, message=INVALID_CODE, field="otp")


class ContactRevealFlow:
    """Explicit transitions for the contact modal of one professional."""

    def __init__(
        self,
        client: BackendClient,
        professional_id: Any,
        state: Optional[RevealState] = None,
        forwarded_for: Optional[str] = None,
    ):
        self.client = client
        self.professional_id = str(professional_id)
        self.state = state or RevealState(professional_id=self.professional_id)
        self.forwarded_for = forwarded_for
        self.in_flight = InFlightGuard()

    def _require(self, step: RevealStep, operation: str) -> None:
        if self.state.step is not step:
            raise InvalidTransition(operation, self.state.step.value)

    async def _send_code(self, email: str) -> BackendResponse:
        async with self.in_flight.hold("request"):
            return await backend_api.request_contact_otp(
                self.client, self.professional_id, email, forwarded_for=self.forwarded_for
            )

    async def request_code(self, email: str) -> RevealState:
        self._require(RevealStep.EMAIL, "request_code")
        try:
            submission = EmailSubmission(email=email)
        except ValidationError:
            self.state.email = normalize_email(email)
            self.state.error = validation_error(INVALID_EMAIL, field="email")
            return self.state

        response = await self._send_code(submission.email)
        self.state.email = submission.email

        if not response.ok:
            self.state.error = _request_error(response)
            self._log_failure("contact_otp_request_failed", response)
            return self.state

        self.state.step = RevealStep.OTP
        self.state.challenge_issued = True
        self.state.code = ""
        self.state.error = None
        self.state.message = _sent_message(response.body, submission.email)
        log_security_event(
            "contact_otp_requested",
            "Contact reveal code requested",
            email=submission.email,
            ip_address=self.forwarded_for,
            extra_data={"professional_id": self.professional_id},
        )
        return self.state

    async def resend(self) -> RevealState:
        self._require(RevealStep.OTP, "resend")
        self.state.code = ""
        response = await self._send_code(self.state.email)

        if not response.ok:
            self.state.error = _request_error(response)
            self._log_failure("contact_otp_request_failed", response)
            return self.state

        self.state.error = None
        self.state.message = _sent_message(response.body, self.state.email)
        return self.state

    async def verify(self, code: str) -> RevealState:
        self._require(RevealStep.OTP, "verify")
        otp = normalize_otp(code)
        self.state.code = otp
        if not is_complete_otp(otp):
            self.state.error = validation_error(INCOMPLETE_CODE, field="otp")
            return self.state

        async with self.in_flight.hold("verify"):
            response = await backend_api.verify_contact_otp(
                self.client,
                self.professional_id,
                self.state.email,
                otp,
                forwarded_for=self.forwarded_for,
            )

        if not response.ok:
            self.state.error = _verify_error(response)
            self._log_failure("contact_otp_verify_failed", response)
            return self.state

        try:
            contact = ProfessionalContact.model_validate(response.body)
        except ValidationError:
            logger.warning("Contact payload for professional %s did not validate", self.professional_id)
            contact = ProfessionalContact()

        self.state.contact = contact
        self.state.step = RevealStep.DONE
        self.state.code = ""
        self.state.error = None
        log_security_event(
            "contact_revealed",
            "Professional contact details revealed",
            email=self.state.email,
            ip_address=self.forwarded_for,
            extra_data={"professional_id": self.professional_id},
        )
        return self.state

    def change_email(self) -> RevealState:
        self._require(RevealStep.OTP, "change_email")
        self.state.step = RevealStep.EMAIL
        self.state.code = ""
        self.state.error = None
        self.state.message = ""
        self.state.challenge_issued = False
        return self.state

    def _log_failure(self, event_type: str, response: BackendResponse) -> None:
        if response.status_code == 429:
            event_type = "contact_quota_exceeded"
        log_security_event(
            event_type,
            "Contact reveal step rejected by backend",
            email=self.state.email,
            ip_address=self.forwarded_for,
            extra_data={"professional_id": self.professional_id, "status_code": response.status_code},
        )


def _sent_message(body: Any, email: str) -> str:
    if isinstance(body, dict) and isinstance(body.get("message"), str) and body["message"].strip():
        return body["message"]
    return f"We sent a 6-digit code to {email}."
