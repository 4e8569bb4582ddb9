"""Professional login via email one-time passcode.

Steps run ``email -> otp -> authenticated``. The state is a plain dataclass
that the web layer stores in the signed flow session between requests; each
operation below is the only way to move it forward.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import ValidationError

from proconnect_web.core.errors import RATE_LIMITED_MESSAGE, FlowError, classify_status, validation_error
from proconnect_web.core.logging_config import log_security_event
from proconnect_web.core.schemas.auth import (
    AuthProfessional,
    EmailSubmission,
    is_complete_otp,
    normalize_email,
    normalize_otp,
)
from proconnect_web.core.security import safe_redirect_target
from proconnect_web.core.session_cookie import extract_session_token
from proconnect_web.services import backend_api
from proconnect_web.services.backend_client import BackendClient, BackendResponse
from proconnect_web.services.flow import InFlightGuard, InvalidTransition

logger = logging.getLogger(__name__)

DEFAULT_REDIRECT = "/dashboard"

REQUEST_FAILED = "Failed to send OTP"
VERIFY_FAILED = "Invalid or expired OTP"
CODE_SENT = "Verification code sent. It expires in 10 minutes."
INVALID_EMAIL = "Enter a valid email address."
INCOMPLETE_CODE = "Enter the 6-digit code from your email."


class LoginStep(str, Enum):
    EMAIL = "email"
    OTP = "otp"
    AUTHENTICATED = "authenticated"


@dataclass
class LoginState:
    step: LoginStep = LoginStep.EMAIL
    email: str = ""
    code: str = ""
    message: str = ""
    error: Optional[FlowError] = None
    redirect_to: str = DEFAULT_REDIRECT
    challenge_issued: bool = False

    def to_session(self) -> Dict[str, Any]:
        return {
            "step": self.step.value,
            "email": self.email,
            "code": self.code,
            "message": self.message,
            "error": self.error.to_dict() if self.error else None,
            "redirect_to": self.redirect_to,
            "challenge_issued": self.challenge_issued,
        }

    @classmethod
    def from_session(cls, data: Optional[Dict[str, Any]]) -> "LoginState":
        """Restore state, falling back to a fresh email step for anything inconsistent."""
        if not data:
            return cls()
        try:
            step = LoginStep(data.get("step", LoginStep.EMAIL.value))
        except ValueError:
            step = LoginStep.EMAIL

        state = cls(
            step=step,
            email=str(data.get("email") or ""),
            code=str(data.get("code") or ""),
            message=str(data.get("message") or ""),
            error=FlowError.from_dict(data.get("error")),
            redirect_to=safe_redirect_target(data.get("redirect_to"), DEFAULT_REDIRECT),
            challenge_issued=bool(data.get("challenge_issued")),
        )

        # The code step exists only after a successful request in this session.
        if state.step is LoginStep.OTP and not (state.challenge_issued and state.email):
            return cls(redirect_to=state.redirect_to)
        if state.step is LoginStep.AUTHENTICATED:
            return cls(redirect_to=state.redirect_to)
        return state


@dataclass(frozen=True)
class LoginResult:
    """Outcome of a successful verification"""

    token: Optional[str]
    professional: Optional[AuthProfessional]
    redirect_to: str


class LoginFlow:
    """Explicit transitions for the login card."""

    def __init__(self, client: BackendClient, state: Optional[LoginState] = None):
        self.client = client
        self.state = state or LoginState()
        self.in_flight = InFlightGuard()

    def _require(self, step: LoginStep, operation: str) -> None:
        if self.state.step is not step:
            raise InvalidTransition(operation, self.state.step.value)

    async def request_otp(self, email: str) -> LoginState:
        """Ask the backend to email a code; advance to the code step on success."""
        self._require(LoginStep.EMAIL, "request_otp")
        try:
            submission = EmailSubmission(email=email)
        except ValidationError:
            self.state.email = normalize_email(email)
            self.state.error = validation_error(INVALID_EMAIL, field="email")
            return self.state

        async with self.in_flight.hold("request"):
            response = await backend_api.request_login_otp(self.client, submission.email)

        self.state.email = submission.email
        if not response.ok:
            self.state.error = FlowError(
                kind=classify_status(response.status_code),
                message=_failure_message(response, REQUEST_FAILED),
                field="email",
            )
            logger.info("Login OTP request rejected with status %s", response.status_code)
            return self.state

        self.state.step = LoginStep.OTP
        self.state.challenge_issued = True
        self.state.code = ""
        self.state.error = None
        self.state.message = _success_message(response.body)
        log_security_event("otp_requested", "Login OTP requested", email=submission.email)
        return self.state

    async def resend(self) -> LoginState:
        """Request a fresh code for the same email without leaving the code step."""
        self._require(LoginStep.OTP, "resend")

        async with self.in_flight.hold("request"):
            response = await backend_api.request_login_otp(self.client, self.state.email)

        if not response.ok:
            self.state.error = FlowError(
                kind=classify_status(response.status_code),
                message=_failure_message(response, REQUEST_FAILED),
            )
            return self.state

        self.state.error = None
        self.state.message = _success_message(response.body)
        log_security_event("otp_resent", "Login OTP resent", email=self.state.email)
        return self.state

    async def verify(self, code: str) -> Optional[LoginResult]:
        """Redeem the code. Returns a LoginResult on success, None otherwise."""
        self._require(LoginStep.OTP, "verify")
        otp = normalize_otp(code)
        self.state.code = otp
        if not is_complete_otp(otp):
            self.state.error = validation_error(INCOMPLETE_CODE, field="otp")
            return None

        async with self.in_flight.hold("verify"):
            response = await backend_api.verify_login_otp(self.client, self.state.email, otp)

        if not response.ok:
            self.state.error = FlowError(
                kind=classify_status(response.status_code),
                message=_failure_message(response, VERIFY_FAILED),
                field="otp",
            )
            log_security_event(
                "login_failed",
                "Login OTP verification failed",
                email=self.state.email,
                extra_data={"status_code": response.status_code},
            )
            return None

        token = extract_session_token(response.set_cookie)
        if token is None:
            logger.warning("Backend verified the login code but issued no session token")

        try:
            professional = AuthProfessional.model_validate(response.body)
        except ValidationError:
            professional = None

        self.state.step = LoginStep.AUTHENTICATED
        self.state.error = None
        log_security_event("login_succeeded", "Professional logged in", email=self.state.email)
        return LoginResult(token=token, professional=professional, redirect_to=self.state.redirect_to)

    def change_email(self) -> LoginState:
        """Go back to the email step, discarding the code and any error."""
        self._require(LoginStep.OTP, "change_email")
        self.state.step = LoginStep.EMAIL
        self.state.code = ""
        self.state.error = None
        self.state.message = ""
        self.state.challenge_issued = False
        return self.state


def _success_message(body: Any) -> str:
    if isinstance(body, dict) and isinstance(body.get("message"), str) and body["message"].strip():
        return body["message"]
    return CODE_SENT


def _failure_message(response: BackendResponse, default: str) -> str:
    # 429 gets its own fallback so it never reads as a wrong code.
    if response.status_code == 429:
        default = RATE_LIMITED_MESSAGE
    return response.error_message(default)
