"""Review-by-token checks shared by the JSON proxy and the review page."""

import logging
from typing import Optional

from pydantic import ValidationError

from proconnect_web.core.errors import (
    GENERIC_ERROR_MESSAGE,
    NON_JSON_MESSAGE,
    RATE_LIMITED_MESSAGE,
    UNREACHABLE_MESSAGE,
    FlowError,
    classify_status,
)
from proconnect_web.core.schemas.review import (
    EMPTY_RESPONSE_MESSAGE,
    INVALID_LINK_MESSAGE,
    REVIEW_FAILED_MESSAGE,
    ReviewSubmission,
    TokenValidation,
)
from proconnect_web.services import backend_api
from proconnect_web.services.backend_client import BackendClient, BackendResponse

logger = logging.getLogger(__name__)


def interpret_validation(backend: BackendResponse) -> TokenValidation:
    """Turn any backend answer into a complete ``TokenValidation``.

    Only a 2xx answer that says ``valid: true`` yields a usable link.
    """
    if backend.unreachable:
        return TokenValidation.invalid(UNREACHABLE_MESSAGE)
    if backend.empty:
        return TokenValidation.invalid(EMPTY_RESPONSE_MESSAGE)
    if backend.malformed:
        return TokenValidation.invalid(NON_JSON_MESSAGE)
    if not isinstance(backend.body, dict):
        return TokenValidation.invalid(INVALID_LINK_MESSAGE)

    try:
        validation = TokenValidation.model_validate(backend.body)
    except ValidationError:
        return TokenValidation.invalid(backend.error_message(INVALID_LINK_MESSAGE))

    if not backend.ok or not validation.valid:
        return TokenValidation.invalid(validation.message or backend.error_message(INVALID_LINK_MESSAGE))
    return validation


async def check_token(client: BackendClient, token: str) -> TokenValidation:
    backend = await backend_api.validate_review_token(client, token)
    validation = interpret_validation(backend)
    if not validation.valid:
        logger.info("Review link rejected (status %s)", backend.status_code)
    return validation


async def send_review(client: BackendClient, token: str, submission: ReviewSubmission) -> Optional[FlowError]:
    """Submit the review; returns the error to show, or None on success."""
    backend = await backend_api.submit_review(client, token, submission.to_payload())
    if backend.ok:
        logger.info("Review submitted (rating %s)", submission.rating)
        return None

    logger.warning("Review submission failed (status %s)", backend.status_code)
    if backend.status_code == 429:
        message = backend.error_message(RATE_LIMITED_MESSAGE)
    elif backend.unreachable:
        message = UNREACHABLE_MESSAGE
    elif backend.status_code >= 500:
        message = GENERIC_ERROR_MESSAGE
    else:
        message = backend.error_message(REVIEW_FAILED_MESSAGE)
    return FlowError(kind=classify_status(backend.status_code), message=message)
