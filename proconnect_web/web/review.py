"""Leave a review through a one-time review link"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Form, Request
from pydantic import ValidationError

from proconnect_web.core.errors import FlowError, validation_error
from proconnect_web.core.schemas.review import (
    MAX_COMMENT_LENGTH,
    MISSING_RATING_MESSAGE,
    RATING_LABELS,
    ReviewSubmission,
    TokenValidation,
)
from proconnect_web.core.templates import is_htmx, render
from proconnect_web.services import review
from proconnect_web.services.backend_client import BackendClient, get_backend_client

logger = logging.getLogger(__name__)

router = APIRouter()

COMMENT_TOO_LONG_MESSAGE = f"Comments can be at most {MAX_COMMENT_LENGTH} characters."


def _render_card(
    request: Request,
    token: str,
    validation: TokenValidation,
    submitted: bool = False,
    error: Optional[FlowError] = None,
    rating: Optional[int] = None,
    comment: str = "",
):
    template = "partials/review_card.html" if is_htmx(request) else "review.html"
    return render(
        request,
        template,
        {
            "token": token,
            "validation": validation,
            "submitted": submitted,
            "error": error,
            "rating": rating,
            "comment": comment,
            "rating_labels": RATING_LABELS,
            "max_comment_length": MAX_COMMENT_LENGTH,
        },
    )


def _parse_rating(raw: str) -> Optional[int]:
    try:
        return int(raw.strip())
    except ValueError:
        return None


@router.get("/review/{token}")
async def review_page(token: str, request: Request, client: BackendClient = Depends(get_backend_client)):
    """Review form, or an explanation when the link cannot be used"""
    validation = await review.check_token(client, token)
    return _render_card(request, token, validation)


@router.post("/review/{token}")
async def review_submit(
    token: str,
    request: Request,
    rating: str = Form(""),
    comment: str = Form(""),
    client: BackendClient = Depends(get_backend_client),
):
    """Validate the rating locally, then submit the review"""
    validation = await review.check_token(client, token)
    if not validation.valid:
        return _render_card(request, token, validation)

    stars = _parse_rating(rating)
    try:
        submission = ReviewSubmission(rating=stars, comment=comment)
    except ValidationError as exc:
        field = str(exc.errors()[0]["loc"][0])
        message = COMMENT_TOO_LONG_MESSAGE if field == "comment" else MISSING_RATING_MESSAGE
        return _render_card(
            request, token, validation, error=validation_error(message, field=field), rating=stars, comment=comment
        )

    error = await review.send_review(client, token, submission)
    if error is not None:
        return _render_card(request, token, validation, error=error, rating=stars, comment=comment)
    return _render_card(request, token, validation, submitted=True)
