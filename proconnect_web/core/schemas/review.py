"""Review-by-token schemas"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

EMPTY_RESPONSE_MESSAGE = "Empty response from backend."
INVALID_LINK_MESSAGE = "This review link is invalid or has expired."
MISSING_RATING_MESSAGE = "Please select a star rating."
REVIEW_FAILED_MESSAGE = "Failed to submit review."

MIN_RATING = 1
MAX_RATING = 5
MAX_COMMENT_LENGTH = 2000

RATING_LABELS = {1: "Poor", 2: "Fair", 3: "Good", 4: "Very Good", 5: "Excellent"}


class TokenValidation(BaseModel):
    """Answer to "is this review link still usable?"

    Always serialized with every key present so the browser never has to
    guess at a partial shape.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    valid: bool = False
    professional_name: Optional[str] = None
    professional_id: Optional[str] = None
    message: Optional[str] = None

    @field_validator("professional_id", mode="before")
    @classmethod
    def _id_to_str(cls, v: object) -> object:
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v

    @classmethod
    def invalid(cls, message: str) -> "TokenValidation":
        return cls(valid=False, message=message)

    def to_public(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)


class ReviewSubmission(BaseModel):
    """Star rating and optional comment left through a review link"""

    rating: int = Field(..., ge=MIN_RATING, le=MAX_RATING)
    comment: Optional[str] = Field(default=None, max_length=MAX_COMMENT_LENGTH)

    @field_validator("comment", mode="before")
    @classmethod
    def _blank_to_none(cls, v: object) -> object:
        if isinstance(v, str):
            v = v.strip()
            return v or None
        return v

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"rating": self.rating}
        if self.comment:
            payload["comment"] = self.comment
        return payload
