"""Product review schemas with validation"""
from datetime import datetime
from typing import Optional

from pydantic import ConfigDict, Field, field_validator

from schemas.base_schema import BaseSchema

ANONYMOUS_REVIEWER = "Anonymous"


class ReviewSchema(BaseSchema):
    """A review as embedded in its product document."""

    id: str = Field(..., min_length=1)
    rating: int = Field(..., ge=1, le=5, description="Rating from 1 to 5 stars")
    comment: str = Field(..., min_length=1, max_length=1000)
    reviewer_identity: str = Field(..., min_length=1)
    reviewer_name: str = Field(default=ANONYMOUS_REVIEWER)
    date: datetime


class ReviewCreateSchema(BaseSchema):
    """Validated payload for adding a review."""

    model_config = ConfigDict(frozen=True)

    rating: int = Field(..., ge=1, le=5, description="Rating from 1 to 5 stars (required)")
    comment: str = Field(..., max_length=1000, description="Review comment (required)")
    reviewer_name: Optional[str] = Field(default=None, max_length=100, validate_default=True)

    @field_validator("comment")
    @classmethod
    def comment_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("comment must not be empty")
        return value

    @field_validator("reviewer_name")
    @classmethod
    def default_anonymous(cls, value: Optional[str]) -> str:
        if value is None or not value.strip():
            return ANONYMOUS_REVIEWER
        return value.strip()


class ReviewUpdateSchema(BaseSchema):
    """Validated payload for editing a review."""

    model_config = ConfigDict(frozen=True)

    review_id: str = Field(..., min_length=1)
    rating: int = Field(..., ge=1, le=5)
    comment: str = Field(..., max_length=1000)

    @field_validator("comment")
    @classmethod
    def comment_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("comment must not be empty")
        return value


class ReviewDeleteSchema(BaseSchema):
    model_config = ConfigDict(frozen=True)

    review_id: str = Field(..., min_length=1)
