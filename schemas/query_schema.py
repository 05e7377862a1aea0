"""Typed, immutable listing request built from untyped query parameters."""
from typing import Literal, Optional

from pydantic import ConfigDict, Field, ValidationError, field_validator

from schemas.base_schema import BaseSchema, describe_validation_error
from utils.exceptions import InvalidInputError

SortField = Literal["id", "price"]
SortOrder = Literal["asc", "desc"]


class ListingQuery(BaseSchema):
    model_config = ConfigDict(frozen=True)

    page: int = Field(default=1, ge=1)
    limit: int = Field(default=20, gt=0)
    sort_by: Optional[SortField] = None
    order: SortOrder = "asc"
    category: Optional[str] = None
    search: Optional[str] = None

    @field_validator("category")
    @classmethod
    def blank_category_is_absent(cls, value: Optional[str]) -> Optional[str]:
        # exact-match filter: never trimmed
        return value if value and value.strip() else None

    @field_validator("search")
    @classmethod
    def blank_search_is_absent(cls, value: Optional[str]) -> Optional[str]:
        return value.strip() if value and value.strip() else None

    @property
    def effective_sort(self) -> Optional[str]:
        """Sort to apply after search; None keeps the matcher's ranking."""
        if self.sort_by is None and self.search:
            return None
        return self.sort_by or "id"


def parse_listing_query(raw: dict, max_limit: Optional[int] = None) -> ListingQuery:
    """
    Validate and coerce raw listing parameters.

    Missing values take their defaults; ``limit`` above ``max_limit`` is
    clamped rather than rejected. Anything malformed raises InvalidInputError.
    """
    params = {k: v for k, v in raw.items() if v is not None and v != ""}
    try:
        query = ListingQuery.model_validate(params)
    except ValidationError as e:
        raise InvalidInputError("Invalid listing parameters", details=describe_validation_error(e)) from e

    if max_limit is not None and query.limit > max_limit:
        query = query.model_copy(update={"limit": max_limit})
    return query
