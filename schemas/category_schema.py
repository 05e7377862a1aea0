# schemas/category_schema.py
from pydantic import Field

from schemas.base_schema import BaseSchema


class CategorySchema(BaseSchema):
    name: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Category name, matched exactly by the listing filter"
    )
    position: int = Field(default=0, ge=0)
