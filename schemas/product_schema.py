# schemas/product_schema.py
from typing import List

from pydantic import Field, model_validator

from schemas.base_schema import BaseSchema
from schemas.review_schema import ReviewSchema

PRODUCT_ID_WIDTH = 3


def pad_product_id(product_id) -> str:
    """Store key for a product id: digits left-padded with zeros to 3 places."""
    return str(product_id).strip().zfill(PRODUCT_ID_WIDTH)


class ProductSchema(BaseSchema):
    id: str = Field(..., min_length=1)
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(default="")
    category: str = Field(default="")
    price: float = Field(..., ge=0)
    stock: int = Field(default=0, ge=0)
    tags: List[str] = Field(default_factory=list)
    images: List[str] = Field(default_factory=list)

    reviews: List[ReviewSchema] = Field(default_factory=list)
    average_rating: float = Field(default=0, ge=0, le=5)
    total_reviews: int = Field(default=0, ge=0)

    @model_validator(mode="after")
    def review_ids_unique(self):
        ids = [review.id for review in self.reviews]
        if len(ids) != len(set(ids)):
            raise ValueError("review ids must be unique within a product")
        return self


class ProductListSchema(BaseSchema):
    products: List[ProductSchema]
    page: int
    page_size: int
    has_more: bool
