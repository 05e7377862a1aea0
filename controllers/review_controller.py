from typing import Optional

from fastapi import APIRouter, Body, Depends, status
from pydantic import Field

from controllers.dependencies import get_current_user, get_product_service, get_review_service
from schemas.base_schema import BaseSchema
from schemas.product_schema import ProductSchema
from schemas.review_schema import ReviewSchema
from services.product_service import ProductService, normalize_product_id
from services.review_service import ReviewService


class ReviewCreateRequest(BaseSchema):
    rating: int
    comment: str
    reviewer_name: Optional[str] = None


class ReviewUpdateRequest(BaseSchema):
    review_id: str
    rating: int
    comment: str


class ReviewDeleteRequest(BaseSchema):
    review_id: str


class ReviewMutationResponse(BaseSchema):
    message: str
    review: Optional[ReviewSchema] = Field(default=None)


class ReviewController:
    """Reviews embedded in a product: read, and owner-only create/edit/delete."""

    def __init__(self):
        self.router = APIRouter(tags=["reviews"])
        self.router.add_api_route(
            "/{product_id}/reviews", self.list_reviews, methods=["GET"], response_model=ProductSchema
        )
        self.router.add_api_route(
            "/{product_id}/reviews", self.add_review, methods=["POST"],
            response_model=ReviewMutationResponse, response_model_exclude_none=True,
            status_code=status.HTTP_201_CREATED,
        )
        self.router.add_api_route(
            "/{product_id}/reviews", self.edit_review, methods=["PUT"],
            response_model=ReviewMutationResponse, response_model_exclude_none=True,
        )
        self.router.add_api_route(
            "/{product_id}/reviews", self.delete_review, methods=["DELETE"],
            response_model=ReviewMutationResponse, response_model_exclude_none=True,
        )

    @staticmethod
    def list_reviews(product_id: str, service: ReviewService = Depends(get_review_service)):
        return service.list_reviews(normalize_product_id(product_id))

    @staticmethod
    def add_review(
        product_id: str,
        payload: ReviewCreateRequest = Body(...),
        user_id: str = Depends(get_current_user),
        service: ReviewService = Depends(get_review_service),
        products: ProductService = Depends(get_product_service),
    ):
        padded_id = normalize_product_id(product_id)
        review = service.add_review(padded_id, user_id, payload.rating, payload.comment, payload.reviewer_name)
        products.invalidate(padded_id)
        return ReviewMutationResponse(message="Review added successfully", review=review)

    @staticmethod
    def edit_review(
        product_id: str,
        payload: ReviewUpdateRequest = Body(...),
        user_id: str = Depends(get_current_user),
        service: ReviewService = Depends(get_review_service),
        products: ProductService = Depends(get_product_service),
    ):
        padded_id = normalize_product_id(product_id)
        review = service.edit_review(padded_id, user_id, payload.review_id, payload.rating, payload.comment)
        products.invalidate(padded_id)
        return ReviewMutationResponse(message="Review updated successfully", review=review)

    @staticmethod
    def delete_review(
        product_id: str,
        payload: ReviewDeleteRequest = Body(...),
        user_id: str = Depends(get_current_user),
        service: ReviewService = Depends(get_review_service),
        products: ProductService = Depends(get_product_service),
    ):
        padded_id = normalize_product_id(product_id)
        service.delete_review(padded_id, user_id, payload.review_id)
        products.invalidate(padded_id)
        return ReviewMutationResponse(message="Review deleted successfully")
