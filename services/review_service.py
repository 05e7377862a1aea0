"""
Review aggregation service.

Every mutation of a product's review set is a single read-modify-write of the
product document: the review map is changed and ``average_rating`` /
``total_reviews`` are recomputed from it inside the same conditional write.
If another writer got there first the store raises ConflictError and the
whole transaction is replayed against the fresh document, a bounded number
of times.
"""
import random
import time
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Callable, Dict, Iterable, Optional

from pydantic import ValidationError

from repositories.product_repository import CatalogStore, ProductMutation
from schemas.base_schema import describe_validation_error
from schemas.product_schema import ProductSchema
from schemas.review_schema import (
    ReviewCreateSchema,
    ReviewDeleteSchema,
    ReviewSchema,
    ReviewUpdateSchema,
)
from utils.exceptions import (
    ConflictError,
    ForbiddenError,
    InstanceNotFoundError,
    InvalidInputError,
    UnauthenticatedError,
)
from utils.logging_utils import get_sanitized_logger

logger = get_sanitized_logger(__name__)

ONE_DECIMAL = Decimal("0.1")


def average_rating(ratings: Iterable[int]) -> float:
    """Mean rating rounded half-up to one decimal; 0 for no ratings."""
    ratings = list(ratings)
    if not ratings:
        return 0.0
    mean = Decimal(sum(ratings)) / Decimal(len(ratings))
    return float(mean.quantize(ONE_DECIMAL, rounding=ROUND_HALF_UP))


def with_reviews(product: ProductSchema, reviews: Dict[str, ReviewSchema]) -> ProductSchema:
    """The product with a new review set and aggregates derived from it."""
    return product.model_copy(
        update={
            "reviews": list(reviews.values()),
            "average_rating": average_rating(r.rating for r in reviews.values()),
            "total_reviews": len(reviews),
        }
    )


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _require_identity(identity: str) -> None:
    if not identity or not str(identity).strip():
        raise UnauthenticatedError("A verified identity is required")


def _validate(schema, **data):
    try:
        return schema.model_validate(data)
    except ValidationError as e:
        raise InvalidInputError("Invalid review", details=describe_validation_error(e)) from e


class ReviewService:

    def __init__(
        self,
        store: CatalogStore,
        max_retries: int = 3,
        retry_backoff: float = 0.02,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.store = store
        self.max_retries = max(1, max_retries)
        self.retry_backoff = retry_backoff
        self.clock = clock

    # -----------------------------
    # READ
    # -----------------------------
    def list_reviews(self, product_id: str) -> ProductSchema:
        return self.store.get(product_id)

    # -----------------------------
    # CREATE
    # -----------------------------
    def add_review(
        self,
        product_id: str,
        identity: str,
        rating,
        comment,
        reviewer_name: Optional[str] = None,
    ) -> ReviewSchema:
        _require_identity(identity)
        payload = _validate(ReviewCreateSchema, rating=rating, comment=comment, reviewer_name=reviewer_name)
        created_at = self.clock()
        base_millis = int(created_at.timestamp() * 1000)
        new_id = None

        def mutate(product: ProductSchema) -> ProductSchema:
            nonlocal new_id
            reviews = {r.id: r for r in product.reviews}

            millis = base_millis
            while f"{identity}-{millis}" in reviews:
                millis += 1
            new_id = f"{identity}-{millis}"

            reviews[new_id] = ReviewSchema(
                id=new_id,
                rating=payload.rating,
                comment=payload.comment,
                reviewer_identity=identity,
                reviewer_name=payload.reviewer_name,
                date=created_at,
            )
            return with_reviews(product, reviews)

        product = self._apply(product_id, mutate, action="add")
        review = self._find(product, new_id)
        logger.info(f"Review {review.id} added to product {product_id}")
        return review

    # -----------------------------
    # UPDATE
    # -----------------------------
    def edit_review(self, product_id: str, identity: str, review_id, rating, comment) -> ReviewSchema:
        _require_identity(identity)
        payload = _validate(ReviewUpdateSchema, review_id=review_id, rating=rating, comment=comment)

        def mutate(product: ProductSchema) -> ProductSchema:
            reviews = {r.id: r for r in product.reviews}
            existing = self._owned_review(reviews, payload.review_id, identity, product_id)
            reviews[existing.id] = existing.model_copy(
                update={"rating": payload.rating, "comment": payload.comment, "date": self.clock()}
            )
            return with_reviews(product, reviews)

        product = self._apply(product_id, mutate, action="edit")
        logger.info(f"Review {payload.review_id} on product {product_id} edited")
        return self._find(product, payload.review_id)

    # -----------------------------
    # DELETE
    # -----------------------------
    def delete_review(self, product_id: str, identity: str, review_id) -> None:
        _require_identity(identity)
        payload = _validate(ReviewDeleteSchema, review_id=review_id)

        def mutate(product: ProductSchema) -> ProductSchema:
            reviews = {r.id: r for r in product.reviews}
            existing = self._owned_review(reviews, payload.review_id, identity, product_id)
            del reviews[existing.id]
            return with_reviews(product, reviews)

        self._apply(product_id, mutate, action="delete")
        logger.info(f"Review {payload.review_id} deleted from product {product_id}")

    # -----------------------------
    # HELPERS
    # -----------------------------
    @staticmethod
    def _owned_review(reviews: Dict[str, ReviewSchema], review_id: str, identity: str, product_id: str) -> ReviewSchema:
        review = reviews.get(review_id)
        if review is None:
            raise InstanceNotFoundError(f"Review {review_id} not found on product {product_id}")
        if review.reviewer_identity != identity:
            logger.warning(f"Identity {identity} tried to modify review {review_id} it does not own")
            raise ForbiddenError("Only the author of a review can modify it")
        return review

    @staticmethod
    def _find(product: ProductSchema, review_id: str) -> ReviewSchema:
        return next(r for r in product.reviews if r.id == review_id)

    def _apply(self, product_id: str, mutate: ProductMutation, action: str) -> ProductSchema:
        """Run ``mutate`` as one transactional update, replaying it on conflict."""
        for attempt in range(1, self.max_retries + 1):
            try:
                return self.store.transactional_update(product_id, mutate)
            except ConflictError:
                if attempt == self.max_retries:
                    logger.error(
                        f"Giving up review {action} on product {product_id} after {attempt} conflicting attempts"
                    )
                    raise
                logger.warning(f"Conflict on review {action} for product {product_id}, retry {attempt}")
                if self.retry_backoff:
                    time.sleep(random.uniform(0, self.retry_backoff * attempt))

        raise ConflictError(f"Product {product_id} was modified concurrently")
