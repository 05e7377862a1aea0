"""FastAPI dependencies: services built once in ``create_fastapi_app`` and kept on ``app.state``."""
from typing import Optional

from fastapi import Header, Request

from services.auth_service import extract_bearer_token
from services.category_service import CategoryService
from services.product_service import ProductService
from services.review_service import ReviewService


def get_product_service(request: Request) -> ProductService:
    return request.app.state.product_service


def get_review_service(request: Request) -> ReviewService:
    return request.app.state.review_service


def get_category_service(request: Request) -> CategoryService:
    return request.app.state.category_service


def get_current_user(request: Request, authorization: Optional[str] = Header(default=None)) -> str:
    """Verified user id for the request's bearer credential."""
    token = extract_bearer_token(authorization)
    return request.app.state.identity_verifier.verify(token)
