from typing import Optional

from fastapi import APIRouter, Depends, Query, Request

from controllers.dependencies import get_product_service
from schemas.product_schema import ProductListSchema, ProductSchema
from schemas.query_schema import parse_listing_query
from services.product_service import ProductService


class ProductController:
    """Read-only catalog endpoints: listing and product detail."""

    def __init__(self):
        self.router = APIRouter(tags=["products"])
        self.router.add_api_route("", self.list_products, methods=["GET"], response_model=ProductListSchema)
        self.router.add_api_route("/{product_id}", self.get_product, methods=["GET"], response_model=ProductSchema)

    @staticmethod
    def list_products(
        request: Request,
        page: Optional[str] = Query(default=None),
        limit: Optional[str] = Query(default=None),
        sort_by: Optional[str] = Query(default=None, alias="sortBy"),
        order: Optional[str] = Query(default=None),
        category: Optional[str] = Query(default=None),
        search: Optional[str] = Query(default=None),
        service: ProductService = Depends(get_product_service),
    ):
        config = request.app.state.settings
        query = parse_listing_query(
            {
                "page": page,
                "limit": limit or config.DEFAULT_PAGE_SIZE,
                "sort_by": sort_by,
                "order": order,
                "category": category,
                "search": search,
            },
            max_limit=config.MAX_PAGE_SIZE,
        )
        return service.list_products(query)

    @staticmethod
    def get_product(product_id: str, service: ProductService = Depends(get_product_service)):
        return service.get_product(product_id)
