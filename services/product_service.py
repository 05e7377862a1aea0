"""Product listing/detail service with Redis caching integration and sanitized logging."""
from typing import Optional

from repositories.product_repository import CatalogStore
from schemas.product_schema import ProductListSchema, ProductSchema, pad_product_id
from schemas.query_schema import ListingQuery
from services.cache_service import CacheService
from services.query_planner import QueryPlanner
from utils.exceptions import InvalidInputError
from utils.logging_utils import get_sanitized_logger

logger = get_sanitized_logger(__name__)


def normalize_product_id(raw_id: str) -> str:
    """Validate a path id (digits only) and pad it to its store key."""
    raw_id = (raw_id or "").strip()
    if not raw_id.isdigit():
        raise InvalidInputError("Invalid product ID")
    return pad_product_id(raw_id)


class ProductService:
    """Listings go through the query planner; pages and details are cached briefly."""

    def __init__(self, store: CatalogStore, planner: QueryPlanner, cache: Optional[CacheService] = None,
                 cache_ttl: int = 60):
        self.store = store
        self.planner = planner
        self.cache = cache or CacheService()
        self.cache_prefix = "products"
        self.cache_ttl = cache_ttl

    def list_products(self, query: ListingQuery) -> ProductListSchema:
        """
        Get one listing page with caching
        Key pattern: products:list:page:..:limit:..:sort:..:order:..:category:..:search:..
        """
        cache_key = self.cache.build_key(
            self.cache_prefix,
            "list",
            page=query.page,
            limit=query.limit,
            sort=query.effective_sort,
            order=query.order,
            category=query.category,
            search=query.search,
        )

        cached = self.cache.get(cache_key)
        if isinstance(cached, dict):
            logger.debug(f"Cache HIT: {cache_key}")
            return ProductListSchema.model_validate(cached)

        logger.debug(f"Cache MISS: {cache_key}")
        page = self.planner.plan(query)
        result = ProductListSchema(
            products=page.items,
            page=query.page,
            page_size=query.limit,
            has_more=page.has_more,
        )
        self.cache.set(cache_key, result.model_dump(mode="json", by_alias=True), ttl=self.cache_ttl)
        return result

    def get_product(self, raw_id: str) -> ProductSchema:
        product_id = normalize_product_id(raw_id)
        cache_key = self.cache.build_key(self.cache_prefix, "id", id=product_id)

        cached = self.cache.get(cache_key)
        if isinstance(cached, dict):
            logger.debug(f"Cache HIT: {cache_key}")
            return ProductSchema.model_validate(cached)

        logger.debug(f"Cache MISS: {cache_key}")
        product = self.store.get(product_id)
        self.cache.set(cache_key, product.model_dump(mode="json", by_alias=True), ttl=self.cache_ttl)
        return product

    def invalidate(self, product_id: str) -> None:
        """Drop cached copies after the product's reviews changed."""
        self.cache.delete(self.cache.build_key(self.cache_prefix, "id", id=product_id))
        deleted_count = self.cache.delete_pattern(f"{self.cache_prefix}:list:*")
        if deleted_count > 0:
            logger.info(f"Invalidated {deleted_count} product list cache entries")
