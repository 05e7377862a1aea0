"""
Query planner for product listings.

Stages always run in this order, each one working on the output of the
previous one:

1. category filter   (pushed down to the store as an equality query)
2. fetch candidates  (full filtered set, materialised in store key order)
3. search narrowing  (fuzzy title match, ranked best-first)
4. sort              (price or id; skipped when a search ranking should win)
5. paginate          (in-memory slice)

The store can only do equality filters, so everything after stage 2 happens
in memory over the materialised candidate list.
"""
from dataclasses import dataclass
from functools import cmp_to_key
from typing import List

from repositories.product_repository import CatalogStore
from schemas.product_schema import ProductSchema
from schemas.query_schema import ListingQuery
from services.fuzzy_matcher import FuzzyMatcher
from utils.logging_utils import get_sanitized_logger

logger = get_sanitized_logger(__name__)


@dataclass(frozen=True)
class ListingPage:
    items: List[ProductSchema]
    has_more: bool


def _cmp(a, b) -> int:
    return (a > b) - (a < b)


def compare_ids(a: str, b: str) -> int:
    """Numeric comparison when both ids are plain ASCII digits, lexical otherwise."""
    if _is_plain_digits(a) and _is_plain_digits(b):
        return _cmp(int(a), int(b))
    return _cmp(a, b)


def _is_plain_digits(value: str) -> bool:
    # int() would also take "+5", " 7 " and "1_0"
    return value.isascii() and value.isdigit()


def _comparator(sort_by: str, descending: bool):
    direction = -1 if descending else 1

    if sort_by == "price":
        def compare(x: ProductSchema, y: ProductSchema) -> int:
            primary = _cmp(x.price, y.price) * direction
            # tie-break is always id ascending
            return primary or compare_ids(x.id, y.id)
    else:
        def compare(x: ProductSchema, y: ProductSchema) -> int:
            return compare_ids(x.id, y.id) * direction

    return compare


def sort_products(products: List[ProductSchema], sort_by: str, order: str) -> List[ProductSchema]:
    return sorted(products, key=cmp_to_key(_comparator(sort_by, order == "desc")))


def paginate(candidates: List[ProductSchema], page: int, limit: int) -> ListingPage:
    start = (page - 1) * limit
    return ListingPage(
        items=candidates[start:start + limit],
        has_more=start + limit < len(candidates),
    )


class QueryPlanner:

    def __init__(self, store: CatalogStore, matcher: FuzzyMatcher = None):
        self.store = store
        self.matcher = matcher or FuzzyMatcher()

    def fetch_candidates(self, query: ListingQuery) -> List[ProductSchema]:
        if query.category is not None:
            return self.store.query_by_equality("category", query.category)
        return self.store.scan()

    def plan(self, query: ListingQuery) -> ListingPage:
        candidates = self.fetch_candidates(query)
        fetched = len(candidates)

        if query.search:
            candidates = self.matcher.match(candidates, query.search)

        sort_by = query.effective_sort
        if sort_by is not None:
            candidates = sort_products(candidates, sort_by, query.order)

        page = paginate(candidates, query.page, query.limit)
        logger.debug(
            f"Listing planned: fetched={fetched} candidates={len(candidates)} "
            f"page={query.page} limit={query.limit} sort={sort_by}/{query.order} "
            f"returned={len(page.items)} has_more={page.has_more}"
        )
        return page
