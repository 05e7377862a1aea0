from typing import List

import pytest

from repositories.product_repository import CatalogStore
from schemas.product_schema import ProductSchema
from schemas.query_schema import ListingQuery
from services.query_planner import QueryPlanner, compare_ids, paginate, sort_products
from utils.exceptions import InstanceNotFoundError, StoreUnavailableError


class ListStore(CatalogStore):
    """In-memory catalog store; products are kept in key order."""

    def __init__(self, products: List[ProductSchema], fail: bool = False):
        self.products = sorted(products, key=lambda p: p.id)
        self.fail = fail
        self.calls = []

    def _check(self, name):
        self.calls.append(name)
        if self.fail:
            raise StoreUnavailableError("Catalog store unavailable")

    def get(self, product_id):
        self._check("get")
        for product in self.products:
            if product.id == product_id:
                return product
        raise InstanceNotFoundError(f"Product {product_id} not found")

    def query_by_equality(self, field, value):
        self._check("query_by_equality")
        return [p for p in self.products if getattr(p, field) == value]

    def scan(self):
        self._check("scan")
        return list(self.products)

    def transactional_update(self, product_id, mutate):
        raise NotImplementedError

    def add(self, product):
        raise NotImplementedError

    def exists(self, product_id):
        return any(p.id == product_id for p in self.products)


def _make_product(product_id, price=10.0, title=None, category="misc"):
    return ProductSchema(id=product_id, title=title or f"Item {product_id}", price=price, category=category)


def _ids(page):
    return [p.id for p in page.items]


@pytest.fixture
def priced_store():
    return ListStore([
        _make_product("001", price=10),
        _make_product("002", price=30),
        _make_product("003", price=20),
    ])


class TestCompareIds:
    def test_numeric_when_both_are_integers(self):
        assert compare_ids("9", "10") < 0
        assert compare_ids("010", "9") > 0

    def test_lexical_fallback(self):
        assert compare_ids("abc", "abd") < 0
        assert compare_ids("10", "9a") < 0

    @pytest.mark.parametrize("a, b", [("1_0", "9"), (" 12", "3"), ("+12", "3")])
    def test_only_plain_digits_compare_numerically(self, a, b):
        # numerically a > b; lexically a < b
        assert compare_ids(a, b) < 0

    def test_equal(self):
        assert compare_ids("007", "7") == 0


class TestSortProducts:
    def test_price_desc_breaks_ties_by_id_ascending(self):
        products = [
            _make_product("003", price=5),
            _make_product("001", price=5),
            _make_product("002", price=9),
        ]

        result = sort_products(products, "price", "desc")

        assert [p.id for p in result] == ["002", "001", "003"]

    def test_id_desc(self):
        products = [_make_product("002"), _make_product("010"), _make_product("001")]
        assert [p.id for p in sort_products(products, "id", "desc")] == ["010", "002", "001"]


class TestPaginate:
    def test_has_more_only_when_items_remain(self):
        products = [_make_product(f"{i:03d}") for i in range(1, 6)]

        assert paginate(products, 1, 2).has_more is True
        assert paginate(products, 3, 2).has_more is False
        assert len(paginate(products, 3, 2).items) == 1

    def test_exact_fit_has_no_more(self):
        products = [_make_product(f"{i:03d}") for i in range(1, 5)]
        assert paginate(products, 2, 2).has_more is False

    def test_page_beyond_range_is_empty(self):
        page = paginate([_make_product("001")], 5, 10)
        assert page.items == []
        assert page.has_more is False


class TestQueryPlanner:
    def test_price_desc_first_page(self, priced_store):
        page = QueryPlanner(priced_store).plan(ListingQuery(sort_by="price", order="desc", limit=2))

        assert _ids(page) == ["002", "003"]
        assert page.has_more is True

    def test_default_listing_sorted_by_id(self, priced_store):
        page = QueryPlanner(priced_store).plan(ListingQuery())
        assert _ids(page) == ["001", "002", "003"]
        assert page.has_more is False

    def test_pages_cover_every_product_exactly_once(self, priced_store):
        planner = QueryPlanner(priced_store)
        seen = []
        page_number = 1
        while True:
            page = planner.plan(ListingQuery(page=page_number, limit=2, sort_by="price"))
            seen.extend(_ids(page))
            if not page.has_more:
                break
            page_number += 1

        assert sorted(seen) == ["001", "002", "003"]
        assert len(seen) == len(set(seen))

    def test_same_query_same_result(self, priced_store):
        planner = QueryPlanner(priced_store)
        query = ListingQuery(sort_by="price", order="desc", limit=2)
        assert planner.plan(query) == planner.plan(query)

    def test_category_filter_is_pushed_to_store(self):
        store = ListStore([
            _make_product("001", category="audio"),
            _make_product("002", category="laptops"),
        ])

        page = QueryPlanner(store).plan(ListingQuery(category="audio"))

        assert _ids(page) == ["001"]
        assert store.calls == ["query_by_equality"]

    def test_unknown_category_is_empty_not_error(self, priced_store):
        page = QueryPlanner(priced_store).plan(ListingQuery(category="nonexistent"))
        assert page.items == []
        assert page.has_more is False

    def test_search_keeps_match_ranking_without_sort(self):
        store = ListStore([
            _make_product("001", title="Old Desk Lamp"),
            _make_product("002", title="Lamp"),
            _make_product("003", title="Phone X"),
        ])

        page = QueryPlanner(store).plan(ListingQuery(search="lamp"))

        assert _ids(page) == ["002", "001"]

    def test_explicit_sort_overrides_search_ranking(self):
        store = ListStore([
            _make_product("001", title="Old Desk Lamp"),
            _make_product("002", title="Lamp"),
        ])

        page = QueryPlanner(store).plan(ListingQuery(search="lamp", sort_by="id"))

        assert _ids(page) == ["001", "002"]

    def test_search_within_category(self):
        store = ListStore([
            _make_product("001", title="Phone X", category="smartphones"),
            _make_product("002", title="Phone Case", category="accessories"),
        ])

        page = QueryPlanner(store).plan(ListingQuery(search="phone", category="smartphones"))

        assert _ids(page) == ["001"]

    def test_store_failure_propagates(self):
        planner = QueryPlanner(ListStore([], fail=True))

        with pytest.raises(StoreUnavailableError):
            planner.plan(ListingQuery())
