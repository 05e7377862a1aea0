import pytest

from schemas.query_schema import ListingQuery
from services.cache_service import CacheService
from services.category_service import CategoryService
from services.product_service import ProductService, normalize_product_id
from services.query_planner import QueryPlanner
from utils.exceptions import InstanceNotFoundError, InvalidInputError


@pytest.fixture
def cache(fake_redis):
    return CacheService(fake_redis)


@pytest.fixture
def product_service(store, make_product, cache):
    for product_id, price in [("001", 10), ("002", 30), ("003", 20)]:
        store.add(make_product(product_id, price=price))
    return ProductService(store, QueryPlanner(store), cache=cache)


class TestNormalizeProductId:
    @pytest.mark.parametrize("raw, expected", [("1", "001"), ("010", "010"), (" 7 ", "007")])
    def test_pads_digits(self, raw, expected):
        assert normalize_product_id(raw) == expected

    @pytest.mark.parametrize("raw", ["", "abc", "1a", "-1", "1.5"])
    def test_rejects_non_digits(self, raw):
        with pytest.raises(InvalidInputError):
            normalize_product_id(raw)


class TestProductService:
    def test_list_products_page(self, product_service):
        result = product_service.list_products(ListingQuery(sort_by="price", order="desc", limit=2))

        assert [p.id for p in result.products] == ["002", "003"]
        assert result.page == 1
        assert result.page_size == 2
        assert result.has_more is True

    def test_listing_is_cached(self, product_service, cache):
        query = ListingQuery(limit=2)
        first = product_service.list_products(query)

        assert cache.redis_client.keys("products:list:*")
        assert product_service.list_products(query) == first

    def test_get_product_pads_id(self, product_service):
        assert product_service.get_product("2").id == "002"

    def test_get_product_missing(self, product_service):
        with pytest.raises(InstanceNotFoundError):
            product_service.get_product("999")

    def test_invalidate_drops_cached_copies(self, product_service, cache):
        product_service.get_product("1")
        product_service.list_products(ListingQuery())

        product_service.invalidate("001")

        assert cache.redis_client.data == {}


class TestCategoryService:
    def test_names_in_stored_order(self, category_repository, cache):
        service = CategoryService(category_repository, cache=cache)
        service.replace_all(["smartphones", "audio", "laptops"])

        assert service.get_all() == ["smartphones", "audio", "laptops"]
        assert cache.get("categories:list") == ["smartphones", "audio", "laptops"]

    def test_replace_invalidates_cache(self, category_repository, cache):
        service = CategoryService(category_repository, cache=cache)
        service.replace_all(["audio"])
        service.get_all()

        service.replace_all(["laptops"])

        assert service.get_all() == ["laptops"]

    def test_empty_store_is_not_found(self, category_repository):
        with pytest.raises(InstanceNotFoundError):
            CategoryService(category_repository).get_all()

    def test_missing_categories_are_not_cached(self, category_repository, cache):
        service = CategoryService(category_repository, cache=cache)
        with pytest.raises(InstanceNotFoundError):
            service.get_all()

        service.replace_all(["audio"])

        assert service.get_all() == ["audio"]
