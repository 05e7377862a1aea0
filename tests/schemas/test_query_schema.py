import pytest
from pydantic import ValidationError

from schemas.query_schema import ListingQuery, parse_listing_query
from utils.exceptions import InvalidInputError


class TestParseListingQuery:
    def test_defaults(self):
        query = parse_listing_query({})

        assert query.page == 1
        assert query.limit == 20
        assert query.sort_by is None
        assert query.order == "asc"
        assert query.category is None
        assert query.search is None
        assert query.effective_sort == "id"

    def test_string_values_are_coerced(self):
        query = parse_listing_query({"page": "2", "limit": "5", "sortBy": "price", "order": "desc"})

        assert (query.page, query.limit, query.sort_by, query.order) == (2, 5, "price", "desc")

    def test_empty_strings_take_defaults(self):
        query = parse_listing_query({"page": "", "limit": None, "order": ""})
        assert (query.page, query.limit, query.order) == (1, 20, "asc")

    def test_limit_above_maximum_is_clamped(self):
        assert parse_listing_query({"limit": "500"}, max_limit=100).limit == 100

    @pytest.mark.parametrize("raw", [
        {"page": "0"},
        {"page": "abc"},
        {"limit": "0"},
        {"limit": "-3"},
        {"sort_by": "title"},
        {"order": "sideways"},
    ])
    def test_malformed_values_are_rejected(self, raw):
        with pytest.raises(InvalidInputError) as info:
            parse_listing_query(raw)

        assert info.value.details

    def test_search_is_trimmed_and_blank_means_absent(self):
        assert parse_listing_query({"search": "  lamp "}).search == "lamp"
        assert parse_listing_query({"search": "   "}).search is None

    def test_category_is_matched_exactly(self):
        assert parse_listing_query({"category": " audio"}).category == " audio"
        assert parse_listing_query({"category": "  "}).category is None


class TestEffectiveSort:
    def test_search_without_sort_keeps_ranking(self):
        assert ListingQuery(search="phone").effective_sort is None

    def test_explicit_sort_wins_over_search(self):
        assert ListingQuery(search="phone", sort_by="price").effective_sort == "price"

    def test_query_is_immutable(self):
        query = ListingQuery()
        with pytest.raises(ValidationError):
            query.page = 3
