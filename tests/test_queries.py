"""Tests for query objects and validate_query."""

from __future__ import annotations

import pytest

from mutation_summary.errors import PatternSyntaxError, QueryError
from mutation_summary.patterns import FilterPattern
from mutation_summary.queries import (
    AllQuery,
    AttributeQuery,
    CharacterDataQuery,
    ElementQuery,
    validate_query,
)


class TestQueryObjects:
    def test_all_and_character_data_have_no_filter(self) -> None:
        assert AllQuery().element_filter is None
        assert CharacterDataQuery().element_filter is None

    def test_attribute_query_compiles_filter(self) -> None:
        query = AttributeQuery(" data-id ")
        assert query.attribute == "data-id"
        assert query.element_filter == (FilterPattern(attr_name="data-id"),)

    def test_attribute_query_rejects_invalid_name(self) -> None:
        with pytest.raises(QueryError, match="Invalid request option"):
            AttributeQuery("9x")

    def test_element_query(self) -> None:
        query = ElementQuery("div p.x")
        assert [p.name for p in query.element_filter] == ["DIV", "P.x"]
        assert query.element_attributes is None

    def test_element_attributes_from_string(self) -> None:
        query = ElementQuery("div", "title  lang title")
        assert query.element_attributes == ("title", "lang")

    def test_element_attributes_from_iterable(self) -> None:
        assert ElementQuery("div", ("title", "lang")).element_attributes == ("title", "lang")

    def test_empty_element_attributes_rejected(self) -> None:
        with pytest.raises(QueryError, match="at least one attribute"):
            ElementQuery("div", "  ")

    def test_malformed_element_filter(self) -> None:
        with pytest.raises(PatternSyntaxError):
            ElementQuery("div[")

    def test_non_string_element(self) -> None:
        with pytest.raises(QueryError, match="element must be a string"):
            ElementQuery(3)  # type: ignore[arg-type]

    def test_queries_are_hashable_values(self) -> None:
        assert AllQuery() == AllQuery()
        assert ElementQuery("p", "title") == ElementQuery("p", ("title",))
        assert len({AttributeQuery("id"), AttributeQuery("id")}) == 1


class TestValidateQuery:
    def test_objects_pass_through(self) -> None:
        query = ElementQuery("p")
        assert validate_query(query) is query

    def test_all(self) -> None:
        assert validate_query({"all": True}) == AllQuery()

    def test_attribute(self) -> None:
        assert validate_query({"attribute": "href"}) == AttributeQuery("href")

    def test_element_with_attributes(self) -> None:
        query = validate_query({"element": "a", "elementAttributes": "href rel"})
        assert query == ElementQuery("a", ("href", "rel"))

    def test_element_with_snake_case_attributes(self) -> None:
        query = validate_query({"element": "a", "element_attributes": ["href"]})
        assert query == ElementQuery("a", ("href",))

    def test_character_data(self) -> None:
        assert validate_query({"characterData": True}) == CharacterDataQuery()
        assert validate_query({"character_data": True}) == CharacterDataQuery()

    @pytest.mark.parametrize(
        ("request_", "message"),
        [
            ({"all": True, "element": "p"}, "all has no options"),
            ({"attribute": "x", "element": "p"}, "attribute has no options"),
            ({"element": "p", "title": "x"}, "element only allows elementAttributes"),
            ({"characterData": True, "x": 1}, "characterData has no options"),
            ({"bogus": True}, "Unknown query request"),
            ({}, "Unknown query request"),
            ("element", "Unknown query request"),
        ],
    )
    def test_invalid(self, request_: object, message: str) -> None:
        with pytest.raises(QueryError, match=message):
            validate_query(request_)  # type: ignore[arg-type]
