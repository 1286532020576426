"""Tests for ObserverOptions and create_observer_options."""

from __future__ import annotations

import pytest

from mutation_summary.observer import ObserverOptions, create_observer_options
from mutation_summary.queries import (
    AllQuery,
    AttributeQuery,
    CharacterDataQuery,
    ElementQuery,
)


class TestObserverOptions:
    def test_defaults_watch_structure_only(self) -> None:
        options = ObserverOptions()
        assert options.child_list
        assert options.subtree
        assert not options.attributes
        assert not options.character_data

    def test_watches_attribute(self) -> None:
        assert not ObserverOptions().watches_attribute("id")
        assert ObserverOptions(attributes=True).watches_attribute("id")
        filtered = ObserverOptions(attributes=True, attribute_filter=("class",))
        assert filtered.watches_attribute("class")
        assert not filtered.watches_attribute("id")

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"attribute_filter": ("id",)},
            {"attribute_old_value": True},
            {"character_data_old_value": True},
        ],
    )
    def test_inconsistent_options_rejected(self, kwargs: dict[str, object]) -> None:
        with pytest.raises(ValueError, match="requires"):
            ObserverOptions(**kwargs)  # type: ignore[arg-type]


class TestCreateObserverOptions:
    def test_element_only(self) -> None:
        options = create_observer_options([ElementQuery("div")])
        assert options == ObserverOptions()

    def test_all_watches_everything(self) -> None:
        options = create_observer_options([AllQuery()])
        assert options.attributes
        assert options.attribute_old_value
        assert options.attribute_filter is None
        assert options.character_data
        assert options.character_data_old_value

    def test_character_data(self) -> None:
        options = create_observer_options([CharacterDataQuery()])
        assert options.character_data
        assert options.character_data_old_value
        assert not options.attributes

    def test_attribute_query(self) -> None:
        options = create_observer_options([AttributeQuery("href")])
        assert options.attribute_filter == ("href",)
        assert options.attribute_old_value

    def test_element_filter_attributes(self) -> None:
        options = create_observer_options([ElementQuery("a[rel] p.x", ("title", "rel"))])
        assert options.attribute_filter == ("class", "rel", "title")

    def test_filters_merge_across_queries(self) -> None:
        options = create_observer_options([AttributeQuery("id"), ElementQuery(".x")])
        assert options.attribute_filter == ("id", "class")

    def test_all_overrides_filters(self) -> None:
        options = create_observer_options([AttributeQuery("id"), AllQuery()])
        assert options.attribute_filter is None
