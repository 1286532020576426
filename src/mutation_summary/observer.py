"""ObserverOptions: the watch-set a change source must honour for a query set.

Derived from the declared queries so the source reports everything the
summaries need, and old values wherever a summary compares against them:

- child list changes over the whole subtree, always;
- text changes (with old values) for ``characterData`` and ``all`` queries;
- every attribute (with old values) for ``all`` queries;
- the named attribute for ``attribute`` queries;
- ``class`` for element filters using a class, plus every attribute named
  by an element filter or by ``element_attributes``.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from mutation_summary.queries import (
    AllQuery,
    AttributeQuery,
    CharacterDataQuery,
    ElementQuery,
    Query,
)

__all__ = ["ObserverOptions", "create_observer_options"]

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ObserverOptions:
    """Immutable description of which change categories to report.

    Attributes:
        child_list: Report child list changes.
        subtree: Report changes anywhere below the root, not only on it.
        attributes: Report attribute changes.
        attribute_old_value: Include old values in attribute records.
        attribute_filter: Only report these attribute names; None means all.
        character_data: Report text changes.
        character_data_old_value: Include old values in text records.
    """

    child_list: bool = True
    subtree: bool = True
    attributes: bool = False
    attribute_old_value: bool = False
    attribute_filter: tuple[str, ...] | None = None
    character_data: bool = False
    character_data_old_value: bool = False

    def __post_init__(self) -> None:
        if self.attribute_filter is not None and not self.attributes:
            msg = "attribute_filter requires attributes=True"
            raise ValueError(msg)
        if self.attribute_old_value and not self.attributes:
            msg = "attribute_old_value requires attributes=True"
            raise ValueError(msg)
        if self.character_data_old_value and not self.character_data:
            msg = "character_data_old_value requires character_data=True"
            raise ValueError(msg)

    def watches_attribute(self, name: str) -> bool:
        if not self.attributes:
            return False
        return self.attribute_filter is None or name in self.attribute_filter


def create_observer_options(queries: Iterable[Query]) -> ObserverOptions:
    """Derive the minimal ObserverOptions covering every query."""
    attributes = False
    watch_all_attributes = False
    attribute_names: dict[str, None] = {}
    character_data = False

    def observe_attributes(names: Iterable[str] | None = None) -> None:
        nonlocal attributes, watch_all_attributes
        attributes = True
        if names is None:
            watch_all_attributes = True
            return
        for name in names:
            attribute_names[name] = None

    for query in queries:
        if isinstance(query, CharacterDataQuery):
            character_data = True
        elif isinstance(query, AllQuery):
            observe_attributes()
            character_data = True
        elif isinstance(query, AttributeQuery):
            observe_attributes([query.attribute])
        elif isinstance(query, ElementQuery):
            if any(pattern.class_name for pattern in query.element_filter):
                observe_attributes(["class"])
            names = [p.attr_name for p in query.element_filter if p.attr_name]
            names.extend(query.element_attributes or ())
            if names:
                observe_attributes(names)

    attribute_filter = None
    if attributes and not watch_all_attributes:
        attribute_filter = tuple(attribute_names)

    options = ObserverOptions(
        attributes=attributes,
        attribute_old_value=attributes,
        attribute_filter=attribute_filter,
        character_data=character_data,
        character_data_old_value=character_data,
    )
    logger.debug("Derived observer options: %s", options)
    return options
