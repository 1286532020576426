"""Query requests: what a consumer wants summarized.

Four immutable query types, validated on construction:

- ``AllQuery()``: every node, with reparenting, reordering, attribute and
  character data changes.
- ``AttributeQuery(attribute)``: elements carrying ``attribute``, and changes
  to its value.
- ``ElementQuery(element, element_attributes=None)``: elements matching the
  ``element`` filter text, optionally with changes to the listed attributes.
- ``CharacterDataQuery()``: text and comment nodes and their payload changes.

``validate_query`` accepts the plain mapping form used by hosts, e.g.
``{"element": "div.note", "elementAttributes": "title lang"}``.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from mutation_summary.errors import QueryError
from mutation_summary.patterns import FilterPattern, parse_element_filter
from mutation_summary.names import NameNormalizer

__all__ = [
    "AllQuery",
    "AttributeQuery",
    "CharacterDataQuery",
    "ElementQuery",
    "Query",
    "validate_query",
]

_normalizer = NameNormalizer()


def _validate_attribute(name: Any) -> str:
    try:
        return _normalizer.attribute(name)
    except ValueError as exc:
        msg = f"Invalid request option. {exc}"
        raise QueryError(msg) from exc


@dataclass(frozen=True, slots=True)
class AllQuery:
    """Observe every node."""

    @property
    def element_filter(self) -> None:
        return None


@dataclass(frozen=True, slots=True)
class CharacterDataQuery:
    """Observe text and comment nodes."""

    @property
    def element_filter(self) -> None:
        return None


@dataclass(frozen=True, slots=True)
class AttributeQuery:
    """Observe elements that carry ``attribute`` and changes to its value.

    Attributes:
        attribute: The attribute name, trimmed and validated.
        element_filter: The compiled ``*[attribute]`` filter.
    """

    attribute: str
    element_filter: tuple[FilterPattern, ...] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        attribute = _validate_attribute(self.attribute)
        object.__setattr__(self, "attribute", attribute)
        object.__setattr__(self, "element_filter", parse_element_filter(f"*[{attribute}]"))


@dataclass(frozen=True, slots=True)
class ElementQuery:
    """Observe elements matching ``element``.

    Attributes:
        element: Element filter text (see ``mutation_summary.patterns``).
        element_attributes: Attribute names whose value changes are reported,
            given as a whitespace-separated string or an iterable of names.
            Stored as a de-duplicated tuple, or None when not requested.
        element_filter: The compiled filter.

    Raises:
        PatternSyntaxError: If ``element`` is malformed.
        QueryError: If ``element_attributes`` is empty or holds an invalid name.
    """

    element: str
    element_attributes: tuple[str, ...] | None = None
    element_filter: tuple[FilterPattern, ...] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        if not isinstance(self.element, str):
            msg = "Invalid request option. element must be a string."
            raise QueryError(msg)
        object.__setattr__(self, "element_filter", parse_element_filter(self.element))

        if self.element_attributes is not None:
            object.__setattr__(
                self, "element_attributes", _attribute_names(self.element_attributes)
            )


def _attribute_names(names: str | Iterable[str]) -> tuple[str, ...]:
    if isinstance(names, str):
        tokens = names.split()
    else:
        tokens = [token for name in names for token in str(name).split()]
    if not tokens:
        msg = "Invalid request option: elementAttributes must contain at least one attribute."
        raise QueryError(msg)
    return tuple(dict.fromkeys(_validate_attribute(token) for token in tokens))


Query = AllQuery | AttributeQuery | ElementQuery | CharacterDataQuery

_QUERY_TYPES = (AllQuery, AttributeQuery, ElementQuery, CharacterDataQuery)

_ELEMENT_ATTRIBUTE_KEYS = ("elementAttributes", "element_attributes")
_CHARACTER_DATA_KEYS = ("characterData", "character_data")


def validate_query(request: Query | Mapping[str, Any]) -> Query:
    """Convert a query request into a validated query object.

    Query objects are returned unchanged.  Mappings must name exactly one
    query kind; only ``element`` accepts an extra ``elementAttributes``
    option.

    Raises:
        QueryError: On unknown kinds, extra options or invalid names.
        PatternSyntaxError: If an ``element`` filter is malformed.
    """
    if isinstance(request, _QUERY_TYPES):
        return request
    if not isinstance(request, Mapping):
        msg = f"Invalid request option. Unknown query request: {request!r}"
        raise QueryError(msg)

    if request.get("all"):
        if len(request) > 1:
            msg = "Invalid request option. all has no options."
            raise QueryError(msg)
        return AllQuery()

    if "attribute" in request:
        if len(request) > 1:
            msg = "Invalid request option. attribute has no options."
            raise QueryError(msg)
        return AttributeQuery(request["attribute"])

    if "element" in request:
        option_count = len(request)
        element_attributes = None
        for key in _ELEMENT_ATTRIBUTE_KEYS:
            if key in request:
                element_attributes = request[key]
                option_count -= 1
        if option_count > 1:
            msg = "Invalid request option. element only allows elementAttributes option."
            raise QueryError(msg)
        if element_attributes is not None and not isinstance(element_attributes, str):
            element_attributes = tuple(element_attributes)
        return ElementQuery(request["element"], element_attributes)

    if any(request.get(key) for key in _CHARACTER_DATA_KEYS):
        if len(request) > 1:
            msg = "Invalid request option. characterData has no options."
            raise QueryError(msg)
        return CharacterDataQuery()

    msg = "Invalid request option. Unknown query request."
    raise QueryError(msg)
