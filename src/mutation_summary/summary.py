"""Summary dataclass and the query -> summary builder.

A Summary is the answer to one query for one batch.  Which optional fields
are present depends on the query:

==================  =========  =========  ==================  ======================  =============
query               reparented reordered  attribute_changed   character_data_changed  value_changed
==================  =========  =========  ==================  ======================  =============
all                 yes        yes        yes                 yes                     no
element             yes        no         if element_attrs    no                      no
attribute           no         no         no                  no                      attribute
characterData       no         no         no                  no                      text
==================  =========  =========  ==================  ======================  =============

The old-value accessors read from the originating projection and are only
valid while it has not been discarded.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from mutation_summary.errors import UsageError
from mutation_summary.queries import (
    AllQuery,
    AttributeQuery,
    CharacterDataQuery,
    ElementQuery,
    Query,
)

if TYPE_CHECKING:
    from mutation_summary.projection import MutationProjection

__all__ = ["Summary", "create_summary"]


@dataclass(frozen=True, slots=True)
class Summary:
    """What changed for one query in one batch.

    Attributes:
        target: The observed root.
        query: The query this summary answers.
        added: Nodes now reachable and matching that were not before.
        removed: Nodes reachable and matching before that are not now.
        reparented: Matching nodes that stayed reachable under a new parent.
        reordered: Matching nodes that moved among unchanged siblings.
        attribute_changed: Attribute name -> elements whose value changed.
        character_data_changed: Text/comment nodes whose payload changed.
        value_changed: The single changed-value list of attribute and
            characterData queries.
    """

    target: Any
    query: Query
    added: list[Any] = field(default_factory=list)
    removed: list[Any] = field(default_factory=list)
    reparented: list[Any] | None = None
    reordered: list[Any] | None = None
    attribute_changed: dict[str, list[Any]] | None = None
    character_data_changed: list[Any] | None = None
    value_changed: list[Any] | None = None
    projection: MutationProjection | None = field(default=None, repr=False, compare=False)

    @property
    def tracks_attributes(self) -> bool:
        return isinstance(self.query, (AllQuery, AttributeQuery)) or (
            isinstance(self.query, ElementQuery) and self.query.element_attributes is not None
        )

    @property
    def tracks_character_data(self) -> bool:
        return isinstance(self.query, (AllQuery, CharacterDataQuery))

    def is_empty(self) -> bool:
        """True when the summary reports no change at all."""
        lists = [
            self.added,
            self.removed,
            self.reparented,
            self.reordered,
            self.character_data_changed,
            self.value_changed,
        ]
        if any(lists):
            return False
        return not any((self.attribute_changed or {}).values())

    def _projection(self) -> MutationProjection:
        if self.projection is None:
            msg = "summary is not bound to a projection"
            raise UsageError(msg)
        return self.projection

    def get_old_attribute(self, node: Any, name: str | None = None) -> str | None:
        """Value an attribute had at observation start.

        Args:
            node: A node reported as changed by this summary.
            name: Attribute name.  Attribute queries default to (and only
                accept) their own attribute.

        Raises:
            UsageError: If this summary does not track attributes, the node or
                name was not changed, or the projection was discarded.
        """
        if not self.tracks_attributes:
            msg = "get_old_attribute is not available for this query"
            raise UsageError(msg)
        if isinstance(self.query, AttributeQuery):
            if name is not None and name != self.query.attribute:
                msg = f"attribute query only tracks {self.query.attribute!r}"
                raise UsageError(msg)
            name = self.query.attribute
        if name is None:
            msg = "get_old_attribute requires an attribute name"
            raise UsageError(msg)
        return self._projection().get_old_attribute(node, name)

    def get_old_character_data(self, node: Any) -> str | None:
        """Payload a text/comment node had at observation start.

        Raises:
            UsageError: If this summary does not track character data, the
                node was not changed, or the projection was discarded.
        """
        if not self.tracks_character_data:
            msg = "get_old_character_data is not available for this query"
            raise UsageError(msg)
        return self._projection().get_old_character_data(node)


def create_summary(projection: MutationProjection, query: Query) -> Summary:
    """Build the Summary answering ``query`` from a projection.

    Args:
        projection: A live (not discarded) projection of one batch.
        query: A validated query object.

    Returns:
        A Summary bound to ``projection`` for old-value lookups.
    """
    patterns = query.element_filter
    character_data = isinstance(query, CharacterDataQuery)

    changed = projection.get_changed(patterns, character_data=character_data)

    reparented = None
    reordered = None
    if isinstance(query, (AllQuery, ElementQuery)):
        reparented = changed.reparented
    if isinstance(query, AllQuery):
        reordered = changed.reordered

    attribute_changed = None
    character_data_changed = None
    value_changed = None

    if isinstance(query, (AllQuery, AttributeQuery)) or (
        isinstance(query, ElementQuery) and query.element_attributes is not None
    ):
        attribute_filter = query.element_attributes if isinstance(query, ElementQuery) else None
        attributes = projection.get_attributes_changed(patterns, attribute_filter)
        if isinstance(query, AttributeQuery):
            value_changed = attributes.get(query.attribute, [])
        else:
            attribute_changed = attributes

    if isinstance(query, (AllQuery, CharacterDataQuery)):
        text_changed = projection.get_character_data_changed(
            patterns, character_data=character_data
        )
        if character_data:
            value_changed = text_changed
        else:
            character_data_changed = text_changed

    return Summary(
        target=projection.root,
        query=query,
        added=changed.added,
        removed=changed.removed,
        reparented=reparented,
        reordered=reordered,
        attribute_changed=attribute_changed,
        character_data_changed=character_data_changed,
        value_changed=value_changed,
        projection=projection,
    )
