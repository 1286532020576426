"""Mutation records: the raw change notifications a projection consumes.

Three immutable record types, delivered in emission order:

- ``StructuralChange``: children removed from / added to ``target``.
- ``AttributeChange``:  one attribute of ``target`` changed; ``old_value`` is
  None when the attribute was absent.
- ``TextChange``:       the payload of a text/comment node changed.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

__all__ = ["AttributeChange", "MutationRecord", "StructuralChange", "TextChange"]


@dataclass(frozen=True, slots=True)
class StructuralChange:
    """Children of ``target`` were removed and/or added.

    Attributes:
        target: The parent whose child list changed.
        removed_nodes: Removed children, in their old document order.
        added_nodes: Added children, in their new document order.
        previous_sibling: Sibling immediately before the changed run.
        next_sibling: Sibling immediately after the changed run.
    """

    target: Any
    removed_nodes: tuple[Any, ...] = ()
    added_nodes: tuple[Any, ...] = ()
    previous_sibling: Any = None
    next_sibling: Any = None


@dataclass(frozen=True, slots=True)
class AttributeChange:
    """Attribute ``attribute_name`` of ``target`` changed from ``old_value``."""

    target: Any
    attribute_name: str
    old_value: str | None = None


@dataclass(frozen=True, slots=True)
class TextChange:
    """Character data of ``target`` changed from ``old_value``."""

    target: Any
    old_value: str | None = None


MutationRecord = StructuralChange | AttributeChange | TextChange
