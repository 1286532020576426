"""PendingChange records and the per-batch ChangeLedger.

The ledger accumulates facts about every node touched by a batch of mutation
records without touching the nodes themselves.  One ledger is built per batch
by ``classify_mutations`` and owned by a single projection.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from mutation_summary.node_map import NodeMap


@dataclass(slots=True)
class PendingChange:
    """Everything a batch recorded about one node.

    Attributes:
        target: The node the facts describe.
        child_list: True once any structural record added or removed the node.
        old_parent: Parent the node was first removed from; None if the first
            structural event was an addition (the node is new this batch).
        added: True if the latest structural event was an addition.
        attributes: True once any attribute record targeted the node.
        attribute_old_values: First-seen old value per attribute name.  None
            means the attribute was absent.
        character_data: True once any text record targeted the node.
        character_data_old_value: First-seen old payload.
    """

    target: Any
    child_list: bool = False
    old_parent: Any = None
    added: bool = False
    attributes: bool = False
    attribute_old_values: dict[str, str | None] = field(default_factory=dict)
    character_data: bool = False
    character_data_old_value: str | None = None


class ChangeLedger:
    """Identity-keyed store of PendingChange records for one batch.

    Also tracks which record categories appeared at all, so callers can skip
    work for categories the batch never touched.
    """

    __slots__ = (
        "_changes",
        "attributes_changes",
        "character_data_changes",
        "child_list_changes",
    )

    def __init__(self) -> None:
        self._changes: NodeMap[PendingChange] = NodeMap()
        self.child_list_changes = False
        self.attributes_changes = False
        self.character_data_changes = False

    def get(self, node: Any) -> PendingChange | None:
        """The recorded change for ``node``, or None when it was untouched."""
        return self._changes.get(node)

    def change_for(self, node: Any) -> PendingChange:
        """The change for ``node``, creating an empty one on first use."""
        change = self._changes.get(node)
        if change is None:
            change = PendingChange(target=node)
            self._changes.set(node, change)
        return change

    def structural_change_for(self, node: Any) -> PendingChange:
        """The change for ``node`` with its structural facts initialised."""
        change = self.change_for(node)
        if not change.child_list:
            change.child_list = True
            change.old_parent = None
        return change

    def nodes(self) -> list[Any]:
        """Touched nodes in the order they were first touched."""
        return self._changes.keys()

    def __contains__(self, node: object) -> bool:
        return node in self._changes

    def __len__(self) -> int:
        return len(self._changes)
