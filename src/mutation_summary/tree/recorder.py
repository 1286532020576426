"""MutationRecorder: a MutationSource that edits a TreeNode tree and records it.

Every mutation method performs the edit and, when the target is observed and
the category is watched, queues the matching record.  ``flush`` hands the
queued batch to the observer callback.

Nodes removed from the observed subtree stay observed until the next
``take_records``/``flush``, so edits made to them inside the same batch are
still reported.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from mutation_summary.observer import ObserverOptions
from mutation_summary.records import (
    AttributeChange,
    MutationRecord,
    StructuralChange,
    TextChange,
)
from mutation_summary.tree.nodes import NodeKind, TreeNode

__all__ = ["MutationRecorder"]

logger = logging.getLogger(__name__)


class MutationRecorder:
    """Records edits made through it against an observed TreeNode root."""

    def __init__(self) -> None:
        self._root: TreeNode | None = None
        self._options: ObserverOptions | None = None
        self._callback: Callable[[list[MutationRecord]], object] | None = None
        self._records: list[MutationRecord] = []
        self._transient: list[TreeNode] = []

    # ------------------------------------------------------------------
    # MutationSource
    # ------------------------------------------------------------------

    @property
    def observing(self) -> bool:
        return self._root is not None

    def observe(
        self,
        root: TreeNode,
        options: ObserverOptions,
        callback: Callable[[list[MutationRecord]], object],
    ) -> None:
        """Start recording changes under ``root``.  Replaces any earlier observation."""
        self._root = root
        self._options = options
        self._callback = callback
        self._records = []
        self._transient = []

    def disconnect(self) -> None:
        """Stop recording.  Queued records are dropped."""
        self._root = None
        self._options = None
        self._callback = None
        self._records = []
        self._transient = []

    def take_records(self) -> list[MutationRecord]:
        """Return and clear the queued records."""
        records, self._records = self._records, []
        self._transient = []
        return records

    def flush(self) -> list[MutationRecord]:
        """Deliver the queued records to the callback, if any are queued."""
        callback = self._callback
        records = self.take_records()
        if records and callback is not None:
            logger.debug("Delivering %d records", len(records))
            callback(records)
        return records

    # ------------------------------------------------------------------
    # Recording
    # ------------------------------------------------------------------

    def _options_for(self, target: TreeNode) -> ObserverOptions | None:
        """The active options when ``target`` is observed, else None."""
        root, options = self._root, self._options
        if root is None or options is None:
            return None
        if target is root:
            return options
        if not options.subtree:
            return None
        if root.contains(target) or any(removed.contains(target) for removed in self._transient):
            return options
        return None

    def _queue(self, record: MutationRecord) -> None:
        self._records.append(record)

    def _record_structure(
        self,
        target: TreeNode,
        *,
        removed: tuple[TreeNode, ...] = (),
        added: tuple[TreeNode, ...] = (),
        previous_sibling: TreeNode | None,
        next_sibling: TreeNode | None,
    ) -> None:
        options = self._options_for(target)
        if options is None:
            return
        self._transient.extend(removed)
        if not options.child_list:
            return
        self._queue(
            StructuralChange(
                target=target,
                removed_nodes=removed,
                added_nodes=added,
                previous_sibling=previous_sibling,
                next_sibling=next_sibling,
            )
        )

    def _detach(self, child: TreeNode) -> None:
        parent = child.parent
        if parent is not None:
            self.remove_child(parent, child)

    # ------------------------------------------------------------------
    # Structural edits
    # ------------------------------------------------------------------

    def insert_before(
        self, parent: TreeNode, child: TreeNode, reference: TreeNode | None
    ) -> TreeNode:
        """Insert ``child`` before ``reference`` (append when None).

        A child that already has a parent is removed from it first, as a
        separate record.
        """
        if child is reference:
            reference = child.next_sibling
        if child.contains(parent):
            msg = "cannot insert a node into its own subtree"
            raise ValueError(msg)
        self._detach(child)
        previous = reference.previous_sibling if reference is not None else parent.last_child
        parent.insert_before(child, reference)
        self._record_structure(
            parent, added=(child,), previous_sibling=previous, next_sibling=reference
        )
        return child

    def append_child(self, parent: TreeNode, child: TreeNode) -> TreeNode:
        return self.insert_before(parent, child, None)

    def remove_child(self, parent: TreeNode, child: TreeNode) -> TreeNode:
        previous = child.previous_sibling
        following = child.next_sibling
        parent.remove_child(child)
        self._record_structure(
            parent, removed=(child,), previous_sibling=previous, next_sibling=following
        )
        return child

    def replace_child(self, parent: TreeNode, new: TreeNode, old: TreeNode) -> TreeNode:
        """Replace ``old`` with ``new`` in a single record.  Returns ``old``."""
        if new is old:
            return old
        if new.contains(parent):
            msg = "cannot insert a node into its own subtree"
            raise ValueError(msg)
        parent.index_of(old)
        self._detach(new)
        previous = old.previous_sibling
        following = old.next_sibling
        parent.insert_before(new, old)
        parent.remove_child(old)
        self._record_structure(
            parent,
            removed=(old,),
            added=(new,),
            previous_sibling=previous,
            next_sibling=following,
        )
        return old

    # ------------------------------------------------------------------
    # Attribute and character data edits
    # ------------------------------------------------------------------

    def _record_attribute(self, target: TreeNode, name: str, old_value: str | None) -> None:
        options = self._options_for(target)
        if options is None or not options.watches_attribute(name):
            return
        if not options.attribute_old_value:
            old_value = None
        self._queue(AttributeChange(target=target, attribute_name=name, old_value=old_value))

    def set_attribute(self, node: TreeNode, name: str, value: str) -> None:
        if node.kind != NodeKind.ELEMENT:
            msg = f"{node.kind} nodes have no attributes"
            raise TypeError(msg)
        old_value = node.get_attribute(name)
        node.attributes[name] = value
        self._record_attribute(node, name, old_value)

    def remove_attribute(self, node: TreeNode, name: str) -> None:
        """Remove attribute ``name``.  Removing an absent attribute records nothing."""
        if not node.has_attribute(name):
            return
        old_value = node.attributes.pop(name)
        self._record_attribute(node, name, old_value)

    def set_data(self, node: TreeNode, data: str) -> None:
        if node.kind not in (NodeKind.TEXT, NodeKind.COMMENT):
            msg = f"{node.kind} nodes have no character data"
            raise TypeError(msg)
        old_value = node.data
        node.data = data
        options = self._options_for(node)
        if options is None or not options.character_data:
            return
        if not options.character_data_old_value:
            old_value = None
        self._queue(TextChange(target=node, old_value=old_value))
