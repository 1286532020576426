"""Movement detector: was a node reordered among siblings that stayed put.

Only nodes that were removed from a parent and re-added to the *same* parent
within the batch ("maybe moved") can have been reordered.  Such a node moved
if the sibling before it now differs from the sibling before it at
observation start, where both walks skip nodes that are themselves new,
removed or moved:

- *previous*:     walk the current order backward, skipping added and moved
  siblings.
- *old previous*: start from the recorded old previous sibling and keep
  stepping through the old order while the candidate was removed or moved.

Deciding "moved" for one node may require deciding it for its neighbours, so
the three lookups are mutually recursive.  They are written as generators and
driven by an explicit stack (``_trampoline``), with memo tables and a pending
set: a node re-entered while its own decision is pending is resolved as moved
iff no earlier sibling in the current order is also pending.  Long runs of
moved siblings therefore never hit the interpreter's recursion limit, and the
outcome does not depend on which node resolution started from.

Complexity: O(a) preprocessing, a = number of removed/added nodes; each
maybe-moved node is decided once per batch.
"""

from __future__ import annotations

from collections.abc import Generator, Iterable
from dataclasses import dataclass, field
from typing import Any, TypeVar

from mutation_summary.node_map import NodeMap
from mutation_summary.reachability import ReachabilityOracle
from mutation_summary.records import MutationRecord, StructuralChange
from mutation_summary.states import ChangeState

_MISSING: Any = object()

T = TypeVar("T")

# A lookup step: yields sub-lookups, receives their results, returns its own.
_Lookup = Generator[Any, Any, T]


@dataclass(slots=True)
class ChildListChange:
    """Per-parent summary of the structural records targeting it.

    Attributes:
        added: Children added and not previously removed.
        removed: Children removed and not re-added.
        maybe_moved: Children removed and re-added.
        old_previous: Child -> its previous sibling at observation start, for
            children whose old neighbourhood the records reveal.
        moved: Decisions for ``maybe_moved`` children, filled on first query.
    """

    added: NodeMap[bool] = field(default_factory=NodeMap)
    removed: NodeMap[bool] = field(default_factory=NodeMap)
    maybe_moved: NodeMap[bool] = field(default_factory=NodeMap)
    old_previous: NodeMap[Any] = field(default_factory=NodeMap)
    moved: NodeMap[bool] | None = None

    def record_old_previous(self, node: Any, previous: Any) -> None:
        """Remember ``previous`` as the old previous sibling of ``node``.

        Only the first fact about a node counts, and a fact is only
        trustworthy when neither side was added or moved earlier in the batch.
        """
        if node is None:
            return
        if node in self.old_previous or node in self.added or node in self.maybe_moved:
            return
        if previous is not None and (previous in self.added or previous in self.maybe_moved):
            return
        self.old_previous.set(node, previous)


def _trampoline(lookup: _Lookup[T]) -> T:
    """Run a lookup generator to completion on an explicit stack."""
    stack: list[_Lookup[Any]] = [lookup]
    value: Any = None
    while stack:
        try:
            sub_lookup = stack[-1].send(value)
        except StopIteration as done:
            stack.pop()
            value = done.value
        else:
            stack.append(sub_lookup)
            value = None
    return value


class _MoveResolver:
    """Decides ``moved`` for every maybe-moved child of one parent."""

    __slots__ = (
        "_change",
        "_moved",
        "_old_previous_cache",
        "_pending",
        "_previous_cache",
        "_resolving_old_previous",
    )

    def __init__(self, change: ChildListChange) -> None:
        self._change = change
        self._moved: NodeMap[bool] = NodeMap()
        self._pending: NodeMap[bool] = NodeMap()
        self._old_previous_cache: NodeMap[Any] = NodeMap()
        self._previous_cache: NodeMap[Any] = NodeMap()
        self._resolving_old_previous: NodeMap[bool] = NodeMap()

    def resolve(self) -> NodeMap[bool]:
        for node in self._change.maybe_moved.keys():
            _trampoline(self._is_moved(node))
        return self._moved

    def _is_first_of_pending(self, node: Any) -> bool:
        sibling = node.previous_sibling
        while sibling is not None:
            if sibling in self._pending:
                return False
            sibling = sibling.previous_sibling
        return True

    def _is_moved(self, node: Any) -> _Lookup[bool]:
        if node is None or node not in self._change.maybe_moved:
            return False

        decided = self._moved.get(node)
        if decided is not None:
            return decided

        if node in self._pending:
            did_move = self._is_first_of_pending(node)
        else:
            self._pending.set(node, True)
            previous = yield self._previous(node)
            old_previous = yield self._old_previous(node)
            did_move = previous is not old_previous

        if node in self._pending:
            self._pending.delete(node)
            self._moved.set(node, did_move)
        else:
            # Decided by a re-entrant lookup while this one was in flight.
            did_move = bool(self._moved.get(node))
        return did_move

    def _old_previous(self, node: Any) -> _Lookup[Any]:
        cached = self._old_previous_cache.get(node, _MISSING)
        if cached is not _MISSING:
            return cached
        if node in self._resolving_old_previous:
            # Inconsistent records produced a cycle in the old order.
            return None
        self._resolving_old_previous.set(node, True)

        old_previous = self._change.old_previous.get(node, _MISSING)
        while old_previous is not _MISSING and old_previous is not None:
            if old_previous not in self._change.removed:
                moved = yield self._is_moved(old_previous)
                if not moved:
                    break
            old_previous = yield self._old_previous(old_previous)

        if old_previous is _MISSING:
            old_previous = node.previous_sibling

        self._resolving_old_previous.delete(node)
        self._old_previous_cache.set(node, old_previous)
        return old_previous

    def _previous(self, node: Any) -> _Lookup[Any]:
        cached = self._previous_cache.get(node, _MISSING)
        if cached is not _MISSING:
            return cached

        previous = node.previous_sibling
        while previous is not None:
            if previous not in self._change.added:
                moved = yield self._is_moved(previous)
                if not moved:
                    break
            previous = previous.previous_sibling

        self._previous_cache.set(node, previous)
        return previous


class MovementDetector:
    """Reorder detection for the children of parents that stayed reachable.

    Args:
        records: The batch's records, in emission order.
        reachability: The batch's ReachabilityOracle; only parents whose
            reachability STAYED_IN are considered.
    """

    __slots__ = ("_changes", "_reachability", "_records")

    def __init__(
        self, records: Iterable[MutationRecord], reachability: ReachabilityOracle
    ) -> None:
        self._records = tuple(records)
        self._reachability = reachability
        self._changes: NodeMap[ChildListChange] | None = None

    def child_list_change(self, parent: Any) -> ChildListChange | None:
        """The preprocessed ChildListChange for ``parent``, if it had one."""
        if parent is None:
            return None
        return self._process().get(parent)

    def was_reordered(self, node: Any) -> bool:
        """True if ``node`` changed position among its current siblings."""
        change = self.child_list_change(node.parent)
        if change is None:
            return False
        if change.moved is None:
            change.moved = _MoveResolver(change).resolve()
        return bool(change.moved.get(node))

    def _process(self) -> NodeMap[ChildListChange]:
        if self._changes is not None:
            return self._changes

        changes: NodeMap[ChildListChange] = NodeMap()
        for record in self._records:
            if not isinstance(record, StructuralChange):
                continue
            if self._reachability.change(record.target) is not ChangeState.STAYED_IN:
                continue

            change = changes.get(record.target)
            if change is None:
                change = ChildListChange()
                changes.set(record.target, change)

            old_previous = record.previous_sibling
            for node in record.removed_nodes:
                change.record_old_previous(node, old_previous)
                if node in change.added:
                    change.added.delete(node)
                else:
                    change.removed.set(node, True)
                    change.maybe_moved.delete(node)
                old_previous = node

            change.record_old_previous(record.next_sibling, old_previous)

            for node in record.added_nodes:
                if node in change.removed:
                    change.removed.delete(node)
                    change.maybe_moved.set(node, True)
                else:
                    change.added.set(node, True)

        self._changes = changes
        return changes
