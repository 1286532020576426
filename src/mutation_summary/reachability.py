"""Reachability oracle: was / is a node a descendant of the observed root.

``is_reachable`` follows current parents; ``was_reachable`` follows old
parents as recorded in the ledger.  A node's old parent is

- its current parent, if no structural record touched it;
- the node it was first removed from, if its first structural event was a
  removal;
- None otherwise (the node is new this batch).

Both walks are iterative: the uncached prefix of the ancestor chain is
collected, the first cached (or terminal) answer is found, and the answer is
written back to every collected node.  Results are memoized for the lifetime
of the projection, so each node is resolved at most once per direction.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from mutation_summary.ledger import ChangeLedger
from mutation_summary.node_map import NodeMap
from mutation_summary.states import ChangeState


class ReachabilityOracle:
    """Memoized reachability transitions for one batch.

    Args:
        root: The fixed observed root.  It is always reachable.
        ledger: The batch's ChangeLedger, consulted for old parents.
    """

    __slots__ = ("_is_cache", "_ledger", "_root", "_was_cache")

    def __init__(self, root: Any, ledger: ChangeLedger) -> None:
        self._root = root
        self._ledger = ledger
        self._is_cache: NodeMap[bool] = NodeMap()
        self._was_cache: NodeMap[bool] = NodeMap()

    def old_parent(self, node: Any) -> Any:
        """The parent ``node`` had at observation start (None when detached)."""
        change = self._ledger.get(node)
        if change is not None and change.child_list:
            return change.old_parent
        return node.parent

    def is_reachable(self, node: Any) -> bool:
        return self._resolve(node, self._is_cache, _current_parent)

    def was_reachable(self, node: Any) -> bool:
        return self._resolve(node, self._was_cache, self.old_parent)

    def change(self, node: Any) -> ChangeState:
        """Reachability transition of ``node`` across the batch."""
        return ChangeState.of(self.was_reachable(node), self.is_reachable(node))

    def _resolve(
        self,
        node: Any,
        cache: NodeMap[bool],
        parent_of: Callable[[Any], Any],
    ) -> bool:
        chain: list[Any] = []
        pending: NodeMap[bool] = NodeMap()
        answer = False
        current = node
        while True:
            if current is self._root:
                answer = True
                break
            if current is None:
                answer = False
                break
            cached = cache.get(current)
            if cached is not None:
                answer = cached
                break
            if current in pending:
                # Inconsistent records produced an ancestor cycle.
                answer = False
                break
            pending.set(current, True)
            chain.append(current)
            current = parent_of(current)

        for visited in chain:
            cache.set(visited, answer)
        return answer


def _current_parent(node: Any) -> Any:
    return node.parent
