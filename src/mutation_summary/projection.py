"""MutationProjection: per-batch driver wiring ledger, oracles and detector.

This is the central stateful layer between the raw records and the
per-query summaries.  Constructing a projection:

1. Classifies the records into a ChangeLedger.
2. Walks outward from every ledger node (explicit-stack pre-order, each node
   visited at most once), classifying nodes as entered / exited / stayed in.
   A node whose parent link was not touched inherits the transition passed
   down by the walk; otherwise its reachability is computed fresh.
   STAYED_OUT nodes are pruned, ENTERED / EXITED subtrees are descended into,
   STAYED_IN nodes are tagged with their Movement and not descended into.

The query-facing methods (``get_changed``, ``get_attributes_changed``,
``get_character_data_changed`` and the old-value accessors) only read the
results and the memo tables.  Every cache is a field of the projection, so
discarding the projection discards all per-batch state.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import Any

from mutation_summary.classifier import classify_mutations
from mutation_summary.errors import UsageError
from mutation_summary.ledger import ChangeLedger
from mutation_summary.matchability import MatchabilityOracle
from mutation_summary.movement import MovementDetector
from mutation_summary.node_map import NodeMap
from mutation_summary.patterns import FilterPattern
from mutation_summary.reachability import ReachabilityOracle
from mutation_summary.records import MutationRecord
from mutation_summary.states import ChangeState, Movement

__all__ = ["ChangedNodes", "MutationProjection"]

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ChangedNodes:
    """Structural outcome of one batch for one filter.

    Attributes:
        added: Nodes that entered the reachable-and-matching set.
        removed: Nodes that left it.
        reparented: Matching nodes that stayed reachable under a new parent.
        reordered: Matching nodes that stayed under the same parent but moved
            among its children.
    """

    added: list[Any] = field(default_factory=list)
    removed: list[Any] = field(default_factory=list)
    reparented: list[Any] = field(default_factory=list)
    reordered: list[Any] = field(default_factory=list)


class MutationProjection:
    """The computed facts for one batch of mutation records under one root.

    Args:
        root: The fixed observed root.
        records: The batch, in emission order.
        patterns: Merged element filter of every declared query, or None.
            Used to warm the per-pattern match caches during the walk.
        track_reordering: Compute REORDERED movement for stayed-in nodes.
            Reordering detection is the costliest step and only needed when
            some query reports reordered nodes.
    """

    def __init__(
        self,
        root: Any,
        records: Iterable[MutationRecord],
        patterns: Sequence[FilterPattern] | None = None,
        *,
        track_reordering: bool = False,
    ) -> None:
        self.root = root
        self.records: tuple[MutationRecord, ...] = tuple(records)
        self.patterns = tuple(patterns) if patterns is not None else None
        self.track_reordering = track_reordering

        self._ledger: ChangeLedger | None = classify_mutations(self.records)
        self.reachability = ReachabilityOracle(root, self._ledger)
        self.matchability = MatchabilityOracle(self._ledger)
        self.movement = MovementDetector(self.records, self.reachability)

        self.entered: list[Any] = []
        self.exited: list[Any] = []
        self.stayed_in: NodeMap[Movement] = NodeMap()

        self._walk()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def ledger(self) -> ChangeLedger:
        """The batch's ledger.

        Raises:
            UsageError: If the projection has been discarded.
        """
        if self._ledger is None:
            msg = "projection has been discarded"
            raise UsageError(msg)
        return self._ledger

    @property
    def discarded(self) -> bool:
        return self._ledger is None

    def discard(self) -> None:
        """Drop all per-batch state.  Old-value accessors fail afterwards."""
        self._ledger = None
        self.entered = []
        self.exited = []
        self.stayed_in = NodeMap()

    # ------------------------------------------------------------------
    # Oracles
    # ------------------------------------------------------------------

    def reachability_change(self, node: Any) -> ChangeState:
        return self.reachability.change(node)

    def matchability_change(
        self,
        node: Any,
        patterns: Sequence[FilterPattern] | None = None,
        *,
        character_data: bool = False,
    ) -> ChangeState:
        return self.matchability.change(node, patterns, character_data=character_data)

    def was_reordered(self, node: Any) -> bool:
        if not self.ledger.child_list_changes:
            return False
        return self.movement.was_reordered(node)

    # ------------------------------------------------------------------
    # Walk
    # ------------------------------------------------------------------

    def _movement(self, node: Any) -> Movement:
        change = self.ledger.get(node)
        if change is None or not change.child_list:
            return Movement.STABLE
        if change.old_parent is not node.parent:
            return Movement.REPARENTED
        if self.track_reordering and self.was_reordered(node):
            return Movement.REORDERED
        return Movement.STABLE

    def _walk(self) -> None:
        ledger = self.ledger
        if not ledger.child_list_changes and not ledger.attributes_changes:
            logger.debug("No structural or attribute records; walk skipped")
            return

        visited: NodeMap[bool] = NodeMap()
        for start in ledger.nodes():
            stack: list[tuple[Any, ChangeState | None]] = [(start, None)]
            while stack:
                node, reachable = stack.pop()
                if node in visited:
                    continue
                visited.set(node, True)

                change = ledger.get(node)
                if reachable is None or (change is not None and change.child_list):
                    reachable = self.reachability.change(node)

                if reachable is ChangeState.STAYED_OUT:
                    continue

                if self.patterns is not None:
                    self.matchability.change(node, self.patterns)

                if reachable is ChangeState.ENTERED:
                    self.entered.append(node)
                elif reachable is ChangeState.EXITED:
                    self.exited.append(node)
                else:
                    self.stayed_in.set(node, self._movement(node))
                    continue

                stack.extend((child, reachable) for child in reversed(node.children))

        logger.debug(
            "Projected %d records: %d entered, %d exited, %d stayed in",
            len(self.records),
            len(self.entered),
            len(self.exited),
            len(self.stayed_in),
        )

    # ------------------------------------------------------------------
    # Query-facing results
    # ------------------------------------------------------------------

    def get_changed(
        self,
        patterns: Sequence[FilterPattern] | None = None,
        *,
        character_data: bool = False,
    ) -> ChangedNodes:
        """Classify walked nodes against one query's filter.

        Entered nodes are added when they now match; exited nodes are removed
        when they used to match; stayed-in nodes are added / removed on a
        matchability transition and reported as reparented / reordered when
        they matched throughout.
        """
        if self.discarded:
            msg = "projection has been discarded"
            raise UsageError(msg)

        result = ChangedNodes()

        def matchable(node: Any) -> ChangeState:
            return self.matchability.change(node, patterns, character_data=character_data)

        for node in self.entered:
            if matchable(node) in (ChangeState.ENTERED, ChangeState.STAYED_IN):
                result.added.append(node)

        for node, movement in self.stayed_in.items():
            state = matchable(node)
            if state is ChangeState.ENTERED:
                result.added.append(node)
            elif state is ChangeState.EXITED:
                result.removed.append(node)
            elif state is ChangeState.STAYED_IN:
                if movement is Movement.REPARENTED:
                    result.reparented.append(node)
                elif movement is Movement.REORDERED:
                    result.reordered.append(node)

        for node in self.exited:
            if matchable(node) in (ChangeState.EXITED, ChangeState.STAYED_IN):
                result.removed.append(node)

        return result

    def _stayed_in_and_matching(
        self,
        node: Any,
        patterns: Sequence[FilterPattern] | None,
        character_data: bool,
    ) -> bool:
        if self.reachability.change(node) is not ChangeState.STAYED_IN:
            return False
        state = self.matchability.change(node, patterns, character_data=character_data)
        return state is ChangeState.STAYED_IN

    def get_attributes_changed(
        self,
        patterns: Sequence[FilterPattern] | None = None,
        attribute_filter: Iterable[str] | None = None,
    ) -> dict[str, list[Any]]:
        """Attribute name -> elements whose value differs from its old value.

        Only nodes that stayed reachable and stayed matching are considered.
        A value changed and then restored within the batch is not reported.

        Args:
            patterns: The query's element filter (None matches everything).
            attribute_filter: Restrict to these names; None means every
                recorded name.
        """
        ledger = self.ledger
        if not ledger.attributes_changes:
            return {}

        wanted = set(attribute_filter) if attribute_filter is not None else None
        result: dict[str, list[Any]] = {}
        for node in ledger.nodes():
            change = ledger.get(node)
            if change is None or not change.attributes:
                continue
            if not self._stayed_in_and_matching(node, patterns, False):
                continue
            for name, old_value in change.attribute_old_values.items():
                if wanted is not None and name not in wanted:
                    continue
                if node.get_attribute(name) == old_value:
                    continue
                result.setdefault(name, []).append(node)
        return result

    def get_old_attribute(self, node: Any, name: str) -> str | None:
        """Value of attribute ``name`` on ``node`` at observation start.

        Raises:
            UsageError: If ``node`` had no attribute records, or none for
                ``name``.
        """
        change = self.ledger.get(node)
        if change is None or not change.attributes:
            msg = "get_old_attribute requested on invalid node"
            raise UsageError(msg)
        if name not in change.attribute_old_values:
            msg = f"get_old_attribute requested for unchanged attribute name: {name}"
            raise UsageError(msg)
        return change.attribute_old_values[name]

    def get_character_data_changed(
        self,
        patterns: Sequence[FilterPattern] | None = None,
        *,
        character_data: bool = False,
    ) -> list[Any]:
        """Text/comment nodes whose payload differs from its old value."""
        ledger = self.ledger
        if not ledger.character_data_changes:
            return []

        result: list[Any] = []
        for node in ledger.nodes():
            change = ledger.get(node)
            if change is None or not change.character_data:
                continue
            if not self._stayed_in_and_matching(node, patterns, character_data):
                continue
            if node.data == change.character_data_old_value:
                continue
            result.append(node)
        return result

    def get_old_character_data(self, node: Any) -> str | None:
        """Payload of ``node`` at observation start.

        Raises:
            UsageError: If ``node`` had no character data records.
        """
        change = self.ledger.get(node)
        if change is None or not change.character_data:
            msg = "get_old_character_data requested on invalid node"
            raise UsageError(msg)
        return change.character_data_old_value
