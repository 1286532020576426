"""Matchability oracle: did / does a node satisfy the declared filter.

Three modes:

- ``patterns=None``: no element filter, every node STAYED_IN.
- ``character_data=True``: text and comment nodes STAYED_IN, everything else
  STAYED_OUT.
- Pattern mode: non-element nodes STAYED_OUT; elements are checked against
  every pattern and the per-pattern states are folded with
  ``combine_matchability``.

Current values come from the node as it stands now.  Old values come from
the ledger's recorded attribute old values and default to the current value
when the attribute was never changed in the batch.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from mutation_summary.ledger import ChangeLedger
from mutation_summary.node_map import NodeMap
from mutation_summary.patterns import FilterPattern
from mutation_summary.states import ChangeState, combine_matchability
from mutation_summary.tree.nodes import NodeKind

_CHARACTER_DATA_KINDS = frozenset({NodeKind.TEXT, NodeKind.COMMENT})


def pattern_matches(
    pattern: FilterPattern,
    tag_name: str,
    attr_value: str | None,
    class_value: str | None,
) -> bool:
    """Check one pattern against a tag and the relevant attribute values.

    Args:
        pattern: The compiled clause.
        tag_name: Upper-cased tag of the candidate element.
        attr_value: Value of ``pattern.attr_name`` (None when absent).
        class_value: Value of the ``class`` attribute (None when absent).
    """
    if pattern.tag_name != "*" and pattern.tag_name != tag_name:
        return False

    if pattern.attr_name:
        if attr_value is None:
            return False
        if pattern.attr_value is not None and pattern.attr_value != attr_value:
            return False

    if pattern.class_name:
        if not class_value:
            return False
        return pattern.class_name in class_value.split()

    return True


class MatchabilityOracle:
    """Memoized matchability transitions for one batch.

    Per-pattern results are cached by canonical pattern name, so queries
    that share a clause share its cache.
    """

    __slots__ = ("_caches", "_ledger")

    def __init__(self, ledger: ChangeLedger) -> None:
        self._ledger = ledger
        self._caches: dict[str, NodeMap[ChangeState]] = {}

    def change(
        self,
        node: Any,
        patterns: Sequence[FilterPattern] | None,
        *,
        character_data: bool = False,
    ) -> ChangeState:
        """Matchability transition of ``node`` for the given filter mode."""
        if character_data:
            if node.kind in _CHARACTER_DATA_KINDS:
                return ChangeState.STAYED_IN
            return ChangeState.STAYED_OUT

        if patterns is None:
            return ChangeState.STAYED_IN

        if node.kind != NodeKind.ELEMENT:
            return ChangeState.STAYED_OUT

        return combine_matchability(
            self.pattern_change(node, pattern) for pattern in patterns
        )

    def pattern_change(self, element: Any, pattern: FilterPattern) -> ChangeState:
        """Transition of ``element`` with respect to a single pattern."""
        cache = self._caches.get(pattern.name)
        if cache is None:
            cache = self._caches[pattern.name] = NodeMap()

        result = cache.get(element)
        if result is not None:
            return result

        change = self._ledger.get(element)
        old_values = change.attribute_old_values if change is not None else {}

        attr_value = element.get_attribute(pattern.attr_name) if pattern.attr_name else None
        class_value = element.get_attribute("class") if pattern.class_name else None
        is_matching = pattern_matches(pattern, element.tag_name, attr_value, class_value)

        uses_old_values = False
        if pattern.attr_name and pattern.attr_name in old_values:
            attr_value = old_values[pattern.attr_name]
            uses_old_values = True
        if pattern.class_name and "class" in old_values:
            class_value = old_values["class"]
            uses_old_values = True

        was_matching = (
            pattern_matches(pattern, element.tag_name, attr_value, class_value)
            if uses_old_values
            else is_matching
        )

        result = ChangeState.of(was_matching, is_matching)
        cache.set(element, result)
        return result
