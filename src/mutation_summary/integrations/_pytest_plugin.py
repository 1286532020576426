"""pytest plugin for mutation-summary.

Auto-discovered by pytest via the pytest11 entry point declared in pyproject.toml.
When the package is installed (even in editable mode), pytest discovers this plugin
automatically -- no conftest.py changes are needed.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

import pytest

from mutation_summary.summary import Summary
from mutation_summary.tree.recorder import MutationRecorder

_UNCHECKED: Any = object()


def _same_nodes(actual: Iterable[Any] | None, expected: Iterable[Any]) -> bool:
    if actual is None:
        return False
    return sorted(map(id, actual)) == sorted(map(id, expected))


def _describe(nodes: Iterable[Any] | None) -> str:
    if nodes is None:
        return "None"
    return "[" + ", ".join(_label(node) for node in nodes) + "]"


def _label(node: Any) -> str:
    tag_name = getattr(node, "tag_name", "")
    if tag_name:
        node_id = node.get_attribute("id")
        return f"<{tag_name}#{node_id}>" if node_id else f"<{tag_name}>"
    return repr(getattr(node, "data", node))


@pytest.fixture
def mutation_recorder() -> MutationRecorder:
    """A fresh, unconnected MutationRecorder."""
    return MutationRecorder()


@pytest.fixture(scope="session")
def assert_summary() -> Any:
    """Fixture that returns a callable Summary asserter.

    Nodes are compared by identity and regardless of order.  ``added`` and
    ``removed`` are always checked (and default to empty); every other field
    is checked only when passed.

    Usage in tests::

        def test_append(mutation_recorder, assert_summary):
            ...
            assert_summary(summaries[0], added=[paragraph])

    Returns:
        A callable ``_assert(summary, *, added=(), removed=(), reparented=...,
        reordered=..., attribute_changed=..., character_data_changed=...,
        value_changed=...) -> None`` raising ``AssertionError`` on mismatch.
    """

    def _assert(
        summary: Summary,
        *,
        added: Iterable[Any] = (),
        removed: Iterable[Any] = (),
        reparented: Iterable[Any] = _UNCHECKED,
        reordered: Iterable[Any] = _UNCHECKED,
        attribute_changed: Mapping[str, Iterable[Any]] = _UNCHECKED,
        character_data_changed: Iterable[Any] = _UNCHECKED,
        value_changed: Iterable[Any] = _UNCHECKED,
    ) -> None:
        problems: list[str] = []
        expectations = {
            "added": added,
            "removed": removed,
            "reparented": reparented,
            "reordered": reordered,
            "character_data_changed": character_data_changed,
            "value_changed": value_changed,
        }
        for name, expected in expectations.items():
            if expected is _UNCHECKED:
                continue
            expected = list(expected)
            actual = getattr(summary, name)
            if not _same_nodes(actual, expected):
                problems.append(
                    f"  {name}: expected {_describe(expected)}, got {_describe(actual)}"
                )

        if attribute_changed is not _UNCHECKED:
            actual_map = summary.attribute_changed
            expected_map = {name: list(nodes) for name, nodes in attribute_changed.items()}
            if actual_map is None:
                problems.append("  attribute_changed: not tracked by this query")
            elif set(actual_map) != set(expected_map) or any(
                not _same_nodes(actual_map[name], nodes)
                for name, nodes in expected_map.items()
            ):
                expected_text = {k: _describe(v) for k, v in expected_map.items()}
                actual_text = {k: _describe(v) for k, v in actual_map.items()}
                problems.append(
                    f"  attribute_changed: expected {expected_text}, got {actual_text}"
                )

        if problems:
            raise AssertionError(
                f"Summary for {summary.query!r} does not match:\n" + "\n".join(problems)
            )

    return _assert
