"""Deterministic tree and batch generators for performance benchmarks.

All generators produce fixed, reproducible trees and edit sequences.  No
random values.  Three tiers: 100, 1,000 and 10,000 node trees, each edited by
a batch touching about a tenth of its nodes.
"""

from __future__ import annotations

from typing import Any

import pytest

from mutation_summary.observer import ObserverOptions
from mutation_summary.records import MutationRecord
from mutation_summary.tree.nodes import TreeNode, element, text
from mutation_summary.tree.recorder import MutationRecorder

_WATCH_ALL = ObserverOptions(
    attributes=True,
    attribute_old_value=True,
    character_data=True,
    character_data_old_value=True,
)


def generate_tree(sections: int, items: int) -> TreeNode:
    """A BODY holding ``sections`` SECTIONs of ``items`` LI elements each."""
    return element(
        "body",
        None,
        *(
            element(
                "section",
                {"id": f"s{i}"},
                *(
                    element("li", {"class": "item" if j % 2 else "item odd"}, text(f"{i}.{j}"))
                    for j in range(items)
                ),
            )
            for i in range(sections)
        ),
    )


def _edit_batch(sections: int, items: int) -> tuple[TreeNode, list[MutationRecord]]:
    """Build a tree and a mixed batch of structural, attribute and text edits."""
    root = generate_tree(sections, items)
    recorder = MutationRecorder()
    recorder.observe(root, _WATCH_ALL, lambda records: None)
    for index, section in enumerate(root.children):
        if index % 10 == 0:
            # Move the last item to the front.
            recorder.insert_before(section, section.last_child, section.first_child)
        elif index % 10 == 3:
            recorder.set_attribute(section.children[0], "class", "item selected")
        elif index % 10 == 5:
            recorder.append_child(section, element("li", {"class": "item new"}))
        elif index % 10 == 7:
            recorder.set_data(section.children[0].children[0], "edited")
        elif index % 10 == 9 and index > 0:
            recorder.append_child(root.children[index - 1], section.children[0])
    return root, recorder.take_records()


# --- Fixtures for each size tier ---


@pytest.fixture
def batch_100() -> tuple[Any, list[MutationRecord]]:
    """10 sections x 10 items."""
    return _edit_batch(10, 10)


@pytest.fixture
def batch_1000() -> tuple[Any, list[MutationRecord]]:
    """50 sections x 20 items."""
    return _edit_batch(50, 20)


@pytest.fixture
def batch_10000() -> tuple[Any, list[MutationRecord]]:
    """200 sections x 50 items."""
    return _edit_batch(200, 50)


def _reversal_batch(size: int) -> tuple[TreeNode, list[MutationRecord]]:
    """Reverse ``size`` siblings in place, one move per node."""
    items = [element("li", {"id": f"i{j}"}) for j in range(size)]
    root = element("ul", None, *items)
    recorder = MutationRecorder()
    recorder.observe(root, _WATCH_ALL, lambda records: None)
    for item in items[1:]:
        recorder.insert_before(root, item, root.first_child)
    return root, recorder.take_records()


@pytest.fixture
def reversal_1000() -> tuple[Any, list[MutationRecord]]:
    """1,000 siblings, 999 of them moved."""
    return _reversal_batch(1000)
