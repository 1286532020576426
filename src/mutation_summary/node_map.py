"""NodeMap: identity-keyed, insertion-ordered mapping from tree nodes to values.

Tree nodes are external objects that may define their own equality (or none at
all) and must not carry engine-specific fields.  Each node is therefore given
a lazily-assigned integer identity tag held in a module-level side table; the
tag is forgotten when the node is garbage collected, so ``id()`` reuse can
never alias two nodes.

Example::

    from mutation_summary.node_map import NodeMap

    seen: NodeMap[bool] = NodeMap()
    seen.set(node, True)
    assert seen.has(node)
    assert seen.keys() == [node]
"""

from __future__ import annotations

import itertools
import weakref
from collections.abc import Iterator
from typing import Any, Generic, TypeVar, overload

V = TypeVar("V")
D = TypeVar("D")

_next_tag = itertools.count(1)

# id(node) -> identity tag.  Entries are removed by a weakref finalizer.
_tags: dict[int, int] = {}


def node_id(node: Any) -> int:
    """Return the stable identity tag of ``node``, assigning one on first use.

    Raises:
        TypeError: If ``node`` does not support weak references.
    """
    key = id(node)
    tag = _tags.get(key)
    if tag is None:
        weakref.finalize(node, _tags.pop, key, None)
        tag = next(_next_tag)
        _tags[key] = tag
    return tag


class NodeMap(Generic[V]):
    """Mapping keyed solely by node identity, enumerated in insertion order.

    Holds a strong reference to every key node for as long as the entry
    exists.  Each projection owns its own maps; nothing is shared between
    instances.
    """

    __slots__ = ("_entries",)

    def __init__(self) -> None:
        self._entries: dict[int, tuple[Any, V]] = {}

    @overload
    def get(self, node: Any) -> V | None: ...

    @overload
    def get(self, node: Any, default: D) -> V | D: ...

    def get(self, node: Any, default: Any = None) -> Any:
        """Value stored for ``node``, or ``default`` when untracked."""
        entry = self._entries.get(node_id(node))
        if entry is None:
            return default
        return entry[1]

    def set(self, node: Any, value: V) -> None:
        tag = node_id(node)
        self._entries[tag] = (node, value)

    def has(self, node: Any) -> bool:
        return node_id(node) in self._entries

    def delete(self, node: Any) -> None:
        """Forget ``node``; a no-op when it is not tracked."""
        self._entries.pop(node_id(node), None)

    def keys(self) -> list[Any]:
        return [node for node, _ in self._entries.values()]

    def values(self) -> list[V]:
        return [value for _, value in self._entries.values()]

    def items(self) -> list[tuple[Any, V]]:
        return list(self._entries.values())

    def __contains__(self, node: object) -> bool:
        return self.has(node)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[Any]:
        return iter(self.keys())

    def __repr__(self) -> str:
        return f"NodeMap({len(self._entries)} nodes)"
