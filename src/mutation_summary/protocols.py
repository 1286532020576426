"""Structural protocols for the tree and change-notification collaborators.

The projection engine never imports a concrete tree type.  Any node class
exposing the ``NodeLike`` surface can be projected, and any notification source
exposing ``observe`` / ``disconnect`` can drive a ``MutationSummary``.

Example::

    from mutation_summary.protocols import NodeLike
    from mutation_summary.tree import TreeBuilder

    root = TreeBuilder().build({"tag": "div"})
    assert isinstance(root, NodeLike)  # structural conformance, no subclassing
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from mutation_summary.observer import ObserverOptions
    from mutation_summary.records import MutationRecord
    from mutation_summary.tree.nodes import NodeKind


@runtime_checkable
class NodeLike(Protocol):
    """Read-only view of a live tree node.

    Implementations must compare by identity and support weak references.
    ``tag_name`` is upper-case for element nodes; ``data`` is the payload of
    text and comment nodes.
    """

    @property
    def kind(self) -> NodeKind: ...

    @property
    def tag_name(self) -> str: ...

    @property
    def data(self) -> str: ...

    @property
    def parent(self) -> Any: ...

    @property
    def children(self) -> Sequence[Any]: ...

    @property
    def previous_sibling(self) -> Any: ...

    @property
    def next_sibling(self) -> Any: ...

    def get_attribute(self, name: str) -> str | None: ...


@runtime_checkable
class MutationSource(Protocol):
    """A subscription delivering batches of mutation records for one root."""

    def observe(
        self,
        root: Any,
        options: ObserverOptions,
        callback: Callable[[list[MutationRecord]], Any],
    ) -> None: ...

    def disconnect(self) -> None: ...
