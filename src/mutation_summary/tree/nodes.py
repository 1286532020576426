"""TreeNode dataclass and NodeKind StrEnum for an in-memory live tree.

Provides a small reference implementation of the ``NodeLike`` protocol used by
TreeBuilder, MutationRecorder and the test-suite.  Hosts with their own tree
type do not need this module.
"""

from __future__ import annotations

import weakref
from dataclasses import dataclass, field
from enum import StrEnum, auto

from mutation_summary.names import NameNormalizer

_normalizer = NameNormalizer()


class NodeKind(StrEnum):
    """Enumeration of the four node kinds in a live tree.

    StrEnum values are the lowercased member names:
    - ELEMENT  -> "element" : tagged container with attributes and children
    - TEXT     -> "text"    : character data leaf
    - COMMENT  -> "comment" : comment leaf (character data, never matched by tag)
    - OTHER    -> "other"   : anything else (documents, fragments, ...)
    """

    ELEMENT = auto()
    TEXT = auto()
    COMMENT = auto()
    OTHER = auto()


@dataclass(slots=True, eq=False, weakref_slot=True)
class TreeNode:
    """A node in a live, single-parented tree.

    Nodes compare by identity (``eq=False``) and hold only weak references to
    their parent and siblings.  Children passed to the constructor are adopted.
    ``children`` is read-only by convention: edit through ``insert_before`` and
    ``remove_child`` so the sibling links stay in step.

    Attributes:
        kind:        Which kind of node this is (see NodeKind).
        tag_name:    Upper-cased tag for ELEMENT nodes; empty for all others.
        attributes:  Attribute map for ELEMENT nodes.  Must use
                     field(default_factory=dict) so instances never share it.
        data:        Payload of TEXT and COMMENT nodes; empty for all others.
        children:    Ordered child nodes.
    """

    kind: NodeKind
    tag_name: str = ""
    attributes: dict[str, str] = field(default_factory=dict)
    data: str = ""
    children: list[TreeNode] = field(default_factory=list)
    _parent: weakref.ReferenceType[TreeNode] | None = field(
        default=None, init=False, repr=False
    )
    _previous: weakref.ReferenceType[TreeNode] | None = field(
        default=None, init=False, repr=False
    )
    _next: weakref.ReferenceType[TreeNode] | None = field(
        default=None, init=False, repr=False
    )

    def __post_init__(self) -> None:
        if self.kind == NodeKind.ELEMENT:
            self.tag_name = _normalizer.tag(self.tag_name)
        children, self.children = self.children, []
        for child in children:
            self.append_child(child)

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    @property
    def parent(self) -> TreeNode | None:
        """The current parent, or None for a detached node."""
        if self._parent is None:
            return None
        return self._parent()

    @property
    def first_child(self) -> TreeNode | None:
        return self.children[0] if self.children else None

    @property
    def last_child(self) -> TreeNode | None:
        return self.children[-1] if self.children else None

    @property
    def previous_sibling(self) -> TreeNode | None:
        return None if self._previous is None else self._previous()

    @property
    def next_sibling(self) -> TreeNode | None:
        return None if self._next is None else self._next()

    def index_of(self, child: TreeNode) -> int:
        """Position of ``child`` among this node's children (by identity).

        Raises:
            ValueError: If ``child`` is not a child of this node.
        """
        for index, candidate in enumerate(self.children):
            if candidate is child:
                return index
        msg = f"{child!r} is not a child of {self!r}"
        raise ValueError(msg)

    def contains(self, other: TreeNode | None) -> bool:
        """True if ``other`` is this node or one of its descendants."""
        while other is not None:
            if other is self:
                return True
            other = other.parent
        return False

    def iter_descendants(self) -> list[TreeNode]:
        """All descendants in document (pre-)order, excluding this node."""
        result: list[TreeNode] = []
        stack = list(reversed(self.children))
        while stack:
            node = stack.pop()
            result.append(node)
            stack.extend(reversed(node.children))
        return result

    # ------------------------------------------------------------------
    # Attributes and character data
    # ------------------------------------------------------------------

    def get_attribute(self, name: str) -> str | None:
        """Current value of attribute ``name``, or None when absent."""
        return self.attributes.get(name)

    def has_attribute(self, name: str) -> bool:
        return name in self.attributes

    @property
    def text_content(self) -> str:
        """Concatenated text of this node and its descendants."""
        if self.kind in (NodeKind.TEXT, NodeKind.COMMENT):
            return self.data
        return "".join(
            node.data for node in self.iter_descendants() if node.kind == NodeKind.TEXT
        )

    # ------------------------------------------------------------------
    # Raw structural edits (no change records; see MutationRecorder)
    # ------------------------------------------------------------------

    def insert_before(self, child: TreeNode, reference: TreeNode | None) -> TreeNode:
        """Insert ``child`` before ``reference`` (append when None).

        A child that already has a parent is detached from it first.
        """
        if child.contains(self):
            msg = "cannot insert a node into its own subtree"
            raise ValueError(msg)
        if child.parent is not None:
            child.parent.remove_child(child)
        index = len(self.children) if reference is None else self.index_of(reference)
        previous = self.children[index - 1] if index > 0 else None
        self.children.insert(index, child)
        child._parent = weakref.ref(self)
        _link(previous, child)
        _link(child, reference)
        return child

    def append_child(self, child: TreeNode) -> TreeNode:
        return self.insert_before(child, None)

    def remove_child(self, child: TreeNode) -> TreeNode:
        del self.children[self.index_of(child)]
        _link(child.previous_sibling, child.next_sibling)
        child._parent = child._previous = child._next = None
        return child


def _link(previous: TreeNode | None, following: TreeNode | None) -> None:
    if previous is not None:
        previous._next = None if following is None else weakref.ref(following)
    if following is not None:
        following._previous = None if previous is None else weakref.ref(previous)


def element(
    tag_name: str,
    attributes: dict[str, str] | None = None,
    *children: TreeNode,
) -> TreeNode:
    """Create an ELEMENT node, adopting ``children`` in order."""
    return TreeNode(
        kind=NodeKind.ELEMENT,
        tag_name=tag_name,
        attributes=dict(attributes or {}),
        children=list(children),
    )


def text(data: str) -> TreeNode:
    """Create a TEXT node."""
    return TreeNode(kind=NodeKind.TEXT, data=data)


def comment(data: str) -> TreeNode:
    """Create a COMMENT node."""
    return TreeNode(kind=NodeKind.COMMENT, data=data)
