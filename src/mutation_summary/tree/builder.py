"""TreeBuilder: converts JSON-like literals into a live TreeNode tree.

Uses recursive dispatch to convert strings, mappings and lists into
TreeNode objects:

- ``"some text"``                                    -> TEXT node
- ``{"text": "..."}``                                -> TEXT node
- ``{"comment": "..."}``                             -> COMMENT node
- ``{"tag": "div", "attributes": {...}, "children": [...]}`` -> ELEMENT node
- ``[...]``                                          -> OTHER node (fragment) holding the items

Tag names are normalized via NameNormalizer (upper-cased); attribute names
are validated.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from mutation_summary.tree.nodes import NodeKind, TreeNode
from mutation_summary.names import NameNormalizer

# Module-level normalizer (stateless, safe to share across all TreeBuilder instances)
_normalizer = NameNormalizer()

_ELEMENT_KEYS = frozenset({"tag", "attributes", "children"})


@dataclass
class TreeBuilder:
    """Converts a JSON-like literal into a TreeNode tree.

    Example::
        builder = TreeBuilder()
        root = builder.build(
            {"tag": "div", "attributes": {"id": "a"}, "children": ["hello"]}
        )
        # root: ELEMENT(DIV, id=a) -> TEXT("hello")
    """

    def build(self, value: Any) -> TreeNode:
        """Convert a literal to a TreeNode tree.

        Args:
            value: A string, mapping or list as described in the module docstring.

        Returns:
            The root TreeNode of the new (detached) tree.

        Raises:
            TypeError: If value (or any nested value) has an unsupported shape.
        """
        if isinstance(value, str):
            return TreeNode(kind=NodeKind.TEXT, data=value)

        if isinstance(value, Mapping):
            return self._build_mapping(value)

        if isinstance(value, list):
            return TreeNode(
                kind=NodeKind.OTHER, children=[self.build(item) for item in value]
            )

        raise TypeError(f"Unsupported tree literal type: {type(value)!r}")

    def _build_mapping(self, value: Mapping[str, Any]) -> TreeNode:
        if "text" in value and len(value) == 1:
            return TreeNode(kind=NodeKind.TEXT, data=str(value["text"]))

        if "comment" in value and len(value) == 1:
            return TreeNode(kind=NodeKind.COMMENT, data=str(value["comment"]))

        if "tag" in value and set(value) <= _ELEMENT_KEYS:
            return self._build_element(value)

        raise TypeError(f"Unsupported tree literal keys: {sorted(value)!r}")

    def _build_element(self, value: Mapping[str, Any]) -> TreeNode:
        """Build an ELEMENT node and its children.

        Args:
            value: Mapping with a "tag" key and optional "attributes" and
                "children" keys.

        Returns:
            An ELEMENT TreeNode owning the converted children.
        """
        attributes: dict[str, str] = {}
        for name, attr_value in dict(value.get("attributes") or {}).items():
            try:
                attributes[_normalizer.attribute(name)] = str(attr_value)
            except ValueError as exc:
                raise TypeError(str(exc)) from exc

        children = [self.build(child) for child in value.get("children") or []]
        return TreeNode(
            kind=NodeKind.ELEMENT,
            tag_name=str(value["tag"]),
            attributes=attributes,
            children=children,
        )

    @staticmethod
    def index(root: TreeNode) -> dict[str, TreeNode]:
        """Map each element's ``id`` attribute to the element, in document order.

        ``root`` itself is included when it carries an id.  Later duplicates
        do not replace earlier ones.
        """
        result: dict[str, TreeNode] = {}
        for node in [root, *root.iter_descendants()]:
            node_id = node.get_attribute("id")
            if node_id is not None and node_id not in result:
                result[node_id] = node
        return result
