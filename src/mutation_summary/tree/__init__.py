"""Tree subpackage: a reference live tree and change source.

Re-exports the public API for the tree module:
- TreeNode: dataclass representing a node in a live tree
- NodeKind: StrEnum of the four node kinds (ELEMENT, TEXT, COMMENT, OTHER)
- NameNormalizer: normalizes tag names and validates attribute names
- TreeBuilder: converts plain dict/list/str descriptions into TreeNode trees
- MutationRecorder: edits a TreeNode tree and records the changes
"""

from mutation_summary.names import NameNormalizer
from mutation_summary.tree.builder import TreeBuilder
from mutation_summary.tree.nodes import NodeKind, TreeNode, comment, element, text
from mutation_summary.tree.recorder import MutationRecorder

__all__ = [
    "MutationRecorder",
    "NameNormalizer",
    "NodeKind",
    "TreeBuilder",
    "TreeNode",
    "comment",
    "element",
    "text",
]
