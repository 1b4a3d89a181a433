"""Generic trees of named nodes and the leaves that address their branches."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Generic, Iterator, List, Optional, TypeVar

T = TypeVar("T")

SEPARATOR = "/"
NUM_PLACEHOLDER = "#"


class TreeNode(Generic[T]):
    """Node of a tree: one parent (or none for the root) and any number of children."""

    __slots__ = ("value", "parent", "children")

    def __init__(self, value: T, parent: Optional["TreeNode[T]"] = None) -> None:
        self.value = value
        self.parent = parent
        self.children: List[TreeNode[T]] = []

    def add_child(self, value: T) -> "TreeNode[T]":
        """Append a new child holding ``value`` and return it."""
        node = TreeNode(value, self)
        self.children.append(node)
        return node

    def child(self, index: int) -> "TreeNode[T]":
        """Return the child at ``index``."""
        return self.children[index]

    def is_leaf(self) -> bool:
        """True when the node has no children."""
        return not self.children

    def ancestors(self) -> Iterator["TreeNode[T]"]:
        """Yield this node and then each parent up to the root."""
        node: Optional[TreeNode[T]] = self
        while node is not None:
            yield node
            node = node.parent

    def __repr__(self) -> str:
        return f"TreeNode({self.value!r}, children={len(self.children)})"


class StringTree:
    """Tree whose nodes hold field names."""

    def __init__(self, root_value: str = "") -> None:
        self.root: TreeNode[str] = TreeNode(root_value, None)

    def _lines(self, node: TreeNode[str], indent: int) -> Iterator[str]:
        yield " " * indent + str(node.value)
        for child in node.children:
            yield from self._lines(child, indent + 3)

    def __str__(self) -> str:
        return "".join(line + "\n" for line in self._lines(self.root, 0))


def _format_chain(chain: List[str], index_array: List[int]) -> str:
    indices = iter(index_array)
    parts: List[str] = []
    for name in chain:
        if name == NUM_PLACEHOLDER:
            try:
                number = next(indices)
            except StopIteration:
                raise ValueError("leaf has fewer indices than array placeholders") from None
            parts.append(f".{number}")
        else:
            if parts:
                parts.append(SEPARATOR)
            parts.append(name)
    return "".join(parts)


def _chain_from_root(node: TreeNode[str], skip_root: bool) -> List[str]:
    nodes = list(node.ancestors())
    if skip_root:
        nodes = nodes[:-1]
    return [n.value for n in reversed(nodes)]


@dataclass
class StringTreeLeaf:
    """A terminal node of a StringTree and the indices that replace each '#'.

    The branch ``foo -> # -> bar -> # -> hello -> world`` with indices ``[2, 3]``
    is written as ``foo.2/bar.3/hello/world``.
    """

    node: Optional[TreeNode[str]] = None
    index_array: List[int] = field(default_factory=list)

    def to_str(self) -> str:
        """Return the full path of the branch, from the root to this leaf."""
        if self.node is None:
            raise ValueError("leaf does not point to any node")
        return _format_chain(_chain_from_root(self.node, False), self.index_array)

    def __str__(self) -> str:
        return self.to_str()

    def copy(self) -> "StringTreeLeaf":
        """Return a leaf on the same node with its own copy of the indices."""
        return StringTreeLeaf(self.node, list(self.index_array))


def create_string_from_tree_leaf(leaf: StringTreeLeaf, skip_root: bool = False) -> str:
    """Return the path of ``leaf``, leaving out the root name when ``skip_root``."""
    if leaf.node is None:
        return ""
    return _format_chain(_chain_from_root(leaf.node, skip_root), leaf.index_array)