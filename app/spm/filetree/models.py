"""Node model for captured filesystem trees.

A Tree is one entry of a captured filesystem subtree. Its ``node`` is one
of three variants (file, directory, symlink) and directories own their
children in a plain mapping keyed by each child's name.
"""

from __future__ import annotations

import os
from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum

from spm.filetree.errors import ImpossibleStateError

# Directory names carry a trailing separator so "lib/" and "lib" never collide
DIR_MARKER = os.sep

# Name of the synthetic root every persisted tree hangs from
ROOT_NAME = "/"


class NodeKind(str, Enum):
    """Kind of filesystem entry held by a Tree.

    Attributes:
        FILE: Regular file with content and permission bits.
        DIR: Directory; its entries live in ``Tree.children``.
        SYMLINK: Symbolic link with a relative target.
    """

    FILE = "file"
    DIR = "dir"
    SYMLINK = "symlink"


@dataclass(frozen=True, slots=True)
class FileNode:
    """Regular file payload.

    Attributes:
        content: File bytes, verbatim.
        mode: Permission bits of the source file (``stat.S_IMODE``).
    """

    content: bytes
    mode: int = 0o644


@dataclass(frozen=True, slots=True)
class DirNode:
    """Directory marker. Carries no payload."""


@dataclass(frozen=True, slots=True)
class SymLinkNode:
    """Symbolic link payload.

    Attributes:
        target: Link target, relative to the directory holding the link.
    """

    target: str


Node = FileNode | DirNode | SymLinkNode


def dir_name(name: str) -> str:
    """Return ``name`` with the directory marker appended."""
    return name if name.endswith(DIR_MARKER) else name + DIR_MARKER


def strip_marker(name: str) -> str:
    """Return ``name`` without a trailing directory marker."""
    if name != ROOT_NAME and name.endswith(DIR_MARKER):
        return name[: -len(DIR_MARKER)]
    return name


def is_entry_name(name: str, *, directory: bool = False) -> bool:
    """Check that ``name`` is a single path component.

    Directory names may carry one trailing marker. Empty names, ``.``,
    ``..``, NUL bytes and embedded separators are rejected.
    """
    base = name[: -len(DIR_MARKER)] if directory and name.endswith(DIR_MARKER) else name
    if base in ("", os.curdir, os.pardir) or "\0" in base:
        return False
    if os.sep in base:
        return False
    return not (os.altsep and os.altsep in base)


@dataclass(slots=True)
class Tree:
    """A node in a captured filesystem graph.

    Attributes:
        name: Base name of the entry. Directory names end in ``DIR_MARKER``.
        node: The entry's variant payload.
        children: Child trees keyed by their own ``name`` (directories only).
    """

    name: str
    node: Node
    children: dict[str, Tree] = field(default_factory=dict)

    def __post_init__(self) -> None:
        """Validate tree data after initialization."""
        if not self.name:
            msg = "Tree name cannot be empty"
            raise ValueError(msg)
        if self.children and not isinstance(self.node, DirNode):
            msg = f"Only directories can have children: {self.name}"
            raise ValueError(msg)
        for key, child in self.children.items():
            if key != child.name:
                msg = f"Child key {key!r} does not match child name {child.name!r}"
                raise ValueError(msg)
            if not is_entry_name(child.name, directory=child.is_dir):
                msg = f"Invalid entry name {child.name!r} in {self.name}"
                raise ValueError(msg)

    @property
    def kind(self) -> NodeKind:
        """Variant of this tree's node.

        Raises:
            ImpossibleStateError: If the node is not a known variant.
        """
        if isinstance(self.node, FileNode):
            return NodeKind.FILE
        if isinstance(self.node, DirNode):
            return NodeKind.DIR
        if isinstance(self.node, SymLinkNode):
            return NodeKind.SYMLINK
        msg = f"Unknown node variant {type(self.node).__name__} for {self.name}"
        raise ImpossibleStateError(msg)

    @property
    def is_dir(self) -> bool:
        """Check if this tree is a directory."""
        return isinstance(self.node, DirNode)

    def add_child(self, child: Tree) -> Tree:
        """Attach ``child`` under its own name, replacing any previous entry.

        Args:
            child: Tree to attach.

        Returns:
            The attached child.

        Raises:
            ValueError: If this tree is not a directory or the child name
                is not a single path component.
        """
        if not self.is_dir:
            msg = f"Cannot add children to non-directory {self.name}"
            raise ValueError(msg)
        if not is_entry_name(child.name, directory=child.is_dir):
            msg = f"Invalid entry name {child.name!r} in {self.name}"
            raise ValueError(msg)
        self.children[child.name] = child
        return child

    def walk(self, parent: str = "") -> Iterator[tuple[str, Tree]]:
        """Yield ``(relative_path, tree)`` for every descendant, depth-first.

        Paths are built from the children's names, so directory paths keep
        their trailing marker. The tree itself is not yielded.
        """
        pending = [(parent, self)]
        while pending:
            prefix, tree = pending.pop()
            # Reversed so the stack pops children in name order
            for name in sorted(tree.children, reverse=True):
                child = tree.children[name]
                pending.append((prefix + child.name, child))
            if tree is not self:
                yield prefix, tree

    def file_count(self) -> int:
        """Count regular files in this tree."""
        count = 1 if isinstance(self.node, FileNode) else 0
        return count + sum(1 for _, child in self.walk() if isinstance(child.node, FileNode))

    def total_size(self) -> int:
        """Sum of the content sizes of every regular file in this tree."""
        total = len(self.node.content) if isinstance(self.node, FileNode) else 0
        for _, child in self.walk():
            if isinstance(child.node, FileNode):
                total += len(child.node.content)
        return total
