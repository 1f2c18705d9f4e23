"""Terminal rendering of captured trees."""

from rich.markup import escape
from rich.tree import Tree as RichTree

from spm.filetree.errors import ImpossibleStateError
from spm.filetree.models import DirNode, FileNode, SymLinkNode, Tree
from spm.utils.formatting import format_size


def _label(tree: Tree) -> str:
    """Build the Rich markup label for one entry."""
    node = tree.node
    name = escape(tree.name)
    if isinstance(node, DirNode):
        return f"[tree.dir]{name}[/]"
    if isinstance(node, FileNode):
        return f"{name} [tree.size]{{{format_size(len(node.content))}}}[/]"
    if isinstance(node, SymLinkNode):
        return f"{name} [tree.link]-> {escape(node.target)}[/]"
    msg = f"Cannot render node variant {type(node).__name__} for {tree.name}"
    raise ImpossibleStateError(msg)


def _sort_key(tree: Tree) -> tuple[bool, str]:
    # Directories first, then by name
    return (not tree.is_dir, tree.name)


def render_tree(tree: Tree) -> RichTree:
    """Build a Rich tree view of a captured tree.

    Directories are highlighted, files show their size and symlinks show
    their target.

    Raises:
        ImpossibleStateError: If a node is not a known variant.
    """
    root = RichTree(_label(tree), guide_style="border")
    pending = [(root, tree)]
    while pending:
        branch, current = pending.pop()
        for child in sorted(current.children.values(), key=_sort_key):
            sub = branch.add(_label(child))
            if child.is_dir:
                pending.append((sub, child))
    return root
