"""Tree pruner.

Reverses a materialization: removes the files and symlinks a tree
describes and then every directory the tree left empty. Directories that
still hold entries the tree never claimed (another package's files, user
files) are kept, which lets several packages share a prefix.
"""

import logging
import os
from collections.abc import Iterator
from dataclasses import dataclass, field
from pathlib import Path

from spm.filetree.errors import ImpossibleStateError
from spm.filetree.models import DirNode, FileNode, SymLinkNode, Tree, strip_marker

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class PruneSummary:
    """Counts of entries removed by a prune call.

    Attributes:
        directories: Directories removed because they were left empty.
        files: Regular files removed.
        symlinks: Symbolic links removed.
        dry_run: Whether nothing was actually removed.
    """

    directories: int = 0
    files: int = 0
    symlinks: int = 0
    dry_run: bool = False

    @property
    def total(self) -> int:
        """Total number of entries removed."""
        return self.directories + self.files + self.symlinks


@dataclass(slots=True)
class _Level:
    """One directory being pruned.

    Attributes:
        tree: Directory tree whose entries are removed.
        path: Location of that directory on disk.
        children: Entries not visited yet.
        removed: Names of entries that were (or in dry-run would be) removed.
    """

    tree: Tree
    path: Path
    children: Iterator[Tree] = field(init=False)
    removed: set[str] = field(default_factory=set)

    def __post_init__(self) -> None:
        self.children = iter(self.tree.children.values())


class Pruner:
    """Removes Tree graphs from real destinations.

    Missing entries are tolerated. Any other failure aborts the call with
    whatever was already removed left removed.

    Attributes:
        _dry_run: If True, log what would be removed without touching disk.
    """

    def __init__(self, dry_run: bool = False) -> None:
        """Initialize the Pruner.

        Args:
            dry_run: If True, report what would be removed without removing.
        """
        self._dry_run = dry_run

    def prune(self, tree: Tree, destination: str | os.PathLike[str]) -> PruneSummary:
        """Remove the children of ``tree`` from below ``destination``.

        The destination directory itself is never removed.

        Args:
            tree: Directory tree previously materialized at ``destination``.
            destination: Directory the tree was written into.

        Returns:
            PruneSummary with counts of removed entries.

        Raises:
            OSError: If a removal fails for any reason other than absence.
            ImpossibleStateError: If a node is not a known variant.
        """
        summary = PruneSummary(dry_run=self._dry_run)
        self._prune(tree, Path(destination), summary)
        return summary

    def _prune(self, tree: Tree, destination: Path, summary: PruneSummary) -> None:
        """Prune post-order: a directory is judged after all its entries."""
        pending = [_Level(tree, destination)]
        while pending:
            level = pending[-1]
            child = next(level.children, None)
            if child is None:
                pending.pop()
                if pending:
                    self._finish_dir(level, pending[-1], summary)
                continue

            path = level.path / child.name
            node = child.node

            if isinstance(node, DirNode):
                if not os.path.lexists(path):
                    logger.debug("Directory already gone: %s", path)
                    continue
                if not path.is_dir():
                    logger.warning("Skipping %s: expected a directory", path)
                    continue
                pending.append(_Level(child, path))
            elif isinstance(node, (FileNode, SymLinkNode)):
                if not self._remove_entry(path):
                    continue
                if isinstance(node, FileNode):
                    summary.files += 1
                else:
                    summary.symlinks += 1
                level.removed.add(child.name)
            else:
                msg = f"Cannot prune node variant {type(node).__name__} at {path}"
                raise ImpossibleStateError(msg)

    def _finish_dir(self, level: _Level, parent: _Level, summary: PruneSummary) -> None:
        """Remove a fully pruned directory if nothing else is left in it."""
        # A symlink standing in for a directory is traversed, never removed
        if level.path.is_symlink():
            return
        if self._is_empty(level.path, level.removed):
            self._remove_dir(level.path)
            summary.directories += 1
            parent.removed.add(strip_marker(level.tree.name))
        else:
            logger.debug("Keeping non-empty directory %s", level.path)

    def _is_empty(self, path: Path, removed: set[str]) -> bool:
        """Check whether a directory is (or in dry-run would be) empty."""
        with os.scandir(path) as it:
            if self._dry_run:
                return all(entry.name in removed for entry in it)
            return next(it, None) is None

    def _remove_dir(self, path: Path) -> None:
        if self._dry_run:
            logger.info("Dry-run: would remove directory %s", path)
            return
        path.rmdir()
        logger.debug("Removed directory %s", path)

    def _remove_entry(self, path: Path) -> bool:
        """Remove a file or symlink.

        Returns:
            False if there was nothing to remove.
        """
        if self._dry_run:
            if not os.path.lexists(path):
                return False
            logger.info("Dry-run: would remove %s", path)
            return True

        try:
            path.unlink()
        except FileNotFoundError:
            logger.debug("Already removed: %s", path)
            return False
        logger.debug("Removed %s", path)
        return True
