"""Tree materializer.

Writes a captured tree onto a destination directory: directories are
created (or reused), files are written and given their stored permission
bits, symlinks are created with their stored relative targets.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from spm.filetree.errors import ImpossibleStateError
from spm.filetree.models import DirNode, FileNode, SymLinkNode, Tree

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class MaterializeSummary:
    """Counts of entries written by a materialize call.

    Attributes:
        directories: Directories created or found already present.
        files: Regular files written.
        symlinks: Symbolic links created.
        dry_run: Whether nothing was actually written.
    """

    directories: int = 0
    files: int = 0
    symlinks: int = 0
    dry_run: bool = False

    @property
    def total(self) -> int:
        """Total number of entries handled."""
        return self.directories + self.files + self.symlinks


class Materializer:
    """Writes Tree graphs onto real destinations.

    The first failure at any depth aborts the whole call. Work already done
    is left in place.

    Attributes:
        _dry_run: If True, log what would be written without touching disk.
    """

    def __init__(self, dry_run: bool = False) -> None:
        """Initialize the Materializer.

        Args:
            dry_run: If True, report what would be written without writing.
        """
        self._dry_run = dry_run

    def materialize(self, tree: Tree, destination: str | os.PathLike[str]) -> MaterializeSummary:
        """Write the children of ``tree`` below ``destination``.

        The tree's own name is not used: a root tree named ``/`` is laid
        directly onto the destination.

        Args:
            tree: Directory tree to write.
            destination: Existing directory to write into.

        Returns:
            MaterializeSummary with counts of written entries.

        Raises:
            OSError: If any filesystem call fails.
            ImpossibleStateError: If a node is not a known variant.
        """
        summary = MaterializeSummary(dry_run=self._dry_run)
        self._materialize(tree, Path(destination), summary)
        return summary

    def _materialize(self, tree: Tree, destination: Path, summary: MaterializeSummary) -> None:
        """Write entries depth-first, parents before their children."""
        # Reversed so the stack pops entries in stored order
        pending = [(destination / child.name, child) for child in reversed(tree.children.values())]
        while pending:
            path, child = pending.pop()
            node = child.node

            if isinstance(node, DirNode):
                self._ensure_dir(path)
                summary.directories += 1
                pending.extend((path / sub.name, sub) for sub in reversed(child.children.values()))
            elif isinstance(node, FileNode):
                self._write_file(path, node)
                summary.files += 1
            elif isinstance(node, SymLinkNode):
                self._create_symlink(path, node)
                summary.symlinks += 1
            else:
                msg = f"Cannot materialize node variant {type(node).__name__} at {path}"
                raise ImpossibleStateError(msg)

    def _ensure_dir(self, path: Path) -> None:
        """Create a directory, accepting one that already exists."""
        if self._dry_run:
            logger.info("Dry-run: would create directory %s", path)
            return

        try:
            path.mkdir()
            logger.debug("Created directory %s", path)
        except FileExistsError:
            # Existing directories (or symlinks to one) are shared, anything else is in the way
            if not path.is_dir():
                raise

    def _write_file(self, path: Path, node: FileNode) -> None:
        """Write file content, then apply the stored permission bits."""
        if self._dry_run:
            logger.info("Dry-run: would write %s (%d bytes, mode %o)", path, len(node.content), node.mode)
            return

        with open(path, "wb") as f:
            f.write(node.content)
        os.chmod(path, node.mode)
        logger.debug("Wrote %s (%d bytes, mode %o)", path, len(node.content), node.mode)

    def _create_symlink(self, path: Path, node: SymLinkNode) -> None:
        """Create a symlink; an occupied path is an error."""
        if self._dry_run:
            logger.info("Dry-run: would link %s -> %s", path, node.target)
            return

        os.symlink(node.target, path)
        logger.debug("Linked %s -> %s", path, node.target)
