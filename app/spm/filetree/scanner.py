"""Filesystem tree scanner.

Captures files, directories and symlinks below a set of input paths
into Tree graphs. Symlinks are never followed; absolute link targets are
rewritten relative to the link's own directory so the captured tree can
be replayed under another root.
"""

import logging
import os
import stat
from collections.abc import Iterable

from spm.filetree.errors import UnsupportedFileTypeError
from spm.filetree.models import (
    ROOT_NAME,
    DirNode,
    FileNode,
    SymLinkNode,
    Tree,
    dir_name,
    strip_marker,
)
from spm.filetree.prefix import prefix_segments, wrap_prefix

logger = logging.getLogger(__name__)

# Input names whose contents are merged into the forest root
_FLATTENED_NAMES: frozenset[str] = frozenset({os.curdir, os.pardir, ROOT_NAME})


def _base_name(path: str) -> str:
    """Return the base name of a path, tolerating trailing separators."""
    return os.path.basename(os.path.normpath(path)) or os.sep


class TreeScanner:
    """Builds Tree graphs from paths on disk.

    Scanning is all-or-nothing: the first ``OSError`` or unsupported entry
    aborts the walk and nothing is returned.
    """

    def scan_path(self, path: str | os.PathLike[str]) -> Tree:
        """Capture a single path.

        Directories are walked with an explicit stack, so nesting depth is
        bounded by the filesystem rather than the interpreter.

        Args:
            path: File, symlink or directory to capture.

        Returns:
            A leaf Tree for files and symlinks, or a directory Tree whose
            name carries the directory marker.

        Raises:
            UnsupportedFileTypeError: If an entry is a device, socket or FIFO.
            OSError: If any filesystem call fails.
        """
        path = os.fspath(path)
        root = self._scan_entry(path, _base_name(path))

        pending = [(path, root)] if root.is_dir else []
        while pending:
            dir_path, tree = pending.pop()
            with os.scandir(dir_path) as it:
                entries = sorted(entry.name for entry in it)

            for entry in entries:
                entry_path = os.path.join(dir_path, entry)
                child = tree.add_child(self._scan_entry(entry_path, entry))
                if child.is_dir:
                    pending.append((entry_path, child))

            logger.debug("Scanned %s (%d entries)", dir_path, len(entries))

        return root

    def _scan_entry(self, path: str, name: str) -> Tree:
        """Capture one entry; directories come back without children."""
        st = os.lstat(path)

        if stat.S_ISLNK(st.st_mode):
            return Tree(name=name, node=SymLinkNode(target=self._read_link(path)))

        if stat.S_ISREG(st.st_mode):
            with open(path, "rb") as f:
                content = f.read()
            return Tree(name=name, node=FileNode(content=content, mode=stat.S_IMODE(st.st_mode)))

        if stat.S_ISDIR(st.st_mode):
            return Tree(name=dir_name(name), node=DirNode())

        raise UnsupportedFileTypeError(path, st.st_mode)

    def _read_link(self, path: str) -> str:
        """Read a symlink target, rewriting absolute targets as relative.

        The relative form is computed against the absolute path of the
        directory containing the link.
        """
        target = os.readlink(path)
        if os.path.isabs(target):
            link_dir = os.path.dirname(os.path.abspath(path))
            relative = os.path.relpath(target, link_dir)
            logger.debug("Rewrote symlink %s: %s -> %s", path, target, relative)
            target = relative
        return target

    def build_forest(self, paths: Iterable[str | os.PathLike[str]]) -> dict[str, Tree]:
        """Scan several paths into one mapping of top-level trees.

        A path naming the current, parent or filesystem root directory
        (``.``, ``..``, ``/``) contributes its entries directly instead of a
        wrapping directory.
        When two roots share a name the later one replaces the earlier.

        Args:
            paths: Input paths, scanned in order.

        Returns:
            Top-level trees keyed by name.
        """
        forest: dict[str, Tree] = {}

        for path in paths:
            tree = self.scan_path(path)

            if tree.is_dir and strip_marker(tree.name) in _FLATTENED_NAMES:
                incoming = list(tree.children.values())
            else:
                incoming = [tree]

            for child in incoming:
                if child.name in forest:
                    logger.warning("%s replaces an earlier entry of the same name", child.name)
                forest[child.name] = child

        return forest

    def build(self, paths: Iterable[str | os.PathLike[str]], prefix: str = "/") -> Tree:
        """Scan paths and nest them under ``prefix``.

        Args:
            paths: Input paths.
            prefix: Absolute directory the forest is installed under.

        Returns:
            Root Tree ready to be encoded.

        Raises:
            InvalidPrefixError: If the prefix is invalid.
        """
        prefix_segments(prefix)
        forest = self.build_forest(paths)
        logger.debug("Captured %d top-level entries", len(forest))
        return wrap_prefix(forest, prefix)
