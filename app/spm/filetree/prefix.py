"""Prefix synthesis for captured forests.

Nests a forest under a chain of synthetic directories matching an
absolute destination prefix, so the materializer can write it below any
destination root without the scanner knowing that prefix.
"""

import os

from spm.filetree.errors import InvalidPrefixError
from spm.filetree.models import ROOT_NAME, DirNode, Tree, dir_name


def prefix_segments(prefix: str) -> list[str]:
    """Split an absolute directory prefix into its segments, root-most first.

    Args:
        prefix: Absolute directory path (e.g. ``/usr/local/share``).

    Returns:
        Segment names without separators. Empty for ``/``.

    Raises:
        InvalidPrefixError: If the prefix is relative or a segment looks like
            a file name.
    """
    if not os.path.isabs(prefix):
        raise InvalidPrefixError(prefix, "prefix must be absolute")

    segments: list[str] = []
    head = os.path.normpath(prefix)
    while True:
        head, segment = os.path.split(head)
        if not segment:
            break
        if os.path.splitext(segment)[1]:
            raise InvalidPrefixError(prefix, "prefix must contain only directories")
        segments.append(segment)

    segments.reverse()
    return segments


def wrap_prefix(forest: dict[str, Tree], prefix: str) -> Tree:
    """Wrap a forest under the directory chain named by ``prefix``.

    The deepest segment wraps the forest first; each shallower segment
    wraps the result of the previous step. The outermost directory is
    finally placed under the synthetic root.

    Args:
        forest: Top-level trees keyed by name.
        prefix: Absolute directory path to nest the forest under.

    Returns:
        Root Tree named ``/``.

    Raises:
        InvalidPrefixError: If the prefix is invalid. No tree is built.
    """
    segments = prefix_segments(prefix)

    children = forest
    for segment in reversed(segments):
        wrapper = Tree(name=dir_name(segment), node=DirNode(), children=children)
        children = {wrapper.name: wrapper}

    return Tree(name=ROOT_NAME, node=DirNode(), children=children)
