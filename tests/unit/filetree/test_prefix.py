"""Unit tests for prefix synthesis."""

import pytest
from spm.filetree.errors import InvalidPrefixError
from spm.filetree.models import DirNode, FileNode, Tree
from spm.filetree.prefix import prefix_segments, wrap_prefix


def _forest() -> dict[str, Tree]:
    leaf = Tree(name="a.txt", node=FileNode(content=b"hi"))
    return {leaf.name: leaf}


class TestPrefixSegments:
    """Tests for prefix_segments."""

    def test_splits_root_most_first(self) -> None:
        assert prefix_segments("/usr/local/share") == ["usr", "local", "share"]

    def test_root_has_no_segments(self) -> None:
        assert prefix_segments("/") == []

    def test_normalizes_redundant_separators(self) -> None:
        assert prefix_segments("/opt//pkg/") == ["opt", "pkg"]

    def test_dotted_directory_without_extension_allowed(self) -> None:
        """Hidden directory names are not file extensions."""
        assert prefix_segments("/home/user/.config") == ["home", "user", ".config"]

    def test_relative_prefix_rejected(self) -> None:
        with pytest.raises(InvalidPrefixError, match="must be absolute"):
            prefix_segments("relative/path")

    def test_file_like_segment_rejected(self) -> None:
        with pytest.raises(InvalidPrefixError, match="only directories"):
            prefix_segments("/opt/pkg/readme.txt")


class TestWrapPrefix:
    """Tests for wrap_prefix."""

    def test_nests_forest_under_prefix(self) -> None:
        """Each segment becomes a directory wrapping the next."""
        root = wrap_prefix(_forest(), "/opt/pkg")

        assert root.name == "/"
        assert isinstance(root.node, DirNode)
        assert list(root.children) == ["opt/"]
        opt = root.children["opt/"]
        assert list(opt.children) == ["pkg/"]
        pkg = opt.children["pkg/"]
        assert pkg.is_dir
        assert pkg.children["a.txt"].node == FileNode(content=b"hi")

    def test_keys_match_names_at_every_level(self) -> None:
        """Synthetic directories are keyed by their marked name."""
        root = wrap_prefix(_forest(), "/usr/local/share")

        for _, tree in root.walk():
            for key, child in tree.children.items():
                assert key == child.name

    def test_root_prefix_keeps_forest_at_top(self) -> None:
        """A prefix of '/' puts the forest directly under the root."""
        root = wrap_prefix(_forest(), "/")

        assert list(root.children) == ["a.txt"]

    def test_relative_prefix_produces_no_tree(self) -> None:
        """Calling with 'relative/path' fails with InvalidPrefixError."""
        with pytest.raises(InvalidPrefixError) as excinfo:
            wrap_prefix(_forest(), "relative/path")

        assert excinfo.value.prefix == "relative/path"
