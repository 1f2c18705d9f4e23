"""Unit tests for the tree codec."""

import io
import os
import struct
import zlib
from pathlib import Path

import pytest
from spm.filetree.codec import (
    ARCHIVE_MAGIC,
    FORMAT_VERSION,
    HEADER,
    TAG_FILE,
    decode,
    decode_record,
    dump,
    encode,
    encode_record,
    load,
)
from spm.filetree.errors import CodecError, UnknownNodeVariantError
from spm.filetree.models import DirNode, FileNode, SymLinkNode, Tree
from spm.filetree.scanner import TreeScanner


def _frame(body: bytes) -> bytes:
    """Wrap a raw body the way the encoder does."""
    return HEADER.pack(ARCHIVE_MAGIC, FORMAT_VERSION) + body + struct.pack("<I", zlib.crc32(body))


class TestRoundTrip:
    """Tests for encode/decode round trips."""

    def test_scanned_tree_round_trips(self, source_dir: Path) -> None:
        """A scanned tree decodes to an equal tree."""
        tree = TreeScanner().build([source_dir], "/opt/pkg")

        assert decode(encode(tree)) == tree

    def test_variants_and_payloads_preserved(self, sample_tree: Tree) -> None:
        """Node variants, modes, contents and targets survive."""
        decoded = decode(encode(sample_tree))
        pkg = decoded.children["opt/"].children["pkg/"]

        assert pkg.children["a.txt"].node == FileNode(content=b"hi", mode=0o644)
        assert pkg.children["lib/"].node == DirNode()
        assert pkg.children["lib/"].children["core.so"].node == FileNode(
            content=b"\x7fELF", mode=0o755
        )
        assert pkg.children["link"].node == SymLinkNode(target="lib/core.so")

    def test_non_utf8_names_round_trip(self) -> None:
        """Undecodable filename bytes survive via surrogate escapes."""
        name = os.fsdecode(b"caf\xe9")
        tree = Tree(name="/", node=DirNode())
        tree.add_child(Tree(name=name, node=FileNode(content=b"")))

        assert decode(encode(tree)) == tree

    def test_empty_file_round_trips(self) -> None:
        tree = Tree(name="empty", node=FileNode(content=b"", mode=0o600))

        assert decode(encode(tree)) == tree

    def test_dump_and_load(self, sample_tree: Tree) -> None:
        """dump/load go through a binary file object."""
        buffer = io.BytesIO()
        dump(sample_tree, buffer)
        buffer.seek(0)

        assert load(buffer) == sample_tree


class TestDecodeErrors:
    """Tests for decoding corrupt or unknown streams."""

    def test_truncated_stream(self, sample_tree: Tree) -> None:
        data = encode(sample_tree)

        with pytest.raises(CodecError):
            decode(data[: len(data) // 2])

    def test_empty_stream(self) -> None:
        with pytest.raises(CodecError, match="too short"):
            decode(b"")

    def test_bad_magic(self, sample_tree: Tree) -> None:
        data = b"XXXX" + encode(sample_tree)[4:]

        with pytest.raises(CodecError, match="Bad magic"):
            decode(data)

    def test_unsupported_version(self, sample_tree: Tree) -> None:
        data = bytearray(encode(sample_tree))
        struct.pack_into("<H", data, 4, FORMAT_VERSION + 1)

        with pytest.raises(CodecError, match="Unsupported format version"):
            decode(bytes(data))

    def test_flipped_byte_fails_checksum(self, sample_tree: Tree) -> None:
        data = bytearray(encode(sample_tree))
        data[HEADER.size + 3] ^= 0xFF

        with pytest.raises(CodecError, match="Checksum mismatch"):
            decode(bytes(data))

    def test_unknown_variant_tag(self) -> None:
        """A tag outside the known set raises UnknownNodeVariantError."""
        body = struct.pack("<B", 9) + struct.pack("<I", 1) + b"x"

        with pytest.raises(UnknownNodeVariantError) as excinfo:
            decode(_frame(body))

        assert excinfo.value.tag == 9
        assert isinstance(excinfo.value, CodecError)

    def test_trailing_bytes(self) -> None:
        body = (
            struct.pack("<B", TAG_FILE)
            + struct.pack("<I", 1)
            + b"a"
            + struct.pack("<I", 0o644)
            + struct.pack("<Q", 0)
            + b"junk"
        )

        with pytest.raises(CodecError, match="trailing bytes"):
            decode(_frame(body))

    def test_record_stream_is_not_an_archive(self, sample_tree: Tree) -> None:
        """Ledger records and archives use different magics."""
        with pytest.raises(CodecError, match="Bad magic"):
            decode(encode_record("/dest", sample_tree))


class TestRecords:
    """Tests for ledger record encoding."""

    def test_record_round_trip(self, sample_tree: Tree) -> None:
        destination, tree = decode_record(encode_record("/srv/root", sample_tree))

        assert destination == "/srv/root"
        assert tree == sample_tree

    def test_archive_is_not_a_record(self, sample_tree: Tree) -> None:
        with pytest.raises(CodecError):
            decode_record(encode(sample_tree))


class TestNodeNames:
    """Tests for rejecting node names that are not single path components."""

    @pytest.mark.parametrize(
        "name",
        ["../victim.txt", "/etc/passwd", "a/b", ".", "..", "f/", "nul\0byte"],
    )
    def test_escaping_file_name_rejected(self, name: str) -> None:
        """A file whose name could leave its parent directory is refused."""
        root = Tree(name="/", node=DirNode())
        root.children[name] = Tree(name=name, node=FileNode(content=b"pwned"))

        with pytest.raises(CodecError, match="Invalid node name"):
            decode(encode(root))

    @pytest.mark.parametrize("name", ["/", "../", "a/b/", "//"])
    def test_escaping_directory_name_rejected(self, name: str) -> None:
        """Only the root directory may be named '/'."""
        root = Tree(name="/", node=DirNode())
        root.children[name] = Tree(name=name, node=DirNode())

        with pytest.raises(CodecError, match="Invalid node name"):
            decode(encode(root))

    def test_escaping_symlink_name_rejected(self) -> None:
        root = Tree(name="/", node=DirNode())
        root.children["../link"] = Tree(name="../link", node=SymLinkNode(target="x"))

        with pytest.raises(CodecError, match="Invalid node name"):
            decode(encode(root))

    def test_root_file_cannot_be_named_root(self) -> None:
        """The '/' name is reserved for a directory root."""
        with pytest.raises(CodecError, match="Invalid node name"):
            decode(encode(Tree(name="/", node=FileNode(content=b""))))

    def test_escaping_name_rejected_in_records(self, tmp_path: Path) -> None:
        """Ledger records are checked the same way as archives."""
        root = Tree(name="/", node=DirNode())
        root.children["../x"] = Tree(name="../x", node=FileNode(content=b"x"))

        with pytest.raises(CodecError, match="Invalid node name"):
            decode_record(encode_record(str(tmp_path), root))

    def test_unmarked_directory_name_accepted(self) -> None:
        """Directory names without the marker are still plain components."""
        root = Tree(name="/", node=DirNode())
        root.add_child(Tree(name="lib", node=DirNode()))

        assert "lib" in decode(encode(root)).children


class TestDeepTrees:
    """Tests for trees nested deeper than the interpreter recursion limit."""

    def test_deep_tree_round_trips(self) -> None:
        depth = 3000
        root = Tree(name="/", node=DirNode())
        current = root
        for _ in range(depth):
            current = current.add_child(Tree(name="a/", node=DirNode()))
        current.add_child(Tree(name="leaf", node=FileNode(content=b"deep")))

        decoded = decode(encode(root))

        paths = [path for path, _ in decoded.walk()]
        assert len(paths) == depth + 1
        assert paths[-1] == "a/" * depth + "leaf"
