"""Binary codec for Tree graphs and ledger records.

Layout (little endian):

    header   magic (4s) | version (H)
    [record] destination (I length + bytes)          ledger records only
    node     tag (B) | name (I length + bytes) | payload
               file:    mode (I) | content (Q length + bytes)
               dir:     child count (I) | child nodes
               symlink: target (I length + bytes)
    trailer  crc32 of everything between header and trailer (I)

Names, targets and destinations are stored with ``os.fsencode`` so
filenames that are not valid UTF-8 survive a round trip.
"""

import os
import struct
import zlib
from typing import BinaryIO

from spm.filetree.errors import CodecError, ImpossibleStateError, UnknownNodeVariantError
from spm.filetree.models import ROOT_NAME, DirNode, FileNode, SymLinkNode, Tree, is_entry_name

ARCHIVE_MAGIC = b"SPMT"
RECORD_MAGIC = b"SPML"
FORMAT_VERSION = 1

HEADER = struct.Struct("<4sH")
TRAILER = struct.Struct("<I")
_TAG = struct.Struct("<B")
_U32 = struct.Struct("<I")
_U64 = struct.Struct("<Q")

TAG_FILE = 1
TAG_DIR = 2
TAG_SYMLINK = 3


class _Writer:
    """Accumulates encoded fields."""

    def __init__(self) -> None:
        self._parts: list[bytes] = []

    def u8(self, value: int) -> None:
        self._parts.append(_TAG.pack(value))

    def u32(self, value: int) -> None:
        self._parts.append(_U32.pack(value))

    def u64(self, value: int) -> None:
        self._parts.append(_U64.pack(value))

    def blob(self, data: bytes, *, wide: bool = False) -> None:
        if wide:
            self.u64(len(data))
        else:
            self.u32(len(data))
        self._parts.append(data)

    def text(self, value: str) -> None:
        self.blob(os.fsencode(value))

    def getvalue(self) -> bytes:
        return b"".join(self._parts)


class _Reader:
    """Reads encoded fields from a buffer, raising CodecError on truncation."""

    def __init__(self, data: bytes) -> None:
        self._view = memoryview(data)
        self._pos = 0

    @property
    def remaining(self) -> int:
        return len(self._view) - self._pos

    def _take(self, size: int) -> memoryview:
        if size > self.remaining:
            msg = f"Truncated stream: wanted {size} bytes at offset {self._pos}"
            raise CodecError(msg)
        chunk = self._view[self._pos : self._pos + size]
        self._pos += size
        return chunk

    def u8(self) -> int:
        return _TAG.unpack(self._take(_TAG.size))[0]

    def u32(self) -> int:
        return _U32.unpack(self._take(_U32.size))[0]

    def u64(self) -> int:
        return _U64.unpack(self._take(_U64.size))[0]

    def blob(self, *, wide: bool = False) -> bytes:
        size = self.u64() if wide else self.u32()
        return bytes(self._take(size))

    def text(self) -> str:
        return os.fsdecode(self.blob())


def _write_tree(writer: _Writer, tree: Tree) -> None:
    """Encode a tree and all its descendants in pre-order."""
    pending = [tree]
    while pending:
        current = pending.pop()
        node = current.node
        if isinstance(node, FileNode):
            writer.u8(TAG_FILE)
            writer.text(current.name)
            writer.u32(node.mode)
            writer.blob(node.content, wide=True)
        elif isinstance(node, DirNode):
            writer.u8(TAG_DIR)
            writer.text(current.name)
            writer.u32(len(current.children))
            # Reversed so the stack pops children in stored order
            pending.extend(reversed(current.children.values()))
        elif isinstance(node, SymLinkNode):
            writer.u8(TAG_SYMLINK)
            writer.text(current.name)
            writer.text(node.target)
        else:
            msg = f"Cannot encode node variant {type(node).__name__} for {current.name}"
            raise ImpossibleStateError(msg)


def _read_node(reader: _Reader, *, root: bool = False) -> tuple[Tree, int]:
    """Decode one node record.

    Returns:
        The tree (without children) and the number of children that follow
        it in the stream.
    """
    tag = reader.u8()
    if tag not in (TAG_FILE, TAG_DIR, TAG_SYMLINK):
        raise UnknownNodeVariantError(tag)

    name = reader.text()
    if not (root and tag == TAG_DIR and name == ROOT_NAME) and not is_entry_name(
        name, directory=tag == TAG_DIR
    ):
        msg = f"Invalid node name {name!r}"
        raise CodecError(msg)

    if tag == TAG_FILE:
        mode = reader.u32()
        content = reader.blob(wide=True)
        return Tree(name=name, node=FileNode(content=content, mode=mode)), 0

    if tag == TAG_SYMLINK:
        return Tree(name=name, node=SymLinkNode(target=reader.text())), 0

    return Tree(name=name, node=DirNode()), reader.u32()


def _read_tree(reader: _Reader) -> Tree:
    """Decode one tree and all its descendants."""
    root, count = _read_node(reader, root=True)

    # Directories still owed children, with how many are left
    pending = [(root, count)] if count else []
    while pending:
        parent, remaining = pending[-1]
        if not remaining:
            pending.pop()
            continue
        pending[-1] = (parent, remaining - 1)

        child, count = _read_node(reader)
        if child.name in parent.children:
            msg = f"Duplicate child {child.name!r} in {parent.name!r}"
            raise CodecError(msg)
        parent.children[child.name] = child
        if count:
            pending.append((child, count))

    return root


def _frame(magic: bytes, body: bytes) -> bytes:
    """Wrap an encoded body with header and checksum trailer."""
    return HEADER.pack(magic, FORMAT_VERSION) + body + TRAILER.pack(zlib.crc32(body))


def _unframe(magic: bytes, data: bytes) -> bytes:
    """Validate header and checksum, returning the body."""
    if len(data) < HEADER.size + TRAILER.size:
        msg = f"Stream too short ({len(data)} bytes)"
        raise CodecError(msg)

    found_magic, version = HEADER.unpack_from(data)
    if found_magic != magic:
        msg = f"Bad magic {found_magic!r}, expected {magic!r}"
        raise CodecError(msg)
    if version != FORMAT_VERSION:
        msg = f"Unsupported format version {version}"
        raise CodecError(msg)

    body = data[HEADER.size : -TRAILER.size]
    (checksum,) = TRAILER.unpack_from(data, len(data) - TRAILER.size)
    if zlib.crc32(body) != checksum:
        raise CodecError("Checksum mismatch, stream is corrupt")
    return body


def _decode_body(reader: _Reader) -> Tree:
    """Decode the root tree and require the body to be fully consumed."""
    tree = _read_tree(reader)
    if reader.remaining:
        msg = f"{reader.remaining} trailing bytes after tree"
        raise CodecError(msg)
    return tree


def encode(tree: Tree) -> bytes:
    """Serialize a tree to bytes.

    Raises:
        ImpossibleStateError: If a node is not a known variant.
    """
    writer = _Writer()
    _write_tree(writer, tree)
    return _frame(ARCHIVE_MAGIC, writer.getvalue())


def decode(data: bytes) -> Tree:
    """Deserialize a tree produced by :func:`encode`.

    Raises:
        UnknownNodeVariantError: If a node tag is not recognized.
        CodecError: If the stream is truncated, corrupt or malformed.
    """
    return _decode_body(_Reader(_unframe(ARCHIVE_MAGIC, data)))


def dump(tree: Tree, fp: BinaryIO) -> None:
    """Serialize a tree into a binary file object."""
    fp.write(encode(tree))


def load(fp: BinaryIO) -> Tree:
    """Deserialize a tree from a binary file object."""
    return decode(fp.read())


def encode_record(destination: str, tree: Tree) -> bytes:
    """Serialize a ``{destination, tree}`` ledger record."""
    writer = _Writer()
    writer.text(destination)
    _write_tree(writer, tree)
    return _frame(RECORD_MAGIC, writer.getvalue())


def decode_record(data: bytes) -> tuple[str, Tree]:
    """Deserialize a ledger record produced by :func:`encode_record`.

    Returns:
        Tuple of (destination, tree).

    Raises:
        UnknownNodeVariantError: If a node tag is not recognized.
        CodecError: If the stream is truncated, corrupt or malformed.
    """
    reader = _Reader(_unframe(RECORD_MAGIC, data))
    destination = reader.text()
    if not destination:
        raise CodecError("Ledger record has an empty destination")
    return destination, _decode_body(reader)
