"""Filesystem tree capture, persistence and replay.

This package scans paths into Tree graphs, nests them under a
destination prefix, encodes them to a portable binary form, and writes
them onto (or removes them from) a destination directory.
"""

from spm.filetree.codec import decode, decode_record, dump, encode, encode_record, load
from spm.filetree.errors import (
    CodecError,
    FileTreeError,
    ImpossibleStateError,
    InvalidPrefixError,
    UnknownNodeVariantError,
    UnsupportedFileTypeError,
)
from spm.filetree.materializer import MaterializeSummary, Materializer
from spm.filetree.models import DirNode, FileNode, Node, NodeKind, SymLinkNode, Tree
from spm.filetree.prefix import wrap_prefix
from spm.filetree.pruner import Pruner, PruneSummary
from spm.filetree.scanner import TreeScanner

__all__ = [
    "CodecError",
    "DirNode",
    "FileNode",
    "FileTreeError",
    "ImpossibleStateError",
    "InvalidPrefixError",
    "MaterializeSummary",
    "Materializer",
    "Node",
    "NodeKind",
    "PruneSummary",
    "Pruner",
    "SymLinkNode",
    "Tree",
    "TreeScanner",
    "UnknownNodeVariantError",
    "UnsupportedFileTypeError",
    "decode",
    "decode_record",
    "dump",
    "encode",
    "encode_record",
    "load",
    "wrap_prefix",
]
