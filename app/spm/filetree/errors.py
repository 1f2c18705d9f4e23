"""Exceptions raised by the filetree engine.

Filesystem failures are not wrapped: any ``OSError`` raised while scanning,
materializing or pruning propagates to the caller unchanged.
"""


class FileTreeError(Exception):
    """Base exception for filetree errors."""


class UnsupportedFileTypeError(FileTreeError):
    """Raised when a scan meets an entry that is not a file, directory or symlink."""

    def __init__(self, path: str, mode: int) -> None:
        self.path = path
        self.mode = mode
        super().__init__(f"File mode {mode:#o} of {path} unsupported")


class InvalidPrefixError(FileTreeError):
    """Raised when a destination prefix is relative or names a file."""

    def __init__(self, prefix: str, reason: str) -> None:
        self.prefix = prefix
        self.reason = reason
        super().__init__(f"Invalid prefix {prefix!r}: {reason}")


class CodecError(FileTreeError):
    """Raised when a serialized tree is truncated, corrupt or malformed."""


class UnknownNodeVariantError(CodecError):
    """Raised when a serialized tree references an unknown node tag."""

    def __init__(self, tag: int) -> None:
        self.tag = tag
        super().__init__(f"Unknown node variant tag: {tag}")


class ImpossibleStateError(FileTreeError):
    """Raised when a node matches none of the known variants."""
