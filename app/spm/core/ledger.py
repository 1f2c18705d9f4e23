"""Install ledger.

Keeps one record per installed package: the destination the package
was written to and the tree that was written there. ``spm remove`` reads
the record back to know what to prune and where.

Storage location: ~/.local/state/spm/installed/<package>
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from tempfile import NamedTemporaryFile

from spm.core.paths import ensure_dir, get_ledger_dir
from spm.filetree.codec import decode_record, encode_record
from spm.filetree.errors import CodecError
from spm.filetree.models import Tree

logger = logging.getLogger(__name__)


class LedgerError(Exception):
    """Base exception for ledger-related errors."""


class PackageNotInstalledError(LedgerError):
    """Raised when no record exists for a package."""


class PackageAlreadyInstalledError(LedgerError):
    """Raised when installing a package that already has a record."""


@dataclass(frozen=True, slots=True)
class LedgerRecord:
    """What was installed where.

    Attributes:
        destination: Root directory the tree was materialized onto.
        tree: The materialized tree.
    """

    destination: str
    tree: Tree

    def __post_init__(self) -> None:
        """Validate record data after initialization."""
        if not self.destination:
            msg = "Destination cannot be empty"
            raise ValueError(msg)

    def to_bytes(self) -> bytes:
        """Serialize the record with the tree codec."""
        return encode_record(self.destination, self.tree)

    @classmethod
    def from_bytes(cls, data: bytes) -> LedgerRecord:
        """Deserialize a record.

        Raises:
            CodecError: If the data is corrupt.
        """
        destination, tree = decode_record(data)
        return cls(destination=destination, tree=tree)


def package_name_from_archive(archive: str | os.PathLike[str]) -> str:
    """Derive a package name from an archive path.

    The name is the archive's file name without its extension
    (``build/foo.spk`` -> ``foo``).
    """
    return os.path.splitext(os.path.basename(os.fspath(archive)))[0]


class Ledger:
    """Manages install records on disk.

    Attributes:
        ledger_dir: Directory holding one record file per package.
    """

    def __init__(self, ledger_dir: Path | None = None) -> None:
        """Initialize Ledger.

        Args:
            ledger_dir: Optional override for the ledger directory.
                       Default: ~/.local/state/spm/installed
        """
        self._ledger_dir = ledger_dir if ledger_dir is not None else get_ledger_dir()

    @property
    def ledger_dir(self) -> Path:
        """Directory holding the record files."""
        return self._ledger_dir

    def path_for(self, name: str) -> Path:
        """Get the record path for a package.

        Raises:
            LedgerError: If the name cannot be used as a file name.
        """
        if not name or name in (os.curdir, os.pardir) or os.sep in name or "\0" in name:
            msg = f"Invalid package name: {name!r}"
            raise LedgerError(msg)
        if os.altsep and os.altsep in name:
            msg = f"Invalid package name: {name!r}"
            raise LedgerError(msg)
        return self._ledger_dir / name

    def exists(self, name: str) -> bool:
        """Check if a package has a record."""
        return self.path_for(name).is_file()

    def save(self, name: str, record: LedgerRecord, *, overwrite: bool = False) -> Path:
        """Write a package record.

        The file is written to a temporary file in the ledger directory and
        renamed into place, so a crash never leaves a half-written record.

        Args:
            name: Package name.
            record: Record to persist.
            overwrite: Replace an existing record instead of failing.

        Returns:
            Path of the written record.

        Raises:
            PackageAlreadyInstalledError: If a record exists and overwrite is False.
            LedgerError: If the record cannot be written.
        """
        path = self.path_for(name)
        if not overwrite and path.exists():
            msg = f"Package {name} is already installed"
            raise PackageAlreadyInstalledError(msg)

        try:
            ensure_dir(self._ledger_dir, "ledger")
        except RuntimeError as e:
            raise LedgerError(str(e)) from e

        data = record.to_bytes()
        tmp_path: Path | None = None
        try:
            with NamedTemporaryFile(
                mode="wb",
                dir=self._ledger_dir,
                delete=False,
                suffix=".tmp",
            ) as f:
                tmp_path = Path(f.name)
                f.write(data)
            os.replace(tmp_path, path)
        except OSError as e:
            if tmp_path is not None and tmp_path.exists():
                tmp_path.unlink()
            raise LedgerError(f"Failed to write ledger record for {name}: {e}") from e

        logger.debug("Recorded %s -> %s (%d bytes)", name, record.destination, len(data))
        return path

    def load(self, name: str) -> LedgerRecord:
        """Read a package record.

        Raises:
            PackageNotInstalledError: If the package has no record.
            LedgerError: If the record cannot be read or is corrupt.
        """
        path = self.path_for(name)
        try:
            data = path.read_bytes()
        except FileNotFoundError as e:
            msg = f"Package {name} is not installed"
            raise PackageNotInstalledError(msg) from e
        except OSError as e:
            raise LedgerError(f"Failed to read ledger record for {name}: {e}") from e

        try:
            return LedgerRecord.from_bytes(data)
        except CodecError as e:
            raise LedgerError(f"Corrupt ledger record for {name}: {e}") from e

    def delete(self, name: str) -> None:
        """Delete a package record.

        Raises:
            PackageNotInstalledError: If the package has no record.
            LedgerError: If the record cannot be deleted.
        """
        path = self.path_for(name)
        try:
            path.unlink()
        except FileNotFoundError as e:
            msg = f"Package {name} is not installed"
            raise PackageNotInstalledError(msg) from e
        except OSError as e:
            raise LedgerError(f"Failed to delete ledger record for {name}: {e}") from e
        logger.debug("Deleted ledger record %s", path)

    def list_packages(self) -> list[str]:
        """List installed package names, sorted.

        Returns:
            Package names. Empty if the ledger directory doesn't exist.
        """
        if not self._ledger_dir.is_dir():
            return []
        return sorted(
            entry.name
            for entry in self._ledger_dir.iterdir()
            if entry.is_file() and not entry.name.endswith(".tmp")
        )
