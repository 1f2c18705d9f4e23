"""Unit tests for remove command.

Tests for the CLI remove command implementation.
"""

from pathlib import Path

import pytest
from spm.cli.main import app
from spm.core.ledger import Ledger
from typer.testing import CliRunner

runner = CliRunner()


def _flat(output: str) -> str:
    """Collapse Rich line wrapping."""
    return " ".join(output.split())


@pytest.fixture
def installed(archive: Path, root: Path) -> Path:
    """Install the sample archive as 'tool' and return the root."""
    result = runner.invoke(app, ["install", str(archive), "-d", str(root), "-y"])
    assert result.exit_code == 0, result.output
    return root


class TestRemoveCommand:
    """Tests for spm remove command."""

    def test_remove_yes(self, installed: Path) -> None:
        """Remove --yes prunes the tree and drops the record."""
        result = runner.invoke(app, ["remove", "tool", "--yes"])

        assert result.exit_code == 0, result.output
        assert "Removed tree from" in _flat(result.output)
        assert list(installed.iterdir()) == []
        assert not Ledger().exists("tool")

    def test_remove_keeps_foreign_files(self, installed: Path) -> None:
        """Files the package did not install stay in place."""
        user_file = installed / "opt" / "mine.txt"
        user_file.write_text("keep")

        result = runner.invoke(app, ["remove", "tool", "-y"])

        assert result.exit_code == 0, result.output
        assert user_file.read_text() == "keep"
        assert not (installed / "opt" / "src").exists()

    def test_remove_dry_run(self, installed: Path) -> None:
        """Remove --dry-run changes nothing."""
        result = runner.invoke(app, ["remove", "tool", "--dry-run"])

        assert result.exit_code == 0, result.output
        assert "Dry-run mode: No changes were made." in _flat(result.output)
        assert (installed / "opt" / "src" / "README").exists()
        assert Ledger().exists("tool")

    def test_remove_declined(self, installed: Path) -> None:
        """Answering no to the prompt aborts cleanly."""
        result = runner.invoke(app, ["remove", "tool"], input="n\n")

        assert result.exit_code == 0
        assert "Aborted." in result.output
        assert Ledger().exists("tool")

    def test_remove_unknown(self, xdg_home: Path) -> None:
        """Removing a package that is not installed fails."""
        result = runner.invoke(app, ["remove", "ghost", "-y"])

        assert result.exit_code == 1
        assert "Package is not installed" in _flat(result.output)

    def test_remove_tolerates_deleted_files(self, installed: Path) -> None:
        """Files deleted after install do not stop removal."""
        (installed / "opt" / "src" / "README").unlink()

        result = runner.invoke(app, ["remove", "tool", "-y"])

        assert result.exit_code == 0, result.output
        assert list(installed.iterdir()) == []
