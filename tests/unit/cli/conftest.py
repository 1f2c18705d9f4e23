"""Fixtures shared by the CLI tests."""

from pathlib import Path

import pytest
from spm.filetree.codec import dump
from spm.filetree.scanner import TreeScanner


@pytest.fixture
def archive(xdg_home: Path, source_dir: Path) -> Path:
    """An archive of source_dir built under /opt."""
    path = xdg_home / "tool.spk"
    with open(path, "wb") as f:
        dump(TreeScanner().build([source_dir], "/opt"), f)
    return path


@pytest.fixture
def root(xdg_home: Path) -> Path:
    """An empty install root."""
    path = xdg_home / "root"
    path.mkdir()
    return path
