"""Pytest configuration and shared fixtures.

This module contains fixtures used across all test modules.
"""

from pathlib import Path

import pytest
from spm.filetree.models import DirNode, FileNode, SymLinkNode, Tree


@pytest.fixture
def xdg_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point XDG config and state directories into a temporary directory."""
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_STATE_HOME", str(tmp_path / "state"))
    return tmp_path


@pytest.fixture
def source_dir(tmp_path: Path) -> Path:
    """A small source directory with a file, a subdirectory and a symlink.

    Layout:
        src/
            bin/tool        (0755, "#!/bin/sh\\n")
            README          (0644, "readme")
            latest -> bin/tool
    """
    src = tmp_path / "src"
    (src / "bin").mkdir(parents=True)
    tool = src / "bin" / "tool"
    tool.write_bytes(b"#!/bin/sh\n")
    tool.chmod(0o755)
    readme = src / "README"
    readme.write_bytes(b"readme")
    readme.chmod(0o644)
    (src / "latest").symlink_to("bin/tool")
    return src


@pytest.fixture
def sample_tree() -> Tree:
    """An in-memory tree rooted at '/' holding opt/pkg/{a.txt, lib/, link}."""
    lib = Tree(name="lib/", node=DirNode())
    lib.add_child(Tree(name="core.so", node=FileNode(content=b"\x7fELF", mode=0o755)))

    pkg = Tree(name="pkg/", node=DirNode())
    pkg.add_child(Tree(name="a.txt", node=FileNode(content=b"hi", mode=0o644)))
    pkg.add_child(lib)
    pkg.add_child(Tree(name="link", node=SymLinkNode(target="lib/core.so")))

    opt = Tree(name="opt/", node=DirNode())
    opt.add_child(pkg)

    root = Tree(name="/", node=DirNode())
    root.add_child(opt)
    return root
