"""Shared helpers for CLI commands.

Loading the configuration, opening the ledger, reading archives and
printing trees are needed by several commands; failures here are
reported and turned into exit code 1.
"""

from pathlib import Path

import typer

from spm.core.config import ConfigError, SpmConfig, load_config
from spm.core.ledger import Ledger
from spm.filetree.codec import load
from spm.filetree.errors import CodecError
from spm.filetree.models import Tree
from spm.filetree.render import render_tree
from spm.utils.formatting import console, format_size, print_error


def is_quiet(ctx: typer.Context) -> bool:
    """Check whether --quiet was given to the main command."""
    return bool(ctx.obj and ctx.obj.get("quiet"))


def load_settings() -> SpmConfig:
    """Load the user configuration or exit with an error."""
    try:
        return load_config()
    except ConfigError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e


def open_ledger(settings: SpmConfig) -> Ledger:
    """Open the ledger configured in ``settings``."""
    return Ledger(settings.ledger_dir)


def read_archive(archive: Path) -> Tree:
    """Decode a package archive or exit with an error."""
    try:
        with open(archive, "rb") as f:
            return load(f)
    except OSError as e:
        print_error(f"Cannot read {archive}: {e.strerror or e}")
        raise typer.Exit(code=1) from e
    except CodecError as e:
        print_error(f"Invalid package archive {archive}: {e}")
        raise typer.Exit(code=1) from e


def print_tree(ctx: typer.Context, tree: Tree) -> None:
    """Print a tree with a file count and size summary (unless --quiet)."""
    if is_quiet(ctx):
        return
    console.print(render_tree(tree))
    console.print(
        f"[dim]{tree.file_count()} file(s), {format_size(tree.total_size())} total[/dim]\n"
    )


def confirm(message: str, *, yes: bool, settings: SpmConfig) -> bool:
    """Prompt user to confirm an action.

    Args:
        message: Question to ask.
        yes: True if --yes was given.
        settings: Configuration; ``confirm = false`` disables the prompt.

    Returns:
        True if the action should proceed.
    """
    if yes or not settings.confirm:
        return True
    return typer.confirm(message, default=False)
