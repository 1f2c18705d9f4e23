"""Install command implementation.

Reads a package archive, records it in the ledger and writes its tree
onto a destination root.
"""

import os
from pathlib import Path
from typing import Annotated

import typer

from spm.cli.common import confirm, load_settings, open_ledger, print_tree, read_archive
from spm.core.ledger import LedgerError, LedgerRecord, package_name_from_archive
from spm.filetree.errors import FileTreeError
from spm.filetree.materializer import MaterializeSummary, Materializer
from spm.utils.formatting import console, print_error, print_info, print_success


def _print_summary(summary: MaterializeSummary) -> None:
    console.print(
        f"[dim]{summary.files} file(s), {summary.symlinks} symlink(s), "
        f"{summary.directories} director(ies)[/dim]"
    )


def install_package(
    ctx: typer.Context,
    archive: Annotated[
        Path,
        typer.Argument(help="Package archive built with 'spm build'."),
    ],
    dest: Annotated[
        Path | None,
        typer.Option(
            "--dest",
            "-d",
            help="Root directory to install into (default from config: /).",
        ),
    ] = None,
    name: Annotated[
        str | None,
        typer.Option(
            "--name",
            "-n",
            help="Package name (default: archive file name without extension).",
        ),
    ] = None,
    yes: Annotated[
        bool,
        typer.Option(
            "--yes",
            "-y",
            help="Skip confirmation prompt and proceed.",
        ),
    ] = False,
    dry_run: Annotated[
        bool,
        typer.Option(
            "--dry-run",
            help="Show what would be written without making changes.",
        ),
    ] = False,
) -> None:
    """Install a package archive under a destination root.

    The install is recorded before any file is written, so a failed
    install can still be cleaned up with 'spm remove'.

    Examples:
        spm install tool.spk --dest /tmp/root --dry-run
        spm install tool.spk --name tool-1.0 --yes
    """
    settings = load_settings()
    ledger = open_ledger(settings)
    destination = os.path.abspath(dest or settings.destination)
    package = name or package_name_from_archive(archive)

    try:
        if ledger.exists(package):
            print_error(f"Package {package} is already installed")
            print_info(f"Run 'spm remove {package}' first.")
            raise typer.Exit(code=1)
    except LedgerError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    if not os.path.isdir(destination):
        print_error(f"Destination is not a directory: {destination}")
        raise typer.Exit(code=1)

    print_info(f"Reading tree from {archive}")
    tree = read_archive(archive)
    print_tree(ctx, tree)

    if dry_run:
        try:
            summary = Materializer(dry_run=True).materialize(tree, destination)
        except FileTreeError as e:
            print_error(str(e))
            raise typer.Exit(code=1) from e
        _print_summary(summary)
        print_info("\nDry-run mode: No changes were made.")
        return

    if not confirm(f"Install {package} to {destination}?", yes=yes, settings=settings):
        print_info("Aborted.")
        raise typer.Exit(code=0)

    try:
        ledger.save(package, LedgerRecord(destination=destination, tree=tree))
    except LedgerError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    try:
        summary = Materializer().materialize(tree, destination)
    except (OSError, FileTreeError) as e:
        print_error(f"Install failed: {e}")
        print_info(f"Run 'spm remove {package}' to clean up the partial install.")
        raise typer.Exit(code=1) from e

    _print_summary(summary)
    print_success(f"Transferred tree to {destination}")
