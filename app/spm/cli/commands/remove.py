"""Remove command implementation.

Prunes an installed package's tree from its destination and drops its
ledger record.
"""

from typing import Annotated

import typer

from spm.cli.common import confirm, load_settings, open_ledger, print_tree
from spm.core.ledger import LedgerError, PackageNotInstalledError
from spm.filetree.errors import FileTreeError
from spm.filetree.pruner import Pruner, PruneSummary
from spm.utils.formatting import console, print_error, print_info, print_success


def _print_summary(summary: PruneSummary) -> None:
    console.print(
        f"[dim]{summary.files} file(s), {summary.symlinks} symlink(s), "
        f"{summary.directories} director(ies) removed[/dim]"
    )


def remove_package(
    ctx: typer.Context,
    name: Annotated[
        str,
        typer.Argument(help="Name of the installed package."),
    ],
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
            help="Show what would be removed without making changes.",
        ),
    ] = False,
) -> None:
    """Remove an installed package.

    Only files and symlinks the package installed are removed.
    Directories are removed only when nothing else is left in them.
    """
    settings = load_settings()
    ledger = open_ledger(settings)

    try:
        record = ledger.load(name)
    except PackageNotInstalledError as e:
        print_error("Package is not installed")
        raise typer.Exit(code=1) from e
    except LedgerError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    print_tree(ctx, record.tree)

    if dry_run:
        try:
            summary = Pruner(dry_run=True).prune(record.tree, record.destination)
        except (OSError, FileTreeError) as e:
            print_error(str(e))
            raise typer.Exit(code=1) from e
        _print_summary(summary)
        print_info("\nDry-run mode: No changes were made.")
        return

    if not confirm(f"Remove {name} from {record.destination}?", yes=yes, settings=settings):
        print_info("Aborted.")
        raise typer.Exit(code=0)

    try:
        summary = Pruner().prune(record.tree, record.destination)
    except (OSError, FileTreeError) as e:
        print_error(f"Remove failed: {e}")
        raise typer.Exit(code=1) from e

    try:
        ledger.delete(name)
    except LedgerError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    _print_summary(summary)
    print_success(f"Removed tree from {record.destination}")
