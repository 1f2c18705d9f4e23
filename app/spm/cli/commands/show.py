"""Show command implementation.

Prints the tree of a package archive or of an installed package.
"""

from pathlib import Path
from typing import Annotated

import typer

from spm.cli.common import load_settings, open_ledger, read_archive
from spm.core.ledger import LedgerError
from spm.filetree.render import render_tree
from spm.utils.formatting import console, format_size, print_error


def show_tree(
    archive: Annotated[
        Path | None,
        typer.Argument(help="Package archive to display."),
    ] = None,
    installed: Annotated[
        str | None,
        typer.Option(
            "--installed",
            "-i",
            help="Show an installed package instead of an archive.",
        ),
    ] = None,
) -> None:
    """Show the tree of a package archive or installed package.

    Examples:
        spm show tool.spk
        spm show --installed tool
    """
    if archive is not None and installed is None:
        tree = read_archive(archive)
    elif installed is not None and archive is None:
        settings = load_settings()
        try:
            record = open_ledger(settings).load(installed)
        except LedgerError as e:
            print_error(str(e))
            raise typer.Exit(code=1) from e
        tree = record.tree
        console.print(f"[info]{installed}[/] installed in [bold]{record.destination}[/]")
    else:
        print_error("Give either an archive or --installed NAME.")
        raise typer.Exit(code=1)

    console.print(render_tree(tree))
    console.print(f"[dim]{tree.file_count()} file(s), {format_size(tree.total_size())} total[/dim]")
