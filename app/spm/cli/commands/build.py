"""Build command implementation.

Captures files and directories into a tree, nests it under a prefix,
and writes the encoded tree to a package archive.
"""

from pathlib import Path
from typing import Annotated

import typer

from spm.cli.common import load_settings, print_tree
from spm.filetree.codec import dump
from spm.filetree.errors import FileTreeError
from spm.filetree.scanner import TreeScanner
from spm.utils.formatting import print_error, print_success


def build_package(
    ctx: typer.Context,
    paths: Annotated[
        list[Path],
        typer.Argument(help="Files and directories to package."),
    ],
    output: Annotated[
        Path | None,
        typer.Option(
            "--output",
            "-o",
            help="Archive to write (default from config: package.spk).",
        ),
    ] = None,
    prefix: Annotated[
        str | None,
        typer.Option(
            "--prefix",
            "-p",
            help="Absolute directory the package installs under (default: /).",
        ),
    ] = None,
) -> None:
    """Build a package archive from files and directories.

    Passing '.' packages the contents of the current directory rather
    than a directory named '.'.

    Examples:
        spm build ./bin ./share -o tool.spk
        spm build . --prefix /usr/local
    """
    settings = load_settings()
    output_path = output or Path(settings.output)
    prefix = prefix or settings.prefix

    try:
        tree = TreeScanner().build(paths, prefix)
    except FileTreeError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e
    except OSError as e:
        print_error(f"Cannot scan {e.filename or 'input'}: {e.strerror or e}")
        raise typer.Exit(code=1) from e

    print_tree(ctx, tree)

    try:
        with open(output_path, "wb") as f:
            dump(tree, f)
    except OSError as e:
        print_error(f"Cannot write {output_path}: {e.strerror or e}")
        raise typer.Exit(code=1) from e

    print_success(f"Wrote tree to {output_path}")
