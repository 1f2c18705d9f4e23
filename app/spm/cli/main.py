"""Main CLI application entry point.

Defines the Typer application and global options.
"""

import logging
from typing import Annotated

import typer
from rich.logging import RichHandler

from spm import __version__
from spm.cli.commands import build, config, install, listing, remove, show
from spm.utils.formatting import err_console

# Create main Typer app
app = typer.Typer(
    name="spm",
    help="Simple package manager: capture, install and remove filesystem trees.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"spm version {__version__}")
        raise typer.Exit()


def configure_logging(verbose: bool, quiet: bool) -> None:
    """Route spm log records to stderr through Rich.

    Debug records are shown with --verbose, dry-run reports (info) by
    default, and only warnings with --quiet.
    """
    logger = logging.getLogger("spm")
    for handler in list(logger.handlers):
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)

    handler = RichHandler(console=err_console, show_time=False, show_path=verbose)
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)

    if verbose:
        logger.setLevel(logging.DEBUG)
    elif quiet:
        logger.setLevel(logging.WARNING)
    else:
        logger.setLevel(logging.INFO)


@app.callback()
def main(
    ctx: typer.Context,
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable verbose output.",
        ),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option(
            "--quiet",
            "-q",
            help="Suppress non-essential output.",
        ),
    ] = False,
) -> None:
    """spm - capture filesystem trees into packages and install them anywhere.

    Build a package from files and directories, install it under a
    destination root, and remove it again without touching files it
    does not own.
    """
    # Store options in context for subcommands
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    configure_logging(verbose, quiet)


# Register commands
app.command("build")(build.build_package)
app.command("install")(install.install_package)
app.command("remove")(remove.remove_package)
app.command("list")(listing.list_packages)
app.command("show")(show.show_tree)
app.add_typer(config.app, name="config")


if __name__ == "__main__":
    app()
