"""Configuration commands.

Inspect the effective configuration or create a default config file.
"""

from typing import Annotated

import typer

from spm.cli.common import load_settings
from spm.core.config import ConfigError, SpmConfig, dump_config, save_config
from spm.core.paths import get_config_path
from spm.utils.formatting import console, print_error, print_info, print_success

app = typer.Typer(
    help="Inspect and initialize the spm configuration.",
    invoke_without_command=True,
    no_args_is_help=True,
)


@app.command()
def show() -> None:
    """Show the effective configuration."""
    settings = load_settings()
    path = get_config_path()
    source = str(path) if path.exists() else "defaults (no config file)"
    console.print(f"[dim]# {source}[/dim]")
    console.print(dump_config(settings), markup=False, highlight=False)


@app.command()
def path() -> None:
    """Print the configuration file path."""
    typer.echo(str(get_config_path()))


@app.command()
def init(
    force: Annotated[
        bool,
        typer.Option(
            "--force",
            "-f",
            help="Overwrite an existing configuration file.",
        ),
    ] = False,
) -> None:
    """Write a configuration file with default settings."""
    config_path = get_config_path()
    if config_path.exists() and not force:
        print_error(f"Config already exists: {config_path}")
        print_info("Use --force to overwrite it.")
        raise typer.Exit(code=1)

    try:
        saved = save_config(SpmConfig(), config_path)
    except ConfigError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    print_success(f"Wrote default config to {saved}")
