"""CLI package for spm.

This package contains the Typer application and all subcommands.
"""

from spm.cli.main import app

__all__ = ["app"]
