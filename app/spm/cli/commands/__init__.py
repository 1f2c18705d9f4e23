"""CLI commands for spm.

This package contains all subcommand implementations.
"""

from spm.cli.commands import build, config, install, listing, remove, show

__all__ = ["build", "config", "install", "listing", "remove", "show"]
