"""spm - a minimal filesystem-tree package manager."""

__version__ = "0.1.0"
