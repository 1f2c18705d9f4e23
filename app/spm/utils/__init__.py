"""Utility modules for spm.

This module exports commonly used utility functions.
"""

from spm.utils.formatting import (
    console,
    create_package_table,
    err_console,
    format_size,
    print_error,
    print_info,
    print_success,
    print_warning,
)

__all__ = [
    "console",
    "create_package_table",
    "err_console",
    "format_size",
    "print_error",
    "print_info",
    "print_success",
    "print_warning",
]
