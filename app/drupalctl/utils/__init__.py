"""Utility modules for drupalctl.

This module exports commonly used utility functions.
"""

from drupalctl.utils.formatting import (
    console,
    create_key_value_table,
    err_console,
    print_error,
    print_info,
    print_success,
    print_warning,
)
from drupalctl.utils.shell import CommandResult, CommandRunner, run_command

__all__ = [
    "CommandResult",
    "CommandRunner",
    "console",
    "create_key_value_table",
    "err_console",
    "print_error",
    "print_info",
    "print_success",
    "print_warning",
    "run_command",
]
