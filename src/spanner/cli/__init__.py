"""
spanner CLI package.

Provides the command-line interface with auto-discovery of commands
from ``cli/commands/``.

Framework utilities for building CLI commands:
- _output: Output formatting (JSON/text modes)
- _args: Common argument registration helpers
- _utils: Shared CLI utilities
"""
from ._output import OutputFormatter, format_json, print_error
from ._args import (
    add_dry_run_flag,
    add_json_flag,
    add_repo_root_flag,
    add_standard_flags,
    add_verbose_flag,
    add_yes_flag,
)
from ._utils import build_manager, emit_result, get_repo_root

__all__ = [
    # Output formatting
    "OutputFormatter",
    "format_json",
    "print_error",
    # Argument helpers
    "add_dry_run_flag",
    "add_json_flag",
    "add_repo_root_flag",
    "add_standard_flags",
    "add_verbose_flag",
    "add_yes_flag",
    # Utilities
    "build_manager",
    "emit_result",
    "get_repo_root",
]
