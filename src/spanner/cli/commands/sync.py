"""
spanner sync command.

SUMMARY: Install missing components and move each to the version it pins
"""

from __future__ import annotations

import argparse
import sys

from spanner.cli import OutputFormatter, add_standard_flags, build_manager, emit_result

SUMMARY = "Install missing components and move each to the version it pins"


def register_args(parser: argparse.ArgumentParser) -> None:
    add_standard_flags(parser)


def main(args: argparse.Namespace) -> int:
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))
    try:
        manager = build_manager(args)
        if not len(manager.registry):
            formatter.error(f"No components declared in {manager.components_dir}", error_code="empty")
            return 1
        result = manager.sync()
        synced = result.details.get("synced", [])
        message = f"Synced {len(synced)} component(s)."
        if result.lock_written:
            message += f" Lockfile updated: {manager.lockfile_path}"
        return emit_result(formatter, result, message)
    except Exception as e:
        formatter.error(e, error_code="sync_error")
        return 1


if __name__ == "__main__":
    parser = argparse.ArgumentParser()
    register_args(parser)
    sys.exit(main(parser.parse_args()))
