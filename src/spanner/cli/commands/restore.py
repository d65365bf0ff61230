"""
spanner restore command.

SUMMARY: Make installed components match the lockfile exactly
"""

from __future__ import annotations

import argparse
import sys

from spanner.cli import OutputFormatter, add_standard_flags, build_manager, emit_result

SUMMARY = "Make installed components match the lockfile exactly"


def register_args(parser: argparse.ArgumentParser) -> None:
    add_standard_flags(parser)


def main(args: argparse.Namespace) -> int:
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))
    try:
        manager = build_manager(args, load=False)
        result = manager.restore()
        details = result.details
        if result.lock_read_error:
            formatter.error(result.lock_read_error, error_code="lock_read_error")
            return 1
        if details.get("refused"):
            formatter.error("Lockfile is empty. Nothing to restore.", error_code="empty_lock")
            return 1
        message = (
            f"Restored {len(details['restored'])}, cloned {len(details['cloned'])}, "
            f"removed {len(details['removed'])}, unchanged {len(details['unchanged'])}."
        )
        return emit_result(formatter, result, message)
    except Exception as e:
        formatter.error(e, error_code="restore_error")
        return 1


if __name__ == "__main__":
    parser = argparse.ArgumentParser()
    register_args(parser)
    sys.exit(main(parser.parse_args()))
