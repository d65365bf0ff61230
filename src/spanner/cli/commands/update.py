"""
spanner update command.

SUMMARY: Review upstream changes, lock approved ones and restore
"""

from __future__ import annotations

import argparse
import sys
from typing import List

from spanner.cli import (
    OutputFormatter,
    add_dry_run_flag,
    add_standard_flags,
    add_yes_flag,
    build_manager,
    emit_result,
)
from spanner.core.update import UpdateInfo

SUMMARY = "Review upstream changes, lock approved ones and restore"


def register_args(parser: argparse.ArgumentParser) -> None:
    add_yes_flag(parser)
    add_dry_run_flag(parser)
    add_standard_flags(parser)


def describe(info: UpdateInfo) -> List[str]:
    header = f"{info.name} ({info.branch}): {info.old_commit[:7]} -> {info.new_commit[:7]}"
    if info.tag:
        header += f" [{info.tag}]"
    return [header] + [f"    {line}" for line in info.log_lines]


def prompt_reviewer(updates: List[UpdateInfo]) -> List[UpdateInfo]:
    """Ask on stderr/stdin about each update; approve on 'y'."""
    approved: List[UpdateInfo] = []
    for info in updates:
        for line in describe(info):
            print(line, file=sys.stderr)
        sys.stderr.write(f"Apply update to {info.name}? [y/N] ")
        sys.stderr.flush()
        answer = sys.stdin.readline().strip().lower()
        if answer in {"y", "yes"}:
            approved.append(info)
    return approved


def approve_all(updates: List[UpdateInfo]) -> List[UpdateInfo]:
    return list(updates)


def main(args: argparse.Namespace) -> int:
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))
    try:
        manager = build_manager(args)

        if getattr(args, "dry_run", False):
            updates = manager.collect_updates()
            if formatter.json_mode:
                formatter.json_output({"updates": [u.to_dict() for u in updates]})
            elif not updates:
                formatter.text("All components up to date.")
            else:
                for info in updates:
                    for line in describe(info):
                        formatter.text(line)
            return 0

        reviewer = approve_all if getattr(args, "yes", False) else prompt_reviewer
        result = manager.update(reviewer)
        if result.lock_read_error:
            formatter.error(result.lock_read_error, error_code="lock_read_error")
            return 1
        approved = result.details.get("approved", [])
        if not result.details.get("updates"):
            message = "All components up to date."
        else:
            message = f"Applied {len(approved)} of {len(result.details['updates'])} update(s)."
        return emit_result(formatter, result, message)
    except Exception as e:
        formatter.error(e, error_code="update_error")
        return 1


if __name__ == "__main__":
    parser = argparse.ArgumentParser()
    register_args(parser)
    sys.exit(main(parser.parse_args()))
