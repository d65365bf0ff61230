"""
spanner list command.

SUMMARY: List declared components and their locked versions
"""

from __future__ import annotations

import argparse
import sys

from spanner.cli import OutputFormatter, add_standard_flags, build_manager
from spanner.core.lockfile import LockStore

SUMMARY = "List declared components and their locked versions"


def register_args(parser: argparse.ArgumentParser) -> None:
    add_standard_flags(parser)


def main(args: argparse.Namespace) -> int:
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))
    try:
        manager = build_manager(args)
        specs = manager.list_registered()
        lock = LockStore.read(manager.lockfile_path)

        rows = []
        for identity, spec in specs.items():
            entry = lock.get(identity)
            row = spec.to_dict()
            row["name"] = spec.name
            row["installed"] = (manager.install_root / spec.name).is_dir()
            row["locked"] = entry.to_dict() if entry else None
            rows.append(row)

        if formatter.json_mode:
            formatter.json_output({"components": rows})
            return 0

        if not rows:
            formatter.text("No components declared.")
            return 0
        for row in rows:
            locked = row["locked"]["commit"][:7] if row["locked"] else "-"
            status = "installed" if row["installed"] else "missing"
            formatter.text(f"{row['name']:<24} {locked:<8} {status:<9} {row['url']}")
        return 0
    except Exception as e:
        formatter.error(e, error_code="list_error")
        return 1


if __name__ == "__main__":
    parser = argparse.ArgumentParser()
    register_args(parser)
    sys.exit(main(parser.parse_args()))
