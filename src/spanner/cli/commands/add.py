"""
spanner add command.

SUMMARY: Register components from YAML files and install them
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Dict, Optional

from spanner.cli import OutputFormatter, add_standard_flags, build_manager, emit_result
from spanner.core.components import load_file
from spanner.core.utils.io import read_text, write_text

SUMMARY = "Register components from YAML files and install them"


def register_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "files",
        nargs="+",
        metavar="FILE",
        help=(
            "YAML file(s) with one component mapping or a list of them; files outside "
            "the components directory are copied into it so later syncs keep them"
        ),
    )
    add_standard_flags(parser)


def _relative_to(path: Path, directory: Path) -> Optional[str]:
    try:
        return path.resolve().relative_to(directory.resolve()).as_posix()
    except ValueError:
        return None


def main(args: argparse.Namespace) -> int:
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))
    try:
        manager = build_manager(args)
        components_dir = manager.components_dir
        declarations = []
        # Declaration file name -> contents to copy into the components directory.
        pending: Dict[str, str] = {}
        for raw in args.files:
            path = Path(raw)
            source = _relative_to(path, components_dir)
            if source is None:
                source = path.name
                content = read_text(path)
                target = components_dir / source
                existing = pending.get(source)
                if existing is None and target.exists():
                    existing = read_text(target)
                if existing is not None and existing != content:
                    formatter.error(
                        f"{target} already exists with different content",
                        error_code="add_error",
                    )
                    return 1
                pending[source] = content
            declarations.extend(load_file(path, source=source))
        if not declarations:
            formatter.error("No component declarations found in the given files", error_code="empty")
            return 1

        result = manager.add(declarations)
        for name, content in pending.items():
            write_text(components_dir / name, content)
        installed = result.details.get("installed", [])
        message = f"Added {len(result.details.get('roots', []))} component(s); installed {len(installed)}."
        return emit_result(formatter, result, message, {"copied": sorted(pending)})
    except Exception as e:
        formatter.error(e, error_code="add_error")
        return 1


if __name__ == "__main__":
    parser = argparse.ArgumentParser()
    register_args(parser)
    sys.exit(main(parser.parse_args()))
