"""
spanner configuration management (YAML layers + environment overrides).
"""
from __future__ import annotations

import json
import logging
import os
import re
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Tuple

import jsonschema
import yaml

from spanner.core.exceptions import ValidationError
from spanner.core.utils.io import iter_yaml_files, read_yaml
from spanner.core.utils.merge import deep_merge
from spanner.core.utils.paths import (
    get_project_config_dir,
    get_user_config_dir,
    resolve_project_root,
)
from spanner.data import get_data_path
from spanner.data import read_yaml as read_bundled_yaml

logger = logging.getLogger(__name__)

ENV_PREFIX = "SPANNER_"


class ConfigManager:
    """Load, merge, and validate spanner configuration.

    Configuration sources (highest to lowest priority):
    1. Environment variables: SPANNER_<section>__<key>
    2. Project config: <project>/.spanner/config/*.yaml (alphabetical order)
    3. User config: ~/.spanner/config/*.yaml (alphabetical order)
    4. Bundled defaults: spanner.data/config/*.yaml (alphabetical order)
    """

    def __init__(self, repo_root: Optional[Path] = None) -> None:
        self.repo_root = Path(repo_root) if repo_root else resolve_project_root()
        self.core_config_dir = get_data_path("config")
        self.user_config_dir = get_user_config_dir(create=False) / "config"
        self.project_config_dir = get_project_config_dir(self.repo_root, create=False) / "config"

    def config_dirs(self) -> List[Path]:
        """Return config layers in merge order (lowest priority first)."""
        return [self.core_config_dir, self.user_config_dir, self.project_config_dir]

    def load_yaml(self, path: Path) -> Dict[str, Any]:
        # Fail closed: configuration must never silently ignore invalid YAML.
        try:
            data = read_yaml(path, default={}, raise_on_error=True)
        except yaml.YAMLError as exc:
            raise ValidationError(f"Invalid YAML in {path}: {exc}", source=str(path)) from exc
        if not isinstance(data, dict):
            raise ValidationError(
                f"Config file must contain a mapping: {path}",
                source=str(path),
            )
        return data

    def _as_bool(self, v: str) -> Optional[bool]:
        low = v.strip().lower()
        if low in {"true", "false"}:
            return low == "true"
        return None

    def _as_int(self, v: str) -> Optional[int]:
        if re.fullmatch(r"[-+]?\d+", v.strip() or " "):
            return int(v)
        return None

    def _as_float(self, v: str) -> Optional[float]:
        s = v.strip()
        if re.fullmatch(r"[-+]?\d*\.\d+", s) or re.fullmatch(r"[-+]?\d+\.\d*", s):
            return float(s)
        return None

    def _as_json(self, v: str) -> Optional[Any]:
        s = v.strip()
        if (s.startswith("{") and s.endswith("}")) or (s.startswith("[") and s.endswith("]")):
            try:
                return json.loads(s)
            except json.JSONDecodeError:
                return None
        return None

    def _coerce_type(self, value: str) -> Any:
        for caster in (self._as_bool, self._as_int, self._as_float, self._as_json):
            result = caster(value)
            if result is not None:
                return result
        if value.strip().lower() in {"null", "none"}:
            return None
        return value.strip()

    def _iter_env_overrides(self) -> Iterator[Tuple[List[str], Any]]:
        for key in sorted(os.environ.keys()):
            if not key.startswith(ENV_PREFIX):
                continue
            raw = key[len(ENV_PREFIX):]
            # Only nested keys are config overrides; SPANNER_PROJECT_ROOT and
            # friends are read directly by the path resolver.
            if "__" not in raw:
                continue
            segments = [seg.lower() for seg in raw.split("__")]
            if any(not seg for seg in segments):
                logger.warning("Ignoring malformed config override %s", key)
                continue
            yield segments, self._coerce_type(os.environ[key])

    def _set_nested(self, root: Dict[str, Any], path: List[str], value: Any) -> None:
        cursor = root
        for seg in path[:-1]:
            nxt = cursor.get(seg)
            if not isinstance(nxt, dict):
                nxt = {}
                cursor[seg] = nxt
            cursor = nxt
        cursor[path[-1]] = value

    def apply_env_overrides(self, config: Dict[str, Any]) -> Dict[str, Any]:
        result = dict(config)
        for path, value in self._iter_env_overrides():
            self._set_nested(result, path, value)
        return result

    def validate_schema(self, config: Dict[str, Any]) -> None:
        schema = read_bundled_yaml("schemas", "config.schema.yaml")
        validator = jsonschema.Draft202012Validator(schema)
        errors = sorted(validator.iter_errors(config), key=lambda e: list(e.path))
        if errors:
            first = errors[0]
            where = ".".join(str(p) for p in first.path) or "<root>"
            raise ValidationError(
                f"Invalid configuration at {where}: {first.message}",
                field=where,
                context={"errors": [e.message for e in errors]},
            )

    def load_config(self, validate: bool = True) -> Dict[str, Any]:
        """Load the merged configuration for ``repo_root``."""
        merged: Dict[str, Any] = {}
        for directory in self.config_dirs():
            for path in iter_yaml_files(directory):
                merged = deep_merge(merged, self.load_yaml(path))
                logger.debug("Loaded config layer %s", path)
        merged = self.apply_env_overrides(merged)
        if validate:
            self.validate_schema(merged)
        return merged


__all__ = ["ConfigManager", "ENV_PREFIX"]
