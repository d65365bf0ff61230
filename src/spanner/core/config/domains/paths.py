"""Filesystem layout: declarations directory, install root, lockfile."""
from __future__ import annotations

from functools import cached_property
from pathlib import Path

from spanner.core.utils.paths import get_project_config_dir

from ..base import BaseDomainConfig


class PathsConfig(BaseDomainConfig):
    """Resolved locations used by the component manager.

    ``components.directory`` and ``install.root`` resolve against the project
    config directory; ``lockfile.path`` resolves against the project root.
    Absolute and ``~`` paths are used as given.
    """

    def _config_section(self) -> str:
        return "paths"

    @cached_property
    def project_config_dir(self) -> Path:
        return get_project_config_dir(self.repo_root)

    def _resolve(self, value: str, base: Path) -> Path:
        path = Path(value).expanduser()
        return path if path.is_absolute() else (base / path)

    @cached_property
    def components_dir(self) -> Path:
        value = self.other_section("components").get("directory") or "components"
        return self._resolve(str(value), self.project_config_dir)

    @cached_property
    def install_root(self) -> Path:
        value = self.other_section("install").get("root") or "installed"
        return self._resolve(str(value), self.project_config_dir)

    @cached_property
    def lockfile_path(self) -> Path:
        value = self.other_section("lockfile").get("path") or "spanner-lock.json"
        return self._resolve(str(value), self.repo_root)


__all__ = ["PathsConfig"]
