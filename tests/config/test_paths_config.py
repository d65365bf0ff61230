from __future__ import annotations

from pathlib import Path

from helpers.io_utils import write_config
from spanner.core.config import LoggingConfig, PathsConfig, TimeoutsConfig


def test_default_layout(isolated_project_env: Path) -> None:
    paths = PathsConfig(repo_root=isolated_project_env)
    assert paths.components_dir == isolated_project_env / ".spanner" / "components"
    assert paths.install_root == isolated_project_env / ".spanner" / "installed"
    assert paths.lockfile_path == isolated_project_env / "spanner-lock.json"


def test_relative_and_absolute_overrides(isolated_project_env: Path, tmp_path: Path) -> None:
    elsewhere = tmp_path / "shared-installs"
    write_config(
        isolated_project_env,
        "paths.yaml",
        {
            "components": {"directory": "decls"},
            "install": {"root": str(elsewhere)},
            "lockfile": {"path": "locks/components.json"},
        },
    )
    paths = PathsConfig(repo_root=isolated_project_env)
    assert paths.components_dir == isolated_project_env / ".spanner" / "decls"
    assert paths.install_root == elsewhere
    assert paths.lockfile_path == isolated_project_env / "locks" / "components.json"


def test_project_config_dir_override(isolated_project_env: Path, monkeypatch) -> None:
    monkeypatch.setenv("SPANNER_paths__project_config_dir", ".deps")
    paths = PathsConfig(repo_root=isolated_project_env)
    assert paths.components_dir == isolated_project_env / ".deps" / "components"


def test_timeouts_and_logging(isolated_project_env: Path) -> None:
    write_config(isolated_project_env, "logging.yaml", {"logging": {"level": "debug", "file": "logs/spanner.log"}})
    assert TimeoutsConfig(repo_root=isolated_project_env).get_all_settings() == {
        "git_operations_seconds": 300.0,
        "default_seconds": 60.0,
    }
    logging_cfg = LoggingConfig(repo_root=isolated_project_env)
    assert logging_cfg.level == "DEBUG"
    assert logging_cfg.file == isolated_project_env / "logs" / "spanner.log"
