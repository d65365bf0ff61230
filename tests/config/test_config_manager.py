from __future__ import annotations

from pathlib import Path

import pytest

from helpers.io_utils import write_config, write_yaml
from spanner.core.config import ConfigManager, get_cached_config
from spanner.core.exceptions import ValidationError


def test_bundled_defaults_are_loaded(isolated_project_env: Path) -> None:
    cfg = ConfigManager(isolated_project_env).load_config()
    assert cfg["timeouts"]["git_operations_seconds"] == 300
    assert cfg["lockfile"]["path"] == "spanner-lock.json"
    assert cfg["logging"]["level"] == "INFO"


def test_project_layer_overrides_bundled(isolated_project_env: Path) -> None:
    write_config(isolated_project_env, "timeouts.yaml", {"timeouts": {"git_operations_seconds": 12}})
    cfg = ConfigManager(isolated_project_env).load_config()
    assert cfg["timeouts"]["git_operations_seconds"] == 12
    assert cfg["timeouts"]["default_seconds"] == 60


def test_user_layer_sits_between_bundled_and_project(isolated_project_env: Path, tmp_path: Path, monkeypatch) -> None:
    user_dir = tmp_path / "home-spanner"
    monkeypatch.setenv("SPANNER_paths__user_config_dir", str(user_dir))
    write_yaml(user_dir / "config" / "mine.yaml", {"timeouts": {"default_seconds": 5, "git_operations_seconds": 7}})
    write_config(isolated_project_env, "timeouts.yaml", {"timeouts": {"git_operations_seconds": 9}})

    cfg = ConfigManager(isolated_project_env).load_config()

    assert cfg["timeouts"] == {"default_seconds": 5, "git_operations_seconds": 9}


def test_env_overrides_win_and_are_coerced(isolated_project_env: Path, monkeypatch) -> None:
    write_config(isolated_project_env, "timeouts.yaml", {"timeouts": {"git_operations_seconds": 12}})
    monkeypatch.setenv("SPANNER_TIMEOUTS__GIT_OPERATIONS_SECONDS", "45")
    monkeypatch.setenv("SPANNER_LOGGING__FILE", "null")

    cfg = ConfigManager(isolated_project_env).load_config()

    assert cfg["timeouts"]["git_operations_seconds"] == 45
    assert cfg["logging"]["file"] is None


def test_flat_env_vars_are_not_config(isolated_project_env: Path) -> None:
    cfg = ConfigManager(isolated_project_env).load_config()
    assert "project_root" not in cfg


def test_invalid_yaml_fails_closed(isolated_project_env: Path) -> None:
    (isolated_project_env / ".spanner" / "config" / "broken.yaml").write_text("a: [b\n", encoding="utf-8")
    with pytest.raises(ValidationError, match="Invalid YAML"):
        ConfigManager(isolated_project_env).load_config()


def test_non_mapping_config_file_is_rejected(isolated_project_env: Path) -> None:
    write_config(isolated_project_env, "list.yaml", ["not", "a", "mapping"])
    with pytest.raises(ValidationError, match="must contain a mapping"):
        ConfigManager(isolated_project_env).load_config()


def test_schema_violations_name_the_field(isolated_project_env: Path) -> None:
    write_config(isolated_project_env, "timeouts.yaml", {"timeouts": {"git_operations_seconds": -1}})
    with pytest.raises(ValidationError) as excinfo:
        ConfigManager(isolated_project_env).load_config()
    assert excinfo.value.context["field"] == "timeouts.git_operations_seconds"


def test_cache_notices_changed_files(isolated_project_env: Path) -> None:
    first = get_cached_config(isolated_project_env)
    assert get_cached_config(isolated_project_env) is first

    write_config(isolated_project_env, "timeouts.yaml", {"timeouts": {"default_seconds": 3}})

    assert get_cached_config(isolated_project_env)["timeouts"]["default_seconds"] == 3


def test_cache_notices_env_changes(isolated_project_env: Path, monkeypatch) -> None:
    assert get_cached_config(isolated_project_env)["logging"]["level"] == "INFO"
    monkeypatch.setenv("SPANNER_LOGGING__LEVEL", "DEBUG")
    assert get_cached_config(isolated_project_env)["logging"]["level"] == "DEBUG"
