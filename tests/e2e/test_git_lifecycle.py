"""Full lifecycle against real git repositories on disk."""
from __future__ import annotations

import json
from pathlib import Path

import pytest

from helpers.git_helpers import git, git_commit, git_head, git_log, make_upstream
from spanner.core.activation import LocalRuntime
from spanner.core.git import GitTransport
from spanner.core.manager import ComponentManager

pytestmark = pytest.mark.requires_git


@pytest.fixture
def remotes(tmp_path: Path) -> Path:
    root = tmp_path / "remotes"
    make_upstream(root, "editor-core", commits=2)
    make_upstream(root, "syntax", commits=3)
    return root


def _manager(project: Path, **kwargs) -> ComponentManager:
    return ComponentManager(project, transport=GitTransport(timeout=60, repo_root=project), **kwargs)


def _lock(project: Path) -> dict:
    return json.loads((project / "spanner-lock.json").read_text(encoding="utf-8"))


def test_add_sync_update_restore(isolated_project_env: Path, remotes: Path) -> None:
    core = str(remotes / "editor-core")
    syntax = str(remotes / "syntax")
    install_root = isolated_project_env / ".spanner" / "installed"

    manager = _manager(isolated_project_env, runtime=LocalRuntime())
    added = manager.add({"url": syntax, "branch": "main", "dependencies": [core]})
    assert added.ok, added.failures
    assert (install_root / "editor-core" / "README.md").is_file()
    assert _lock(isolated_project_env)[syntax] == {"branch": "main", "commit": git_head(remotes / "syntax")}
    assert _lock(isolated_project_env)[core]["branch"] == "main"

    # Upstream moves; sync follows the branch pin.
    newer = git_commit(remotes / "syntax", "highlight more")
    synced = manager.sync()
    assert synced.ok
    assert _lock(isolated_project_env)[syntax]["commit"] == newer

    # Upstream moves again; update offers it and restore checks it out.
    newest = git_commit(remotes / "syntax", "highlight everything")
    result = manager.update(lambda updates: updates)
    assert result.ok, result.failures
    assert result.details["approved"] == [syntax]
    assert git_head(install_root / "syntax") == newest

    # Pin the dependency to its first commit and sync back to it.
    first_core = git_log(remotes / "editor-core")[-1]
    pinned = _manager(isolated_project_env)
    pinned.register([
        {"url": syntax, "branch": "main", "dependencies": [core]},
        {"url": core, "branch": "main", "commit": first_core[:10]},
    ])
    assert pinned.sync().ok
    assert git_head(install_root / "editor-core") == first_core
    assert _lock(isolated_project_env)[core] == {"branch": "main", "commit": first_core}

    # Drift the working copy, then restore to the lock.
    git(install_root / "syntax", "checkout", "--quiet", git_log(remotes / "syntax")[-1])
    restored = pinned.restore()
    assert restored.details["restored"] == [syntax]
    assert git_head(install_root / "syntax") == newest


def test_restore_reclones_missing_component(isolated_project_env: Path, remotes: Path) -> None:
    import shutil

    core = str(remotes / "editor-core")
    install_root = isolated_project_env / ".spanner" / "installed"
    manager = _manager(isolated_project_env)
    manager.add({"url": core})
    locked = _lock(isolated_project_env)[core]["commit"]
    git_commit(remotes / "editor-core", "later")
    shutil.rmtree(install_root / "editor-core")

    result = manager.restore()

    assert result.details["cloned"] == [core]
    assert git_head(install_root / "editor-core") == locked
