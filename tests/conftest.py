import os
import shutil
import sys
from pathlib import Path

import pytest

TESTS_ROOT = Path(__file__).resolve().parent
REPO_ROOT = TESTS_ROOT.parent
SRC_ROOT = REPO_ROOT / "src"

# Make src/ importable as 'spanner' and tests/helpers as 'helpers'
for p in (SRC_ROOT, TESTS_ROOT):
    if str(p) not in sys.path:
        sys.path.insert(0, str(p))

from helpers.cache_utils import reset_spanner_caches
from helpers.fake_git import FakeTransport


def pytest_collection_modifyitems(config, items):  # type: ignore[no-untyped-def]
    if shutil.which("git"):
        return
    skip_git = pytest.mark.skip(reason="git binary not available")
    for item in items:
        if "requires_git" in item.keywords:
            item.add_marker(skip_git)


@pytest.fixture(autouse=True)
def _isolate_spanner_env(tmp_path_factory, monkeypatch):
    """Fresh caches and no developer SPANNER_* settings for every test."""
    for key in list(os.environ):
        if key.startswith("SPANNER_"):
            monkeypatch.delenv(key, raising=False)
    # Keep ~/.spanner/config on the developer machine out of every test.
    user_dir = tmp_path_factory.mktemp("user-config")
    monkeypatch.setenv("SPANNER_paths__user_config_dir", str(user_dir))
    reset_spanner_caches()
    yield
    reset_spanner_caches()


@pytest.fixture
def isolated_project_env(tmp_path, monkeypatch) -> Path:
    """An empty project root with ``.spanner/config`` that is also the cwd."""
    root = tmp_path / "project"
    (root / ".spanner" / "config").mkdir(parents=True)
    monkeypatch.setenv("SPANNER_PROJECT_ROOT", str(root))
    monkeypatch.chdir(root)
    return root


@pytest.fixture
def fake_git() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def install_root(isolated_project_env: Path) -> Path:
    return isolated_project_env / ".spanner" / "installed"


@pytest.fixture
def lockfile_path(isolated_project_env: Path) -> Path:
    return isolated_project_env / "spanner-lock.json"
