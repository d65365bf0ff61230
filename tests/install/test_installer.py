from __future__ import annotations

from pathlib import Path

import pytest

from helpers.fake_git import FakeTransport
from spanner.core.activation import ActivationEngine, ActivationState, LocalRuntime
from spanner.core.components import Declaration, merge
from spanner.core.exceptions import CycleError
from spanner.core.install import InstallRun, InstallState, Installer, is_corrupt_install
from spanner.core.lockfile import LockEntry, LockStore

APP = "https://x/app"
LIB = "https://x/lib"
CORE = "https://x/core"


def _registry(*decls):
    return merge([Declaration(data=d, source="test.yaml") for d in decls])


@pytest.fixture
def lock(tmp_path: Path) -> LockStore:
    return LockStore(tmp_path / "lock.json")


def test_installs_dependencies_first_and_locks_each(fake_git: FakeTransport, tmp_path: Path, lock: LockStore) -> None:
    for url in (APP, LIB, CORE):
        fake_git.add_remote(url)
    registry = _registry(
        {"url": APP, "dependencies": [LIB]},
        {"url": LIB, "dependencies": [CORE]},
    )
    installer = Installer(fake_git, tmp_path / "installed")

    run = installer.install_all([APP], registry, lock)

    assert [target for op, target in fake_git.calls if op == "clone"] == [CORE, LIB, APP]
    assert run.lock_changed is True
    assert set(run.cloned) == {APP, LIB, CORE}
    assert lock.get(APP) == LockEntry(branch="main", commit=fake_git.remotes[APP].head())
    assert all(run.state(i) is InstallState.INSTALLED for i in (APP, LIB, CORE))


def test_shared_dependency_is_processed_once(fake_git: FakeTransport, tmp_path: Path, lock: LockStore) -> None:
    for url in (APP, LIB, CORE):
        fake_git.add_remote(url)
    registry = _registry(
        {"url": APP, "dependencies": [LIB, CORE]},
        {"url": LIB, "dependencies": [CORE]},
    )
    installer = Installer(fake_git, tmp_path / "installed")
    run = InstallRun()

    installer.ensure_installed(APP, registry, lock, run)
    installer.ensure_installed(LIB, registry, lock, run)

    assert fake_git.count("clone") == 3


def test_shared_dependency_hook_runs_once(fake_git: FakeTransport, tmp_path: Path, lock: LockStore) -> None:
    for url in (APP, LIB, CORE):
        fake_git.add_remote(url)
    calls = []
    registry = _registry(
        {"url": APP, "dependencies": [CORE]},
        {"url": LIB, "dependencies": [CORE]},
        {"url": CORE, "hook": lambda: calls.append(CORE)},
    )
    engine = ActivationEngine(LocalRuntime())
    installer = Installer(fake_git, tmp_path / "installed", activation=engine)

    installer.install_all([APP, LIB], registry, lock)
    installer.install_all([LIB, APP], registry, lock)

    assert calls == [CORE]
    assert engine.state(CORE) is ActivationState.ACTIVE
    assert fake_git.count("clone") == 3


def test_second_run_is_a_noop(fake_git: FakeTransport, tmp_path: Path, lock: LockStore) -> None:
    fake_git.add_remote(APP)
    registry = _registry({"url": APP})
    installer = Installer(fake_git, tmp_path / "installed")
    installer.install_all([APP], registry, lock)

    run = installer.install_all([APP], registry, lock)

    assert fake_git.count("clone") == 1
    assert run.lock_changed is False
    assert run.cloned == []


def test_clone_failure_marks_dependents_failed_and_siblings_continue(
    fake_git: FakeTransport, tmp_path: Path, lock: LockStore
) -> None:
    for url in (APP, LIB, CORE):
        fake_git.add_remote(url)
    fake_git.fail_clone.add(LIB)
    registry = _registry({"url": APP, "dependencies": [LIB]}, {"url": CORE})
    installer = Installer(fake_git, tmp_path / "installed")

    run = installer.install_all([APP, CORE], registry, lock)

    assert run.state(LIB) is InstallState.FAILED
    assert run.state(APP) is InstallState.FAILED
    assert "dependency failed" in run.failures[APP]
    assert run.state(CORE) is InstallState.INSTALLED
    assert APP not in lock and CORE in lock
    assert not (tmp_path / "installed" / "app").exists()


def test_corrupt_install_is_removed_and_recloned(fake_git: FakeTransport, tmp_path: Path, lock: LockStore) -> None:
    fake_git.add_remote(APP)
    broken = tmp_path / "installed" / "app"
    (broken / ".git").mkdir(parents=True)
    assert is_corrupt_install(broken)

    run = Installer(fake_git, tmp_path / "installed").install_all([APP], _registry({"url": APP}), lock)

    assert fake_git.count("clone") == 1
    assert (broken / "README.md").exists()
    assert run.cloned == [APP]


def test_existing_lock_entry_is_left_alone(fake_git: FakeTransport, tmp_path: Path, lock: LockStore) -> None:
    fake_git.add_remote(APP)
    lock.set(APP, LockEntry(branch="main", commit="0" * 40))
    lock.dirty = False

    run = Installer(fake_git, tmp_path / "installed").install_all([APP], _registry({"url": APP}), lock)

    assert lock.get(APP).commit == "0" * 40
    assert run.lock_changed is False


def test_clone_honours_tag_and_commit_pins(fake_git: FakeTransport, tmp_path: Path, lock: LockStore) -> None:
    tagged = fake_git.add_remote(LIB, commits=3)
    tagged.tag("v1.0", commit=tagged.branches["main"][0])
    pinned = fake_git.add_remote(CORE, commits=3)
    first = pinned.branches["main"][0]
    registry = _registry(
        {"url": LIB, "tag": "v1.0"},
        {"url": CORE, "branch": "main", "commit": first[:8]},
    )

    Installer(fake_git, tmp_path / "installed").install_all([LIB, CORE], registry, lock)

    assert lock.get(LIB) == LockEntry(branch="", commit=tagged.branches["main"][0])
    # Detached at the commit; the pinned branch is recorded.
    assert lock.get(CORE) == LockEntry(branch="main", commit=first)


def test_reentering_a_processing_identity_is_a_cycle(fake_git: FakeTransport, tmp_path: Path, lock: LockStore) -> None:
    registry = _registry({"url": APP})
    run = InstallRun(states={APP: InstallState.PROCESSING})
    with pytest.raises(CycleError):
        Installer(fake_git, tmp_path / "installed").ensure_installed(APP, registry, lock, run)


def test_cycle_is_detected_before_anything_is_cloned(fake_git: FakeTransport, tmp_path: Path, lock: LockStore) -> None:
    fake_git.add_remote(APP)
    fake_git.add_remote(LIB)
    registry = _registry({"url": APP, "dependencies": [LIB]}, {"url": LIB, "dependencies": [APP]})
    with pytest.raises(CycleError):
        Installer(fake_git, tmp_path / "installed").install_all([APP], registry, lock)
    assert fake_git.calls == []


def test_installed_components_register_with_activation(fake_git: FakeTransport, tmp_path: Path, lock: LockStore) -> None:
    fake_git.add_remote(APP)
    fake_git.add_remote(LIB)
    runtime = LocalRuntime()
    engine = ActivationEngine(runtime)
    registry = _registry({"url": APP, "dependencies": [LIB], "events": ["startup"]})

    Installer(fake_git, tmp_path / "installed", activation=engine).install_all([APP], registry, lock)

    assert engine.state(LIB) is ActivationState.ACTIVE
    assert engine.state(APP) is ActivationState.ARMED
    assert runtime.search_path == [tmp_path / "installed" / "lib"]
