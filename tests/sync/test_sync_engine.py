from __future__ import annotations

from pathlib import Path

import pytest

from helpers.fake_git import FakeTransport
from spanner.core.components import Declaration, merge
from spanner.core.install import Installer
from spanner.core.lockfile import LockEntry, LockStore
from spanner.core.sync import SyncEngine

URL = "https://x/widget"


def _registry(*decls):
    return merge([Declaration(data=d, source="test.yaml") for d in decls])


@pytest.fixture
def lock(tmp_path: Path) -> LockStore:
    return LockStore(tmp_path / "lock.json")


def _install(fake_git: FakeTransport, install_root: Path, registry, lock: LockStore) -> None:
    Installer(fake_git, install_root).install_all(list(registry), registry, lock)


def test_branch_pin_pulls_latest(fake_git: FakeTransport, install_root: Path, lock: LockStore) -> None:
    remote = fake_git.add_remote(URL)
    registry = _registry({"url": URL, "branch": "main"})
    _install(fake_git, install_root, registry, lock)
    newest = remote.commit("main", "upstream fix")

    report = SyncEngine(fake_git, install_root).sync_all(registry, lock)

    assert report.lock_changed is True
    assert report.synced == [URL]
    assert lock.get(URL) == LockEntry(branch="main", commit=newest)
    assert fake_git.count("pull") == 1


def test_branch_pin_recovers_from_detached_head(fake_git: FakeTransport, install_root: Path, lock: LockStore) -> None:
    remote = fake_git.add_remote(URL, commits=2)
    registry = _registry({"url": URL, "branch": "main"})
    _install(fake_git, install_root, registry, lock)
    fake_git.checkout(install_root / "widget", remote.branches["main"][0])

    SyncEngine(fake_git, install_root).sync_all(registry, lock)

    state = fake_git.state(install_root / "widget")
    assert state.branch == "main"
    assert state.head == remote.head()


def test_commit_pin_checks_out_and_locks_full_revision(
    fake_git: FakeTransport, install_root: Path, lock: LockStore
) -> None:
    remote = fake_git.add_remote(URL, commits=3)
    first = remote.branches["main"][0]
    _install(fake_git, install_root, _registry({"url": URL}), lock)
    registry = _registry({"url": URL, "branch": "main", "commit": first[:10]})

    report = SyncEngine(fake_git, install_root).sync_all(registry, lock)

    assert report.lock_changed is True
    assert lock.get(URL) == LockEntry(branch="main", commit=first)
    assert fake_git.state(install_root / "widget").head == first


def test_commit_pin_already_satisfied_skips_checkout(
    fake_git: FakeTransport, install_root: Path, lock: LockStore
) -> None:
    remote = fake_git.add_remote(URL)
    head = remote.head()
    registry = _registry({"url": URL, "branch": "main", "commit": head})
    _install(fake_git, install_root, registry, lock)
    checkouts = fake_git.count("checkout")

    report = SyncEngine(fake_git, install_root).sync_all(registry, lock)

    assert fake_git.count("checkout") == checkouts
    assert report.lock_changed is False


def test_tag_pin_checks_out_tag(fake_git: FakeTransport, install_root: Path, lock: LockStore) -> None:
    remote = fake_git.add_remote(URL, commits=2)
    _install(fake_git, install_root, _registry({"url": URL}), lock)
    tagged = remote.tag("v2.0")
    remote.commit("main", "after release")
    registry = _registry({"url": URL, "tag": "v2.0"})

    SyncEngine(fake_git, install_root).sync_all(registry, lock)

    assert lock.get(URL) == LockEntry(branch="", commit=tagged)


def test_unpinned_component_is_left_alone(fake_git: FakeTransport, install_root: Path, lock: LockStore) -> None:
    remote = fake_git.add_remote(URL)
    registry = _registry({"url": URL})
    _install(fake_git, install_root, registry, lock)
    before = lock.get(URL)
    remote.commit("main", "ignored")
    calls = len(fake_git.calls)

    report = SyncEngine(fake_git, install_root).sync_all(registry, lock)

    assert len(fake_git.calls) == calls
    assert report.lock_changed is False
    assert lock.get(URL) == before


def test_second_sync_is_idempotent(fake_git: FakeTransport, install_root: Path, lock: LockStore) -> None:
    fake_git.add_remote(URL)
    registry = _registry({"url": URL, "branch": "main"})
    _install(fake_git, install_root, registry, lock)
    engine = SyncEngine(fake_git, install_root)
    engine.sync_all(registry, lock)

    assert engine.sync_all(registry, lock).lock_changed is False


def test_failure_is_isolated_to_one_component(fake_git: FakeTransport, install_root: Path, lock: LockStore) -> None:
    other = "https://x/gadget"
    fake_git.add_remote(URL)
    remote = fake_git.add_remote(other)
    registry = _registry({"url": URL, "branch": "main"}, {"url": other, "branch": "main"})
    _install(fake_git, install_root, registry, lock)
    newest = remote.commit("main", "new")
    fake_git.fail_ops.add(("pull", "widget"))

    report = SyncEngine(fake_git, install_root).sync_all(registry, lock)

    assert URL in report.failures
    assert report.synced == [other]
    assert lock.get(other).commit == newest


def test_missing_install_is_skipped(fake_git: FakeTransport, install_root: Path, lock: LockStore) -> None:
    registry = _registry({"url": URL, "branch": "main"})
    report = SyncEngine(fake_git, install_root).sync_all(registry, lock)
    assert report.synced == []
    assert fake_git.calls == []


def test_visited_identity_is_not_synced_twice(fake_git: FakeTransport, install_root: Path, lock: LockStore) -> None:
    fake_git.add_remote(URL)
    registry = _registry({"url": URL, "branch": "main"})
    _install(fake_git, install_root, registry, lock)
    engine = SyncEngine(fake_git, install_root)
    visited: set = set()

    engine.sync(URL, registry[URL], lock, visited)
    engine.sync(URL, registry[URL], lock, visited)

    assert fake_git.count("pull") == 1
