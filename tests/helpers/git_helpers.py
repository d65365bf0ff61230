"""Real git repositories for integration tests."""
from __future__ import annotations

from pathlib import Path
from typing import List

from spanner.core.utils.subprocess import run_with_timeout

_IDENTITY = ["-c", "user.name=Test User", "-c", "user.email=test@example.com"]


def git(repo_path: Path, *args: str) -> str:
    result = run_with_timeout(
        ["git", *_IDENTITY, *args],
        cwd=repo_path,
        check=True,
        capture_output=True,
        text=True,
        timeout=60,
    )
    return result.stdout.strip()


def git_init(repo_path: Path, branch: str = "main") -> None:
    repo_path.mkdir(parents=True, exist_ok=True)
    git(repo_path, "init", "-b", branch)


def git_commit(repo_path: Path, message: str, filename: str = "README.md") -> str:
    """Change ``filename``, commit and return the new HEAD."""
    target = repo_path / filename
    previous = target.read_text(encoding="utf-8") if target.exists() else ""
    target.write_text(previous + message + "\n", encoding="utf-8")
    git(repo_path, "add", "-A")
    git(repo_path, "commit", "-m", message)
    return git(repo_path, "rev-parse", "HEAD")


def make_upstream(root: Path, name: str, commits: int = 1) -> Path:
    """Create an upstream repository with ``commits`` commits on main."""
    repo = root / name
    git_init(repo)
    for i in range(commits):
        git_commit(repo, f"{name} commit {i}")
    return repo


def git_head(repo_path: Path) -> str:
    return git(repo_path, "rev-parse", "HEAD")


def git_log(repo_path: Path) -> List[str]:
    return git(repo_path, "log", "--format=%H").splitlines()
