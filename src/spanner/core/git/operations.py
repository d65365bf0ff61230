"""Version-control transport backed by the ``git`` binary."""
from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import List, Optional, Protocol, Sequence, runtime_checkable

from spanner.core.exceptions import TransportError
from spanner.core.utils.subprocess import run_git_command

logger = logging.getLogger(__name__)


def revisions_match(a: Optional[str], b: Optional[str]) -> bool:
    """True when two revisions name the same commit (abbreviations allowed)."""
    if not a or not b:
        return False
    a, b = a.strip().lower(), b.strip().lower()
    return a.startswith(b) or b.startswith(a)


@runtime_checkable
class Transport(Protocol):
    """Operations the installer, sync engine and update workflow need.

    Mutating operations and required queries raise ``TransportError``.
    Optional queries (``current_branch``, ``log_range``, ``nearest_tag``)
    return ``None`` or ``[]`` instead.
    """

    def clone(
        self,
        url: str,
        dest: Path,
        *,
        branch: Optional[str] = None,
        tag: Optional[str] = None,
        commit: Optional[str] = None,
    ) -> None: ...

    def pull(self, path: Path) -> None: ...

    def fetch(self, path: Path) -> None: ...

    def checkout(self, path: Path, ref: str) -> None: ...

    def current_revision(self, path: Path) -> str: ...

    def current_branch(self, path: Path) -> Optional[str]: ...

    def remote_revision(self, path: Path, branch: str) -> str: ...

    def log_range(self, path: Path, old: str, new: str) -> List[str]: ...

    def nearest_tag(self, path: Path, commit: str) -> Optional[str]: ...


class GitTransport:
    """``Transport`` implementation that shells out to git.

    Every invocation uses the configured ``timeouts.git_operations_seconds``
    (or ``timeout`` when given) and runs with ``GIT_TERMINAL_PROMPT=0``.
    """

    def __init__(self, *, timeout: Optional[float] = None, repo_root: Optional[Path] = None) -> None:
        self.timeout = timeout
        self.repo_root = repo_root

    def _run(self, args: Sequence[str], *, cwd: Optional[Path], operation: str) -> str:
        cmd = ["git", *args]
        try:
            result = run_git_command(
                cmd,
                cwd=cwd,
                timeout=self.timeout,
                capture_output=True,
                text=True,
                repo_root=self.repo_root,
            )
        except subprocess.TimeoutExpired as exc:
            raise TransportError(
                f"git {operation} timed out after {exc.timeout}s",
                operation=operation,
                path=str(cwd) if cwd else None,
            ) from exc
        except OSError as exc:
            raise TransportError(
                f"git {operation} could not run: {exc}",
                operation=operation,
                path=str(cwd) if cwd else None,
            ) from exc
        if result.returncode != 0:
            stderr = (result.stderr or "").strip()
            raise TransportError(
                f"git {operation} failed: {stderr or 'exit ' + str(result.returncode)}",
                operation=operation,
                path=str(cwd) if cwd else None,
                stderr=stderr,
            )
        return (result.stdout or "").strip()

    def _query(self, args: Sequence[str], *, cwd: Path, operation: str) -> Optional[str]:
        try:
            out = self._run(args, cwd=cwd, operation=operation)
        except TransportError as exc:
            logger.debug("%s", exc)
            return None
        return out or None

    def clone(
        self,
        url: str,
        dest: Path,
        *,
        branch: Optional[str] = None,
        tag: Optional[str] = None,
        commit: Optional[str] = None,
    ) -> None:
        dest = Path(dest)
        dest.parent.mkdir(parents=True, exist_ok=True)
        args = ["clone", "--quiet"]
        ref = tag or branch
        if ref:
            args += ["--branch", ref]
        args += [url, str(dest)]
        self._run(args, cwd=dest.parent, operation="clone")
        if commit:
            self.checkout(dest, commit)

    def pull(self, path: Path) -> None:
        self._run(["pull", "--ff-only", "--quiet"], cwd=path, operation="pull")

    def fetch(self, path: Path) -> None:
        self._run(["fetch", "--quiet", "--tags", "origin"], cwd=path, operation="fetch")

    def checkout(self, path: Path, ref: str) -> None:
        self._run(["checkout", "--quiet", ref], cwd=path, operation="checkout")

    def current_revision(self, path: Path) -> str:
        return self._run(["rev-parse", "HEAD"], cwd=path, operation="rev-parse")

    def current_branch(self, path: Path) -> Optional[str]:
        # symbolic-ref exits non-zero on a detached HEAD.
        return self._query(["symbolic-ref", "--quiet", "--short", "HEAD"], cwd=path, operation="symbolic-ref")

    def remote_revision(self, path: Path, branch: str) -> str:
        return self._run(["rev-parse", f"origin/{branch}"], cwd=path, operation="rev-parse")

    def log_range(self, path: Path, old: str, new: str) -> List[str]:
        rng = f"{old}..{new}" if old else new
        out = self._query(["log", "--oneline", rng], cwd=path, operation="log")
        return out.splitlines() if out else []

    def nearest_tag(self, path: Path, commit: str) -> Optional[str]:
        return self._query(["describe", "--tags", "--abbrev=0", commit], cwd=path, operation="describe")


__all__ = ["Transport", "GitTransport", "revisions_match"]
