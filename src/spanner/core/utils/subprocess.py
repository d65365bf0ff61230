from __future__ import annotations

"""Subprocess helpers with config-driven timeouts and command wrappers.

This module provides safe subprocess execution with:
- Config-driven timeout management
- Process-group termination when captured output times out
- No shell=True (security)
"""

import logging
import os
import shlex
import signal
import subprocess
from pathlib import Path
from time import perf_counter
from typing import Any, Dict, List, MutableMapping, Optional, Sequence

from spanner.core.config.domains.timeouts import TimeoutsConfig

logger = logging.getLogger(__name__)


def _flatten_cmd(cmd: Any) -> List[str]:
    if isinstance(cmd, (list, tuple)):
        return [str(p) for p in cmd]
    return shlex.split(str(cmd))


def _infer_timeout_type(cmd: Any) -> str:
    parts = _flatten_cmd(cmd)
    if parts and Path(parts[0]).name.lower() == "git":
        return "git_operations"
    return "default"


def _popen_process_group_kwargs() -> Dict[str, Any]:
    if os.name == "posix":
        return {"start_new_session": True}
    return {}


def _terminate_process_group(proc: subprocess.Popen[Any]) -> None:
    if proc.poll() is not None:
        return
    if os.name == "posix":
        try:
            os.killpg(proc.pid, signal.SIGTERM)
        except OSError:
            proc.terminate()
        try:
            proc.wait(timeout=0.2)
        except subprocess.TimeoutExpired:
            try:
                os.killpg(proc.pid, signal.SIGKILL)
            except OSError:
                proc.kill()
            try:
                proc.wait(timeout=0.2)
            except subprocess.TimeoutExpired:
                logger.warning("Process %s did not exit after SIGKILL", proc.pid)
        return

    proc.kill()
    try:
        proc.wait(timeout=0.2)
    except subprocess.TimeoutExpired:
        logger.warning("Process %s did not exit after kill", proc.pid)


def _run_capture_output_nohang(cmd: Any, *, timeout: float, **kwargs: Any) -> subprocess.CompletedProcess:
    argv = _flatten_cmd(cmd)
    input_value = kwargs.pop("input", None)
    cwd = kwargs.pop("cwd", None)
    env = kwargs.pop("env", None)
    text = bool(kwargs.pop("text", True))
    check = bool(kwargs.pop("check", False))
    kwargs.pop("capture_output", None)

    proc = subprocess.Popen(
        argv,
        cwd=cwd,
        env=env,
        stdin=subprocess.PIPE if input_value is not None else subprocess.DEVNULL,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        text=text,
        **_popen_process_group_kwargs(),
    )
    try:
        stdout, stderr = proc.communicate(input=input_value, timeout=timeout)
    except subprocess.TimeoutExpired as exc:
        _terminate_process_group(proc)
        try:
            stdout, stderr = proc.communicate(timeout=0.2)
        except (subprocess.TimeoutExpired, ValueError, OSError):
            stdout = getattr(exc, "output", None)
            stderr = getattr(exc, "stderr", None)
        raise subprocess.TimeoutExpired(argv, timeout, output=stdout, stderr=stderr) from None

    completed = subprocess.CompletedProcess(
        argv,
        proc.returncode if proc.returncode is not None else 0,
        stdout=stdout,
        stderr=stderr,
    )
    if check and completed.returncode != 0:
        raise subprocess.CalledProcessError(
            completed.returncode,
            argv,
            output=stdout,
            stderr=stderr,
        )
    return completed


def configured_timeout(
    cmd: Any,
    timeout_type: str | None = None,
    repo_root: Path | str | None = None,
) -> float:
    """Get the configured timeout for a command.

    Args:
        cmd: Command to get timeout for
        timeout_type: Explicit timeout type (``git_operations`` or ``default``)
        repo_root: Project whose configuration applies (auto-detected if None)

    Returns:
        Timeout in seconds
    """
    timeout_config = TimeoutsConfig(repo_root=Path(repo_root) if repo_root else None)
    ttype = timeout_type or _infer_timeout_type(cmd)
    if ttype == "git_operations":
        return timeout_config.git_operations_seconds
    return timeout_config.default_seconds


def run_with_timeout(cmd, timeout_type: str | None = None, **kwargs):
    """Run a subprocess using the configured timeout bucket.

    Args:
        cmd: Command list/str passed through to ``subprocess.run``.
        timeout_type: Timeout bucket (e.g., ``git_operations``).
        **kwargs: Additional arguments forwarded to ``subprocess.run``.
            ``timeout`` overrides the configured value; ``repo_root`` selects
            which project's configuration to read.

    Raises:
        subprocess.TimeoutExpired: When the command exceeds its timeout.
    """
    explicit_timeout = kwargs.pop("timeout", None)
    repo_root = kwargs.pop("repo_root", None)
    timeout = explicit_timeout if explicit_timeout is not None else configured_timeout(
        cmd, timeout_type=timeout_type, repo_root=repo_root
    )

    argv = _flatten_cmd(cmd)
    start = perf_counter()
    logger.debug("run %s (cwd=%s, timeout=%ss)", " ".join(argv), kwargs.get("cwd"), timeout)

    capture_output = bool(kwargs.get("capture_output", False))
    if capture_output and timeout is not None and "stdout" not in kwargs and "stderr" not in kwargs:
        result = _run_capture_output_nohang(argv, timeout=float(timeout), **kwargs)
    else:
        result = subprocess.run(argv, timeout=timeout, **kwargs)

    logger.debug(
        "exit %s after %.1fms: %s",
        result.returncode,
        (perf_counter() - start) * 1000.0,
        " ".join(argv),
    )
    return result


def _to_cwd(cwd: Optional[Path | str]) -> Optional[str]:
    if cwd is None:
        return None
    return str(cwd)


def run_command(
    cmd: Sequence[str],
    *,
    cwd: Optional[Path | str] = None,
    env: Optional[MutableMapping[str, str]] = None,
    timeout: Optional[float] = None,
    capture_output: bool = False,
    text: bool = True,
    check: bool = False,
    input: Any = None,
    repo_root: Optional[Path | str] = None,
) -> subprocess.CompletedProcess:
    """
    Thin wrapper around subprocess.run with safe defaults.

    - No shell=True (security)
    - Timeout from configuration unless given
    - Optional capture_output/text/check flags
    """
    return run_with_timeout(
        list(cmd),
        cwd=_to_cwd(cwd),
        env=env,
        timeout=timeout,
        capture_output=capture_output,
        text=text,
        check=check,
        input=input,
        repo_root=repo_root,
    )


def git_environment(base: Optional[MutableMapping[str, str]] = None) -> Dict[str, str]:
    """Return an environment in which git never prompts for credentials."""
    env = dict(base if base is not None else os.environ)
    env["GIT_TERMINAL_PROMPT"] = "0"
    return env


def run_git_command(
    cmd: Sequence[str],
    *,
    cwd: Optional[Path | str] = None,
    env: Optional[MutableMapping[str, str]] = None,
    timeout: Optional[float] = None,
    capture_output: bool = False,
    text: bool = True,
    check: bool = False,
    repo_root: Optional[Path | str] = None,
) -> subprocess.CompletedProcess:
    """
    Run a git command using the config-driven timeout bucket.

    Args:
        cmd: Git command sequence to execute (starting with ``git``)
        cwd: Working directory (Path or str)
        env: Environment variables (``GIT_TERMINAL_PROMPT=0`` is always set)
        timeout: Timeout in seconds (defaults to timeouts.git_operations_seconds)
        capture_output: Capture stdout/stderr
        text: Return output as text instead of bytes
        check: Raise CalledProcessError on non-zero exit
        repo_root: Project whose configuration supplies the default timeout
    """
    if timeout is None:
        timeout = configured_timeout(cmd, timeout_type="git_operations", repo_root=repo_root)

    return run_command(
        cmd,
        cwd=cwd,
        env=git_environment(env),
        timeout=timeout,
        capture_output=capture_output,
        text=text,
        check=check,
    )


__all__ = [
    "configured_timeout",
    "git_environment",
    "run_with_timeout",
    "run_command",
    "run_git_command",
]
