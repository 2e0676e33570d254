"""Thin wrappers around git CLI commands."""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import Sequence

from .exceptions import GitCommandError, NotARepositoryError
from .registry import parse_branch_listing

logger = logging.getLogger(__name__)

# Unit separator; cannot appear in commit subjects produced by `git log --format`.
_LOG_FIELD_SEP = "\x1f"


def run_git(
    args: Sequence[str],
    *,
    cwd: Path,
    check: bool = True,
) -> subprocess.CompletedProcess[str]:
    """Execute a git command in `cwd` and optionally raise on failure."""

    command = ["git", *args]
    logger.debug("Running %s (cwd=%s)", " ".join(command), cwd)
    result = subprocess.run(
        command,
        cwd=str(cwd),
        text=True,
        capture_output=True,
        check=False,
    )
    if check and result.returncode != 0:
        raise GitCommandError(
            command,
            result.returncode,
            stdout=result.stdout,
            stderr=result.stderr,
        )
    return result


def ensure_repository(path: Path) -> None:
    if not path.is_dir():
        raise NotARepositoryError(path)
    result = run_git(["rev-parse", "--git-dir"], cwd=path, check=False)
    if result.returncode != 0:
        raise NotARepositoryError(path)


def _rev_parse_path(path: Path, flag: str) -> Path:
    try:
        output = run_git(["rev-parse", flag], cwd=path).stdout.strip()
    except GitCommandError as exc:
        raise NotARepositoryError(path) from exc
    resolved = Path(output)
    if not resolved.is_absolute():
        resolved = path / resolved
    return resolved.resolve()


def git_dir(path: Path) -> Path:
    """Absolute private data directory of the repository containing `path`."""

    return _rev_parse_path(path, "--git-dir")


def common_dir(path: Path) -> Path:
    """Absolute git directory shared by the main repository and all its worktrees."""

    return _rev_parse_path(path, "--git-common-dir")


def show_toplevel(path: Path) -> Path:
    try:
        output = run_git(["rev-parse", "--show-toplevel"], cwd=path).stdout.strip()
    except GitCommandError as exc:
        raise NotARepositoryError(path) from exc
    return Path(output)


def worktree_list_porcelain(path: Path) -> str:
    return run_git(["worktree", "list", "--porcelain"], cwd=path).stdout


def list_branches(path: Path) -> list[str]:
    output = run_git(["branch", "--all", "--no-color"], cwd=path).stdout
    return parse_branch_listing(output)


def worktree_add_existing(path: Path, target: Path, branch: str) -> None:
    run_git(["worktree", "add", str(target), branch], cwd=path)


def worktree_add_new(path: Path, target: Path, branch: str, start_point: str) -> None:
    run_git(["worktree", "add", "-b", branch, str(target), start_point], cwd=path)


def worktree_remove(path: Path, target: Path, force: bool = True) -> None:
    args = ["worktree", "remove"]
    if force:
        args.append("--force")
    args.append(str(target))
    run_git(args, cwd=path)


def delete_branch(path: Path, branch: str, force: bool = True) -> None:
    run_git(["branch", "-D" if force else "-d", branch], cwd=path)


def status_porcelain(path: Path) -> str:
    return run_git(["status", "--porcelain"], cwd=path).stdout


def log_entries(path: Path, limit: int = 10) -> list[tuple[str, str, str]]:
    fmt = _LOG_FIELD_SEP.join(["%H", "%aI", "%s"])
    output = run_git(["log", f"-n{limit}", f"--format={fmt}"], cwd=path).stdout
    entries: list[tuple[str, str, str]] = []
    for line in output.splitlines():
        if not line.strip():
            continue
        fields = line.split(_LOG_FIELD_SEP, 2)
        if len(fields) != 3:
            continue
        commit, date, subject = fields
        entries.append((commit, date, subject))
    return entries


__all__ = [
    "run_git",
    "ensure_repository",
    "git_dir",
    "common_dir",
    "show_toplevel",
    "worktree_list_porcelain",
    "list_branches",
    "worktree_add_existing",
    "worktree_add_new",
    "worktree_remove",
    "delete_branch",
    "status_porcelain",
    "log_entries",
]
