"""Shared dataclasses used throughout wtm."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from pathlib import Path

from .exceptions import HookExecutionError, HookSpawnError


@dataclass(slots=True)
class Worktree:
    path: Path
    head: str = ""
    branch: str | None = None
    detached: bool = False
    locked: bool = False
    prunable: bool = False
    bare: bool = False

    @property
    def name(self) -> str:
        return self.path.name

    @property
    def status(self) -> str:
        if self.locked:
            return "locked"
        if self.prunable:
            return "prunable"
        return "active"

    def to_dict(self) -> dict[str, object]:
        return {
            "path": str(self.path),
            "head": self.head,
            "branch": self.branch,
            "detached": self.detached,
        }


@dataclass(slots=True)
class BranchDeletionWarning:
    """A branch that outlived its worktree because `git branch -D` failed."""

    branch: str
    reason: str

    def __str__(self) -> str:
        return f"Could not delete branch {self.branch}: {self.reason}"


@dataclass(slots=True)
class RemovalResult:
    path: Path
    branch: str
    warning: BranchDeletionWarning | None = None

    @property
    def branch_deleted(self) -> bool:
        return self.warning is None


class HookOutcome(str, enum.Enum):
    NOT_RUN = "not_run"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass(slots=True)
class HookResult:
    """What happened when the lifecycle hook was asked to run.

    A failed hook carries either the process exit code, or, when the process
    could not be started at all, the underlying error text.
    """

    outcome: HookOutcome
    returncode: int | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.outcome is not HookOutcome.FAILED

    @property
    def spawn_failed(self) -> bool:
        return self.outcome is HookOutcome.FAILED and self.returncode is None

    def raise_for_outcome(self) -> None:
        if self.outcome is not HookOutcome.FAILED:
            return
        if self.returncode is None:
            raise HookSpawnError(self.error or "unknown error")
        raise HookExecutionError(self.returncode)


@dataclass(slots=True)
class RootContext:
    main_repository: Path
    project_root: Path
    current_path: Path
    current_worktree: Worktree | None = None
    override_found: bool = False
    advisory: str | None = None

    @property
    def is_in_worktree(self) -> bool:
        return (
            self.current_worktree is not None
            and self.current_worktree.path != self.main_repository
        )

    def to_dict(self) -> dict[str, object]:
        return {
            "projectRoot": str(self.project_root),
            "mainRepository": str(self.main_repository),
            "currentPath": str(self.current_path),
            "currentWorktree": str(self.current_worktree.path) if self.current_worktree else None,
            "isInWorktree": self.is_in_worktree,
        }


@dataclass(slots=True)
class WorktreeStatus:
    modified: int = 0
    created: int = 0
    deleted: int = 0

    @property
    def is_clean(self) -> bool:
        return not (self.modified or self.created or self.deleted)

    def describe(self) -> str:
        if self.is_clean:
            return "clean"
        changes: list[str] = []
        if self.modified:
            changes.append(f"{self.modified} modified")
        if self.created:
            changes.append(f"{self.created} added")
        if self.deleted:
            changes.append(f"{self.deleted} deleted")
        return ", ".join(changes)


@dataclass(slots=True)
class CommitInfo:
    hash: str
    message: str
    date: str


@dataclass(slots=True)
class EnrichedWorktree:
    worktree: Worktree
    status: WorktreeStatus | None = None
    recent_commits: list[CommitInfo] = field(default_factory=list)
    error: str | None = None

    def to_dict(self) -> dict[str, object]:
        payload = self.worktree.to_dict()
        if self.error is not None:
            payload["error"] = self.error
            return payload
        if self.status is not None:
            payload["status"] = {
                "modified": self.status.modified,
                "created": self.status.created,
                "deleted": self.status.deleted,
                "isClean": self.status.is_clean,
            }
        payload["recentCommits"] = [
            {"hash": commit.hash, "message": commit.message, "date": commit.date}
            for commit in self.recent_commits
        ]
        return payload


__all__ = [
    "Worktree",
    "BranchDeletionWarning",
    "RemovalResult",
    "HookOutcome",
    "HookResult",
    "RootContext",
    "WorktreeStatus",
    "CommitInfo",
    "EnrichedWorktree",
]
