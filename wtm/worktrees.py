"""High-level orchestration for worktree operations."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path

from . import git
from .config import Settings
from .exceptions import (
    CreationError,
    GitCommandError,
    RemovalError,
    ValidationError,
    WorktreeNotFoundError,
)
from .models import (
    BranchDeletionWarning,
    CommitInfo,
    EnrichedWorktree,
    RemovalResult,
    Worktree,
    WorktreeStatus,
)
from .registry import parse_worktree_porcelain

logger = logging.getLogger(__name__)

PLACEMENT_TIMESTAMP_FORMAT = "%Y%m%d_%H%M%S"


def placement_name(branch: str, now: datetime | None = None) -> str:
    """Directory name for a new worktree: `<UTC timestamp>_<branch>`.

    Names sort lexically in creation order. Two worktrees created for the same
    branch within the same second get the same name; git rejects the second.
    """

    moment = now or datetime.now(timezone.utc)
    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc)
    return f"{moment.strftime(PLACEMENT_TIMESTAMP_FORMAT)}_{branch}"


@dataclass
class WorktreeManager:
    repo_path: Path
    settings: Settings = field(default_factory=Settings)

    @classmethod
    def for_path(cls, path: Path, settings: Settings | None = None) -> "WorktreeManager":
        git.ensure_repository(path)
        return cls(repo_path=path, settings=settings or Settings())

    def list_worktrees(self) -> list[Worktree]:
        return parse_worktree_porcelain(git.worktree_list_porcelain(self.repo_path))

    def list_branches(self) -> list[str]:
        return git.list_branches(self.repo_path)

    def project_root(self) -> Path:
        return git.show_toplevel(self.repo_path)

    def worktrees_dir(self) -> Path:
        return git.common_dir(self.repo_path) / self.settings.worktrees_dirname

    def add_worktree(
        self,
        branch: str,
        base_branch: str | None = None,
        *,
        now: datetime | None = None,
    ) -> Path:
        branch = branch.strip()
        if not branch:
            raise ValidationError("Branch name cannot be empty.")
        root = self.worktrees_dir()
        root.mkdir(parents=True, exist_ok=True)
        target = root / placement_name(branch, now)

        try:
            if branch in self.list_branches():
                logger.info("Checking out existing branch %s at %s", branch, target)
                git.worktree_add_existing(self.repo_path, target, branch)
            else:
                start = base_branch or "HEAD"
                logger.info("Creating branch %s from %s at %s", branch, start, target)
                git.worktree_add_new(self.repo_path, target, branch, start)
        except GitCommandError as exc:
            raise CreationError(branch, exc.diagnostic) from exc
        return target

    def find_worktree(self, branch: str) -> Worktree:
        for entry in self.list_worktrees():
            if entry.branch == branch:
                return entry
        raise WorktreeNotFoundError(branch)

    def remove_worktree(self, branch: str) -> RemovalResult:
        entry = self.find_worktree(branch)
        try:
            git.worktree_remove(self.repo_path, entry.path, force=True)
        except GitCommandError as exc:
            raise RemovalError(entry.path, exc.diagnostic) from exc

        # The worktree is already gone; a surviving branch is only worth a warning.
        warning: BranchDeletionWarning | None = None
        try:
            git.delete_branch(self.repo_path, branch, force=True)
        except GitCommandError as exc:
            warning = BranchDeletionWarning(branch=branch, reason=exc.diagnostic or str(exc))
            logger.warning("%s", warning)
        return RemovalResult(path=entry.path, branch=branch, warning=warning)

    def status(self, path: Path) -> WorktreeStatus:
        return parse_status_porcelain(git.status_porcelain(path))

    def log(self, path: Path, limit: int = 10) -> list[CommitInfo]:
        return [
            CommitInfo(hash=commit, message=subject, date=date)
            for commit, date, subject in git.log_entries(path, limit)
        ]

    def enrich(self, entry: Worktree, limit: int = 5) -> EnrichedWorktree:
        try:
            return EnrichedWorktree(
                worktree=entry,
                status=self.status(entry.path),
                recent_commits=self.log(entry.path, limit),
            )
        except (GitCommandError, OSError) as exc:
            logger.debug("Could not inspect %s: %s", entry.path, exc)
            return EnrichedWorktree(worktree=entry, error=str(exc))


def parse_status_porcelain(text: str) -> WorktreeStatus:
    status = WorktreeStatus()
    for line in text.splitlines():
        if len(line) < 3:
            continue
        code = line[:2]
        if code == "??" or "A" in code:
            status.created += 1
        elif "D" in code:
            status.deleted += 1
        elif code.strip():
            status.modified += 1
    return status


__all__ = [
    "PLACEMENT_TIMESTAMP_FORMAT",
    "placement_name",
    "parse_status_porcelain",
    "WorktreeManager",
]
