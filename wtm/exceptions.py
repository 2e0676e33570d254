"""Error hierarchy for wtm."""

from __future__ import annotations


class WtmError(RuntimeError):
    """Base error for the package."""


class ConfigError(WtmError):
    """Raised when a WTM_* environment override is invalid."""


class NotARepositoryError(WtmError):
    """Raised when a directory is not inside a git repository."""

    def __init__(self, path: object):
        self.path = path
        super().__init__(f"Not a git repository: {path}")


class GitCommandError(WtmError):
    """Raised when an underlying git command fails."""

    def __init__(
        self,
        command: list[str],
        returncode: int,
        *,
        stdout: str | None = None,
        stderr: str | None = None,
    ):
        self.command = command
        self.returncode = returncode
        self.stdout = stdout or ""
        self.stderr = stderr or ""
        message = f"git command failed (exit {returncode}): {' '.join(command)}"
        details = "\n".join(
            section
            for section in (self.stdout.strip(), self.stderr.strip())
            if section
        )
        if details:
            message = f"{message}\n{details}"
        super().__init__(message)

    @property
    def diagnostic(self) -> str:
        return self.stderr.strip() or self.stdout.strip()


class BranchNotFoundError(WtmError):
    """Raised when a referenced branch does not exist."""

    def __init__(self, branch: str, message: str | None = None):
        self.branch = branch
        super().__init__(message or f"Branch not found: {branch}")


class WorktreeNotFoundError(BranchNotFoundError):
    """Raised when no registered worktree has the requested branch checked out."""

    def __init__(self, branch: str):
        super().__init__(branch, f"No worktree found for branch: {branch}")


class CreationError(WtmError):
    """Raised when git rejects a worktree add."""

    def __init__(self, branch: str, diagnostic: str):
        self.branch = branch
        self.diagnostic = diagnostic
        message = f"Could not create worktree for branch '{branch}'"
        if diagnostic:
            message = f"{message}: {diagnostic}"
        super().__init__(message)


class RemovalError(WtmError):
    """Raised when git rejects a worktree remove."""

    def __init__(self, path: object, diagnostic: str):
        self.path = path
        self.diagnostic = diagnostic
        message = f"Could not remove worktree {path}"
        if diagnostic:
            message = f"{message}: {diagnostic}"
        super().__init__(message)


class HookError(WtmError):
    """Base error for lifecycle hook failures."""


class HookExecutionError(HookError):
    """Raised when the hook exits with a non-zero code."""

    def __init__(self, returncode: int):
        self.returncode = returncode
        super().__init__(f"Hook exited with code {returncode}")


class HookSpawnError(HookError):
    """Raised when the hook process could not be started."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Hook could not be started: {reason}")


class HookExistsError(HookError):
    """Raised when `init` would overwrite an existing hook."""

    def __init__(self, path: object):
        self.path = path
        super().__init__(f"Hook already exists: {path}")


class ValidationError(WtmError):
    """Raised when user input fails validation."""


class UserAbort(WtmError):
    """Raised when the user cancels an interactive flow."""


__all__ = [
    "WtmError",
    "ConfigError",
    "NotARepositoryError",
    "GitCommandError",
    "BranchNotFoundError",
    "WorktreeNotFoundError",
    "CreationError",
    "RemovalError",
    "HookError",
    "HookExecutionError",
    "HookSpawnError",
    "HookExistsError",
    "ValidationError",
    "UserAbort",
]
