"""Resolve the main repository and the current worktree for a directory."""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Sequence

from . import git
from .config import Settings
from .models import RootContext, Worktree
from .registry import parse_worktree_porcelain

logger = logging.getLogger(__name__)

CREATED_OUTSIDE_ADVISORY = (
    "This worktree appears to be created outside of wtm (no {env_filename} file found). "
    "Consider using 'wtm add' for better integration."
)


def read_override_file(directory: Path, settings: Settings | None = None) -> Path | None:
    """Return the main repository recorded in `directory`'s marker file, if any."""

    settings = settings or Settings()
    marker = directory / settings.env_filename
    try:
        content = marker.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError):
        return None
    pattern = re.compile(rf'^{re.escape(settings.root_env_key)}="(.+)"$', re.MULTILINE)
    match = pattern.search(content)
    if not match:
        return None
    return Path(match.group(1))


def is_transient(path: Path, settings: Settings) -> bool:
    return settings.worktrees_dirname in path.parts


def select_main_worktree(worktrees: Sequence[Worktree], settings: Settings) -> Worktree | None:
    for entry in worktrees:
        if not is_transient(entry.path, settings):
            return entry
    return None


def find_current_worktree(worktrees: Sequence[Worktree], cwd: Path) -> Worktree | None:
    """Most specific worktree containing `cwd`.

    Paths are compared component by component, so `/repo` does not contain
    `/repo-other/sub`. Longer paths are tried first so a nested worktree wins
    over its ancestor.
    Both sides must be absolute; git reports worktree paths that way.
    """

    for entry in sorted(worktrees, key=lambda wt: len(str(wt.path)), reverse=True):
        if cwd == entry.path or entry.path in cwd.parents:
            return entry
    return None


def resolve_root(cwd: Path, settings: Settings | None = None) -> RootContext:
    settings = settings or Settings()
    cwd = cwd.resolve()
    git.ensure_repository(cwd)

    override = read_override_file(cwd, settings)
    project_root = git.show_toplevel(cwd)
    worktrees = parse_worktree_porcelain(git.worktree_list_porcelain(cwd))

    if override is not None:
        main_repository = override
    else:
        main_entry = select_main_worktree(worktrees, settings)
        main_repository = main_entry.path if main_entry else project_root

    current = find_current_worktree(worktrees, cwd)

    advisory: str | None = None
    if (
        override is None
        and current is not None
        and current.path != main_repository
        and is_transient(current.path, settings)
    ):
        advisory = CREATED_OUTSIDE_ADVISORY.format(env_filename=settings.env_filename)
        logger.warning("%s", advisory)

    return RootContext(
        main_repository=main_repository,
        project_root=project_root,
        current_path=cwd,
        current_worktree=current,
        override_found=override is not None,
        advisory=advisory,
    )


def resolve_root_from_common_dir(cwd: Path) -> Path:
    """Main repository path derived from the shared git directory alone.

    No worktree registry and no marker file are consulted: the parent of
    `git rev-parse --git-common-dir` is returned.
    """

    cwd = cwd.resolve()
    git.ensure_repository(cwd)
    return git.common_dir(cwd).parent


__all__ = [
    "CREATED_OUTSIDE_ADVISORY",
    "read_override_file",
    "is_transient",
    "select_main_worktree",
    "find_current_worktree",
    "resolve_root",
    "resolve_root_from_common_dir",
]
