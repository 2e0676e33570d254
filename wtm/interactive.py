"""Interactive prompt helpers built on InquirerPy."""

from __future__ import annotations

import sys
from typing import Sequence

from InquirerPy import inquirer
from InquirerPy.base.control import Choice

from .exceptions import UserAbort, ValidationError
from .models import Worktree

ACTION_OPEN = "open"
ACTION_REMOVE = "remove"
ACTION_CANCEL = "cancel"


def _ensure_tty() -> None:
    if not sys.stdin.isatty():
        raise ValidationError(
            "Interactive mode requires a TTY. Provide the missing arguments to run non-interactively."
        )


def select_branch(branches: Sequence[str], default: str | None = None) -> str:
    _ensure_tty()
    if not branches:
        raise ValidationError("No branches found.")
    try:
        selection = inquirer.fuzzy(
            message="Select branch",
            choices=list(branches),
            default=default,
        ).execute()
    except KeyboardInterrupt as exc:  # pragma: no cover - user cancel
        raise UserAbort("Selection cancelled.") from exc
    if not selection:
        raise UserAbort("No branch selected.")
    return str(selection)


def build_worktree_choices(worktrees: Sequence[Worktree]) -> tuple[list[Choice], dict[str, Worktree]]:
    """Return fuzzy-prompt choices plus a lookup keyed by worktree path.

    The choice label carries both branch and path so filtering matches either.
    """

    lookup: dict[str, Worktree] = {}
    choices: list[Choice] = []
    for entry in worktrees:
        key = str(entry.path)
        if key in lookup:
            continue
        lookup[key] = entry
        label = entry.branch or "(detached)"
        choices.append(Choice(value=key, name=f"{label} · {entry.path}"))
    return choices, lookup


def select_worktree(worktrees: Sequence[Worktree]) -> Worktree:
    _ensure_tty()
    if not worktrees:
        raise ValidationError("No worktrees found.")
    choices, lookup = build_worktree_choices(worktrees)
    try:
        selection = inquirer.fuzzy(message="Select worktree", choices=choices).execute()
    except KeyboardInterrupt as exc:  # pragma: no cover - user cancel
        raise UserAbort("Selection cancelled.") from exc
    if not selection or selection not in lookup:
        raise UserAbort("No worktree selected.")
    return lookup[selection]


def action_choices(worktree: Worktree) -> list[Choice]:
    # Detached worktrees have no branch to remove by.
    choices = [Choice(value=ACTION_OPEN, name="Show cd command")]
    if worktree.branch:
        choices.append(Choice(value=ACTION_REMOVE, name="Remove worktree and branch"))
    choices.append(Choice(value=ACTION_CANCEL, name="Cancel"))
    return choices


def select_worktree_action(worktree: Worktree) -> str:
    _ensure_tty()
    try:
        selection = inquirer.select(
            message=f"{worktree.branch or '(detached)'}:",
            choices=action_choices(worktree),
            default=ACTION_OPEN,
        ).execute()
    except KeyboardInterrupt as exc:  # pragma: no cover - user cancel
        raise UserAbort("Selection cancelled.") from exc
    return str(selection or ACTION_CANCEL)


def confirm(message: str, default: bool = False) -> bool:
    _ensure_tty()
    try:
        return bool(inquirer.confirm(message=message, default=default).execute())
    except KeyboardInterrupt as exc:  # pragma: no cover - user cancel
        raise UserAbort("Confirmation cancelled.") from exc


__all__ = [
    "ACTION_OPEN",
    "ACTION_REMOVE",
    "ACTION_CANCEL",
    "select_branch",
    "build_worktree_choices",
    "select_worktree",
    "action_choices",
    "select_worktree_action",
    "confirm",
]
