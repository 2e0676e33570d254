"""Parsers for `git worktree list --porcelain` and `git branch --all` output."""

from __future__ import annotations

import enum
from pathlib import Path
from typing import NamedTuple

from .models import Worktree

_HEADS_PREFIX = "refs/heads/"
_REMOTES_PREFIX = "remotes/"


class LineKind(enum.Enum):
    WORKTREE = "worktree"
    HEAD = "HEAD"
    BRANCH = "branch"
    DETACHED = "detached"
    LOCKED = "locked"
    PRUNABLE = "prunable"
    BARE = "bare"
    BLANK = "blank"
    UNKNOWN = "unknown"


class PorcelainLine(NamedTuple):
    kind: LineKind
    value: str = ""


# Attribute lines that may carry a trailing reason, e.g. "locked being moved".
_FLAG_KINDS = {
    "locked": LineKind.LOCKED,
    "prunable": LineKind.PRUNABLE,
}


def classify_line(line: str) -> PorcelainLine:
    """Tag one porcelain line. Unrecognised lines map to UNKNOWN."""

    if not line.strip():
        return PorcelainLine(LineKind.BLANK)
    if line.startswith("worktree "):
        return PorcelainLine(LineKind.WORKTREE, line[len("worktree ") :])
    if line.startswith("HEAD "):
        return PorcelainLine(LineKind.HEAD, line[len("HEAD ") :].strip())
    if line.startswith("branch "):
        return PorcelainLine(LineKind.BRANCH, _strip_heads(line[len("branch ") :].strip()))
    if line == "detached":
        return PorcelainLine(LineKind.DETACHED)
    if line == "bare":
        return PorcelainLine(LineKind.BARE)
    key, _, reason = line.partition(" ")
    if key in _FLAG_KINDS:
        return PorcelainLine(_FLAG_KINDS[key], reason.strip())
    return PorcelainLine(LineKind.UNKNOWN, line)


def parse_worktree_porcelain(text: str) -> list[Worktree]:
    entries: list[Worktree] = []
    current: Worktree | None = None
    for raw_line in text.splitlines():
        kind, value = classify_line(raw_line)
        if kind is LineKind.BLANK:
            if current is not None:
                entries.append(current)
            current = None
        elif kind is LineKind.WORKTREE:
            if current is not None:
                entries.append(current)
            current = Worktree(path=Path(value))
        elif current is None:
            # Attribute lines outside a record have no path to attach to.
            continue
        elif kind is LineKind.HEAD:
            current.head = value
        elif kind is LineKind.BRANCH:
            current.branch = value
            current.detached = False
        elif kind is LineKind.DETACHED:
            current.detached = True
            current.branch = None
        elif kind is LineKind.LOCKED:
            current.locked = True
        elif kind is LineKind.PRUNABLE:
            current.prunable = True
        elif kind is LineKind.BARE:
            current.bare = True
    if current is not None:
        entries.append(current)
    return entries


def parse_branch_listing(text: str) -> list[str]:
    """Return sorted, unique local branch names from `git branch --all` output."""

    names: set[str] = set()
    for raw_line in text.splitlines():
        name = _strip_current_marker(raw_line.strip())
        if not name or name == "HEAD":
            continue
        if name.startswith(_REMOTES_PREFIX) or name.startswith("("):
            continue
        if " -> " in name:
            continue
        names.add(name)
    return sorted(names)


def _strip_current_marker(name: str) -> str:
    # "*" marks the current branch, "+" a branch checked out in another worktree.
    if name[:1] in {"*", "+"}:
        return name[1:].lstrip()
    return name


def _strip_heads(value: str) -> str:
    if value.startswith(_HEADS_PREFIX):
        return value[len(_HEADS_PREFIX) :]
    return value


__all__ = [
    "LineKind",
    "PorcelainLine",
    "classify_line",
    "parse_worktree_porcelain",
    "parse_branch_listing",
]
