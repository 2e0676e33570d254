"""Environment-driven settings for wtm."""

from __future__ import annotations

import os
import shlex
import sys
from dataclasses import dataclass, field
from typing import Mapping

from .exceptions import ConfigError

DEFAULT_WORKTREES_DIRNAME = "tmp_worktrees"
DEFAULT_HOOK_FILENAME = ".wt_hook.py"
DEFAULT_ENV_FILENAME = ".wt_env"
DEFAULT_ROOT_ENV_KEY = "WT_ROOT_DIR"

HOOK_ENV_WORKTREE_PATH = "WT_WORKTREE_PATH"
HOOK_ENV_BRANCH_NAME = "WT_BRANCH_NAME"
HOOK_ENV_PROJECT_ROOT = "WT_PROJECT_ROOT"


def _default_interpreter() -> tuple[str, ...]:
    return (sys.executable,)


@dataclass(slots=True, frozen=True)
class Settings:
    worktrees_dirname: str = DEFAULT_WORKTREES_DIRNAME
    hook_filename: str = DEFAULT_HOOK_FILENAME
    hook_interpreter: tuple[str, ...] = field(default_factory=_default_interpreter)
    env_filename: str = DEFAULT_ENV_FILENAME
    root_env_key: str = DEFAULT_ROOT_ENV_KEY


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    env = os.environ if environ is None else environ
    interpreter_raw = env.get("WTM_HOOK_INTERPRETER", "").strip()
    if interpreter_raw:
        interpreter = tuple(shlex.split(interpreter_raw))
    else:
        interpreter = _default_interpreter()
    return Settings(
        worktrees_dirname=_single_segment(env, "WTM_WORKTREES_DIRNAME", DEFAULT_WORKTREES_DIRNAME),
        hook_filename=_single_segment(env, "WTM_HOOK_FILENAME", DEFAULT_HOOK_FILENAME),
        hook_interpreter=interpreter,
        env_filename=_single_segment(env, "WTM_ENV_FILENAME", DEFAULT_ENV_FILENAME),
        root_env_key=env.get("WTM_ROOT_ENV_KEY", "").strip() or DEFAULT_ROOT_ENV_KEY,
    )


def _single_segment(env: Mapping[str, str], var_name: str, default: str) -> str:
    raw = env.get(var_name, "").strip()
    if not raw:
        return default
    if "/" in raw or "\\" in raw or raw in {".", ".."} or "\0" in raw:
        raise ConfigError(
            f"{var_name} must be a single file or directory name, got {raw!r}."
        )
    return raw


__all__ = [
    "Settings",
    "load_settings",
    "DEFAULT_WORKTREES_DIRNAME",
    "DEFAULT_HOOK_FILENAME",
    "DEFAULT_ENV_FILENAME",
    "DEFAULT_ROOT_ENV_KEY",
    "HOOK_ENV_WORKTREE_PATH",
    "HOOK_ENV_BRANCH_NAME",
    "HOOK_ENV_PROJECT_ROOT",
]
