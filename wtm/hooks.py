"""Post-creation lifecycle hook detection and execution."""

from __future__ import annotations

import logging
import os
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping

from .config import (
    HOOK_ENV_BRANCH_NAME,
    HOOK_ENV_PROJECT_ROOT,
    HOOK_ENV_WORKTREE_PATH,
    Settings,
)
from .exceptions import HookExistsError
from .models import HookOutcome, HookResult

logger = logging.getLogger(__name__)

HOOK_TEMPLATE = '''#!/usr/bin/env python3
"""{filename} - executed after `wtm add` inside the new worktree.

Environment:
  {worktree_var}  path to the new worktree
  {branch_var}    name of the branch checked out there
  {root_var}   path to the main repository
"""

import os

worktree = os.environ["{worktree_var}"]
branch = os.environ["{branch_var}"]
project_root = os.environ["{root_var}"]

print(f"Prepared worktree {{worktree}} for {{branch}}")
'''


@dataclass
class HookRunner:
    project_root: Path
    settings: Settings = field(default_factory=Settings)

    @property
    def hook_path(self) -> Path:
        return self.project_root / self.settings.hook_filename

    def exists(self) -> bool:
        path = self.hook_path
        return path.is_file() and os.access(path, os.R_OK)

    def build_env(
        self,
        worktree_path: Path,
        branch_name: str,
        base: Mapping[str, str] | None = None,
    ) -> dict[str, str]:
        env = dict(os.environ if base is None else base)
        env[HOOK_ENV_WORKTREE_PATH] = str(worktree_path)
        env[HOOK_ENV_BRANCH_NAME] = branch_name
        env[HOOK_ENV_PROJECT_ROOT] = str(self.project_root)
        return env

    def execute(
        self,
        worktree_path: Path,
        branch_name: str,
        *,
        env: Mapping[str, str] | None = None,
    ) -> HookResult:
        """Run the hook in `worktree_path` and wait for it.

        stdin, stdout and stderr are inherited. There is no timeout.
        """

        if not self.exists():
            logger.debug("No hook at %s", self.hook_path)
            return HookResult(HookOutcome.NOT_RUN)

        command = [*self.settings.hook_interpreter, str(self.hook_path)]
        logger.debug("Running hook %s (cwd=%s)", " ".join(command), worktree_path)
        try:
            proc = subprocess.run(
                command,
                cwd=str(worktree_path),
                env=self.build_env(worktree_path, branch_name, env),
                check=False,
            )
        except OSError as exc:
            logger.debug("Hook could not be started: %s", exc)
            return HookResult(HookOutcome.FAILED, error=str(exc))

        if proc.returncode != 0:
            return HookResult(
                HookOutcome.FAILED,
                returncode=proc.returncode,
                error=f"Hook exited with code {proc.returncode}",
            )
        return HookResult(HookOutcome.SUCCEEDED, returncode=0)

    def create(self) -> Path:
        path = self.hook_path
        if path.exists():
            raise HookExistsError(path)
        path.write_text(
            HOOK_TEMPLATE.format(
                filename=self.settings.hook_filename,
                worktree_var=HOOK_ENV_WORKTREE_PATH,
                branch_var=HOOK_ENV_BRANCH_NAME,
                root_var=HOOK_ENV_PROJECT_ROOT,
            ),
            encoding="utf-8",
        )
        path.chmod(0o755)
        return path


__all__ = ["HOOK_TEMPLATE", "HookRunner"]
