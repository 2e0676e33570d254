"""Tests for worktree creation, removal and enrichment."""

from __future__ import annotations

import shutil
import subprocess
import tempfile
import unittest
from datetime import datetime, timedelta, timezone
from pathlib import Path
from unittest import mock

from wtm import git
from wtm.config import Settings
from wtm.exceptions import (
    BranchNotFoundError,
    CreationError,
    GitCommandError,
    RemovalError,
    ValidationError,
    WorktreeNotFoundError,
)
from wtm.registry import parse_worktree_porcelain
from wtm.worktrees import WorktreeManager, parse_status_porcelain, placement_name

NOW = datetime(2025, 1, 1, 0, 0, 0, tzinfo=timezone.utc)


class PlacementNameTests(unittest.TestCase):
    def test_combines_utc_timestamp_and_branch(self) -> None:
        self.assertEqual(placement_name("feature", NOW), "20250101_000000_feature")

    def test_converts_to_utc(self) -> None:
        local = datetime(2025, 1, 1, 9, 30, 5, tzinfo=timezone(timedelta(hours=9)))
        self.assertEqual(placement_name("x", local), "20250101_003005_x")

    def test_lexical_order_follows_creation_order(self) -> None:
        moments = [NOW + timedelta(seconds=offset) for offset in (0, 9, 10, 3600, 86400 * 40)]
        names = [placement_name("feature", moment) for moment in moments]
        self.assertEqual(sorted(names), names)


class AddWorktreeTests(unittest.TestCase):
    def setUp(self) -> None:
        self.tmp = Path(tempfile.mkdtemp())
        self.addCleanup(shutil.rmtree, self.tmp, True)
        self.common_dir = self.tmp / ".git"
        self.common_dir.mkdir()
        self.manager = WorktreeManager(repo_path=self.tmp, settings=Settings())
        patcher = mock.patch("wtm.git.common_dir", return_value=self.common_dir)
        patcher.start()
        self.addCleanup(patcher.stop)

    def test_new_branch_is_created_from_base(self) -> None:
        with mock.patch("wtm.git.list_branches", return_value=["main"]), mock.patch(
            "wtm.git.worktree_add_new"
        ) as add_new, mock.patch("wtm.git.worktree_add_existing") as add_existing:
            target = self.manager.add_worktree("feature", "develop", now=NOW)

        expected = self.common_dir / "tmp_worktrees" / "20250101_000000_feature"
        self.assertEqual(target, expected)
        self.assertTrue(expected.parent.is_dir())
        add_new.assert_called_once_with(self.tmp, expected, "feature", "develop")
        add_existing.assert_not_called()

    def test_base_defaults_to_head(self) -> None:
        with mock.patch("wtm.git.list_branches", return_value=[]), mock.patch(
            "wtm.git.worktree_add_new"
        ) as add_new:
            target = self.manager.add_worktree("feature", now=NOW)

        add_new.assert_called_once_with(self.tmp, target, "feature", "HEAD")

    def test_existing_branch_is_checked_out(self) -> None:
        with mock.patch("wtm.git.list_branches", return_value=["feature", "main"]), mock.patch(
            "wtm.git.worktree_add_new"
        ) as add_new, mock.patch("wtm.git.worktree_add_existing") as add_existing:
            target = self.manager.add_worktree("feature", "develop", now=NOW)

        self.assertEqual(target.name, "20250101_000000_feature")
        add_existing.assert_called_once_with(self.tmp, target, "feature")
        add_new.assert_not_called()

    def test_existing_worktrees_directory_is_reused(self) -> None:
        (self.common_dir / "tmp_worktrees").mkdir()
        with mock.patch("wtm.git.list_branches", return_value=[]), mock.patch("wtm.git.worktree_add_new"):
            target = self.manager.add_worktree("feature", now=NOW)
        self.assertEqual(target.parent, self.common_dir / "tmp_worktrees")

    def test_git_failure_becomes_creation_error(self) -> None:
        failure = GitCommandError(
            ["git", "worktree", "add"],
            128,
            stderr="fatal: invalid reference: nope\n",
        )
        with mock.patch("wtm.git.list_branches", return_value=[]), mock.patch(
            "wtm.git.worktree_add_new", side_effect=failure
        ):
            with self.assertRaises(CreationError) as caught:
                self.manager.add_worktree("feature", "nope", now=NOW)

        self.assertEqual(caught.exception.branch, "feature")
        self.assertIn("invalid reference: nope", caught.exception.diagnostic)

    def test_empty_branch_is_rejected(self) -> None:
        with mock.patch("wtm.git.worktree_add_new") as add_new:
            with self.assertRaises(ValidationError):
                self.manager.add_worktree("  ")
        add_new.assert_not_called()


LISTING = """worktree /repo
HEAD aaa
branch refs/heads/main

worktree /repo/.git/tmp_worktrees/20250101_000000_feature
HEAD bbb
branch refs/heads/feature
"""


class RemoveWorktreeTests(unittest.TestCase):
    def setUp(self) -> None:
        self.repo = Path("/repo")
        self.manager = WorktreeManager(repo_path=self.repo)
        patcher = mock.patch("wtm.git.worktree_list_porcelain", return_value=LISTING)
        patcher.start()
        self.addCleanup(patcher.stop)

    def test_removes_worktree_and_branch(self) -> None:
        with mock.patch("wtm.git.worktree_remove") as remove, mock.patch("wtm.git.delete_branch") as delete:
            result = self.manager.remove_worktree("feature")

        target = Path("/repo/.git/tmp_worktrees/20250101_000000_feature")
        remove.assert_called_once_with(self.repo, target, force=True)
        delete.assert_called_once_with(self.repo, "feature", force=True)
        self.assertEqual(result.path, target)
        self.assertTrue(result.branch_deleted)
        self.assertIsNone(result.warning)

    def test_missing_worktree_fails_without_mutation(self) -> None:
        with mock.patch("wtm.git.worktree_remove") as remove, mock.patch("wtm.git.delete_branch") as delete:
            with self.assertRaises(WorktreeNotFoundError) as caught:
                self.manager.remove_worktree("ghost")

        self.assertIsInstance(caught.exception, BranchNotFoundError)
        self.assertEqual(caught.exception.branch, "ghost")
        self.assertIn("ghost", str(caught.exception))
        remove.assert_not_called()
        delete.assert_not_called()

    def test_branch_match_is_exact(self) -> None:
        with mock.patch("wtm.git.worktree_remove") as remove:
            with self.assertRaises(WorktreeNotFoundError):
                self.manager.remove_worktree("feat")
        remove.assert_not_called()

    def test_branch_deletion_failure_is_a_warning(self) -> None:
        failure = GitCommandError(
            ["git", "branch", "-D", "feature"],
            1,
            stderr="error: Cannot delete branch 'feature' checked out at '/elsewhere'\n",
        )
        with mock.patch("wtm.git.worktree_remove") as remove, mock.patch(
            "wtm.git.delete_branch", side_effect=failure
        ):
            with self.assertLogs("wtm.worktrees", level="WARNING") as logs:
                result = self.manager.remove_worktree("feature")

        remove.assert_called_once()
        self.assertFalse(result.branch_deleted)
        self.assertIsNotNone(result.warning)
        self.assertEqual(result.warning.branch, "feature")
        self.assertIn("Cannot delete branch", result.warning.reason)
        self.assertIn("Could not delete branch feature", logs.output[0])

    def test_worktree_remove_failure_is_fatal(self) -> None:
        failure = GitCommandError(["git", "worktree", "remove"], 128, stderr="fatal: not a working tree\n")
        with mock.patch("wtm.git.worktree_remove", side_effect=failure), mock.patch(
            "wtm.git.delete_branch"
        ) as delete:
            with self.assertRaises(RemovalError):
                self.manager.remove_worktree("feature")
        delete.assert_not_called()


class EnrichmentTests(unittest.TestCase):
    def test_parse_status_counts(self) -> None:
        text = " M a.py\nM  b.py\n?? new.txt\nA  added.py\n D gone.py\n"
        status = parse_status_porcelain(text)

        self.assertEqual((status.modified, status.created, status.deleted), (2, 2, 1))
        self.assertFalse(status.is_clean)
        self.assertEqual(status.describe(), "2 modified, 2 added, 1 deleted")

    def test_clean_status(self) -> None:
        status = parse_status_porcelain("")
        self.assertTrue(status.is_clean)
        self.assertEqual(status.describe(), "clean")

    def test_enrich_reports_errors_per_worktree(self) -> None:
        manager = WorktreeManager(repo_path=Path("/repo"))
        (entry,) = [e for e in _entries() if e.branch == "main"]
        with mock.patch("wtm.git.status_porcelain", side_effect=FileNotFoundError("gone")):
            enriched = manager.enrich(entry)

        self.assertIsNone(enriched.status)
        self.assertIn("gone", enriched.error)
        self.assertEqual(enriched.to_dict()["error"], "gone")

    def test_enrich_collects_status_and_log(self) -> None:
        manager = WorktreeManager(repo_path=Path("/repo"))
        (entry,) = [e for e in _entries() if e.branch == "main"]
        with mock.patch("wtm.git.status_porcelain", return_value=""), mock.patch(
            "wtm.git.log_entries",
            return_value=[("abc", "2025-01-01T00:00:00+00:00", "Initial commit")],
        ):
            enriched = manager.enrich(entry)

        payload = enriched.to_dict()
        self.assertTrue(payload["status"]["isClean"])
        self.assertEqual(payload["recentCommits"][0]["message"], "Initial commit")


class LogEntriesTests(unittest.TestCase):
    def test_parses_fields_and_skips_malformed_lines(self) -> None:
        output = "abc\x1f2025-01-01T00:00:00+00:00\x1fFix: a | b\n\nbroken line\n"
        completed = subprocess.CompletedProcess(["git"], 0, stdout=output, stderr="")
        with mock.patch("wtm.git.run_git", return_value=completed):
            entries = git.log_entries(Path("/repo"))

        self.assertEqual(entries, [("abc", "2025-01-01T00:00:00+00:00", "Fix: a | b")])


def _entries():
    return parse_worktree_porcelain(LISTING)


if __name__ == "__main__":
    unittest.main()
