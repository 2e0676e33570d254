"""Tests for worktree porcelain and branch listing parsers."""

from __future__ import annotations

import unittest
from pathlib import Path

from wtm.registry import LineKind, classify_line, parse_branch_listing, parse_worktree_porcelain

LISTING = """worktree /repo
HEAD 1111111111111111111111111111111111111111
branch refs/heads/main

worktree /repo/.git/tmp_worktrees/20250101_000000_feature
branch refs/heads/feature

worktree /repo/.git/tmp_worktrees/20250102_000000_bisect
HEAD 2222222222222222222222222222222222222222
detached
"""


class ParseWorktreePorcelainTests(unittest.TestCase):
    def test_three_records_match_verbatim(self) -> None:
        entries = parse_worktree_porcelain(LISTING)

        self.assertEqual(len(entries), 3)
        main, feature, bisect = entries

        self.assertEqual(main.path, Path("/repo"))
        self.assertEqual(main.head, "1111111111111111111111111111111111111111")
        self.assertEqual(main.branch, "main")
        self.assertFalse(main.detached)

        self.assertEqual(feature.path, Path("/repo/.git/tmp_worktrees/20250101_000000_feature"))
        self.assertEqual(feature.head, "")
        self.assertEqual(feature.branch, "feature")
        self.assertFalse(feature.detached)

        self.assertEqual(bisect.path, Path("/repo/.git/tmp_worktrees/20250102_000000_bisect"))
        self.assertEqual(bisect.head, "2222222222222222222222222222222222222222")
        self.assertIsNone(bisect.branch)
        self.assertTrue(bisect.detached)

    def test_empty_listing_yields_no_records(self) -> None:
        self.assertEqual(parse_worktree_porcelain(""), [])
        self.assertEqual(parse_worktree_porcelain("\n\n"), [])

    def test_records_without_worktree_line_are_discarded(self) -> None:
        text = "HEAD abc\nbranch refs/heads/orphan\n\nworktree /repo\nHEAD def\n"
        entries = parse_worktree_porcelain(text)

        self.assertEqual([entry.path for entry in entries], [Path("/repo")])
        self.assertEqual(entries[0].head, "def")
        self.assertIsNone(entries[0].branch)

    def test_unknown_lines_are_ignored(self) -> None:
        text = "worktree /repo\nHEAD abc\nfuture-field something\ndetachedX\nbranch refs/heads/main\n"
        (entry,) = parse_worktree_porcelain(text)

        self.assertEqual(entry.branch, "main")
        self.assertFalse(entry.detached)

    def test_worktree_line_starts_new_record_without_blank_separator(self) -> None:
        text = "worktree /a\nbranch refs/heads/a\nworktree /b\nbranch refs/heads/b\n"
        entries = parse_worktree_porcelain(text)

        self.assertEqual([(e.path, e.branch) for e in entries], [(Path("/a"), "a"), (Path("/b"), "b")])

    def test_branch_without_heads_prefix_is_kept(self) -> None:
        (entry,) = parse_worktree_porcelain("worktree /repo\nbranch topic\n")
        self.assertEqual(entry.branch, "topic")

    def test_locked_and_prunable_flags(self) -> None:
        text = (
            "worktree /a\nbranch refs/heads/a\nlocked being moved\n\n"
            "worktree /b\nbranch refs/heads/b\nprunable gitdir file points to non-existent location\n"
        )
        first, second = parse_worktree_porcelain(text)

        self.assertTrue(first.locked)
        self.assertEqual(first.status, "locked")
        self.assertTrue(second.prunable)
        self.assertEqual(second.status, "prunable")

    def test_classify_line_tags(self) -> None:
        self.assertEqual(classify_line("detached").kind, LineKind.DETACHED)
        self.assertEqual(classify_line("detached ").kind, LineKind.UNKNOWN)
        self.assertEqual(classify_line("").kind, LineKind.BLANK)
        self.assertEqual(classify_line("branch refs/heads/x/y"), (LineKind.BRANCH, "x/y"))


class ParseBranchListingTests(unittest.TestCase):
    def test_filters_head_remotes_and_current_marker(self) -> None:
        summary = "\n".join(
            [
                "  main",
                "  develop",
                "* feature",
                "  HEAD",
                "  remotes/origin/main",
            ]
        )
        self.assertEqual(parse_branch_listing(summary), ["develop", "feature", "main"])

    def test_skips_symbolic_refs_and_detached_pseudo_entries(self) -> None:
        summary = "\n".join(
            [
                "* (HEAD detached at 1a2b3c4)",
                "+ busy",
                "  main",
                "  remotes/origin/HEAD -> origin/main",
            ]
        )
        self.assertEqual(parse_branch_listing(summary), ["busy", "main"])

    def test_deduplicates(self) -> None:
        self.assertEqual(parse_branch_listing("  main\n* main\n"), ["main"])

    def test_empty_summary(self) -> None:
        self.assertEqual(parse_branch_listing(""), [])


if __name__ == "__main__":
    unittest.main()
