"""Unit tests for the git command wrapper.

Tests for GitClient against a recording fake runner.
"""

import logging
from pathlib import Path

import pytest
from drupalctl.core.git import GitClient
from fakes import FakeRunner


@pytest.fixture
def git(fake_runner: FakeRunner, project_dir: Path) -> GitClient:
    """GitClient bound to the project directory."""
    return GitClient(project_dir, fake_runner)


class TestRun:
    """Tests for GitClient.run."""

    def test_runs_in_work_tree(
        self, git: GitClient, fake_runner: FakeRunner, project_dir: Path
    ) -> None:
        """Commands run in the working tree by default."""
        git.run("status")
        assert fake_runner.calls == [(["git", "status"], str(project_dir))]

    def test_failure_is_logged(
        self, git: GitClient, fake_runner: FakeRunner, caplog: pytest.LogCaptureFixture
    ) -> None:
        """Failures are logged with the exit code and stderr."""
        fake_runner.script("git", "checkout", returncode=1, stderr="no such branch")
        with caplog.at_level(logging.WARNING):
            result = git.run("checkout", "nope")

        assert not result.success
        assert "exit code 1" in caplog.text
        assert "no such branch" in caplog.text


class TestQueries:
    """Tests for branch and diff queries."""

    def test_branch_exists(self, git: GitClient, fake_runner: FakeRunner) -> None:
        """branch_exists follows rev-parse."""
        assert git.branch_exists("master")
        fake_runner.script("git", "rev-parse", returncode=128)
        assert not git.branch_exists("missing")

    def test_has_diff_working_tree(self, git: GitClient, fake_runner: FakeRunner) -> None:
        """Diff output against HEAD means uncommitted changes."""
        assert not git.has_diff()
        fake_runner.script("git", "diff", "HEAD", stdout="diff --git a/x b/x\n")
        assert git.has_diff()
        assert fake_runner.commands[-1] == "git diff HEAD"

    def test_has_diff_includes_staged_changes(
        self, git: GitClient, fake_runner: FakeRunner
    ) -> None:
        """Staged edits count: the working tree is compared to HEAD, not the index."""
        fake_runner.script("git", "diff", "HEAD", stdout="diff --git a/notes.txt\n")
        fake_runner.script("git", "diff", stdout="")
        assert git.has_diff()
        assert fake_runner.commands == ["git diff HEAD"]

    def test_has_diff_between_branches(self, git: GitClient, fake_runner: FakeRunner) -> None:
        """Branch comparison passes both names."""
        fake_runner.script("git", "diff", "master", "feature", stdout="+line\n")
        assert git.has_diff("master", "feature")
        assert fake_runner.commands == ["git diff master feature"]

    def test_failed_diff_counts_as_no_diff(self, git: GitClient, fake_runner: FakeRunner) -> None:
        """A failing diff reports no difference."""
        fake_runner.script("git", "diff", stdout="junk", returncode=1)
        assert not git.has_diff()


class TestMutations:
    """Tests for commands that change the repository."""

    def test_create_branch(self, git: GitClient, fake_runner: FakeRunner) -> None:
        """Branch creation resets, force-creates and checks out."""
        assert git.create_branch("composer-views", "master")
        assert fake_runner.commands == [
            "git reset --hard",
            "git branch composer-views master --force",
            "git checkout composer-views",
        ]

    def test_create_branch_stops_on_failure(self, git: GitClient, fake_runner: FakeRunner) -> None:
        """A failed step ends the sequence."""
        fake_runner.script("git", "branch", returncode=1)
        assert not git.create_branch("composer-views", "master")
        assert "git checkout composer-views" not in fake_runner.commands

    def test_commit_all_commits_staged_changes(
        self, git: GitClient, fake_runner: FakeRunner, tmp_path: Path
    ) -> None:
        """Staged changes are committed inside the package directory."""
        fake_runner.script("git", "diff", "--cached", "--quiet", returncode=1)
        assert git.commit_all(tmp_path, "Update")
        assert fake_runner.calls[-1] == (["git", "commit", "-m", "Update"], str(tmp_path))
        assert fake_runner.calls[0] == (["git", "add", "--all", "."], str(tmp_path))

    def test_commit_all_nothing_staged(
        self, git: GitClient, fake_runner: FakeRunner, tmp_path: Path
    ) -> None:
        """No commit is created when nothing is staged."""
        assert git.commit_all(tmp_path, "Update")
        assert not any(c.startswith("git commit") for c in fake_runner.commands)

    def test_push_and_delete(self, git: GitClient, fake_runner: FakeRunner) -> None:
        """Push, forced push and remote deletion use the remote name."""
        git.push("origin", "b")
        git.push("origin", "b", force=True)
        git.delete_remote_branch("origin", "b")
        git.delete_branch("b")
        assert fake_runner.commands == [
            "git push origin b",
            "git push origin b --force",
            "git push origin :b",
            "git branch -D b",
        ]
