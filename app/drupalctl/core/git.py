"""Git command wrapper.

Every method runs one or more git commands through a ``CommandRunner``
and reports failures as a logged warning with the exit code, returning
False instead of raising. Callers decide which failures are fatal.
"""

import logging
from pathlib import Path

from drupalctl.utils.shell import CommandResult, CommandRunner, run_command

logger = logging.getLogger(__name__)


class GitClient:
    """Runs git commands in a fixed working tree.

    Attributes:
        work_tree: Directory git commands run in unless a command names another.
    """

    def __init__(self, work_tree: Path | None = None, runner: CommandRunner | None = None) -> None:
        """Initialize the client.

        Args:
            work_tree: Working tree directory. Defaults to the current directory.
            runner: Command runner. Defaults to :func:`run_command`.
        """
        self.work_tree = work_tree
        self._runner: CommandRunner = runner or run_command

    def run(self, *args: str, cwd: Path | None = None) -> CommandResult:
        """Run a git command and log it when it fails.

        Args:
            *args: Arguments after ``git``.
            cwd: Directory to run in. Defaults to the working tree.

        Returns:
            The command result.
        """
        command = ["git", *args]
        directory = cwd if cwd is not None else self.work_tree
        logger.debug("Running %s", " ".join(command))
        result = self._runner(
            command,
            cwd=str(directory) if directory is not None else None,
            timeout=None,
        )
        if not result.success:
            logger.warning(
                "Command '%s' failed with exit code %d: %s",
                " ".join(command),
                result.returncode,
                result.stderr.strip(),
            )
        return result

    def branch_exists(self, name: str) -> bool:
        """Check if a branch (or any revision) resolves."""
        return self.run("rev-parse", "--verify", name).success

    def has_diff(self, base: str | None = None, branch: str | None = None) -> bool:
        """Check for differences.

        Without arguments, compares the working tree and the index to
        ``HEAD``, so staged changes count too; with a base and branch,
        compares the two branches. A failing ``git diff`` counts as no
        difference.
        """
        args = ["diff"]
        if base and branch:
            args.extend([base, branch])
        else:
            args.append("HEAD")
        result = self.run(*args)
        if not result.success:
            return False
        output = result.stdout.strip()
        if output:
            logger.debug("%s...", output[:10])
        return bool(output)

    def reset_hard(self) -> bool:
        """Discard uncommitted changes in the working tree."""
        return self.run("reset", "--hard").success

    def create_branch(self, name: str, base: str) -> bool:
        """Force-create a branch at ``base`` and check it out."""
        return (
            self.reset_hard()
            and self.run("branch", name, base, "--force").success
            and self.checkout(name)
        )

    def checkout(self, name: str) -> bool:
        """Switch to a branch."""
        return self.run("checkout", name).success

    def commit_all(self, path: Path, message: str) -> bool:
        """Stage everything below a path and commit it if anything is staged.

        Args:
            path: Directory to stage; the command runs inside it.
            message: Commit message.

        Returns:
            True if a commit was created or nothing needed committing.
        """
        if not self.run("add", "--all", ".", cwd=path).success:
            return False
        # --quiet exits 0 when nothing is staged
        if self._runner(
            ["git", "diff", "--cached", "--quiet"], cwd=str(path), timeout=None
        ).success:
            return True
        return self.run("commit", "-m", message, cwd=path).success

    def delete_branch(self, name: str) -> bool:
        """Force-delete a local branch."""
        return self.run("branch", "-D", name).success

    def push(self, remote: str, branch: str, *, force: bool = False) -> bool:
        """Push a branch to a remote."""
        args = ["push", remote, branch]
        if force:
            args.append("--force")
        return self.run(*args).success

    def delete_remote_branch(self, remote: str, branch: str) -> bool:
        """Delete a branch on a remote."""
        return self.run("push", remote, f":{branch}").success
