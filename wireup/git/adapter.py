"""Thin, non-raising wrapper around the git command line."""

from __future__ import annotations

import subprocess
from datetime import UTC, datetime
from pathlib import Path
from typing import Callable, List, Sequence

from ..config import RunContext
from ..errors import NotAGitRepositoryError
from ..logging import get_logger
from ..models import CommandResult, PullRequestInfo, UncommittedState

GitRunner = Callable[..., CommandResult]

BRANCH_TIMESTAMP_FORMAT = "%Y-%m-%dT%H-%M-%S"


class GitAdapter:
    """Runs git inside a working copy and reports outcomes instead of raising.

    Every operation goes through ``runner(args, cwd=...)``, which must return a
    :class:`CommandResult`. Tests substitute a recording runner.
    """

    def __init__(
        self,
        repo_path: Path | str,
        runner: GitRunner | None = None,
        context: RunContext | None = None,
    ) -> None:
        self.repo_path = Path(repo_path)
        if not (self.repo_path / ".git").exists():
            raise NotAGitRepositoryError(f"{self.repo_path} is not a git repository")
        self._runner = runner or run_command
        self.context = context or RunContext.default(self.repo_path)
        self.logger = get_logger("git")

    @property
    def remote(self) -> str:
        return self.context.config.git.remote

    def current_branch(self) -> str:
        """Return the checked out branch, or "" when HEAD is detached."""
        return self._git("branch", "--show-current").stdout.strip()

    def branch_exists(self, name: str) -> bool:
        return self._git("rev-parse", "--verify", name).ok

    def ensure_branch(self, name: str | None = None) -> str:
        """Check out ``name``, creating it first when it does not exist yet.

        Returns the branch HEAD is on afterwards, or "" when the checkout did
        not land on ``name``.
        """
        if not name:
            stamp = datetime.now(UTC).strftime(BRANCH_TIMESTAMP_FORMAT)
            name = f"{self.context.config.git.branch_prefix}{stamp}"

        if self.branch_exists(name):
            self.logger.info("Branch %s already exists, using it", name)
            result = self._git("checkout", name)
        else:
            self.logger.info("Creating new branch: %s", name)
            result = self._git("checkout", "-b", name)
        if not result.ok:
            self.logger.warning("Checkout of %s failed: %s", name, result.stderr.strip())
            return ""
        current = self.current_branch()
        if current != name:
            self.logger.warning("Expected to be on %s but HEAD is on %s", name, current or "a detached HEAD")
            return ""
        return name

    def stage(self, paths: Sequence[str]) -> List[str]:
        """Add each existing path; missing files are skipped with a warning."""
        staged: List[str] = []
        for rel in paths:
            if not (self.repo_path / rel).exists():
                self.logger.warning("File not found, not staging: %s", rel)
                continue
            result = self._git("add", rel)
            if result.ok:
                staged.append(rel)
            else:
                self.logger.warning("git add %s failed: %s", rel, result.stderr.strip())
        return staged

    def commit(
        self,
        message: str,
        author_name: str | None = None,
        author_email: str | None = None,
    ) -> str:
        """Commit staged content and return the full hash, or "" on failure."""
        git_config = self.context.config.git
        author_name = author_name or git_config.author_name
        author_email = author_email or git_config.author_email

        args = ["commit", "-m", message]
        if author_name and author_email:
            args.extend(["--author", f"{author_name} <{author_email}>"])
        result = self._git(*args)
        if not result.ok:
            self.logger.warning("Commit failed: %s", (result.stderr or result.stdout).strip())
            return ""

        head = self._git("rev-parse", "HEAD")
        return head.stdout.strip() if head.ok else ""

    def publish(
        self,
        branch: str,
        remote: str | None = None,
        force: bool = False,
    ) -> CommandResult:
        """Push ``branch``; ``--force-with-lease`` is only passed when forced."""
        remote = remote or self.remote
        args = ["push", remote, branch]
        if force:
            args.append("--force-with-lease")
        result = self._git(*args)
        if result.ok:
            self.logger.info("Pushed to %s/%s", remote, branch)
        else:
            self.logger.warning("Push failed: %s", result.stderr.strip())
        return result

    def uncommitted_state(self) -> UncommittedState:
        return UncommittedState(
            staged=_lines(self._git("diff", "--cached", "--name-only")),
            modified=_lines(self._git("diff", "--name-only")),
            untracked=_lines(self._git("ls-files", "--others", "--exclude-standard")),
        )

    @staticmethod
    def pull_request_description(branch: str, capabilities: Sequence[str]) -> PullRequestInfo:
        names = ", ".join(capabilities)
        listing = "\n".join(f"- {name}" for name in capabilities)
        body = (
            "## API Integrations Added\n"
            "\n"
            "This pull request adds integration modules for the following APIs:\n"
            f"{listing}\n"
            "\n"
            "### Files Changed\n"
            "- New integration modules in `integrations/` directory\n"
            "- Environment configuration in `.env.example`\n"
            "- Additional dependencies in `package_additions.json`\n"
            "\n"
            "### Setup Instructions\n"
            "1. Copy `.env.example` to `.env`\n"
            "2. Add your API keys to `.env`\n"
            "3. Install the new dependencies with `npm install`\n"
            "4. Run the integration demo\n"
        )
        return PullRequestInfo(title=f"Add API integrations: {names}", body=body, branch=branch)

    # ------------------------------------------------------------------
    # Helpers

    def _git(self, *args: str) -> CommandResult:
        command = ["git", *args]
        self.logger.debug("Running %s", " ".join(command))
        return self._runner(command, cwd=self.repo_path)


def run_command(args: Sequence[str], *, cwd: Path) -> CommandResult:
    """Run a command and report its outcome; launch failures become exit code 127."""
    try:
        completed = subprocess.run(
            list(args),
            cwd=str(cwd),
            check=False,
            text=True,
            capture_output=True,
        )
    except OSError as exc:
        return CommandResult(exit_code=127, stderr=str(exc))
    return CommandResult(
        exit_code=completed.returncode,
        stdout=completed.stdout,
        stderr=completed.stderr,
    )


def _lines(result: CommandResult) -> tuple[str, ...]:
    if not result.ok:
        return ()
    return tuple(line for line in result.stdout.splitlines() if line.strip())


__all__ = ["GitAdapter", "GitRunner", "run_command"]
