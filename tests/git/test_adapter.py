"""Tests for the git command adapter."""

from __future__ import annotations

import re
from pathlib import Path
from typing import List

import pytest

from wireup.config import GitConfig, RunContext, WireupConfig
from wireup.errors import NotAGitRepositoryError
from wireup.git.adapter import GitAdapter, run_command
from wireup.models import CommandResult
from tests._fixtures.fakes import RecordingGitRunner


def _repo(tmp_path: Path) -> Path:
    repo = tmp_path / "repo"
    (repo / ".git").mkdir(parents=True)
    return repo


def test_adapter_requires_git_directory(tmp_path: Path) -> None:
    with pytest.raises(NotAGitRepositoryError):
        GitAdapter(tmp_path, runner=RecordingGitRunner())


def test_current_branch_trims_output(tmp_path: Path) -> None:
    runner = RecordingGitRunner({"branch": lambda args: CommandResult(0, "feature-x\n")})
    adapter = GitAdapter(_repo(tmp_path), runner=runner)

    assert adapter.current_branch() == "feature-x"
    assert runner.calls == [["git", "branch", "--show-current"]]
    assert runner.cwds == [tmp_path / "repo"]


def test_ensure_branch_is_idempotent(tmp_path: Path) -> None:
    branches: List[str] = []
    head = {"name": "main"}

    def rev_parse(args: List[str]) -> CommandResult:
        return CommandResult(0 if args[-1] in branches else 1, stderr="unknown revision")

    def checkout(args: List[str]) -> CommandResult:
        if args[2] == "-b":
            if args[3] in branches:
                return CommandResult(128, stderr="already exists")
            branches.append(args[3])
        head["name"] = args[-1]
        return CommandResult(0)

    runner = RecordingGitRunner(
        {
            "rev-parse": rev_parse,
            "checkout": checkout,
            "branch": lambda args: CommandResult(0, head["name"] + "\n"),
        }
    )
    adapter = GitAdapter(_repo(tmp_path), runner=runner)

    assert adapter.ensure_branch("feature-x") == "feature-x"
    assert adapter.current_branch() == "feature-x"
    assert adapter.ensure_branch("feature-x") == "feature-x"
    assert adapter.current_branch() == "feature-x"

    assert runner.commands("checkout") == [
        ["git", "checkout", "-b", "feature-x"],
        ["git", "checkout", "feature-x"],
    ]
    assert branches == ["feature-x"]


def test_ensure_branch_derives_timestamped_name(tmp_path: Path) -> None:
    runner = RecordingGitRunner({"rev-parse": lambda args: CommandResult(1)})
    adapter = GitAdapter(_repo(tmp_path), runner=runner)

    name = adapter.ensure_branch()

    assert re.fullmatch(r"integration-\d{4}-\d{2}-\d{2}T\d{2}-\d{2}-\d{2}", name)
    assert runner.commands("checkout") == [["git", "checkout", "-b", name]]


def test_ensure_branch_reports_failed_checkout(tmp_path: Path) -> None:
    runner = RecordingGitRunner(
        {
            "rev-parse": lambda args: CommandResult(1),
            "checkout": lambda args: CommandResult(128, stderr="fatal: 'foo..bar' is not a valid branch name"),
        }
    )
    adapter = GitAdapter(_repo(tmp_path), runner=runner)

    assert adapter.ensure_branch("foo..bar") == ""
    assert adapter.current_branch() == "main"


def test_ensure_branch_rejects_checkout_that_left_head_elsewhere(tmp_path: Path) -> None:
    runner = RecordingGitRunner(
        {
            "checkout": lambda args: CommandResult(0),
            "branch": lambda args: CommandResult(0, "main\n"),
        }
    )
    adapter = GitAdapter(_repo(tmp_path), runner=runner)

    assert adapter.ensure_branch("feature-x") == ""


def test_stage_skips_missing_files(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    repo = _repo(tmp_path)
    (repo / "integrations").mkdir()
    (repo / "integrations" / "a.ts").write_text("a", encoding="utf-8")
    (repo / "SETUP.md").write_text("s", encoding="utf-8")
    runner = RecordingGitRunner()
    adapter = GitAdapter(repo, runner=runner)

    with caplog.at_level("WARNING", logger="wireup"):
        staged = adapter.stage(["integrations/a.ts", "missing.ts", "SETUP.md"])

    assert staged == ["integrations/a.ts", "SETUP.md"]
    assert runner.commands("add") == [
        ["git", "add", "integrations/a.ts"],
        ["git", "add", "SETUP.md"],
    ]
    assert "missing.ts" in caplog.text


def test_commit_returns_full_hash_and_passes_author(tmp_path: Path) -> None:
    digest = "0123456789abcdef0123456789abcdef01234567"
    runner = RecordingGitRunner({"rev-parse": lambda args: CommandResult(0, digest + "\n")})
    adapter = GitAdapter(_repo(tmp_path), runner=runner)

    result = adapter.commit("Add integrations for: stripe", "Dev", "dev@example.com")

    assert result == digest
    assert runner.commands("commit") == [
        ["git", "commit", "-m", "Add integrations for: stripe", "--author", "Dev <dev@example.com>"]
    ]


def test_commit_uses_configured_author(tmp_path: Path) -> None:
    repo = _repo(tmp_path)
    context = RunContext(
        config=WireupConfig(
            root=repo, git=GitConfig(author_name="Bot", author_email="bot@example.com")
        )
    )
    runner = RecordingGitRunner({"rev-parse": lambda args: CommandResult(0, "abc\n")})

    GitAdapter(repo, runner=runner, context=context).commit("msg")

    assert runner.commands("commit")[0][-2:] == ["--author", "Bot <bot@example.com>"]


def test_commit_failure_returns_empty_string(tmp_path: Path) -> None:
    runner = RecordingGitRunner({"commit": lambda args: CommandResult(1, "nothing to commit")})
    adapter = GitAdapter(_repo(tmp_path), runner=runner)

    assert adapter.commit("msg") == ""
    assert runner.commands("rev-parse") == []


def test_publish_only_forces_when_requested(
    tmp_path: Path, git_runner: RecordingGitRunner
) -> None:
    adapter = GitAdapter(_repo(tmp_path), runner=git_runner)

    assert adapter.publish("feature-x").ok
    adapter.publish("feature-x", remote="upstream", force=True)

    assert git_runner.commands("push") == [
        ["git", "push", "origin", "feature-x"],
        ["git", "push", "upstream", "feature-x", "--force-with-lease"],
    ]


def test_publish_failure_is_reported_not_raised(tmp_path: Path) -> None:
    runner = RecordingGitRunner({"push": lambda args: CommandResult(1, stderr="rejected")})
    adapter = GitAdapter(_repo(tmp_path), runner=runner)

    result = adapter.publish("feature-x")

    assert not result.ok
    assert result.stderr == "rejected"


def test_uncommitted_state_lists_three_groups(tmp_path: Path) -> None:
    def diff(args: List[str]) -> CommandResult:
        if "--cached" in args:
            return CommandResult(0, "integrations/a.ts\n")
        return CommandResult(0, "README.md\n\n")

    runner = RecordingGitRunner(
        {
            "diff": diff,
            "ls-files": lambda args: CommandResult(0, "SETUP.md\n.env.example\n"),
        }
    )
    state = GitAdapter(_repo(tmp_path), runner=runner).uncommitted_state()

    assert state.staged == ("integrations/a.ts",)
    assert state.modified == ("README.md",)
    assert state.untracked == ("SETUP.md", ".env.example")


def test_pull_request_description_is_pure() -> None:
    info = GitAdapter.pull_request_description("integration-x", ["stripe", "twilio"])

    assert info.title == "Add API integrations: stripe, twilio"
    assert info.branch == "integration-x"
    assert "- stripe\n- twilio" in info.body
    assert info == GitAdapter.pull_request_description("integration-x", ["stripe", "twilio"])


def test_run_command_reports_missing_executable(tmp_path: Path) -> None:
    result = run_command(["wireup-definitely-missing-binary"], cwd=tmp_path)

    assert result.exit_code == 127
    assert not result.ok
