"""Interactive review, commit and publish workflow for an integration plan."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, FrozenSet, List, Optional, Sequence, Tuple

from ..errors import WorkflowStateError
from ..logging import get_logger
from ..models import GitCommitRecord, IntegrationPlan, PullRequestInfo
from ..persister import AUXILIARY_ARTIFACTS
from .adapter import GitAdapter

MAX_SUMMARY_FILES = 10
MAX_SUMMARY_DEPENDENCIES = 5
MAX_SUMMARY_ENV_KEYS = 5
DETAIL_PREVIEW_CHARS = 500
DETAIL_BATCH_SIZE = 3

RULE = "=" * 60


class WorkflowState(str, Enum):
    """Stages a single integration run passes through."""

    CLONED = "cloned"
    ANALYZED = "analyzed"
    PLANNED = "planned"
    SUMMARIZED = "summarized"
    AWAITING_APPROVAL = "awaiting_approval"
    APPROVED = "approved"
    CANCELLED = "cancelled"
    COMMITTED = "committed"
    PUBLISHED = "published"
    PUBLISH_FAILED = "publish_failed"


VALID_TRANSITIONS: Dict[WorkflowState, FrozenSet[WorkflowState]] = {
    WorkflowState.CLONED: frozenset({WorkflowState.ANALYZED}),
    WorkflowState.ANALYZED: frozenset({WorkflowState.PLANNED}),
    WorkflowState.PLANNED: frozenset({WorkflowState.SUMMARIZED}),
    WorkflowState.SUMMARIZED: frozenset({WorkflowState.AWAITING_APPROVAL}),
    WorkflowState.AWAITING_APPROVAL: frozenset(
        {WorkflowState.APPROVED, WorkflowState.CANCELLED}
    ),
    WorkflowState.APPROVED: frozenset({WorkflowState.COMMITTED}),
    WorkflowState.CANCELLED: frozenset(),
    WorkflowState.COMMITTED: frozenset(
        {WorkflowState.PUBLISHED, WorkflowState.PUBLISH_FAILED}
    ),
    WorkflowState.PUBLISHED: frozenset(),
    WorkflowState.PUBLISH_FAILED: frozenset(),
}


class ApprovalChoice(str, Enum):
    """Operator answers accepted at the approval prompt."""

    APPROVE = "1"
    INSPECT = "2"
    CUSTOM_MESSAGE = "3"
    CANCEL = "4"


@dataclass(frozen=True)
class WorkflowResult:
    """Outcome of the commit/publish step."""

    state: WorkflowState
    commit: Optional[GitCommitRecord] = None
    pull_request: Optional[PullRequestInfo] = None
    manual_push_command: Optional[str] = None
    error: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.commit is not None


class GitWorkflow:
    """Drives a run from clone through approval to a single commit.

    A workflow created at ``CLONED`` has no plan until :meth:`attach_plan`;
    one created at ``PLANNED`` is handed its plan up front.

    ``prompt`` and ``echo`` default to :func:`input` and :func:`print`; tests
    pass scripted replacements.
    """

    def __init__(
        self,
        adapter: GitAdapter,
        plan: IntegrationPlan | None = None,
        *,
        prompt: Callable[[str], str] = input,
        echo: Callable[[str], None] = print,
        initial_state: WorkflowState = WorkflowState.PLANNED,
    ) -> None:
        self.adapter = adapter
        self._plan = plan
        self._prompt = prompt
        self._echo = echo
        self.state = initial_state
        self.history: List[Tuple[WorkflowState, WorkflowState]] = []
        self.commit_message: Optional[str] = None
        self.commit_record: Optional[GitCommitRecord] = None
        self.logger = get_logger("workflow")

    def advance(self, target: WorkflowState) -> None:
        if target not in VALID_TRANSITIONS[self.state]:
            raise WorkflowStateError(
                f"Cannot move from {self.state.value} to {target.value}"
            )
        self.history.append((self.state, target))
        self.logger.debug("Workflow %s -> %s", self.state.value, target.value)
        self.state = target

    @property
    def plan(self) -> IntegrationPlan:
        if self._plan is None:
            raise WorkflowStateError(f"No plan attached (state: {self.state.value})")
        return self._plan

    def attach_plan(self, plan: IntegrationPlan) -> None:
        """Record the built plan and move to PLANNED."""
        self.advance(WorkflowState.PLANNED)
        self._plan = plan

    def default_message(self) -> str:
        return f"Add integrations for: {', '.join(self.plan.selected_capabilities)}"

    # ------------------------------------------------------------------
    # Summary and approval

    def summarize(self) -> List[str]:
        """Echo a capped overview of the plan and return the lines shown."""
        changes = self.plan.changes
        self.advance(WorkflowState.SUMMARIZED)
        lines = ["", RULE, "INTEGRATION CHANGES SUMMARY", RULE]

        lines.append(f"\nFiles to be created/modified ({len(changes)}):")
        for change in changes[:MAX_SUMMARY_FILES]:
            lines.append(f"  [{change.status}] {change.path} - {change.description}")
        if len(changes) > MAX_SUMMARY_FILES:
            lines.append(f"  ... and {len(changes) - MAX_SUMMARY_FILES} more files")

        lines.extend(
            _capped_listing(
                "Dependencies to add", self.plan.dependencies, MAX_SUMMARY_DEPENDENCIES
            )
        )
        lines.extend(
            _capped_listing(
                "Environment variables",
                list(self.plan.env_placeholders),
                MAX_SUMMARY_ENV_KEYS,
            )
        )

        for line in lines:
            self._echo(line)
        return lines

    def request_approval(self, auto_approve: bool = False) -> bool:
        """Loop on the operator's choice until the plan is approved or cancelled."""
        self.advance(WorkflowState.AWAITING_APPROVAL)
        if auto_approve:
            self.logger.info("Auto-approving integration changes")
            self.advance(WorkflowState.APPROVED)
            return True

        while self.state is WorkflowState.AWAITING_APPROVAL:
            choice = self._ask_choice()
            if choice is None:
                self._echo("Invalid choice, please try again")
            elif choice is ApprovalChoice.APPROVE:
                self.advance(WorkflowState.APPROVED)
            elif choice is ApprovalChoice.INSPECT:
                self.show_details()
            elif choice is ApprovalChoice.CUSTOM_MESSAGE:
                message = self._ask_custom_message()
                if message:
                    self.commit_message = message
                    self.advance(WorkflowState.APPROVED)
                else:
                    self._echo("Commit cancelled")
                    self.advance(WorkflowState.CANCELLED)
            else:
                self._echo("Commit cancelled")
                self.advance(WorkflowState.CANCELLED)

        return self.state is WorkflowState.APPROVED

    def show_details(self) -> None:
        """Page through every file change, pausing after each batch of three."""
        changes = self.plan.changes
        total = len(changes)
        for index, change in enumerate(changes, start=1):
            self._echo(f"\n--- File {index}/{total}: {change.path} ---")
            self._echo(change.updated[:DETAIL_PREVIEW_CHARS])
            if len(change.updated) > DETAIL_PREVIEW_CHARS:
                self._echo("... (truncated)")
            if index % DETAIL_BATCH_SIZE == 0 and index < total:
                answer = self._ask("\nPress Enter to continue or 'q' to stop: ")
                if answer is None or answer.strip().lower() == "q":
                    break

    # ------------------------------------------------------------------
    # Commit and publish

    def commit_and_publish(
        self,
        publish: bool = True,
        branch: str | None = None,
        force: bool = False,
    ) -> WorkflowResult:
        if self.state is not WorkflowState.APPROVED:
            raise WorkflowStateError(
                f"Changes must be approved before committing (state: {self.state.value})"
            )

        checked_out = self.adapter.ensure_branch(branch)
        if not checked_out:
            target = branch or "a new integration branch"
            self._echo(f"\nCould not check out {target}; nothing was staged or committed")
            return WorkflowResult(state=self.state, error=f"could not check out {target}")
        branch = checked_out
        self._echo(f"\nWorking on branch: {branch}")

        staged = self.adapter.stage(list(self.plan.paths))
        auxiliary = [
            name for name in AUXILIARY_ARTIFACTS if (self.adapter.repo_path / name).exists()
        ]
        if auxiliary:
            staged.extend(self.adapter.stage(auxiliary))

        message = self.commit_message or self.default_message()
        self._echo(f"Committing with message: {message}")
        commit_hash = self.adapter.commit(message)
        if not commit_hash:
            self._echo("Commit failed - generated files remain in the working copy")
            return WorkflowResult(state=self.state, error="git commit did not produce a commit")

        self.commit_record = GitCommitRecord(
            message=message,
            files_staged=tuple(staged),
            branch=branch,
            commit_hash=commit_hash,
        )
        self.advance(WorkflowState.COMMITTED)
        self._echo(f"Commit created: {commit_hash[:8]}")

        if not publish:
            return WorkflowResult(state=self.state, commit=self.commit_record)
        return self._publish(branch, force)

    def _publish(self, branch: str, force: bool) -> WorkflowResult:
        remote = self.adapter.remote
        self._echo("\nPushing to remote...")
        result = self.adapter.publish(branch, remote=remote, force=force)
        if not result.ok:
            self.advance(WorkflowState.PUBLISH_FAILED)
            manual = f"git push {remote} {branch}"
            if force:
                manual += " --force-with-lease"
            self._echo("Push failed - changes are committed locally")
            self._echo(f"You can push manually with: {manual}")
            return WorkflowResult(
                state=self.state,
                commit=self.commit_record,
                manual_push_command=manual,
                error=result.stderr.strip() or f"git push exited with {result.exit_code}",
            )

        self.advance(WorkflowState.PUBLISHED)
        info = self.adapter.pull_request_description(branch, self.plan.selected_capabilities)
        for line in ("", RULE, "PULL REQUEST INFORMATION", RULE):
            self._echo(line)
        self._echo(f"\nTitle: {info.title}")
        self._echo(f"\nBody:\n{info.body}")
        self._echo(f"\nBranch: {info.branch}")
        return WorkflowResult(state=self.state, commit=self.commit_record, pull_request=info)

    # ------------------------------------------------------------------
    # Helpers

    def _ask(self, message: str) -> Optional[str]:
        try:
            return self._prompt(message)
        except EOFError:
            return None

    def _ask_choice(self) -> Optional[ApprovalChoice]:
        for line in (
            "",
            RULE,
            "REVIEW AND APPROVE",
            RULE,
            "\nWould you like to:",
            "  1. Approve and commit these changes",
            "  2. Review the changes in detail",
            "  3. Commit with a custom message",
            "  4. Cancel (don't commit)",
        ):
            self._echo(line)
        answer = self._ask("\nYour choice (1-4): ")
        if answer is None:
            return ApprovalChoice.CANCEL
        try:
            return ApprovalChoice(answer.strip())
        except ValueError:
            return None

    def _ask_custom_message(self) -> str:
        self._echo("\nEnter your commit message:")
        message = (self._ask("> ") or "").strip()
        if message:
            return message
        default = self.default_message()
        answer = self._ask(f"Use the default message '{default}'? [y/N]: ") or ""
        return default if answer.strip().lower() in {"y", "yes"} else ""


def _capped_listing(title: str, items: Sequence[str], cap: int) -> List[str]:
    if not items:
        return []
    lines = [f"\n{title} ({len(items)}):"]
    lines.extend(f"  - {item}" for item in items[:cap])
    if len(items) > cap:
        lines.append(f"  ... and {len(items) - cap} more")
    return lines


__all__ = [
    "ApprovalChoice",
    "GitWorkflow",
    "VALID_TRANSITIONS",
    "WorkflowResult",
    "WorkflowState",
]
