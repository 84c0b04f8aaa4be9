"""Pipeline orchestration for the integrate and plan flows."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Tuple

from .analyzers import CodebaseAnalyzer, load_context_snippets
from .catalog import resolve_capabilities
from .config import RunContext
from .generator import IntegrationGenerator
from .git.adapter import GitAdapter, GitRunner
from .git.workflow import RULE, GitWorkflow, WorkflowState
from .logging import get_logger
from .models import CodebaseInfo, IntegrationPlan, PullRequestInfo
from .persister import PlanPersister
from .planner import PlanBuilder
from .workspace import acquire_working_copy


@dataclass
class RunOptions:
    """Inputs for one clone-to-publish integration run."""

    repo_url: str
    capabilities: Sequence[str]
    auto_approve: bool = False
    publish: bool = True
    keep: Optional[bool] = None
    branch: Optional[str] = None
    framework: Optional[str] = None
    force_push: bool = False
    base_dir: Optional[Path] = None


@dataclass
class RunOutcome:
    """What an integration run achieved and where it stopped."""

    success: bool
    state: WorkflowState
    commit_hash: Optional[str] = None
    branch: Optional[str] = None
    working_copy: Optional[Path] = None
    kept: bool = False
    manual_push_command: Optional[str] = None
    pull_request: Optional[PullRequestInfo] = None
    error: Optional[str] = None
    history: List[Tuple[WorkflowState, WorkflowState]] = field(default_factory=list)


@dataclass
class PlanOutcome:
    """Result of building and persisting a plan without touching git."""

    info: CodebaseInfo
    plan: IntegrationPlan
    output_dir: Path
    written: List[str] = field(default_factory=list)


class Orchestrator:
    """Coordinates analysis, planning, persistence and the git workflow."""

    def __init__(
        self,
        context: RunContext | None = None,
        generator: IntegrationGenerator | None = None,
        analyzer: CodebaseAnalyzer | None = None,
        persister: PlanPersister | None = None,
        git_factory: Callable[[Path], GitAdapter] | None = None,
        clone_runner: GitRunner | None = None,
        prompt: Callable[[str], str] = input,
        echo: Callable[[str], None] = print,
    ) -> None:
        self.context = context or RunContext.default()
        self.generator = generator
        self.analyzer = analyzer or CodebaseAnalyzer()
        self.persister = persister or PlanPersister()
        self.git_factory = git_factory or self._default_git_factory
        self.clone_runner = clone_runner
        self._prompt = prompt
        self._echo = echo
        self.logger = get_logger("orchestrator")

    def run(self, options: RunOptions) -> RunOutcome:
        """Clone, plan, review and commit; the working copy is released on exit.

        Fatal conditions (unknown capability, clone failure, generation
        failure) raise :class:`~wireup.errors.WireupError` subclasses. A
        cancelled review, failed commit or failed push returns an outcome.
        """
        resolve_capabilities(options.capabilities)
        workspace = self.context.config.workspace
        keep = workspace.keep if options.keep is None else options.keep
        base_dir = options.base_dir or workspace.base_dir

        self._echo("\nCloning repository...")
        with acquire_working_copy(
            options.repo_url, base_dir=base_dir, keep=keep, runner=self.clone_runner
        ) as working_copy:
            self.logger.info("Working copy ready at %s", working_copy)
            workflow = GitWorkflow(
                self.git_factory(working_copy),
                prompt=self._prompt,
                echo=self._echo,
                initial_state=WorkflowState.CLONED,
            )

            info = self.analyzer.analyze(working_copy, framework_override=options.framework)
            workflow.advance(WorkflowState.ANALYZED)
            self.logger.info(
                "Detected language=%s framework=%s web=%s",
                info.language,
                info.framework,
                info.is_web_app,
            )

            self._echo(f"\nGenerating integrations for: {', '.join(options.capabilities)}")
            snippets = load_context_snippets(working_copy, info)
            plan = self._plan_builder().build(info, options.capabilities, snippets)

            self._echo("\nSaving integration files...")
            self.persister.persist(plan, working_copy)
            workflow.attach_plan(plan)

            workflow.summarize()
            if not workflow.request_approval(auto_approve=options.auto_approve):
                self._echo("\nChanges not approved")
                return RunOutcome(
                    success=False,
                    state=workflow.state,
                    working_copy=working_copy,
                    kept=keep,
                    history=list(workflow.history),
                )

            result = workflow.commit_and_publish(
                publish=options.publish,
                branch=options.branch,
                force=options.force_push,
            )
            commit = result.commit
            outcome = RunOutcome(
                success=result.success,
                state=result.state,
                commit_hash=commit.commit_hash if commit else None,
                branch=commit.branch if commit else None,
                working_copy=working_copy,
                kept=keep,
                manual_push_command=result.manual_push_command,
                pull_request=result.pull_request,
                error=result.error,
                history=list(workflow.history),
            )
            self._report(outcome, options)
            return outcome

    def plan_local(
        self,
        path: Path | str,
        capabilities: Sequence[str],
        output_dir: Path | str | None = None,
        framework: str | None = None,
    ) -> PlanOutcome:
        """Analyze a local checkout and write the plan without any git step."""
        resolve_capabilities(capabilities)
        root = Path(path).expanduser().resolve()
        target = Path(output_dir).expanduser().resolve() if output_dir else root
        info = self.analyzer.analyze(root, framework_override=framework)
        snippets = load_context_snippets(root, info)
        plan = self._plan_builder().build(info, capabilities, snippets)
        written = self.persister.persist(plan, target)
        return PlanOutcome(info=info, plan=plan, output_dir=target, written=written)

    # ------------------------------------------------------------------
    # Helpers

    def _plan_builder(self) -> PlanBuilder:
        return PlanBuilder(self.context, self.generator)

    def _default_git_factory(self, path: Path) -> GitAdapter:
        return GitAdapter(path, context=self.context)

    def _report(self, outcome: RunOutcome, options: RunOptions) -> None:
        if not outcome.success:
            self._echo(f"\nCommit failed: {outcome.error}" if outcome.error else "\nCommit failed")
            if outcome.kept:
                self._echo(f"Generated files remain at: {outcome.working_copy}")
            return

        for line in ("", RULE, "SUCCESS", RULE):
            self._echo(line)
        if outcome.state is WorkflowState.PUBLISHED:
            self._echo(f"Changes committed and pushed to branch {outcome.branch}")
            self._echo(f"Repository: {options.repo_url}")
        elif outcome.kept:
            self._echo(f"Changes committed locally at: {outcome.working_copy}")
            self._echo(f"To push: cd {outcome.working_copy} && {outcome.manual_push_command or 'git push'}")
        else:
            self._echo(f"Changes committed on branch {outcome.branch} (commit {outcome.commit_hash})")
            if outcome.manual_push_command:
                self._echo(
                    f"Note: {outcome.working_copy} is removed when this run ends, so "
                    f"'{outcome.manual_push_command}' cannot be run from it"
                )
            self._echo("Re-run with --keep-clone to retain the local working copy")


__all__ = ["Orchestrator", "PlanOutcome", "RunOptions", "RunOutcome"]
