"""Core data models shared across wireup components."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Optional, Tuple


@dataclass(frozen=True)
class CodebaseInfo:
    """Coarse classification of a working copy produced by the analyzer."""

    language: Optional[str]
    framework: Optional[str]
    entry_points: Tuple[str, ...] = ()
    is_web_app: bool = False
    has_static_typing: bool = False


@dataclass(frozen=True)
class CapabilityConfig:
    """Static description of a third-party service capability."""

    name: str
    description: str
    dependencies: Tuple[str, ...]
    env_vars: Mapping[str, str]
    setup_notes: Optional[str] = None
    web_only: bool = False


@dataclass(frozen=True)
class FileChange:
    """A single file the plan proposes to create or modify."""

    path: str
    updated: str
    description: str
    original: Optional[str] = None

    @property
    def is_new(self) -> bool:
        return self.original is None

    @property
    def status(self) -> str:
        return "CREATE" if self.is_new else "MODIFY"


@dataclass(frozen=True)
class IntegrationPlan:
    """Finalized output of the plan builder."""

    changes: Tuple[FileChange, ...]
    dependencies: Tuple[str, ...]
    env_placeholders: Mapping[str, str]
    notes: Tuple[str, ...]
    setup_instructions: Tuple[str, ...]
    selected_capabilities: Tuple[str, ...]

    def __post_init__(self) -> None:
        # Freeze the mapping so the plan cannot be mutated after hand-off.
        object.__setattr__(
            self, "env_placeholders", MappingProxyType(dict(self.env_placeholders))
        )

    @property
    def paths(self) -> Tuple[str, ...]:
        return tuple(change.path for change in self.changes)


@dataclass(frozen=True)
class CommandResult:
    """Outcome of a version-control subprocess invocation."""

    exit_code: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.exit_code == 0


@dataclass(frozen=True)
class GitCommitRecord:
    """Details of the single commit produced by a workflow run."""

    message: str
    files_staged: Tuple[str, ...]
    branch: str
    commit_hash: str


@dataclass(frozen=True)
class UncommittedState:
    """Disjoint path lists describing the working copy status."""

    staged: Tuple[str, ...] = ()
    modified: Tuple[str, ...] = ()
    untracked: Tuple[str, ...] = ()


@dataclass(frozen=True)
class PullRequestInfo:
    """Title/body pair suggested for the published branch."""

    title: str
    body: str
    branch: str


@dataclass
class ServiceCredentials:
    """Resolved credentials for a service entry in the secrets file."""

    name: str
    enabled: bool
    credentials: dict[str, str] = field(default_factory=dict)
    base_url: Optional[str] = None
    environment: str = "development"
