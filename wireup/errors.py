"""Exception types raised across wireup components."""

from __future__ import annotations

from typing import Sequence


class WireupError(RuntimeError):
    """Base class for fatal pipeline errors."""


class ConfigError(WireupError):
    """Raised when a configuration or secrets file cannot be parsed."""


class UnknownCapabilityError(WireupError, ValueError):
    """Raised when a requested capability is not part of the catalog."""

    def __init__(self, invalid: Sequence[str], supported: Sequence[str]) -> None:
        self.invalid = list(invalid)
        self.supported = list(supported)
        super().__init__(
            f"Unsupported capabilities: {', '.join(self.invalid)}. "
            f"Supported: {', '.join(self.supported)}"
        )


class GenerationError(WireupError):
    """Raised when the code generation collaborator fails for a capability."""

    def __init__(self, target: str, message: str) -> None:
        self.target = target
        super().__init__(f"Code generation failed for {target}: {message}")


class PlanConflictError(WireupError):
    """Raised when two file changes in one plan would share a path."""


class AcquisitionError(WireupError):
    """Raised when the working copy cannot be obtained."""


class NotAGitRepositoryError(WireupError):
    """Raised when a git operation targets a directory without a repository."""


class WorkflowStateError(WireupError):
    """Raised when the git workflow is driven through an illegal transition."""


__all__ = [
    "AcquisitionError",
    "ConfigError",
    "GenerationError",
    "NotAGitRepositoryError",
    "PlanConflictError",
    "UnknownCapabilityError",
    "WireupError",
    "WorkflowStateError",
]
