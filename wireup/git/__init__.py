"""Version-control adapter and the commit/publish workflow."""

from .adapter import GitAdapter
from .workflow import ApprovalChoice, GitWorkflow, WorkflowResult, WorkflowState

__all__ = [
    "ApprovalChoice",
    "GitAdapter",
    "GitWorkflow",
    "WorkflowResult",
    "WorkflowState",
]
