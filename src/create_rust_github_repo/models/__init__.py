"""Data models for workflow configuration and results."""

from create_rust_github_repo.models.config import (
    DEFAULT_COMMIT_MESSAGE,
    DEFAULT_CONFIGS,
    RepoVisibility,
    Settings,
    WorkflowConfig,
    is_git_checkout,
)
from create_rust_github_repo.models.result import StepResult, WorkflowResult

__all__ = [
    "DEFAULT_COMMIT_MESSAGE",
    "DEFAULT_CONFIGS",
    "RepoVisibility",
    "Settings",
    "WorkflowConfig",
    "is_git_checkout",
    "StepResult",
    "WorkflowResult",
]
