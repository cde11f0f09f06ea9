"""Workflow orchestration for creating and publishing a new repository."""

from create_rust_github_repo.workflow.runner import STEPS, WorkflowRunner

__all__ = [
    "STEPS",
    "WorkflowRunner",
]
