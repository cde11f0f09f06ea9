"""Create a GitHub repository, clone it, scaffold a Rust project and publish configs."""

__version__ = "0.1.0"

from create_rust_github_repo.models import RepoVisibility, Settings, WorkflowConfig
from create_rust_github_repo.workflow import WorkflowRunner

__all__ = [
    "__version__",
    "RepoVisibility",
    "Settings",
    "WorkflowConfig",
    "WorkflowRunner",
]
