"""Subprocess forwarding and config copying."""

from create_rust_github_repo.execution.copier import copy_configs
from create_rust_github_repo.execution.forwarder import CommandForwarder, CommandOutput, build_command

__all__ = [
    "CommandForwarder",
    "CommandOutput",
    "build_command",
    "copy_configs",
]
