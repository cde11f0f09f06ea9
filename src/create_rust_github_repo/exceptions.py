"""Exceptions raised while preparing or running the repository workflow."""

from pathlib import Path
from typing import List


class CreateRepoError(Exception):
    """Base exception for create-rust-github-repo errors"""
    pass


class ConfigValidationError(CreateRepoError):
    """Raised when the workflow configuration is invalid"""
    pass


class CommandLaunchError(CreateRepoError):
    """Raised when an external command cannot be started"""
    def __init__(self, command: List[str], reason: str):
        self.command = command
        self.reason = reason
        super().__init__(f"Failed to launch {' '.join(command)}: {reason}")


class CommandFailedError(CreateRepoError):
    """Raised when an external command exits with a non-zero status"""
    def __init__(self, command: List[str], returncode: int, stderr: str = ""):
        self.command = command
        self.returncode = returncode
        self.stderr = stderr
        message = f"Command {' '.join(command)} failed with code {returncode}"
        if stderr.strip():
            message = f"{message}: {stderr.strip()}"
        super().__init__(message)


class ConfigCopyError(CreateRepoError):
    """Raised when a config path cannot be copied into the target directory"""
    def __init__(self, path: Path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to copy {path}: {reason}")
