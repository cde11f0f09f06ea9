"""Configuration models."""

import json
from enum import Enum
from pathlib import Path, PurePosixPath
from typing import Annotated, Any, List, Optional

import git
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from create_rust_github_repo.exceptions import ConfigValidationError

DEFAULT_CONFIGS: List[str] = []
DEFAULT_COMMIT_MESSAGE = "Add configs"


class RepoVisibility(str, Enum):
    """Access-control level of the hosted repository."""

    PUBLIC = "public"
    PRIVATE = "private"
    INTERNAL = "internal"

    @property
    def gh_flag(self) -> str:
        """Flag understood by `gh repo create`."""
        return f"--{self.value}"


class WorkflowConfig(BaseModel):
    """Validated, immutable configuration for a single workflow run."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Repository name, optionally OWNER/REPO")
    visibility: RepoVisibility = Field(RepoVisibility.PRIVATE, description="Repository visibility")
    dir: Optional[Path] = Field(None, description="Target directory for the clone")
    workspace: Optional[Path] = Field(None, description="Parent directory of the clone (target = workspace/repo)")
    copy_configs_from: Optional[Path] = Field(None, description="Source directory for config paths")
    configs: List[str] = Field(
        default_factory=lambda: list(DEFAULT_CONFIGS),
        description="Base config paths, relative to copy_configs_from",
    )
    extra_configs: List[str] = Field(
        default_factory=list,
        description="Additional config paths, relative to copy_configs_from",
    )
    commit_message: str = Field(DEFAULT_COMMIT_MESSAGE, description="Message for the config commit")
    build: bool = Field(True, description="Whether to build the scaffolded project")
    dry_run: bool = Field(False, description="Print planned actions without executing them")

    # Arguments forwarded verbatim to each wrapped command
    repo_create_args: List[str] = Field(default_factory=list, description="Extra args for `gh repo create`")
    repo_clone_args: List[str] = Field(default_factory=list, description="Extra args for `gh repo clone`")
    project_init_args: List[str] = Field(default_factory=list, description="Extra args for `cargo init`")
    project_build_args: List[str] = Field(default_factory=list, description="Extra args for `cargo build`")
    commit_args: List[str] = Field(default_factory=list, description="Extra args for `git commit`")
    push_args: List[str] = Field(default_factory=list, description="Extra args for `git push`")

    @field_validator("name")
    @classmethod
    def _check_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("repository name must not be empty")
        parts = value.split("/")
        if len(parts) > 2 or any(not part or part in (".", "..") for part in parts):
            raise ValueError(f"invalid repository name: {value!r} (expected REPO or OWNER/REPO)")
        if value.startswith("-"):
            raise ValueError(f"repository name must not start with '-': {value!r}")
        return value

    @field_validator("configs", "extra_configs")
    @classmethod
    def _check_config_paths(cls, value: List[str]) -> List[str]:
        for item in value:
            path = PurePosixPath(item)
            if not item.strip() or path.is_absolute() or ".." in path.parts:
                raise ValueError(f"config path must be relative to the source directory: {item!r}")
        return value

    @field_validator("commit_message")
    @classmethod
    def _check_commit_message(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("commit message must not be empty")
        return value

    @property
    def repo_basename(self) -> str:
        """Repository name without the owner prefix."""
        return self.name.rsplit("/", 1)[-1]

    @property
    def config_paths(self) -> List[str]:
        """Base config paths followed by the extra ones, without duplicates."""
        seen = set()
        paths = []
        for item in [*self.configs, *self.extra_configs]:
            key = PurePosixPath(item).as_posix()
            if key not in seen:
                seen.add(key)
                paths.append(item)
        return paths

    def target_dir(self, cwd: Optional[Path] = None) -> Path:
        """Resolve the clone directory: --dir, then workspace/repo, then cwd/repo."""
        base = cwd or Path.cwd()
        if self.dir is not None:
            return base / self.dir.expanduser()
        if self.workspace is not None:
            return base / self.workspace.expanduser() / self.repo_basename
        return base / self.repo_basename

    def source_dir(self, cwd: Optional[Path] = None) -> Optional[Path]:
        """Resolve the config source directory against cwd."""
        if self.copy_configs_from is None:
            return None
        return (cwd or Path.cwd()) / self.copy_configs_from.expanduser()

    def validate_environment(self, cwd: Optional[Path] = None) -> Path:
        """Check filesystem preconditions before any command runs.

        Args:
            cwd: Directory used to resolve the default target

        Returns:
            The resolved target directory

        Raises:
            ConfigValidationError: If the source or a config path is missing, or the target collides
        """
        source = self.source_dir(cwd)
        if source is not None:
            if not source.exists():
                raise ConfigValidationError(f"Config source directory does not exist: {source}")
            if not source.is_dir():
                raise ConfigValidationError(f"Config source is not a directory: {source}")
            missing = [item for item in self.config_paths if not (source / item).exists()]
            if missing:
                raise ConfigValidationError(
                    f"Config paths not found in {source}: {', '.join(missing)}"
                )

        target = self.target_dir(cwd)
        if target.exists():
            if not target.is_dir():
                raise ConfigValidationError(f"Target path exists and is not a directory: {target}")
            if any(target.iterdir()) and not is_git_checkout(target):
                raise ConfigValidationError(
                    f"Target directory is not empty and is not a git checkout: {target}"
                )
        return target


def is_git_checkout(path: Path) -> bool:
    """Return True if path is the root of a git working tree."""
    try:
        repo = git.Repo(path)
    except (git.exc.InvalidGitRepositoryError, git.exc.NoSuchPathError):
        return False
    return repo.working_tree_dir is not None and Path(repo.working_tree_dir).resolve() == path.resolve()


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="CREATE_RUST_GITHUB_REPO_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Executables
    gh_bin: str = "gh"
    git_bin: str = "git"
    cargo_bin: str = "cargo"

    # Workflow defaults
    configs: Annotated[List[str], NoDecode] = Field(default_factory=lambda: list(DEFAULT_CONFIGS))
    commit_message: str = DEFAULT_COMMIT_MESSAGE

    # Logging
    log_level: str = "WARNING"

    @field_validator("configs", mode="before")
    @classmethod
    def _split_configs(cls, value: Any) -> Any:
        """Accept a comma separated list, as --configs does, or a JSON array."""
        if not isinstance(value, str):
            return value
        if value.lstrip().startswith("["):
            return json.loads(value)
        return [item.strip() for item in value.split(",") if item.strip()]
