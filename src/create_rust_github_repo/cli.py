"""Command-line interface for create-rust-github-repo."""

import shlex
import sys
from pathlib import Path
from typing import List, Optional

import typer
from pydantic import ValidationError
from pydantic_settings import SettingsError
from rich.console import Console
from rich.markup import escape

from create_rust_github_repo.exceptions import ConfigValidationError
from create_rust_github_repo.logging_config import configure_logging
from create_rust_github_repo.models import RepoVisibility, Settings, WorkflowConfig
from create_rust_github_repo.workflow import WorkflowRunner

app = typer.Typer(
    name="create-rust-github-repo",
    help="Create a GitHub repo, clone it, init a Rust project, copy configs, commit and push",
    add_completion=False,
)
console = Console()

EXIT_STEP_FAILED = 1
EXIT_INVALID_CONFIG = 2
EXIT_INTERRUPTED = 130


def split_forwarded(values: Optional[List[str]]) -> List[str]:
    """Split each shell-style option value and concatenate the results in order."""
    args: List[str] = []
    for value in values or []:
        args.extend(shlex.split(value))
    return args


def split_paths(values: Optional[List[str]]) -> List[str]:
    """Split comma separated path lists, dropping empty entries."""
    paths: List[str] = []
    for value in values or []:
        paths.extend(item.strip() for item in value.split(",") if item.strip())
    return paths


def _format_validation_error(error: ValidationError) -> str:
    parts = []
    for item in error.errors():
        field = ".".join(str(loc) for loc in item["loc"]) or "config"
        parts.append(f"{field}: {item['msg']}")
    return "; ".join(parts)


def _version_callback(value: bool) -> None:
    if value:
        from create_rust_github_repo import __version__

        console.print(f"[bold]create-rust-github-repo[/bold] version {__version__}")
        raise typer.Exit()


@app.command()
def create(
    name: str = typer.Option(..., "--name", "-n", help="Repository name (REPO or OWNER/REPO)"),
    dir: Optional[Path] = typer.Option(
        None, "--dir", "-d", help="Target directory for the clone (defaults to {cwd}/{repo})"
    ),
    workspace: Optional[Path] = typer.Option(
        None, "--workspace", "-w", help="Parent of the target directory; clones to {workspace}/{repo}. --dir overrides it"
    ),
    visibility: RepoVisibility = typer.Option(
        RepoVisibility.PRIVATE, "--visibility", case_sensitive=False, help="Repository visibility"
    ),
    copy_configs_from: Optional[Path] = typer.Option(
        None, "--copy-configs-from", "-c", help="Source directory for config paths"
    ),
    configs: Optional[List[str]] = typer.Option(
        None, "--configs", help="Base config paths, comma separated (relative to --copy-configs-from)"
    ),
    extra_configs: Optional[List[str]] = typer.Option(
        None, "--extra-configs", help="Additional config paths, comma separated (relative to --copy-configs-from)"
    ),
    git_commit_message: Optional[str] = typer.Option(
        None, "--git-commit-message", help="Commit message for the copied configs [default: Add configs]"
    ),
    gh_repo_create_cmd: Optional[List[str]] = typer.Option(
        None, "--gh-repo-create-cmd", help="Extra args for `gh repo create`"
    ),
    gh_repo_clone_cmd: Optional[List[str]] = typer.Option(
        None, "--gh-repo-clone-cmd", help="Extra args for `gh repo clone`"
    ),
    cargo_init_cmd: Optional[List[str]] = typer.Option(
        None, "--cargo-init-cmd", help="Extra args for `cargo init` (e.g. '--lib')"
    ),
    cargo_build_cmd: Optional[List[str]] = typer.Option(
        None, "--cargo-build-cmd", help="Extra args for `cargo build`"
    ),
    git_commit_cmd: Optional[List[str]] = typer.Option(
        None, "--git-commit-cmd", help="Extra args for `git commit`"
    ),
    git_push_cmd: Optional[List[str]] = typer.Option(
        None, "--git-push-cmd", help="Extra args for `git push`"
    ),
    build: bool = typer.Option(True, "--build/--no-build", help="Build the project before committing"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Print the planned commands without running them"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
    version: bool = typer.Option(
        False, "--version", callback=_version_callback, is_eager=True, help="Show version and exit"
    ),
) -> None:
    """Create a GitHub repository and publish a freshly initialized Rust project to it.

    Runs, in order: gh repo create, gh repo clone, cargo init, cargo build,
    config copy, git add + git commit, git push. Stops at the first failing
    step and leaves everything done so far in place.

    Every --*-cmd option is split like a shell command line and appended
    verbatim after the tool's own arguments. The options may be repeated.
    """
    try:
        settings = Settings()
    except (SettingsError, ValidationError) as e:
        detail = _format_validation_error(e) if isinstance(e, ValidationError) else str(e)
        console.print(f"[bold red]Error:[/bold red] Invalid configuration: {escape(detail)}")
        raise typer.Exit(EXIT_INVALID_CONFIG)
    configure_logging("DEBUG" if verbose else settings.log_level)

    try:
        config = WorkflowConfig(
            name=name,
            visibility=visibility,
            dir=dir,
            workspace=workspace,
            copy_configs_from=copy_configs_from,
            configs=split_paths(configs) if configs else settings.configs,
            extra_configs=split_paths(extra_configs),
            commit_message=git_commit_message if git_commit_message is not None else settings.commit_message,
            build=build,
            dry_run=dry_run,
            repo_create_args=split_forwarded(gh_repo_create_cmd),
            repo_clone_args=split_forwarded(gh_repo_clone_cmd),
            project_init_args=split_forwarded(cargo_init_cmd),
            project_build_args=split_forwarded(cargo_build_cmd),
            commit_args=split_forwarded(git_commit_cmd),
            push_args=split_forwarded(git_push_cmd),
        )
        cwd = Path.cwd()
        config.validate_environment(cwd)
    except ValidationError as e:
        console.print(f"[bold red]Error:[/bold red] Invalid configuration: {escape(_format_validation_error(e))}")
        raise typer.Exit(EXIT_INVALID_CONFIG)
    except ValueError as e:
        # shlex reports unbalanced quotes as ValueError
        console.print(f"[bold red]Error:[/bold red] Invalid forwarded arguments: {escape(str(e))}")
        raise typer.Exit(EXIT_INVALID_CONFIG)
    except ConfigValidationError as e:
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        raise typer.Exit(EXIT_INVALID_CONFIG)

    runner = WorkflowRunner(config, settings=settings, console=console, cwd=cwd)

    try:
        result = runner.run()
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted[/yellow]")
        raise typer.Exit(EXIT_INTERRUPTED)

    failed = result.failed_step
    if failed is not None:
        console.print(f"[bold red]Error:[/bold red] Step '{failed.step}' failed")
        if failed.command_line:
            console.print(f"[red]Command:[/red] {escape(failed.command_line)}")
        if failed.returncode is not None:
            console.print(f"[red]Exit status:[/red] {failed.returncode}")
        raise typer.Exit(EXIT_STEP_FAILED)


def preset_args(visibility: str, crate_type: str, argv: List[str]) -> List[str]:
    """Prepend a preset's options to argv.

    A --cargo-init-cmd given on the command line replaces the preset crate
    type instead of being appended to it. --visibility needs no such care
    since the last occurrence wins.
    """
    preset = ["--visibility", visibility]
    if not any(arg == "--cargo-init-cmd" or arg.startswith("--cargo-init-cmd=") for arg in argv):
        preset.append(f"--cargo-init-cmd={crate_type}")
    return [*preset, *argv]


def _preset(visibility: str, crate_type: str) -> None:
    app(args=preset_args(visibility, crate_type, sys.argv[1:]), prog_name=Path(sys.argv[0]).name)


def public_bin() -> None:
    """Entry point presetting a public repository with a binary crate."""
    _preset("public", "--bin")


def public_lib() -> None:
    """Entry point presetting a public repository with a library crate."""
    _preset("public", "--lib")


def private_bin() -> None:
    """Entry point presetting a private repository with a binary crate."""
    _preset("private", "--bin")


def private_lib() -> None:
    """Entry point presetting a private repository with a library crate."""
    _preset("private", "--lib")


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
