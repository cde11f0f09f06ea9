"""Workflow runner - sequences the external tools that set up a new repository."""

from pathlib import Path
from typing import Callable, List, Optional, Tuple

import structlog
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from create_rust_github_repo.exceptions import (
    CommandFailedError,
    ConfigCopyError,
    CreateRepoError,
)
from create_rust_github_repo.execution.copier import copy_configs
from create_rust_github_repo.execution.forwarder import CommandForwarder, build_command
from create_rust_github_repo.models.config import Settings, WorkflowConfig, is_git_checkout
from create_rust_github_repo.models.result import StepResult, WorkflowResult

logger = structlog.get_logger(__name__)

STEP_REPO_CREATE = "repo-create"
STEP_REPO_CLONE = "repo-clone"
STEP_PROJECT_INIT = "project-init"
STEP_PROJECT_BUILD = "project-build"
STEP_COPY_CONFIGS = "copy-configs"
STEP_COMMIT = "commit"
STEP_PUSH = "push"

STEPS = (
    STEP_REPO_CREATE,
    STEP_REPO_CLONE,
    STEP_PROJECT_INIT,
    STEP_PROJECT_BUILD,
    STEP_COPY_CONFIGS,
    STEP_COMMIT,
    STEP_PUSH,
)


class WorkflowRunner:
    """Runs the create, clone, init, build, copy, commit, push sequence.

    Steps run strictly in order and the run stops at the first failure.
    Nothing is rolled back: steps that already succeeded keep their effects
    and the returned WorkflowResult records how far the run got.
    """

    def __init__(
        self,
        config: WorkflowConfig,
        settings: Optional[Settings] = None,
        forwarder: Optional[CommandForwarder] = None,
        console: Optional[Console] = None,
        cwd: Optional[Path] = None,
    ):
        """Initialize the runner.

        Args:
            config: Validated workflow configuration
            settings: Executable locations (defaults to environment settings)
            forwarder: Command forwarder used to launch tools
            console: Rich console for progress output (optional)
            cwd: Directory used to resolve the default target directory
        """
        self.config = config
        self.settings = settings or Settings()
        self.forwarder = forwarder or CommandForwarder()
        self.console = console or Console(stderr=True)
        self.cwd = cwd or Path.cwd()
        self.target_dir = config.target_dir(self.cwd)

    # ------------------------------------------------------------------
    # Command resolution
    # ------------------------------------------------------------------

    def repo_exists_command(self) -> List[str]:
        return build_command(self.settings.gh_bin, ["repo", "view", self.config.name, "--json", "nameWithOwner"])

    def repo_create_command(self) -> List[str]:
        return build_command(
            self.settings.gh_bin,
            ["repo", "create", self.config.name, self.config.visibility.gh_flag],
            self.config.repo_create_args,
        )

    def repo_clone_command(self) -> List[str]:
        return build_command(
            self.settings.gh_bin,
            ["repo", "clone", self.config.name, str(self.target_dir)],
            self.config.repo_clone_args,
        )

    def project_init_command(self) -> List[str]:
        return build_command(self.settings.cargo_bin, ["init"], self.config.project_init_args)

    def project_build_command(self) -> List[str]:
        return build_command(self.settings.cargo_bin, ["build"], self.config.project_build_args)

    def stage_command(self) -> List[str]:
        return build_command(self.settings.git_bin, ["add", "--all"])

    def commit_command(self) -> List[str]:
        return build_command(
            self.settings.git_bin,
            ["commit", "--message", self.config.commit_message],
            self.config.commit_args,
        )

    def push_command(self) -> List[str]:
        return build_command(self.settings.git_bin, ["push"], self.config.push_args)

    def _copy_description(self) -> str:
        if self.config.copy_configs_from is None:
            return "no config source given"
        paths = ", ".join(self.config.config_paths) or "(none)"
        return f"copy {paths} from {self.config.copy_configs_from} to {self.target_dir}"

    def plan(self) -> List[StepResult]:
        """Resolve every step without running anything.

        Returns:
            One planned StepResult per step, in execution order
        """
        target = self.target_dir
        planned = [
            StepResult(step=STEP_REPO_CREATE, commands=[self.repo_create_command()], cwd=self.cwd),
            StepResult(step=STEP_REPO_CLONE, commands=[self.repo_clone_command()], cwd=self.cwd),
            StepResult(step=STEP_PROJECT_INIT, commands=[self.project_init_command()], cwd=target),
            StepResult(
                step=STEP_PROJECT_BUILD,
                commands=[self.project_build_command()],
                cwd=target,
                skipped=not self.config.build,
                detail=None if self.config.build else "build disabled",
            ),
            StepResult(
                step=STEP_COPY_CONFIGS,
                cwd=target,
                skipped=self.config.copy_configs_from is None,
                detail=self._copy_description(),
            ),
            StepResult(step=STEP_COMMIT, commands=[self.stage_command(), self.commit_command()], cwd=target),
            StepResult(step=STEP_PUSH, commands=[self.push_command()], cwd=target),
        ]
        for step in planned:
            step.dry_run = True
            step.success = True
        return planned

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    def run(self) -> WorkflowResult:
        """Run the workflow, or just print the plan in dry-run mode.

        Returns:
            WorkflowResult with one entry per attempted step
        """
        if self.config.dry_run:
            steps = self.plan()
            self._print_plan(steps)
            logger.info("dry_run_planned", steps=len(steps), target=str(self.target_dir))
            return WorkflowResult(steps=steps, dry_run=True)

        result = WorkflowResult()
        handlers: List[Tuple[str, Callable[[], StepResult]]] = [
            (STEP_REPO_CREATE, self._repo_create),
            (STEP_REPO_CLONE, self._repo_clone),
            (STEP_PROJECT_INIT, self._project_init),
            (STEP_PROJECT_BUILD, self._project_build),
            (STEP_COPY_CONFIGS, self._copy_configs),
            (STEP_COMMIT, self._commit),
            (STEP_PUSH, self._push),
        ]

        for name, handler in handlers:
            logger.info("step_started", step=name)
            try:
                step = handler()
            except CreateRepoError as e:
                step = self._failed(name, e)
            result.steps.append(step)

            if not step.success:
                logger.error("step_failed", step=name, error=step.detail)
                self.console.print(f"[bold red]✗ {name} failed:[/bold red] {escape(step.detail or '')}")
                if result.completed_steps:
                    self.console.print(
                        f"[yellow]Completed before failure: {', '.join(result.completed_steps)}. "
                        "Nothing was rolled back.[/yellow]"
                    )
                break

            if step.skipped:
                self.console.print(f"[dim]- {name} skipped: {escape(step.detail or '')}[/dim]")
            logger.info("step_finished", step=name, skipped=step.skipped)

        if result.success:
            self.console.print(f"[bold green]✓[/bold green] Repository ready at {escape(str(self.target_dir))}")
        return result

    def _failed(self, name: str, error: CreateRepoError) -> StepResult:
        step = StepResult(step=name, success=False, detail=str(error))
        command = getattr(error, "command", None)
        if command:
            step.commands = [command]
        if isinstance(error, CommandFailedError):
            step.returncode = error.returncode
            step.stderr = error.stderr
        if isinstance(error, ConfigCopyError):
            step.cwd = self.target_dir
        return step

    def _exec(self, name: str, commands: List[List[str]], cwd: Path) -> StepResult:
        step = StepResult(step=name, commands=commands, cwd=cwd)
        for command in commands:
            self.console.print(f"[bold blue]$[/bold blue] {escape(' '.join(command))}")
            output = self.forwarder.run(command, cwd=cwd)
            step.returncode = output.returncode
            step.stdout += output.stdout
            step.stderr += output.stderr
            if not output.success:
                step.detail = str(CommandFailedError(command, output.returncode, output.stderr))
                return step
        step.success = True
        return step

    def _skip(self, name: str, reason: str, commands: Optional[List[List[str]]] = None) -> StepResult:
        return StepResult(step=name, commands=commands or [], success=True, skipped=True, detail=reason)

    def _repo_create(self) -> StepResult:
        command = self.repo_create_command()
        if self.forwarder.succeeds(self.repo_exists_command(), cwd=self.cwd):
            return self._skip(STEP_REPO_CREATE, f"repository {self.config.name} already exists", [command])
        return self._exec(STEP_REPO_CREATE, [command], self.cwd)

    def _repo_clone(self) -> StepResult:
        command = self.repo_clone_command()
        if self.target_dir.exists() and is_git_checkout(self.target_dir):
            return self._skip(STEP_REPO_CLONE, f"{self.target_dir} is already a git checkout", [command])
        return self._exec(STEP_REPO_CLONE, [command], self.cwd)

    def _project_init(self) -> StepResult:
        command = self.project_init_command()
        if (self.target_dir / "Cargo.toml").exists():
            return self._skip(STEP_PROJECT_INIT, f"Cargo.toml exists in {self.target_dir}", [command])
        return self._exec(STEP_PROJECT_INIT, [command], self.target_dir)

    def _project_build(self) -> StepResult:
        command = self.project_build_command()
        if not self.config.build:
            return self._skip(STEP_PROJECT_BUILD, "build disabled", [command])
        return self._exec(STEP_PROJECT_BUILD, [command], self.target_dir)

    def _copy_configs(self) -> StepResult:
        source = self.config.source_dir(self.cwd)
        if source is None:
            return self._skip(STEP_COPY_CONFIGS, "no config source given")

        self.console.print(f"[bold blue]$[/bold blue] {escape(self._copy_description())}")
        copied = copy_configs(source, self.config.config_paths, self.target_dir)
        return StepResult(
            step=STEP_COPY_CONFIGS,
            cwd=self.target_dir,
            success=True,
            detail=f"copied {len(copied)} file(s)",
        )

    def _commit(self) -> StepResult:
        return self._exec(STEP_COMMIT, [self.stage_command(), self.commit_command()], self.target_dir)

    def _push(self) -> StepResult:
        return self._exec(STEP_PUSH, [self.push_command()], self.target_dir)

    def _print_plan(self, steps: List[StepResult]) -> None:
        self.console.print("[bold yellow]Dry run - nothing will be executed[/bold yellow]")

        table = Table(show_header=True, header_style="bold magenta")
        table.add_column("#", justify="right", style="cyan")
        table.add_column("Step", style="green")
        table.add_column("Directory", style="blue")
        table.add_column("Action", style="white")

        for index, step in enumerate(steps, start=1):
            action = step.command_line or step.detail or ""
            if step.skipped:
                action = f"[dim](skipped: {escape(step.detail or '')})[/dim] {escape(step.command_line)}"
            else:
                action = escape(action)
            table.add_row(str(index), step.step, escape(str(step.cwd or "")), action)

        self.console.print(table)
