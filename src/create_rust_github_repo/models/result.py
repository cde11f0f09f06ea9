"""Data models for step and workflow outcomes."""

from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, Field


class StepResult(BaseModel):
    """Outcome of a single workflow step."""

    step: str = Field(..., description="Step name, e.g. repo-create")
    commands: List[List[str]] = Field(default_factory=list, description="Resolved argument vectors")
    cwd: Optional[Path] = Field(None, description="Working directory the commands run in")
    returncode: Optional[int] = Field(None, description="Exit status of the last command run")
    stdout: str = Field("", description="Captured standard output")
    stderr: str = Field("", description="Captured standard error")
    success: bool = Field(False, description="Whether the step completed")
    skipped: bool = Field(False, description="Whether the step was skipped")
    dry_run: bool = Field(False, description="Whether the step was only planned")
    detail: Optional[str] = Field(None, description="Skip reason or error message")

    @property
    def command_line(self) -> str:
        """Commands joined for display."""
        return " && ".join(" ".join(command) for command in self.commands)


class WorkflowResult(BaseModel):
    """Aggregate outcome of a workflow run."""

    steps: List[StepResult] = Field(default_factory=list, description="Results in execution order")
    dry_run: bool = Field(False, description="Whether the run only planned the steps")

    @property
    def success(self) -> bool:
        return all(step.success for step in self.steps)

    @property
    def failed_step(self) -> Optional[StepResult]:
        """First step that failed, if any."""
        for step in self.steps:
            if not step.success:
                return step
        return None

    @property
    def completed_steps(self) -> List[str]:
        """Names of steps that ran (or were skipped) successfully."""
        return [step.step for step in self.steps if step.success]
