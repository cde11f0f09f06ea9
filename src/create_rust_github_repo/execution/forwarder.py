"""Launch external tools with forwarded arguments and relay their output.

Each wrapped tool is invoked as ``executable + fixed args + forwarded args``.
Forwarded arguments are opaque: they are appended verbatim, never split,
substituted or passed through a shell.
"""

import subprocess
import sys
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import IO, Iterable, List, Optional, TextIO

import structlog

from create_rust_github_repo.exceptions import CommandFailedError, CommandLaunchError

logger = structlog.get_logger(__name__)


@dataclass
class CommandOutput:
    """Exit status and captured output of a finished command.

    Attributes:
        command: Argument vector that was run
        returncode: Process exit status
        stdout: Everything the process wrote to stdout
        stderr: Everything the process wrote to stderr
    """
    command: List[str]
    returncode: int
    stdout: str
    stderr: str

    @property
    def success(self) -> bool:
        return self.returncode == 0


def build_command(executable: str, fixed_args: Iterable[str], forwarded_args: Iterable[str] = ()) -> List[str]:
    """Build an argument vector with forwarded args after the tool's own args."""
    return [executable, *fixed_args, *forwarded_args]


def _pump(source: IO[str], sink: TextIO, chunks: List[str]) -> None:
    for line in source:
        chunks.append(line)
        sink.write(line)
        sink.flush()


class CommandForwarder:
    """Runs commands, streaming their output in real time while retaining it.

    Example:
        >>> forwarder = CommandForwarder()
        >>> cmd = build_command("git", ["push"], ["--set-upstream", "origin", "main"])
        >>> forwarder.check(cmd, cwd=Path("/tmp/demo"))
    """

    def __init__(self, stdout: Optional[TextIO] = None, stderr: Optional[TextIO] = None):
        """Initialize the forwarder.

        Args:
            stdout: Stream receiving the child's stdout (default: sys.stdout)
            stderr: Stream receiving the child's stderr (default: sys.stderr)
        """
        self._stdout = stdout
        self._stderr = stderr

    def run(self, command: List[str], cwd: Optional[Path] = None) -> CommandOutput:
        """Run a command to completion.

        Args:
            command: Full argument vector
            cwd: Working directory for the child process

        Returns:
            CommandOutput, whatever the exit status

        Raises:
            CommandLaunchError: If the executable cannot be started
        """
        stdout_sink = self._stdout or sys.stdout
        stderr_sink = self._stderr or sys.stderr

        logger.debug("command_started", command=command, cwd=str(cwd) if cwd else None)

        try:
            proc = subprocess.Popen(
                command,
                cwd=str(cwd) if cwd else None,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                encoding="utf-8",
                errors="replace",
            )
        except OSError as e:
            logger.error("command_launch_failed", command=command, error=str(e))
            raise CommandLaunchError(command, e.strerror or str(e)) from e

        out_chunks: List[str] = []
        err_chunks: List[str] = []

        # stderr is drained on a helper thread so neither pipe can fill up
        err_thread = threading.Thread(
            target=_pump,
            args=(proc.stderr, stderr_sink, err_chunks),
            daemon=True,
        )
        err_thread.start()
        try:
            _pump(proc.stdout, stdout_sink, out_chunks)
        except BaseException:
            proc.kill()
            proc.wait()
            raise
        finally:
            err_thread.join()

        returncode = proc.wait()
        logger.debug("command_finished", command=command, returncode=returncode)

        return CommandOutput(
            command=command,
            returncode=returncode,
            stdout="".join(out_chunks),
            stderr="".join(err_chunks),
        )

    def check(self, command: List[str], cwd: Optional[Path] = None) -> CommandOutput:
        """Run a command and require a zero exit status.

        Raises:
            CommandLaunchError: If the executable cannot be started
            CommandFailedError: If the command exits non-zero
        """
        output = self.run(command, cwd=cwd)
        if not output.success:
            logger.error("command_failed", command=command, returncode=output.returncode)
            raise CommandFailedError(command, output.returncode, output.stderr)
        return output

    def succeeds(self, command: List[str], cwd: Optional[Path] = None) -> bool:
        """Run a command quietly and report whether it exited zero."""
        logger.debug("probe_started", command=command)
        try:
            completed = subprocess.run(
                command,
                cwd=str(cwd) if cwd else None,
                capture_output=True,
                text=True,
                check=False,
            )
        except OSError as e:
            raise CommandLaunchError(command, e.strerror or str(e)) from e
        return completed.returncode == 0
