"""Utility functions for the ClusterCost installer."""

import logging
import shutil
import subprocess
from dataclasses import dataclass
from typing import Callable, Optional, TypeVar

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel

from .config import PREREQUISITES
from .errors import CommandError, MissingDependencyError, StepError

logger = logging.getLogger(__name__)

console = Console()
err_console = Console(stderr=True)

T = TypeVar("T")


@dataclass(frozen=True)
class CommandResult:
    """Outcome of a successful external command."""

    command: str
    code: int
    stdout: str
    stderr: str


def setup_logging(level: str = "WARNING") -> None:
    """Route diagnostic logging through rich."""
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def log(msg: str, level: str = "info") -> None:
    """Print colored log message. The message is plain text, not markup."""
    styles = {
        "info": ("blue", "•"),
        "success": ("green", "✔"),
        "warning": ("yellow", "!"),
        "error": ("red", "✖"),
        "skip": ("bright_black", "•"),
    }
    color, symbol = styles.get(level, ("blue", "*"))
    msg = escape(msg)
    if level == "skip":
        console.print(f"[{color}]{symbol} {msg}[/{color}]")
        return
    target = err_console if level == "error" else console
    target.print(f"[{color}]{symbol}[/{color}] {msg}")


def log_header(msg: str) -> None:
    """Print a header message."""
    console.print()
    console.print(f"[bold cyan]=== {escape(msg)} ===[/bold cyan]")
    console.print()


def log_subheader(msg: str) -> None:
    """Print a subheader message."""
    console.print(f"[bold]{msg}[/bold]")


def note(message: str, title: str) -> None:
    """Print a boxed note."""
    console.print(Panel.fit(message, title=title, border_style="bright_black"))


def format_command(binary: str, args: list[str]) -> str:
    return " ".join([binary, *args]).strip()


def run_command(
    binary: str,
    args: Optional[list[str]] = None,
    timeout: Optional[int] = None,
) -> CommandResult:
    """Run an external command without a shell.

    Args:
        binary: Executable to run
        args: Arguments passed to the executable
        timeout: Timeout in seconds

    Returns:
        CommandResult with stripped stdout/stderr

    Raises:
        CommandError: The command could not start or exited non-zero
    """
    args = list(args or [])
    command = format_command(binary, args)
    logger.debug(f"Running: {command}")

    try:
        result = subprocess.run(
            [binary, *args],
            stdin=subprocess.DEVNULL,
            capture_output=True,
            text=True,
            timeout=timeout,
        )
    except FileNotFoundError as e:
        raise CommandError(command, code=127, stderr=str(e)) from e
    except subprocess.TimeoutExpired as e:
        raise CommandError(command, stderr="Command timed out") from e

    stdout = (result.stdout or "").strip()
    stderr = (result.stderr or "").strip()
    logger.debug(f"Exit code {result.returncode}: {command}")

    if result.returncode != 0:
        raise CommandError(command, code=result.returncode, stdout=stdout, stderr=stderr)

    return CommandResult(command=command, code=result.returncode, stdout=stdout, stderr=stderr)


def safe_command_output(binary: str, args: list[str]) -> str:
    """Run a command and return console markup of its stdout, or of the failure reason."""
    try:
        return escape(run_command(binary, args).stdout)
    except CommandError as e:
        reason = e.stderr or str(e) or f"Unable to execute {format_command(binary, args)}"
        return f"[red]{escape(reason)}[/red]"


def command_exists(binary: str) -> bool:
    """Check if a binary is available on PATH."""
    return shutil.which(binary) is not None


def ensure_prerequisites() -> None:
    """Check that kubectl and helm are installed.

    Raises:
        MissingDependencyError: One or more tools are missing
    """
    missing = [binary for binary in PREREQUISITES if not command_exists(binary)]
    for binary in missing:
        log(PREREQUISITES[binary], "error")
    if missing:
        raise MissingDependencyError(missing)


def run_step(label: str, fn: Callable[[], T], success_label: Optional[str] = None) -> T:
    """Run a step behind a spinner.

    Args:
        label: Text shown while the step runs
        fn: Callable doing the work
        success_label: Text shown once the step succeeds (defaults to label)

    Returns:
        Whatever fn returns

    Raises:
        StepError: fn raised; the original error is kept as command_error
    """
    try:
        with console.status(escape(label)):
            result = fn()
    except StepError:
        log(label, "error")
        raise
    except Exception as e:
        log(label, "error")
        raise StepError(label, e) from e

    log(success_label or label, "success")
    return result


def render_step_error(error: StepError) -> None:
    """Print a failed step with its command and stderr."""
    err_console.print(f"\n[red]✖ {escape(error.step)}[/red]")
    command_error = error.command_error
    command = getattr(command_error, "command", None)
    stderr = getattr(command_error, "stderr", None)
    if command:
        err_console.print(f"[red]Command: {escape(command)}[/red]")
    if stderr:
        err_console.print(f"[bright_black]{escape(stderr)}[/bright_black]")
    elif command_error is not None and not command:
        err_console.print(f"[bright_black]{escape(str(command_error))}[/bright_black]")
