"""Exceptions raised by the ClusterCost installer."""


class CommandError(Exception):
    """An external command exited with a non-zero status or could not start."""

    def __init__(
        self,
        command: str,
        code: int | None = None,
        stdout: str = "",
        stderr: str = "",
        message: str | None = None,
    ) -> None:
        super().__init__(message or f"Command failed: {command}")
        self.command = command
        self.code = code
        self.stdout = stdout
        self.stderr = stderr


class StepError(Exception):
    """A named installation step failed."""

    def __init__(self, step: str, command_error: Exception | None = None) -> None:
        super().__init__(f"Step failed: {step}")
        self.step = step
        self.command_error = command_error


class OperationCancelledError(Exception):
    """The user aborted an interactive prompt."""

    def __init__(self) -> None:
        super().__init__("Operation cancelled by user")


class MissingDependencyError(Exception):
    """A required binary is not on PATH."""

    def __init__(self, missing: list[str]) -> None:
        super().__init__("Missing required dependencies.")
        self.missing = missing
