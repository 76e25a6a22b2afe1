from collections.abc import Sequence


class GcevmError(Exception):
    """Base class for every error reported by the action."""


class PreconditionError(GcevmError):
    """gcloud is missing or has no active credentials."""


class ValidationError(GcevmError):
    """Invalid configuration or persisted state."""

    def __init__(self, message: str, problems: Sequence[str] = ()) -> None:
        self.problems = list(problems)
        if self.problems:
            message = f"{message}: " + "; ".join(self.problems)
        super().__init__(message)


class NotFoundError(GcevmError):
    """No matching instance template or instance."""


class MissingAddressError(GcevmError):
    """The created instance has no external address."""


class ExecutionError(GcevmError):
    """A gcloud invocation failed or returned something that is not JSON."""

    def __init__(
        self,
        args: Sequence[str],
        returncode: int | None = None,
        stderr: str = "",
        reason: str | None = None,
    ) -> None:
        self.argv = list(args)
        self.returncode = returncode
        self.stderr = stderr.strip()

        if reason is None:
            # gcloud prints the useful part of its error on the last line
            last_line = self.stderr.splitlines()[-1] if self.stderr else "Unknown error"
            reason = f"exit code {returncode}: {last_line}"

        super().__init__(f"gcloud {' '.join(self.argv)} failed ({reason})")


class CleanupError(GcevmError):
    """Deleting the instance during teardown failed."""
