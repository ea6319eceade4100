"""Exception hierarchy for sofle-build."""

from typing import Any


class SofleBuildError(Exception):
    """Base class for all sofle-build errors.

    Every error can carry a ``context`` dictionary with structured details
    (command line, image, paths, hints) that the CLI logs alongside the
    message.
    """

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.context: dict[str, Any] = dict(context or {})

    @property
    def hint(self) -> str | None:
        """Optional remediation hint shown to the user."""
        hint = self.context.get("hint")
        return str(hint) if hint else None


class ConfigError(SofleBuildError):
    """Invalid settings file, setting value or missing input directory."""


class PrerequisiteError(SofleBuildError):
    """The container runtime is missing or not operable."""


class DockerError(SofleBuildError):
    """A Docker CLI invocation could not be executed or failed."""

    def __init__(
        self,
        message: str,
        command: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, context)
        self.command = command
        if command:
            self.context.setdefault("command", command)


class BuildError(SofleBuildError):
    """One or more firmware targets failed to build."""


def create_docker_error(
    message: str,
    command: str | None,
    cause: BaseException | None,
    context: dict[str, Any] | None = None,
) -> DockerError:
    """Create a DockerError with the failing command and underlying cause attached."""
    error_context = dict(context or {})
    if cause is not None:
        error_context["cause"] = str(cause)
        error_context["cause_type"] = cause.__class__.__name__
    return DockerError(message, command=command, context=error_context)


__all__ = [
    "BuildError",
    "ConfigError",
    "DockerError",
    "PrerequisiteError",
    "SofleBuildError",
    "create_docker_error",
]
