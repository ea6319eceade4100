"""Core infrastructure: errors and logging."""

from .errors import (
    BuildError,
    ConfigError,
    DockerError,
    PrerequisiteError,
    SofleBuildError,
)


__all__ = [
    "BuildError",
    "ConfigError",
    "DockerError",
    "PrerequisiteError",
    "SofleBuildError",
]
