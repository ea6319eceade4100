"""sofle-build - Dockerized ZMK firmware builds for the Sofle keyboard."""

from importlib.metadata import PackageNotFoundError, distribution

from .firmware.models import BuildRequest, BuildSummary, Target, TargetBuildResult


try:
    __version__ = distribution("sofle-build").version
except PackageNotFoundError:
    __version__ = "0.0.0"

__all__ = [
    "BuildRequest",
    "BuildSummary",
    "Target",
    "TargetBuildResult",
    "__version__",
]
