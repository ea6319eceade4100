"""Firmware build domain."""

from .build_service import (
    FirmwareBuildService,
    build_container_script,
    create_build_service,
)
from .models import BuildRequest, BuildSummary, Target, TargetBuildResult


__all__ = [
    "BuildRequest",
    "BuildSummary",
    "FirmwareBuildService",
    "Target",
    "TargetBuildResult",
    "build_container_script",
    "create_build_service",
]
