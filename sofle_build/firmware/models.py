"""Firmware domain models."""

from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import Field, field_validator, model_validator

from sofle_build.config.settings import (
    DEFAULT_BOARD,
    DEFAULT_IMAGE,
    DEFAULT_WORKSPACE,
    BuilderSettings,
)
from sofle_build.core.structlog_logger import get_struct_logger
from sofle_build.models.base import SofleBaseModel


logger = get_struct_logger(__name__)


class Target(str, Enum):
    """Buildable firmware variants, declared in build order."""

    LEFT = "left"
    RIGHT = "right"
    SETTINGS_RESET = "settings-reset"

    @property
    def shield(self) -> str:
        """ZMK shield identifier passed to ``-DSHIELD``."""
        return _SHIELDS[self]

    @property
    def description(self) -> str:
        return _DESCRIPTIONS[self]

    def artifact_name(self, board: str = DEFAULT_BOARD) -> str:
        """File name of the flashable image, ``<shield>-<board>.uf2``."""
        return f"{self.shield}-{board}.uf2"

    @classmethod
    def all(cls) -> list["Target"]:
        return list(cls)


_SHIELDS = {
    Target.LEFT: "sofle_left",
    Target.RIGHT: "sofle_right",
    Target.SETTINGS_RESET: "settings_reset",
}

_DESCRIPTIONS = {
    Target.LEFT: "Left half",
    Target.RIGHT: "Right half",
    Target.SETTINGS_RESET: "Settings reset (clears stored pairings)",
}


class BuildRequest(SofleBaseModel):
    """The targets selected for one invocation and the environment to build them in."""

    targets: list[Target] = Field(default_factory=Target.all)
    board: str = DEFAULT_BOARD
    image: str = DEFAULT_IMAGE
    config_dir: Path = Path("config")
    output_dir: Path = Path("firmware")
    workspace: str = DEFAULT_WORKSPACE

    @field_validator("targets")
    @classmethod
    def validate_targets(cls, v: list[Target]) -> list[Target]:
        """Require at least one target, drop duplicates and keep build order."""
        if not v:
            raise ValueError("At least one target must be selected")
        selected = set(v)
        return [target for target in Target if target in selected]

    @classmethod
    def from_settings(
        cls, settings: BuilderSettings, target: Target | None = None
    ) -> "BuildRequest":
        """Request for one target, or for every target when ``target`` is None."""
        return cls(
            targets=[target] if target else Target.all(),
            board=settings.board,
            image=settings.image,
            config_dir=settings.config_dir,
            output_dir=settings.output_dir,
            workspace=settings.workspace,
        )

    def artifact_path(self, target: Target) -> Path:
        """Host path where the firmware for ``target`` is expected."""
        return self.output_dir / target.artifact_name(self.board)


class TargetBuildResult(SofleBaseModel):
    """Outcome of building a single target.

    ``success`` reflects whether the expected artifact exists on the host
    after the container exited; ``exit_code`` is informational only.
    """

    target: Target
    success: bool
    output_path: Path
    error: str | None = None
    exit_code: int | None = None
    duration_seconds: float | None = None
    timestamp: datetime = Field(default_factory=datetime.now)

    @model_validator(mode="after")
    def validate_success_consistency(self) -> "TargetBuildResult":
        """Ensure success flag is consistent with error."""
        if self.error and self.success:
            logger.warning(
                "result_success_mismatch", target=self.target.value, error=self.error
            )
            object.__setattr__(self, "success", False)
        return self

    @field_validator("duration_seconds")
    @classmethod
    def validate_duration(cls, v: float | None) -> float | None:
        if v is not None and v < 0:
            raise ValueError("Build time must be a non-negative number")
        return v


class BuildSummary(SofleBaseModel):
    """Results of every target in a request plus the artifacts found afterwards."""

    results: list[TargetBuildResult] = Field(default_factory=list)
    artifacts: list[Path] = Field(default_factory=list)

    @property
    def success(self) -> bool:
        return bool(self.results) and all(result.success for result in self.results)

    @property
    def failed_targets(self) -> list[Target]:
        return [result.target for result in self.results if not result.success]

    @property
    def succeeded_targets(self) -> list[Target]:
        return [result.target for result in self.results if result.success]

    def get_summary(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "built": [target.value for target in self.succeeded_targets],
            "failed": [target.value for target in self.failed_targets],
            "artifacts": [str(path) for path in self.artifacts],
        }


__all__ = ["BuildRequest", "BuildSummary", "Target", "TargetBuildResult"]
