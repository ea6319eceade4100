"""Docker-specific models."""

import os
import platform
from typing import ClassVar

from pydantic import BaseModel, Field, field_validator


class DockerUserContext(BaseModel):
    """Host user the build container runs as.

    The container copies the `.uf2` files into the mounted firmware directory;
    running it as the invoking user keeps those files owned by that user
    instead of root.
    """

    uid: int = Field(..., description="User ID for Docker --user flag")
    gid: int = Field(..., description="Group ID for Docker --user flag")
    username: str = Field(..., description="Host username, shown in debug logs")
    enable_user_mapping: bool = Field(
        default=True, description="Pass --user to docker run"
    )

    _supported_platforms: ClassVar[set[str]] = {"Linux", "Darwin"}

    @field_validator("uid", "gid")
    @classmethod
    def validate_positive_ids(cls, v: int) -> int:
        if v < 0:
            raise ValueError("UID and GID must be non-negative")
        return v

    @field_validator("username")
    @classmethod
    def validate_username(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Username cannot be empty")
        return v.strip()

    @classmethod
    def detect_current_user(cls) -> "DockerUserContext":
        """Context for the user running sofle-build.

        Raises:
            RuntimeError: On platforms without POSIX uids, such as Windows
        """
        current_platform = platform.system()

        if current_platform not in cls._supported_platforms:
            raise RuntimeError(
                f"User detection not supported on {current_platform}. "
                f"Supported platforms: {', '.join(sorted(cls._supported_platforms))}"
            )

        try:
            uid = os.getuid()
            gid = os.getgid()
        except AttributeError as e:
            raise RuntimeError(
                f"Failed to detect user on {current_platform}: {e}"
            ) from e

        username = os.getenv("USER") or os.getenv("USERNAME") or "unknown"
        return cls(uid=uid, gid=gid, username=username, enable_user_mapping=True)

    def get_docker_user_flag(self) -> str:
        """Value for ``docker run --user``, e.g. ``1000:1000``."""
        return f"{self.uid}:{self.gid}"

    def is_supported_platform(self) -> bool:
        return platform.system() in self._supported_platforms

    def should_use_user_mapping(self) -> bool:
        """False when mapping is disabled or the host is not Linux or macOS."""
        return self.enable_user_mapping and self.is_supported_platform()


__all__ = ["DockerUserContext"]
