"""
Build settings for sofle-build.

Settings are resolved from several sources:
1. Command-line overrides (highest precedence)
2. Environment variables prefixed with ``SOFLE_BUILD_``
3. YAML settings file (``--config``, then ``./sofle-build.yaml``, then the
   XDG config directory)
4. Default values (lowest precedence)
"""

import logging
import os
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from sofle_build.core.errors import ConfigError
from sofle_build.core.structlog_logger import get_struct_logger


logger = get_struct_logger(__name__)

ENV_PREFIX = "SOFLE_BUILD_"

DEFAULT_BOARD = "nice_nano_v2"
DEFAULT_IMAGE = "zmkfirmware/zmk-build-arm:stable"
DEFAULT_CONFIG_DIR = Path("config")
DEFAULT_OUTPUT_DIR = Path("firmware")
DEFAULT_WORKSPACE = "/workspace"

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class BuilderSettings(BaseSettings):
    """Settings for a firmware build run.

    Precedence order (highest to lowest):
    1. Environment variables
    2. Constructor arguments (file data)
    3. .env file
    4. Default values
    """

    model_config = SettingsConfigDict(
        env_prefix=ENV_PREFIX,
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        validate_assignment=True,
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: Any,
        env_settings: Any,
        dotenv_settings: Any,
        file_secret_settings: Any,
    ) -> tuple[Any, ...]:
        """Let environment variables override values read from the YAML file."""
        return (
            env_settings,
            init_settings,
            dotenv_settings,
            file_secret_settings,
        )

    board: str = Field(default=DEFAULT_BOARD, description="Zephyr board identifier")
    image: str = Field(default=DEFAULT_IMAGE, description="Build container image")
    config_dir: Path = Field(
        default=DEFAULT_CONFIG_DIR,
        description="ZMK config directory mounted read-only into the container",
    )
    output_dir: Path = Field(
        default=DEFAULT_OUTPUT_DIR, description="Directory receiving .uf2 files"
    )
    workspace: str = Field(
        default=DEFAULT_WORKSPACE, description="Working directory inside the container"
    )
    log_level: str = Field(default="WARNING", description="Default log level")
    docker_user_mapping: bool = Field(
        default=False, description="Run containers as the invoking uid:gid"
    )
    icon_mode: Literal["emoji", "nerdfont", "text"] = Field(
        default="emoji", description="Icon style for console output"
    )

    @field_validator("board", "image")
    @classmethod
    def validate_identifier(cls, v: str) -> str:
        """Board and image are passed on a command line and must be single tokens."""
        v = v.strip()
        if not v:
            raise ValueError("must not be empty")
        if any(ch.isspace() for ch in v):
            raise ValueError("must not contain whitespace")
        return v

    @field_validator("workspace")
    @classmethod
    def validate_workspace(cls, v: str) -> str:
        v = v.strip().rstrip("/")
        if not v.startswith("/"):
            raise ValueError("workspace must be an absolute container path")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(LOG_LEVELS)}")
        return level

    def get_log_level_int(self) -> int:
        return int(getattr(logging, self.log_level, logging.WARNING))


def default_config_paths(cli_config_path: str | Path | None = None) -> list[Path]:
    """Generate the list of settings files to search, in order of precedence."""
    config_paths: list[Path] = []

    if cli_config_path:
        config_paths.append(Path(cli_config_path).expanduser().resolve())

    config_paths.extend(
        [Path.cwd() / "sofle-build.yaml", Path.cwd() / ".sofle-build.yml"]
    )

    xdg_config_home = os.environ.get("XDG_CONFIG_HOME")
    config_root = (
        Path(xdg_config_home) if xdg_config_home else Path.home() / ".config"
    )
    config_paths.extend(
        [
            config_root / "sofle-build" / "config.yaml",
            config_root / "sofle-build" / "config.yml",
        ]
    )

    return config_paths


def _read_settings_file(path: Path) -> dict[str, Any]:
    try:
        content = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ConfigError(
            f"Invalid YAML in settings file {path}: {e}", {"path": str(path)}
        ) from e
    except OSError as e:
        raise ConfigError(
            f"Cannot read settings file {path}: {e}", {"path": str(path)}
        ) from e

    if content is None:
        return {}
    if not isinstance(content, dict):
        raise ConfigError(
            f"Settings file {path} must contain a mapping at the top level",
            {"path": str(path)},
        )
    return content


def load_settings(
    config_file: str | Path | None = None, **overrides: Any
) -> BuilderSettings:
    """Load settings from file and environment, then apply CLI overrides.

    Args:
        config_file: Explicit settings file; it must exist when given
        **overrides: Values from the command line; ``None`` values are ignored

    Raises:
        ConfigError: If the settings file is missing, unreadable or invalid
    """
    if config_file is not None and not Path(config_file).expanduser().exists():
        raise ConfigError(
            f"Settings file not found: {config_file}", {"path": str(config_file)}
        )

    file_data: dict[str, Any] = {}
    found_path: Path | None = None
    for path in default_config_paths(config_file):
        if path.is_file():
            file_data = _read_settings_file(path)
            found_path = path
            break

    if found_path:
        logger.debug("settings_file_loaded", path=str(found_path), keys=list(file_data))
    else:
        logger.debug("settings_file_not_found", using="defaults")

    cli_values = {key: value for key, value in overrides.items() if value is not None}

    try:
        settings = BuilderSettings(**file_data)
        for key, value in cli_values.items():
            setattr(settings, key, value)
    except ValidationError as e:
        source = str(found_path) if found_path else "environment"
        raise ConfigError(
            f"Invalid settings ({source}): {e}", {"source": source}
        ) from e

    logger.debug(
        "settings_resolved",
        board=settings.board,
        image=settings.image,
        config_dir=str(settings.config_dir),
        output_dir=str(settings.output_dir),
    )
    return settings


__all__ = [
    "DEFAULT_BOARD",
    "DEFAULT_IMAGE",
    "BuilderSettings",
    "default_config_paths",
    "load_settings",
]
