"""Configuration loading."""

from .settings import (
    DEFAULT_BOARD,
    DEFAULT_IMAGE,
    BuilderSettings,
    default_config_paths,
    load_settings,
)


__all__ = [
    "DEFAULT_BOARD",
    "DEFAULT_IMAGE",
    "BuilderSettings",
    "default_config_paths",
    "load_settings",
]
