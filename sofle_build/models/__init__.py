"""Shared models."""

from .base import SofleBaseModel
from .docker import DockerUserContext


__all__ = ["DockerUserContext", "SofleBaseModel"]
