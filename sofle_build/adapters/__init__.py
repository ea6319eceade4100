"""Adapters for external collaborators."""

from .docker_adapter import DockerAdapter, LoggerOutputMiddleware, create_docker_adapter


__all__ = ["DockerAdapter", "LoggerOutputMiddleware", "create_docker_adapter"]
