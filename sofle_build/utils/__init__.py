"""Utility helpers."""

from .stream_process import (
    DefaultOutputMiddleware,
    OutputMiddleware,
    ProcessResult,
    create_chained_middleware,
    run_command,
)


__all__ = [
    "DefaultOutputMiddleware",
    "OutputMiddleware",
    "ProcessResult",
    "create_chained_middleware",
    "run_command",
]
