"""CLI helper modules."""

from .output import (
    ConsoleBuildReporter,
    ConsoleEchoMiddleware,
    flash_instructions,
    print_artifact_report,
    print_flash_instructions,
)
from .theme import Icons, ThemedConsole, get_themed_console


__all__ = [
    "ConsoleBuildReporter",
    "ConsoleEchoMiddleware",
    "Icons",
    "ThemedConsole",
    "flash_instructions",
    "get_themed_console",
    "print_artifact_report",
    "print_flash_instructions",
]
