"""Error handling decorators for CLI commands."""

import logging
import sys
import traceback
from collections.abc import Callable
from functools import wraps
from typing import Any

import typer
from rich.markup import escape

from sofle_build.cli.helpers.theme import ThemedConsole, get_themed_console
from sofle_build.core.errors import (
    BuildError,
    ConfigError,
    DockerError,
    PrerequisiteError,
    SofleBuildError,
)
from sofle_build.core.structlog_logger import get_struct_logger


__all__ = ["handle_errors", "print_stack_trace_if_verbose"]

logger = get_struct_logger(__name__)

EXIT_FAILURE = 1
EXIT_INTERRUPTED = 130


def _current_console(command_kwargs: dict[str, Any]) -> ThemedConsole:
    """Console matching the icon mode of the failing command.

    The application context is only set once settings are loaded, so errors
    raised before that fall back to the raw ``--no-emoji`` option.
    """
    app_context = getattr(command_kwargs.get("ctx"), "obj", None)
    icon_mode = getattr(app_context, "icon_mode", None)
    if icon_mode is None:
        icon_mode = "text" if command_kwargs.get("no_emoji") else "emoji"
    return get_themed_console(icon_mode=icon_mode)


def _report(event: str, error: SofleBuildError, console: ThemedConsole) -> None:
    logger.debug(event, error=error.message, **error.context)
    console.print_error(escape(error.message))
    if error.hint:
        console.print_list_item(escape(error.hint))


def handle_errors(func: Callable[..., Any]) -> Callable[..., Any]:
    """Decorator to handle common exceptions in CLI commands.

    Known errors are printed as a single red line (plus a hint when one is
    available) and end the command with exit status 1. Typer exits, aborts
    and parameter errors pass through untouched.
    """

    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except (typer.Exit, typer.Abort, typer.BadParameter):
            raise
        except PrerequisiteError as e:
            _report("prerequisite_error", e, _current_console(kwargs))
            raise typer.Exit(EXIT_FAILURE) from e
        except ConfigError as e:
            _report("configuration_error", e, _current_console(kwargs))
            print_stack_trace_if_verbose()
            raise typer.Exit(EXIT_FAILURE) from e
        except DockerError as e:
            _report("docker_error", e, _current_console(kwargs))
            print_stack_trace_if_verbose()
            raise typer.Exit(EXIT_FAILURE) from e
        except BuildError as e:
            _report("build_error", e, _current_console(kwargs))
            raise typer.Exit(EXIT_FAILURE) from e
        except SofleBuildError as e:
            _report("sofle_build_error", e, _current_console(kwargs))
            print_stack_trace_if_verbose()
            raise typer.Exit(EXIT_FAILURE) from e
        except KeyboardInterrupt as e:
            _current_console(kwargs).print_warning("Build interrupted by user")
            raise typer.Exit(EXIT_INTERRUPTED) from e
        except Exception as e:
            exc_info = logging.getLogger().isEnabledFor(logging.DEBUG)
            logger.error("unexpected_error", error=str(e), exc_info=exc_info)
            _current_console(kwargs).print_error(escape(f"Unexpected error: {e}"))
            print_stack_trace_if_verbose()
            raise typer.Exit(EXIT_FAILURE) from e

    return wrapper


def print_stack_trace_if_verbose() -> None:
    """Print stack trace if verbose/debug mode is enabled."""
    if any(arg in sys.argv for arg in ["-v", "-vv", "--verbose", "--debug"]):
        print("\nStack trace:", file=sys.stderr)
        traceback.print_exc(file=sys.stderr)
