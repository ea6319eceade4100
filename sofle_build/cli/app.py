"""Main CLI application for sofle-build."""

import logging
import sys
from pathlib import Path
from typing import Annotated

import typer

from sofle_build import __version__
from sofle_build.adapters.docker_adapter import LoggerOutputMiddleware
from sofle_build.cli.decorators.error_handling import handle_errors
from sofle_build.cli.helpers.output import (
    ConsoleBuildReporter,
    ConsoleEchoMiddleware,
    print_artifact_report,
    print_flash_instructions,
)
from sofle_build.cli.helpers.theme import ThemedConsole
from sofle_build.config.settings import BuilderSettings, load_settings
from sofle_build.core.errors import BuildError
from sofle_build.core.logging import CONTAINER_OUTPUT_LOGGER, setup_logging
from sofle_build.core.structlog_logger import get_struct_logger
from sofle_build.firmware.build_service import create_build_service
from sofle_build.firmware.models import BuildRequest, Target
from sofle_build.models.docker import DockerUserContext
from sofle_build.utils.stream_process import OutputMiddleware, create_chained_middleware


__all__ = ["app", "main", "__version__"]

logger = get_struct_logger(__name__)


class AppContext:
    """Application context for storing shared state."""

    def __init__(
        self,
        settings: BuilderSettings,
        verbose: int = 0,
        log_file: str | None = None,
    ):
        self.settings = settings
        self.verbose = verbose
        self.log_file = log_file
        self.console = ThemedConsole(icon_mode=settings.icon_mode)

    @property
    def icon_mode(self) -> str:
        return self.settings.icon_mode

    def output_middleware(self) -> OutputMiddleware[str] | None:
        """Container output handling for verbose runs.

        Lines still go to the container logger (and so to ``--log-file``), but
        that logger is kept off the console handler; the echo middleware is the
        only thing printing them.
        """
        if not self.verbose:
            return None
        return create_chained_middleware(
            [
                LoggerOutputMiddleware(logging.getLogger(CONTAINER_OUTPUT_LOGGER)),
                ConsoleEchoMiddleware(self.console),
            ]
        )

    def user_context(self) -> DockerUserContext | None:
        if not self.settings.docker_user_mapping:
            return None
        try:
            return DockerUserContext.detect_current_user()
        except RuntimeError as e:
            logger.warning("docker_user_mapping_unavailable", error=str(e))
            return None


def version_callback(value: bool) -> None:
    if value:
        print(f"sofle-build v{__version__}")
        raise typer.Exit()


def resolve_target(left: bool, right: bool, settings_reset: bool) -> Target | None:
    """Map the target flags to a single Target, or None for all targets.

    Raises:
        typer.BadParameter: If more than one target flag was given
    """
    selected = [
        target
        for flag, target in (
            (left, Target.LEFT),
            (right, Target.RIGHT),
            (settings_reset, Target.SETTINGS_RESET),
        )
        if flag
    ]
    if len(selected) > 1:
        raise typer.BadParameter(
            "Options --left, --right and --settings-reset are mutually exclusive"
        )
    return selected[0] if selected else None


def _cli_log_level(verbose: int, debug: bool) -> int | None:
    if debug or verbose >= 2:
        return logging.DEBUG
    if verbose == 1:
        return logging.INFO
    return None


app = typer.Typer(
    name="sofle-build",
    add_completion=False,
    context_settings={"help_option_names": ["-h", "--help"]},
)


@app.command()
@handle_errors
def build(
    ctx: typer.Context,
    left: Annotated[
        bool, typer.Option("-l", "--left", help="Build only left half")
    ] = False,
    right: Annotated[
        bool, typer.Option("-r", "--right", help="Build only right half")
    ] = False,
    settings_reset: Annotated[
        bool,
        typer.Option(
            "-s", "--settings-reset", help="Build only settings reset firmware"
        ),
    ] = False,
    config_dir: Annotated[
        Path | None,
        typer.Option("--config-dir", help="ZMK config directory (default: config)"),
    ] = None,
    output_dir: Annotated[
        Path | None,
        typer.Option(
            "-o", "--output-dir", help="Firmware output directory (default: firmware)"
        ),
    ] = None,
    board: Annotated[
        str | None,
        typer.Option("--board", help="Zephyr board (default: nice_nano_v2)"),
    ] = None,
    image: Annotated[
        str | None,
        typer.Option(
            "--image", help="Build image (default: zmkfirmware/zmk-build-arm:stable)"
        ),
    ] = None,
    config_file: Annotated[
        Path | None,
        typer.Option("-c", "--config", help="Path to a YAML settings file"),
    ] = None,
    verbose: Annotated[
        int,
        typer.Option(
            "-v",
            "--verbose",
            count=True,
            help="Increase verbosity (-v=INFO, -vv=DEBUG); shows container output",
        ),
    ] = 0,
    debug: Annotated[
        bool, typer.Option("--debug", help="Enable debug logging (equivalent to -vv)")
    ] = False,
    log_file: Annotated[
        str | None, typer.Option("--log-file", help="Also write JSON logs to a file")
    ] = None,
    no_emoji: Annotated[
        bool, typer.Option("--no-emoji", help="Disable emoji icons in output")
    ] = False,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit",
        ),
    ] = False,
) -> None:
    """ZMK firmware build for the Sofle keyboard.

    Builds inside the zmkfirmware/zmk-build-arm Docker image, so no local
    toolchain is needed. Without options, builds all firmware variants.
    """
    target = resolve_target(left, right, settings_reset)

    cli_level = _cli_log_level(verbose, debug)
    setup_logging(level=cli_level or logging.WARNING, log_file=log_file)

    settings = load_settings(
        config_file,
        config_dir=config_dir,
        output_dir=output_dir,
        board=board,
        image=image,
        icon_mode="text" if no_emoji else None,
    )
    if cli_level is None and settings.get_log_level_int() != logging.WARNING:
        setup_logging(level=settings.get_log_level_int(), log_file=log_file)

    app_context = AppContext(
        settings=settings, verbose=max(verbose, 2 if debug else 0), log_file=log_file
    )
    ctx.obj = app_context
    console = app_context.console

    request = BuildRequest.from_settings(settings, target)
    service = create_build_service(
        user_context=app_context.user_context(),
        output_middleware=app_context.output_middleware(),
    )

    reporter = ConsoleBuildReporter(console, show_output_hint=not app_context.verbose)
    summary = service.build(request, reporter=reporter)

    print_artifact_report(console, request.output_dir, summary.artifacts)
    print_flash_instructions(console, request.board)

    if not summary.success:
        failed = ", ".join(target.shield for target in summary.failed_targets)
        raise BuildError(
            f"Build failed for: {failed}",
            {"failed": [target.value for target in summary.failed_targets]},
        )


def main() -> int:
    """Main CLI entry point."""
    try:
        app()
    except SystemExit as e:
        return e.code if isinstance(e.code, int) else 0
    return 0


if __name__ == "__main__":
    sys.exit(main())
