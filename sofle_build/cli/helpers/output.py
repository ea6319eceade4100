"""Helper functions for CLI output formatting with Rich integration."""

from datetime import datetime
from pathlib import Path

from rich.markup import escape

from sofle_build.cli.helpers.theme import PanelStyles, TableStyles, ThemedConsole
from sofle_build.firmware.models import Target, TargetBuildResult
from sofle_build.utils.stream_process import OutputMiddleware


class ConsoleBuildReporter:
    """Build progress reporter printing to a themed console."""

    def __init__(self, console: ThemedConsole, show_output_hint: bool = False) -> None:
        self.console = console
        self.show_output_hint = show_output_hint

    def stage(self, message: str) -> None:
        self.console.print_status(escape(message))

    def target_started(self, target: Target) -> None:
        self.console.print_status(f"Building firmware for: {target.shield}")
        if self.show_output_hint:
            # Printed once; a first west update can run for minutes
            self.console.print_list_item(
                "This can take several minutes; pass -v to stream build output"
            )
            self.show_output_hint = False

    def target_finished(self, result: TargetBuildResult) -> None:
        if result.success:
            self.console.print_success(f"Successfully built: {result.output_path.name}")
        else:
            self.console.print_error(escape(result.error or "Build failed"))
        self.console.console.print()


class ConsoleEchoMiddleware(OutputMiddleware[str]):
    """Echo container output to the console, used in verbose mode."""

    def __init__(self, console: ThemedConsole, prefix: str = "  | ") -> None:
        self.console = console
        self.prefix = prefix

    def process(self, line: str, stream_type: str) -> str:
        style = "muted" if stream_type == "stdout" else "warning"
        self.console.console.print(f"{self.prefix}{escape(line)}", style=style)
        return line


def _format_size(size: int) -> str:
    if size < 1024:
        return f"{size} B"
    if size < 1024 * 1024:
        return f"{size / 1024:.1f} KiB"
    return f"{size / (1024 * 1024):.1f} MiB"


def print_artifact_report(
    console: ThemedConsole, output_dir: Path, artifacts: list[Path]
) -> None:
    """List the firmware files in the output directory, or warn when there are none."""
    if not artifacts:
        console.print_warning("No firmware files found")
        return

    console.print_success(
        "Build complete! Firmware files are in the "
        f"'{escape(str(output_dir))}' directory:"
    )
    table = TableStyles.create_artifact_table(console.icon_mode)
    for artifact in artifacts:
        stat = artifact.stat()
        modified = datetime.fromtimestamp(stat.st_mtime).strftime("%Y-%m-%d %H:%M:%S")
        table.add_row(artifact.name, _format_size(stat.st_size), modified)
    console.console.print(table)


def flash_instructions(board: str) -> str:
    """Static instructions for copying firmware onto the controllers."""
    lines = [
        "1. Double-tap reset on your nice!nano to enter the bootloader",
        "2. Copy the .uf2 file to the mounted drive",
    ]
    width = max(len(target.artifact_name(board)) for target in Target)
    for target in Target:
        name = target.artifact_name(board).ljust(width)
        lines.append(f"   - {name} -> {target.description}")
    return "\n".join(lines)


def print_flash_instructions(console: ThemedConsole, board: str) -> None:
    panel = PanelStyles.create_info_panel(
        escape(flash_instructions(board)),
        title="To flash",
        icon="FLASH",
        icon_mode=console.icon_mode,
    )
    console.console.print()
    console.console.print(panel)
