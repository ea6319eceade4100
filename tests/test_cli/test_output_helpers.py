"""Tests for CLI theme and output helpers."""

from io import StringIO
from pathlib import Path

import pytest
from rich.console import Console

from sofle_build.cli.helpers.output import (
    ConsoleBuildReporter,
    ConsoleEchoMiddleware,
    flash_instructions,
    print_artifact_report,
)
from sofle_build.cli.helpers.theme import SOFLE_THEME, Icons, ThemedConsole
from sofle_build.firmware.models import Target, TargetBuildResult


@pytest.fixture
def themed_console():
    def _make(icon_mode="text"):
        console = Console(file=StringIO(), theme=SOFLE_THEME, width=200)
        return ThemedConsole(icon_mode=icon_mode, console=console)

    return _make


def _output(themed: ThemedConsole) -> str:
    return themed.console.file.getvalue()


class TestIcons:
    """Test icon lookup for each icon mode."""

    def test_emoji(self):
        assert Icons.get_icon("SUCCESS", "emoji") == "✅"
        assert Icons.get_icon("STATUS", "emoji") == "==>"

    def test_text(self):
        assert Icons.get_icon("ERROR", "text") == "Error:"
        assert Icons.get_icon("UNKNOWN", "text") == "[UNKNOWN]"

    def test_nerdfont_unknown_icon(self):
        assert Icons.get_icon("UNKNOWN", "nerdfont") == ""

    def test_format_with_empty_icon(self):
        assert Icons.format_with_icon("DOCKER", "image", "text") == "image"


class TestThemedConsole:
    def test_status_line(self, themed_console):
        themed = themed_console()

        themed.print_status("Pulling build image...")

        assert _output(themed) == "==> Pulling build image...\n"

    def test_error_and_list_item(self, themed_console):
        themed = themed_console()

        themed.print_error("Docker is not running.")
        themed.print_list_item("Start Docker")

        assert _output(themed).splitlines() == [
            "Error: Docker is not running.",
            "  - Start Docker",
        ]


class TestConsoleBuildReporter:
    """Test progress lines printed during a build."""

    def test_target_lines(self, themed_console):
        themed = themed_console()
        reporter = ConsoleBuildReporter(themed)

        reporter.target_started(Target.RIGHT)
        reporter.target_finished(
            TargetBuildResult(
                target=Target.RIGHT,
                success=True,
                output_path=Path("firmware/sofle_right-nice_nano_v2.uf2"),
            )
        )

        output = _output(themed)
        assert "==> Building firmware for: sofle_right" in output
        assert "Successfully built: sofle_right-nice_nano_v2.uf2" in output

    def test_failure_line(self, themed_console):
        themed = themed_console()
        reporter = ConsoleBuildReporter(themed)

        reporter.target_finished(
            TargetBuildResult(
                target=Target.LEFT,
                success=False,
                output_path=Path("firmware/sofle_left-nice_nano_v2.uf2"),
                error="Build failed for sofle_left: [missing]",
            )
        )

        assert "Error: Build failed for sofle_left: [missing]" in _output(themed)

    def test_output_hint_printed_once(self, themed_console):
        themed = themed_console()
        reporter = ConsoleBuildReporter(themed, show_output_hint=True)

        reporter.target_started(Target.LEFT)
        reporter.target_started(Target.RIGHT)

        assert _output(themed).count("pass -v to stream build output") == 1

    def test_stage_markup_escaped(self, themed_console):
        themed = themed_console()

        ConsoleBuildReporter(themed).stage("Pulling build image img[bold]...")

        assert "img[bold]" in _output(themed)


class TestArtifactReport:
    def test_no_artifacts_warns(self, themed_console, tmp_path):
        themed = themed_console()

        print_artifact_report(themed, tmp_path, [])

        assert "Warning: No firmware files found" in _output(themed)

    def test_lists_artifacts(self, themed_console, tmp_path):
        themed = themed_console()
        artifact = tmp_path / "sofle_left-nice_nano_v2.uf2"
        artifact.write_bytes(b"\x00" * 2048)

        print_artifact_report(themed, tmp_path, [artifact])

        output = _output(themed)
        assert "Build complete!" in output
        assert "sofle_left-nice_nano_v2.uf2" in output
        assert "2.0 KiB" in output


def test_flash_instructions_lists_every_target():
    text = flash_instructions("nice_nano_v2")

    assert text.startswith("1. Double-tap reset")
    for target in Target:
        assert target.artifact_name("nice_nano_v2") in text
    assert "Left half" in text


def test_echo_middleware(themed_console):
    themed = themed_console()
    middleware = ConsoleEchoMiddleware(themed)

    assert middleware.process("-- Zephyr version: 3.5.0", "stdout") == (
        "-- Zephyr version: 3.5.0"
    )
    assert "  | -- Zephyr version: 3.5.0" in _output(themed)
