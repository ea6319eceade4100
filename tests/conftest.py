"""Core test fixtures for the sofle-build project."""

import logging
import re
from collections.abc import Generator
from pathlib import Path
from typing import Any

import pytest
from typer.testing import CliRunner

from sofle_build.config.settings import ENV_PREFIX


class FakeDockerAdapter:
    """In-memory stand-in for DockerAdapter.

    ``run_container`` parses the shield and board out of the build script
    and writes the artifact into the host directory mounted at
    ``<workspace>/output``, unless the shield is listed in ``failing_shields``.
    Lines in ``container_output`` are fed to the output middleware as
    ``(stream_type, line)`` pairs.
    """

    def __init__(
        self,
        available: bool = True,
        running: bool = True,
        pull_exit_code: int = 0,
        failing_shields: set[str] | None = None,
        exit_codes: dict[str, int] | None = None,
        container_output: list[tuple[str, str]] | None = None,
    ) -> None:
        self.available = available
        self.running = running
        self.pull_exit_code = pull_exit_code
        self.failing_shields = failing_shields or set()
        self.exit_codes = exit_codes or {}
        self.container_output = container_output or []
        self.calls: list[str] = []
        self.pulled: list[str] = []
        self.run_calls: list[dict[str, Any]] = []

    def is_available(self) -> bool:
        self.calls.append("is_available")
        return self.available

    def is_running(self) -> bool:
        self.calls.append("is_running")
        return self.running

    def pull_image(
        self, image: str, middleware: Any | None = None
    ) -> tuple[int, list[str], list[str]]:
        self.calls.append("pull_image")
        self.pulled.append(image)
        stderr = ["pull access denied"] if self.pull_exit_code else []
        return self.pull_exit_code, [], stderr

    def run_container(
        self,
        image: str,
        volumes: list[tuple[str, str]],
        environment: dict[str, str],
        command: list[str] | None = None,
        middleware: Any | None = None,
        user_context: Any | None = None,
        entrypoint: str | None = None,
        workdir: str | None = None,
    ) -> tuple[int, list[str], list[str]]:
        self.calls.append("run_container")
        assert command is not None
        script = command[-1]
        shield_match = re.search(r"-DSHIELD=(\S+)", script)
        board_match = re.search(r" -b (\S+)", script)
        assert shield_match and board_match
        shield = shield_match.group(1)
        board = board_match.group(1)

        self.run_calls.append(
            {
                "image": image,
                "volumes": volumes,
                "command": command,
                "workdir": workdir,
                "user_context": user_context,
                "shield": shield,
                "board": board,
            }
        )

        if middleware is not None:
            for stream_type, line in self.container_output:
                middleware.process(line, stream_type)

        output_host = next(
            host for host, container in volumes if container.endswith("/output")
        )
        if shield not in self.failing_shields:
            run_number = len(self.run_calls)
            Path(output_host, f"{shield}-{board}.uf2").write_bytes(
                f"UF2 {shield} run {run_number}".encode()
            )
            return self.exit_codes.get(shield, 0), ["Build complete!"], []

        return self.exit_codes.get(shield, 1), [], ["west: build failed"]

    @property
    def built_shields(self) -> list[str]:
        return [call["shield"] for call in self.run_calls]


@pytest.fixture
def cli_runner() -> CliRunner:
    """Return a Typer CLI test runner."""
    return CliRunner()


@pytest.fixture
def fake_docker() -> FakeDockerAdapter:
    """Docker adapter fake that succeeds for every target."""
    return FakeDockerAdapter()


@pytest.fixture
def fake_docker_factory() -> type[FakeDockerAdapter]:
    """The FakeDockerAdapter class, for tests needing custom behavior."""
    return FakeDockerAdapter


@pytest.fixture
def zmk_config_dir(tmp_path: Path) -> Path:
    """A minimal ZMK config directory."""
    config_dir = tmp_path / "config"
    config_dir.mkdir()
    (config_dir / "west.yml").write_text("manifest:\n  projects: []\n")
    (config_dir / "sofle.keymap").write_text("/ { keymap { }; };\n")
    return config_dir


@pytest.fixture(autouse=True)
def isolated_environment(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> Generator[None, None, None]:
    """Keep user settings and environment variables out of every test."""
    import os

    for key in list(os.environ):
        if key.upper().startswith(ENV_PREFIX):
            monkeypatch.delenv(key)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))

    yield

    # CliRunner closes its streams; drop handlers that point at them
    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        handler.close()
