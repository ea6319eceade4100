"""Firmware build orchestration.

Builds run strictly one after another. Each target gets its own throwaway
container that initializes the west workspace, fetches dependencies, builds
the shield and copies ``zmk.uf2`` into the mounted output directory. The
presence of that file on the host is the only success signal.
"""

import platform
import time
from pathlib import Path
from typing import Any, Protocol

from sofle_build.core.errors import ConfigError, DockerError, PrerequisiteError
from sofle_build.core.structlog_logger import StructlogMixin
from sofle_build.firmware.models import (
    BuildRequest,
    BuildSummary,
    Target,
    TargetBuildResult,
)
from sofle_build.models.docker import DockerUserContext
from sofle_build.protocols.docker_adapter_protocol import (
    DockerAdapterProtocol,
    DockerVolume,
)
from sofle_build.utils.stream_process import OutputMiddleware


BUILD_ARTIFACT = "build/zephyr/zmk.uf2"
ARTIFACT_PATTERN = "*.uf2"


class BuildProgressReporter(Protocol):
    """Receives progress notifications while a request is processed."""

    def stage(self, message: str) -> None: ...

    def target_started(self, target: Target) -> None: ...

    def target_finished(self, result: TargetBuildResult) -> None: ...


class NoOpBuildProgressReporter:
    """Reporter that ignores every notification."""

    def stage(self, message: str) -> None:
        pass

    def target_started(self, target: Target) -> None:
        pass

    def target_finished(self, result: TargetBuildResult) -> None:
        pass


def build_container_script(shield: str, board: str, workspace: str) -> str:
    """Return the shell script executed inside the build container.

    ``west init`` fails once the workspace exists, so its failure is ignored;
    every later step is fatal through ``set -e``.
    """
    artifact_name = f"{shield}-{board}.uf2"
    return "\n".join(
        [
            "set -e",
            "west init -l config 2>/dev/null || true",
            "west update --narrow -o=--depth=1",
            f"west build -s zmk/app -p -b {board} -- "
            f"-DSHIELD={shield} -DZMK_CONFIG={workspace}/config",
            f"cp {BUILD_ARTIFACT} output/{artifact_name}",
            "echo 'Build complete!'",
        ]
    )


def install_hint() -> str:
    """Platform specific hint for installing Docker."""
    if platform.system() == "Darwin":
        return "brew install --cask docker"
    return "See https://docs.docker.com/get-docker/"


class FirmwareBuildService(StructlogMixin):
    """Service running the containerized build for each selected target."""

    service_name = "firmware_build"

    def __init__(
        self,
        docker_adapter: DockerAdapterProtocol,
        user_context: DockerUserContext | None = None,
        output_middleware: OutputMiddleware[Any] | None = None,
    ) -> None:
        super().__init__()
        self.docker_adapter = docker_adapter
        self.user_context = user_context
        self.output_middleware = output_middleware

    def verify_prerequisites(self) -> None:
        """Fail unless Docker is installed and its daemon is reachable.

        Raises:
            PrerequisiteError: If either check fails
        """
        if not self.docker_adapter.is_available():
            raise PrerequisiteError(
                "Docker is not installed. Please install Docker first.",
                {"hint": install_hint()},
            )

        if not self.docker_adapter.is_running():
            raise PrerequisiteError(
                "Docker is not running. Please start Docker.",
                {"hint": "Start Docker Desktop or the docker daemon and retry."},
            )

        self.logger.debug("prerequisites_verified")

    def validate_request(self, request: BuildRequest) -> None:
        """Check the host side inputs of ``request``.

        Raises:
            ConfigError: If the ZMK config directory does not exist
        """
        if not request.config_dir.is_dir():
            raise ConfigError(
                f"ZMK config directory not found: {request.config_dir}",
                {
                    "config_dir": str(request.config_dir),
                    "hint": "Run from your zmk-config checkout or pass --config-dir.",
                },
            )

    def prepare_output_dir(self, request: BuildRequest) -> Path:
        """Create the output directory, including parents, if needed."""
        request.output_dir.mkdir(parents=True, exist_ok=True)
        self.logger.debug("output_dir_ready", output_dir=str(request.output_dir))
        return request.output_dir

    def fetch_image(self, image: str) -> None:
        """Pull the build image.

        Raises:
            DockerError: If the pull fails
        """
        return_code, _stdout, stderr = self.docker_adapter.pull_image(
            image, middleware=self.output_middleware
        )
        if return_code != 0:
            detail = "\n".join(str(line) for line in stderr[-5:])
            raise DockerError(
                f"Failed to pull image {image} (exit code {return_code})",
                command=f"docker pull {image}",
                context={"image": image, "stderr": detail},
            )
        self.logger.info("image_pulled", image=image)

    def container_volumes(self, request: BuildRequest) -> list[DockerVolume]:
        return [
            (
                str(request.config_dir.resolve()),
                f"{request.workspace}/config:ro",
            ),
            (
                str(request.output_dir.resolve()),
                f"{request.workspace}/output",
            ),
        ]

    def build_target(self, request: BuildRequest, target: Target) -> TargetBuildResult:
        """Build one target in a fresh container and check for its artifact.

        Any stale artifact from a previous run is removed first so that the
        file existing afterwards always means this build produced it.
        """
        log = self.log_operation("build_target", target=target.value)
        output_path = request.artifact_path(target)
        output_path.unlink(missing_ok=True)

        script = build_container_script(target.shield, request.board, request.workspace)
        log.info("target_build_started", shield=target.shield, board=request.board)

        start_time = time.monotonic()
        exit_code: int | None = None
        error: str | None = None
        try:
            exit_code, _stdout, _stderr = self.docker_adapter.run_container(
                image=request.image,
                volumes=self.container_volumes(request),
                environment={},
                command=["bash", "-c", script],
                middleware=self.output_middleware,
                user_context=self.user_context,
                workdir=request.workspace,
            )
        except DockerError as e:
            self.log_error_with_context("container_run_failed", e, target=target.value)
            error = e.message
        duration = time.monotonic() - start_time

        if output_path.is_file():
            if exit_code not in (None, 0):
                log.warning("artifact_present_despite_exit_code", exit_code=exit_code)
            log.info(
                "target_build_succeeded",
                output_path=str(output_path),
                duration_seconds=round(duration, 2),
            )
            return TargetBuildResult(
                target=target,
                success=True,
                output_path=output_path,
                exit_code=exit_code,
                duration_seconds=duration,
            )

        if error is None:
            error = (
                f"Build failed for {target.shield}: "
                f"{output_path.name} was not produced"
            )
            if exit_code not in (None, 0):
                error += f" (container exit code {exit_code})"
        log.error("target_build_failed", error=error, exit_code=exit_code)
        return TargetBuildResult(
            target=target,
            success=False,
            output_path=output_path,
            error=error,
            exit_code=exit_code,
            duration_seconds=duration,
        )

    def list_artifacts(self, output_dir: Path) -> list[Path]:
        """All firmware images currently in ``output_dir``, sorted by name."""
        if not output_dir.is_dir():
            return []
        return sorted(
            path for path in output_dir.glob(ARTIFACT_PATTERN) if path.is_file()
        )

    def build(
        self,
        request: BuildRequest,
        reporter: BuildProgressReporter | None = None,
    ) -> BuildSummary:
        """Run the full flow for ``request``.

        Prerequisite, configuration and image pull failures raise before any
        target is built. Target failures never raise; they are recorded in the
        returned summary and the remaining targets still run.

        Raises:
            PrerequisiteError: Docker missing or not running
            ConfigError: Config directory missing
            DockerError: Image pull failed
        """
        reporter = reporter or NoOpBuildProgressReporter()
        log = self.log_operation(
            "build", targets=[target.value for target in request.targets]
        )

        self.verify_prerequisites()
        self.validate_request(request)
        self.prepare_output_dir(request)

        reporter.stage(f"Pulling build image {request.image}...")
        self.fetch_image(request.image)

        reporter.stage("Setting up build environment...")
        summary = BuildSummary()
        for target in request.targets:
            reporter.target_started(target)
            result = self.build_target(request, target)
            summary.results.append(result)
            reporter.target_finished(result)

        summary.artifacts = self.list_artifacts(request.output_dir)
        log.info("build_finished", **summary.get_summary())
        return summary


def create_build_service(
    docker_adapter: DockerAdapterProtocol | None = None,
    user_context: DockerUserContext | None = None,
    output_middleware: OutputMiddleware[Any] | None = None,
) -> FirmwareBuildService:
    """Factory function to create a FirmwareBuildService with default dependencies."""
    if docker_adapter is None:
        from sofle_build.adapters.docker_adapter import create_docker_adapter

        docker_adapter = create_docker_adapter()

    return FirmwareBuildService(
        docker_adapter=docker_adapter,
        user_context=user_context,
        output_middleware=output_middleware,
    )


__all__ = [
    "BuildProgressReporter",
    "FirmwareBuildService",
    "NoOpBuildProgressReporter",
    "build_container_script",
    "create_build_service",
]
