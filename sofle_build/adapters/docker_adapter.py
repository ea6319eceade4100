"""Docker adapter for container operations."""

import logging
import shlex
import subprocess
from typing import cast

from sofle_build.core.errors import create_docker_error
from sofle_build.core.logging import CONTAINER_OUTPUT_LOGGER
from sofle_build.models.docker import DockerUserContext
from sofle_build.protocols.docker_adapter_protocol import (
    DockerAdapterProtocol,
    DockerEnv,
    DockerVolume,
)
from sofle_build.utils.stream_process import (
    OutputMiddleware,
    ProcessResult,
    T,
)


logger = logging.getLogger(__name__)
container_logger = logging.getLogger(CONTAINER_OUTPUT_LOGGER)


class LoggerOutputMiddleware(OutputMiddleware[str]):
    """Middleware that forwards container output to a logger.

    Stdout lines are logged at DEBUG. Stderr lines go to INFO because west
    and CMake report ordinary progress on stderr.
    """

    def __init__(
        self, logger: logging.Logger, stdout_prefix: str = "", stderr_prefix: str = ""
    ):
        self.logger = logger
        self.stderr_prefix = stderr_prefix
        self.stdout_prefix = stdout_prefix

    def process(self, line: str, stream_type: str) -> str:
        if stream_type == "stdout":
            self.logger.debug("%s%s", self.stdout_prefix, line)
        else:
            self.logger.info("%s%s", self.stderr_prefix, line)
        return line


class DockerAdapter:
    """Implementation of Docker adapter on top of the docker CLI."""

    def is_available(self) -> bool:
        """Check if the docker executable is installed."""
        docker_cmd = ["docker", "--version"]
        cmd_str = " ".join(docker_cmd)

        try:
            result = subprocess.run(
                docker_cmd, check=True, capture_output=True, text=True
            )
            logger.debug("Docker is available: %s", result.stdout.strip())
            return True

        except FileNotFoundError:
            logger.warning("Docker executable not found in PATH")
            return False

        except subprocess.CalledProcessError as e:
            stderr = e.stderr if e.stderr else "unknown error"
            logger.warning("Docker command failed: %s - error: %s", cmd_str, stderr)
            return False

        except OSError as e:
            logger.warning("Unexpected error checking Docker availability: %s", e)
            return False

    def is_running(self) -> bool:
        """Check if the Docker daemon answers ``docker info``."""
        docker_cmd = ["docker", "info"]

        try:
            subprocess.run(docker_cmd, check=True, capture_output=True, text=True)
            logger.debug("Docker daemon is running")
            return True

        except FileNotFoundError:
            logger.warning("Docker executable not found in PATH")
            return False

        except subprocess.CalledProcessError as e:
            stderr = e.stderr.strip() if e.stderr else "unknown error"
            logger.warning("Docker daemon is not reachable: %s", stderr)
            return False

        except OSError as e:
            logger.warning("Unexpected error checking Docker daemon: %s", e)
            return False

    def run_container(
        self,
        image: str,
        volumes: list[DockerVolume],
        environment: DockerEnv,
        command: list[str] | None = None,
        middleware: OutputMiddleware[T] | None = None,
        user_context: DockerUserContext | None = None,
        entrypoint: str | None = None,
        workdir: str | None = None,
    ) -> ProcessResult[T]:
        """Run a Docker container with specified configuration."""
        from sofle_build.utils import stream_process

        docker_cmd = ["docker", "run", "--rm"]

        if user_context and user_context.should_use_user_mapping():
            docker_user_flag = user_context.get_docker_user_flag()
            docker_cmd.extend(["--user", docker_user_flag])
            logger.debug("Using Docker user mapping: %s", docker_user_flag)

        if entrypoint:
            docker_cmd.extend(["--entrypoint", entrypoint])
            logger.debug("Using custom entrypoint: %s", entrypoint)

        for host_path, container_path in volumes:
            docker_cmd.extend(["-v", f"{host_path}:{container_path}"])

        for key, value in environment.items():
            docker_cmd.extend(["-e", f"{key}={value}"])

        if workdir:
            docker_cmd.extend(["-w", workdir])

        docker_cmd.append(image)

        if command:
            docker_cmd.extend(command)

        cmd_str = " ".join(shlex.quote(arg) for arg in docker_cmd)
        logger.debug("Docker command: %s", cmd_str)

        try:
            if middleware is None:
                middleware = cast(
                    OutputMiddleware[T], LoggerOutputMiddleware(container_logger)
                )
            return stream_process.run_command(docker_cmd, middleware)

        except FileNotFoundError as e:
            error = create_docker_error(f"Docker executable not found: {e}", cmd_str, e)
            logger.error("Docker executable not found: %s", e)
            raise error from e

        except (subprocess.SubprocessError, OSError) as e:
            error = create_docker_error(
                f"Failed to run Docker container: {e}",
                cmd_str,
                e,
                {"image": image, "volumes_count": len(volumes)},
            )
            logger.error("Docker subprocess error: %s", e)
            raise error from e

    def pull_image(
        self,
        image: str,
        middleware: OutputMiddleware[T] | None = None,
    ) -> ProcessResult[T]:
        """Pull a Docker image from its registry."""
        from sofle_build.utils import stream_process

        if not self.is_available():
            error = create_docker_error(
                "Docker is not available or not properly installed",
                None,
                None,
                {"image": image},
            )
            logger.error("Docker not available for image pull: %s", image)
            raise error

        docker_cmd = ["docker", "pull", image]
        cmd_str = " ".join(shlex.quote(arg) for arg in docker_cmd)
        logger.info("Pulling Docker image: %s", image)
        logger.debug("Docker command: %s", cmd_str)

        try:
            if middleware is None:
                middleware = cast(
                    OutputMiddleware[T], LoggerOutputMiddleware(container_logger)
                )
            return stream_process.run_command(docker_cmd, middleware)

        except FileNotFoundError as e:
            error = create_docker_error(f"Docker executable not found: {e}", cmd_str, e)
            logger.error("Docker executable not found during image pull: %s", e)
            raise error from e

        except (subprocess.SubprocessError, OSError) as e:
            error = create_docker_error(
                f"Unexpected error pulling Docker image: {e}",
                cmd_str,
                e,
                {"image": image},
            )
            logger.error("Unexpected Docker pull error for %s: %s", image, e)
            raise error from e


def create_docker_adapter() -> DockerAdapterProtocol:
    """Factory function to create a DockerAdapter instance.

    Example:
        >>> adapter = create_docker_adapter()
        >>> if adapter.is_available() and adapter.is_running():
        ...     adapter.run_container("ubuntu:latest", [], {})
    """
    logger.debug("Creating DockerAdapter")
    return DockerAdapter()
