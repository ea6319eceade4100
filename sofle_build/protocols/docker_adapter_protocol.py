"""Protocol definition for Docker operations."""

from typing import TYPE_CHECKING, Any, Protocol, TypeAlias, runtime_checkable


if TYPE_CHECKING:
    from sofle_build.models.docker import DockerUserContext


# (host_path, container_path); container_path may carry a ":ro" suffix
DockerVolume: TypeAlias = tuple[str, str]
DockerEnv: TypeAlias = dict[str, str]
# (return_code, stdout, stderr)
DockerResult: TypeAlias = tuple[int, list[Any], list[Any]]


@runtime_checkable
class DockerAdapterProtocol(Protocol):
    """Protocol for the Docker operations the build orchestrator needs."""

    def is_available(self) -> bool:
        """Check if the Docker CLI is installed.

        Returns:
            True if ``docker`` can be executed, False otherwise
        """
        ...

    def is_running(self) -> bool:
        """Check if the Docker daemon is reachable.

        Returns:
            True if ``docker info`` succeeds, False otherwise
        """
        ...

    def pull_image(self, image: str, middleware: Any | None = None) -> DockerResult:
        """Pull an image reference such as ``zmkfirmware/zmk-build-arm:stable``.

        Raises:
            DockerError: If the docker CLI cannot be executed
        """
        ...

    def run_container(
        self,
        image: str,
        volumes: list[DockerVolume],
        environment: DockerEnv,
        command: list[str] | None = None,
        middleware: Any | None = None,
        user_context: "DockerUserContext | None" = None,
        entrypoint: str | None = None,
        workdir: str | None = None,
    ) -> DockerResult:
        """Run a throwaway (``--rm``) container and wait for it to exit.

        Args:
            image: Docker image name/tag to run
            volumes: List of volume mounts (host_path, container_path)
            environment: Dictionary of environment variables
            command: Optional command to run in the container
            middleware: Optional middleware for processing output
            user_context: Optional uid/gid mapping for the ``--user`` flag
            entrypoint: Optional entrypoint override
            workdir: Optional working directory inside the container

        Returns:
            Tuple containing (return_code, stdout_lines, stderr_lines)

        Raises:
            DockerError: If the container cannot be started
        """
        ...
