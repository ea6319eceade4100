"""Process execution and streaming output handling.

This module runs subprocesses and hands every output line to a middleware
object as soon as it is produced, so long running container builds show
progress in real time while their output is also captured.

Example:
    ```python
    from sofle_build.utils.stream_process import run_command, DefaultOutputMiddleware

    return_code, stdout, stderr = run_command(
        ["docker", "info"], middleware=DefaultOutputMiddleware(stdout_prefix="| ")
    )
    ```
"""

import shlex
import subprocess
from threading import Thread
from typing import Any, Generic, TypeAlias, TypeVar, cast


T = TypeVar("T")  # Type of processed output

# (return_code, stdout, stderr)
ProcessResult: TypeAlias = tuple[int, list[T], list[T]]


class OutputMiddleware(Generic[T]):
    """Base class for processing command output streams.

    Implementations can format, filter, or transform each line. Returning
    ``None`` from :meth:`process` drops the line from the captured output.
    """

    def process(self, line: str, stream_type: str) -> T:
        """Process a line of output from a subprocess stream.

        Args:
            line: A line of text from the process output
            stream_type: Either "stdout" or "stderr"

        Returns:
            Processed output of type T
        """
        raise NotImplementedError()


class DefaultOutputMiddleware(OutputMiddleware[str]):
    """Middleware that prints output with optional prefixes."""

    def __init__(self, stdout_prefix: str = "", stderr_prefix: str = "ERROR: ") -> None:
        self.stdout_prefix = stdout_prefix
        self.stderr_prefix = stderr_prefix

    def process(self, line: str, stream_type: str) -> str:
        prefix = self.stdout_prefix if stream_type == "stdout" else self.stderr_prefix
        print(f"{prefix}{line}")
        return line


class ChainedOutputMiddleware(OutputMiddleware[T]):
    """Feed each line through several middlewares in order.

    The output of one middleware becomes the input line of the next; the
    result of the last one is what gets captured.
    """

    def __init__(self, middlewares: list[OutputMiddleware[Any]]) -> None:
        if not middlewares:
            raise ValueError("At least one middleware is required")
        self.middlewares = middlewares

    def process(self, line: str, stream_type: str) -> T:
        current: Any = line
        for middleware in self.middlewares:
            current = middleware.process(str(current), stream_type)
            if current is None:
                break
        return cast(T, current)


def create_chained_middleware(
    middlewares: list[OutputMiddleware[Any]],
) -> OutputMiddleware[Any]:
    """Create a middleware that applies ``middlewares`` in sequence."""
    return ChainedOutputMiddleware(middlewares)


def run_command(
    cmd: str | list[str],
    middleware: OutputMiddleware[T] | None = None,
) -> ProcessResult[T]:
    """Run a command and process its output through middleware.

    Stdout and stderr are read by two daemon threads so neither pipe can
    fill up and block the child. The call blocks until the process exits.
    If the caller is interrupted (Ctrl-C) the child is terminated before the
    interrupt propagates.

    Args:
        cmd: Command to run, either as a string or list of arguments
        middleware: Optional middleware for processing output
            (uses DefaultOutputMiddleware if None)

    Returns:
        Tuple of (return code, processed stdout lines, processed stderr lines)

    Raises:
        FileNotFoundError: If the executable does not exist
    """
    if middleware is None:
        middleware = cast(OutputMiddleware[T], DefaultOutputMiddleware())

    if isinstance(cmd, str):
        cmd = shlex.split(cmd)

    process = subprocess.Popen(
        cmd, stdout=subprocess.PIPE, stderr=subprocess.PIPE, text=True, bufsize=1
    )

    def stream_output(stream: Any, stream_type: str) -> list[T]:
        captured: list[T] = []
        for line in iter(stream.readline, ""):
            if line:
                processed = middleware.process(line.rstrip(), stream_type)
                if processed is not None:
                    captured.append(processed)
        stream.close()
        return captured

    stdout_lines: list[T] = []
    stderr_lines: list[T] = []

    stdout_thread = Thread(
        target=lambda: stdout_lines.extend(stream_output(process.stdout, "stdout")),
        daemon=True,
    )
    stderr_thread = Thread(
        target=lambda: stderr_lines.extend(stream_output(process.stderr, "stderr")),
        daemon=True,
    )
    stdout_thread.start()
    stderr_thread.start()

    try:
        return_code = process.wait()
    except KeyboardInterrupt:
        process.terminate()
        process.wait()
        raise

    stdout_thread.join()
    stderr_thread.join()

    return return_code, stdout_lines, stderr_lines
