"""Protocol definitions for sofle-build adapters.

Protocols use ``typing.Protocol`` with ``@runtime_checkable`` so they work
both for static type checking and for ``isinstance()`` checks on the fakes
used in tests.
"""

from .docker_adapter_protocol import (
    DockerAdapterProtocol,
    DockerEnv,
    DockerResult,
    DockerVolume,
)


__all__ = [
    "DockerAdapterProtocol",
    "DockerEnv",
    "DockerResult",
    "DockerVolume",
]
