"""Structlog logger factory and the service logging mixin."""

import logging
from typing import Any

import structlog


def get_struct_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Structlog logger routed through the handlers set up by ``setup_logging``.

    Build failures are logged with ``exc_info`` only when the root logger is
    at DEBUG, so ``--debug`` shows the stack trace and normal runs stay short.
    """
    return structlog.get_logger(name)  # type: ignore[no-any-return]


class StructlogMixin:
    """Gives a service a ``logger`` bound with its class and ``service_name``.

    ``FirmwareBuildService`` uses it so every ``target_build_*`` event in the
    JSON log file says which service emitted it.
    """

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._logger: structlog.stdlib.BoundLogger | None = None

    @property
    def logger(self) -> structlog.stdlib.BoundLogger:
        if self._logger is None:
            base_logger = get_struct_logger(self.__class__.__module__)
            context = {"service": self.__class__.__name__}
            if hasattr(self, "service_name"):
                context["service_name"] = self.service_name
            self._logger = base_logger.bind(**context)

        return self._logger

    def log_operation(
        self, operation: str, **context: Any
    ) -> structlog.stdlib.BoundLogger:
        """Logger bound to one step, e.g. ``build_target`` with its target."""
        return self.logger.bind(operation=operation, **context)

    def log_error_with_context(
        self,
        message: str,
        error: Exception,
        **context: Any,
    ) -> None:
        """Log ``error`` under event ``message`` with its type and ``context``.

        The traceback is attached only when the root logger is at DEBUG.
        """
        exc_info = logging.getLogger().isEnabledFor(logging.DEBUG)
        self.logger.error(
            message,
            error=str(error),
            error_type=error.__class__.__name__,
            exc_info=exc_info,
            **context,
        )
