"""Structured logging configuration using structlog."""

import logging
from typing import Any, Protocol

import structlog
from rich.logging import RichHandler


def setup_logging(verbose: bool = False) -> None:
    """Configure structured logging with Rich formatting.

    Args:
        verbose: Enable debug logging if True
    """
    log_level = logging.DEBUG if verbose else logging.INFO

    logging.basicConfig(
        level=log_level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True)],
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="ISO"),
            structlog.processors.StackInfoRenderer(),
            structlog.dev.ConsoleRenderer() if verbose else structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        context_class=dict,
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.BoundLogger:
    """Get a configured logger instance.

    Args:
        name: Logger name (usually __name__)

    Returns:
        Configured structlog logger
    """
    return structlog.get_logger(name)


class PrinterLogger(Protocol):
    """Leveled logging interface consumed by the pool, resolver and renderer."""

    def debug(self, message: str, **fields: Any) -> None: ...
    def log(self, message: str, **fields: Any) -> None: ...
    def warn(self, message: str, **fields: Any) -> None: ...
    def error(self, message: str, error: BaseException | None = None, **fields: Any) -> None: ...


class StructlogPrinterLogger:
    """PrinterLogger backed by a structlog logger."""

    def __init__(self, name: str = "pdf_printer"):
        self._logger = get_logger(name)

    def debug(self, message: str, **fields: Any) -> None:
        self._logger.debug(message, **fields)

    def log(self, message: str, **fields: Any) -> None:
        self._logger.info(message, **fields)

    def warn(self, message: str, **fields: Any) -> None:
        self._logger.warning(message, **fields)

    def error(self, message: str, error: BaseException | None = None, **fields: Any) -> None:
        if error is not None:
            fields.setdefault("error", str(error))
            fields.setdefault("error_type", type(error).__name__)
        self._logger.error(message, **fields)


class SafeLogger:
    """Wraps a PrinterLogger so that a failing log call never breaks a render."""

    def __init__(self, inner: PrinterLogger):
        self._inner = inner

    def _call(self, method: str, message: str, *args: Any, **fields: Any) -> None:
        try:
            getattr(self._inner, method)(message, *args, **fields)
        except Exception:  # pylint: disable=broad-exception-caught
            # logging failures are dropped
            return

    def debug(self, message: str, **fields: Any) -> None:
        self._call("debug", message, **fields)

    def log(self, message: str, **fields: Any) -> None:
        self._call("log", message, **fields)

    def warn(self, message: str, **fields: Any) -> None:
        self._call("warn", message, **fields)

    def error(self, message: str, error: BaseException | None = None, **fields: Any) -> None:
        self._call("error", message, error, **fields)


def ensure_safe(logger: PrinterLogger | None) -> SafeLogger:
    """Return a SafeLogger around ``logger`` (or the structlog default)."""
    if isinstance(logger, SafeLogger):
        return logger
    return SafeLogger(logger or StructlogPrinterLogger())
