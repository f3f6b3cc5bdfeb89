"""Public observability primitives: namespaced loggers and structured log setup."""

from shapekit.observability.logging import get_logger, setup_logging, shutdown_logging

__all__ = [
    "get_logger",
    "setup_logging",
    "shutdown_logging",
]
