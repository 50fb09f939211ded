"""Logging utilities for buildbreakdown commands."""

from __future__ import annotations

import logging
from pathlib import Path

_LOGGER_NAME = "buildbreakdown"


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a module-scoped logger under the buildbreakdown hierarchy."""
    full_name = f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME
    return logging.getLogger(full_name)


class ComponentFormatter(logging.Formatter):
    """Console formatter that can name the analysis stage behind each line.

    ``buildbreakdown.sources.archive`` is shown as ``sources.archive`` so a
    verbose run reads as a trace of which source answered, fell through or
    failed.
    """

    def __init__(self, *, with_component: bool = False) -> None:
        fmt = "[buildbreakdown] %(levelname)s %(message)s"
        if with_component:
            fmt = "[buildbreakdown] %(levelname)s %(component)s: %(message)s"
        super().__init__(fmt)

    def format(self, record: logging.LogRecord) -> str:
        record.component = component_name(record.name)
        return super().format(record)


def component_name(logger_name: str) -> str:
    """Strip the package prefix from a logger name; the root logger is ``main``."""
    prefix = f"{_LOGGER_NAME}."
    if logger_name.startswith(prefix):
        return logger_name[len(prefix):]
    if logger_name == _LOGGER_NAME:
        return "main"
    return logger_name


def configure_logging(
    *, verbose: bool = False, log_file: Path | None = None
) -> logging.Logger:
    """Configure the package logger with console output and an optional file sink.

    The file sink always records at debug level so a saved log keeps the full
    source trace even when the console stays quiet.
    """
    level = logging.DEBUG if verbose else logging.INFO
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(logging.DEBUG if log_file is not None else level)
    logger.propagate = False

    # Repeated CLI invocations in one process must not stack handlers.
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    stream_handler = logging.StreamHandler()
    stream_handler.setLevel(level)
    stream_handler.setFormatter(ComponentFormatter(with_component=verbose))
    logger.addHandler(stream_handler)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )
        logger.addHandler(file_handler)

    return logger


__all__ = ["ComponentFormatter", "component_name", "configure_logging", "get_logger"]
