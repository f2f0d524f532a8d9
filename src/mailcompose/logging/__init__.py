"""Logging helpers for mailcompose.

Library modules log through ``logging.getLogger(__name__)`` and stay silent
until an application calls :func:`init_logging`, which attaches the
configured handlers to the ``mailcompose`` logger and adds ``trace()`` and
``success()`` to every standard logger.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from mailcompose.logging.manager import SUCCESS_LEVEL, TRACE_LEVEL, LogManager

ROOT_LOGGER_NAME = "mailcompose"

_root_logger: LogManager | None = None


def _patch_logger_class() -> None:
    """Expose ``trace()``/``success()`` on plain :class:`logging.Logger` objects."""

    def trace(self: logging.Logger, msg: object, *args: Any, **kwargs: Any) -> None:
        if self.isEnabledFor(TRACE_LEVEL):
            self._log(TRACE_LEVEL, msg, args, **kwargs)  # pylint: disable=protected-access

    def success(self: logging.Logger, msg: object, *args: Any, **kwargs: Any) -> None:
        if self.isEnabledFor(SUCCESS_LEVEL):
            self._log(SUCCESS_LEVEL, msg, args, **kwargs)  # pylint: disable=protected-access

    if "trace" not in logging.Logger.__dict__:
        logging.Logger.trace = trace  # type: ignore[attr-defined]
    if "success" not in logging.Logger.__dict__:
        logging.Logger.success = success  # type: ignore[attr-defined]


def init_logging(
    *,
    preset: str | None = None,
    config: Mapping[str, Any] | None = None,
) -> LogManager:
    """Configure package logging and return the root :class:`LogManager`.

    The handlers built by the manager are also installed on the standard
    ``mailcompose`` logger so that module loggers created with
    ``logging.getLogger(__name__)`` propagate into them.
    """
    global _root_logger  # pylint: disable=global-statement

    manager = LogManager(name=ROOT_LOGGER_NAME, preset=preset, config=config)
    std_logger = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in list(std_logger.handlers):
        std_logger.removeHandler(handler)
    for handler in manager.handlers:
        std_logger.addHandler(handler)
    std_logger.setLevel(TRACE_LEVEL)

    _patch_logger_class()
    _root_logger = manager
    return manager


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a logger in the ``mailcompose`` namespace.

    ``get_logger(None)`` returns the root manager once :func:`init_logging`
    has run, and the plain ``mailcompose`` logger otherwise.
    """
    if name is None:
        if _root_logger is not None:
            return _root_logger
        return logging.getLogger(ROOT_LOGGER_NAME)
    if name == ROOT_LOGGER_NAME or name.startswith(f"{ROOT_LOGGER_NAME}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


__all__ = [
    "SUCCESS_LEVEL",
    "TRACE_LEVEL",
    "LogManager",
    "get_logger",
    "init_logging",
]
