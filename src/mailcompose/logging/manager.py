"""Logger with presets, extra levels and rich console output.

``LogManager`` is a :class:`logging.Logger` subclass. The logger itself always
accepts every level (``TRACE``); handlers decide what is emitted. Handlers are
configured from a preset (``dev``, ``prod``, ``debug``), an explicit mapping,
or the ``logging`` section of the loaded configuration.

Examples:
    >>> log = LogManager(name="demo", preset="dev")  # doctest: +SKIP
    >>> log.info("Message queued", recipients=3)  # doctest: +SKIP
    >>> log.success("Delivered")  # doctest: +SKIP
"""

from __future__ import annotations

import logging
import logging.handlers
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from box import Box
from rich.console import Console
from rich.logging import RichHandler

from mailcompose.config import get_config
from mailcompose.config.exceptions import ConfigError

TRACE_LEVEL = 5
SUCCESS_LEVEL = 25

logging.addLevelName(TRACE_LEVEL, "TRACE")
logging.addLevelName(SUCCESS_LEVEL, "SUCCESS")

FALLBACK_DEFAULTS: dict[str, Any] = {
    "output": "console",
    "console": {"level": "INFO", "show_path": False},
    "file": {
        "log_path": ".",
        "log_dir": "logs",
        "log_name": "mailcompose.log",
        "level": "INFO",
        "max_bytes": 1_048_576,
        "backup_count": 3,
    },
}

PRESETS: dict[str, dict[str, Any]] = {
    "dev": {"output": "console", "console": {"level": "DEBUG", "show_path": True}},
    "prod": {"output": "file", "file": {"level": "INFO"}},
    "debug": {"output": "both", "console": {"level": "TRACE", "show_path": True}, "file": {"level": "TRACE"}},
}

_FILE_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"


def _merge(base: Mapping[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        if isinstance(merged.get(key), Mapping) and isinstance(value, Mapping):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _resolve_level(value: str | int) -> int:
    """Translate a level name (including TRACE/SUCCESS) into its number."""
    if isinstance(value, int):
        return value
    level = logging.getLevelName(value.upper())
    return level if isinstance(level, int) else logging.INFO


def _global_logging_section() -> Mapping[str, Any]:
    """Return the ``logging`` config section, or an empty mapping."""
    try:
        section = get_config().get("logging")
    except ConfigError:
        return {}
    return section if isinstance(section, Mapping) else {}


class LogManager(logging.Logger):
    """Logger configured from presets, with TRACE/SUCCESS and key/value context.

    Args:
        name: Logger name.
        preset: One of :data:`PRESETS`; unknown names fall back to defaults.
        config: Explicit handler configuration, merged last.
    """

    def __init__(
        self,
        name: str = "mailcompose",
        *,
        preset: str | None = None,
        config: Mapping[str, Any] | None = None,
    ) -> None:
        super().__init__(name, TRACE_LEVEL)
        self._config = Box(self._build_config(preset, config))
        self._setup_handlers()

    @staticmethod
    def _build_config(preset: str | None, config: Mapping[str, Any] | None) -> dict[str, Any]:
        global_section = _global_logging_section()
        preset_name = preset or global_section.get("preset")
        merged = dict(FALLBACK_DEFAULTS)
        if preset_name:
            merged = _merge(merged, PRESETS.get(str(preset_name), {}))
        merged = _merge(merged, global_section)
        if config:
            merged = _merge(merged, config)
        return merged

    def _setup_handlers(self) -> None:
        output = self._config.get("output", "console")
        if output in ("console", "both"):
            console_cfg = self._config.console
            handler = RichHandler(
                console=Console(stderr=True),
                show_path=bool(console_cfg.get("show_path", False)),
                rich_tracebacks=True,
            )
            handler.setLevel(_resolve_level(console_cfg.get("level", "INFO")))
            self.addHandler(handler)
        if output in ("file", "both"):
            file_cfg = self._config.file
            log_dir = Path(file_cfg.log_path) / file_cfg.log_dir
            log_dir.mkdir(parents=True, exist_ok=True)
            file_handler = logging.handlers.RotatingFileHandler(
                log_dir / file_cfg.log_name,
                maxBytes=int(file_cfg.get("max_bytes", 1_048_576)),
                backupCount=int(file_cfg.get("backup_count", 3)),
                encoding="utf-8",
            )
            file_handler.setLevel(_resolve_level(file_cfg.get("level", "INFO")))
            file_handler.setFormatter(logging.Formatter(_FILE_FORMAT))
            self.addHandler(file_handler)

    def _log(  # type: ignore[override]  # pylint: disable=arguments-differ
        self,
        level: int,
        msg: object,
        args: Any,
        exc_info: Any = None,
        extra: Mapping[str, object] | None = None,
        stack_info: bool = False,
        stacklevel: int = 1,
        **context: Any,
    ) -> None:
        if context:
            pairs = " ".join(f"{key}={value!r}" for key, value in context.items())
            msg = f"{msg} | {pairs}"
        super()._log(level, msg, args, exc_info, extra, stack_info, stacklevel + 1)

    def trace(self, msg: object, *args: Any, **kwargs: Any) -> None:
        """Log at TRACE level (below DEBUG)."""
        if self.isEnabledFor(TRACE_LEVEL):
            self._log(TRACE_LEVEL, msg, args, stacklevel=kwargs.pop("stacklevel", 1) + 1, **kwargs)

    def success(self, msg: object, *args: Any, **kwargs: Any) -> None:
        """Log at SUCCESS level (between INFO and WARNING)."""
        if self.isEnabledFor(SUCCESS_LEVEL):
            self._log(SUCCESS_LEVEL, msg, args, stacklevel=kwargs.pop("stacklevel", 1) + 1, **kwargs)

    def traceback(self, exc: BaseException, msg: str = "Unhandled exception") -> None:
        """Log ``exc`` with its traceback at ERROR level."""
        self.error("%s: %s", msg, exc, exc_info=(type(exc), exc, exc.__traceback__), stacklevel=2)


__all__ = ["FALLBACK_DEFAULTS", "PRESETS", "SUCCESS_LEVEL", "TRACE_LEVEL", "LogManager"]
