"""Cascading YAML configuration loader.

Configuration is layered, later sources overriding earlier ones key by key:

1. packaged defaults (``mailcompose/config/mailcompose.conf.yml``)
2. ``~/.config/mailcompose.conf.yml``
3. ``~/mailcompose.conf.yml``
4. ``./mailcompose.conf.yml``

An explicit file (``load_from_file`` or ``load_config(path=...)``) or the
``MAILCOMPOSE_CONFIG`` environment variable is merged on top of the packaged
defaults instead of the user cascade. The result is exposed as a
:class:`box.Box` so values read as attributes (``config.mail.smtp.host``).
"""

from __future__ import annotations

import logging
import os
from importlib import resources
from pathlib import Path
from typing import Any

import yaml
from box import Box

from mailcompose.config.exceptions import (
    ConfigFileNotFoundError,
    ConfigFormatError,
    ConfigNotLoadedError,
)

log = logging.getLogger(__name__)

CONFIG_FILENAME = "mailcompose.conf.yml"
CONFIG_ENV_VAR = "MAILCOMPOSE_CONFIG"
DEFAULT_ENCODING = "utf-8"

_config_cache: Box | None = None


def _load_yaml_file(path: Path, encoding: str = DEFAULT_ENCODING) -> dict[str, Any]:
    """Read a YAML file and return its top-level mapping.

    Raises:
        ConfigFileNotFoundError: If the file does not exist.
        ConfigFormatError: If the YAML is invalid or not a mapping.
    """
    if not path.is_file():
        raise ConfigFileNotFoundError(f"Config file not found: {path}")
    try:
        with path.open("r", encoding=encoding) as handle:
            data = yaml.safe_load(handle)
    except yaml.YAMLError as e:
        raise ConfigFormatError(f"Invalid YAML in {path}: {e}") from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigFormatError(f"Config file {path} must contain a mapping, got {type(data).__name__}")
    return data


def _load_default_config(encoding: str = DEFAULT_ENCODING) -> dict[str, Any]:
    """Load the defaults shipped inside the package."""
    source = resources.files("mailcompose.config").joinpath(CONFIG_FILENAME)
    with resources.as_file(source) as path:
        return _load_yaml_file(Path(path), encoding)


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Return ``base`` updated recursively with ``override``."""
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = _deep_merge(current, value)
        else:
            merged[key] = value
    return merged


def _cascade_paths(filename: str) -> list[Path]:
    """Return user config locations in increasing priority order."""
    home = Path.home()
    return [home / ".config" / filename, home / filename, Path.cwd() / filename]


def _to_box(data: dict[str, Any]) -> Box:
    return Box(data, frozen_box=False, default_box=False)


def load_from_file(path: str | Path, encoding: str = DEFAULT_ENCODING) -> Box:
    """Load an explicit configuration file merged over the packaged defaults.

    Args:
        path: Path of the YAML file.
        encoding: File encoding.

    Returns:
        The merged configuration.
    """
    global _config_cache  # pylint: disable=global-statement

    file_path = Path(path).expanduser()
    data = _deep_merge(_load_default_config(encoding), _load_yaml_file(file_path, encoding))
    log.debug("Loaded configuration from %s", file_path)
    _config_cache = _to_box(data)
    return _config_cache


def load_from_env(var_name: str = CONFIG_ENV_VAR, encoding: str = DEFAULT_ENCODING) -> Box:
    """Load the configuration file named by an environment variable.

    Raises:
        ConfigFileNotFoundError: If the variable is unset or empty.
    """
    value = os.environ.get(var_name, "").strip()
    if not value:
        raise ConfigFileNotFoundError(f"Environment variable {var_name} is not set")
    return load_from_file(value, encoding)


def load_config(
    filename: str = CONFIG_FILENAME,
    *,
    path: str | Path | None = None,
    encoding: str = DEFAULT_ENCODING,
) -> Box:
    """Load configuration from an explicit path, the environment, or the cascade.

    Args:
        filename: File name searched in the user cascade.
        path: Explicit file, bypassing the cascade.
        encoding: File encoding.

    Returns:
        The merged configuration, also cached for :func:`get_config`.
    """
    global _config_cache  # pylint: disable=global-statement

    if path is not None:
        return load_from_file(path, encoding)
    if os.environ.get(CONFIG_ENV_VAR):
        return load_from_env(CONFIG_ENV_VAR, encoding)

    data = _load_default_config(encoding)
    for candidate in _cascade_paths(filename):
        if candidate.is_file():
            log.debug("Merging configuration layer %s", candidate)
            data = _deep_merge(data, _load_yaml_file(candidate, encoding))

    _config_cache = _to_box(data)
    return _config_cache


def get_config(*, force_reload: bool = False) -> Box:
    """Return the cached configuration, loading the cascade on first use."""
    if _config_cache is None or force_reload:
        return load_config()
    return _config_cache


def require_config() -> Box:
    """Return the loaded configuration without triggering a load.

    Raises:
        ConfigNotLoadedError: If nothing has been loaded yet.
    """
    if _config_cache is None:
        raise ConfigNotLoadedError("Configuration not loaded; call load_config() first")
    return _config_cache


def clear_config() -> None:
    """Drop the cached configuration."""
    global _config_cache  # pylint: disable=global-statement
    _config_cache = None


__all__ = [
    "CONFIG_ENV_VAR",
    "CONFIG_FILENAME",
    "clear_config",
    "get_config",
    "load_config",
    "load_from_env",
    "load_from_file",
    "require_config",
]
