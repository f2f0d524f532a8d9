"""Configuration loading for mailcompose.

Examples:
    >>> from mailcompose.config import load_config
    >>> config = load_config()  # doctest: +SKIP
    >>> config.mail.smtp.port  # doctest: +SKIP
    587
"""

from mailcompose.config.exceptions import (
    ConfigError,
    ConfigFileNotFoundError,
    ConfigFormatError,
    ConfigNotLoadedError,
)
from mailcompose.config.loader import (
    CONFIG_ENV_VAR,
    CONFIG_FILENAME,
    clear_config,
    get_config,
    load_config,
    load_from_env,
    load_from_file,
    require_config,
)

__all__ = [
    "CONFIG_ENV_VAR",
    "CONFIG_FILENAME",
    "ConfigError",
    "ConfigFileNotFoundError",
    "ConfigFormatError",
    "ConfigNotLoadedError",
    "clear_config",
    "get_config",
    "load_config",
    "load_from_env",
    "load_from_file",
    "require_config",
]
