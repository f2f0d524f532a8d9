"""Specialized exceptions raised by the mailcompose.config module.

Exception hierarchy::

    MailcomposeError
        ConfigError (base for all configuration errors)
            ConfigFileNotFoundError (missing file, also FileNotFoundError)
            ConfigFormatError (unreadable or non-mapping YAML, also ValueError)
            ConfigNotLoadedError (require_config before load)
"""

from __future__ import annotations

from mailcompose.exceptions import MailcomposeError


class ConfigError(MailcomposeError):
    """Base exception for configuration loading problems."""


class ConfigFileNotFoundError(ConfigError, FileNotFoundError):
    """A configuration file could not be located."""


class ConfigFormatError(ConfigError, ValueError):
    """A configuration file could not be parsed into a mapping."""


class ConfigNotLoadedError(ConfigError):
    """Configuration was requested before any was loaded."""


__all__ = [
    "ConfigError",
    "ConfigFileNotFoundError",
    "ConfigFormatError",
    "ConfigNotLoadedError",
]
