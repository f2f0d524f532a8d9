"""Resource providers used to resolve named attachments.

A provider maps a logical name to a binary stream, returning ``None`` when the
name is unknown. :class:`~mailcompose.mail.message.MailMessage` uses it for
:meth:`~mailcompose.mail.message.MailMessage.attach_resource`.

Examples:
    Serve attachments from a directory::

        provider = FilesystemResourceProvider("/srv/mail/assets")
        mail = MailMessage(transport, resources=provider)
        mail.attach_resource("logo.png", mime_type="image/png", disposition=ContentDisposition.INLINE)
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from importlib import resources
from pathlib import Path
from typing import Any, BinaryIO, Protocol, runtime_checkable

from mailcompose.config import get_config
from mailcompose.config.exceptions import ConfigError
from mailcompose.mail.exceptions import MailConfigurationError

log = logging.getLogger(__name__)


@runtime_checkable
class ResourceProvider(Protocol):
    """Lookup of binary resources by logical name."""

    def load_resource_stream(self, name: str) -> BinaryIO | None:
        """Return an open binary stream for ``name`` or ``None`` if not found."""


class FilesystemResourceProvider:
    """Serve resources from files below a root directory.

    Names are resolved relative to ``root``; a name that resolves outside the
    root (``../secret``, absolute paths elsewhere, symlinks escaping it) is
    treated as not found.

    Args:
        root: Directory holding the resources.

    Raises:
        MailConfigurationError: If ``root`` is not an existing directory.
    """

    def __init__(self, root: str | Path) -> None:
        resolved = Path(root).expanduser().resolve()
        if not resolved.is_dir():
            raise MailConfigurationError(f"Resource root is not a directory: {resolved}")
        self._root = resolved

    @property
    def root(self) -> Path:
        """Return the resolved root directory."""
        return self._root

    @classmethod
    def from_config(cls, config: Mapping[str, Any] | None = None) -> FilesystemResourceProvider:
        """Build a provider from the ``mail.resources`` configuration section.

        Args:
            config: Mapping containing a ``resources`` section. When omitted
                the ``mail`` section of the loaded configuration is used.

        Raises:
            MailConfigurationError: If no resource root is configured.
        """
        section = cls._extract_section(config if config is not None else cls._load_config_section())
        root = section.get("root")
        if not root:
            raise MailConfigurationError("No resource root configured (mail.resources.root)")
        return cls(root)

    @staticmethod
    def _extract_section(config: Mapping[str, Any] | None) -> Mapping[str, Any]:
        if not config:
            return {}
        section = config.get("resources")
        return section if isinstance(section, Mapping) else {}

    @staticmethod
    def _load_config_section() -> Mapping[str, Any] | None:
        try:
            mail_section = get_config().get("mail")
        except ConfigError:
            return None
        return mail_section if isinstance(mail_section, Mapping) else None

    def resolve(self, name: str) -> Path | None:
        """Return the file backing ``name``, or ``None`` if absent or outside the root."""
        candidate = (self._root / name).resolve()
        if not candidate.is_relative_to(self._root):
            log.warning("Refusing resource outside root: %s", name)
            return None
        if not candidate.is_file():
            return None
        return candidate

    def load_resource_stream(self, name: str) -> BinaryIO | None:
        path = self.resolve(name)
        if path is None:
            log.debug("Resource not found: %s", name)
            return None
        return path.open("rb")


class PackageResourceProvider:
    """Serve resources shipped as package data.

    Args:
        package: Importable package name holding the resources.
        prefix: Optional sub-directory inside the package.
    """

    def __init__(self, package: str, prefix: str = "") -> None:
        self._package = package
        self._prefix = prefix.strip("/")

    def load_resource_stream(self, name: str) -> BinaryIO | None:
        target = f"{self._prefix}/{name}" if self._prefix else name
        try:
            traversable = resources.files(self._package)
        except ModuleNotFoundError:
            log.warning("Resource package not importable: %s", self._package)
            return None
        for segment in target.split("/"):
            if segment in ("", ".", ".."):
                return None
            traversable = traversable.joinpath(segment)
        if not traversable.is_file():
            return None
        return traversable.open("rb")


__all__ = ["FilesystemResourceProvider", "PackageResourceProvider", "ResourceProvider"]
