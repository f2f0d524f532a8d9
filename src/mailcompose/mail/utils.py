"""Address, header and identifier helpers shared by the mail builder."""

from __future__ import annotations

import codecs
import mimetypes
import socket
import uuid
from collections.abc import Iterable
from email.errors import HeaderParseError
from email.header import Header
from email.headerregistry import Address
from typing import TYPE_CHECKING

from mailcompose.mail.exceptions import AddressError

if TYPE_CHECKING:
    from mailcompose.mail.models import EmailContact

DEFAULT_MIME_TYPE = "application/octet-stream"


def get_host_name() -> str:
    """Return the local host name, or ``localhost`` when it cannot be resolved."""
    try:
        name = socket.getfqdn()
    except OSError:
        return "localhost"
    return name or "localhost"


def generate_message_id(host_name: str | None = None) -> str:
    """Build a globally unique ``Message-ID`` value.

    Args:
        host_name: Domain part of the identifier. Defaults to the local host name.

    Returns:
        A value of the form ``<random-token@host>``.

    Examples:
        >>> generate_message_id("mail.example.com").endswith("@mail.example.com>")
        True
    """
    return f"<{uuid.uuid4()}@{host_name or get_host_name()}>"


def to_address(contact: EmailContact) -> Address:
    """Convert a contact into a validated :class:`email.headerregistry.Address`.

    Raises:
        AddressError: If the address is empty, lacks a domain, contains line
            breaks, or is rejected by the RFC 5322 parser.
    """
    raw = (contact.address or "").strip()
    name = contact.name or ""
    if not raw:
        raise AddressError("Empty e-mail address", address=contact.address)
    if any(char in raw or char in name for char in "\r\n"):
        raise AddressError(f"Line break in e-mail contact: {contact}", address=contact.address)
    local, at, domain = raw.rpartition("@")
    if not at or not local or not domain:
        raise AddressError(f"Invalid e-mail address {raw!r}: missing local part or domain", address=contact.address)
    try:
        address = Address(display_name=name, addr_spec=raw)
    except (HeaderParseError, TypeError, ValueError) as e:
        raise AddressError(f"Invalid e-mail address {raw!r}: {e}", address=contact.address) from e
    if not address.username or not address.domain:
        raise AddressError(f"Invalid e-mail address {raw!r}: missing local part or domain", address=contact.address)
    return address


def to_addresses(contacts: Iterable[EmailContact]) -> list[Address]:
    """Validate every contact before returning any address."""
    return [to_address(contact) for contact in contacts]


def encode_header_value(value: str, charset: str, header_name: str | None = None) -> str:
    """MIME-encode ``value`` (RFC 2047) when it is not plain ASCII.

    ``header_name`` only shortens the first line so the folded header,
    name included, stays within 78 characters.

    Raises:
        LookupError: If ``charset`` is unknown.
        UnicodeError: If ``value`` cannot be represented in ``charset``.
    """
    codecs.lookup(charset)
    if value.isascii():
        return value
    return Header(value, charset, header_name=header_name).encode()


def guess_mime_type(filename: str) -> str:
    """Guess a MIME type from a file name, falling back to octet-stream."""
    mime_type, _ = mimetypes.guess_type(filename)
    return mime_type or DEFAULT_MIME_TYPE


__all__ = [
    "DEFAULT_MIME_TYPE",
    "encode_header_value",
    "generate_message_id",
    "get_host_name",
    "guess_mime_type",
    "to_address",
    "to_addresses",
]
