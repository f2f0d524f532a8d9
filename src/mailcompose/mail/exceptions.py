"""Specialized exceptions raised by the mailcompose.mail module.

Exception hierarchy::

    MailcomposeError
        MailError (base for all mail errors)
            AddressError (malformed sender/recipient, also ValueError)
                RecipientError (malformed recipient)
            HeaderEncodingError (header name/value cannot be encoded)
            BodyConstructionError (text or HTML part could not be built)
            AttachmentError (missing content or unsupported disposition)
            DeliveryError (transport failed to send)
            MailConfigurationError (transport or provider misconfigured)

Library failures are re-raised as one of these with the original exception
chained as ``__cause__``.
"""

from __future__ import annotations

from typing import Any

from mailcompose.exceptions import MailcomposeError


class MailError(MailcomposeError):
    """Base exception for all mail module errors.

    Attributes:
        message: Human-readable description of the attempted operation.
        details: Additional context as key-value pairs.
    """

    def __init__(self, message: str, *, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class AddressError(MailError, ValueError):
    """An e-mail address could not be parsed or formatted.

    Attributes:
        address: The offending address as given.
    """

    def __init__(self, message: str, *, address: str | None = None) -> None:
        super().__init__(message, details={"address": address})
        self.address = address


class RecipientError(AddressError):
    """A recipient could not be added to the message.

    Attributes:
        recipient_type: Header the recipient was meant for (``To``, ``Cc``, ``Bcc``).
    """

    def __init__(self, message: str, *, recipient_type: str, address: str | None = None) -> None:
        super().__init__(message, address=address)
        self.recipient_type = recipient_type
        self.details["recipient_type"] = recipient_type


class HeaderEncodingError(MailError):
    """A header could not be set because its name or value is not encodable.

    Attributes:
        header: Header name.
        value: Header value that was rejected.
    """

    def __init__(self, header: str, value: str, reason: str) -> None:
        super().__init__(
            f"Unable to set header '{header}' to {value!r}: {reason}",
            details={"header": header, "value": value},
        )
        self.header = header
        self.value = value


class BodyConstructionError(MailError):
    """A text or HTML body part could not be built.

    Attributes:
        subtype: Text subtype being built (``plain`` or ``html``).
    """

    def __init__(self, message: str, *, subtype: str) -> None:
        super().__init__(message, details={"subtype": subtype})
        self.subtype = subtype


class AttachmentError(MailError):
    """An attachment could not be registered or materialized.

    Attributes:
        filename: Attachment file name.
    """

    def __init__(self, message: str, *, filename: str | None = None) -> None:
        super().__init__(message, details={"filename": filename})
        self.filename = filename


class DeliveryError(MailError):
    """The transport failed to deliver the message."""


class MailConfigurationError(MailError, ValueError):
    """A transport or resource provider received invalid settings."""


__all__ = [
    "AddressError",
    "AttachmentError",
    "BodyConstructionError",
    "DeliveryError",
    "HeaderEncodingError",
    "MailConfigurationError",
    "MailError",
    "RecipientError",
]
