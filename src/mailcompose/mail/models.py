"""Data models for the mailcompose.mail module.

- RecipientType: Enum mapping recipient kinds to their header names
- ContentDisposition: Enum for attachment placement (inline, attachment)
- MessagePriority: Enum of importance levels and their header triples
- MailHeader: Enum of well-known receipt headers
- MessageState: Enum for the builder lifecycle
- EmailContact: Frozen display name + address pair
- Attachment: Frozen attachment descriptor (content source, name, type, disposition)
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from mailcompose.mail.utils import DEFAULT_MIME_TYPE


class RecipientType(str, Enum):
    """Kind of recipient, valued with the header it populates.

    Attributes:
        TO: Primary recipients.
        CC: Carbon-copy recipients.
        BCC: Blind carbon-copy recipients (stripped by the transport).
    """

    TO = "To"
    CC = "Cc"
    BCC = "Bcc"

    @property
    def header(self) -> str:
        """Return the header name for this recipient type."""
        return self.value


class ContentDisposition(str, Enum):
    """Placement of an attachment in the message.

    Attributes:
        INLINE: Rendered inside the HTML body, stored in the related container.
        ATTACHMENT: Offered as a download, stored in the root container.
    """

    INLINE = "inline"
    ATTACHMENT = "attachment"


class MessagePriority(Enum):
    """Importance level with its ``X-Priority``/``Priority``/``Importance`` values."""

    HIGH = ("1", "urgent", "high")
    NORMAL = ("3", "normal", "normal")
    LOW = ("5", "non-urgent", "low")

    @property
    def x_priority(self) -> str:
        return self.value[0]

    @property
    def priority(self) -> str:
        return self.value[1]

    @property
    def importance(self) -> str:
        return self.value[2]

    def headers(self) -> dict[str, str]:
        """Return the three priority headers for this level."""
        return {
            "X-Priority": self.x_priority,
            "Priority": self.priority,
            "Importance": self.importance,
        }


class MailHeader(str, Enum):
    """Receipt request headers."""

    DELIVERY_RECEIPT = "Return-Receipt-To"
    READ_RECEIPT = "Disposition-Notification-To"


class MessageState(str, Enum):
    """Lifecycle of a :class:`~mailcompose.mail.message.MailMessage`.

    Attributes:
        UNFINALIZED: Still accepting attachments.
        FINALIZED: Attachments materialized into the body tree.
        SENT: Handed to the transport successfully (terminal).
    """

    UNFINALIZED = "unfinalized"
    FINALIZED = "finalized"
    SENT = "sent"


@dataclass(frozen=True, slots=True)
class EmailContact:
    """Display name and address of a sender or recipient.

    Attributes:
        name: Display name, may be empty.
        address: Bare address (``user@example.com``).

    Examples:
        >>> str(EmailContact("Ada", "ada@example.com"))
        'Ada <ada@example.com>'
    """

    name: str
    address: str

    def __str__(self) -> str:
        if self.name:
            return f"{self.name} <{self.address}>"
        return self.address


@dataclass(frozen=True, slots=True)
class UrlSource:
    """Remote attachment content fetched when the part is materialized."""

    url: str


AttachmentSource = Path | bytes | UrlSource


@dataclass(frozen=True, slots=True)
class Attachment:
    """Attachment descriptor registered on a message.

    Content is kept as its source (a file path, raw bytes, or a URL) and only
    read when the message is finalized. Streams are drained into bytes when
    the attachment is registered.

    Attributes:
        source: Content source.
        filename: Display file name, also the key in the attachment map.
        mime_type: ``maintype/subtype`` of the content.
        disposition: Placement of the part.
    """

    source: AttachmentSource
    filename: str
    mime_type: str = DEFAULT_MIME_TYPE
    disposition: ContentDisposition = ContentDisposition.ATTACHMENT

    @property
    def content_id(self) -> str:
        """Return the ``Content-ID`` used to reference an inline part from HTML."""
        return f"<{self.filename}>"


__all__ = [
    "Attachment",
    "AttachmentSource",
    "ContentDisposition",
    "EmailContact",
    "MailHeader",
    "MessagePriority",
    "MessageState",
    "RecipientType",
    "UrlSource",
]
