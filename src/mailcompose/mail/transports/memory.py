"""In-memory transport that records messages instead of delivering them."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from mailcompose.mail.transport import MailTransport

if TYPE_CHECKING:
    from email.message import EmailMessage

__all__ = ["MemoryTransport"]

log = logging.getLogger(__name__)


class MemoryTransport(MailTransport):
    """Keep sent messages in a list, for tests and dry runs.

    Examples:
        >>> transport = MemoryTransport()
        >>> transport.outbox
        []
    """

    def __init__(self) -> None:
        self.outbox: list[EmailMessage] = []

    def send(self, message: EmailMessage) -> None:
        self.outbox.append(message)
        log.debug("Captured message %s (%d in outbox)", message.get("Message-ID"), len(self.outbox))

    def clear(self) -> None:
        """Empty the outbox."""
        self.outbox.clear()
