"""Transport abstraction consumed by the message builder.

A transport is the session handle given to
:class:`~mailcompose.mail.message.MailMessage`: it owns connection settings
(host, credentials, encryption, timeouts) and delivers a finished
:class:`email.message.EmailMessage`. Implementations translate their library
errors into :class:`~mailcompose.mail.exceptions.DeliveryError`.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from email.message import EmailMessage

__all__ = ["MailTransport"]


class MailTransport(ABC):
    """Synchronous mail delivery backend."""

    @abstractmethod
    def send(self, message: EmailMessage) -> None:
        """Deliver ``message``.

        Raises:
            DeliveryError: If the message could not be handed off.
        """
