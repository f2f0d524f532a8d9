"""mailcompose: build MIME e-mail messages and hand them to a transport.

Examples:
    >>> from mailcompose import MailMessage
    >>> from mailcompose.mail.transports import MemoryTransport
    >>> outbox = MemoryTransport()
    >>> _ = (
    ...     MailMessage(outbox)
    ...     .set_from("Ada", "ada@example.com")
    ...     .add_to("Bob", "bob@example.com")
    ...     .set_subject("Hello")
    ...     .set_text("Hi Bob")
    ...     .send()
    ... )
    >>> len(outbox.outbox)
    1
"""

from mailcompose.exceptions import MailcomposeError
from mailcompose.mail import (
    ContentDisposition,
    EmailContact,
    MailMessage,
    MessagePriority,
    RecipientType,
)
from mailcompose.meta import __app_name__, __author__, __license__, __version__

__all__ = [
    "ContentDisposition",
    "EmailContact",
    "MailMessage",
    "MailcomposeError",
    "MessagePriority",
    "RecipientType",
    "__app_name__",
    "__author__",
    "__license__",
    "__version__",
]
