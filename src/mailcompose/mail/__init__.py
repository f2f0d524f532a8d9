"""MIME message composition and delivery.

Build a message with :class:`MailMessage`, then either inspect it with
:meth:`MailMessage.get_finalized_message` or deliver it with
:meth:`MailMessage.send` through a :class:`MailTransport`.

Examples:
    >>> from mailcompose.mail import MailMessage, MessagePriority
    >>> from mailcompose.mail.transports import SMTPTransport
    >>> transport = SMTPTransport("smtp.example.com")
    >>> mail = (
    ...     MailMessage(transport)
    ...     .set_from("Reports", "reports@example.com")
    ...     .add_to("Ops", "ops@example.com")
    ...     .set_subject("Nightly report")
    ...     .set_importance(MessagePriority.HIGH)
    ...     .set_html_text_alt("<p>All green</p>", "All green")
    ... )
    >>> mail.send()  # doctest: +SKIP
"""

from mailcompose.mail.exceptions import (
    AddressError,
    AttachmentError,
    BodyConstructionError,
    DeliveryError,
    HeaderEncodingError,
    MailConfigurationError,
    MailError,
    RecipientError,
)
from mailcompose.mail.message import DEFAULT_CHARSET, MailMessage
from mailcompose.mail.models import (
    Attachment,
    ContentDisposition,
    EmailContact,
    MailHeader,
    MessagePriority,
    MessageState,
    RecipientType,
    UrlSource,
)
from mailcompose.mail.resources import (
    FilesystemResourceProvider,
    PackageResourceProvider,
    ResourceProvider,
)
from mailcompose.mail.transport import MailTransport
from mailcompose.mail.utils import generate_message_id

__all__ = [
    "DEFAULT_CHARSET",
    "AddressError",
    "Attachment",
    "AttachmentError",
    "BodyConstructionError",
    "ContentDisposition",
    "DeliveryError",
    "EmailContact",
    "FilesystemResourceProvider",
    "HeaderEncodingError",
    "MailConfigurationError",
    "MailError",
    "MailHeader",
    "MailMessage",
    "MailTransport",
    "MessagePriority",
    "MessageState",
    "PackageResourceProvider",
    "RecipientError",
    "RecipientType",
    "ResourceProvider",
    "UrlSource",
    "generate_message_id",
]
