"""MIME message builder.

:class:`MailMessage` assembles a ``multipart/mixed`` message incrementally and
hands it to a :class:`~mailcompose.mail.transport.MailTransport`. The body
tree it produces is::

    multipart/mixed                  (root, the message itself)
    ├── text/plain                   set_text()
    ├── multipart/related            set_html() / set_html_text_alt()
    │   ├── text/html                set_html()
    │   ├── multipart/alternative    set_html_text_alt()
    │   │   ├── text/plain
    │   │   └── text/html
    │   └── <inline attachments>     finalize_message()
    └── <attachments>                finalize_message()

Attachments are collected by file name and only turned into MIME parts by
:meth:`MailMessage.finalize_message`, which runs at most once.

Examples:
    >>> from mailcompose.mail.transports import MemoryTransport
    >>> mail = MailMessage(MemoryTransport())
    >>> _ = mail.set_from("Ada", "ada@example.com").add_to("Bob", "bob@example.com")
    >>> _ = mail.set_subject("Hi").set_html_text_alt("<b>hi</b>", "hi")
    >>> mail.get_finalized_message()["Subject"]
    'Hi'
"""

from __future__ import annotations

import codecs
import logging
import re
from collections.abc import Iterable, Mapping
from datetime import datetime
from email import policy
from email.errors import HeaderParseError
from email.headerregistry import Address
from email.message import EmailMessage, MIMEPart
from pathlib import Path
from types import MappingProxyType
from typing import Any, BinaryIO

import httpx

from mailcompose.config import get_config
from mailcompose.logging import TRACE_LEVEL
from mailcompose.mail.exceptions import (
    AddressError,
    AttachmentError,
    BodyConstructionError,
    DeliveryError,
    HeaderEncodingError,
    MailConfigurationError,
    RecipientError,
)
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
from mailcompose.mail.resources import FilesystemResourceProvider, ResourceProvider
from mailcompose.mail.transport import MailTransport
from mailcompose.mail.utils import (
    DEFAULT_MIME_TYPE,
    encode_header_value,
    generate_message_id,
    guess_mime_type,
    to_address,
    to_addresses,
)

__all__ = ["DEFAULT_CHARSET", "MailMessage"]

log = logging.getLogger(__name__)

DEFAULT_CHARSET = "UTF-8"
DEFAULT_URL_TIMEOUT = 30.0

# RFC 5322 field name: printable ASCII except colon and space
_HEADER_NAME_PATTERN = re.compile(r"^[!-9;-~]+$")


class MailMessage:
    """Incremental builder for a MIME e-mail message.

    Mutators return the builder so calls can be chained. The builder is not
    thread-safe; use one instance per message.

    Args:
        session: Transport used by :meth:`send`.
        resources: Provider used by :meth:`attach_resource`.
        charset: Charset of text/HTML parts and encoded headers.
        http_client: Client used to fetch URL attachments. A short-lived
            client is created per fetch when omitted.

    Raises:
        MailConfigurationError: If ``charset`` is not a known codec.
    """

    def __init__(
        self,
        session: MailTransport,
        *,
        resources: ResourceProvider | None = None,
        charset: str = DEFAULT_CHARSET,
        http_client: httpx.Client | None = None,
    ) -> None:
        try:
            codecs.lookup(charset)
        except LookupError as e:
            raise MailConfigurationError(f"Unknown charset: {charset}") from e

        self._session = session
        self._resources = resources
        self._charset = charset
        self._http_client = http_client
        self._message = EmailMessage(policy=policy.default)
        self._related = self._new_container("related")
        self._related_attached = False
        self._attachments: dict[str, Attachment] = {}
        self._recipients: dict[RecipientType, list[Address]] = {kind: [] for kind in RecipientType}
        self._state = MessageState.UNFINALIZED

        self.set_sent_date(datetime.now().astimezone())
        self.set_message_id(generate_message_id())
        self._message["MIME-Version"] = "1.0"
        self._message.make_mixed()

    @classmethod
    def from_config(
        cls,
        session: MailTransport,
        config: Mapping[str, Any] | None = None,
        *,
        http_client: httpx.Client | None = None,
    ) -> MailMessage:
        """Build a message using the ``mail`` configuration section.

        ``mail.charset`` selects the charset and ``mail.resources.root``, when
        set, backs :meth:`attach_resource` with a filesystem provider.

        Args:
            session: Transport used by :meth:`send`.
            config: The ``mail`` mapping. Defaults to the loaded configuration.
            http_client: Client used to fetch URL attachments.
        """
        if config is None:
            config = get_config().get("mail") or {}
        resources_section = config.get("resources") or {}
        resources = FilesystemResourceProvider.from_config(config) if resources_section.get("root") else None
        return cls(
            session,
            resources=resources,
            charset=str(config.get("charset") or DEFAULT_CHARSET),
            http_client=http_client,
        )

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def session(self) -> MailTransport:
        return self._session

    @property
    def charset(self) -> str:
        return self._charset

    @property
    def state(self) -> MessageState:
        """Return the current lifecycle state."""
        return self._state

    @property
    def message(self) -> EmailMessage:
        """Return the underlying message without finalizing it."""
        return self._message

    @property
    def attachments(self) -> Mapping[str, Attachment]:
        """Return a read-only view of registered attachments keyed by file name."""
        return MappingProxyType(self._attachments)

    def recipients(self, recipient_type: RecipientType) -> tuple[Address, ...]:
        """Return the addresses recorded for ``recipient_type`` in insertion order."""
        return tuple(self._recipients[recipient_type])

    # ------------------------------------------------------------------
    # Recipients and sender
    # ------------------------------------------------------------------

    def add_recipient(self, recipient_type: RecipientType, contact: EmailContact) -> MailMessage:
        """Append one recipient of the given type.

        Raises:
            RecipientError: If the contact is malformed.
        """
        address = self._recipient_address(recipient_type, contact)
        self._recipients[recipient_type].append(address)
        self._write_recipients(recipient_type)
        log.debug("Added %s recipient %s", recipient_type.header, address.addr_spec)
        return self

    def add_recipients(self, recipient_type: RecipientType, contacts: Iterable[EmailContact]) -> MailMessage:
        """Append several recipients, all or none.

        Every contact is validated before the message is touched, so a single
        malformed contact leaves the recipient list unchanged.

        An empty iterable leaves the message untouched.

        Raises:
            RecipientError: If any contact is malformed.
        """
        try:
            addresses = to_addresses(contacts)
        except AddressError as e:
            raise RecipientError(
                f"Unable to add {recipient_type.header} recipients: {e.message}",
                recipient_type=recipient_type.header,
                address=e.address,
            ) from e
        if not addresses:
            return self
        self._recipients[recipient_type].extend(addresses)
        self._write_recipients(recipient_type)
        log.debug("Added %d %s recipient(s)", len(addresses), recipient_type.header)
        return self

    def add_to(self, name: str, address: str) -> MailMessage:
        return self.add_recipient(RecipientType.TO, EmailContact(name, address))

    def add_cc(self, name: str, address: str) -> MailMessage:
        return self.add_recipient(RecipientType.CC, EmailContact(name, address))

    def add_bcc(self, name: str, address: str) -> MailMessage:
        return self.add_recipient(RecipientType.BCC, EmailContact(name, address))

    def set_from(self, name: str | EmailContact, address: str | None = None) -> MailMessage:
        """Set the sender from a contact or a ``(name, address)`` pair.

        Raises:
            AddressError: If the address is malformed.
        """
        contact = name if isinstance(name, EmailContact) else EmailContact(name, address or "")
        try:
            sender = to_address(contact)
        except AddressError as e:
            raise AddressError(f"Unable to set From address {contact}: {e.message}", address=contact.address) from e
        del self._message["From"]
        self._message["From"] = sender
        return self

    @staticmethod
    def _recipient_address(recipient_type: RecipientType, contact: EmailContact) -> Address:
        try:
            return to_address(contact)
        except AddressError as e:
            raise RecipientError(
                f"Unable to add {recipient_type.header} recipient {contact}: {e.message}",
                recipient_type=recipient_type.header,
                address=contact.address,
            ) from e

    def _write_recipients(self, recipient_type: RecipientType) -> None:
        del self._message[recipient_type.header]
        self._message[recipient_type.header] = self._recipients[recipient_type]

    # ------------------------------------------------------------------
    # Headers
    # ------------------------------------------------------------------

    def set_subject(self, value: str, charset: str = DEFAULT_CHARSET) -> MailMessage:
        """Set the subject, MIME-encoding it with ``charset`` when needed.

        Raises:
            HeaderEncodingError: If the value cannot be encoded in ``charset``.
        """
        self._store_header("Subject", value, charset, replace=True)
        return self

    def set_sent_date(self, date: datetime) -> MailMessage:
        """Set the ``Date`` header. Naive datetimes are taken as local time."""
        if date.tzinfo is None:
            date = date.astimezone()
        del self._message["Date"]
        self._message["Date"] = date
        return self

    def set_message_id(self, message_id: str) -> MailMessage:
        """Set the ``Message-ID`` header.

        Raises:
            HeaderEncodingError: If the identifier is not a valid msg-id.
        """
        if not message_id or any(char in message_id for char in "\r\n"):
            raise HeaderEncodingError("Message-ID", message_id, "empty value or line break")
        del self._message["Message-ID"]
        try:
            self._message["Message-ID"] = message_id
        except (HeaderParseError, ValueError, TypeError) as e:
            raise HeaderEncodingError("Message-ID", message_id, str(e)) from e
        return self

    def set_header(self, name: str, value: str) -> MailMessage:
        """Replace every ``name`` header with a single MIME-encoded value.

        Raises:
            HeaderEncodingError: If the name is invalid or the value cannot be encoded.
        """
        self._store_header(name, value, self._charset, replace=True)
        return self

    def add_header(self, name: str, value: str) -> MailMessage:
        """Append a ``name`` header, keeping existing ones.

        Raises:
            HeaderEncodingError: If the name is invalid, the value cannot be
                encoded, or the header may only appear once.
        """
        self._store_header(name, value, self._charset, replace=False)
        return self

    def set_delivery_receipt(self, address: str) -> MailMessage:
        """Request a delivery receipt sent to ``address``."""
        return self._set_receipt(MailHeader.DELIVERY_RECEIPT, address)

    def set_read_receipt(self, address: str) -> MailMessage:
        """Request a read receipt sent to ``address``."""
        return self._set_receipt(MailHeader.READ_RECEIPT, address)

    def set_importance(self, priority: MessagePriority) -> MailMessage:
        """Set ``X-Priority``, ``Priority`` and ``Importance`` for ``priority``."""
        for name, value in priority.headers().items():
            self.set_header(name, value)
        return self

    def _set_receipt(self, header: MailHeader, address: str) -> MailMessage:
        receipt = to_address(EmailContact("", address))
        return self.set_header(header.value, f"<{receipt.addr_spec}>")

    def _store_header(self, name: str, value: str, charset: str, *, replace: bool) -> None:
        if not name or not _HEADER_NAME_PATTERN.match(name):
            raise HeaderEncodingError(name, value, "invalid header name")
        if any(char in value for char in "\r\n"):
            raise HeaderEncodingError(name, value, "line break in header value")
        try:
            encoded = encode_header_value(value, charset, header_name=name)
        except (LookupError, UnicodeError) as e:
            raise HeaderEncodingError(name, value, f"cannot encode with charset {charset}: {e}") from e
        try:
            if replace:
                del self._message[name]
            if encoded == value:
                self._message[name] = value
            else:
                self._store_encoded_header(name, encoded)
        except (HeaderParseError, ValueError, TypeError) as e:
            raise HeaderEncodingError(name, value, str(e)) from e
        if log.isEnabledFor(TRACE_LEVEL):
            log.log(TRACE_LEVEL, "%s header %s: %r", "Set" if replace else "Added", name, encoded)

    def _store_encoded_header(self, name: str, encoded: str) -> None:
        # Raw value, so the encoded words keep their charset when folded.
        max_count = self._message.policy.header_max_count(name)
        if max_count and len(self._message.get_all(name, [])) >= max_count:
            raise ValueError(f"There may be at most {max_count} {name} headers in a message")
        self._message.policy.header_factory(name, encoded)
        self._message.set_raw(name, encoded)

    # ------------------------------------------------------------------
    # Body
    # ------------------------------------------------------------------

    def set_text(self, text: str) -> MailMessage:
        """Append an inline ``text/plain`` part to the root container."""
        self._ensure_body_open("plain")
        self._message.attach(self._build_text_part(text, "plain"))
        log.debug("Added text/plain body part")
        return self

    def set_html(self, html: str) -> MailMessage:
        """Append an inline ``text/html`` part inside the related container.

        Repeated :meth:`set_html` and :meth:`set_html_text_alt` calls share a
        single ``multipart/related`` part in the root.
        """
        self._ensure_body_open("html")
        self._related.attach(self._build_text_part(html, "html"))
        self._attach_related()
        log.debug("Added text/html body part")
        return self

    def set_html_text_alt(self, html: str, text: str) -> MailMessage:
        """Append an ``alternative`` container (text first, then HTML) inside related.

        Text must come first: clients render the last alternative they
        support, and text-only clients fall back to the first. The container
        joins the same ``multipart/related`` part as :meth:`set_html`.
        """
        self._ensure_body_open("alternative")
        alternative = self._new_container("alternative")
        alternative.attach(self._build_text_part(text, "plain"))
        alternative.attach(self._build_text_part(html, "html"))
        self._related.attach(alternative)
        self._attach_related()
        log.debug("Added multipart/alternative body (text + html)")
        return self

    def _ensure_body_open(self, subtype: str) -> None:
        if self._state is not MessageState.UNFINALIZED:
            raise BodyConstructionError(f"Cannot change the body of a {self._state.value} message", subtype=subtype)

    def _new_container(self, subtype: str) -> MIMEPart:
        container = MIMEPart(policy=self._message.policy)
        if subtype == "related":
            container.make_related()
        elif subtype == "alternative":
            container.make_alternative()
        else:
            container.make_mixed()
        return container

    def _attach_related(self) -> None:
        if not self._related_attached:
            self._message.attach(self._related)
            self._related_attached = True

    def _build_text_part(self, content: str, subtype: str) -> MIMEPart:
        part = MIMEPart(policy=self._message.policy)
        try:
            part.set_content(content, subtype=subtype, charset=self._charset, disposition="inline")
        except (LookupError, UnicodeError, ValueError, TypeError) as e:
            raise BodyConstructionError(f"Unable to build text/{subtype} body part: {e}", subtype=subtype) from e
        return part

    # ------------------------------------------------------------------
    # Attachments
    # ------------------------------------------------------------------

    def add_attachment(self, attachment: Attachment) -> MailMessage:
        """Register ``attachment``, replacing any attachment with the same file name.

        Raises:
            AttachmentError: If the message is already finalized.
        """
        if self._state is not MessageState.UNFINALIZED:
            raise AttachmentError(
                f"Cannot add attachment {attachment.filename}: message is {self._state.value}",
                filename=attachment.filename,
            )
        if attachment.filename in self._attachments:
            log.debug("Replacing attachment %s", attachment.filename)
        self._attachments[attachment.filename] = attachment
        return self

    def attach_file(
        self,
        path: str | Path,
        filename: str | None = None,
        *,
        mime_type: str | None = None,
        disposition: ContentDisposition = ContentDisposition.ATTACHMENT,
    ) -> MailMessage:
        """Attach a file, read when the message is finalized.

        Raises:
            AttachmentError: If ``path`` is not an existing file.
        """
        file_path = Path(path)
        name = filename or file_path.name
        if not file_path.is_file():
            raise AttachmentError(f"Attachment file not found: {file_path}", filename=name)
        return self.add_attachment(Attachment(file_path, name, mime_type or guess_mime_type(name), disposition))

    def attach_bytes(
        self,
        data: bytes,
        filename: str,
        *,
        mime_type: str | None = None,
        disposition: ContentDisposition = ContentDisposition.ATTACHMENT,
    ) -> MailMessage:
        return self.add_attachment(Attachment(bytes(data), filename, mime_type or guess_mime_type(filename), disposition))

    def attach_stream(
        self,
        stream: BinaryIO,
        filename: str,
        *,
        mime_type: str | None = None,
        disposition: ContentDisposition = ContentDisposition.ATTACHMENT,
    ) -> MailMessage:
        """Attach the remaining content of ``stream``; the stream is read and closed now.

        Raises:
            AttachmentError: If the stream cannot be read.
        """
        try:
            with stream:
                data = stream.read()
        except OSError as e:
            raise AttachmentError(f"Unable to read stream for attachment {filename}: {e}", filename=filename) from e
        return self.attach_bytes(data, filename, mime_type=mime_type, disposition=disposition)

    def attach_resource(
        self,
        name: str,
        *,
        mime_type: str | None = None,
        disposition: ContentDisposition = ContentDisposition.ATTACHMENT,
    ) -> MailMessage:
        """Attach a named resource loaded through the resource provider.

        Raises:
            AttachmentError: If no provider is configured or it has no stream for ``name``.
        """
        if self._resources is None:
            raise AttachmentError(f"No resource provider configured to load {name}", filename=name)
        stream = self._resources.load_resource_stream(name)
        if stream is None:
            raise AttachmentError(f"Resource stream was empty for file name: {name}", filename=name)
        return self.attach_stream(stream, name, mime_type=mime_type, disposition=disposition)

    def attach_url(
        self,
        url: str,
        filename: str,
        *,
        mime_type: str | None = None,
        disposition: ContentDisposition = ContentDisposition.ATTACHMENT,
    ) -> MailMessage:
        """Attach remote content, downloaded when the message is finalized.

        Without ``mime_type`` the type is guessed from ``filename``, then
        taken from the response ``Content-Type`` if the guess is generic.

        Raises:
            AttachmentError: If ``url`` is not an absolute http(s) URL.
        """
        try:
            parsed = httpx.URL(url)
        except httpx.InvalidURL as e:
            raise AttachmentError(f"Invalid attachment URL {url!r}: {e}", filename=filename) from e
        if parsed.scheme not in ("http", "https") or not parsed.host:
            raise AttachmentError(f"Unsupported attachment URL {url!r}", filename=filename)
        return self.add_attachment(
            Attachment(UrlSource(str(parsed)), filename, mime_type or guess_mime_type(filename), disposition)
        )

    def _read_content(self, attachment: Attachment) -> tuple[bytes, str]:
        source = attachment.source
        if isinstance(source, bytes):
            return source, attachment.mime_type
        if isinstance(source, Path):
            try:
                return source.read_bytes(), attachment.mime_type
            except OSError as e:
                raise AttachmentError(
                    f"Unable to read attachment {attachment.filename} from {source}: {e}",
                    filename=attachment.filename,
                ) from e
        if isinstance(source, UrlSource):
            return self._fetch_url(source.url, attachment)
        raise AttachmentError(
            f"Unsupported content source {type(source).__name__} for attachment {attachment.filename}",
            filename=attachment.filename,
        )

    def _fetch_url(self, url: str, attachment: Attachment) -> tuple[bytes, str]:
        try:
            if self._http_client is not None:
                response = self._http_client.get(url, follow_redirects=True)
            else:
                response = httpx.get(url, timeout=DEFAULT_URL_TIMEOUT, follow_redirects=True)
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise AttachmentError(
                f"Unable to download attachment {attachment.filename} from {url}: {e}",
                filename=attachment.filename,
            ) from e
        mime_type = attachment.mime_type
        if mime_type == DEFAULT_MIME_TYPE:
            mime_type = response.headers.get("content-type", mime_type).split(";")[0].strip() or mime_type
        log.debug("Downloaded %d bytes for attachment %s", len(response.content), attachment.filename)
        return response.content, mime_type

    def _build_attachment_part(self, attachment: Attachment, disposition: ContentDisposition) -> MIMEPart:
        data, mime_type = self._read_content(attachment)
        maintype, _, subtype = mime_type.partition("/")
        if not maintype or not subtype or maintype == "multipart":
            maintype, subtype = DEFAULT_MIME_TYPE.split("/")
        part = MIMEPart(policy=self._message.policy)
        try:
            part.set_content(
                data,
                maintype,
                subtype,
                disposition=disposition.value,
                filename=attachment.filename,
                cid=attachment.content_id if disposition is ContentDisposition.INLINE else None,
            )
        except (ValueError, TypeError) as e:
            raise AttachmentError(
                f"Unable to build MIME part for attachment {attachment.filename}: {e}",
                filename=attachment.filename,
            ) from e
        return part

    @staticmethod
    def _placement(attachment: Attachment) -> ContentDisposition:
        try:
            return ContentDisposition(attachment.disposition)
        except ValueError as e:
            raise AttachmentError(
                f"Unsupported content disposition {attachment.disposition!r} for attachment {attachment.filename}",
                filename=attachment.filename,
            ) from e

    # ------------------------------------------------------------------
    # Finalization and delivery
    # ------------------------------------------------------------------

    def finalize_message(self) -> None:
        """Materialize registered attachments into the body tree.

        Standard attachments go to the root container, inline ones to the
        related container. Runs once: later calls do nothing. If any
        attachment fails, the body tree is left untouched.

        Raises:
            AttachmentError: If an attachment has an unsupported disposition
                or its content cannot be read.
        """
        if self._state is not MessageState.UNFINALIZED:
            log.debug("Message %s already finalized", self._message["Message-ID"])
            return

        standard: list[MIMEPart] = []
        inline: list[MIMEPart] = []
        for attachment in self._attachments.values():
            disposition = self._placement(attachment)
            part = self._build_attachment_part(attachment, disposition)
            if disposition is ContentDisposition.INLINE:
                inline.append(part)
            else:
                standard.append(part)

        if inline:
            self._attach_related()
        for part in inline:
            self._related.attach(part)
        for part in standard:
            self._message.attach(part)

        self._state = MessageState.FINALIZED
        log.debug(
            "Finalized message %s (%d attachment(s), %d inline)",
            self._message["Message-ID"],
            len(standard),
            len(inline),
        )

    def get_finalized_message(self) -> EmailMessage:
        """Finalize and return the underlying message."""
        self.finalize_message()
        return self._message

    def send(self) -> EmailMessage:
        """Finalize the message and hand it to the transport.

        Returns:
            The delivered message.

        Raises:
            AttachmentError: If finalization fails.
            DeliveryError: If the message was already sent or the transport fails.
        """
        if self._state is MessageState.SENT:
            raise DeliveryError(f"Message {self._message['Message-ID']} has already been sent")
        self.finalize_message()
        try:
            self._session.send(self._message)
        except DeliveryError:
            log.error("Message %s send failed", self._message["Message-ID"])
            raise
        except Exception as e:  # pylint: disable=broad-exception-caught
            raise DeliveryError(f"Message send failed: {e}") from e
        self._state = MessageState.SENT
        log.info(
            "Message %s sent to %d recipient(s)",
            self._message["Message-ID"],
            sum(len(addresses) for addresses in self._recipients.values()),
        )
        return self._message
