"""Tests for the ``MailMessage`` builder."""

from __future__ import annotations

import io
from collections.abc import Callable
from datetime import datetime, timezone
from email import message_from_bytes, policy
from email.message import EmailMessage
from pathlib import Path
from smtplib import SMTPException

import httpx
import pytest

# pylint: disable=redefined-outer-name
from mailcompose.mail import (
    AddressError,
    Attachment,
    AttachmentError,
    BodyConstructionError,
    ContentDisposition,
    DeliveryError,
    EmailContact,
    FilesystemResourceProvider,
    HeaderEncodingError,
    MailConfigurationError,
    MailMessage,
    MessagePriority,
    MessageState,
    RecipientError,
    RecipientType,
)
from mailcompose.mail.transport import MailTransport
from mailcompose.mail.transports import MemoryTransport


class ExplodingTransport(MailTransport):
    """Transport double raising a library exception on send."""

    def __init__(self) -> None:
        self.attempts = 0

    def send(self, message: EmailMessage) -> None:
        """Raise SMTPException unconditionally."""
        self.attempts += 1
        raise SMTPException("connection refused")


class DeliveryErrorTransport(MailTransport):
    """Transport double raising ``DeliveryError`` on send."""

    def send(self, message: EmailMessage) -> None:
        """Raise DeliveryError unconditionally."""
        raise DeliveryError("boom")


def _content_types(message: EmailMessage) -> list[str]:
    return [part.get_content_type() for part in message.walk()]


def _root_parts(mail: MailMessage) -> list[EmailMessage]:
    return list(mail.message.get_payload())


class TestConstruction:
    """Defaults set when a builder is created."""

    def test_root_is_mixed_container(self, mail: MailMessage) -> None:
        """The message itself is an empty multipart/mixed container."""
        assert mail.message.get_content_type() == "multipart/mixed"
        assert _root_parts(mail) == []
        assert mail.message["MIME-Version"] == "1.0"
        assert mail.state is MessageState.UNFINALIZED

    def test_sets_date_and_message_id(self, mail: MailMessage) -> None:
        """Date and a bracketed unique Message-ID are set up front."""
        assert mail.message["Date"] is not None
        message_id = str(mail.message["Message-ID"])
        assert message_id.startswith("<") and message_id.endswith(">")
        assert "@" in message_id

    def test_message_ids_are_unique(self, outbox: MemoryTransport) -> None:
        """Two builders never share a Message-ID."""
        first = MailMessage(outbox).message["Message-ID"]
        second = MailMessage(outbox).message["Message-ID"]
        assert first != second

    def test_default_charset(self, mail: MailMessage) -> None:
        assert mail.charset == "UTF-8"

    def test_unknown_charset_is_rejected(self, outbox: MemoryTransport) -> None:
        with pytest.raises(MailConfigurationError):
            MailMessage(outbox, charset="no-such-charset")


class TestRecipients:
    """Sender and recipient handling."""

    @pytest.mark.parametrize(
        ("method", "recipient_type"),
        [("add_to", RecipientType.TO), ("add_cc", RecipientType.CC), ("add_bcc", RecipientType.BCC)],
        ids=["to", "cc", "bcc"],
    )
    def test_single_recipient_per_type(self, mail: MailMessage, method: str, recipient_type: RecipientType) -> None:
        """Each convenience method records exactly one recipient of its type."""
        getattr(mail, method)("Bob", "bob@example.com")

        message = mail.get_finalized_message()
        assert [a.addr_spec for a in mail.recipients(recipient_type)] == ["bob@example.com"]
        assert len(message[recipient_type.header].addresses) == 1
        for other in RecipientType:
            if other is not recipient_type:
                assert mail.recipients(other) == ()
                assert message[other.header] is None

    def test_recipients_accumulate_in_order(self, mail: MailMessage) -> None:
        mail.add_to("A", "a@example.com").add_to("B", "b@example.com")
        addresses = mail.message["To"].addresses
        assert [a.addr_spec for a in addresses] == ["a@example.com", "b@example.com"]
        assert addresses[0].display_name == "A"

    def test_batch_accepts_any_iterable(self, mail: MailMessage) -> None:
        contacts = (EmailContact(f"User {i}", f"user{i}@example.com") for i in range(3))
        mail.add_recipients(RecipientType.CC, contacts)
        assert len(mail.recipients(RecipientType.CC)) == 3

    def test_batch_is_atomic(self, mail: MailMessage) -> None:
        """A malformed contact in a batch fails loudly and adds nothing."""
        contacts = [EmailContact("Good", "good@example.com"), EmailContact("Bad", "not-an-address")]

        with pytest.raises(RecipientError) as exc_info:
            mail.add_recipients(RecipientType.TO, contacts)

        assert exc_info.value.recipient_type == "To"
        assert exc_info.value.address == "not-an-address"
        assert mail.recipients(RecipientType.TO) == ()
        assert mail.message["To"] is None

    def test_empty_batch_leaves_message_untouched(self, mail: MailMessage) -> None:
        mail.add_recipients(RecipientType.BCC, [])

        assert mail.message["Bcc"] is None
        assert "Bcc:" not in mail.message.as_string()

    @pytest.mark.parametrize("address", ["bad-email", "", "user@", "@example.com", "a@b.com\r\nBcc: x@y.z"])
    def test_invalid_recipient_raises(self, mail: MailMessage, address: str) -> None:
        with pytest.raises(RecipientError) as exc_info:
            mail.add_to("Someone", address)
        assert isinstance(exc_info.value, AddressError)
        assert isinstance(exc_info.value.__cause__, AddressError)

    def test_set_from(self, mail: MailMessage) -> None:
        mail.set_from("Ada", "ada@example.com")
        assert mail.message["From"] == "Ada <ada@example.com>"

    def test_set_from_contact_replaces_previous(self, mail: MailMessage) -> None:
        mail.set_from("Ada", "ada@example.com").set_from(EmailContact("Bob", "bob@example.com"))
        assert mail.message.get_all("From") == ["Bob <bob@example.com>"]

    def test_set_from_invalid_raises(self, mail: MailMessage) -> None:
        with pytest.raises(AddressError, match="From"):
            mail.set_from("Ada", "ada-at-example.com")

    def test_non_ascii_display_name(self, mail: MailMessage) -> None:
        mail.add_to("Zoë Ünïcode", "zoe@example.com")
        raw = mail.get_finalized_message().as_bytes()
        assert b"zoe@example.com" in raw
        reparsed = message_from_bytes(raw, policy=policy.default)
        assert reparsed["To"].addresses[0].display_name == "Zoë Ünïcode"


class TestHeaders:
    """Subject, custom headers, receipts and priority."""

    def test_subject(self, mail: MailMessage) -> None:
        mail.set_subject("Hi")
        assert mail.message["Subject"] == "Hi"

    def test_non_ascii_subject_is_encoded(self, mail: MailMessage) -> None:
        mail.set_subject("Grüße aus Köln")
        assert mail.message["Subject"] == "Grüße aus Köln"
        assert "=?utf-8?" in mail.message.as_string().lower()

    def test_subject_charset_reaches_output(self, mail: MailMessage) -> None:
        """The encoded word keeps the charset it was encoded with."""
        mail.set_subject("Café", charset="iso-8859-1")

        assert mail.message["Subject"] == "Café"
        assert "subject: =?iso-8859-1?q?caf=e9?=" in mail.message.as_string().lower()

    def test_builder_charset_applies_to_custom_headers(self, outbox: MemoryTransport) -> None:
        mail = MailMessage(outbox, charset="iso-8859-1").set_header("X-Comment", "café")

        assert mail.message["X-Comment"] == "café"
        assert "x-comment: =?iso-8859-1?" in mail.message.as_string().lower()

    def test_long_non_ascii_subject_folds(self, mail: MailMessage) -> None:
        subject = "Grüße aus Köln, " * 6 + "Ende"
        mail.set_subject(subject)

        headers = mail.message.as_string().split("\n\n", 1)[0]
        assert all(len(line) <= 78 for line in headers.splitlines())
        assert mail.message["Subject"] == subject

    def test_add_encoded_header_on_single_instance_header(self, mail: MailMessage) -> None:
        mail.set_subject("Première")
        with pytest.raises(HeaderEncodingError):
            mail.add_header("Subject", "Deuxième")
        assert mail.message.get_all("Subject") == ["Première"]

    def test_subject_with_unknown_charset(self, mail: MailMessage) -> None:
        with pytest.raises(HeaderEncodingError) as exc_info:
            mail.set_subject("Grüße", charset="no-such-charset")
        assert exc_info.value.header == "Subject"

    def test_subject_not_representable_in_charset(self, mail: MailMessage) -> None:
        with pytest.raises(HeaderEncodingError):
            mail.set_subject("漢字", charset="iso-8859-1")

    def test_set_header_replaces(self, mail: MailMessage) -> None:
        mail.set_header("X-Mailer", "one").set_header("X-Mailer", "two")
        assert mail.message.get_all("X-Mailer") == ["two"]

    def test_add_header_appends(self, mail: MailMessage) -> None:
        mail.add_header("X-Tag", "one").add_header("X-Tag", "two")
        assert mail.message.get_all("X-Tag") == ["one", "two"]

    def test_non_ascii_header_value(self, mail: MailMessage) -> None:
        mail.set_header("X-Comment", "café")
        assert mail.message["X-Comment"] == "café"

    @pytest.mark.parametrize("name", ["", "Bad Name", "Bad:Name", "Nämé"])
    def test_invalid_header_name(self, mail: MailMessage, name: str) -> None:
        with pytest.raises(HeaderEncodingError):
            mail.set_header(name, "value")

    def test_header_value_with_line_break(self, mail: MailMessage) -> None:
        with pytest.raises(HeaderEncodingError) as exc_info:
            mail.add_header("X-Injected", "value\r\nBcc: victim@example.com")
        assert exc_info.value.header == "X-Injected"

    def test_add_header_on_single_instance_header(self, mail: MailMessage) -> None:
        """Headers limited to one occurrence cannot be appended twice."""
        mail.set_subject("First")
        with pytest.raises(HeaderEncodingError):
            mail.add_header("Subject", "Second")

    def test_delivery_and_read_receipts(self, mail: MailMessage) -> None:
        mail.set_delivery_receipt("receipts@example.com").set_read_receipt("reader@example.com")
        assert mail.message["Return-Receipt-To"] == "<receipts@example.com>"
        assert mail.message["Disposition-Notification-To"] == "<reader@example.com>"

    def test_receipt_requires_valid_address(self, mail: MailMessage) -> None:
        with pytest.raises(AddressError):
            mail.set_read_receipt("nobody")

    def test_importance_high(self, mail: MailMessage) -> None:
        mail.set_importance(MessagePriority.HIGH)
        assert mail.message.get_all("X-Priority") == ["1"]
        assert mail.message.get_all("Priority") == ["urgent"]
        assert mail.message.get_all("Importance") == ["high"]

    def test_importance_replaces_previous_level(self, mail: MailMessage) -> None:
        mail.set_importance(MessagePriority.HIGH).set_importance(MessagePriority.LOW)
        assert mail.message.get_all("X-Priority") == ["5"]
        assert mail.message.get_all("Priority") == ["non-urgent"]
        assert mail.message.get_all("Importance") == ["low"]

    def test_set_message_id(self, mail: MailMessage) -> None:
        mail.set_message_id("<custom-id@example.com>")
        assert mail.message.get_all("Message-ID") == ["<custom-id@example.com>"]

    def test_set_message_id_rejects_line_breaks(self, mail: MailMessage) -> None:
        with pytest.raises(HeaderEncodingError):
            mail.set_message_id("<a@b>\r\nX-Evil: 1")

    def test_set_sent_date(self, mail: MailMessage) -> None:
        sent = datetime(2024, 5, 17, 9, 30, tzinfo=timezone.utc)
        mail.set_sent_date(sent)
        assert mail.message["Date"].datetime == sent
        assert len(mail.message.get_all("Date")) == 1


class TestBody:
    """Text, HTML and alternative body construction."""

    def test_set_text(self, mail: MailMessage) -> None:
        mail.set_text("Hello")
        parts = _root_parts(mail)
        assert len(parts) == 1
        assert parts[0].get_content_type() == "text/plain"
        assert parts[0].get_content_disposition() == "inline"
        assert parts[0].get_content_charset() == "utf-8"
        assert parts[0].get_content().strip() == "Hello"

    def test_set_html_nests_in_related(self, mail: MailMessage) -> None:
        mail.set_html("<p>Hello</p>")
        parts = _root_parts(mail)
        assert [p.get_content_type() for p in parts] == ["multipart/related"]
        html = parts[0].get_payload()[0]
        assert html.get_content_type() == "text/html"
        assert html.get_content_disposition() == "inline"
        assert "<p>Hello</p>" in html.get_content()

    def test_html_text_alt_orders_text_first(self, mail: MailMessage) -> None:
        mail.set_html_text_alt("<b>hi</b>", "hi")
        message = mail.get_finalized_message()

        related = message.get_payload()[0]
        assert related.get_content_type() == "multipart/related"
        alternative = related.get_payload()[0]
        assert alternative.get_content_type() == "multipart/alternative"
        assert [p.get_content_type() for p in alternative.get_payload()] == ["text/plain", "text/html"]

    def test_body_calls_are_additive(self, mail: MailMessage) -> None:
        """Each body call appends; nothing is replaced."""
        mail.set_text("plain").set_html("<p>html</p>")
        assert [p.get_content_type() for p in _root_parts(mail)] == ["text/plain", "multipart/related"]

    def test_html_calls_share_one_related_container(self, mail: MailMessage) -> None:
        mail.set_html("<p>one</p>").set_html("<p>two</p>")
        parts = _root_parts(mail)
        assert len(parts) == 1
        assert [p.get_content_type() for p in parts[0].get_payload()] == ["text/html", "text/html"]

    def test_text_not_encodable_in_charset(self, outbox: MemoryTransport) -> None:
        mail = MailMessage(outbox, charset="ascii")
        with pytest.raises(BodyConstructionError) as exc_info:
            mail.set_text("naïve")
        assert exc_info.value.subtype == "plain"

    def test_body_is_closed_after_finalize(self, mail: MailMessage) -> None:
        mail.set_text("Hello").finalize_message()
        with pytest.raises(BodyConstructionError):
            mail.set_html("<p>late</p>")

    def test_serialized_message_round_trips(self, mail: MailMessage) -> None:
        mail.set_from("A", "a@example.com").add_to("B", "b@example.com").set_html_text_alt("<b>hi</b>", "hi")
        reparsed = message_from_bytes(mail.get_finalized_message().as_bytes(), policy=policy.default)
        plain = reparsed.get_body(("plain",))
        html = reparsed.get_body(("html",))
        assert plain is not None and plain.get_content().strip() == "hi"
        assert html is not None and "<b>hi</b>" in html.get_content()


class TestAttachments:
    """Attachment registration and finalization."""

    def test_attachment_goes_to_root(self, mail: MailMessage) -> None:
        mail.set_text("Body").attach_bytes(b"a,b\n1,2\n", "data.csv")
        message = mail.get_finalized_message()

        parts = message.get_payload()
        assert [p.get_content_type() for p in parts] == ["text/plain", "text/csv"]
        attachment = parts[-1]
        assert attachment.get_content_disposition() == "attachment"
        assert attachment.get_filename() == "data.csv"
        assert attachment.get_payload(decode=True) == b"a,b\n1,2\n"

    def test_inline_goes_to_related_with_content_id(self, mail: MailMessage) -> None:
        mail.set_html('<img src="cid:logo.png">').attach_bytes(
            b"\x89PNG", "logo.png", disposition=ContentDisposition.INLINE
        )
        message = mail.get_finalized_message()

        root = message.get_payload()
        assert len(root) == 1
        related_parts = root[0].get_payload()
        assert [p.get_content_type() for p in related_parts] == ["text/html", "image/png"]
        inline = related_parts[1]
        assert inline.get_content_disposition() == "inline"
        assert inline["Content-ID"] == "<logo.png>"

    def test_inline_without_html_adds_related_container(self, mail: MailMessage) -> None:
        mail.set_text("Body").attach_bytes(b"img", "pic.png", disposition=ContentDisposition.INLINE)
        parts = mail.get_finalized_message().get_payload()
        assert [p.get_content_type() for p in parts] == ["text/plain", "multipart/related"]
        assert parts[1].get_payload()[0].get_filename() == "pic.png"

    def test_same_filename_last_write_wins(self, mail: MailMessage) -> None:
        mail.attach_bytes(b"first", "r.txt").attach_bytes(b"second", "r.txt")
        assert len(mail.attachments) == 1

        parts = [p for p in mail.get_finalized_message().iter_attachments()]
        assert len(parts) == 1
        assert parts[0].get_payload(decode=True) == b"second"

    def test_unsupported_disposition_fails(self, mail: MailMessage) -> None:
        mail.set_text("Body")
        mail.add_attachment(Attachment(b"x", "x.bin", "application/octet-stream", "form-data"))  # type: ignore[arg-type]
        before = _content_types(mail.message)

        with pytest.raises(AttachmentError) as exc_info:
            mail.finalize_message()

        assert exc_info.value.filename == "x.bin"
        assert _content_types(mail.message) == before
        assert mail.state is MessageState.UNFINALIZED

    def test_finalize_without_attachments_keeps_tree(self, mail: MailMessage) -> None:
        mail.set_text("plain").set_html_text_alt("<b>hi</b>", "hi")
        before = _content_types(mail.message)
        mail.finalize_message()
        assert _content_types(mail.message) == before

    def test_finalize_twice_does_not_duplicate(self, mail: MailMessage) -> None:
        mail.set_html("<p>x</p>")
        mail.attach_bytes(b"a", "a.txt").attach_bytes(b"b", "b.png", disposition=ContentDisposition.INLINE)
        mail.finalize_message()
        after_first = _content_types(mail.message)

        mail.finalize_message()
        mail.get_finalized_message()

        assert _content_types(mail.message) == after_first
        assert mail.state is MessageState.FINALIZED

    def test_attach_after_finalize_raises(self, mail: MailMessage) -> None:
        mail.finalize_message()
        with pytest.raises(AttachmentError, match="finalized"):
            mail.attach_bytes(b"late", "late.txt")

    def test_attach_file(self, mail: MailMessage, write_file: Callable[[str, bytes], Path]) -> None:
        path = write_file("report.txt", b"payload")
        mail.attach_file(path)

        attachment = mail.attachments["report.txt"]
        assert attachment.mime_type == "text/plain"
        assert attachment.disposition is ContentDisposition.ATTACHMENT
        part = next(mail.get_finalized_message().iter_attachments())
        assert part.get_payload(decode=True) == b"payload"

    def test_attach_file_with_display_name(self, mail: MailMessage, write_file: Callable[[str, bytes], Path]) -> None:
        path = write_file("tmp-1234.pdf", b"%PDF")
        mail.attach_file(path, "invoice.pdf")
        assert list(mail.attachments) == ["invoice.pdf"]
        assert mail.attachments["invoice.pdf"].mime_type == "application/pdf"

    def test_attach_file_without_extension_is_octet_stream(
        self, mail: MailMessage, write_file: Callable[[str, bytes], Path]
    ) -> None:
        mail.attach_file(write_file("blob", b"\x00\x01"))
        part = next(mail.get_finalized_message().iter_attachments())
        assert part.get_content_type() == "application/octet-stream"

    def test_attach_missing_file(self, mail: MailMessage, tmp_path: Path) -> None:
        with pytest.raises(AttachmentError) as exc_info:
            mail.attach_file(tmp_path / "missing.txt")
        assert exc_info.value.filename == "missing.txt"

    def test_attach_stream_reads_and_closes(self, mail: MailMessage) -> None:
        stream = io.BytesIO(b"streamed")
        mail.attach_stream(stream, "s.bin")
        assert stream.closed
        assert mail.attachments["s.bin"].source == b"streamed"

    def test_attach_resource_without_provider(self, mail: MailMessage) -> None:
        with pytest.raises(AttachmentError):
            mail.attach_resource("logo.png")

    def test_attach_resource(self, outbox: MemoryTransport, tmp_path: Path) -> None:
        assets = tmp_path / "assets"
        assets.mkdir()
        (assets / "logo.png").write_bytes(b"png-bytes")
        mail = MailMessage(outbox, resources=FilesystemResourceProvider(assets))

        mail.set_html('<img src="cid:logo.png">').attach_resource("logo.png", disposition=ContentDisposition.INLINE)

        related = mail.get_finalized_message().get_payload()[0]
        inline = related.get_payload()[1]
        assert inline.get_content_type() == "image/png"
        assert inline.get_payload(decode=True) == b"png-bytes"

    def test_attach_missing_resource(self, outbox: MemoryTransport, tmp_path: Path) -> None:
        mail = MailMessage(outbox, resources=FilesystemResourceProvider(tmp_path))
        with pytest.raises(AttachmentError) as exc_info:
            mail.attach_resource("nope.pdf", mime_type="application/pdf")
        assert exc_info.value.filename == "nope.pdf"


class TestUrlAttachments:
    """Attachments downloaded with httpx at finalization."""

    @staticmethod
    def _client() -> httpx.Client:
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == "/missing":
                return httpx.Response(404)
            return httpx.Response(200, content=b"%PDF-1.7", headers={"content-type": "application/pdf"})

        return httpx.Client(transport=httpx.MockTransport(handler))

    def test_url_content_fetched_on_finalize(self, outbox: MemoryTransport) -> None:
        mail = MailMessage(outbox, http_client=self._client())
        mail.attach_url("https://files.example.com/doc", "doc")

        part = next(mail.get_finalized_message().iter_attachments())
        assert part.get_content_type() == "application/pdf"
        assert part.get_payload(decode=True) == b"%PDF-1.7"

    def test_explicit_mime_type_is_kept(self, outbox: MemoryTransport) -> None:
        mail = MailMessage(outbox, http_client=self._client())
        mail.attach_url("https://files.example.com/doc", "doc.bin", mime_type="application/x-custom")
        part = next(mail.get_finalized_message().iter_attachments())
        assert part.get_content_type() == "application/x-custom"

    def test_failed_download_raises(self, outbox: MemoryTransport) -> None:
        mail = MailMessage(outbox, http_client=self._client())
        mail.attach_url("https://files.example.com/missing", "gone.pdf")

        with pytest.raises(AttachmentError) as exc_info:
            mail.finalize_message()
        assert exc_info.value.filename == "gone.pdf"
        assert isinstance(exc_info.value.__cause__, httpx.HTTPStatusError)

    @pytest.mark.parametrize("url", ["ftp://files.example.com/a.txt", "not a url", "/relative/path"])
    def test_unsupported_url(self, mail: MailMessage, url: str) -> None:
        with pytest.raises(AttachmentError):
            mail.attach_url(url, "a.txt")


class TestSend:
    """Delivery through the transport."""

    def test_send_hands_message_to_transport(self, mail: MailMessage, outbox: MemoryTransport) -> None:
        mail.set_from("A", "a@example.com").add_to("B", "b@example.com").set_text("Body")
        sent = mail.send()
        assert outbox.outbox == [sent]
        assert mail.state is MessageState.SENT

    def test_send_finalizes_attachments(self, mail: MailMessage, outbox: MemoryTransport) -> None:
        mail.set_text("Body").attach_bytes(b"x", "x.txt")
        mail.send()
        assert [p.get_filename() for p in outbox.outbox[0].iter_attachments()] == ["x.txt"]

    def test_second_send_raises(self, mail: MailMessage, outbox: MemoryTransport) -> None:
        mail.set_text("Body").send()
        with pytest.raises(DeliveryError, match="already been sent"):
            mail.send()
        assert len(outbox.outbox) == 1

    def test_library_errors_are_wrapped(self) -> None:
        transport = ExplodingTransport()
        mail = MailMessage(transport).set_text("Body")

        with pytest.raises(DeliveryError) as exc_info:
            mail.send()

        assert isinstance(exc_info.value.__cause__, SMTPException)
        assert mail.state is MessageState.FINALIZED

        with pytest.raises(DeliveryError):
            mail.send()
        assert transport.attempts == 2

    def test_delivery_errors_propagate_unchanged(self) -> None:
        mail = MailMessage(DeliveryErrorTransport()).set_text("Body")
        with pytest.raises(DeliveryError, match="boom"):
            mail.send()


def test_end_to_end_scenario(mail: MailMessage, write_file: Callable[[str, bytes], Path]) -> None:
    """Sender, recipient, subject, alternative body and one attachment."""
    report = write_file("r.txt", b"report")
    mail.set_from("A", "a@x.com")
    mail.add_to("B", "b@x.com")
    mail.set_subject("Hi")
    mail.set_html_text_alt("<b>hi</b>", "hi")
    mail.attach_file(report, "r.txt", disposition=ContentDisposition.ATTACHMENT)

    message = mail.get_finalized_message()

    assert [a.addr_spec for a in message["To"].addresses] == ["b@x.com"]
    assert message["Subject"] == "Hi"

    root = message.get_payload()
    assert [p.get_content_type() for p in root] == ["multipart/related", "text/plain"]
    related, attachment = root
    alternative = related.get_payload()[0]
    assert alternative.get_content_type() == "multipart/alternative"
    assert [p.get_content_type() for p in alternative.get_payload()] == ["text/plain", "text/html"]
    assert attachment.get_filename() == "r.txt"
    assert attachment.get_content_disposition() == "attachment"
