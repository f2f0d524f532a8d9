"""Demonstrate attachments and inline resources with :class:`MailMessage`."""

from __future__ import annotations

from base64 import b64decode
from pathlib import Path
from tempfile import TemporaryDirectory

from mailcompose.mail import ContentDisposition, FilesystemResourceProvider, MailMessage
from mailcompose.mail.transports import MemoryTransport

_LOGO_BASE64 = "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAQAAAC1HAwCAAAAC0lEQVR42mP8/x8AAusB9Y9dOAoAAAAASUVORK5CYII="


def build_message_with_attachments() -> None:
    """Create a message with an HTML/text body, an attachment and an inline PNG."""
    with TemporaryDirectory() as tmp_dir:
        workdir = Path(tmp_dir)

        report_path = workdir / "daily-report.txt"
        report_path.write_text("Daily metrics: 42 conversions", encoding="utf-8")

        assets = workdir / "assets"
        assets.mkdir()
        (assets / "logo.png").write_bytes(b64decode(_LOGO_BASE64))

        message = (
            MailMessage(MemoryTransport(), resources=FilesystemResourceProvider(assets))
            .set_from("Reports", "sender@example.com")
            .add_to("Ops", "ops@example.com")
            .set_subject("Daily metrics report")
            .set_html_text_alt(
                '<p>Please find the report attached.</p><img src="cid:logo.png" alt="logo" />',
                "Please find the report attached.",
            )
            .attach_file(report_path)
            .attach_resource("logo.png", disposition=ContentDisposition.INLINE)
            .get_finalized_message()
        )

        print(message.as_string())


if __name__ == "__main__":  # pragma: no cover - manual example
    build_message_with_attachments()
