#!/usr/bin/env python3
"""Demonstrate SMTP TRACE-level logging for debugging.

With TRACE enabled the transport forwards the smtplib session dump (EHLO,
STARTTLS, AUTH, MAIL FROM/RCPT TO) and the negotiated TLS details to the log.

Setup:
    export SMTP_HOST="smtp.example.com"
    export SMTP_USER="bot@example.com"
    export SMTP_PASS="secret"

Usage:
    python examples/mail/smtp_trace.py
"""

from __future__ import annotations

import os
import sys

from mailcompose.logging import init_logging
from mailcompose.mail import DeliveryError, MailMessage
from mailcompose.mail.transports import SMTPCredentials, SMTPSecurity, SMTPTransport


def main() -> None:
    """Send one message with TRACE logging enabled."""
    host = os.getenv("SMTP_HOST")
    user = os.getenv("SMTP_USER")
    password = os.getenv("SMTP_PASS")
    if not host or not user or not password:
        print("Set SMTP_HOST, SMTP_USER and SMTP_PASS to run this example.")
        sys.exit(1)

    log = init_logging(config={"console": {"level": "TRACE"}})
    log.info("TRACE logging enabled, SMTP session details will be shown")

    transport = SMTPTransport(
        host,
        port=587,
        credentials=SMTPCredentials(username=user, password=password),
        security=SMTPSecurity(use_starttls=True),
    )

    try:
        message = (
            MailMessage(transport)
            .set_from("mailcompose", user)
            .add_to("", user)
            .set_subject("TRACE logging test from mailcompose")
            .set_text("This message was sent with TRACE-level logging enabled.")
            .send()
        )
    except DeliveryError as e:
        log.traceback(e, "Delivery failed")
        sys.exit(2)

    log.success("Message sent", message_id=str(message["Message-ID"]), to=str(message["To"]))


if __name__ == "__main__":  # pragma: no cover - manual example
    main()
