"""Build a transport and a message from ``mailcompose.conf.yml``.

Place a ``mailcompose.conf.yml`` in the working directory, for example::

    mail:
      charset: UTF-8
      smtp:
        host: smtp.example.com
        port: 465
        use_ssl: true
      resources:
        root: ./assets
"""

from __future__ import annotations

from mailcompose.config import get_config
from mailcompose.mail import MailMessage
from mailcompose.mail.transports import SMTPTransport


def main() -> None:
    """Print the effective SMTP settings and a finalized sample message."""
    config = get_config()
    transport = SMTPTransport.from_config()
    print(f"SMTP {transport.host}:{transport.port} (ssl={transport.security.use_ssl})")

    message = (
        MailMessage.from_config(transport)
        .set_from("Config demo", "demo@example.com")
        .add_to("Ops", "ops@example.com")
        .set_subject(f"Charset {config.mail.charset}")
        .set_text("Built from configuration.")
        .get_finalized_message()
    )
    print(message.as_string())


if __name__ == "__main__":  # pragma: no cover - manual example
    main()
