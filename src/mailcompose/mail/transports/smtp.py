"""SMTP transport built on :mod:`smtplib`.

Examples:
    STARTTLS on the submission port with authentication::

        transport = SMTPTransport(
            "smtp.example.com",
            credentials=SMTPCredentials(username="bot", password="secret"),
        )
        MailMessage(transport).set_from("Bot", "bot@example.com")...send()

    Settings from ``mailcompose.conf.yml``::

        transport = SMTPTransport.from_config()
"""

from __future__ import annotations

import contextlib
import io
import logging
import smtplib
import ssl
import sys
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from mailcompose.config import get_config
from mailcompose.config.exceptions import ConfigError
from mailcompose.logging import TRACE_LEVEL
from mailcompose.mail.exceptions import DeliveryError, MailConfigurationError
from mailcompose.mail.transport import MailTransport

if TYPE_CHECKING:
    from email.message import EmailMessage

__all__ = ["SMTPCredentials", "SMTPSecurity", "SMTPTransport"]

log = logging.getLogger(__name__)

DEFAULT_PORT = 587
DEFAULT_TIMEOUT = 30.0


@dataclass(frozen=True, slots=True)
class SMTPCredentials:
    """Login used after the connection is secured."""

    username: str | None = None
    password: str | None = None


@dataclass(frozen=True, slots=True)
class SMTPSecurity:
    """Connection security options.

    Attributes:
        use_ssl: Connect with implicit TLS (``SMTP_SSL``, usually port 465).
        use_starttls: Upgrade a plain connection with STARTTLS when offered.
        verify_certificates: Validate the server certificate and host name.
    """

    use_ssl: bool = False
    use_starttls: bool = True
    verify_certificates: bool = True


@contextlib.contextmanager
def _capture_smtp_debug() -> Iterator[io.StringIO]:
    """Redirect stderr, where smtplib writes its debug dump, into a buffer."""
    buffer = io.StringIO()
    original = sys.stderr
    sys.stderr = buffer
    try:
        yield buffer
    finally:
        sys.stderr = original


def _log_smtp_debug_output(output: str) -> None:
    for line in output.splitlines():
        if line.strip():
            log.log(TRACE_LEVEL, "[SMTP] %s", line.rstrip())


def _extract_ssl_info(sock: Any) -> dict[str, Any]:
    """Return protocol and cipher details of a TLS socket, if any."""
    if sock is None or not hasattr(sock, "version"):
        return {}
    info: dict[str, Any] = {"version": sock.version()}
    cipher = sock.cipher() if hasattr(sock, "cipher") else None
    if cipher:
        info["cipher"] = cipher[0]
        info["bits"] = cipher[2]
    return info


class SMTPTransport(MailTransport):
    """Deliver messages through an SMTP server.

    A fresh connection is opened for each message.

    Args:
        host: SMTP server host name.
        port: Server port (587 for STARTTLS, 465 for implicit TLS).
        credentials: Optional login.
        security: TLS options.
        timeout: Socket timeout in seconds.

    Raises:
        MailConfigurationError: If ``host`` is empty, ``port`` is out of range
            or ``timeout`` is not positive.
    """

    def __init__(
        self,
        host: str,
        *,
        port: int = DEFAULT_PORT,
        credentials: SMTPCredentials | None = None,
        security: SMTPSecurity | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        if not host:
            raise MailConfigurationError("SMTP host is required")
        if not 0 < port < 65536:
            raise MailConfigurationError(f"Invalid SMTP port: {port}")
        if timeout <= 0:
            raise MailConfigurationError("Timeout must be greater than 0")

        self.host = host
        self.port = port
        self.credentials = credentials or SMTPCredentials()
        self.security = security or SMTPSecurity()
        self.timeout = timeout

    @classmethod
    def from_config(cls, config: Mapping[str, Any] | None = None) -> SMTPTransport:
        """Build a transport from the ``mail.smtp`` configuration section.

        Args:
            config: The ``smtp`` mapping itself. Defaults to the loaded
                configuration.
        """
        section = config if config is not None else cls._load_config_section()
        return cls(
            str(section.get("host") or ""),
            port=int(section.get("port") or DEFAULT_PORT),
            credentials=SMTPCredentials(
                username=section.get("username"),
                password=section.get("password"),
            ),
            security=SMTPSecurity(
                use_ssl=bool(section.get("use_ssl", False)),
                use_starttls=bool(section.get("use_starttls", True)),
                verify_certificates=bool(section.get("verify_certificates", True)),
            ),
            timeout=float(section.get("timeout") or DEFAULT_TIMEOUT),
        )

    @staticmethod
    def _load_config_section() -> Mapping[str, Any]:
        try:
            mail_section = get_config().get("mail") or {}
        except ConfigError as e:
            raise MailConfigurationError(f"Unable to load SMTP configuration: {e}") from e
        section = mail_section.get("smtp")
        if not isinstance(section, Mapping):
            raise MailConfigurationError("Missing mail.smtp configuration section")
        return section

    def _ssl_context(self) -> ssl.SSLContext:
        context = ssl.create_default_context()
        if not self.security.verify_certificates:
            context.check_hostname = False
            context.verify_mode = ssl.CERT_NONE
        return context

    def _connect(self) -> smtplib.SMTP:
        if self.security.use_ssl:
            log.debug("Opening SMTP_SSL connection to %s:%s", self.host, self.port)
            return smtplib.SMTP_SSL(
                host=self.host,
                port=self.port,
                timeout=self.timeout,
                context=self._ssl_context(),
            )
        log.debug("Opening SMTP connection to %s:%s", self.host, self.port)
        return smtplib.SMTP(host=self.host, port=self.port, timeout=self.timeout)

    def send(self, message: EmailMessage) -> None:
        """Send ``message`` over a new SMTP session.

        Raises:
            DeliveryError: On any SMTP protocol or socket failure.
        """
        trace_enabled = log.isEnabledFor(TRACE_LEVEL)
        buffer: io.StringIO | None = None
        try:
            with contextlib.ExitStack() as stack:
                if trace_enabled:
                    buffer = stack.enter_context(_capture_smtp_debug())
                client = stack.enter_context(self._connect())
                if trace_enabled:
                    client.set_debuglevel(1)
                self._deliver(client, message)
        except (smtplib.SMTPException, OSError) as e:
            raise DeliveryError(
                f"SMTP delivery to {self.host}:{self.port} failed: {e}",
                details={"host": self.host, "port": self.port},
            ) from e
        finally:
            # stderr is restored by now, failed sessions included.
            if buffer is not None:
                _log_smtp_debug_output(buffer.getvalue())
        log.debug("Message %s delivered via %s:%s", message.get("Message-ID"), self.host, self.port)

    def _deliver(self, client: smtplib.SMTP, message: EmailMessage) -> None:
        client.ehlo()
        if not self.security.use_ssl and self.security.use_starttls and client.has_extn("STARTTLS"):
            client.starttls(context=self._ssl_context())
            client.ehlo()
            if log.isEnabledFor(TRACE_LEVEL):
                log.log(TRACE_LEVEL, "[SMTP] TLS established: %s", _extract_ssl_info(getattr(client, "sock", None)))
        if self.credentials.username:
            client.login(self.credentials.username, self.credentials.password or "")
        client.send_message(message)
