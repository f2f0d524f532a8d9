"""Transport implementations for mail delivery.

Available transports:
    - SMTPTransport: Standard SMTP protocol via smtplib
    - MemoryTransport: Records messages in memory (tests, dry runs)
"""

from mailcompose.mail.transports.memory import MemoryTransport
from mailcompose.mail.transports.smtp import SMTPCredentials, SMTPSecurity, SMTPTransport

__all__ = [
    "MemoryTransport",
    "SMTPCredentials",
    "SMTPSecurity",
    "SMTPTransport",
]
