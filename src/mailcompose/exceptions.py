"""Root exception shared by every mailcompose module."""

from __future__ import annotations


class MailcomposeError(Exception):
    """Base class for all errors raised by mailcompose.

    Catch this to handle any failure coming from the package without
    caring about the specific subsystem (config, mail, transport).
    """


__all__ = ["MailcomposeError"]
