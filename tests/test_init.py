"""Tests for mailcompose package initialization.

These tests verify that the package can be imported correctly and that
the public API is accessible.
"""

# pylint: disable=import-outside-toplevel


def test_package_imports() -> None:
    """All public names can be imported from the package root."""
    import mailcompose

    for name in mailcompose.__all__:
        assert getattr(mailcompose, name) is not None


def test_meta() -> None:
    from mailcompose import __app_name__, __version__

    assert __app_name__ == "mailcompose"
    assert __version__.count(".") == 2


def test_doc_example() -> None:
    """The usage shown in the package docstring delivers one message."""
    from mailcompose import MailMessage
    from mailcompose.mail.transports import MemoryTransport

    outbox = MemoryTransport()
    MailMessage(outbox).set_from("Ada", "ada@example.com").add_to("Bob", "bob@example.com").set_subject(
        "Hello"
    ).set_text("Hi Bob").send()

    assert len(outbox.outbox) == 1
    assert outbox.outbox[0]["To"] == "Bob <bob@example.com>"
