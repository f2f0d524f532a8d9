"""Shared pytest fixtures for the mailcompose test suite."""

from __future__ import annotations

# Disable Rich colors before any imports, Rich checks these at import time
import os

os.environ["NO_COLOR"] = "1"
os.environ["TERM"] = "dumb"

from collections.abc import Callable, Iterator
from pathlib import Path

import pytest

import mailcompose.config.loader as _cfg_loader
from mailcompose.mail import MailMessage
from mailcompose.mail.transports import MemoryTransport

# pylint: disable=redefined-outer-name


@pytest.fixture(autouse=True)
def _isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Keep user configuration files and cached config out of every test."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.delenv(_cfg_loader.CONFIG_ENV_VAR, raising=False)
    monkeypatch.chdir(tmp_path)
    _cfg_loader.clear_config()
    yield
    _cfg_loader.clear_config()


@pytest.fixture
def cfg_loader() -> object:
    """Expose the config loader module for tests of its internals."""
    return _cfg_loader


@pytest.fixture
def outbox() -> MemoryTransport:
    """Provide an in-memory transport."""
    return MemoryTransport()


@pytest.fixture
def mail(outbox: MemoryTransport) -> MailMessage:
    """Provide a builder wired to the in-memory transport."""
    return MailMessage(outbox)


@pytest.fixture
def write_file(tmp_path: Path) -> Callable[[str, bytes], Path]:
    """Write bytes to a file under the temporary directory."""

    def _write(name: str, data: bytes) -> Path:
        path = tmp_path / "files" / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
        return path

    return _write
