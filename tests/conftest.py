"""
Pytest configuration and shared fixtures.
"""

import io
import sys
import tempfile
from pathlib import Path

import pytest

from fakes import FakeCodec, PerturbingCodec, make_fake_save
from savedit import codec as codec_module
from savedit.bridge import SerializationBridge


@pytest.fixture()
def bridge() -> SerializationBridge:
    """Bridge over the canonical fake codec."""
    return SerializationBridge(FakeCodec())


@pytest.fixture()
def perturbing_bridge() -> SerializationBridge:
    """Bridge whose codec never reproduces its input."""
    return SerializationBridge(PerturbingCodec())


@pytest.fixture()
def save_bytes() -> bytes:
    return make_fake_save()


@pytest.fixture()
def save_path(tmp_path: Path, save_bytes: bytes) -> Path:
    """A canonical fake save on disk."""
    path = tmp_path / 'slot1.sav'
    path.write_bytes(save_bytes)
    return path


@pytest.fixture()
def fake_codecs(monkeypatch: pytest.MonkeyPatch) -> dict:
    """Register the fake codecs by name for the duration of a test."""
    codecs = dict(codec_module.CODECS)
    codecs['fake'] = FakeCodec
    codecs['perturbing'] = PerturbingCodec
    monkeypatch.setattr(codec_module, 'CODECS', codecs)
    return codecs


@pytest.fixture()
def temp_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Private directory used by tempfile, to check for leftover files."""
    directory = tmp_path / 'tmp'
    directory.mkdir()
    monkeypatch.setattr(tempfile, 'tempdir', str(directory))
    return directory


class FakeStdio:
    """Byte-level stand-ins for stdin and stdout."""

    def __init__(self, stdin: bytes = b'') -> None:
        self.stdin = io.TextIOWrapper(io.BytesIO(stdin))
        self.stdout = io.TextIOWrapper(io.BytesIO())

    @property
    def output(self) -> bytes:
        self.stdout.flush()
        return self.stdout.buffer.getvalue()


@pytest.fixture()
def stdio(monkeypatch: pytest.MonkeyPatch):
    """Factory replacing sys.stdin/sys.stdout with in-memory buffers."""

    def install(stdin: bytes = b'') -> FakeStdio:
        fake = FakeStdio(stdin)
        monkeypatch.setattr(sys, 'stdin', fake.stdin)
        monkeypatch.setattr(sys, 'stdout', fake.stdout)
        return fake

    return install
