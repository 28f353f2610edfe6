"""
Resolve path tokens to buffered byte streams.

A token of ``-`` means the standard stream (stdin for reading, stdout for
writing); anything else is a filesystem path. Standard streams are flushed
on exit but never closed.
"""

from __future__ import annotations

import sys
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import BinaryIO

from savedit.const import STDIO_TOKEN
from savedit.errors import StreamError
from savedit.log import log


def describe(token: str) -> str:
    """Human readable name of a stream token, for log messages."""
    return '<stdio>' if token == STDIO_TOKEN else str(token)


def _open_file(path: str | Path, mode: str) -> BinaryIO:
    purpose = 'input' if 'r' in mode else 'output'
    try:
        stream = open(path, mode)
    except OSError as e:
        raise StreamError(f'Cannot open {purpose} {str(path)!r}: {e.strerror}') from e
    log.debug(f'Opened {purpose} {path}')
    return stream


@contextmanager
def open_input(token: str) -> Iterator[BinaryIO]:
    """Open a readable byte stream.

    Raises:
        StreamError: If the file does not exist or cannot be opened.
    """
    if token == STDIO_TOKEN:
        yield sys.stdin.buffer
        return

    with _open_file(token, 'rb') as stream:
        yield stream


@contextmanager
def open_output(token: str) -> Iterator[BinaryIO]:
    """Open a writable byte stream, creating or truncating files.

    Raises:
        StreamError: If the file cannot be created.
    """
    if token == STDIO_TOKEN:
        stream = sys.stdout.buffer
        try:
            yield stream
        finally:
            stream.flush()
        return

    with _open_file(token, 'wb') as stream:
        yield stream


def read_all(token: str) -> bytes:
    """Read every byte behind a token."""
    with open_input(token) as stream:
        return stream.read()


def write_all(token: str, data: bytes) -> None:
    """Write bytes to a token, replacing any previous file content."""
    with open_output(token) as stream:
        stream.write(data)


def read_file(path: Path) -> bytes:
    """Read a filesystem path, never a standard stream."""
    with _open_file(path, 'rb') as stream:
        return stream.read()


def write_file(path: Path, data: bytes) -> None:
    """Truncate a filesystem path and write ``data`` to it."""
    with _open_file(path, 'wb') as stream:
        stream.write(data)
