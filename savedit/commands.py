"""
Command implementations behind the CLI sub-commands.

Each command reads its inputs completely and finishes decoding/encoding
before the output is opened, so a failed command never leaves a partial
output file behind.
"""

from __future__ import annotations

from pathlib import Path

from savedit.bridge import SerializationBridge
from savedit.codec import get_codec
from savedit.config import Settings
from savedit.edit_session import EditOutcome, edit_save
from savedit.errors import ResaveMismatch
from savedit.log import log
from savedit.resave import ResaveReport, dump_debug_files, verify_resave
from savedit.streams import describe, read_all, read_file, write_all


def make_bridge(settings: Settings) -> SerializationBridge:
    return SerializationBridge(get_codec(settings.codec))


def to_json(bridge: SerializationBridge, source: str, target: str) -> None:
    """Convert a binary save to JSON text."""
    data = read_all(source)
    log.debug(f'Read {len(data)} bytes from {describe(source)}')

    text = bridge.to_text(bridge.decode(data))
    write_all(target, text.encode('utf-8'))


def from_json(bridge: SerializationBridge, source: str, target: str) -> None:
    """Convert JSON text back to a binary save."""
    text = bridge.decode_text(read_all(source))

    data = bridge.encode(bridge.from_text(text))
    write_all(target, data)
    log.debug(f'Wrote {len(data)} bytes to {describe(target)}')


def check_resave(
    bridge: SerializationBridge,
    path: Path,
    debug: bool = False,
    dump_dir: Path | None = None,
) -> ResaveReport:
    """Check that decode -> encode reproduces ``path`` byte for byte.

    With ``debug``, a mismatch also writes input.sav and output.sav to
    ``dump_dir`` (the working directory by default).

    Raises:
        ResaveMismatch: If the bytes differ
    """
    report = verify_resave(read_file(path), bridge)
    log.debug(report.describe())

    if not report.matches:
        if debug:
            dump_debug_files(report, Path.cwd() if dump_dir is None else dump_dir)
        raise ResaveMismatch(report.describe())

    print('Resave successful')
    return report


def edit(bridge: SerializationBridge, path: Path, settings: Settings) -> EditOutcome:
    """Edit a save in place with the configured editor."""
    log.debug(f'Editing {path} with {settings.editor!r}')
    return edit_save(path, settings.editor, bridge)
