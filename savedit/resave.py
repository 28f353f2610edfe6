"""
Resave verification: decode a save, encode it again, compare the bytes.

A mismatch means the codec is not a faithful round-trip for that file, so
editing it would change more than the user touched.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from savedit.bridge import SerializationBridge
from savedit.const import DEBUG_INPUT_NAME, DEBUG_OUTPUT_NAME
from savedit.log import log


@dataclass
class ResaveReport:
    """Outcome of a decode -> encode round-trip."""

    original: bytes
    resaved: bytes

    @property
    def matches(self) -> bool:
        return self.original == self.resaved

    @property
    def first_difference(self) -> int | None:
        """Offset of the first differing byte, None when identical."""
        if self.matches:
            return None
        for offset, (a, b) in enumerate(zip(self.original, self.resaved)):
            if a != b:
                return offset
        # One buffer is a prefix of the other
        return min(len(self.original), len(self.resaved))

    def describe(self) -> str:
        if self.matches:
            return f'Resave matched ({len(self.original)} bytes)'
        return (
            f'Resave did not match: input {len(self.original)} bytes, '
            f'output {len(self.resaved)} bytes, first difference at offset {self.first_difference}'
        )


def verify_resave(data: bytes, bridge: SerializationBridge) -> ResaveReport:
    """Decode and re-encode ``data`` without touching the filesystem."""
    document = bridge.decode(data)
    return ResaveReport(original=data, resaved=bridge.encode(document))


def dump_debug_files(report: ResaveReport, directory: Path) -> tuple[Path, Path]:
    """Write both buffers for offline diffing, overwriting earlier dumps."""
    input_path = directory / DEBUG_INPUT_NAME
    output_path = directory / DEBUG_OUTPUT_NAME
    input_path.write_bytes(report.original)
    output_path.write_bytes(report.resaved)
    log.info(f'Wrote {input_path} and {output_path}')
    return input_path, output_path
