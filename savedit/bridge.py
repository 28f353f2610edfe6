"""Serialization bridge between a save codec and pretty-printed JSON."""

from __future__ import annotations

import json
from typing import Any

from pydantic import ValidationError

from savedit.codec import SaveCodec
from savedit.const import JSON_INDENT
from savedit.errors import MalformedText


def _format_location(loc: tuple[int | str, ...]) -> str:
    return '.'.join(str(part) for part in loc) or '<document>'


class SerializationBridge:
    """Binary <-> document <-> JSON text for one codec."""

    def __init__(self, codec: SaveCodec) -> None:
        self.codec = codec

    def decode(self, data: bytes) -> Any:
        return self.codec.decode(data)

    def encode(self, document: Any) -> bytes:
        return self.codec.encode(document)

    def to_text(self, document: Any) -> str:
        """Render a document as indented JSON with a trailing newline."""
        return json.dumps(self.codec.dump(document), indent=JSON_INDENT, ensure_ascii=False) + '\n'

    def from_text(self, text: str) -> Any:
        """Parse JSON text back into a document.

        Raises:
            MalformedText: With line/column for syntax errors, or the dotted
                field path for structure errors.
        """
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise MalformedText(e.msg, location=f'line {e.lineno} column {e.colno}') from e
        except RecursionError as e:
            raise MalformedText('nesting too deep') from e

        try:
            return self.codec.load(data)
        except ValidationError as e:
            first = e.errors()[0]
            message = first['msg']
            if e.error_count() > 1:
                message += f' (and {e.error_count() - 1} more errors)'
            raise MalformedText(message, location=_format_location(first['loc'])) from e

    @staticmethod
    def decode_text(data: bytes) -> str:
        """Decode raw JSON input bytes as UTF-8, tolerating a BOM."""
        try:
            return data.decode('utf-8-sig')
        except UnicodeDecodeError as e:
            raise MalformedText(f'invalid UTF-8: {e.reason}', location=f'byte {e.start}') from e
