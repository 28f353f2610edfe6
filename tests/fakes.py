"""
Deterministic in-memory codecs for tests.

Binary format: ``FAKE\\n<name>\\n<comma separated ints>``.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any

from pydantic import TypeAdapter

from savedit.errors import DecodeError, EncodeError


MAGIC = b'FAKE\n'


@dataclass
class FakeSave:
    name: str
    values: list[int] = field(default_factory=list)


_ADAPTER = TypeAdapter(FakeSave)


class FakeCodec:
    """Canonical codec: ``encode(decode(x)) == x`` for canonical input."""

    name = 'fake'

    def decode(self, data: bytes) -> FakeSave:
        if not data.startswith(MAGIC):
            raise DecodeError('missing FAKE magic')
        try:
            name, values = data[len(MAGIC) :].decode('ascii').split('\n')
            return FakeSave(name=name, values=[int(v) for v in values.split(',') if v])
        except (UnicodeDecodeError, ValueError) as e:
            raise DecodeError(f'bad fake save: {e}') from e

    def encode(self, document: FakeSave) -> bytes:
        try:
            name = document.name.encode('ascii')
        except UnicodeEncodeError as e:
            raise EncodeError(f'name is not ascii: {document.name!r}') from e
        return MAGIC + name + b'\n' + ','.join(str(v) for v in document.values).encode('ascii')

    def dump(self, document: FakeSave) -> Any:
        return _ADAPTER.dump_python(document, mode='json')

    def load(self, data: Any) -> FakeSave:
        return _ADAPTER.validate_python(data)


class PerturbingCodec(FakeCodec):
    """Re-encodes with the first value bumped, so every resave mismatches."""

    name = 'perturbing'

    def encode(self, document: FakeSave) -> bytes:
        if document.values:
            document = replace(document, values=[document.values[0] + 1, *document.values[1:]])
        return super().encode(document)


CODEC_INSTANCE = FakeCodec()
NOT_A_CODEC = 'fake'


def make_fake_save(name: str = 'hero', values: list[int] | None = None) -> bytes:
    return FakeCodec().encode(FakeSave(name=name, values=[1, 2, 3] if values is None else values))
