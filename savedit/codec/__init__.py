"""Save codecs: binary <-> document <-> JSON-compatible data."""

from __future__ import annotations

import importlib
from collections.abc import Callable
from typing import Any, Protocol, runtime_checkable

from savedit.codec.remnant2 import Remnant2Codec, Remnant2Save
from savedit.errors import CodecLookupError
from savedit.log import log


@runtime_checkable
class SaveCodec(Protocol):
    """Capability interface implemented by every save format.

    ``decode`` raises DecodeError, ``encode`` raises EncodeError. ``load`` may
    raise MalformedText or ``pydantic.ValidationError``.
    """

    name: str

    def decode(self, data: bytes) -> Any: ...

    def encode(self, document: Any) -> bytes: ...

    def dump(self, document: Any) -> Any: ...

    def load(self, data: Any) -> Any: ...


CODECS: dict[str, Callable[[], SaveCodec]] = {
    Remnant2Codec.name: Remnant2Codec,
}


def register_codec(name: str, factory: Callable[[], SaveCodec]) -> None:
    """Make a codec selectable by name."""
    CODECS[name] = factory


def _import_codec(spec: str) -> SaveCodec:
    module_name, _, attr = spec.partition(':')
    if not module_name or not attr:
        raise CodecLookupError(f'Invalid codec import path {spec!r}, expected "module:attribute"')

    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise CodecLookupError(f'Cannot import codec module {module_name!r}: {e}') from e

    try:
        target = getattr(module, attr)
    except AttributeError as e:
        raise CodecLookupError(f'Module {module_name!r} has no attribute {attr!r}') from e

    # Classes and factory functions are instantiated, codec instances used as is
    if isinstance(target, type) or (callable(target) and not isinstance(target, SaveCodec)):
        codec = target()
    else:
        codec = target
    if not isinstance(codec, SaveCodec):
        raise CodecLookupError(f'{spec!r} is not a save codec')
    return codec


def get_codec(spec: str) -> SaveCodec:
    """Look up a codec by registered name or ``module:attribute`` path.

    Raises:
        CodecLookupError: If the codec is unknown or cannot be loaded.
    """
    if spec in CODECS:
        codec = CODECS[spec]()
    elif ':' in spec:
        codec = _import_codec(spec)
    else:
        known = ', '.join(sorted(CODECS))
        raise CodecLookupError(f'Unknown codec {spec!r} (available: {known})')

    log.debug(f'Using codec {codec.name}')
    return codec


__all__ = ['CODECS', 'Remnant2Codec', 'Remnant2Save', 'SaveCodec', 'get_codec', 'register_codec']
