"""
Remnant 2 save container codec.

Save files use zlib compression with chunked format:
- CompressedFileHeader (12 bytes): CRC32, DecompressedSize, Version
- Chunks: Each up to ChunkSize bytes uncompressed, with 49-byte headers

The concatenated chunk data starts with SaveSize (DecompressedSize - 12) and
BuildNumber, followed by the save body. The body is kept opaque here: the
document exposes container fields and the body as hex lines.
"""

from __future__ import annotations

import struct
import zlib
from dataclasses import dataclass
from typing import Annotated, Any

from pydantic import BeforeValidator, ConfigDict, Field, PlainSerializer, TypeAdapter

from savedit.errors import DecodeError, EncodeError
from savedit.log import log


CHUNK_HEADER_MAGIC = 0x222222229E2A83C1
CHUNK_MAX_SIZE = 0x20000  # 131072 bytes
COMPRESSOR_ZLIB = 0x3
EXPECTED_VERSION = 9
DEFAULT_COMPRESSION_LEVEL = 6

# CRC32, DecompressedSize, Version
FILE_HEADER = struct.Struct('<IiI')
# magic, chunk_size, compressor, compressed1, decompressed1, compressed2, decompressed2
CHUNK_HEADER = struct.Struct('<QQBQQQQ')
# SaveSize, BuildNumber
STREAM_PREFIX = struct.Struct('<ii')

HEX_LINE_BYTES = 32

# zlib header FLEVEL bits -> a compression level that produces them
FLEVEL_TO_LEVEL = {0: 1, 1: 5, 2: 6, 3: 9}


def _to_hex_lines(data: bytes) -> list[str]:
    return [data[i : i + HEX_LINE_BYTES].hex(' ') for i in range(0, len(data), HEX_LINE_BYTES)]


def _from_hex_lines(value: Any) -> Any:
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    if not isinstance(value, list):
        raise ValueError('expected a list of hex strings')

    parts = []
    for number, line in enumerate(value):
        if not isinstance(line, str):
            raise ValueError(f'hex line {number} is not a string')
        try:
            parts.append(bytes.fromhex(line))
        except ValueError as e:
            raise ValueError(f'hex line {number}: {e}') from None
    return b''.join(parts)


HexBytes = Annotated[
    bytes,
    BeforeValidator(_from_hex_lines),
    PlainSerializer(_to_hex_lines, return_type=list[str]),
]
Int32 = Annotated[int, Field(strict=True, ge=-(2**31), le=2**31 - 1)]
UInt32 = Annotated[int, Field(strict=True, ge=0, le=2**32 - 1)]
ChunkSize = Annotated[int, Field(strict=True, gt=0, le=2**32 - 1)]
CompressionLevel = Annotated[int, Field(strict=True, ge=0, le=9)]


@dataclass
class Remnant2Save:
    """Decoded Remnant 2 save container.

    CRC32 and DecompressedSize are derived from the other fields on encode.
    """

    __pydantic_config__ = ConfigDict(extra='forbid')

    version: UInt32
    build_number: Int32
    chunk_size: ChunkSize = CHUNK_MAX_SIZE
    compression_level: CompressionLevel = DEFAULT_COMPRESSION_LEVEL
    body: HexBytes = b''


_ADAPTER = TypeAdapter(Remnant2Save)


@dataclass
class CompressedFileHeader:
    crc32: int
    decompressed_size: int
    version: int


def calculate_crc32(data: bytes) -> int:
    """
    Calculate CRC32 checksum for decompressed save data.

    The CRC32 is calculated on bytes [4:] of the decompressed data,
    skipping the first 4 bytes which store the CRC itself.
    """
    return zlib.crc32(data[4:]) & 0xFFFFFFFF


def decompressed_image(document: Remnant2Save) -> bytes:
    """Build the in-memory layout of a decompressed save.

    [0-3]: CRC32
    [4-7]: DecompressedSize
    [8-11]: Version
    [12-15]: BuildNumber
    [16+]: body
    """
    size = FILE_HEADER.size + 4 + len(document.body)
    data = bytearray(struct.pack('<IiIi', 0, size, document.version, document.build_number))
    data += document.body
    struct.pack_into('<I', data, 0, calculate_crc32(data))
    return bytes(data)


def infer_compression_level(compressed: bytes) -> int:
    """Guess the zlib level used for a stream from its FLEVEL header bits."""
    if len(compressed) < 2:
        return DEFAULT_COMPRESSION_LEVEL
    return FLEVEL_TO_LEVEL[compressed[1] >> 6]


def canonical_level(level: int) -> int:
    """Map a zlib level to the level decode infers for the same FLEVEL bits.

    Levels sharing FLEVEL bits (2-5, 7-9, 0-1) are indistinguishable after
    decoding, so encode always uses the one decode would pick.
    """
    if level < 2:
        flevel = 0
    elif level < 6:
        flevel = 1
    elif level == 6:
        flevel = 2
    else:
        flevel = 3
    return FLEVEL_TO_LEVEL[flevel]


def decompress_chunks(data: bytes) -> tuple[CompressedFileHeader, bytes, int, int]:
    """Split a save file into its header and decompressed chunk stream.

    Returns:
        (header, chunk stream, declared chunk size, inferred compression level)

    Raises:
        DecodeError: On truncated data, bad chunk headers or corrupt zlib data
    """
    if len(data) < FILE_HEADER.size:
        raise DecodeError(f'File too short for save header: {len(data)} bytes')

    header = CompressedFileHeader(*FILE_HEADER.unpack_from(data, 0))
    log.debug(f'Compressed header: version={header.version}, size={header.decompressed_size}')

    offset = FILE_HEADER.size
    stream = bytearray()
    chunk_size = None
    level = DEFAULT_COMPRESSION_LEVEL

    while offset < len(data):
        if offset + CHUNK_HEADER.size > len(data):
            raise DecodeError(f'Truncated chunk header at offset {offset}')

        magic, declared_size, compressor, compressed_size, decompressed_size, _, _ = CHUNK_HEADER.unpack_from(
            data, offset
        )
        if magic != CHUNK_HEADER_MAGIC:
            raise DecodeError(f'Invalid chunk magic at offset {offset}: {magic:#x}')
        if compressor != COMPRESSOR_ZLIB:
            raise DecodeError(f'Unknown compressor at offset {offset}: {compressor}')
        offset += CHUNK_HEADER.size

        compressed = data[offset : offset + compressed_size]
        if len(compressed) != compressed_size:
            raise DecodeError(f'Truncated chunk data at offset {offset}: expected {compressed_size} bytes')
        offset += compressed_size

        try:
            decompressed = zlib.decompress(compressed)
        except zlib.error as e:
            raise DecodeError(f'Corrupt chunk data at offset {offset - compressed_size}: {e}') from e
        if len(decompressed) != decompressed_size:
            raise DecodeError(f'Decompressed size mismatch: {len(decompressed)} != {decompressed_size}')

        if chunk_size is None:
            chunk_size = declared_size
            level = infer_compression_level(compressed)
        stream.extend(decompressed)

    if chunk_size is None:
        raise DecodeError('Save file contains no chunks')

    log.debug(f'Decompressed {len(stream)} bytes from {len(data)} bytes')
    return header, bytes(stream), chunk_size, level


def compress_chunks(header: CompressedFileHeader, stream: bytes, chunk_size: int, level: int) -> bytes:
    """Compress a chunk stream back into the save file format."""
    output = bytearray(FILE_HEADER.pack(header.crc32, header.decompressed_size, header.version))

    for start in range(0, len(stream), chunk_size):
        chunk = stream[start : start + chunk_size]
        compressed = zlib.compress(chunk, level)
        output += CHUNK_HEADER.pack(
            CHUNK_HEADER_MAGIC,
            chunk_size,
            COMPRESSOR_ZLIB,
            len(compressed),
            len(chunk),
            len(compressed),
            len(chunk),
        )
        output += compressed

    log.debug(f'Compressed {len(stream)} bytes to {len(output)} bytes')
    return bytes(output)


class Remnant2Codec:
    """Codec for Remnant 2 ``.sav`` containers (profile.sav, save_N.sav)."""

    name = 'remnant2'

    def decode(self, data: bytes) -> Remnant2Save:
        header, stream, chunk_size, level = decompress_chunks(data)
        if len(stream) < STREAM_PREFIX.size:
            raise DecodeError(f'Chunk stream too short: {len(stream)} bytes')

        save_size, build_number = STREAM_PREFIX.unpack_from(stream, 0)
        document = Remnant2Save(
            version=header.version,
            build_number=build_number,
            chunk_size=chunk_size,
            compression_level=level,
            body=stream[STREAM_PREFIX.size :],
        )

        if header.version != EXPECTED_VERSION:
            log.warning(f'Unexpected version {header.version}, expected {EXPECTED_VERSION}')

        # Derived values, a mismatch here shows up as a failed resave
        expected_size = 8 + len(stream)
        if header.decompressed_size != expected_size:
            log.warning(f'Header size {header.decompressed_size} does not match data size {expected_size}')
        if save_size != header.decompressed_size - 12:
            log.warning(f'Save size {save_size} does not match header size {header.decompressed_size}')
        stored = struct.pack('<I', header.crc32)
        if decompressed_image(document)[:4] != stored:
            log.warning(f'CRC32 mismatch: stored {header.crc32:#010x}')

        return document

    def encode(self, document: Remnant2Save) -> bytes:
        if document.chunk_size <= 0:
            raise EncodeError(f'Invalid chunk size: {document.chunk_size}')

        try:
            image = decompressed_image(document)
            header = CompressedFileHeader(*FILE_HEADER.unpack_from(image, 0))
            stream = STREAM_PREFIX.pack(header.decompressed_size - 12, document.build_number) + document.body
            return compress_chunks(
                header, stream, document.chunk_size, canonical_level(document.compression_level)
            )
        except (struct.error, zlib.error, OverflowError) as e:
            raise EncodeError(f'Cannot encode save: {e}') from e

    def dump(self, document: Remnant2Save) -> dict[str, Any]:
        return _ADAPTER.dump_python(document, mode='json')

    def load(self, data: Any) -> Remnant2Save:
        return _ADAPTER.validate_python(data)
