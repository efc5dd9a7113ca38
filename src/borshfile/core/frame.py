from __future__ import annotations

"""Length-prefixed slice framing.

Layout (no magic, no version, no checksum):
  u32 field : 4 bytes, unsigned, little endian
  frame     : [length u32 LE][content: length bytes]

Sinks/sources are plain binary file-like objects (write(bytes) / read(n)).
Nothing here seeks: writes append at the current position, reads consume from it.
"""

import struct
from typing import BinaryIO, Literal

from borshfile.errors import (
    EndOfStream,
    ShortWriteError,
    TruncatedContentError,
    TruncatedHeaderError,
)

U32_LEN = 4
U32_MAX = 0xFFFFFFFF
# Largest single read() issued while filling a declared length.
READ_CHUNK_SIZE = 1 << 20

ByteOrder = Literal["little", "big"]

_U32: dict[str, struct.Struct] = {
    "little": struct.Struct("<I"),
    "big": struct.Struct(">I"),
}


def _u32_struct(order: str) -> struct.Struct:
    st = _U32.get(order)
    if st is None:
        raise ValueError(f"byte order must be 'little' or 'big', got {order!r}")
    return st


def _write_all(sink: BinaryIO, buf: bytes) -> int:
    n = sink.write(buf)
    # Some writers (e.g. custom wrappers) return None: treat as fully written.
    if n is None:
        return len(buf)
    if int(n) != len(buf):
        raise ShortWriteError(f"short write: {n} of {len(buf)} bytes")
    return int(n)


def read_exact(source: BinaryIO, n: int) -> bytes:
    """Read up to n bytes, looping over short reads.

    Returns fewer than n bytes only when the source hits end of stream.
    Each read() asks for at most READ_CHUNK_SIZE bytes.
    """
    if n < 0:
        raise ValueError("read_exact: n must be >= 0")
    if n == 0:
        return b""
    chunks: list[bytes] = []
    remaining = int(n)
    while remaining > 0:
        chunk = source.read(min(remaining, READ_CHUNK_SIZE))
        if not chunk:
            break
        chunks.append(chunk)
        remaining -= len(chunk)
    if len(chunks) == 1:
        return bytes(chunks[0])
    return b"".join(chunks)


# -------------------
# u32 primitives
# -------------------
def write_uint32(sink: BinaryIO, value: int, order: ByteOrder = "little") -> None:
    st = _u32_struct(order)
    # bool is an int subclass, reject it explicitly
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"u32 must be an int, got {type(value).__name__}")
    if not (0 <= value <= U32_MAX):
        raise ValueError(f"u32 out of range: {value}")
    _write_all(sink, st.pack(value))


def read_uint32(source: BinaryIO, order: ByteOrder = "little") -> int:
    """Read one u32.

    EndOfStream if the source is already exhausted, TruncatedHeaderError
    if it ends after 1..3 bytes.
    """
    st = _u32_struct(order)
    buf = read_exact(source, U32_LEN)
    if not buf:
        raise EndOfStream("end of stream")
    if len(buf) != U32_LEN:
        raise TruncatedHeaderError(
            f"expected {U32_LEN} bytes, got {len(buf)}", expected=U32_LEN, got=len(buf)
        )
    return int(st.unpack(buf)[0])


def write_uint32_le(sink: BinaryIO, value: int) -> None:
    write_uint32(sink, value, "little")


def read_uint32_le(source: BinaryIO) -> int:
    return read_uint32(source, "little")


# -------------------
# Frames
# -------------------
def encode_frame(content: bytes, sink: BinaryIO) -> int:
    """Write [len u32 LE][content]. Returns 4 + len(content).

    The two writes are not atomic: a failure after the header leaves the
    sink with a dangling length field.
    """
    data = bytes(content)
    if len(data) > U32_MAX:
        raise ValueError(f"frame content too large for u32 length: {len(data)}")
    write_uint32_le(sink, len(data))
    n = _write_all(sink, data) if data else 0
    return U32_LEN + n


def decode_frame(source: BinaryIO) -> tuple[bytes, int]:
    """Read one frame. Returns (content, declared_length)."""
    length = read_uint32_le(source)
    content = read_exact(source, length)
    if len(content) != length:
        raise TruncatedContentError(
            f"expected {length} bytes, got {len(content)} bytes",
            expected=length,
            got=len(content),
        )
    return content, length
