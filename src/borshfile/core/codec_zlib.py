from __future__ import annotations

import zlib


class ZlibCompressor:
    def __init__(self, level: int):
        self.level = level

    def compress(self, data: bytes) -> bytes:
        if not isinstance(data, (bytes, bytearray, memoryview)):
            raise TypeError("data must be bytes")
        return zlib.compress(bytes(data), self.level)


class ZlibDecompressor:
    def decompress(self, comp: bytes) -> bytes:
        if not isinstance(comp, (bytes, bytearray, memoryview)):
            raise TypeError("comp must be bytes")
        d = zlib.decompressobj()
        out = d.decompress(bytes(comp))
        out += d.flush()
        # decompressobj tolerates both, a frame must hold exactly one stream
        if not d.eof:
            raise zlib.error("incomplete zlib stream (truncated?)")
        if d.unused_data:
            raise zlib.error(f"trailing garbage after zlib stream: {len(d.unused_data)} bytes")
        return out


class CodecZlib:
    """zlib/DEFLATE byte codec (no external deps)."""

    codec_id: str = "zlib"
    errors: tuple[type[BaseException], ...] = (zlib.error,)

    def __init__(self, level: int = 6):
        if not (0 <= level <= 9):
            raise ValueError(f"zlib level must be 0..9, got {level}")
        self.level = level

    def new_compressor(self) -> ZlibCompressor:
        return ZlibCompressor(self.level)

    def new_decompressor(self) -> ZlibDecompressor:
        return ZlibDecompressor()

    def __repr__(self) -> str:
        return f"CodecZlib(level={self.level})"
