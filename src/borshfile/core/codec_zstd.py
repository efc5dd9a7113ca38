from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar

import zstandard as zstd

ZSTD_LEVEL_MIN = 1
ZSTD_LEVEL_MAX = 22


class ZstdDecoder:
    """One-shot decode of whatever zstd content a frame holds.

    - empty content is an empty payload (writers may store b"" as zero bytes)
    - frames with a content size go through ZstdDecompressor.decompress()
    - frames without one (streaming encoders) go through decompressobj(),
      frame by frame, and must end exactly on a frame boundary
    """

    def __init__(self) -> None:
        self._dctx = zstd.ZstdDecompressor()

    def decompress(self, data: bytes) -> bytes:
        if not data:
            return b""
        if zstd.frame_content_size(data) != -1:
            return self._dctx.decompress(data)

        out = bytearray()
        rest = bytes(data)
        while rest:
            dobj = self._dctx.decompressobj()
            out += dobj.decompress(rest)
            if not dobj.eof:
                raise zstd.ZstdError("incomplete zstd frame (truncated?)")
            rest = dobj.unused_data
        return bytes(out)


@dataclass(frozen=True)
class CodecZstd:
    """
    zstd byte codec (python-zstandard).

    Instances built here are what the pools hand out:
      - ZstdCompressor: one-shot compress(), writes the content size in the frame
      - ZstdDecoder: one-shot decode, with or without a content size

    Neither object is safe for concurrent use: the pool guarantees exclusive borrow.
    """

    level: int = 3
    codec_id: str = "zstd"
    errors: ClassVar[tuple[type[BaseException], ...]] = (zstd.ZstdError,)

    def __post_init__(self) -> None:
        if not (ZSTD_LEVEL_MIN <= int(self.level) <= ZSTD_LEVEL_MAX):
            raise ValueError(
                f"zstd level must be {ZSTD_LEVEL_MIN}..{ZSTD_LEVEL_MAX}, got {self.level}"
            )

    def new_compressor(self) -> zstd.ZstdCompressor:
        return zstd.ZstdCompressor(
            level=int(self.level),
            write_content_size=True,
            write_checksum=False,
        )

    def new_decompressor(self) -> ZstdDecoder:
        return ZstdDecoder()
