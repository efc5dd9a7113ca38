"""Compressed slices.

Same framing as a plain slice: [len u32 LE][compressed payload].
There is no tag byte, so a reader cannot tell a compressed frame from a plain
one: whoever writes the file must track that out of band.

The length handed back by read_compressed_slice() is the on-disk length
(compressed bytes), NOT len(payload).
"""

from __future__ import annotations

from typing import BinaryIO, Optional

from borshfile.core.frame import decode_frame, encode_frame
from borshfile.core.pool import CodecPools, default_pools
from borshfile.errors import CompressionError, DecompressionError


def _resolve(pools: Optional[CodecPools]) -> CodecPools:
    return default_pools() if pools is None else pools


def compress_payload(payload: bytes, pools: Optional[CodecPools] = None) -> bytes:
    pp = _resolve(pools)
    with pp.compressors.borrow() as enc:
        try:
            return bytes(enc.compress(bytes(payload)))
        except pp.errors as e:
            raise CompressionError(f"{pp.codec.codec_id}: compression failed: {e}") from e


def decompress_payload(comp: bytes, pools: Optional[CodecPools] = None) -> bytes:
    pp = _resolve(pools)
    with pp.decompressors.borrow() as dec:
        try:
            return bytes(dec.decompress(bytes(comp)))
        except pp.errors as e:
            raise DecompressionError(f"{pp.codec.codec_id}: decompression failed: {e}") from e


def write_compressed_slice(
    payload: bytes, sink: BinaryIO, pools: Optional[CodecPools] = None
) -> int:
    """Compress payload in one shot and write it as a frame.

    Returns total bytes written (4 + compressed length).
    """
    comp = compress_payload(payload, pools)
    return encode_frame(comp, sink)


def read_compressed_slice(
    source: BinaryIO, pools: Optional[CodecPools] = None
) -> tuple[bytes, int]:
    """Read one frame and decompress it. Returns (payload, on_disk_length)."""
    comp, on_disk_length = decode_frame(source)
    return decompress_payload(comp, pools), on_disk_length
