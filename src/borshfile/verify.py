"""Verification helpers.

A slice file has no index and no checksums, so "verify" means: walk every
frame from offset 0 to the end and make sure each one is complete (and, for
compressed files, decodes). The first bad frame raises; nothing is repaired.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from borshfile.core.frame import U32_LEN, decode_frame
from borshfile.core.compressed import decompress_payload
from borshfile.core.pool import CodecPools
from borshfile.errors import EndOfStream


@dataclass(frozen=True)
class FrameInfo:
    index: int
    offset: int
    on_disk_length: int
    payload_length: int


@dataclass(frozen=True)
class VerifyReport:
    frames: int
    on_disk_bytes: int
    payload_bytes: int

    def to_dict(self) -> dict[str, int]:
        return {
            "frames": self.frames,
            "on_disk_bytes": self.on_disk_bytes,
            "payload_bytes": self.payload_bytes,
        }


def scan_slice_file(
    path: Path, *, compressed: bool, pools: Optional[CodecPools] = None
) -> Iterator[tuple[FrameInfo, bytes]]:
    """Yield (FrameInfo, payload) for every frame, in file order.

    Read-only: the file is opened "rb", never created.
    """
    p = Path(path)
    with p.open("rb") as fp:
        index = 0
        offset = 0
        while True:
            try:
                content, length = decode_frame(fp)
            except EndOfStream:
                return
            payload = decompress_payload(content, pools) if compressed else content
            yield (
                FrameInfo(
                    index=index,
                    offset=offset,
                    on_disk_length=length,
                    payload_length=len(payload),
                ),
                payload,
            )
            index += 1
            offset += U32_LEN + length


def verify_slice_file(
    path: Path, *, compressed: bool, pools: Optional[CodecPools] = None
) -> VerifyReport:
    frames = 0
    on_disk = 0
    payload_total = 0
    for info, _payload in scan_slice_file(path, compressed=compressed, pools=pools):
        frames += 1
        on_disk += U32_LEN + info.on_disk_length
        payload_total += info.payload_length
    return VerifyReport(frames=frames, on_disk_bytes=on_disk, payload_bytes=payload_total)
