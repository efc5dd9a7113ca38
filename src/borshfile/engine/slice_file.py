"""SliceFile: a read-write file of length-prefixed slices.

The file is opened read-write and created (0o666, minus umask) if missing.
Every operation works at the file's current position; the wrapper never
seeks on its own. Not safe for concurrent use: two threads sharing one
SliceFile must serialize externally (writes are header + content, reads share
one cursor).
"""

from __future__ import annotations

import os
from collections.abc import Iterator
from pathlib import Path
from typing import BinaryIO, Optional

from borshfile.core import frame
from borshfile.core.compressed import read_compressed_slice, write_compressed_slice
from borshfile.core.pool import CodecPools
from borshfile.errors import EndOfStream

COPY_CHUNK_SIZE = 256 * 1024


class SliceFile:
    def __init__(self, path: Path, *, pools: Optional[CodecPools] = None):
        self.path = Path(path)
        self.pools = pools
        fd = os.open(str(self.path), os.O_RDWR | os.O_CREAT, 0o666)
        try:
            self._fp: BinaryIO = os.fdopen(fd, "r+b")
        except BaseException:
            os.close(fd)
            raise
        self._closed = False

    @property
    def file(self) -> BinaryIO:
        """The underlying binary file object."""
        return self._fp

    @property
    def closed(self) -> bool:
        return self._closed

    def _check_open(self) -> None:
        if self._closed:
            raise ValueError(f"SliceFile: operation on closed file {self.path}")

    # -------------------
    # write
    # -------------------
    def write_bytes(self, buf: bytes) -> int:
        self._check_open()
        n = self._fp.write(bytes(buf))
        return len(buf) if n is None else int(n)

    def write_bytes_from_reader(
        self, reader: BinaryIO, *, chunk_size: int = COPY_CHUNK_SIZE
    ) -> int:
        """Drain reader into the file. Returns bytes copied."""
        self._check_open()
        if chunk_size <= 0:
            chunk_size = COPY_CHUNK_SIZE
        total = 0
        while True:
            chunk = reader.read(chunk_size)
            if not chunk:
                break
            total += self.write_bytes(chunk)
        return total

    def write_uint32_le(self, value: int) -> None:
        self._check_open()
        frame.write_uint32_le(self._fp, value)

    def write_slice(self, buf: bytes) -> int:
        self._check_open()
        return frame.encode_frame(buf, self._fp)

    def write_compressed_slice(self, buf: bytes) -> int:
        self._check_open()
        return write_compressed_slice(buf, self._fp, self.pools)

    # -------------------
    # read
    # -------------------
    def read_uint32_le(self) -> int:
        self._check_open()
        return frame.read_uint32_le(self._fp)

    def read_slice(self) -> tuple[bytes, int]:
        self._check_open()
        return frame.decode_frame(self._fp)

    def read_compressed_slice(self) -> tuple[bytes, int]:
        """Returns (payload, on_disk_length). on_disk_length is the compressed size."""
        self._check_open()
        return read_compressed_slice(self._fp, self.pools)

    def iter_slices(self) -> Iterator[tuple[bytes, int]]:
        """Yield plain slices from the current position until a clean end of file."""
        while True:
            try:
                yield self.read_slice()
            except EndOfStream:
                return

    def iter_compressed_slices(self) -> Iterator[tuple[bytes, int]]:
        while True:
            try:
                yield self.read_compressed_slice()
            except EndOfStream:
                return

    # -------------------
    # lifecycle
    # -------------------
    def flush(self) -> None:
        self._check_open()
        self._fp.flush()

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._fp.close()

    def __enter__(self) -> "SliceFile":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __repr__(self) -> str:
        state = "closed" if self._closed else "open"
        return f"SliceFile({str(self.path)!r}, {state})"
