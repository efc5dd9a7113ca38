from __future__ import annotations

import io
import os
from pathlib import Path

import pytest

from borshfile.core.codec_zlib import CodecZlib
from borshfile.core.codec_zstd import CodecZstd
from borshfile.core.pool import CodecPools
from borshfile.engine.slice_file import SliceFile
from borshfile.errors import EndOfStream, TruncatedContentError, TruncatedHeaderError


@pytest.fixture
def pools() -> CodecPools:
    return CodecPools.for_codec(CodecZstd())


def test_creates_missing_file(tmp_path: Path) -> None:
    p = tmp_path / "new.bsl"
    assert not p.exists()
    with SliceFile(p) as sf:
        assert sf.path == p
    assert p.is_file()
    assert p.stat().st_size == 0


def test_opens_existing_without_truncating(tmp_path: Path) -> None:
    p = tmp_path / "old.bsl"
    p.write_bytes(b"\x02\x00\x00\x00hi")
    with SliceFile(p) as sf:
        assert sf.read_slice() == (b"hi", 2)
    assert p.read_bytes() == b"\x02\x00\x00\x00hi"


def test_plain_slices_write_then_read(tmp_path: Path) -> None:
    p = tmp_path / "plain.bsl"
    items = [b"first", b"", b"\x00\xff" * 300]

    with SliceFile(p) as sf:
        sizes = [sf.write_slice(x) for x in items]
    assert sizes == [4 + len(x) for x in items]
    assert p.stat().st_size == sum(sizes)

    with SliceFile(p) as sf:
        for x in items:
            assert sf.read_slice() == (x, len(x))
        with pytest.raises(EndOfStream):
            sf.read_slice()


def test_compressed_slices_write_then_read(tmp_path: Path, pools: CodecPools) -> None:
    p = tmp_path / "z.bsl"
    items = [b"alpha " * 500, os.urandom(1000), b""]

    with SliceFile(p, pools=pools) as sf:
        written = [sf.write_compressed_slice(x) for x in items]

    with SliceFile(p, pools=pools) as sf:
        for x, n in zip(items, written):
            payload, on_disk = sf.read_compressed_slice()
            assert payload == x
            assert on_disk == n - 4


def test_wrapper_never_seeks(tmp_path: Path) -> None:
    # write then read on the same handle: the read starts where the write stopped
    p = tmp_path / "cursor.bsl"
    with SliceFile(p) as sf:
        sf.write_slice(b"abc")
        with pytest.raises(EndOfStream):
            sf.read_slice()
        sf.file.seek(0)
        assert sf.read_slice() == (b"abc", 3)


def test_write_at_cursor_overwrites(tmp_path: Path) -> None:
    p = tmp_path / "over.bsl"
    with SliceFile(p) as sf:
        sf.write_slice(b"aaaa")
    with SliceFile(p) as sf:
        # fresh handle, cursor at 0: same-size write replaces the first frame
        sf.write_slice(b"bbbb")
    with SliceFile(p) as sf:
        assert list(sf.iter_slices()) == [(b"bbbb", 4)]


def test_raw_bytes_and_uint32(tmp_path: Path) -> None:
    p = tmp_path / "raw.bsl"
    with SliceFile(p) as sf:
        sf.write_uint32_le(0xDEADBEEF)
        assert sf.write_bytes(b"tail") == 4
    assert p.read_bytes() == b"\xef\xbe\xad\xde" + b"tail"

    with SliceFile(p) as sf:
        assert sf.read_uint32_le() == 0xDEADBEEF


def test_write_bytes_from_reader(tmp_path: Path) -> None:
    p = tmp_path / "copy.bsl"
    src = io.BytesIO(os.urandom(10_000))
    with SliceFile(p) as sf:
        n = sf.write_bytes_from_reader(src, chunk_size=999)
    assert n == 10_000
    assert p.read_bytes() == src.getvalue()


def test_hand_built_frame_from_parts(tmp_path: Path) -> None:
    # uint32 + copy-from-stream builds the same bytes as write_slice
    body = b"streamed body"
    a = tmp_path / "a.bsl"
    b = tmp_path / "b.bsl"
    with SliceFile(a) as sf:
        sf.write_uint32_le(len(body))
        sf.write_bytes_from_reader(io.BytesIO(body))
    with SliceFile(b) as sf:
        sf.write_slice(body)
    assert a.read_bytes() == b.read_bytes()


def test_iter_slices_stops_cleanly(tmp_path: Path) -> None:
    p = tmp_path / "many.bsl"
    items = [f"rec-{i}".encode() for i in range(25)]
    with SliceFile(p) as sf:
        for x in items:
            sf.write_slice(x)
    with SliceFile(p) as sf:
        assert [c for c, _n in sf.iter_slices()] == items


def test_iter_compressed_slices_with_zlib(tmp_path: Path) -> None:
    pools = CodecPools.for_codec(CodecZlib(level=9))
    p = tmp_path / "zl.bsl"
    items = [b"x" * i for i in range(0, 2000, 250)]
    with SliceFile(p, pools=pools) as sf:
        for x in items:
            sf.write_compressed_slice(x)
    with SliceFile(p, pools=pools) as sf:
        assert [c for c, _n in sf.iter_compressed_slices()] == items


def test_iter_slices_raises_on_truncated_tail(tmp_path: Path) -> None:
    p = tmp_path / "cut.bsl"
    with SliceFile(p) as sf:
        sf.write_slice(b"complete")
        sf.write_slice(b"will be cut")
    data = p.read_bytes()
    p.write_bytes(data[:-3])

    with SliceFile(p) as sf:
        it = sf.iter_slices()
        assert next(it) == (b"complete", 8)
        with pytest.raises(TruncatedContentError):
            next(it)


def test_truncated_header_in_file(tmp_path: Path) -> None:
    p = tmp_path / "hdr.bsl"
    p.write_bytes(b"\x01\x00")
    with SliceFile(p) as sf:
        with pytest.raises(TruncatedHeaderError):
            sf.read_slice()


def test_huge_declared_length_in_real_file(tmp_path: Path) -> None:
    # header claims 4 GiB - 1 on a 6-byte file
    p = tmp_path / "huge.bsl"
    p.write_bytes(b"\xff\xff\xff\xff" + b"xy")
    with SliceFile(p) as sf:
        with pytest.raises(TruncatedContentError) as ei:
            sf.read_slice()
    assert ei.value.expected == 0xFFFFFFFF
    assert ei.value.got == 2

    pools = CodecPools.for_codec(CodecZstd())
    with SliceFile(p, pools=pools) as sf:
        with pytest.raises(TruncatedContentError):
            sf.read_compressed_slice()
    assert pools.decompressors.created == 0


def test_closed_file_rejects_operations(tmp_path: Path) -> None:
    sf = SliceFile(tmp_path / "c.bsl")
    sf.close()
    sf.close()  # idempotent
    assert sf.closed
    with pytest.raises(ValueError, match="closed"):
        sf.write_slice(b"x")
    with pytest.raises(ValueError, match="closed"):
        sf.read_slice()
