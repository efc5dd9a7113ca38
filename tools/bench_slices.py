#!/usr/bin/env python3
"""Compressed-slice benchmark/soak tool.

Writes --slices payloads per job into one slice file per job (threads share one
codec pool), then verifies and reads everything back, collecting basic timing,
peak RSS and how many codec instances the pools had to build.

Usage example:
  python tools/bench_slices.py --jobs 4 --slices 2000 --size 4096 --iters 3
  python tools/bench_slices.py --codec-spec '{"spec":"borshfile.codec.v1","codec":"zlib"}'

Notes:
- Uses internal APIs (no subprocess). Run inside repo venv.
- By default uses a temp output directory.
"""

from __future__ import annotations

import argparse
import json
import random
import resource
import shutil
import tempfile
import time
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Any


def _peak_rss_kb() -> int:
    # Linux: ru_maxrss is KB
    return int(resource.getrusage(resource.RUSAGE_SELF).ru_maxrss)


def _payload(rng: random.Random, size: int) -> bytes:
    # half text-ish (compressible), half random
    words = [b"alpha", b"beta", b"gamma", b"delta", b"slice", b"frame"]
    text = b" ".join(rng.choice(words) for _ in range(size // 12 + 1))[: size // 2]
    return text + rng.randbytes(size - len(text))


def main(argv: list[str] | None = None) -> int:
    ap = argparse.ArgumentParser(prog="bench_slices.py", description="borshfile slice benchmark")
    ap.add_argument("--jobs", type=int, default=1)
    ap.add_argument("--slices", type=int, default=1000, help="Slices per job")
    ap.add_argument("--size", type=int, default=4096, help="Payload size in bytes")
    ap.add_argument("--iters", type=int, default=3)
    ap.add_argument("--seed", type=int, default=1234)
    ap.add_argument("--codec-spec", default=None, help="Codec spec (@file.json or inline JSON)")
    ap.add_argument(
        "--output", type=Path, default=None, help="Optional output dir (will be wiped each iter)"
    )
    ns = ap.parse_args(argv)

    from borshfile.codec_spec import CodecSpecV1, load_codec_spec
    from borshfile.engine.slice_file import SliceFile
    from borshfile.verify import verify_slice_file

    spec = load_codec_spec(ns.codec_spec) if ns.codec_spec else CodecSpecV1()
    jobs = max(1, int(ns.jobs))
    out = (ns.output or Path(tempfile.gettempdir()) / "borshfile_bench_out").resolve()

    rows: list[dict[str, Any]] = []
    t0_all = time.perf_counter()

    for i in range(int(ns.iters)):
        if out.exists():
            shutil.rmtree(out)
        out.mkdir(parents=True)
        pools = spec.build_pools()
        payloads = [
            [
                _payload(random.Random(ns.seed + j * 1_000_003 + k), int(ns.size))
                for k in range(int(ns.slices))
            ]
            for j in range(jobs)
        ]

        def _write(j: int) -> int:
            with SliceFile(out / f"job_{j:03d}.bsl", pools=pools) as sf:
                return sum(sf.write_compressed_slice(p) for p in payloads[j])

        def _read(j: int) -> bool:
            with SliceFile(out / f"job_{j:03d}.bsl", pools=pools) as sf:
                return [p for p, _n in sf.iter_compressed_slices()] == payloads[j]

        rss0 = _peak_rss_kb()
        t0 = time.perf_counter()
        with ThreadPoolExecutor(max_workers=jobs) as ex:
            written = sum(ex.map(_write, range(jobs)))
        t_write = time.perf_counter() - t0

        t1 = time.perf_counter()
        for j in range(jobs):
            verify_slice_file(out / f"job_{j:03d}.bsl", compressed=True, pools=pools)
        t_verify = time.perf_counter() - t1

        t2 = time.perf_counter()
        with ThreadPoolExecutor(max_workers=jobs) as ex:
            same = all(ex.map(_read, range(jobs)))
        t_read = time.perf_counter() - t2
        rss1 = _peak_rss_kb()

        raw_total = jobs * int(ns.slices) * int(ns.size)
        row = {
            "iter": i + 1,
            "codec": spec.codec,
            "level": spec.effective_level(),
            "jobs": jobs,
            "slices": jobs * int(ns.slices),
            "bytes_raw": raw_total,
            "bytes_on_disk": written,
            "ratio": (written / raw_total) if raw_total else 0.0,
            "times_sec": {
                "write": t_write,
                "verify": t_verify,
                "read": t_read,
                "total": t_write + t_verify + t_read,
            },
            "pool_created": {
                "compress": pools.compressors.created,
                "decompress": pools.decompressors.created,
            },
            "peak_rss_kb": {"before": rss0, "after": rss1, "max": max(rss0, rss1)},
            "roundtrip_ok": bool(same),
        }
        rows.append(row)
        print(json.dumps(row, ensure_ascii=False))
        if not same:
            raise SystemExit("roundtrip mismatch: payloads differ after read")

    total = time.perf_counter() - t0_all
    if rows:
        avg_total = sum(r["times_sec"]["total"] for r in rows) / len(rows)
    else:
        avg_total = 0.0
    summary = {
        "schema": "borshfile.bench_slices.v1",
        "iters": len(rows),
        "avg_total_sec": avg_total,
        "wall_total_sec": total,
        "max_peak_rss_kb": max((r["peak_rss_kb"]["max"] for r in rows), default=0),
    }
    print(json.dumps(summary, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
