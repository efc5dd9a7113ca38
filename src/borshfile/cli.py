"""borshfile CLI.

This is the stable CLI entrypoint (console-script: ``borshfile``).

The file format has no tag byte: whether a file holds plain or compressed
slices is the caller's knowledge, hence ``--compressed`` on every command.
"""

from __future__ import annotations

import argparse
import json
import sys
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path

from borshfile.codec_spec import CodecSpecError, load_codec_spec
from borshfile.core.pool import CodecPools
from borshfile.errors import EXIT_GENERIC, EXIT_IO, EXIT_USAGE, BorshFileError, UsageError


def _version() -> str:
    try:
        return version("borshfile")
    except PackageNotFoundError:
        return "0+unknown"


def _add_common_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--debug", action="store_true", help="Show stack traces on errors")


def _add_codec_args(p: argparse.ArgumentParser) -> None:
    p.add_argument(
        "--compressed",
        action="store_true",
        help="Slices are compressed (zstd by default, see --codec-spec)",
    )
    p.add_argument(
        "--codec-spec",
        default=None,
        help=(
            "Codec spec JSON (@file.json or inline JSON), e.g. "
            '\'{"spec":"borshfile.codec.v1","codec":"zlib","level":9}\'. '
            "Requires --compressed."
        ),
    )


def _pools_from_arg(codec_spec_arg: str | None, *, compressed: bool) -> CodecPools | None:
    if codec_spec_arg is None:
        return None
    if not compressed:
        raise UsageError("--codec-spec requires --compressed")
    return load_codec_spec(codec_spec_arg).build_pools()


def _cmd_append(
    file_path: Path, inputs: list[Path], *, compressed: bool, codec_spec_arg: str | None
) -> int:
    from borshfile.engine.slice_file import SliceFile

    pools = _pools_from_arg(codec_spec_arg, compressed=compressed)
    for inp in inputs:
        if not inp.is_file():
            raise UsageError(f"input not found: {inp}")

    with SliceFile(file_path, pools=pools) as sf:
        # The wrapper never seeks: position at the end so we append, not overwrite.
        sf.file.seek(0, 2)
        for inp in inputs:
            data = inp.read_bytes()
            if compressed:
                n = sf.write_compressed_slice(data)
            else:
                n = sf.write_slice(data)
            print(f"{inp}\t{len(data)}\t{n}")
        sf.flush()
    return 0


def _cmd_extract(
    file_path: Path, out_dir: Path, *, compressed: bool, codec_spec_arg: str | None
) -> int:
    from borshfile.verify import scan_slice_file

    if not file_path.is_file():
        raise UsageError(f"file not found: {file_path}")
    pools = _pools_from_arg(codec_spec_arg, compressed=compressed)
    out_dir.mkdir(parents=True, exist_ok=True)
    n = 0
    for info, payload in scan_slice_file(file_path, compressed=compressed, pools=pools):
        (out_dir / f"slice_{info.index:06d}.bin").write_bytes(payload)
        n += 1
    print(f"extracted {n} slices to {out_dir}")
    return 0


def _cmd_list(
    file_path: Path, *, compressed: bool, codec_spec_arg: str | None, as_json: bool
) -> int:
    from borshfile.verify import scan_slice_file

    if not file_path.is_file():
        raise UsageError(f"file not found: {file_path}")
    pools = _pools_from_arg(codec_spec_arg, compressed=compressed)
    rows = []
    for info, _payload in scan_slice_file(file_path, compressed=compressed, pools=pools):
        if as_json:
            rows.append(
                {
                    "index": info.index,
                    "offset": info.offset,
                    "on_disk_length": info.on_disk_length,
                    "payload_length": info.payload_length,
                }
            )
        else:
            print(f"{info.index}\t{info.offset}\t{info.on_disk_length}\t{info.payload_length}")
    if as_json:
        print(json.dumps({"frames": rows}, separators=(",", ":")))
    return 0


def _cmd_verify(
    file_path: Path, *, compressed: bool, codec_spec_arg: str | None, as_json: bool
) -> int:
    from borshfile.verify import verify_slice_file

    if not file_path.is_file():
        raise UsageError(f"file not found: {file_path}")
    pools = _pools_from_arg(codec_spec_arg, compressed=compressed)
    report = verify_slice_file(file_path, compressed=compressed, pools=pools)
    if as_json:
        print(json.dumps({"ok": True, **report.to_dict()}, separators=(",", ":")))
    else:
        print("OK")
    return 0


def _cmd_spec_validate(codec_spec_arg: str) -> int:
    # load is the validation
    spec = load_codec_spec(codec_spec_arg)
    spec.build_codec()
    print("OK")
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="borshfile", description="Length-prefixed (optionally compressed) slice files"
    )
    p.add_argument("--version", action="version", version=f"borshfile {_version()}")
    sub = p.add_subparsers(dest="cmd", required=True)

    p_a = sub.add_parser("append", help="Append input files as slices at the end of FILE")
    p_a.add_argument("file", type=Path)
    p_a.add_argument("inputs", type=Path, nargs="+")
    _add_codec_args(p_a)
    _add_common_args(p_a)

    p_x = sub.add_parser("extract", help="Write every slice to OUTDIR/slice_NNNNNN.bin")
    p_x.add_argument("file", type=Path)
    p_x.add_argument("out_dir", type=Path)
    _add_codec_args(p_x)
    _add_common_args(p_x)

    p_l = sub.add_parser("list", help="List frames: index, offset, on-disk length, payload length")
    p_l.add_argument("file", type=Path)
    p_l.add_argument("--json", action="store_true", help="Print a JSON object to stdout")
    _add_codec_args(p_l)
    _add_common_args(p_l)

    p_v = sub.add_parser("verify", help="Scan FILE to the end, fail on the first bad frame")
    p_v.add_argument("file", type=Path)
    p_v.add_argument("--json", action="store_true", help="Print a JSON report to stdout")
    _add_codec_args(p_v)
    _add_common_args(p_v)

    p_s = sub.add_parser("spec-validate", help="Validate a codec spec (v1)")
    p_s.add_argument("codec_spec", help="Codec spec JSON (@file.json or inline JSON)")
    _add_common_args(p_s)

    return p


def main(argv: list[str] | None = None) -> int:
    argv = list(sys.argv[1:] if argv is None else argv)
    p = build_parser()
    ns = p.parse_args(argv)

    try:
        if ns.cmd == "append":
            return _cmd_append(
                ns.file,
                list(ns.inputs),
                compressed=bool(ns.compressed),
                codec_spec_arg=ns.codec_spec,
            )
        if ns.cmd == "extract":
            return _cmd_extract(
                ns.file, ns.out_dir, compressed=bool(ns.compressed), codec_spec_arg=ns.codec_spec
            )
        if ns.cmd == "list":
            return _cmd_list(
                ns.file,
                compressed=bool(ns.compressed),
                codec_spec_arg=ns.codec_spec,
                as_json=bool(ns.json),
            )
        if ns.cmd == "verify":
            return _cmd_verify(
                ns.file,
                compressed=bool(ns.compressed),
                codec_spec_arg=ns.codec_spec,
                as_json=bool(ns.json),
            )
        if ns.cmd == "spec-validate":
            return _cmd_spec_validate(str(ns.codec_spec))
        raise AssertionError("unreachable")

    except SystemExit:
        raise
    except CodecSpecError as e:
        # Treat as usage/config error.
        if getattr(ns, "debug", False):
            raise
        print(f"[borshfile] {e}", file=sys.stderr)
        return EXIT_USAGE
    except BorshFileError as e:
        if getattr(ns, "debug", False):
            raise
        print(f"[borshfile] {e}", file=sys.stderr)
        return int(getattr(e, "exit_code", EXIT_GENERIC) or EXIT_GENERIC)
    except OSError as e:
        if getattr(ns, "debug", False):
            raise
        print(f"[borshfile] I/O error: {e}", file=sys.stderr)
        return EXIT_IO
    except Exception as e:
        if getattr(ns, "debug", False):
            raise
        print(f"[borshfile] error: {e}", file=sys.stderr)
        return EXIT_GENERIC


if __name__ == "__main__":
    raise SystemExit(main())
