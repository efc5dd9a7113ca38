from __future__ import annotations

import subprocess
import sys
from pathlib import Path

from borshfile import errors


def test_exit_codes_unique_and_stable() -> None:
    codes = [e.code for e in errors.EXIT_CODES]
    names = [e.name for e in errors.EXIT_CODES]
    assert len(codes) == len(set(codes))
    assert len(names) == len(set(names))
    assert errors.exit_code_by_name("corrupt_frame") == 11
    assert errors.exit_code_info(12).name == "CODEC"
    assert errors.exit_code_info(99) is None


def test_exceptions_carry_exit_codes() -> None:
    assert errors.TruncatedHeaderError("x").exit_code == errors.EXIT_CORRUPT_FRAME
    assert errors.TruncatedContentError("x").exit_code == errors.EXIT_CORRUPT_FRAME
    assert errors.CompressionError("x").exit_code == errors.EXIT_CODEC
    assert errors.DecompressionError("x").exit_code == errors.EXIT_CODEC
    assert errors.PoolExhaustedError("x").exit_code == errors.EXIT_POOL_EXHAUSTED
    assert errors.UsageError("x").exit_code == errors.EXIT_USAGE


def test_render_markdown_lists_every_code() -> None:
    md = errors.render_exit_codes_markdown()
    for e in errors.EXIT_CODES:
        assert f"| {e.code} | `{e.name}` |" in md


def _gen_script(*args: str) -> subprocess.CompletedProcess[str]:
    script = Path(__file__).resolve().parents[1] / "scripts" / "gen_exit_codes_md.py"
    return subprocess.run(
        [sys.executable, str(script), *args], text=True, capture_output=True
    )


def test_gen_exit_codes_md_write_then_check(tmp_path: Path) -> None:
    out = tmp_path / "docs" / "exit_codes.md"

    r = _gen_script("--out", str(out), "--check")
    assert r.returncode == 1
    assert "missing" in r.stderr

    r = _gen_script("--out", str(out))
    assert r.returncode == 0, r.stderr
    assert out.read_text(encoding="utf-8") == errors.render_exit_codes_markdown()

    r = _gen_script("--out", str(out), "--check")
    assert r.returncode == 0, r.stderr

    out.write_text("# Exit codes\n", encoding="utf-8")
    r = _gen_script("--out", str(out), "--check")
    assert r.returncode == 1
    assert "stale" in r.stderr
