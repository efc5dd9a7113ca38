#!/usr/bin/env python3
"""Render the borshfile exit-code table (errors.EXIT_CODES) as markdown.

  gen_exit_codes_md.py                 write docs/exit_codes.md
  gen_exit_codes_md.py --out FILE      write FILE instead
  gen_exit_codes_md.py --check         exit 1 if the file is missing or stale
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

REPO = Path(__file__).resolve().parents[1]


def main(argv: list[str] | None = None) -> int:
    p = argparse.ArgumentParser(prog="gen_exit_codes_md")
    p.add_argument("--out", type=Path, default=REPO / "docs" / "exit_codes.md")
    p.add_argument("--check", action="store_true", help="Compare instead of writing")
    ns = p.parse_args(argv)

    sys.path.insert(0, str(REPO / "src"))
    from borshfile.errors import render_exit_codes_markdown  # noqa: E402

    rendered = render_exit_codes_markdown()
    out: Path = ns.out

    if ns.check:
        current = out.read_text(encoding="utf-8") if out.is_file() else None
        if current != rendered:
            state = "missing" if current is None else "stale"
            print(
                f"[borshfile] {out} is {state}: rerun scripts/gen_exit_codes_md.py",
                file=sys.stderr,
            )
            return 1
        print(f"[borshfile] {out} up to date")
        return 0

    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(rendered, encoding="utf-8")
    print(f"[borshfile] wrote {out}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
