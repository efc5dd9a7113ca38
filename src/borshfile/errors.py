"""Typed errors for borshfile.

Single source of truth for exit codes lives here.

Policy:
- Errors are small and boring.
- Core code raises, never logs or retries. Callers decide.
- The CLI maps errors to stable exit codes (see EXIT_* constants).
- docs/exit_codes.md is generated from this module (scripts/gen_exit_codes_md.py).
"""

from __future__ import annotations

from dataclasses import dataclass

# -------------------------
# Exit codes (single source)
# -------------------------

EXIT_OK = 0
EXIT_USAGE = 2
EXIT_GENERIC = 10
EXIT_CORRUPT_FRAME = 11
EXIT_CODEC = 12
EXIT_POOL_EXHAUSTED = 13
EXIT_IO = 14


@dataclass(frozen=True, slots=True)
class ExitCodeInfo:
    code: int
    name: str
    description: str


EXIT_CODES: tuple[ExitCodeInfo, ...] = (
    ExitCodeInfo(EXIT_OK, "OK", "Success"),
    ExitCodeInfo(EXIT_USAGE, "USAGE", "Usage/config error (invalid args, invalid codec spec, etc.)"),
    ExitCodeInfo(EXIT_GENERIC, "GENERIC", "Generic failure (unexpected error)"),
    ExitCodeInfo(EXIT_CORRUPT_FRAME, "CORRUPT_FRAME", "File ended mid-frame (truncated header or content)"),
    ExitCodeInfo(EXIT_CODEC, "CODEC", "Codec rejected the payload (compression/decompression failure)"),
    ExitCodeInfo(EXIT_POOL_EXHAUSTED, "POOL_EXHAUSTED", "Bounded codec pool has no instance available"),
    ExitCodeInfo(EXIT_IO, "IO", "Underlying file/stream I/O failure"),
)

# For convenience (fast lookup)
_EXIT_CODE_BY_NAME: dict[str, int] = {e.name: e.code for e in EXIT_CODES}
_EXIT_CODE_BY_CODE: dict[int, ExitCodeInfo] = {e.code: e for e in EXIT_CODES}


def exit_code_info(code: int) -> ExitCodeInfo | None:
    return _EXIT_CODE_BY_CODE.get(int(code))


def exit_code_by_name(name: str) -> int | None:
    return _EXIT_CODE_BY_NAME.get(str(name).strip().upper())


def render_exit_codes_markdown() -> str:
    """Render docs/exit_codes.md content."""
    lines: list[str] = []
    lines.append("# Exit codes\n")
    lines.append("> GENERATED FILE. Do not edit manually.\n")
    lines.append("> Source of truth: `src/borshfile/errors.py` (EXIT_CODES).\n")
    lines.append("> Regenerate: `python scripts/gen_exit_codes_md.py`.\n\n")
    lines.append("These are the CLI exit codes you can rely on.\n\n")
    lines.append("| Code | Name | Meaning |\n")
    lines.append("|---:|---|---|\n")
    for e in sorted(EXIT_CODES, key=lambda x: x.code):
        lines.append(f"| {e.code} | `{e.name}` | {e.description} |\n")
    lines.append("\n## Notes\n")
    lines.append("- Most internal errors extend `BorshFileError` and carry an `exit_code`.\n")
    lines.append("- Plain `OSError` from the file layer maps to `IO`.\n")
    lines.append("- `--debug` re-raises errors to show full stack traces.\n")
    lines.append(
        "- `--json` on `verify`/`list` prints a JSON object to stdout; errors still go to stderr.\n"
    )
    return "".join(lines)


# ---------------
# Typed exceptions
# ---------------


class BorshFileError(Exception):
    """Base error for borshfile."""

    exit_code: int = EXIT_GENERIC


class UsageError(BorshFileError):
    exit_code = EXIT_USAGE


class EndOfStream(BorshFileError, EOFError):
    """Clean end of stream: no byte of a new frame header was available.

    Not corruption. Sequential scanners use it as their stop condition.
    """


class CorruptFrame(BorshFileError):
    exit_code = EXIT_CORRUPT_FRAME

    def __init__(self, message: str, *, expected: int = 0, got: int = 0) -> None:
        super().__init__(message)
        self.expected = int(expected)
        self.got = int(got)


class TruncatedHeaderError(CorruptFrame):
    pass


class TruncatedContentError(CorruptFrame):
    pass


class CodecError(BorshFileError):
    exit_code = EXIT_CODEC


class CompressionError(CodecError):
    pass


class DecompressionError(CodecError):
    pass


class PoolExhaustedError(BorshFileError):
    exit_code = EXIT_POOL_EXHAUSTED


class ShortWriteError(OSError):
    """The sink accepted fewer bytes than it was given."""
