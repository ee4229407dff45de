"""Content search with ripgrep and parsing of its ``--heading`` output."""

from __future__ import annotations

import asyncio
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Union

from fsmcore.task_report import TaskReport

log = logging.getLogger(__name__)

_ESCAPE = "\x1b"
_U32_MAX = 0xFFFFFFFF
_U32_RE = re.compile(r"\+?[0-9]+")
_READ_LIMIT = 1 << 20

FileHit = tuple[Path, Optional[int]]


@dataclass
class RawSearchResult:
    """Output of one search: raw coloured lines and their plain text."""

    lines: list[str] = field(default_factory=list)
    parsed_lines: list[str] = field(default_factory=list)
    total_matches: int = 0
    base_directory: Path = field(default_factory=Path)


def strip_ansi_codes(text: str) -> str:
    """Remove ANSI escape sequences from ``text``."""
    out: list[str] = []
    chars = iter(text)
    for char in chars:
        if char != _ESCAPE:
            out.append(char)
            continue
        if next(chars, None) == "[":
            for follower in chars:
                if follower.isascii() and follower.isalpha():
                    break
    return "".join(out)


def _parse_u32(text: str) -> Optional[int]:
    text = text.strip()
    if not _U32_RE.fullmatch(text):
        return None
    value = int(text)
    return value if value <= _U32_MAX else None


def parse_file_info(line: str) -> Optional[FileHit]:
    """Parse a ``file:line:content`` line or a bare file heading."""
    clean = strip_ansi_codes(line)
    if not clean.strip() or clean.startswith("--"):
        return None
    if ":" not in clean:
        return Path(clean.strip()), None

    parts = clean.split(":", 2)
    if len(parts) >= 3:
        return Path(parts[0].strip()), _parse_u32(parts[1])
    if _parse_u32(parts[0]) is not None:
        # "line:content" without a file name gives nothing to point at
        return None
    return Path(parts[0].strip()), None


def parse_file_info_with_base(line: str, base_dir: Union[str, Path]) -> Optional[FileHit]:
    """Like :func:`parse_file_info`, resolving relative paths against ``base_dir``."""
    hit = parse_file_info(line)
    if hit is None:
        return None
    path, line_number = hit
    if not path.is_absolute():
        path = Path(base_dir) / path
    return path, line_number


def _is_context_marker(clean: str) -> bool:
    """True for ripgrep context lines such as ``63-`` or ``42+``."""
    if not clean or not (clean[0].isascii() and clean[0].isdigit()):
        return False
    seen_digits = False
    for char in clean:
        if char.isascii() and char.isdigit():
            seen_digits = True
        elif seen_digits and char in "-+":
            return True
        else:
            break
    return False


class HeadingParser:
    """Stateful parser for ripgrep ``--heading`` output.

    File headings set the current file; ``N:content`` lines are matches in it.
    """

    def __init__(self, base_dir: Union[str, Path]) -> None:
        self.base_dir = Path(base_dir)
        self.current_file: Optional[Path] = None

    def parse_line(self, line: str) -> Optional[FileHit]:
        """Return ``(file, None)`` for a heading, ``(file, n)`` for a match, else None."""
        clean = strip_ansi_codes(line)
        if not clean.strip() or clean.startswith("--"):
            return None

        if ":" not in clean:
            if _is_context_marker(clean):
                return None
            path = Path(clean.strip())
            if not path.is_absolute():
                path = self.base_dir / path
            self.current_file = path
            return path, None

        head, _content = clean.split(":", 1)
        line_number = _parse_u32(head)
        if line_number is not None:
            if self.current_file is not None:
                return self.current_file, line_number
            log.debug("Match line without a current file: %r", clean)
        return None


def build_search_command(pattern: str, path: Union[str, Path]) -> list[str]:
    """Arguments of the ripgrep invocation used for content search."""
    return [
        "rg",
        "--line-number",
        "--with-filename",
        "--color=always",
        "--heading",
        "--context=1",
        pattern,
        str(path),
    ]


async def search_task(
    task_id: int, pattern: str, path: Union[str, Path]
) -> tuple[TaskReport, Optional[RawSearchResult]]:
    """Run ripgrep for ``pattern`` under ``path``.

    Returns the final report and, on success, the collected output.
    Exit status 1 (no matches) counts as success.
    """
    base = Path(path)
    try:
        process = await asyncio.create_subprocess_exec(
            *build_search_command(pattern, base),
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.DEVNULL,
            limit=_READ_LIMIT,
        )
    except OSError as exc:
        return TaskReport.error(task_id, f"failed to spawn ripgrep: {exc}"), None

    lines: list[str] = []
    try:
        assert process.stdout is not None
        async for raw in process.stdout:
            text = raw.decode("utf-8", errors="replace").rstrip("\n").rstrip("\r")
            if text.strip():
                lines.append(text)
        try:
            status = await process.wait()
        except OSError as exc:
            return TaskReport.error(task_id, f"failed to wait for ripgrep: {exc}"), None
    finally:
        if process.returncode is None:
            try:
                process.kill()
            except ProcessLookupError:
                pass

    if status not in (0, 1):
        return (
            TaskReport.error(task_id, f"ripgrep failed with status: exit status: {status}"),
            None,
        )

    count = len(lines)
    report = TaskReport.ok(task_id, f"found {count} line(s) matching pattern")
    result = RawSearchResult(
        lines=lines,
        parsed_lines=[strip_ansi_codes(line) for line in lines],
        total_matches=count,
        base_directory=base,
    )
    return report, result