"""Recursive filename search with ``fd``, falling back to ``find``."""

from __future__ import annotations

import asyncio
import logging
import os
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Optional, Union

from fsmcore.task_report import TaskReport

log = logging.getLogger(__name__)

PROGRESS_REPORT_INTERVAL = 0.5
_READ_LIMIT = 1 << 20
_NO_TOOL_MESSAGE = "Neither 'fd' nor 'find' commands are available on this system"

PathLike = Union[str, Path]


@dataclass(frozen=True)
class FilenameSearchProgress:
    """Intermediate state of a running filename search."""

    task_id: int
    found: int
    processed: int
    errors: int
    current_item: Optional[str] = None
    results: tuple[Path, ...] = field(default_factory=tuple)

    @property
    def message(self) -> str:
        return (
            f"Found {self.found} matches "
            f"(processed {self.processed}, {self.errors} errors)"
        )

    @property
    def report(self) -> TaskReport:
        """The progress as a task report with indeterminate progress."""
        return TaskReport(
            task_id=self.task_id,
            result=self.message,
            progress=None,
            current_item=self.current_item,
            completed=self.found,
            message=self.message,
        )


ProgressCallback = Callable[[FilenameSearchProgress], None]


def build_fd_command(pattern: str, search_path: PathLike) -> list[str]:
    """Arguments of the ``fd`` invocation: files and dirs, hidden, case-sensitive."""
    return [
        "fd",
        "--type",
        "f",
        "--type",
        "d",
        "--hidden",
        "--follow",
        "--case-sensitive",
        pattern,
        str(search_path),
    ]


def build_find_command(pattern: str, search_path: PathLike) -> list[str]:
    """Arguments of the ``find`` invocation: case-insensitive substring match."""
    return [
        "find",
        str(search_path),
        "(",
        "-type",
        "f",
        "-o",
        "-type",
        "d",
        ")",
        "-iname",
        f"*{pattern}*",
    ]


async def _tool_available(name: str) -> bool:
    try:
        process = await asyncio.create_subprocess_exec(
            name,
            "--version",
            stdout=asyncio.subprocess.DEVNULL,
            stderr=asyncio.subprocess.DEVNULL,
        )
        return await process.wait() == 0
    except OSError as exc:
        log.debug("'%s' command not available: %s", name, exc)
        return False


async def select_search_command(
    pattern: str, search_path: PathLike
) -> list[tuple[str, list[str]]]:
    """Candidate commands to try in order, as ``(tool name, argv)`` pairs.

    ``fd`` is preferred with ``find`` as its fallback; without ``fd`` only
    ``find`` is offered. Raises FileNotFoundError when neither works.
    """
    find_cmd = ("find", build_find_command(pattern, search_path))
    if await _tool_available("fd"):
        return [("fd", build_fd_command(pattern, search_path)), find_cmd]
    if await _tool_available("find"):
        return [find_cmd]
    raise FileNotFoundError(_NO_TOOL_MESSAGE)


async def _spawn(
    candidates: list[tuple[str, list[str]]],
) -> tuple[asyncio.subprocess.Process, str]:
    """Start the first candidate that spawns; raise RuntimeError with the reason otherwise."""
    errors: dict[str, OSError] = {}
    for name, argv in candidates:
        try:
            process = await asyncio.create_subprocess_exec(
                *argv,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                limit=_READ_LIMIT,
            )
        except OSError as exc:
            log.info("'%s' command failed to spawn: %s", name, exc)
            errors[name] = exc
            continue
        log.info("Spawned search command: %s", " ".join(argv))
        return process, name

    if "fd" in errors:
        raise RuntimeError(
            "No suitable search command available: fd failed to spawn, "
            f"find error: {errors.get('find')}"
        )
    raise RuntimeError(f"Find command failed to spawn: {errors.get('find')}")


async def _drain_stderr(stream: Optional[asyncio.StreamReader]) -> None:
    if stream is None:
        return
    async for raw in stream:
        text = raw.decode("utf-8", errors="replace").strip()
        if text:
            log.info("Search command stderr: %s", text)


def _format_duration(seconds: float) -> str:
    if seconds >= 1:
        return f"{seconds:.3f}s"
    return f"{seconds * 1000:.3f}ms"


async def filename_search_task(
    task_id: int,
    pattern: str,
    search_path: PathLike,
    on_progress: Optional[ProgressCallback] = None,
) -> tuple[TaskReport, list[Path]]:
    """Search ``search_path`` recursively for names matching ``pattern``.

    ``on_progress`` is called about every half second with the results so
    far. Returns the final report and the matching paths.
    """
    started = time.monotonic()
    base = Path(search_path)

    if not pattern.strip():
        return TaskReport.error(task_id, "Search pattern cannot be empty"), []
    if not base.exists():
        return TaskReport.error(task_id, f"Search path does not exist: {base}"), []

    try:
        candidates = await select_search_command(pattern, base)
        process, tool = await _spawn(candidates)
    except (FileNotFoundError, RuntimeError) as exc:
        log.warning("%s", exc)
        return TaskReport.error(task_id, str(exc)), []

    results: list[Path] = []
    processed = 0
    errors = 0
    last_report = time.monotonic()
    stderr_task = asyncio.ensure_future(_drain_stderr(process.stderr))

    try:
        assert process.stdout is not None
        async for raw in process.stdout:
            line = raw.decode("utf-8", errors="replace").strip()
            if not line:
                continue
            processed += 1
            file_path = Path(line)

            if not file_path.exists():
                log.info("Search result path does not exist: %s", file_path)
                continue
            if not file_path.is_absolute() and not (base / file_path).exists():
                log.info("Could not resolve relative path: %s", file_path)
                continue

            try:
                os.stat(file_path)
            except OSError as exc:
                errors += 1
                log.warning("Failed to read metadata for %s: %s", file_path, exc)
            else:
                results.append(file_path)

            if on_progress is not None and time.monotonic() - last_report >= PROGRESS_REPORT_INTERVAL:
                on_progress(
                    FilenameSearchProgress(
                        task_id=task_id,
                        found=len(results),
                        processed=processed,
                        errors=errors,
                        current_item=str(file_path),
                        results=tuple(results),
                    )
                )
                last_report = time.monotonic()

        try:
            status = await process.wait()
            if status == 0:
                log.info("Search command '%s' completed successfully", tool)
            else:
                log.info("Search command '%s' exited with status %s", tool, status)
        except OSError as exc:
            log.warning("Failed to wait for search command '%s': %s", tool, exc)
    finally:
        if process.returncode is None:
            try:
                process.kill()
            except ProcessLookupError:
                pass
        await stderr_task

    elapsed = _format_duration(time.monotonic() - started)
    message = (
        f"Found {len(results)} filename match(es) in {elapsed} "
        f"(processed {processed} entries, {errors} errors)"
    )
    log.info("Filename search task %s completed: %s", task_id, message)
    return TaskReport.ok(task_id, message), results