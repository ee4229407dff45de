"""Background calculation of directory sizes and child counts."""

from __future__ import annotations

import asyncio
import logging
import os
import stat
from pathlib import Path
from typing import Any, Callable, Optional, Union

log = logging.getLogger(__name__)

UpdateCallback = Callable[[Path, Any], None]


def calculate_directory_size(path: Union[str, Path]) -> tuple[int, int]:
    """Return (recursive size of regular files, number of direct children).

    Symlinks are neither followed nor counted as files; unreadable parts are skipped.
    """
    total_size = 0
    for root, _dirs, files in os.walk(path, followlinks=False):
        for name in files:
            try:
                info = os.lstat(os.path.join(root, name))
            except OSError:
                continue
            if stat.S_ISREG(info.st_mode):
                total_size += info.st_size

    try:
        with os.scandir(path) as children:
            items_count = sum(1 for _ in children)
    except OSError:
        items_count = 0

    return total_size, items_count


async def calculate_size_task(
    parent_dir: Union[str, Path],
    object_info: Any,
    on_update: UpdateCallback,
) -> Optional[Any]:
    """Compute size and child count of a directory entry off the event loop.

    The entry's ``size`` and ``items_count`` are updated and ``on_update`` is
    called with ``(parent_dir, object_info)`` when anything was found.
    Non-directories are ignored. Returns the updated entry, or None.
    """
    if not object_info.is_dir:
        return None

    path = Path(object_info.path)
    log.info("Spawning size calculation task for directory: %s", path)
    try:
        total_size, items_count = await asyncio.to_thread(calculate_directory_size, path)
    except Exception as exc:  # noqa: BLE001 - reported, never propagated
        log.warning("Failed to calculate directory size for %s: %s", path, exc)
        return None

    if total_size == 0 and items_count == 0:
        return None

    object_info.size = total_size
    object_info.items_count = items_count
    on_update(Path(parent_dir), object_info)
    return object_info