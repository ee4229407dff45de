import os
from dataclasses import dataclass
from pathlib import Path

import pytest

from fsmcore.size_task import calculate_directory_size, calculate_size_task


@dataclass
class Info:
    path: Path
    is_dir: bool
    size: int = 0
    items_count: int = 0


def build_tree(root: Path):
    a = b"hello"
    b = b"x" * 100
    c = b"nested data"
    (root / "a.txt").write_bytes(a)
    (root / "b.bin").write_bytes(b)
    sub = root / "sub"
    sub.mkdir()
    (sub / "c.txt").write_bytes(c)
    (sub / "deeper").mkdir()
    (sub / "deeper" / "d.txt").write_bytes(a)
    return len(a) * 2 + len(b) + len(c), 3


def test_calculate_directory_size(tmp_path):
    expected_size, expected_count = build_tree(tmp_path)
    assert calculate_directory_size(tmp_path) == (expected_size, expected_count)


def test_symlinks_not_counted_as_files(tmp_path):
    expected_size, _ = build_tree(tmp_path)
    os.symlink(tmp_path / "b.bin", tmp_path / "link")
    size, count = calculate_directory_size(tmp_path)
    assert size == expected_size
    assert count == 4


def test_missing_directory_is_empty(tmp_path):
    assert calculate_directory_size(tmp_path / "missing") == (0, 0)


@pytest.mark.asyncio
async def test_size_task_updates_entry(tmp_path):
    target = tmp_path / "target"
    target.mkdir()
    expected_size, expected_count = build_tree(target)
    updates = []
    info = Info(target, is_dir=True)

    result = await calculate_size_task(tmp_path, info, lambda p, i: updates.append((p, i)))

    assert result is info
    assert (info.size, info.items_count) == (expected_size, expected_count)
    assert updates == [(tmp_path, info)]


@pytest.mark.asyncio
async def test_size_task_ignores_files(tmp_path):
    f = tmp_path / "file.txt"
    f.write_bytes(b"abc")
    updates = []
    result = await calculate_size_task(tmp_path, Info(f, is_dir=False), lambda p, i: updates.append(i))
    assert result is None
    assert updates == []


@pytest.mark.asyncio
async def test_size_task_empty_directory_sends_nothing(tmp_path):
    empty = tmp_path / "empty"
    empty.mkdir()
    updates = []
    info = Info(empty, is_dir=True, size=7)
    result = await calculate_size_task(tmp_path, info, lambda p, i: updates.append(i))
    assert result is None
    assert updates == []
    assert info.size == 7