"""Filesystem view state: panes, selection, virtual scrolling and sorting."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Optional, Union

RECENT_DIRS_LIMIT = 32
DEFAULT_VIEWPORT_HEIGHT = 20
_VIEWPORT_CHROME_ROWS = 3  # header and border


class EntrySort(Enum):
    """Built-in sort modes; a plain string on a pane names a custom sort."""

    NAME_ASC = "name_asc"
    NAME_DESC = "name_desc"
    SIZE_ASC = "size_asc"
    SIZE_DESC = "size_desc"
    MODIFIED_ASC = "modified_asc"
    MODIFIED_DESC = "modified_desc"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class EntryFilter:
    """Filter mode for a directory view."""

    kind: str = "all"
    argument: Optional[str] = None

    @classmethod
    def all(cls) -> EntryFilter:
        return cls("all")

    @classmethod
    def files_only(cls) -> EntryFilter:
        return cls("files_only")

    @classmethod
    def dirs_only(cls) -> EntryFilter:
        return cls("dirs_only")

    @classmethod
    def extension(cls, ext: str) -> EntryFilter:
        return cls("extension", ext)

    @classmethod
    def pattern(cls, pattern: str) -> EntryFilter:
        return cls("pattern", pattern)

    @classmethod
    def custom(cls, name: str) -> EntryFilter:
        return cls("custom", name)

    def __str__(self) -> str:
        return self.argument if self.argument is not None else self.kind


@dataclass(frozen=True)
class ObjectType:
    """The type of a filesystem object: dir, file, symlink or an extension."""

    kind: str
    extension: Optional[str] = None

    @classmethod
    def from_object_info(cls, obj: Any) -> ObjectType:
        """Classify an entry by its ``is_dir``, ``is_symlink`` and ``extension``."""
        if obj.is_dir:
            return cls("dir")
        if obj.is_symlink:
            return cls("symlink")
        ext = getattr(obj, "extension", None)
        if ext is not None:
            return cls("other", ext.upper())
        return cls("file")

    def __str__(self) -> str:
        if self.kind == "other":
            return self.extension or ""
        return {"dir": "Dir", "file": "File", "symlink": "Symlink"}[self.kind]


SortMode = Union[EntrySort, str]


@dataclass
class PaneState:
    """One pane of the file view with its entries and scroll position."""

    cwd: Path
    entries: list[Any] = field(default_factory=list)
    selected: Optional[int] = 0
    focused: Any = None
    is_loading: bool = False
    last_error: Optional[str] = None
    sort: SortMode = EntrySort.NAME_ASC
    filter: EntryFilter = field(default_factory=EntryFilter.all)
    table_selected: Optional[int] = None
    scroll_offset: int = 0
    viewport_height: int = DEFAULT_VIEWPORT_HEIGHT
    incremental_entries: list[Any] = field(default_factory=list)
    is_incremental_loading: bool = False
    expected_entries: Optional[int] = None

    def __post_init__(self) -> None:
        self.cwd = Path(self.cwd)

    def set_entries(self, entries: list[Any]) -> None:
        """Replace the entries and reset the selection."""
        self.entries = list(entries)
        self.selected = 0
        self.table_selected = 0

    def selected_entry(self) -> Any:
        """The selected entry, or None."""
        if self.selected is None or not 0 <= self.selected < len(self.entries):
            return None
        return self.entries[self.selected]

    def set_viewport_height(self, height: int) -> None:
        """Set the viewport from the terminal height, minus header and border."""
        self.viewport_height = max(0, height - _VIEWPORT_CHROME_ROWS)
        self._adjust_scroll()

    def visible_entries(self) -> list[Any]:
        """The entries inside the viewport."""
        start = self.scroll_offset
        end = min(start + self.viewport_height, len(self.entries))
        if start >= end:
            return []
        return self.entries[start:end]

    def _adjust_scroll(self) -> None:
        if self.selected is None:
            return
        if self.selected < self.scroll_offset:
            self.scroll_offset = self.selected
        elif self.selected >= self.scroll_offset + self.viewport_height:
            self.scroll_offset = max(0, self.selected - max(self.viewport_height - 1, 0))

    def _select(self, index: int) -> None:
        self.selected = index
        self._adjust_scroll()
        self.table_selected = index - self.scroll_offset

    def move_selection_up(self) -> None:
        if self.selected is not None and self.selected > 0:
            self._select(self.selected - 1)

    def move_selection_down(self) -> None:
        if self.selected is not None and self.selected + 1 < len(self.entries):
            self._select(self.selected + 1)

    def select_first(self) -> None:
        if self.entries:
            self.selected = 0
            self.scroll_offset = 0
            self.table_selected = 0

    def select_last(self) -> None:
        if self.entries:
            last = len(self.entries) - 1
            self.selected = last
            self.scroll_offset = max(0, last - max(self.viewport_height - 1, 0))
            self.table_selected = last - self.scroll_offset

    def page_up(self) -> None:
        if self.selected is not None:
            self._select(max(0, self.selected - self.viewport_height))

    def page_down(self) -> None:
        if self.selected is not None and self.entries:
            self._select(min(self.selected + self.viewport_height, len(self.entries) - 1))

    def start_incremental_loading(self) -> None:
        self.is_incremental_loading = True
        self.incremental_entries.clear()
        self.expected_entries = None
        self.is_loading = True

    def add_incremental_entry(self, entry: Any) -> None:
        """Add a streamed entry and refresh the sorted view."""
        if not self.is_incremental_loading:
            return
        self.incremental_entries.append(entry)
        self.entries = list(self.incremental_entries)
        self.sort_entries()

    def complete_incremental_loading(self, final_entries: list[Any]) -> None:
        self.is_incremental_loading = False
        self.is_loading = False
        self.entries = list(final_entries)
        self.incremental_entries.clear()
        if self.entries:
            self.selected = 0
            self.scroll_offset = 0
            self.table_selected = 0

    def sort_entries(self) -> None:
        """Sort entries by the pane's sort mode; name sorts list dirs first."""
        mode = self.sort
        if mode is EntrySort.NAME_ASC:
            self.entries.sort(key=lambda e: (not e.is_dir, e.name))
        elif mode is EntrySort.NAME_DESC:
            self.entries.sort(key=lambda e: e.name, reverse=True)
            self.entries.sort(key=lambda e: not e.is_dir)
        elif mode is EntrySort.SIZE_ASC:
            self.entries.sort(key=lambda e: e.size)
        elif mode is EntrySort.SIZE_DESC:
            self.entries.sort(key=lambda e: e.size, reverse=True)
        elif mode is EntrySort.MODIFIED_ASC:
            self.entries.sort(key=lambda e: e.modified)
        elif mode is EntrySort.MODIFIED_DESC:
            self.entries.sort(key=lambda e: e.modified, reverse=True)
        # custom sorts keep the current order


@dataclass
class FSState:
    """Open panes, the focused pane, and recent and favourite directories."""

    panes: list[PaneState] = field(default_factory=list)
    active_index: int = 0
    batch_op_status: Optional[str] = None
    recent_dirs: deque = field(default_factory=lambda: deque(maxlen=RECENT_DIRS_LIMIT))
    favorite_dirs: set = field(default_factory=set)

    def __init__(self, cwd: Union[str, Path] = ".") -> None:
        self.panes = [PaneState(Path(cwd))]
        self.active_index = 0
        self.batch_op_status = None
        self.recent_dirs = deque(maxlen=RECENT_DIRS_LIMIT)
        self.favorite_dirs = set()

    @property
    def active_pane(self) -> PaneState:
        return self.panes[self.active_index]

    def set_active_pane(self, idx: int) -> None:
        """Focus another pane; out-of-range indices are ignored."""
        if 0 <= idx < len(self.panes):
            self.active_index = idx

    def add_recent_dir(self, path: Union[str, Path]) -> None:
        """Remember a directory, dropping the oldest beyond the limit."""
        self.recent_dirs.append(Path(path))

    def add_favorite(self, path: Union[str, Path]) -> None:
        self.favorite_dirs.add(Path(path))

    def remove_favorite(self, path: Union[str, Path]) -> None:
        self.favorite_dirs.discard(Path(path))