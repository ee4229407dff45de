from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import pytest

from fsmcore.fs_state import (
    EntryFilter,
    EntrySort,
    FSState,
    ObjectType,
    PaneState,
)


@dataclass
class Entry:
    name: str
    is_dir: bool = False
    is_symlink: bool = False
    extension: Optional[str] = None
    size: int = 0
    modified: int = 0

    @property
    def path(self):
        return Path("/base") / self.name


def make_entries(n):
    return [Entry(f"f{i:03d}", size=i, modified=n - i) for i in range(n)]


def check_visible(pane):
    assert pane.scroll_offset <= pane.selected < pane.scroll_offset + pane.viewport_height
    assert pane.table_selected == pane.selected - pane.scroll_offset


def test_new_pane_defaults():
    pane = PaneState(Path("/tmp"))
    assert pane.selected == 0
    assert pane.viewport_height == 20
    assert pane.sort is EntrySort.NAME_ASC
    assert str(pane.filter) == "all"


def test_sort_and_filter_display():
    assert str(EntrySort.MODIFIED_DESC) == "modified_desc"
    assert str(EntryFilter.files_only()) == "files_only"
    assert str(EntryFilter.extension("rs")) == "rs"


def test_object_type_classification():
    assert str(ObjectType.from_object_info(Entry("d", is_dir=True))) == "Dir"
    assert str(ObjectType.from_object_info(Entry("l", is_symlink=True))) == "Symlink"
    assert str(ObjectType.from_object_info(Entry("a"))) == "File"
    assert str(ObjectType.from_object_info(Entry("a.txt", extension="txt"))) == "TXT"


def test_set_entries_and_selected_entry():
    pane = PaneState(Path("/"))
    entries = make_entries(5)
    pane.set_entries(entries)
    assert pane.selected_entry() is entries[0]
    pane.selected = None
    assert pane.selected_entry() is None


def test_move_down_keeps_selection_visible():
    pane = PaneState(Path("/"))
    pane.set_entries(make_entries(50))
    pane.set_viewport_height(13)
    for _ in range(30):
        pane.move_selection_down()
        check_visible(pane)
    assert pane.selected == 30
    for _ in range(30):
        pane.move_selection_up()
        check_visible(pane)
    assert pane.selected == 0
    assert pane.scroll_offset == 0


def test_move_stops_at_bounds():
    pane = PaneState(Path("/"))
    pane.set_entries(make_entries(3))
    pane.move_selection_up()
    assert pane.selected == 0
    for _ in range(10):
        pane.move_selection_down()
    assert pane.selected == 2


def test_visible_entries_window():
    pane = PaneState(Path("/"))
    entries = make_entries(50)
    pane.set_entries(entries)
    assert pane.visible_entries() == entries[: pane.viewport_height]
    pane.select_last()
    assert pane.visible_entries()[-1] is entries[-1]
    assert len(pane.visible_entries()) == pane.viewport_height
    check_visible(pane)


def test_visible_entries_empty_when_offset_past_end():
    pane = PaneState(Path("/"))
    pane.set_entries(make_entries(3))
    pane.scroll_offset = 5
    assert pane.visible_entries() == []


def test_select_first_and_last():
    pane = PaneState(Path("/"))
    pane.set_entries(make_entries(40))
    pane.select_last()
    assert pane.selected == 39
    pane.select_first()
    assert (pane.selected, pane.scroll_offset, pane.table_selected) == (0, 0, 0)


def test_page_down_and_up():
    pane = PaneState(Path("/"))
    pane.set_entries(make_entries(100))
    pane.page_down()
    assert pane.selected == pane.viewport_height
    check_visible(pane)
    for _ in range(10):
        pane.page_down()
    assert pane.selected == 99
    check_visible(pane)
    for _ in range(10):
        pane.page_up()
    assert pane.selected == 0
    check_visible(pane)


def test_sort_name_asc_dirs_first():
    pane = PaneState(Path("/"))
    pane.entries = [Entry("b"), Entry("z", is_dir=True), Entry("a"), Entry("c", is_dir=True)]
    pane.sort_entries()
    assert [e.name for e in pane.entries] == ["c", "z", "a", "b"]


def test_sort_name_desc_dirs_first():
    pane = PaneState(Path("/"), sort=EntrySort.NAME_DESC)
    pane.entries = [Entry("b"), Entry("z", is_dir=True), Entry("a"), Entry("c", is_dir=True)]
    pane.sort_entries()
    assert [e.name for e in pane.entries] == ["z", "c", "b", "a"]


@pytest.mark.parametrize(
    "mode,attr,reverse",
    [
        (EntrySort.SIZE_ASC, "size", False),
        (EntrySort.SIZE_DESC, "size", True),
        (EntrySort.MODIFIED_ASC, "modified", False),
        (EntrySort.MODIFIED_DESC, "modified", True),
    ],
)
def test_sort_by_attribute(mode, attr, reverse):
    pane = PaneState(Path("/"), sort=mode)
    pane.entries = list(reversed(make_entries(10)))[::2] + make_entries(10)[::2]
    pane.sort_entries()
    values = [getattr(e, attr) for e in pane.entries]
    assert values == sorted(values, reverse=reverse)


def test_custom_sort_keeps_order():
    pane = PaneState(Path("/"), sort="by_plugin")
    entries = [Entry("b"), Entry("a")]
    pane.entries = list(entries)
    pane.sort_entries()
    assert pane.entries == entries


def test_incremental_loading():
    pane = PaneState(Path("/"))
    pane.start_incremental_loading()
    assert pane.is_loading and pane.is_incremental_loading
    pane.add_incremental_entry(Entry("b"))
    pane.add_incremental_entry(Entry("a"))
    assert [e.name for e in pane.entries] == ["a", "b"]
    final = [Entry("x"), Entry("y")]
    pane.complete_incremental_loading(final)
    assert pane.entries == final
    assert not pane.is_loading and not pane.is_incremental_loading
    assert pane.incremental_entries == []
    assert pane.selected == 0


def test_add_incremental_entry_ignored_when_not_loading():
    pane = PaneState(Path("/"))
    pane.add_incremental_entry(Entry("a"))
    assert pane.entries == []


def test_fs_state_active_pane():
    state = FSState(Path("/tmp"))
    assert state.active_pane.cwd == Path("/tmp")
    state.set_active_pane(5)
    assert state.active_index == 0
    state.panes.append(PaneState(Path("/var")))
    state.set_active_pane(1)
    assert state.active_pane.cwd == Path("/var")


def test_fs_state_default_cwd():
    assert FSState().active_pane.cwd == Path(".")


def test_recent_dirs_capped():
    state = FSState()
    for i in range(40):
        state.add_recent_dir(Path(f"/d{i}"))
    assert len(state.recent_dirs) == 32
    assert state.recent_dirs[-1] == Path("/d39")
    assert Path("/d0") not in state.recent_dirs


def test_favorites():
    state = FSState()
    state.add_favorite(Path("/home"))
    assert Path("/home") in state.favorite_dirs
    state.remove_favorite(Path("/home"))
    state.remove_favorite(Path("/missing"))
    assert state.favorite_dirs == set()