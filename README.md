# fsmcore

Building blocks for a terminal file manager. The package provides pane and
selection state, a command palette with completions, event debouncing,
throttling and batching, and asyncio tasks that size directories and search
file contents and file names.

It needs only the standard library. The search tasks start the external
programs `rg`, `fd` and `find`. These must be installed and on `PATH`.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Modules

### `fsmcore.command_palette`

- `CommandPaletteState(all_commands=[...])` holds the palette input, the
  filtered `Command` list and completion state.
- `update_filter()` keeps the commands whose title contains the input. Case is
  ignored. It then calls `update_completions()`.
- `update_completions()` completes the first word of the input from the
  built-in commands `nf`, `nd`, `reload`, `grep` and `config`. It offers at most
  10 suggestions, sorted.
- `next_completion()` and `prev_completion()` move through the suggestions and
  wrap around at either end.
- `apply_completion()` replaces the first word with the selected suggestion.
- `hide_completions()` and `show_completions_if_available()` toggle
  `show_completions`.
- `parse_command()` turns the input into a `CommandAction`. Each action has a
  `kind` (an `ActionKind`) and an optional `argument`. For example, `nf notes.txt`
  becomes `NEW_FILE_WITH_NAME` with the argument `"notes.txt"`. Input that is
  not a built-in command is matched against command titles. If nothing matches,
  it returns `None`.
- `get_command_description(name)` and `get_all_commands_with_descriptions()`
  return help text.

### `fsmcore.debounce`

All durations are in seconds.

- `DebounceConfig(delay, max_delay, leading, trailing)` has three presets:
  `search_input()`, `redraw_throttle()` and `fs_watch()`.
- `Debouncer(config)`:
  - `await submit(key, event)` puts `(key, event)` on the `output` queue. It does
    so immediately for the first event of a key when `leading` is set, and after
    `delay` when `trailing` is set.
  - `flush()` emits every remembered event at once.
- `Throttler(interval)`:
  - `should_trigger()` is true at most once per interval.
  - `reset()` clears the timer.
- `EventBatcher(max_size, max_age)` collects events and puts them on its
  `output` queue as lists. A batch is emitted when it is full, when it is old
  enough, or on `await flush()`.

### `fsmcore.fs_state`

- `PaneState(cwd)` handles:
  - entries and the selected index;
  - virtual scrolling: `set_viewport_height()`, `visible_entries()` and
    `scroll_offset`;
  - movement: `move_selection_up()`/`move_selection_down()`,
    `select_first()`/`select_last()` and `page_up()`/`page_down()`;
  - incremental loading: `start_incremental_loading()`,
    `add_incremental_entry()` and `complete_incremental_loading()`;
  - `sort_entries()` by the pane's `EntrySort`. Name sorts put directories
    first. A plain string as `sort` names a custom sort and keeps the current
    order.
- Entries can be any objects with `name`, `is_dir`, `size` and `modified`
  attributes.
- `FSState(cwd=".")` holds:
  - the panes, with the `active_pane` property and `set_active_pane(idx)`;
  - up to 32 recent directories, added with `add_recent_dir()`;
  - favourite directories, managed with `add_favorite()` and
    `remove_favorite()`.
- `EntryFilter` describes a filter mode.
- `ObjectType.from_object_info(obj)` classifies an entry as a directory, a
  symlink, an upper-cased extension or a plain file.

### `fsmcore.size_task`

- `calculate_directory_size(path)` returns `(total_size, items_count)`:
  - `total_size` is the sum of the sizes of regular files below the directory;
  - `items_count` is the number of its direct children.
- `await calculate_size_task(parent_dir, object_info, on_update)` runs that
  calculation in a worker thread. It then sets `size` and `items_count` on the
  entry and calls `on_update(parent_dir, object_info)`.
  - It ignores entries that are not directories.
  - It reports nothing when both values are zero.

### `fsmcore.task_report`

`TaskReport` is the record a task returns.

- Create one with `TaskReport.ok(task_id, message)` or
  `TaskReport.error(task_id, message)`.
- It has the properties `succeeded` and `is_final`.

### `fsmcore.search_task`

- `await search_task(task_id, pattern, path)` runs
  `rg --line-number --with-filename --color=always --heading --context=1`. The
  exact argument list comes from `build_search_command()`.
- It returns `(TaskReport, RawSearchResult | None)`. The result holds the raw
  non-empty lines, the same lines with ANSI codes removed, and the line count.
- Exit status 1 (no matches) counts as success. Other non-zero statuses give an
  error report.
- Helpers for reading the output:
  - `strip_ansi_codes()`;
  - `parse_file_info()` and `parse_file_info_with_base()` for `file:line:content`
    lines;
  - `HeadingParser(base_dir).parse_line(line)` for `--heading` output. It tracks
    the current file and skips context lines.

### `fsmcore.filename_search`

- `await filename_search_task(task_id, pattern, search_path, on_progress=None)`
  searches for matching names with `fd`. If `fd` is not available, it uses
  `find` with a case-insensitive `*pattern*`.
  - The command lines come from `build_fd_command()` and `build_find_command()`.
  - `select_search_command()` chooses between them.
  - It returns `(TaskReport, list[Path])`.
- `on_progress` receives a `FilenameSearchProgress` about every half second.
- These cases give an error report:
  - an empty pattern;
  - a missing search path;
  - neither tool being available.

## Example

```python
from fsmcore.command_palette import CommandPaletteState

palette = CommandPaletteState()
palette.input = "nf notes.txt"
palette.update_filter()
action = palette.parse_command()
print(action.kind, action.argument)  # ActionKind.NEW_FILE_WITH_NAME notes.txt
```

## What this package does not do

This package is a library only. It has no terminal user interface, no
command-line program and no event loop that connects these parts. It does not
scan directories into entry objects. It does not create, rename or delete
files. Callers supply the entries and decide what to do with task reports and
search results.