"""Command palette state: filtering, auto-completion and command parsing."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum

log = logging.getLogger(__name__)

_BUILT_IN_COMMANDS = ("nf", "nd", "reload", "grep", "config")
_MAX_COMPLETIONS = 10

_DESCRIPTIONS = {
    "nf": "Create a new file",
    "nd": "Create a new folder",
    "reload": "Reload current directory",
    "grep": "Enter content search overlay",
    "config": "Open configuration",
}

_HELP_ENTRIES = (
    ("nf", "", "Create a new file (nf [filename])"),
    ("nd", "", "Create a new folder (nd [foldername])"),
    ("reload", "", "Reload current directory"),
    ("grep", "", "Enter content search overlay"),
    ("config", "", "Open configuration"),
)


class ActionKind(Enum):
    """The kind of action a palette command performs."""

    OPEN_CONFIG = "open_config"
    RELOAD = "reload"
    NEW_FILE = "new_file"
    NEW_FOLDER = "new_folder"
    NEW_FILE_WITH_NAME = "new_file_with_name"
    NEW_FOLDER_WITH_NAME = "new_folder_with_name"
    SEARCH_CONTENT = "search_content"
    SEARCH_CONTENT_WITH_PATTERN = "search_content_with_pattern"
    CUSTOM = "custom"


@dataclass(frozen=True)
class CommandAction:
    """An action with an optional argument (a name, a pattern, a custom id)."""

    kind: ActionKind
    argument: str | None = None


@dataclass(frozen=True)
class Command:
    """A user-invokable command."""

    title: str
    action: CommandAction


@dataclass
class CommandPaletteState:
    """State of the command palette overlay."""

    all_commands: list[Command] = field(default_factory=list)
    input: str = ""
    filtered: list[Command] = field(init=False)
    selected: int = 0
    completions: list[str] = field(default_factory=list)
    completion_index: int = 0
    show_completions: bool = False

    def __post_init__(self) -> None:
        self.all_commands = list(self.all_commands)
        self.filtered = list(self.all_commands)

    def update_filter(self) -> None:
        """Filter commands by the current input and refresh completions."""
        query = self.input.lower()
        self.filtered = [c for c in self.all_commands if query in c.title.lower()]
        self.selected = 0
        self.update_completions()

    def update_completions(self) -> None:
        """Recompute completion suggestions for the first word of the input."""
        self.completions = []
        self.completion_index = 0
        self.show_completions = False

        words = self.input.split()
        if not words:
            return
        prefix = words[0].lower()

        candidates = [cmd for cmd in _BUILT_IN_COMMANDS if cmd.startswith(prefix)]

        for command in self.all_commands:
            if command.title.lower().replace(" ", "") != "openconfig":
                continue
            key = "config"
            if key.startswith(prefix) and key not in candidates:
                candidates.append(key)

        self.completions = sorted(set(candidates))[:_MAX_COMPLETIONS]
        self.show_completions = bool(self.completions)
        if len(self.completions) == 1:
            log.debug("Single completion found: %s", self.completions)

    def apply_completion(self) -> None:
        """Replace the first word of the input with the selected completion."""
        if self.completion_index >= len(self.completions):
            return
        completion = self.completions[self.completion_index]
        words = self.input.split()
        self.input = " ".join([completion, *words[1:]]) if words else completion
        self.show_completions = False
        self.update_filter()

    def next_completion(self) -> None:
        """Select the next completion, wrapping around."""
        if self.completions:
            self.completion_index = (self.completion_index + 1) % len(self.completions)

    def prev_completion(self) -> None:
        """Select the previous completion, wrapping around."""
        if self.completions:
            self.completion_index = (self.completion_index - 1) % len(self.completions)

    def hide_completions(self) -> None:
        self.show_completions = False

    def show_completions_if_available(self) -> None:
        self.show_completions = bool(self.completions)

    def parse_command(self) -> CommandAction | None:
        """Parse the input into an action, e.g. ``nf notes.txt``."""
        text = self.input.strip()
        if not text:
            return None
        head, *rest = text.split()
        argument = " ".join(rest)

        if head == "nf":
            if rest:
                return CommandAction(ActionKind.NEW_FILE_WITH_NAME, argument)
            return CommandAction(ActionKind.NEW_FILE)
        if head == "nd":
            if rest:
                return CommandAction(ActionKind.NEW_FOLDER_WITH_NAME, argument)
            return CommandAction(ActionKind.NEW_FOLDER)
        if head == "reload":
            return CommandAction(ActionKind.RELOAD)
        if head == "grep":
            return CommandAction(ActionKind.SEARCH_CONTENT)
        if head == "config":
            return CommandAction(ActionKind.OPEN_CONFIG)

        query = text.lower()
        return next(
            (c.action for c in self.all_commands if query in c.title.lower()),
            None,
        )


def get_command_description(command: str) -> str | None:
    """Short description of a built-in command, or None if unknown."""
    return _DESCRIPTIONS.get(command)


def get_all_commands_with_descriptions() -> list[tuple[str, str, str]]:
    """All built-in commands as (name, shortcut, description) for help pages."""
    return list(_HELP_ENTRIES)