"""
FILE: taskflow/repl/completer.py
PURPOSE: Autocomplete logic for REPL commands and arguments
EXPORTS:
  - TaskflowCompleter (Completer for command/arg completion)
  - create_completer(context) -> TaskflowCompleter
DEPENDENCIES:
  - prompt_toolkit.completion (Completer, Completion)
NOTES:
  - Suggests command names when at start of line
  - Suggests project subcommands after "project"
  - Suggests task ids for commands that take one first
  - Suggests cadences after "recur <id>", due picks after "due <id>",
    sort modes after "sort", project names after "use"
  - Reads projects and tasks from the session store, if one is attached
  - Case-insensitive matching
"""

from typing import Iterable, List, Optional

from prompt_toolkit.completion import Completer, Completion
from prompt_toolkit.document import Document

from ..core.constants import COLOR_NAMES, VALID_RECURRENCES, WEEKDAY_NAMES
from ..core.dates import QUICK_PICKS


class TaskflowCompleter(Completer):
    """
    Custom completer for the TaskFlow REPL.

    Args:
        context: Object with a `store` attribute (the REPLContext); None
            disables project and task suggestions
    """

    COMMANDS = [
        "add", "ls", "edit", "rm", "status", "priority", "archive", "due",
        "note", "recur", "move", "clear-completed", "undo", "stats", "export",
        "tick", "use", "project", "search", "sort", "archived", "help",
        "clear", "exit", "quit",
    ]

    PROJECT_SUBCOMMANDS = ["add", "ls", "rm", "rename", "color"]

    COMMAND_FLAGS = {
        "add": ["--project", "--depends", "--recurring"],
        "ls": ["--project"],
        "recur": ["--day"],
        "export": ["--output"],
    }

    ID_FIRST_COMMANDS = {
        "edit", "rm", "status", "priority", "archive", "due", "note", "recur", "move",
    }

    SORT_MODES = ["due", "manual"]

    DESCRIPTIONS = {
        "add": "Create a new task",
        "ls": "List tasks in the current view",
        "edit": "Update task text",
        "rm": "Delete task",
        "status": "Cycle todo → progress → done",
        "priority": "Cycle low → medium → high",
        "archive": "Archive or restore a task",
        "due": "Set or clear the due date",
        "note": "Attach a note",
        "recur": "Set a repeat cadence",
        "move": "Move a task into another task's slot",
        "clear-completed": "Remove finished tasks",
        "undo": "Undo the last bulk operation",
        "stats": "Show analytics",
        "export": "Export active tasks as markdown",
        "tick": "Check recurring tasks now",
        "use": "Set current working project",
        "project": "Manage projects",
        "search": "Filter tasks by text",
        "sort": "Sort by due date or manual order",
        "archived": "Toggle the archived view",
        "help": "Show available commands",
        "clear": "Clear the screen",
        "exit": "Exit REPL",
        "quit": "Exit REPL",
    }

    def __init__(self, context=None):
        self.context = context

    def get_completions(
        self, document: Document, complete_event
    ) -> Iterable[Completion]:
        text_before_cursor = document.text_before_cursor
        words = text_before_cursor.split()
        at_new_word = text_before_cursor.endswith(" ")

        # Position of the word being typed (0 = command)
        position = len(words) if at_new_word else len(words) - 1
        word = "" if at_new_word or not words else words[-1]

        if position <= 0:
            yield from self._complete_from(self.COMMANDS, word, self.DESCRIPTIONS)
            return

        command = words[0].lower()

        if word.startswith("--"):
            yield from self._complete_from(self.COMMAND_FLAGS.get(command, []), word)
            return

        if command == "project":
            if position == 1:
                yield from self._complete_from(self.PROJECT_SUBCOMMANDS, word)
            elif position == 2 and words[1].lower() in ("rm", "rename", "color"):
                yield from self._complete_project_names(word)
            elif position == 3 and words[1].lower() == "color":
                yield from self._complete_from(list(COLOR_NAMES), word)
            return

        if command in self.ID_FIRST_COMMANDS and position == 1:
            yield from self._complete_task_ids(word)
            return

        if command == "move" and position == 2:
            yield from self._complete_task_ids(word)
        elif command == "recur" and position == 2:
            yield from self._complete_from(list(VALID_RECURRENCES) + ["none"], word)
        elif command == "recur" and words[-1 if at_new_word else -2] == "--day":
            yield from self._complete_from([d.lower() for d in WEEKDAY_NAMES], word)
        elif command == "due" and position == 2:
            picks = list(QUICK_PICKS) + [d.lower() for d in WEEKDAY_NAMES] + ["none"]
            yield from self._complete_from(picks, word)
        elif command == "sort" and position == 1:
            yield from self._complete_from(self.SORT_MODES, word)
        elif command == "use" and position == 1:
            yield from self._complete_from(["none"], word)
            yield from self._complete_project_names(word)

    @staticmethod
    def _complete_from(options: List[str], word: str, meta: Optional[dict] = None) -> Iterable[Completion]:
        word_lower = word.lower()
        for option in options:
            if option.lower().startswith(word_lower):
                yield Completion(
                    option,
                    start_position=-len(word),
                    display_meta=(meta or {}).get(option, ""),
                )

    def _store(self):
        return getattr(self.context, "store", None)

    def _complete_project_names(self, word: str) -> Iterable[Completion]:
        store = self._store()
        if store is None:
            return
        word_lower = word.lower().lstrip('"')
        for project in store.projects:
            if project.name.lower().startswith(word_lower):
                # Quote project names that contain spaces
                text = f'"{project.name}"' if " " in project.name else project.name
                yield Completion(
                    text,
                    start_position=-len(word),
                    display_meta=f"Project #{project.id}",
                )

    def _complete_task_ids(self, word: str) -> Iterable[Completion]:
        store = self._store()
        if store is None:
            return
        for project in store.projects:
            for task in project.tasks:
                if task.id.startswith(word):
                    yield Completion(
                        task.id,
                        start_position=-len(word),
                        display_meta=task.text[:40],
                    )


def create_completer(context=None) -> TaskflowCompleter:
    """
    Factory function to create a completer instance.

    Args:
        context: REPL session context; see TaskflowCompleter

    Returns:
        Configured TaskflowCompleter
    """
    return TaskflowCompleter(context)
