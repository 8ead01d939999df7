"""
FILE: taskflow/repl/parser.py
PURPOSE: Parse user input into commands and arguments for REPL
EXPORTS:
  - ParseResult (dataclass for parsed commands)
  - parse_command(input_str) -> ParseResult
DEPENDENCIES:
  - shlex (for shell-like parsing with quotes)
  - dataclasses (for ParseResult)
NOTES:
  - Handles quoted strings: add "task with spaces"
  - Flags: --archived, --project Home, --day=wed
  - Case-insensitive command names and flag names
"""

import shlex
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Union


@dataclass
class ParseResult:
    """
    Result of parsing a REPL command.

    Attributes:
        command: The command name (e.g., "add", "ls", "status")
        args: Positional arguments (e.g., ["Call the notary"])
        flags: Flag arguments as dict (e.g., {"project": "Home", "archived": True})
        raw_input: Original input string
    """
    command: str
    args: List[str] = field(default_factory=list)
    flags: Dict[str, Union[str, bool]] = field(default_factory=dict)
    raw_input: str = ""

    def text(self, start: int = 0) -> str:
        """Positional args from `start` joined back into one string."""
        return " ".join(self.args[start:])

    def flag_value(self, name: str) -> Optional[str]:
        """String value of a flag, or None when absent or given without a value."""
        value = self.flags.get(name)
        return value if isinstance(value, str) else None


def parse_command(input_str: str) -> ParseResult:
    """
    Parse REPL input into command, args, and flags.

    Examples:
        >>> parse_command('add "Call the notary" --project Home')
        ParseResult(command="add", args=["Call the notary"], flags={"project": "Home"})

        >>> parse_command("recur 1718000000000 weekly --day=wed")
        ParseResult(command="recur", args=["1718000000000", "weekly"], flags={"day": "wed"})

        >>> parse_command("ls --archived")
        ParseResult(command="ls", args=[], flags={"archived": True})

    Notes:
        - Command is always the first token (case-insensitive)
        - Value flags take the next token unless it is another flag
        - An unclosed quote falls back to whitespace splitting
        - Empty input returns command="" with no args/flags
    """
    input_str = input_str.strip()
    if not input_str:
        return ParseResult(command="", raw_input=input_str)

    try:
        tokens = shlex.split(input_str)
    except ValueError:
        tokens = input_str.split()

    if not tokens:
        return ParseResult(command="", raw_input=input_str)

    command = tokens[0].lower()
    args: List[str] = []
    flags: Dict[str, Union[str, bool]] = {}
    i = 1

    while i < len(tokens):
        token = tokens[i]

        if token.startswith("--") and len(token) > 2:
            name, sep, value = token[2:].partition("=")
            name = name.lower()
            if sep:
                flags[name] = value
                i += 1
            elif i + 1 < len(tokens) and not tokens[i + 1].startswith("--"):
                flags[name] = tokens[i + 1]
                i += 2
            else:
                flags[name] = True
                i += 1
        else:
            args.append(token)
            i += 1

    return ParseResult(command=command, args=args, flags=flags, raw_input=input_str)
