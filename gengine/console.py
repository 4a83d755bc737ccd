"""In-game developer console: commands, console variables, log and history."""

from __future__ import annotations

import functools
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

from .cvar import AutoCVar, CVarSystem, get_cvar_system
from .parser import CommandParser, Identifier, ParseError

ConsoleFunc = Callable[[str], None]
Color = Tuple[float, float, float]

_LOG_LIMIT = 1023  # characters kept of one formatted log line
_WHITESPACE = " \n\r\t"


@dataclass
class Command:
    """A named console command."""

    name: str
    description: str  # shown by `help` and `find`
    func: ConsoleFunc


@dataclass(frozen=True)
class LogEntry:
    """One line of console output and its colour."""

    text: str
    color: Color


def _format(fmt: str, args: tuple) -> str:
    text = fmt % args if args else fmt
    return text[:_LOG_LIMIT]


def _first_atom(parser: CommandParser):
    try:
        return parser.next_atom()
    except ParseError:
        return None


class Console:
    """Executes command lines against registered commands and console variables."""

    def __init__(self, cvars: Optional[CVarSystem] = None) -> None:
        self._cvars = cvars if cvars is not None else get_cvar_system()
        self._input_color = AutoCVar(
            "c.inputColor",
            "Default color of console input",
            (0.6, 0.6, 0.6),
            system=self._cvars,
        )
        self._text_color = AutoCVar(
            "c.textColor",
            "Default color of console text",
            (1.0, 1.0, 1.0),
            system=self._cvars,
        )
        self._entries: List[LogEntry] = []
        self._history: List[str] = []
        self._history_pos = -1
        self._commands: List[Command] = []

        self.register_command("find", "- Finds commands with substring", self._find)
        self.register_command(
            "Lua", "- Runs the following Lua code", lambda _args: self.log("Lua code :)")
        )
        self.register_command("set", "- Sets the value of a cvar", self._set)
        self.register_command("findall", "- Displays all cvars and concommands", self._findall)

    @property
    def cvars(self) -> CVarSystem:
        """The console variable registry this console works with."""
        return self._cvars

    @property
    def entries(self) -> Tuple[LogEntry, ...]:
        """Everything logged since the last clear, oldest first."""
        return tuple(self._entries)

    @property
    def history(self) -> Tuple[str, ...]:
        """Executed command lines, oldest first, without duplicates."""
        return tuple(self._history)

    @property
    def commands(self) -> Tuple[Command, ...]:
        """The registered commands in registration order."""
        return tuple(self._commands)

    def register_command(self, name: str, description: str, func: ConsoleFunc) -> None:
        """Add a command; ``func`` receives the rest of the command line."""
        self._commands.append(Command(name, description, func))

    def _find_command(self, name: str) -> Optional[Command]:
        lowered = name.lower()
        return next((c for c in self._commands if c.name.lower() == lowered), None)

    def get_command_description(self, name: str) -> Optional[str]:
        """The description of a command, matched case-insensitively, or None."""
        command = self._find_command(name)
        return command.description if command is not None else None

    def log(self, fmt: str, *args) -> None:
        """Log a printf-style message in the default text colour."""
        r, g, b = self._text_color.get()
        self._entries.append(LogEntry(_format(fmt, args), (r, g, b)))

    def log_color(self, r: float, g: float, b: float, fmt: str, *args) -> None:
        """Log a printf-style message in the given colour."""
        self._entries.append(LogEntry(_format(fmt, args), (r, g, b)))

    def clear(self) -> None:
        """Remove all log entries."""
        self._entries.clear()

    def execute_command(self, cmd: str) -> None:
        """Echo, record and run one command line."""
        r, g, b = self._input_color.get()
        self.log_color(r, g, b, ">>> %s <<<\n", cmd)

        self._history_pos = -1
        if cmd in self._history:
            self._history.remove(cmd)
        self._history.append(cmd)

        parser = CommandParser(cmd)
        atom = _first_atom(parser)
        if not isinstance(atom, Identifier):
            self.log("Commands must begin with an identifier\n")
            self.log("%s\n", cmd)
            self.log("^ not an identifier\n")
            return

        command = self._find_command(atom.name)
        if command is not None:
            command.func(parser.remaining())
            return

        params = self._cvars.params(atom.name)
        if params is None:
            self.log("No cvar or concommand with identifier <%s> exists\n", atom.name)
            return

        remaining = parser.remaining()
        if not remaining:
            self.log("%s\n", params.description)
            return
        try:
            self._cvars.set_parse(atom.name, remaining)
        except (KeyError, ValueError, TypeError):
            self.log("Usage: %s <%s>\n", params.name, params.type.value)

    def autocomplete_candidates(self, text: str) -> List[str]:
        """Command and cvar names containing ``text``, case-insensitively."""
        if not text:
            return []
        needle = text.lower().strip(_WHITESPACE)
        names = [c.name for c in self._commands if needle in c.name.lower()]
        names.extend(p.name for p in self._cvars if needle in p.name.lower())
        return names

    def _history_text(self, previous: int) -> Optional[str]:
        if previous == self._history_pos:
            return None
        return self._history[self._history_pos] if self._history_pos >= 0 else ""

    def history_previous(self) -> Optional[str]:
        """Step back in history; the new input line, or None if unchanged."""
        previous = self._history_pos
        if self._history_pos == -1:
            self._history_pos = len(self._history) - 1
        elif self._history_pos > 0:
            self._history_pos -= 1
        return self._history_text(previous)

    def history_next(self) -> Optional[str]:
        """Step forward in history; the new input line, or None if unchanged."""
        previous = self._history_pos
        if self._history_pos != -1:
            self._history_pos += 1
            if self._history_pos >= len(self._history):
                self._history_pos = -1
        return self._history_text(previous)

    def _find(self, args: str) -> None:
        atom = _first_atom(CommandParser(args))
        if not isinstance(atom, Identifier):
            self.log("Usage: find <convarname>")
            return
        needle = atom.name.lower()
        matches = [c for c in self._commands if needle in c.name.lower()]
        for command in matches:
            self.log("%-25s %s", command.name, command.description)

    def _set(self, args: str) -> None:
        parser = CommandParser(args)
        atom = _first_atom(parser)
        if isinstance(atom, Identifier):
            try:
                self._cvars.set_parse(atom.name, parser.remaining())
                return
            except (KeyError, ValueError, TypeError):
                pass
        self.log("Usage: set <convar> <value>")

    def _findall(self, _args: str) -> None:
        for command in list(self._commands):
            self.log("%-25s %s", command.name, command.description)
        for params in self._cvars:
            self.log("%-25s %s", params.name, params.description)


@functools.lru_cache(maxsize=None)
def get_console() -> Console:
    """The process-wide console, bound to the process-wide cvar registry."""
    return Console(get_cvar_system())