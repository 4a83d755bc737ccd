"""Logging set-up that writes to the game console, standard output and a log file."""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Callable, List, Optional, Union

from .console import Console
from .parser import CommandParser, ParseError

_FORMAT = "[%(asctime)s:%(msecs)03d] [%(name)s] [%(levelname)s] %(message)s"
_DATE_FORMAT = "%H:%M:%S"

# Severity numbers accepted by the level commands, in order, with the
# standard-library level each one selects.
_LEVELS = (
    ("TRACE", 5),
    ("DEBUG", logging.DEBUG),
    ("INFO", logging.INFO),
    ("WARN", logging.WARNING),
    ("ERROR", logging.ERROR),
    ("CRITICAL", logging.CRITICAL),
    ("OFF", logging.CRITICAL + 10),
)


class ConsoleHandler(logging.Handler):
    """A logging handler that writes each formatted record to a game console."""

    def __init__(self, console: Console) -> None:
        super().__init__()
        self.console = console

    def emit(self, record: logging.LogRecord) -> None:
        try:
            self.console.log("%s", self.format(record))
        except Exception:
            self.handleError(record)


@dataclass
class _Sinks:
    file: logging.Handler
    console: logging.Handler
    stdout: logging.Handler

    def all(self) -> List[logging.Handler]:
        return [self.console, self.stdout, self.file]


class _LoggingState:
    sinks: Optional[_Sinks] = None


_state = _LoggingState()


def _level_command(
    console: Console, command_name: str, handler: Callable[[], logging.Handler]
) -> Callable[[str], None]:
    def command(args: str) -> None:
        try:
            value = CommandParser(args).next_atom()
        except ParseError:
            value = None
        if isinstance(value, float) and 0 <= value < len(_LEVELS):
            handler().setLevel(_LEVELS[int(value)][1])
        else:
            console.log("Usage: %s <int>", command_name)

    return command


def _print_log_levels(console: Console) -> Callable[[str], None]:
    def command(_args: str) -> None:
        console.log("\n".join(f"{name}: {i}" for i, (name, _) in enumerate(_LEVELS)))

    return command


def make_universal_logger(name: str) -> logging.Logger:
    """A logger that writes to all three sinks; ``init_logging`` must run first."""
    sinks = _state.sinks
    if sinks is None:
        raise RuntimeError("logging has not been initialised")
    logger = logging.getLogger(name)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    for handler in sinks.all():
        logger.addHandler(handler)
    logger.propagate = False
    return logger


def init_logging(
    console: Console, directory: Union[str, Path] = "logs"
) -> logging.Logger:
    """Create the sinks and the "default" logger, and register the level commands."""
    folder = Path(directory)
    folder.mkdir(parents=True, exist_ok=True)
    filename = folder / datetime.now().strftime("Log %Y-%m-%d %H-%M-%S.txt")

    formatter = logging.Formatter(_FORMAT, _DATE_FORMAT)
    sinks = _Sinks(
        file=logging.FileHandler(filename, encoding="utf-8"),
        console=ConsoleHandler(console),
        stdout=logging.StreamHandler(sys.stdout),
    )
    for handler in sinks.all():
        handler.setFormatter(formatter)
    _state.sinks = sinks

    logger = make_universal_logger("default")
    logger.setLevel(logging.DEBUG)

    console.register_command(
        "SetFileSinkLevel",
        "- Sets the warning level of the file sink.",
        _level_command(console, "SetFileSinkLevel", lambda: sinks.file),
    )
    console.register_command(
        "SetConsoleSinkLevel",
        "- Sets the warning level of the console sink.",
        _level_command(console, "SetConsoleSinkLevel", lambda: sinks.console),
    )
    console.register_command(
        "SetStdoutSinkLevel",
        "- Sets the warning level of the stdout sink.",
        _level_command(console, "SetStdoutSinkLevel", lambda: sinks.stdout),
    )
    console.register_command(
        "PrintLogLevels", "- Prints all logger warning levels.", _print_log_levels(console)
    )
    return logger