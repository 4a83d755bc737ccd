"""Tokeniser for console command lines.

A command line is a sequence of atoms separated by whitespace. An atom is
an identifier, a number, a double-quoted string or a three-component
vector written between brackets.
"""

from __future__ import annotations

import enum
import math
import re
from dataclasses import dataclass
from typing import Iterator, Tuple, Union

_WHITESPACE = " \n\r\t"
_BLANK = " \t"
_VECTOR_OPEN = "{[("
_VECTOR_CLOSE = "}])"

Vec3 = Tuple[float, float, float]

# A full floating-point literal as accepted by the C library's strtod.
_FLOAT_LITERAL = re.compile(
    r"""
    [+-]?
    (?:
        (?P<hex>0x(?:[0-9a-f]+\.?[0-9a-f]*|\.[0-9a-f]+)(?:p[+-]?\d+)?)
      | (?P<dec>(?:\d+\.?\d*|\.\d+)(?:e[+-]?\d+)?)
      | inf(?:inity)?
      | nan(?:\([0-9a-z_]*\))?
    )
    """,
    re.VERBOSE | re.IGNORECASE,
)

# The leading part of a vector component that can be read as a float.
_COMPONENT_PREFIX = re.compile(
    r"-?(?:inf(?:inity)?|nan(?:\([0-9a-z_]*\))?|(?:\d+\.?\d*|\.\d+)(?:e[+-]?\d+)?)",
    re.IGNORECASE,
)


class ParseError(ValueError):
    """Raised when a command line cannot be split into atoms."""

    def __init__(self, where: int, what: str) -> None:
        super().__init__(f"{what} (at {where})")
        self.where = where
        self.what = what


@dataclass(frozen=True)
class Identifier:
    """The name of a command or console variable."""

    name: str


Atom = Union[Identifier, float, str, Vec3]


class _Kind(enum.Enum):
    FLOAT = enum.auto()
    STRING = enum.auto()
    IDENTIFIER = enum.auto()
    VEC3 = enum.auto()


def _is_alpha(c: str) -> bool:
    return c.isascii() and c.isalpha()


def _is_digit(c: str) -> bool:
    return c in "0123456789"


def _literal_value(text: str) -> float:
    if "nan" in text.lower():
        sign = -1.0 if text.startswith("-") else 1.0
        return math.copysign(math.nan, sign)
    return float(text)


def _parse_float(text: str) -> float | None:
    """Read the whole of ``text`` as a float, or return None."""
    match = _FLOAT_LITERAL.fullmatch(text)
    if match is None:
        return None
    if match.group("hex") is not None:
        try:
            return float.fromhex(text)
        except (OverflowError, ValueError):
            return None
    value = _literal_value(text)
    if math.isinf(value) and match.group("dec") is not None:
        return None
    return value


def _parse_component(token: str) -> float:
    """Read the leading float of a vector component."""
    match = _COMPONENT_PREFIX.match(token)
    if match is None:
        raise ParseError(0, "Failed to read float value")
    text = match.group(0)
    value = _literal_value(text)
    lowered = text.lower()
    if math.isinf(value) and "inf" not in lowered:
        # out of range: the component keeps its zero value
        return 0.0
    return value


class CommandParser:
    """Splits a command line into atoms, one at a time."""

    def __init__(self, command: str) -> None:
        self._cmd = command.strip(_WHITESPACE)
        self._current = 0

    def valid(self) -> bool:
        """Whether any input is left to read."""
        return self._current < len(self._cmd)

    def remaining(self) -> str:
        """The part of the command line not read yet."""
        return self._cmd[self._current:]

    def __iter__(self) -> Iterator[Atom]:
        while self.valid():
            yield self.next_atom()

    def next_atom(self) -> Atom:
        """Read and return the next atom; raise ParseError if it is malformed."""
        cmd = self._cmd
        if not self.valid():
            raise ParseError(self._current, "Empty command")

        first = cmd[self._current]
        if first == '"':
            kind = _Kind.STRING
            self._current += 1
        elif first in _VECTOR_OPEN:
            kind = _Kind.VEC3
            self._current += 1
        elif _is_alpha(first) or first == "_":
            kind = _Kind.IDENTIFIER
        elif _is_digit(first) or first in "-.":
            kind = _Kind.FLOAT
        else:
            self._current = len(cmd)
            raise ParseError(self._current, "Token begins with invalid character")

        chars: list[str] = []
        escape_next = False
        while self.valid():
            c = cmd[self._current]
            self._current += 1

            if c in _BLANK and kind not in (_Kind.STRING, _Kind.VEC3):
                break

            if kind is _Kind.STRING:
                if c == '"' and not escape_next:
                    break
                if c == "\\" and not escape_next:
                    escape_next = True
                    continue
                escape_next = False

            if kind is _Kind.IDENTIFIER and not (
                (c.isascii() and c.isalnum()) or c in "._"
            ):
                self._current = len(cmd)
                raise ParseError(self._current, "Invalid character in identifier")

            if kind is _Kind.VEC3 and c in _VECTOR_CLOSE:
                break

            chars.append(c)

        self._skip_whitespace()
        atom = "".join(chars)

        if kind is _Kind.FLOAT:
            value = _parse_float(atom)
            if value is None:
                raise ParseError(self._current, "Failed to read float value")
            return value
        if kind is _Kind.STRING:
            return atom
        if kind is _Kind.IDENTIFIER:
            return Identifier(atom)

        tokens = [token for token in re.split(r"[ \t]", atom) if token]
        if len(tokens) != 3:
            raise ParseError(self._current, "Vector does not contain three tokens")
        x, y, z = (_parse_component(token) for token in tokens)
        return (x, y, z)

    def _skip_whitespace(self) -> None:
        cmd = self._cmd
        pos = self._current
        while pos < len(cmd) and cmd[pos] in _WHITESPACE:
            pos += 1
        if pos < len(cmd):
            self._current = pos