"""Console variables: named, typed, described settings with change callbacks."""

from __future__ import annotations

import enum
import functools
import threading
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterator, Optional, Sequence, Tuple, Union

from .parser import CommandParser

Vec3 = Tuple[float, float, float]
CVarValue = Union[float, str, Vec3]
OnChangeCallback = Callable[[str, Any], None]

_ZERO_VEC3: Vec3 = (0.0, 0.0, 0.0)


class CVarFlag(enum.IntFlag):
    """Behaviour flags of a console variable."""

    NONE = 0
    ARCHIVE = 1 << 0  # saved to a config file
    INIT = 1 << 1  # only set from the command line
    READ_ONLY = 1 << 2  # cannot be modified by the user
    USER_CREATED = 1 << 3  # created by a `set` command
    CHEAT = 1 << 4  # only changed if cheats are enabled


class CVarType(enum.Enum):
    """The kind of value a console variable holds."""

    FLOAT = "float"
    STRING = "string"
    VEC3 = "vec3"


@dataclass
class CVarParameters:
    """Descriptive data of a registered console variable."""

    name: str
    description: str
    type: CVarType
    flags: CVarFlag = CVarFlag.NONE


@dataclass
class _CVar:
    params: CVarParameters
    current: CVarValue
    minimum: Any = None
    maximum: Any = None
    callback: Optional[OnChangeCallback] = None


def _clamp(value: float, low: float, high: float) -> float:
    return min(max(value, low), high)


def _as_float(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeError(f"expected a number, got {value!r}")
    return float(value)


def _as_vec3(value: Any) -> Vec3:
    if isinstance(value, (str, bytes)):
        raise TypeError(f"expected three numbers, got {value!r}")
    try:
        components = tuple(value)
    except TypeError:
        raise TypeError(f"expected three numbers, got {value!r}") from None
    if len(components) != 3:
        raise TypeError(f"expected three numbers, got {value!r}")
    x, y, z = (_as_float(c) for c in components)
    return (x, y, z)


class CVarSystem:
    """Registry of console variables."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._cvars: Dict[str, _CVar] = {}

    def _add(self, entry: _CVar) -> CVarParameters:
        with self._lock:
            self._cvars[entry.params.name] = entry
        return entry.params

    def register_float(
        self,
        name: str,
        description: str,
        default: float,
        minimum: float = 0.0,
        maximum: float = 0.0,
        flags: CVarFlag = CVarFlag.NONE,
        callback: Optional[OnChangeCallback] = None,
    ) -> CVarParameters:
        """Register a float variable with an inclusive range."""
        params = CVarParameters(name, description, CVarType.FLOAT, CVarFlag(flags))
        return self._add(
            _CVar(params, _as_float(default), _as_float(minimum), _as_float(maximum), callback)
        )

    def register_string(
        self,
        name: str,
        description: str,
        default: str,
        flags: CVarFlag = CVarFlag.NONE,
        callback: Optional[OnChangeCallback] = None,
    ) -> CVarParameters:
        """Register a string variable."""
        if not isinstance(default, str):
            raise TypeError(f"expected a string, got {default!r}")
        params = CVarParameters(name, description, CVarType.STRING, CVarFlag(flags))
        return self._add(_CVar(params, default, callback=callback))

    def register_vec3(
        self,
        name: str,
        description: str,
        default: Sequence[float],
        minimum: Sequence[float] = _ZERO_VEC3,
        maximum: Sequence[float] = _ZERO_VEC3,
        flags: CVarFlag = CVarFlag.NONE,
        callback: Optional[OnChangeCallback] = None,
    ) -> CVarParameters:
        """Register a three-component vector variable with a per-component range."""
        params = CVarParameters(name, description, CVarType.VEC3, CVarFlag(flags))
        return self._add(
            _CVar(params, _as_vec3(default), _as_vec3(minimum), _as_vec3(maximum), callback)
        )

    def params(self, name: str) -> Optional[CVarParameters]:
        """The parameters of ``name``, or None if no such variable exists."""
        with self._lock:
            entry = self._cvars.get(name)
        return entry.params if entry is not None else None

    def _entry(self, name: str) -> _CVar:
        try:
            return self._cvars[name]
        except KeyError:
            raise KeyError(f"no cvar named {name!r}") from None

    def get(self, name: str) -> CVarValue:
        """The current value of ``name``."""
        with self._lock:
            return self._entry(name).current

    def set(self, name: str, value: Any) -> None:
        """Set ``name``, clamping numbers to its range and notifying its callback."""
        with self._lock:
            entry = self._entry(name)
            kind = entry.params.type
            if kind is CVarType.FLOAT:
                new: CVarValue = _clamp(_as_float(value), entry.minimum, entry.maximum)
            elif kind is CVarType.STRING:
                if not isinstance(value, str):
                    raise TypeError(f"expected a string, got {value!r}")
                new = value
            else:
                vec = _as_vec3(value)
                new = tuple(
                    _clamp(v, lo, hi) for v, lo, hi in zip(vec, entry.minimum, entry.maximum)
                )
            if entry.callback is not None:
                entry.callback(name, new)
            entry.current = new

    def set_parse(self, name: str, args: str) -> None:
        """Parse ``args`` as a value of the variable's type and set it.

        Raises KeyError for an unknown variable, ParseError for malformed
        input and ValueError when the value is of the wrong type.
        """
        with self._lock:
            entry = self._entry(name)
        atom = CommandParser(args).next_atom()
        expected = {
            CVarType.FLOAT: float,
            CVarType.STRING: str,
            CVarType.VEC3: tuple,
        }[entry.params.type]
        if not isinstance(atom, expected):
            raise ValueError(f"{name} expects a {entry.params.type.value} value")
        self.set(name, atom)

    def __iter__(self) -> Iterator[CVarParameters]:
        with self._lock:
            entries = list(self._cvars.values())
        return (entry.params for entry in entries)


@functools.lru_cache(maxsize=None)
def get_cvar_system() -> CVarSystem:
    """The process-wide console variable registry."""
    return CVarSystem()


class AutoCVar:
    """A console variable registered on construction and accessed by handle.

    The variable's type follows the type of ``default``.
    """

    def __init__(
        self,
        name: str,
        description: str,
        default: CVarValue,
        minimum: Any = None,
        maximum: Any = None,
        flags: CVarFlag = CVarFlag.NONE,
        callback: Optional[OnChangeCallback] = None,
        system: Optional[CVarSystem] = None,
    ) -> None:
        self._system = system if system is not None else get_cvar_system()
        self.name = name
        if isinstance(default, str):
            if minimum is not None or maximum is not None:
                raise TypeError("string cvars have no range")
            self._system.register_string(name, description, default, flags, callback)
        elif isinstance(default, (int, float)) and not isinstance(default, bool):
            self._system.register_float(
                name,
                description,
                default,
                0.0 if minimum is None else minimum,
                0.0 if maximum is None else maximum,
                flags,
                callback,
            )
        else:
            self._system.register_vec3(
                name,
                description,
                default,
                _ZERO_VEC3 if minimum is None else minimum,
                _ZERO_VEC3 if maximum is None else maximum,
                flags,
                callback,
            )

    def get(self) -> CVarValue:
        """The variable's current value."""
        return self._system.get(self.name)

    def set(self, value: Any) -> None:
        """Set the variable through its registry."""
        self._system.set(self.name, value)