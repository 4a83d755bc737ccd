"""Keyboard and mouse state tracking, named input actions and input axes.

Window-system callbacks feed events in through the ``on_*`` methods; the
game queries per-frame key states, actions and axes.
"""

from __future__ import annotations

import enum
import math
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Optional, Tuple, Union

BUTTON_COUNT = 348  # number of tracked keyboard keys
MOUSE_BUTTON_STATES = 7  # number of tracked mouse buttons
KEY_UNKNOWN = -1

DEFAULT_SENSITIVITY = 0.05 * 3.1415 / 180.0

Vec2 = Tuple[float, float]


class KeyState(enum.IntFlag):
    """State of a keyboard key or mouse button."""

    NONE = 0
    DOWN = 0b00001
    PRESSED = 0b00011
    UP = 0b00100
    RELEASED = 0b01100
    REPEAT = 0b10001


class KeyAction(enum.IntEnum):
    """What happened to a key or button in an event."""

    RELEASE = 0
    PRESS = 1
    REPEAT = 2


_ACTION_STATES = {
    KeyAction.RELEASE: KeyState.RELEASED,
    KeyAction.PRESS: KeyState.PRESSED,
    KeyAction.REPEAT: KeyState.REPEAT,
}


@dataclass(frozen=True)
class InputKey:
    """Binding to a keyboard key."""

    key: int = 0


@dataclass(frozen=True)
class InputMouseButton:
    """Binding to a mouse button."""

    button: int = 0


@dataclass(frozen=True)
class InputMouseScroll:
    """Binding to one axis of the scroll wheel."""

    yaxis: bool = False


@dataclass(frozen=True)
class InputMousePos:
    """Binding to one axis of mouse movement."""

    yaxis: bool = False


ActionBinding = Union[InputKey, InputMouseButton, InputMouseScroll]
AxisSource = Union[InputKey, InputMouseButton, InputMouseScroll, InputMousePos]


@dataclass(frozen=True)
class InputAxisBinding:
    """A source contributing to an input axis, multiplied by ``scale``."""

    type: AxisSource = field(default_factory=InputKey)
    scale: float = 1.0


def _state_for(action: int) -> KeyState:
    try:
        return _ACTION_STATES[KeyAction(action)]
    except ValueError:
        raise ValueError(f"invalid key action {action!r}") from None


def _decay(state: KeyState) -> KeyState:
    # states settle into plain up or down after one frame
    if state & KeyState.UP:
        state = KeyState.UP
    if state & KeyState.DOWN:
        state = KeyState.DOWN
    return state


class Input:
    """Per-frame input state of one window."""

    def __init__(
        self,
        sensitivity: float = DEFAULT_SENSITIVITY,
        poll_events: Optional[Callable[[], None]] = None,
    ) -> None:
        self.sensitivity = sensitivity
        self._poll_events = poll_events
        self._key_states: List[KeyState] = [KeyState.NONE] * BUTTON_COUNT
        self._mouse_states: List[KeyState] = [KeyState.NONE] * MOUSE_BUTTON_STATES
        self._screen_pos: Vec2 = (0.0, 0.0)
        self._screen_offset: Vec2 = (0.0, 0.0)
        self._prev_screen_pos: Vec2 = (0.0, 0.0)
        self._scroll_offset: Vec2 = (0.0, 0.0)
        self._first_mouse = True
        self._actions: Dict[str, List[ActionBinding]] = {}
        self._axes: Dict[str, List[InputAxisBinding]] = {}

    @property
    def screen_pos(self) -> Vec2:
        return self._screen_pos

    @property
    def screen_offset(self) -> Vec2:
        """Mouse movement this frame, scaled by the sensitivity."""
        return self._screen_offset

    @property
    def prev_screen_pos(self) -> Vec2:
        return self._prev_screen_pos

    @property
    def scroll_offset(self) -> Vec2:
        return self._scroll_offset

    def update(self) -> None:
        """Advance one frame: decay key states, reset offsets, then poll events."""
        self._key_states = [_decay(s) for s in self._key_states]
        self._mouse_states = [_decay(s) for s in self._mouse_states]
        self._scroll_offset = (0.0, 0.0)
        self._screen_offset = (0.0, 0.0)
        if self._poll_events is not None:
            self._poll_events()

    @staticmethod
    def _check(index: int, limit: int, what: str) -> int:
        if not 0 <= index < limit:
            raise IndexError(f"{what} {index} out of range")
        return index

    def key_state(self, key: int) -> KeyState:
        return self._key_states[self._check(key, BUTTON_COUNT, "key")]

    def is_key_down(self, key: int) -> bool:
        return bool(self.key_state(key) & KeyState.DOWN)

    def is_key_up(self, key: int) -> bool:
        return bool(self.key_state(key) & KeyState.UP)

    def is_key_pressed(self, key: int) -> bool:
        return self.key_state(key) == KeyState.PRESSED

    def is_key_released(self, key: int) -> bool:
        return self.key_state(key) == KeyState.RELEASED

    def _mouse_state(self, button: int) -> KeyState:
        return self._mouse_states[self._check(button, MOUSE_BUTTON_STATES, "mouse button")]

    def is_mouse_down(self, button: int) -> bool:
        return bool(self._mouse_state(button) & KeyState.DOWN)

    def is_mouse_up(self, button: int) -> bool:
        return bool(self._mouse_state(button) & KeyState.UP)

    def is_mouse_pressed(self, button: int) -> bool:
        return self._mouse_state(button) == KeyState.PRESSED

    def is_mouse_released(self, button: int) -> bool:
        return self._mouse_state(button) == KeyState.RELEASED

    def on_key(self, key: int, action: int) -> None:
        """Record a keyboard event; unknown keys are ignored."""
        if key == KEY_UNKNOWN:
            return
        state = _state_for(action)
        self._key_states[self._check(key, BUTTON_COUNT, "key")] = state

    def on_mouse_pos(self, x: float, y: float) -> None:
        """Record a cursor position event."""
        x, y = float(x), float(y)
        ox, oy = self._screen_offset
        if self._first_mouse:
            ox, oy = x, y
            self._first_mouse = False
        self._screen_pos = (x, y)
        px, py = self._prev_screen_pos
        ox += self.sensitivity * (x - px)
        oy += self.sensitivity * (py - y)
        self._screen_offset = (ox, oy)
        self._prev_screen_pos = (x, y)

    def on_mouse_scroll(self, x: float, y: float) -> None:
        """Record a scroll event."""
        self._scroll_offset = (float(x), float(y))

    def on_mouse_button(self, button: int, action: int) -> None:
        """Record a mouse button event."""
        state = _state_for(action)
        self._mouse_states[self._check(button, MOUSE_BUTTON_STATES, "mouse button")] = state

    def add_input_action(self, action: str, bindings: Iterable[ActionBinding]) -> None:
        """Map a named action to keys, buttons or scroll axes."""
        if action in self._actions:
            raise ValueError(f"input action {action!r} already exists")
        items = list(bindings)
        for binding in items:
            if not isinstance(binding, (InputKey, InputMouseButton, InputMouseScroll)):
                raise TypeError(f"invalid action binding {binding!r}")
        if items:
            self._actions[action] = items

    def remove_input_action(self, action: str) -> None:
        try:
            del self._actions[action]
        except KeyError:
            raise KeyError(f"no input action named {action!r}") from None

    def _scroll_axis(self, yaxis: bool) -> float:
        return self._scroll_offset[1] if yaxis else self._scroll_offset[0]

    def is_input_action_pressed(self, action: str) -> bool:
        """Whether any binding of the action was pressed this frame."""
        try:
            bindings = self._actions[action]
        except KeyError:
            raise KeyError(f"no input action named {action!r}") from None
        for binding in bindings:
            if isinstance(binding, InputKey) and self.is_key_pressed(binding.key):
                return True
            if isinstance(binding, InputMouseButton) and self.is_mouse_pressed(binding.button):
                return True
            if isinstance(binding, InputMouseScroll) and self._scroll_axis(binding.yaxis) != 0:
                return True
        return False

    def add_input_axis(self, action: str, bindings: Iterable[InputAxisBinding]) -> None:
        """Map a named axis to scaled sources."""
        if action in self._axes:
            raise ValueError(f"input axis {action!r} already exists")
        items = list(bindings)
        for binding in items:
            if not isinstance(binding, InputAxisBinding):
                raise TypeError(f"invalid axis binding {binding!r}")
        if items:
            self._axes[action] = items

    def remove_input_axis(self, action: str) -> None:
        try:
            del self._axes[action]
        except KeyError:
            raise KeyError(f"no input axis named {action!r}") from None

    def get_input_axis(self, action: str) -> float:
        """The contribution of largest magnitude among the axis's sources."""
        try:
            bindings = self._axes[action]
        except KeyError:
            raise KeyError(f"no input axis named {action!r}") from None
        result = 0.0
        for binding in bindings:
            source = binding.type
            value: Optional[float] = None
            if isinstance(source, InputKey):
                if self.is_key_down(source.key):
                    value = binding.scale
            elif isinstance(source, InputMouseButton):
                if self.is_mouse_down(source.button):
                    value = binding.scale
            elif isinstance(source, InputMouseScroll):
                value = self._scroll_axis(source.yaxis) * binding.scale
            elif isinstance(source, InputMousePos):
                offset = self._screen_offset[1] if source.yaxis else self._screen_offset[0]
                value = offset * binding.scale
            if value is not None and math.fabs(value) > math.fabs(result):
                result = value
        return result