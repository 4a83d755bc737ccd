"""Camera view orientation and view matrices."""

from __future__ import annotations

import enum
import math
from dataclasses import dataclass, field
from typing import Sequence

import numpy as np


class CardinalName(enum.IntEnum):
    """The six axis directions."""

    POS_X = 0
    NEG_X = 1
    POS_Y = 2
    NEG_Y = 3
    POS_Z = 4
    NEG_Z = 5


CARDINALS = (
    (1.0, 0.0, 0.0),
    (-1.0, 0.0, 0.0),
    (0.0, 1.0, 0.0),
    (0.0, -1.0, 0.0),
    (0.0, 0.0, 1.0),
    (0.0, 0.0, -1.0),
)

UP = CARDINALS[CardinalName.POS_Y]


def look_at(eye: Sequence[float], center: Sequence[float], up: Sequence[float]) -> np.ndarray:
    """A right-handed view matrix looking from ``eye`` towards ``center``."""
    eye = np.asarray(eye, dtype=float)
    f = np.asarray(center, dtype=float) - eye
    f /= np.linalg.norm(f)
    s = np.cross(f, np.asarray(up, dtype=float))
    s /= np.linalg.norm(s)
    u = np.cross(s, f)
    result = np.eye(4)
    result[0, :3] = s
    result[1, :3] = u
    result[2, :3] = -f
    result[0, 3] = -np.dot(s, eye)
    result[1, 3] = -np.dot(u, eye)
    result[2, 3] = np.dot(f, eye)
    return result


def _vec3(value: Sequence[float]) -> np.ndarray:
    arr = np.array(value, dtype=float)
    if arr.shape != (3,):
        raise ValueError(f"expected three components, got {value!r}")
    return arr


@dataclass
class View:
    """Camera position and orientation; angles are in radians."""

    position: np.ndarray = field(default_factory=lambda: np.zeros(3))
    pitch: float = 0.0
    yaw: float = 0.0
    up_dir: CardinalName = CardinalName.POS_Y

    def __post_init__(self) -> None:
        self.position = _vec3(self.position)

    def forward_dir(self) -> np.ndarray:
        """The unit direction the camera looks in."""
        cp = math.cos(self.pitch)
        return np.array(
            [cp * math.cos(self.yaw), math.sin(self.pitch), cp * math.sin(self.yaw)]
        )

    def view_matrix(self) -> np.ndarray:
        """The world-to-view matrix."""
        return look_at(
            self.position, self.position + self.forward_dir(), CARDINALS[self.up_dir]
        )

    def set_forward_dir(self, direction: Sequence[float]) -> None:
        """Point the camera along a unit direction."""
        d = _vec3(direction)
        if abs(1.0 - float(np.linalg.norm(d))) >= 0.0001:
            raise ValueError("direction must be a unit vector")
        self.pitch = math.asin(max(-1.0, min(1.0, d[1])))
        cp = math.cos(self.pitch)
        ratio = d[0] / cp if cp != 0.0 else math.copysign(1.0, d[0])
        self.yaw = math.acos(max(-1.0, min(1.0, ratio)))
        if d[0] >= 0 and d[2] < 0:
            self.yaw = -self.yaw