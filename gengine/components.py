"""Core entity components: tags, lifetimes, transforms and hierarchy links."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, List, Sequence, Tuple

import numpy as np

_FLOAT_EPSILON = float(np.finfo(np.float32).eps)


def _vec3(value: Sequence[float]) -> np.ndarray:
    arr = np.array(value, dtype=float)
    if arr.shape != (3,):
        raise ValueError(f"expected three components, got {value!r}")
    return arr


def _quat(value: Sequence[float]) -> np.ndarray:
    arr = np.array(value, dtype=float)
    if arr.shape != (4,):
        raise ValueError(f"expected a quaternion (w, x, y, z), got {value!r}")
    return arr


def quat_to_matrix(q: Sequence[float]) -> np.ndarray:
    """The 4x4 rotation matrix of a quaternion given as (w, x, y, z)."""
    w, x, y, z = _quat(q)
    return np.array(
        [
            [1 - 2 * (y * y + z * z), 2 * (x * y - w * z), 2 * (x * z + w * y), 0.0],
            [2 * (x * y + w * z), 1 - 2 * (x * x + z * z), 2 * (y * z - w * x), 0.0],
            [2 * (x * z - w * y), 2 * (y * z + w * x), 1 - 2 * (x * x + y * y), 0.0],
            [0.0, 0.0, 0.0, 1.0],
        ]
    )


def _matrix_to_quat(m: np.ndarray) -> np.ndarray:
    trace = m[0, 0] + m[1, 1] + m[2, 2]
    if trace > 0:
        s = math.sqrt(trace + 1.0) * 2
        return np.array(
            [0.25 * s, (m[2, 1] - m[1, 2]) / s, (m[0, 2] - m[2, 0]) / s, (m[1, 0] - m[0, 1]) / s]
        )
    if m[0, 0] > m[1, 1] and m[0, 0] > m[2, 2]:
        s = math.sqrt(1.0 + m[0, 0] - m[1, 1] - m[2, 2]) * 2
        return np.array(
            [(m[2, 1] - m[1, 2]) / s, 0.25 * s, (m[0, 1] + m[1, 0]) / s, (m[0, 2] + m[2, 0]) / s]
        )
    if m[1, 1] > m[2, 2]:
        s = math.sqrt(1.0 + m[1, 1] - m[0, 0] - m[2, 2]) * 2
        return np.array(
            [(m[0, 2] - m[2, 0]) / s, (m[0, 1] + m[1, 0]) / s, 0.25 * s, (m[1, 2] + m[2, 1]) / s]
        )
    s = math.sqrt(1.0 + m[2, 2] - m[0, 0] - m[1, 1]) * 2
    return np.array(
        [(m[1, 0] - m[0, 1]) / s, (m[0, 2] + m[2, 0]) / s, (m[1, 2] + m[2, 1]) / s, 0.25 * s]
    )


def quat_multiply(a: Sequence[float], b: Sequence[float]) -> np.ndarray:
    """The Hamilton product ``a * b``: apply ``b`` first, then ``a``."""
    pw, px, py, pz = _quat(a)
    qw, qx, qy, qz = _quat(b)
    return np.array(
        [
            pw * qw - px * qx - py * qy - pz * qz,
            pw * qx + px * qw + py * qz - pz * qy,
            pw * qy + py * qw + pz * qx - px * qz,
            pw * qz + pz * qw + px * qy - py * qx,
        ]
    )


def quat_slerp(a: Sequence[float], b: Sequence[float], t: float) -> np.ndarray:
    """Spherical interpolation from ``a`` to ``b`` along the shortest arc."""
    x = _quat(a)
    z = _quat(b)
    cos_theta = float(np.dot(x, z))
    if cos_theta < 0:
        z = -z
        cos_theta = -cos_theta
    if cos_theta > 1 - _FLOAT_EPSILON:
        return x + t * (z - x)
    angle = math.acos(cos_theta)
    return (math.sin((1 - t) * angle) * x + math.sin(t * angle) * z) / math.sin(angle)


@dataclass
class Tag:
    """A human-readable identifier; not guaranteed to be unique."""

    tag: str = ""


@dataclass
class Lifetime:
    """Schedules the entity's deletion once ``remaining_seconds`` runs out while active."""

    remaining_seconds: float = 0.0
    active: bool = False


@dataclass
class ScheduledDeletion:
    """Marks an entity to be deleted at the start of the next update."""


class Transform:
    """The persistent translation, rotation and scale of an entity.

    Any change marks the transform dirty until ``mark_clean`` is called.
    """

    def __init__(
        self,
        translation: Sequence[float] = (0.0, 0.0, 0.0),
        rotation: Sequence[float] = (1.0, 0.0, 0.0, 0.0),
        scale: Sequence[float] = (1.0, 1.0, 1.0),
    ) -> None:
        self._translation = _vec3(translation)
        self._rotation = _quat(rotation)
        self._scale = _vec3(scale)
        self._dirty = True

    @property
    def translation(self) -> np.ndarray:
        return self._translation.copy()

    @translation.setter
    def translation(self, value: Sequence[float]) -> None:
        self._translation = _vec3(value)
        self._dirty = True

    @property
    def rotation(self) -> np.ndarray:
        """The rotation as a quaternion (w, x, y, z)."""
        return self._rotation.copy()

    @rotation.setter
    def rotation(self, value: Any) -> None:
        arr = np.asarray(value, dtype=float)
        if arr.shape in ((3, 3), (4, 4)):
            self._rotation = _matrix_to_quat(arr[:3, :3])
        else:
            self._rotation = _quat(arr)
        self._dirty = True

    @property
    def scale(self) -> np.ndarray:
        return self._scale.copy()

    @scale.setter
    def scale(self, value: Sequence[float]) -> None:
        self._scale = _vec3(value)
        self._dirty = True

    @property
    def dirty(self) -> bool:
        """Whether the transform changed since it was last marked clean."""
        return self._dirty

    def model_matrix(self) -> np.ndarray:
        """The translate * rotate * scale matrix."""
        translate = np.eye(4)
        translate[:3, 3] = self._translation
        scale = np.diag(np.append(self._scale, 1.0))
        return translate @ quat_to_matrix(self._rotation) @ scale

    def mark_clean(self) -> None:
        """Clear the dirty flag."""
        self._dirty = False

    def __repr__(self) -> str:
        return (
            f"Transform(translation={self._translation.tolist()}, "
            f"rotation={self._rotation.tolist()}, scale={self._scale.tolist()})"
        )


@dataclass
class Model:
    """The visible transform of an entity; changing it does not move the entity."""

    matrix: np.ndarray = field(default_factory=lambda: np.eye(4))


@dataclass
class Parent:
    """Link to the parent entity."""

    entity: Any = None


class Children:
    """The child entities of an entity and the cached height of its subtree."""

    def __init__(self) -> None:
        self._children: List[Any] = []
        self.cached_height = 0

    @property
    def children(self) -> Tuple[Any, ...]:
        return tuple(self._children)

    def add_child(self, child: Any) -> None:
        """Append a child; adding the same entity twice is an error."""
        if self._children.count(child) != 0:
            raise ValueError("that entity is already a child of this")
        self._children.append(child)

    def remove_child(self, child: Any) -> None:
        """Remove a child; it must be present exactly once."""
        if self._children.count(child) != 1:
            raise ValueError("that entity is not a child of this")
        self._children = [c for c in self._children if c != child]

    def __len__(self) -> int:
        return len(self._children)

    def __iter__(self):
        return iter(list(self._children))


@dataclass
class LocalTransform:
    """For an entity with a parent, its transform relative to that parent."""

    transform: Transform = field(default_factory=Transform)


@dataclass
class InterpolatedPhysics:
    """State for smoothing a physics body between simulation steps."""

    time_since_update: float = -1.0
    prev_pos: np.ndarray = field(default_factory=lambda: np.zeros(3))
    prev_rot: np.ndarray = field(default_factory=lambda: np.array([1.0, 0.0, 0.0, 0.0]))