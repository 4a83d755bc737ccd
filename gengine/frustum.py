"""View frustum planes and visibility tests for points and boxes."""

from __future__ import annotations

import enum
import itertools
from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np


class Plane(enum.IntEnum):
    """The six planes of a frustum."""

    RIGHT = 0
    LEFT = 1
    BOTTOM = 2
    TOP = 3
    FRONT = 4
    BACK = 5


class Visibility(enum.Enum):
    """How much of a shape lies inside a frustum."""

    INVISIBLE = enum.auto()
    PARTIAL = enum.auto()
    FULL = enum.auto()


@dataclass(frozen=True)
class AABB:
    """An axis-aligned bounding box."""

    min: Sequence[float]
    max: Sequence[float]


class Frustum:
    """Six normalised planes extracted from a projection and a view matrix.

    Matrices are row-major, acting on column vectors.
    """

    def __init__(self, proj: Optional[np.ndarray] = None, view: Optional[np.ndarray] = None) -> None:
        self._data = np.zeros((6, 4))
        if proj is not None or view is not None:
            if proj is None or view is None:
                raise TypeError("both a projection and a view matrix are needed")
            self.transform(proj, view)

    def transform(self, proj: np.ndarray, view: np.ndarray) -> None:
        """Recompute the planes from ``proj @ view``."""
        clip = np.asarray(proj, dtype=float) @ np.asarray(view, dtype=float)
        w = clip[3]
        planes = np.array(
            [
                w - clip[0],  # right
                w + clip[0],  # left
                w + clip[1],  # bottom
                w - clip[1],  # top
                w - clip[2],  # front
                w + clip[2],  # back
            ]
        )
        magnitude = np.linalg.norm(planes[:, :3], axis=1, keepdims=True)
        with np.errstate(divide="ignore", invalid="ignore"):
            self._data = planes / magnitude

    def plane(self, plane: Plane) -> np.ndarray:
        """The coefficients (a, b, c, d) of one plane."""
        return self._data[int(plane)].copy()

    def is_point_inside(self, point: Sequence[float]) -> Visibility:
        """FULL if the point lies strictly inside all six planes, else INVISIBLE."""
        p = np.append(np.asarray(point, dtype=float), 1.0)
        if np.any(self._data @ p <= 0):
            return Visibility.INVISIBLE
        return Visibility.FULL

    def is_box_inside(self, box: AABB) -> Visibility:
        """Visibility of a box against every plane but the back one."""
        lo = np.asarray(box.min, dtype=float)
        hi = np.asarray(box.max, dtype=float)
        results = []
        for plane in (Plane.RIGHT, Plane.LEFT, Plane.BOTTOM, Plane.TOP, Plane.FRONT):
            a, b, c, d = self._data[int(plane)]
            xs = (lo[0] * a, hi[0] * a)
            ys = (lo[1] * b, hi[1] * b)
            zs = (lo[2] * c + d, hi[2] * c + d)
            corners = [x + y + z for x, y, z in itertools.product(xs, ys, zs)]
            if all(v <= 0 for v in corners):
                return Visibility.INVISIBLE
            results.append(all(v > 0 for v in corners))
        return Visibility.FULL if all(results) else Visibility.PARTIAL