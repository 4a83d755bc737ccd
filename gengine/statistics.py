"""Rolling statistics over the most recent samples, grouped by name."""

from __future__ import annotations

import functools
import math
import time
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Dict, Iterator, List, Tuple

STATISTICS_BUFFER_SIZE = 500


class StatBuffer:
    """Records statistics about the most recent ``capacity`` values pushed to it."""

    def __init__(self, capacity: int = STATISTICS_BUFFER_SIZE) -> None:
        if capacity <= 0:
            raise ValueError("capacity must be positive")
        self._buffer: List[float] = [0.0] * capacity
        self._next = 0
        self._count = 0
        self._sum = 0.0

    @property
    def capacity(self) -> int:
        """How many values the buffer keeps."""
        return len(self._buffer)

    def __len__(self) -> int:
        return self._count

    def push(self, value: float) -> None:
        """Record a value, overwriting the oldest once the buffer is full."""
        prev = self._buffer[self._next]
        self._buffer[self._next] = value
        self._next = (self._next + 1) % len(self._buffer)
        if self._count < len(self._buffer):
            self._count += 1
        self._sum += value - prev

    def sum(self) -> float:
        """Sum of the recorded values."""
        return self._sum

    def mean(self) -> float:
        """Mean of the recorded values; NaN when empty."""
        if self._count == 0:
            return math.nan
        return self._sum / self._count

    def variance(self) -> float:
        """Population variance of the recorded values; NaN when empty."""
        if self._count == 0:
            return math.nan
        mean = self.mean()
        return sum((v - mean) ** 2 for v in self._buffer[: self._count]) / self._count

    def standard_deviation(self) -> float:
        """Square root of the variance."""
        return math.sqrt(self.variance())

    def min(self) -> float:
        """Smallest recorded value; zero when empty."""
        return min(self._buffer[: max(self._count, 1)])

    def max(self) -> float:
        """Largest recorded value; zero when empty."""
        return max(self._buffer[: max(self._count, 1)])


@dataclass(frozen=True)
class StatValues:
    """A snapshot of one statistic."""

    mean: float
    variance: float
    min: float
    max: float


class StatisticsManager:
    """Named float statistics, each belonging to a group."""

    def __init__(self, capacity: int = STATISTICS_BUFFER_SIZE) -> None:
        self._capacity = capacity
        self._stats: Dict[str, Tuple[str, StatBuffer]] = {}

    def register_float_stat(self, stat_name: str, group_name: str) -> None:
        """Create a statistic; registering a name twice is an error."""
        if stat_name in self._stats:
            raise ValueError(f"statistic {stat_name!r} already registered")
        self._stats[stat_name] = (group_name, StatBuffer(self._capacity))

    def _buffer(self, stat_name: str) -> StatBuffer:
        try:
            return self._stats[stat_name][1]
        except KeyError:
            raise KeyError(f"no statistic named {stat_name!r}") from None

    def push_float_stat_value(self, stat_name: str, value: float) -> None:
        """Record a value for a registered statistic."""
        self._buffer(stat_name).push(value)

    def get_float_stat(self, stat_name: str) -> StatBuffer:
        """The buffer of a registered statistic."""
        return self._buffer(stat_name)

    def summary(self) -> Dict[str, List[Tuple[str, StatValues]]]:
        """Statistics by group, each group sorted by maximum, largest first."""
        groups: Dict[str, List[Tuple[str, StatValues]]] = {}
        for stat_name, (group_name, buffer) in self._stats.items():
            values = StatValues(buffer.mean(), buffer.variance(), buffer.min(), buffer.max())
            groups.setdefault(group_name, []).append((stat_name, values))
        for entries in groups.values():
            entries.sort(key=lambda item: item[1].max, reverse=True)
        return groups

    @contextmanager
    def measure(self, stat_name: str) -> Iterator[None]:
        """Time the enclosed block and record its duration in milliseconds."""
        buffer = self._buffer(stat_name)
        start = time.perf_counter()
        try:
            yield
        finally:
            buffer.push((time.perf_counter() - start) * 1000.0)


@functools.lru_cache(maxsize=None)
def get_statistics_manager() -> StatisticsManager:
    """The process-wide statistics manager."""
    return StatisticsManager()