"""Mutable entities shared by both step engines."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Tuple

__all__ = [
    "CLUSTER_TRAIL_LIMIT",
    "PROJECTION_TRAIL_LIMIT",
    "UNASSIGNED",
    "Trail",
    "Point",
    "Centroid",
    "Phase",
    "SimulationState",
]

# One entry per label change or centroid move, so at most one per iteration.
CLUSTER_TRAIL_LIMIT = 100
PROJECTION_TRAIL_LIMIT = 20

UNASSIGNED = -1


class Trail:
    """Ordered history of past positions, oldest first."""

    __slots__ = ("_items", "limit")

    def __init__(self, limit: int = CLUSTER_TRAIL_LIMIT, items: Optional[List[Tuple[float, float]]] = None) -> None:
        self.limit = max(1, int(limit))
        self._items: List[Tuple[float, float]] = list(items or [])

    def append(self, x: float, y: float, *, bounded: bool = True) -> None:
        self._items.append((float(x), float(y)))
        if bounded and len(self._items) > self.limit:
            del self._items[: len(self._items) - self.limit]

    def clear(self) -> None:
        self._items.clear()

    def copy(self) -> "Trail":
        return Trail(self.limit, self._items)

    def positions(self) -> Tuple[Tuple[float, float], ...]:
        return tuple(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[Tuple[float, float]]:
        return iter(self._items)

    def __getitem__(self, index: int) -> Tuple[float, float]:
        return self._items[index]

    def __repr__(self) -> str:
        return f"Trail(limit={self.limit}, len={len(self._items)})"


@dataclass
class Point:
    """A data point in canvas coordinates.

    ``features`` is only filled by the projection datasets, where it stands for
    the high-dimensional sample behind the 2D position.
    """

    x: float
    y: float
    cluster: int = UNASSIGNED
    features: Optional[Tuple[float, ...]] = None
    trail: Trail = field(default_factory=Trail)
    selected: bool = False

    def copy(self) -> "Point":
        return Point(self.x, self.y, self.cluster, self.features, self.trail.copy(), self.selected)


@dataclass
class Centroid:
    x: float
    y: float
    trail: Trail = field(default_factory=Trail)

    def copy(self) -> "Centroid":
        return Centroid(self.x, self.y, self.trail.copy())


class Phase(enum.Enum):
    IDLE = "idle"
    RUNNING = "running"
    COMPLETE = "complete"


@dataclass
class SimulationState:
    iteration: int = 0
    max_iterations: int = 20
    running: bool = False
    complete: bool = False

    @property
    def phase(self) -> Phase:
        if self.complete:
            return Phase.COMPLETE
        if self.running:
            return Phase.RUNNING
        return Phase.IDLE

    def rewind(self) -> None:
        """Back to Idle at iteration zero."""

        self.iteration = 0
        self.running = False
        self.complete = False

    def finish(self) -> None:
        self.running = False
        self.complete = True
