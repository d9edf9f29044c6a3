"""Scripted t-SNE-like projection.

There is no real embedding here.  Every labelled point is pulled a fixed
fraction of the way toward a target placed on a circle around the canvas
centre, one slot per cluster.  Random jitter shrinks as the run progresses,
so the clusters visibly condense.
"""

from __future__ import annotations

import math
import random
from typing import List, Optional, Tuple

from ..datasets import PROJECTION_PRESETS, generate_projection
from ..store import PROJECTION_TRAIL_LIMIT, UNASSIGNED, Point, Trail
from .base import StepEngine, coerce_int

__all__ = [
    "ProjectionEngine",
    "PERPLEXITY_RANGE",
    "CLUSTER_RANGE",
    "DIMENSION_RANGE",
    "STEP_FRACTION",
    "FINAL_NOISE",
]

PERPLEXITY_RANGE = (5, 50, 5)
CLUSTER_RANGE = (2, 10)
DIMENSION_RANGE = (3, 50)

STEP_FRACTION = 0.1
FINAL_NOISE = 0.15
TRAIL_EVERY = 5


class ProjectionEngine(StepEngine):
    kind = "tsne"
    PRESETS = PROJECTION_PRESETS

    def __init__(
        self,
        rng: Optional[random.Random] = None,
        *,
        perplexity: int = 30,
        clusters: int = 3,
        dimensions: int = 10,
        max_iterations: int = 100,
    ) -> None:
        super().__init__(rng, max_iterations=max_iterations)
        self.perplexity = perplexity
        self.cluster_count = clusters
        self.dimensions = dimensions
        self.projection: Optional[List[Point]] = None

    @property
    def has_projection(self) -> bool:
        return self.projection is not None

    def active_points(self) -> List[Point]:
        return self.projection if self.projection is not None else self.points

    def can_step(self) -> bool:
        return self.has_bounds and bool(self.points)

    # ---------------------------------------------------------------- datasets
    def _generate(self) -> List[Point]:
        width, height = self.bounds
        return generate_projection(
            self.preset, width, height, self.rng, clusters=self.cluster_count, dimensions=self.dimensions
        )

    def _on_points_replaced(self) -> None:
        self.projection = None

    def restart(self) -> bool:
        # Drawing falls back to the raw layout, whose selection flags are stale.
        self.projection = None
        self.generation += 1
        self.state.rewind()
        return True

    def add_point(self, x: float, y: float) -> bool:
        if self.state.running:
            return False
        self.points.append(Point(float(x), float(y), UNASSIGNED, None, Trail(PROJECTION_TRAIL_LIMIT)))
        if self.projection is not None:
            self.projection.append(Point(float(x), float(y), UNASSIGNED, None, Trail(PROJECTION_TRAIL_LIMIT)))
        return True

    # ----------------------------------------------------------- configuration
    def set_perplexity(self, value: object) -> bool:
        number = coerce_int(value)
        low, high, step = PERPLEXITY_RANGE
        if number is None or not low <= number <= high or number % step:
            return False
        if self.state.running:
            return False
        self.perplexity = number
        return True

    def set_cluster_count(self, value: object) -> bool:
        number = coerce_int(value)
        low, high = CLUSTER_RANGE
        if number is None or not low <= number <= high or self.state.running:
            return False
        self.cluster_count = number
        self.regenerate()
        return True

    def set_dimensions(self, value: object) -> bool:
        number = coerce_int(value)
        low, high = DIMENSION_RANGE
        if number is None or not low <= number <= high or self.state.running:
            return False
        self.dimensions = number
        self.regenerate()
        return True

    # ---------------------------------------------------------------- geometry
    def _radius(self) -> float:
        width, height = self.bounds
        return min(width, height) * 0.4

    def target(self, cluster: int, spread: Optional[float] = None) -> Tuple[float, float]:
        """Screen position the points of ``cluster`` converge to."""

        width, height = self.bounds
        if spread is None:
            spread = 0.5 + self.perplexity / 100.0
        angle = (cluster / self.cluster_count) * math.pi * 2.0
        reach = self._radius() * spread * 0.7
        return width / 2.0 + math.cos(angle) * reach, height / 2.0 + math.sin(angle) * reach

    def _disc_noise(self, magnitude: float) -> Tuple[float, float]:
        # sqrt keeps the density uniform over the disc
        r = magnitude * math.sqrt(self.rng.random())
        theta = self.rng.random() * math.pi * 2.0
        return r * math.cos(theta), r * math.sin(theta)

    def _labelled(self, point: Point) -> bool:
        return 0 <= point.cluster < self.cluster_count

    # --------------------------------------------------------------- iteration
    def _init_projection(self) -> None:
        width, height = self.bounds
        projection = []
        for point in self.points:
            x = (self.rng.random() * 0.8 + 0.1) * width
            y = (self.rng.random() * 0.8 + 0.1) * height
            projection.append(Point(x, y, point.cluster, point.features, Trail(PROJECTION_TRAIL_LIMIT), point.selected))
        self.projection = projection

    def _iterate(self) -> bool:
        state = self.state
        if state.iteration == 0 or self.projection is None:
            self._init_projection()
            return False

        radius = self._radius()
        spread = 0.5 + self.perplexity / 100.0
        progress = min(state.iteration / (state.max_iterations * 0.7), 1.0)
        magnitude = (1.0 - progress) * radius * (0.1 + self.perplexity / 200.0)
        record = self.show_trails and state.iteration % TRAIL_EVERY == 0

        for point in self.projection:
            if not self._labelled(point):
                continue
            tx, ty = self.target(point.cluster, spread)
            nx, ny = self._disc_noise(magnitude)
            if record:
                point.trail.append(point.x, point.y)
            point.x += (tx + nx - point.x) * STEP_FRACTION
            point.y += (ty + ny - point.y) * STEP_FRACTION
        return False

    def show_final(self) -> bool:
        """Jump straight to the converged layout."""

        if not self.has_bounds or not self.points:
            return False
        if self.projection is None:
            self._init_projection()
        noise = self._radius() * FINAL_NOISE
        for point in self.projection:
            point.trail.clear()
            if not self._labelled(point):
                continue
            tx, ty = self.target(point.cluster)
            nx, ny = self._disc_noise(noise)
            point.x = tx + nx
            point.y = ty + ny
        self.state.iteration = self.state.max_iterations
        self.state.finish()
        self._debug("final layout shown")
        return True

    # ----------------------------------------------------------------- colours
    def color_reference(self, point: Point):
        if not self.has_bounds:
            return None, None
        width, height = self.bounds
        return (width / 2.0, height / 2.0), math.hypot(width, height) / 2.0
