"""K-means-like clustering engine.

Each iteration runs one assignment pass followed by one centroid update.  The
run converges when the iteration cap is reached or when an assignment pass
changes no label.
"""

from __future__ import annotations

import math
import random
from typing import List, Optional, Sequence, Tuple

from ..datasets import CLUSTERING_PRESETS, generate_clustering
from ..store import CLUSTER_TRAIL_LIMIT, UNASSIGNED, Centroid, Point, Trail
from .base import StepEngine, coerce_int

__all__ = ["KMeansEngine", "K_RANGE", "DISTANCE_SCALE"]

K_RANGE = (1, 10)
# Distance colouring saturates at this fraction of the canvas diagonal.
DISTANCE_SCALE = 0.3


class KMeansEngine(StepEngine):
    kind = "kmeans"
    PRESETS = CLUSTERING_PRESETS

    def __init__(self, rng: Optional[random.Random] = None, *, k: int = 3, max_iterations: int = 20) -> None:
        super().__init__(rng, max_iterations=max_iterations)
        self.k = k
        self._centroids: List[Centroid] = []

    @property
    def centroids(self) -> List[Centroid]:
        return self._centroids

    def can_step(self) -> bool:
        return bool(self._centroids)

    # ---------------------------------------------------------------- datasets
    def _generate(self) -> List[Point]:
        width, height = self.bounds
        return generate_clustering(self.preset, width, height, self.rng)

    def _on_points_replaced(self) -> None:
        self.init_centroids()

    def load_points(self, points: List[Point], centroids: Optional[Sequence[Tuple[float, float]]] = None) -> None:
        """Replace the points; ``centroids`` pins the starting positions."""

        super().load_points(points)
        if centroids is not None:
            self._centroids = [Centroid(float(x), float(y), Trail(CLUSTER_TRAIL_LIMIT)) for x, y in centroids]
            self.k = len(self._centroids)

    def init_centroids(self) -> bool:
        """Scatter ``k`` centroids over the canvas and forget every label."""

        self._clear_labels()
        self.state.rewind()
        if not self.has_bounds:
            self._centroids = []
            return False
        width, height = self.bounds
        self._centroids = [
            Centroid(self.rng.random() * width, self.rng.random() * height, Trail(CLUSTER_TRAIL_LIMIT))
            for _ in range(self.k)
        ]
        return True

    def _clear_labels(self) -> None:
        for point in self.points:
            point.cluster = UNASSIGNED
            point.trail.clear()

    def restart(self) -> bool:
        return self.init_centroids()

    def set_k(self, value: object) -> bool:
        number = coerce_int(value)
        low, high = K_RANGE
        if number is None or not low <= number <= high or self.state.running:
            return False
        self.k = number
        self.init_centroids()
        return True

    def add_point(self, x: float, y: float) -> bool:
        if self.state.running:
            return False
        self.points.append(Point(float(x), float(y), UNASSIGNED, None, Trail(CLUSTER_TRAIL_LIMIT)))
        return True

    # --------------------------------------------------------------- iteration
    def assign(self) -> bool:
        """Label every point with its nearest centroid; ``True`` when any label moved."""

        changed = False
        centroids = self._centroids
        for point in self.points:
            best = UNASSIGNED
            best_dist = math.inf
            for index, centroid in enumerate(centroids):
                dist = math.hypot(point.x - centroid.x, point.y - centroid.y)
                if dist < best_dist:
                    best_dist = dist
                    best = index
            if best != point.cluster:
                point.trail.append(point.x, point.y)
                point.cluster = best
                changed = True
        return changed

    def update(self) -> None:
        """Move each centroid to the mean of its points; empty clusters stay put."""

        count = len(self._centroids)
        sums = [[0.0, 0.0, 0] for _ in range(count)]
        for point in self.points:
            if 0 <= point.cluster < count:
                acc = sums[point.cluster]
                acc[0] += point.x
                acc[1] += point.y
                acc[2] += 1
        for centroid, (sx, sy, n) in zip(self._centroids, sums):
            if not n:
                continue
            centroid.trail.append(centroid.x, centroid.y)
            centroid.x = sx / n
            centroid.y = sy / n

    def _iterate(self) -> bool:
        changed = self.assign()
        self.update()
        return not changed

    # ----------------------------------------------------------------- colours
    def color_reference(self, point: Point):
        if not 0 <= point.cluster < len(self._centroids) or not self.has_bounds:
            return None, None
        width, height = self.bounds
        centroid = self._centroids[point.cluster]
        return (centroid.x, centroid.y), math.hypot(width, height) * DISTANCE_SCALE
