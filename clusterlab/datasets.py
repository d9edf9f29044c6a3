from __future__ import annotations

import math
import random
from typing import Callable, Dict, List, Sequence, Tuple

from .store import CLUSTER_TRAIL_LIMIT, PROJECTION_TRAIL_LIMIT, UNASSIGNED, Point, Trail

__all__ = [
    "CLUSTERING_PRESETS",
    "PROJECTION_PRESETS",
    "POINTS_PER_CLUSTER",
    "generate_clustering",
    "generate_projection",
    "gaussian",
]

ClusteringGenerator = Callable[[float, float, random.Random], List[Point]]
ProjectionGenerator = Callable[[float, float, random.Random, int, int], List[Point]]

POINTS_PER_CLUSTER = 30


def gaussian(rng: random.Random) -> float:
    """Standard normal sample (Box-Muller, rejecting exact zeros)."""

    u = 0.0
    v = 0.0
    while u == 0.0:
        u = rng.random()
    while v == 0.0:
        v = rng.random()
    return math.sqrt(-2.0 * math.log(u)) * math.cos(2.0 * math.pi * v)


def _jitter(rng: random.Random, span: float) -> float:
    """Uniform offset in ``[-span / 2, span / 2)``."""

    return (rng.random() - 0.5) * span


def _raw_point(x: float, y: float) -> Point:
    return Point(x, y, UNASSIGNED, None, Trail(CLUSTER_TRAIL_LIMIT))


def _labelled_point(x: float, y: float, cluster: int, features: Sequence[float]) -> Point:
    return Point(x, y, cluster, tuple(features), Trail(PROJECTION_TRAIL_LIMIT))


# ---------------------------------------------------------------------------
# Clustering presets: unlabelled 2D points


def _gen_uniform(width: float, height: float, rng: random.Random) -> List[Point]:
    return [_raw_point(rng.random() * width, rng.random() * height) for _ in range(100)]


def _gen_blobs(width: float, height: float, rng: random.Random) -> List[Point]:
    centers = [
        (width * 0.25, height * 0.25),
        (width * 0.75, height * 0.25),
        (width * 0.5, height * 0.75),
    ]
    out: List[Point] = []
    for cx, cy in centers:
        for _ in range(POINTS_PER_CLUSTER):
            out.append(_raw_point(cx + _jitter(rng, width * 0.2), cy + _jitter(rng, height * 0.2)))
    return out


def _gen_rings(width: float, height: float, rng: random.Random) -> List[Point]:
    cx = width / 2.0
    cy = height / 2.0
    step = (min(width, height) * 0.3) / 3.0
    out: List[Point] = []
    for ring in range(1, 4):
        radius = ring * step
        count = ring * 15
        for i in range(count):
            angle = (i / count) * math.pi * 2.0
            x = cx + math.cos(angle) * radius + _jitter(rng, step * 0.5)
            y = cy + math.sin(angle) * radius + _jitter(rng, step * 0.5)
            out.append(_raw_point(x, y))
    return out


def _gen_spiral(width: float, height: float, rng: random.Random) -> List[Point]:
    cx = width / 2.0
    cy = height / 2.0
    turns = 2
    count = 50
    out: List[Point] = []
    for i in range(count):
        t = (i / count) * turns * math.pi * 2.0
        radius = (i / count) * min(width, height) * 0.4
        x = cx + math.cos(t) * radius + _jitter(rng, 10.0)
        y = cy + math.sin(t) * radius + _jitter(rng, 10.0)
        out.append(_raw_point(x, y))
    return out


_CLUSTERING_GENERATORS: Dict[str, ClusteringGenerator] = {
    "random": _gen_uniform,
    "clusters": _gen_blobs,
    "circle": _gen_rings,
    "spiral": _gen_spiral,
}

CLUSTERING_PRESETS: Dict[str, str] = {
    "random": "Points répartis au hasard sur le canevas",
    "clusters": "Trois groupes de points bien visibles",
    "circle": "Cercles concentriques",
    "spiral": "Spirale à deux tours",
}


def generate_clustering(name: str, width: float, height: float, rng: random.Random) -> List[Point]:
    """Build a clustering dataset; unknown names fall back to ``random``."""

    generator = _CLUSTERING_GENERATORS.get(name, _gen_uniform)
    return generator(float(width), float(height), rng)


# ---------------------------------------------------------------------------
# Projection presets: labelled points with a feature vector


def _inset(rng: random.Random, extent: float) -> float:
    return (rng.random() * 0.8 + 0.1) * extent


def _gen_random_clusters(
    width: float, height: float, rng: random.Random, clusters: int, dimensions: int
) -> List[Point]:
    out: List[Point] = []
    for c in range(clusters):
        center = [(rng.random() * 2.0 - 1.0) * 3.0 for _ in range(dimensions)]
        for _ in range(POINTS_PER_CLUSTER):
            features = [value + (rng.random() * 0.5 - 0.25) for value in center]
            out.append(_labelled_point(_inset(rng, width), _inset(rng, height), c, features))
    return out


_DIGIT_CENTERS: Tuple[Tuple[float, float], ...] = (
    (0.1, 0.1), (0.5, 0.1), (0.9, 0.1),
    (0.1, 0.5), (0.5, 0.5), (0.9, 0.5),
    (0.1, 0.9), (0.5, 0.9), (0.9, 0.9),
)


def _gen_digits(width: float, height: float, rng: random.Random, clusters: int, dimensions: int) -> List[Point]:
    out: List[Point] = []
    for c in range(min(len(_DIGIT_CENTERS), clusters)):
        template = [rng.random() * 2.0 - 1.0 for _ in range(dimensions)]
        gx, gy = _DIGIT_CENTERS[c]
        for _ in range(POINTS_PER_CLUSTER):
            features = [value + (rng.random() * 0.3 - 0.15) for value in template]
            x = (gx + (rng.random() * 0.1 - 0.05)) * width
            y = (gy + (rng.random() * 0.1 - 0.05)) * height
            out.append(_labelled_point(x, y, c, features))
    return out


def _gen_mixture(width: float, height: float, rng: random.Random, clusters: int, dimensions: int) -> List[Point]:
    centers = [[rng.random() * 2.0 - 1.0 for _ in range(dimensions)] for _ in range(clusters)]
    out: List[Point] = []
    for c, center in enumerate(centers):
        for _ in range(POINTS_PER_CLUSTER):
            features = [value + gaussian(rng) * (0.2 + rng.random() * 0.3) for value in center]
            out.append(_labelled_point(rng.random() * width, rng.random() * height, c, features))
    return out


def _gen_hierarchy(width: float, height: float, rng: random.Random, clusters: int, dimensions: int) -> List[Point]:
    main_count = min(3, clusters)
    subs_per_main = math.ceil(clusters / main_count)
    per_sub = math.ceil(POINTS_PER_CLUSTER / subs_per_main)
    out: List[Point] = []
    label = 0
    for m in range(main_count):
        main_center = [(rng.random() * 2.0 - 1.0) * 5.0 for _ in range(dimensions)]
        angle = (m / main_count) * math.pi * 2.0
        base_x = width / 2.0 + math.cos(angle) * width * 0.3
        base_y = height / 2.0 + math.sin(angle) * width * 0.3
        for _ in range(subs_per_main):
            if label >= clusters:
                break
            sub_center = [value + (rng.random() * 2.0 - 1.0) * 1.5 for value in main_center]
            for _ in range(per_sub):
                features = [value + (rng.random() * 0.5 - 0.25) for value in sub_center]
                x = base_x + (rng.random() * width * 0.15 - width * 0.075)
                y = base_y + (rng.random() * height * 0.15 - height * 0.075)
                out.append(_labelled_point(x, y, label, features))
            label += 1
    return out


_PROJECTION_GENERATORS: Dict[str, ProjectionGenerator] = {
    "random": _gen_random_clusters,
    "mnist": _gen_digits,
    "gaussian": _gen_mixture,
    "hierarchical": _gen_hierarchy,
}

PROJECTION_PRESETS: Dict[str, str] = {
    "random": "Groupes aléatoires en haute dimension",
    "mnist": "Chiffres simulés façon MNIST",
    "gaussian": "Mélange de gaussiennes qui se chevauchent",
    "hierarchical": "Groupes imbriqués sur deux niveaux",
}


def generate_projection(
    name: str,
    width: float,
    height: float,
    rng: random.Random,
    *,
    clusters: int,
    dimensions: int,
) -> List[Point]:
    """Build a labelled dataset; every label is below ``clusters``."""

    generator = _PROJECTION_GENERATORS.get(name, _gen_random_clusters)
    return generator(float(width), float(height), rng, int(clusters), int(dimensions))
