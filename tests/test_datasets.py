"""Tests for the dataset presets."""
import random

import pytest

from clusterlab.datasets import (
    CLUSTERING_PRESETS,
    POINTS_PER_CLUSTER,
    PROJECTION_PRESETS,
    gaussian,
    generate_clustering,
    generate_projection,
)
from clusterlab.store import UNASSIGNED


@pytest.fixture
def rng():
    return random.Random(42)


class TestClustering:

    @pytest.mark.parametrize("name,count", [("random", 100), ("clusters", 90), ("circle", 90), ("spiral", 50)])
    def test_counts(self, rng, name, count):
        assert len(generate_clustering(name, 800, 600, rng)) == count

    @pytest.mark.parametrize("name", sorted(CLUSTERING_PRESETS))
    def test_points_start_unlabelled(self, rng, name):
        points = generate_clustering(name, 800, 600, rng)
        assert all(p.cluster == UNASSIGNED and p.features is None for p in points)

    def test_unknown_name_falls_back(self, rng):
        assert len(generate_clustering("nope", 800, 600, rng)) == 100

    def test_uniform_stays_on_canvas(self, rng):
        for p in generate_clustering("random", 800, 600, rng):
            assert 0 <= p.x < 800 and 0 <= p.y < 600


class TestProjection:

    @pytest.mark.parametrize("name", sorted(PROJECTION_PRESETS))
    def test_labels_and_features(self, rng, name):
        points = generate_projection(name, 800, 600, rng, clusters=4, dimensions=6)
        assert points
        assert all(0 <= p.cluster < 4 for p in points)
        assert all(len(p.features) == 6 for p in points)

    def test_random_clusters_count(self, rng):
        points = generate_projection("random", 800, 600, rng, clusters=5, dimensions=3)
        assert len(points) == 5 * POINTS_PER_CLUSTER

    def test_digits_cap_at_nine_groups(self, rng):
        points = generate_projection("mnist", 800, 600, rng, clusters=10, dimensions=3)
        assert len(points) == 9 * POINTS_PER_CLUSTER
        assert max(p.cluster for p in points) == 8

    def test_hierarchy_uses_every_label(self, rng):
        points = generate_projection("hierarchical", 800, 600, rng, clusters=7, dimensions=3)
        assert {p.cluster for p in points} == set(range(7))

    def test_same_seed_same_layout(self):
        a = generate_projection("gaussian", 800, 600, random.Random(1), clusters=3, dimensions=4)
        b = generate_projection("gaussian", 800, 600, random.Random(1), clusters=3, dimensions=4)
        assert [(p.x, p.y, p.features) for p in a] == [(p.x, p.y, p.features) for p in b]


def test_gaussian_is_finite(rng):
    samples = [gaussian(rng) for _ in range(500)]
    assert all(abs(s) < 10 for s in samples)
    assert abs(sum(samples) / len(samples)) < 0.3
