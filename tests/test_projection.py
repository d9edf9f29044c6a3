"""Tests for the scripted t-SNE-like projection engine."""
import math
import random

import pytest

from clusterlab.engines.projection import FINAL_NOISE, ProjectionEngine


WIDTH, HEIGHT = 800, 600


@pytest.fixture
def engine():
    eng = ProjectionEngine(random.Random(11))
    eng.resize(WIDTH, HEIGHT)
    return eng


def _positions(points):
    return [(p.x, p.y) for p in points]


# ---------------------------------------------------------------------------
# Dataset and first iteration
# ---------------------------------------------------------------------------

class TestInitialisation:

    def test_default_dataset(self, engine):
        assert len(engine.points) == 90
        assert all(len(p.features) == 10 for p in engine.points)
        assert not engine.has_projection
        assert engine.active_points() is engine.points

    def test_first_step_builds_projection(self, engine):
        engine.points[4].selected = True
        engine.points[0].trail.append(1, 1)
        assert engine.step()
        assert engine.has_projection
        assert engine.state.iteration == 1
        projection = engine.active_points()
        assert len(projection) == len(engine.points)
        for raw, proj in zip(engine.points, projection):
            assert 0.1 * WIDTH <= proj.x <= 0.9 * WIDTH
            assert 0.1 * HEIGHT <= proj.y <= 0.9 * HEIGHT
            assert proj.cluster == raw.cluster
            assert proj.features == raw.features
            assert len(proj.trail) == 0
        assert projection[4].selected

    def test_raw_layout_untouched(self, engine):
        before = _positions(engine.points)
        for _ in range(4):
            engine.step()
        assert _positions(engine.points) == before

    def test_needs_points(self):
        eng = ProjectionEngine(random.Random(0))
        assert not eng.start()
        assert not eng.step()


# ---------------------------------------------------------------------------
# Convergence
# ---------------------------------------------------------------------------

class TestConvergence:

    def test_show_final_lands_near_targets(self, engine):
        assert engine.show_final()
        radius = min(WIDTH, HEIGHT) * 0.4
        for point in engine.active_points():
            tx, ty = engine.target(point.cluster)
            assert math.hypot(point.x - tx, point.y - ty) <= radius * FINAL_NOISE + 1e-9
            assert len(point.trail) == 0
        assert engine.state.iteration == engine.state.max_iterations
        assert engine.state.complete
        assert not engine.state.running

    def test_show_final_requires_bounds(self):
        eng = ProjectionEngine(random.Random(0))
        assert not eng.show_final()

    def test_points_move_toward_targets(self, engine):
        def mean_gap():
            gaps = []
            for point in engine.active_points():
                tx, ty = engine.target(point.cluster)
                gaps.append(math.hypot(point.x - tx, point.y - ty))
            return sum(gaps) / len(gaps)

        engine.step()
        start = mean_gap()
        for _ in range(60):
            engine.step()
        assert mean_gap() < start / 2

    def test_completes_at_cap(self):
        eng = ProjectionEngine(random.Random(2), max_iterations=5)
        eng.resize(WIDTH, HEIGHT)
        for _ in range(5):
            assert eng.step()
        assert eng.state.complete
        assert not eng.step()

    def test_unlabelled_points_stay_put(self, engine):
        engine.add_point(50, 60)
        engine.step()
        added = engine.active_points()[-1]
        before = (added.x, added.y)
        for _ in range(5):
            engine.step()
        assert (added.x, added.y) == before

    def test_trails_every_fifth_iteration(self, engine):
        engine.set_show_trails(True)
        for _ in range(11):
            engine.step()
        assert engine.state.iteration == 11
        assert len(engine.active_points()[0].trail) == 2

    def test_no_trails_by_default(self, engine):
        for _ in range(11):
            engine.step()
        assert all(len(p.trail) == 0 for p in engine.active_points())


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

class TestConfiguration:

    @pytest.mark.parametrize("value,accepted", [(5, True), (35, True), (50, True), (12, False), (55, False), (0, False)])
    def test_perplexity_steps(self, engine, value, accepted):
        assert engine.set_perplexity(value) is accepted

    def test_cluster_count_regenerates(self, engine):
        generation = engine.generation
        assert engine.set_cluster_count(5)
        assert engine.generation == generation + 1
        assert len(engine.points) == 150
        assert all(0 <= p.cluster < 5 for p in engine.points)

    @pytest.mark.parametrize("preset", ["random", "mnist", "gaussian", "hierarchical"])
    def test_labels_below_cluster_count(self, engine, preset):
        engine.set_cluster_count(7)
        engine.select_dataset(preset)
        assert all(0 <= p.cluster < 7 for p in engine.points)

    def test_dimensions(self, engine):
        assert not engine.set_dimensions(2)
        assert not engine.set_dimensions(51)
        assert engine.set_dimensions(4)
        assert all(len(p.features) == 4 for p in engine.points)

    def test_refused_while_running(self, engine):
        engine.start()
        assert not engine.set_perplexity(10)
        assert not engine.set_cluster_count(4)
        assert not engine.set_dimensions(20)
        assert not engine.add_point(1, 1)

    def test_restart_drops_projection(self, engine):
        engine.show_final()
        generation = engine.generation
        assert engine.toggle_running()
        assert engine.state.running
        assert engine.state.iteration == 0
        assert not engine.has_projection
        assert engine.generation == generation + 1

    def test_add_point_reaches_both_layouts(self, engine):
        engine.step()
        engine.add_point(10, 20)
        assert (engine.points[-1].x, engine.points[-1].y) == (10.0, 20.0)
        assert (engine.active_points()[-1].x, engine.active_points()[-1].y) == (10.0, 20.0)
        assert len(engine.points) == len(engine.active_points())

    def test_color_reference_is_canvas_centre(self, engine):
        reference, scale = engine.color_reference(engine.points[0])
        assert reference == (WIDTH / 2.0, HEIGHT / 2.0)
        assert scale == pytest.approx(500.0)
