"""Tests for the session command surface and its snapshots."""
import random

import pytest

from clusterlab.engines.projection import ProjectionEngine
from clusterlab.palette import CLUSTER_COLORS, UNASSIGNED_COLOR, ColorMode, cluster_color
from clusterlab.session import Snapshot, create_visualization


@pytest.fixture
def session():
    vis = create_visualization("kmeans", random.Random(5))
    vis.resize(800, 600)
    return vis


@pytest.fixture
def tsne():
    vis = create_visualization("tsne", random.Random(8))
    vis.resize(800, 600)
    return vis


@pytest.fixture
def received(session):
    snapshots = []
    session.subscribe(snapshots.append)
    return snapshots


# ---------------------------------------------------------------------------
# Snapshots
# ---------------------------------------------------------------------------

class TestSnapshot:

    def test_initial_snapshot(self, session):
        snap = session.snapshot()
        assert isinstance(snap, Snapshot)
        assert snap.kind == "kmeans"
        assert len(snap.points) == 100
        assert snap.point_colors == (UNASSIGNED_COLOR,) * 100
        assert snap.centroid_colors == CLUSTER_COLORS[:3]
        assert (snap.iteration, snap.max_iterations) == (0, 20)
        assert not snap.running and not snap.complete
        assert snap.bounds == (800.0, 600.0)
        assert snap.dataset == "random"
        assert snap.speed == 1
        assert snap.interval_ms == 1000.0
        assert snap.color_mode is ColorMode.CLUSTER

    def test_colors_follow_labels(self, session):
        session.step()
        snap = session.snapshot()
        assert snap.point_colors == tuple(cluster_color(p.cluster) for p in snap.points)

    def test_snapshot_is_detached(self, session):
        snap = session.snapshot()
        snap.points[0].x = -999.0
        snap.transform.zoom = 4.0
        assert session.engine.points[0].x != -999.0
        assert session.transform.zoom == 1.0

    def test_projection_snapshot(self, tsne):
        snap = tsne.snapshot()
        assert snap.centroids is None
        assert snap.centroid_colors == ()
        assert not snap.has_projection
        tsne.step()
        assert tsne.snapshot().has_projection

    def test_distance_colors(self, tsne):
        assert tsne.set_color_mode("distance")
        colors = tsne.snapshot().point_colors
        assert all(c.startswith("#") and len(c) == 7 for c in colors)


# ---------------------------------------------------------------------------
# Listeners
# ---------------------------------------------------------------------------

class TestListeners:

    def test_applied_command_notifies(self, session, received):
        assert session.step()
        assert len(received) == 1
        assert received[0].iteration == 1

    def test_refused_command_is_silent(self, session, received):
        assert not session.pause()
        assert received == []

    def test_unsubscribe(self, session, received):
        session.unsubscribe(received.append)
        session.step()
        assert received == []

    def test_subscribe_twice_once(self, session):
        calls = []
        session.subscribe(calls.append)
        session.subscribe(calls.append)
        session.step()
        assert len(calls) == 1


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

class TestCommands:

    def test_create_unknown_kind(self):
        with pytest.raises(ValueError):
            create_visualization("pca")

    def test_create_projection(self):
        assert isinstance(create_visualization("TSNE").engine, ProjectionEngine)

    def test_speed(self, session):
        assert session.set_speed(4)
        assert session.interval_ms == 250.0
        assert not session.set_speed(4)
        assert not session.set_speed(0)
        assert not session.set_speed(11)

    def test_resize_same_bounds(self, session):
        assert not session.resize(800.0, 600.0)

    def test_dataset_refused_while_running(self, session):
        session.start()
        assert not session.select_dataset("spiral")
        assert not session.regenerate()
        assert session.engine.preset == "random"

    def test_reset_clears_selection_and_view(self, session):
        point = session.engine.points[0]
        session.click(point.x, point.y)
        assert session.snapshot().selected == 0
        session.zoom_in()
        session.toggle_pan_tool()
        assert session.reset()
        snap = session.snapshot()
        assert snap.selected is None
        assert snap.transform.zoom == 1.0
        assert snap.transform.pan_tool
        assert not any(p.selected for p in snap.points)

    def test_zoom_reports_change(self, session):
        for _ in range(20):
            session.zoom_in()
        assert session.transform.zoom == 5.0
        assert not session.zoom_in()
        assert session.zoom_out()

    def test_show_final_only_for_projection(self, session, tsne):
        assert not session.show_final()
        assert tsne.show_final()
        assert tsne.snapshot().complete

    def test_trails(self, session):
        assert session.toggle_trails()
        assert session.snapshot().show_trails
        assert not session.set_show_trails("maybe")
        assert session.set_show_trails("off")

    def test_color_mode(self, session):
        assert session.set_color_mode("GRADIENT")
        assert not session.set_color_mode("gradient")
        assert not session.set_color_mode("rainbow")

    def test_set_k_routes_to_cluster_count(self, tsne):
        assert tsne.set_k(4)
        assert tsne.engine.cluster_count == 4

    def test_run_to_completion(self, session):
        session.start()
        while session.advance():
            pass
        snap = session.snapshot()
        assert snap.complete and not snap.running


# ---------------------------------------------------------------------------
# Form payloads
# ---------------------------------------------------------------------------

class TestSetParams:

    def test_unchanged_values_are_skipped(self, session):
        generation = session.engine.generation
        payload = {
            "simulation": {"dataset": "random", "k": 3, "max_iterations": 20, "speed": 1},
            "view": {"color_mode": "cluster", "show_trails": False},
        }
        assert not session.set_params(payload)
        assert session.engine.generation == generation

    def test_changed_values_apply(self, session):
        payload = {
            "simulation": {"dataset": "clusters", "k": 4, "max_iterations": 30, "speed": 3},
            "view": {"color_mode": "gradient", "show_trails": True},
        }
        assert session.set_params(payload)
        snap = session.snapshot()
        assert snap.dataset == "clusters"
        assert len(snap.points) == 90
        assert len(snap.centroids) == 4
        assert snap.max_iterations == 30
        assert snap.speed == 3
        assert snap.color_mode is ColorMode.GRADIENT
        assert snap.show_trails

    def test_invalid_values_ignored(self, session):
        payload = {"simulation": {"k": "lots", "speed": 99}, "view": {"color_mode": "rainbow"}, "extra": 1}
        assert not session.set_params(payload)
        assert session.engine.k == 3

    def test_projection_keys(self, tsne):
        generation = tsne.engine.generation
        assert tsne.set_params({"simulation": {"clusters": 3, "perplexity": 30, "k": 7}}) is False
        assert tsne.engine.generation == generation
        assert tsne.set_params({"simulation": {"perplexity": 45, "dimensions": 5}})
        assert tsne.engine.perplexity == 45
        assert all(len(p.features) == 5 for p in tsne.engine.points)

    def test_repeated_payload_is_idempotent(self, session):
        payload = {"simulation": {"dataset": "clusters", "k": 4}, "view": {"show_trails": True}}
        assert session.set_params(payload)
        generation = session.engine.generation
        assert session.set_params(payload) is False
        assert session.engine.generation == generation

    def test_foreign_dataset_resolves_to_fallback(self, tsne):
        payload = {"simulation": {"dataset": "spiral", "max_iterations": 30, "speed": 1}}
        tsne.set_params(payload)
        tsne.step()
        generation = tsne.engine.generation
        assert tsne.engine.has_projection
        assert tsne.set_params(payload) is False
        assert tsne.engine.generation == generation
        assert tsne.engine.has_projection
        assert tsne.snapshot().dataset == "random"

    def test_settings_before_bounds(self):
        vis = create_visualization("tsne", random.Random(1), {"simulation": {"clusters": 4}})
        assert vis.engine.points == []
        vis.resize(640, 480)
        assert len(vis.engine.points) == 120
