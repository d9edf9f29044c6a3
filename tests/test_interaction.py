"""Tests for pointer handling: selection, drags, panning and hover."""
import random

import pytest

from clusterlab.engines.kmeans import KMeansEngine
from clusterlab.geometry import ViewTransform
from clusterlab.interaction import InteractionController
from clusterlab.store import Point


@pytest.fixture
def engine():
    eng = KMeansEngine(random.Random(0))
    eng.load_points([Point(100.0, 100.0), Point(200.0, 200.0)], centroids=[(0.0, 0.0)])
    return eng


@pytest.fixture
def transform():
    return ViewTransform()


@pytest.fixture
def ctrl(engine, transform):
    return InteractionController(engine, transform)


# ---------------------------------------------------------------------------
# Clicks
# ---------------------------------------------------------------------------

class TestClick:

    def test_click_selects(self, ctrl, engine):
        assert ctrl.click(101, 99)
        assert ctrl.state.selected == 0
        assert engine.points[0].selected

    def test_second_click_deselects(self, ctrl, engine):
        ctrl.click(100, 100)
        assert ctrl.click(100, 100)
        assert ctrl.state.selected is None
        assert not engine.points[0].selected

    def test_selection_is_exclusive(self, ctrl, engine):
        ctrl.click(100, 100)
        ctrl.click(200, 200)
        assert ctrl.state.selected == 1
        assert [p.selected for p in engine.points] == [False, True]

    def test_running_suppresses_selection(self, ctrl, engine):
        engine.start()
        assert not ctrl.click(100, 100)
        assert ctrl.state.selected is None

    def test_miss_adds_point(self, ctrl, engine):
        assert ctrl.click(400, 300)
        assert len(engine.points) == 3
        assert (engine.points[-1].x, engine.points[-1].y) == (400.0, 300.0)

    def test_miss_while_running_adds_nothing(self, ctrl, engine):
        engine.start()
        assert not ctrl.click(400, 300)
        assert len(engine.points) == 2

    @pytest.mark.parametrize("tool", ["toggle_pan_tool", "toggle_zoom_tool"])
    def test_tools_suppress_adding(self, ctrl, engine, transform, tool):
        getattr(transform, tool)()
        assert not ctrl.click(400, 300)
        assert len(engine.points) == 2

    def test_click_maps_through_zoom(self, ctrl, transform):
        transform.zoom = 2.0
        assert ctrl.click(200, 200)
        assert ctrl.state.selected == 0


# ---------------------------------------------------------------------------
# Drags
# ---------------------------------------------------------------------------

class TestDrag:

    def test_drag_selected_point(self, ctrl, engine):
        ctrl.click(100, 100)
        assert ctrl.pointer_down(100, 100)
        assert ctrl.pointer_move(150, 120)
        moved = engine.points[0]
        assert (moved.x, moved.y) == (150.0, 120.0)
        assert moved.trail[-1] == (150.0, 120.0)
        assert ctrl.pointer_up()
        assert not ctrl.state.point_drag

    def test_drag_trail_is_unbounded(self, ctrl, engine):
        ctrl.click(100, 100)
        ctrl.pointer_down(100, 100)
        for i in range(150):
            ctrl.pointer_move(100 + i * 0.01, 100)
        assert len(engine.points[0].trail) == 150

    def test_unselected_point_does_not_drag(self, ctrl):
        assert not ctrl.pointer_down(100, 100)
        assert not ctrl.state.point_drag

    def test_pan_drag(self, ctrl, transform):
        transform.toggle_pan_tool()
        assert ctrl.pointer_down(10, 10)
        assert ctrl.pointer_move(30, 25)
        assert (transform.pan_x, transform.pan_y) == (20.0, 15.0)
        ctrl.pointer_move(35, 25)
        assert transform.pan_x == 25.0
        ctrl.pointer_up()
        ctrl.pointer_move(60, 60)
        assert transform.pan_x == 25.0

    def test_zoom_tool_records_data_anchor(self, ctrl, transform):
        transform.zoom = 2.0
        transform.toggle_zoom_tool()
        assert ctrl.pointer_down(40, 40)
        assert ctrl.state.anchor == (20.0, 20.0)
        assert transform.zoom == 2.0


# ---------------------------------------------------------------------------
# Hover and invalidation
# ---------------------------------------------------------------------------

class TestHover:

    def test_hover_tracks_pointer(self, ctrl):
        assert ctrl.pointer_move(102, 100)
        assert ctrl.state.hovered == 0
        assert not ctrl.pointer_move(103, 100)
        assert ctrl.pointer_move(300, 300)
        assert ctrl.state.hovered is None

    def test_leave_clears_hover_and_drag(self, ctrl):
        ctrl.click(100, 100)
        ctrl.pointer_down(100, 100)
        ctrl.pointer_move(100, 100)
        assert ctrl.pointer_leave()
        assert ctrl.state.hovered is None
        assert not ctrl.state.point_drag

    def test_replaced_collection_drops_selection(self, ctrl, engine):
        ctrl.click(100, 100)
        engine.load_points([Point(100.0, 100.0, selected=True)], centroids=[(0.0, 0.0)])
        assert ctrl.sync()
        assert ctrl.state.selected is None
        assert not engine.points[0].selected

    def test_sync_without_changes(self, ctrl):
        ctrl.click(100, 100)
        assert not ctrl.sync()
        assert ctrl.state.selected == 0

    def test_clear_selection(self, ctrl, engine):
        ctrl.click(100, 100)
        assert ctrl.clear_selection()
        assert not any(p.selected for p in engine.points)
        assert not ctrl.clear_selection()
