"""Tests for frame throttling and the Qt animation clock."""
import random

import pytest

pytest.importorskip("PyQt5")

from clusterlab.clock import AnimationClock, FrameThrottle  # noqa: E402
from clusterlab.session import create_visualization  # noqa: E402


class TestFrameThrottle:

    def test_first_frame_always_ready(self):
        assert FrameThrottle(1).ready(0.0)

    def test_waits_strictly_longer_than_interval(self):
        throttle = FrameThrottle(1)
        throttle.ready(0.0)
        assert not throttle.ready(500.0)
        assert not throttle.ready(1000.0)
        assert throttle.ready(1000.5)

    def test_speed_changes_interval(self):
        throttle = FrameThrottle(1)
        throttle.set_speed(10)
        assert throttle.interval_ms == 100.0
        throttle.ready(0.0)
        assert throttle.ready(101.0)

    def test_speed_floor(self):
        assert FrameThrottle(0).speed == 1

    def test_reset(self):
        throttle = FrameThrottle(1)
        throttle.ready(0.0)
        throttle.reset()
        assert throttle.ready(1.0)


@pytest.fixture
def session():
    vis = create_visualization("kmeans", random.Random(2))
    vis.resize(400, 300)
    return vis


class TestAnimationClock:

    def test_tick_idle_session(self, qapp, session):
        clock = AnimationClock(session)
        assert not clock.tick(0.0)
        assert session.engine.state.iteration == 0

    def test_tick_advances_at_speed(self, qapp, session):
        clock = AnimationClock(session)
        session.set_speed(5)
        session.start()
        clock.sync(session.snapshot())
        assert clock.active
        assert clock.tick(0.0)
        assert not clock.tick(150.0)
        assert clock.tick(201.0)
        assert session.engine.state.iteration == 2
        clock.cancel()

    def test_sync_follows_running_flag(self, qapp, session):
        clock = AnimationClock(session)
        session.start()
        clock.sync(session.snapshot())
        assert clock.active
        session.pause()
        clock.sync(session.snapshot())
        assert not clock.active

    def test_tick_cancels_when_stopped(self, qapp, session):
        clock = AnimationClock(session)
        session.start()
        clock.sync(session.snapshot())
        session.pause()
        assert not clock.tick(5000.0)
        assert not clock.active
