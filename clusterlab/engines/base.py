"""State machine shared by the clustering and projection step engines.

An engine owns the point collection and the :class:`SimulationState`.  The
animation clock only ever calls :meth:`StepEngine.advance`; the session routes
every user command to the other public methods.  All methods run to
completion synchronously, so a step and a drag can never interleave.
"""

from __future__ import annotations

import random
import sys
from typing import Dict, List, Optional, Tuple

from ..store import Point, SimulationState

__all__ = ["StepEngine", "coerce_int", "MAX_ITERATIONS_RANGE"]

MAX_ITERATIONS_RANGE = (1, 100)


def coerce_int(value: object) -> Optional[int]:
    """Return ``value`` as an ``int`` when it denotes a whole number, else ``None``."""

    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    try:
        number = float(str(value).strip())
    except (TypeError, ValueError):
        return None
    if not number.is_integer():
        return None
    return int(number)


class StepEngine:
    """Base class: lifecycle, bounds handling and configuration guards."""

    kind = "base"
    PRESETS: Dict[str, str] = {}
    DEFAULT_PRESET = "random"

    def __init__(self, rng: Optional[random.Random] = None, *, max_iterations: int = 20) -> None:
        self.rng = rng if rng is not None else random.Random()
        self.state = SimulationState(max_iterations=max_iterations)
        self.points: List[Point] = []
        self.preset = self.DEFAULT_PRESET
        self.show_trails = False
        # Bumped whenever the active collection is replaced wholesale, so
        # index-based selections held elsewhere can be invalidated.
        self.generation = 0
        self._width = 0.0
        self._height = 0.0
        self._pending_dataset = True

    # ------------------------------------------------------------------ helpers
    def _debug(self, message: str) -> None:
        print(f"[Clusterlab][DEBUG] {self.kind}: {message}", flush=True)

    def _warn(self, message: str) -> None:
        print(f"[Clusterlab][WARN] {self.kind}: {message}", file=sys.stderr, flush=True)

    @property
    def bounds(self) -> Optional[Tuple[float, float]]:
        if self._width <= 0.0 or self._height <= 0.0:
            return None
        return self._width, self._height

    @property
    def has_bounds(self) -> bool:
        return self.bounds is not None

    @property
    def centroids(self):
        return None

    @property
    def has_projection(self) -> bool:
        return False

    def active_points(self) -> List[Point]:
        """Collection currently drawn, picked and dragged."""

        return self.points

    def color_reference(self, point: Point) -> Tuple[Optional[Tuple[float, float]], Optional[float]]:
        """Reference position and saturation distance for distance colouring."""

        return None, None

    # ------------------------------------------------------------- subclass API
    def _generate(self) -> List[Point]:
        raise NotImplementedError

    def _on_points_replaced(self) -> None:
        """Hook run after a wholesale replacement of ``points``."""

    def _iterate(self) -> bool:
        """Run one iteration; return ``True`` to stop before the iteration cap."""

        raise NotImplementedError

    def can_step(self) -> bool:
        return True

    def restart(self) -> bool:
        self.state.rewind()
        return True

    # ------------------------------------------------------------------ surface
    def resize(self, width: float, height: float) -> bool:
        """Record the canvas size; the first valid size builds the pending dataset."""

        try:
            width = float(width)
            height = float(height)
        except (TypeError, ValueError):
            return False
        if width <= 0.0 or height <= 0.0:
            return False
        self._width = width
        self._height = height
        if self._pending_dataset:
            self.regenerate()
        return True

    # ---------------------------------------------------------------- datasets
    def select_dataset(self, name: str) -> bool:
        preset = str(name or "").strip().lower()
        if preset not in self.PRESETS:
            preset = self.DEFAULT_PRESET
        self.preset = preset
        return self.regenerate()

    def regenerate(self) -> bool:
        """Rebuild the current preset. Deferred until the canvas size is known."""

        if not self.has_bounds:
            self._pending_dataset = True
            return False
        self._pending_dataset = False
        self.load_points(self._generate())
        self._debug(f"dataset '{self.preset}' generated ({len(self.points)} points)")
        return True

    def load_points(self, points: List[Point]) -> None:
        """Replace the whole point collection and return to Idle."""

        self.points = list(points)
        self.state.rewind()
        self.generation += 1
        self._on_points_replaced()

    def reset(self) -> bool:
        self.state.running = False
        return self.regenerate()

    def add_point(self, x: float, y: float) -> bool:
        raise NotImplementedError

    # --------------------------------------------------------------- lifecycle
    def start(self) -> bool:
        if self.state.running or self.state.complete or not self.can_step():
            return False
        self.state.running = True
        return True

    def pause(self) -> bool:
        if not self.state.running:
            return False
        self.state.running = False
        return True

    def toggle_running(self) -> bool:
        if self.state.running:
            return self.pause()
        if self.state.complete and not self.restart():
            return False
        return self.start()

    def step(self) -> bool:
        """Single manual step; ignored while running or once complete."""

        if self.state.running or self.state.complete:
            return False
        return self.step_once()

    def advance(self) -> bool:
        """Entry point for the animation clock."""

        if not self.state.running or self.state.complete:
            return False
        return self.step_once()

    def step_once(self) -> bool:
        """One iteration whatever the running flag; never past completion."""

        state = self.state
        if state.complete:
            return False
        if state.iteration >= state.max_iterations:
            state.finish()
            return False
        if not self.can_step():
            return False
        stop = self._iterate()
        state.iteration += 1
        if state.iteration >= state.max_iterations or stop:
            state.finish()
            self._debug(f"complete after {state.iteration} iteration(s)")
        return True

    # ----------------------------------------------------------- configuration
    def set_max_iterations(self, value: object) -> bool:
        number = coerce_int(value)
        low, high = MAX_ITERATIONS_RANGE
        if number is None or not low <= number <= high:
            return False
        if self.state.running or number < self.state.iteration:
            return False
        self.state.max_iterations = number
        if self.state.iteration and self.state.iteration >= number:
            self.state.finish()
        return True

    def set_show_trails(self, enabled: bool) -> bool:
        enabled = bool(enabled)
        if enabled == self.show_trails:
            return False
        self.show_trails = enabled
        return True
