"""Command surface shared by the desktop host, the headless driver and the tests.

A :class:`Visualization` wraps one step engine together with the view
transform, the interaction controller and the display settings.  Every
command returns ``True`` when it changed something; listeners then receive a
fresh :class:`Snapshot`.
"""

from __future__ import annotations

import math
import random
from dataclasses import dataclass
from typing import Callable, Dict, List, Mapping, Optional, Tuple

from .engines.base import StepEngine, coerce_int
from .engines.kmeans import KMeansEngine
from .engines.projection import ProjectionEngine
from .geometry import ViewTransform
from .interaction import InteractionController
from .palette import ColorMode, centroid_color, point_color
from .store import Centroid, Point

__all__ = ["Snapshot", "Visualization", "create_visualization", "SPEED_RANGE", "ENGINE_KINDS"]

SPEED_RANGE = (1, 10)

ENGINE_KINDS: Dict[str, type] = {
    "kmeans": KMeansEngine,
    "tsne": ProjectionEngine,
}

Listener = Callable[["Snapshot"], None]

# Form key, engine attribute, engine setter.
_ENGINE_PARAMS = (
    ("k", "k", "set_k"),
    ("clusters", "cluster_count", "set_cluster_count"),
    ("dimensions", "dimensions", "set_dimensions"),
    ("perplexity", "perplexity", "set_perplexity"),
)


def _coerce_bool(value: object) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return bool(value)
    text = str(value).strip().lower()
    if text in {"1", "true", "yes", "on"}:
        return True
    if text in {"0", "false", "no", "off"}:
        return False
    return None


@dataclass(frozen=True)
class Snapshot:
    """Read-only picture of a session, detached from the live engine."""

    kind: str
    points: Tuple[Point, ...]
    centroids: Optional[Tuple[Centroid, ...]]
    point_colors: Tuple[str, ...]
    centroid_colors: Tuple[str, ...]
    iteration: int
    max_iterations: int
    running: bool
    complete: bool
    has_projection: bool
    transform: ViewTransform
    selected: Optional[int]
    hovered: Optional[int]
    show_trails: bool
    color_mode: ColorMode
    bounds: Optional[Tuple[float, float]]
    speed: int
    dataset: str

    @property
    def interval_ms(self) -> float:
        return 1000.0 / self.speed


class Visualization:
    def __init__(self, engine: StepEngine, settings: Optional[Mapping[str, object]] = None) -> None:
        self.engine = engine
        self.transform = ViewTransform()
        self.interaction = InteractionController(engine, self.transform)
        self.speed = 1
        self.color_mode = ColorMode.CLUSTER
        self._listeners: List[Listener] = []
        if settings:
            self.set_params(settings)

    @property
    def kind(self) -> str:
        return self.engine.kind

    @property
    def interval_ms(self) -> float:
        return 1000.0 / self.speed

    @property
    def running(self) -> bool:
        return self.engine.state.running

    # ---------------------------------------------------------------- listeners
    def subscribe(self, callback: Listener) -> None:
        if callback not in self._listeners:
            self._listeners.append(callback)

    def unsubscribe(self, callback: Listener) -> None:
        if callback in self._listeners:
            self._listeners.remove(callback)

    def _notify(self, applied: bool) -> bool:
        self.interaction.sync()
        if applied and self._listeners:
            snapshot = self.snapshot()
            for callback in list(self._listeners):
                callback(snapshot)
        return applied

    # ------------------------------------------------------------------ snapshot
    def snapshot(self) -> Snapshot:
        engine = self.engine
        self.interaction.sync()
        points = tuple(point.copy() for point in engine.active_points())
        bounds = engine.bounds
        width, height = bounds if bounds is not None else (0.0, 0.0)
        colors = []
        for point in points:
            reference, scale = engine.color_reference(point)
            colors.append(point_color(point, self.color_mode, width, height, reference, scale))
        centroids = engine.centroids
        if centroids is not None:
            centroid_copies: Optional[Tuple[Centroid, ...]] = tuple(c.copy() for c in centroids)
            centroid_colors = tuple(centroid_color(i) for i in range(len(centroids)))
        else:
            centroid_copies = None
            centroid_colors = ()
        state = engine.state
        return Snapshot(
            kind=engine.kind,
            points=points,
            centroids=centroid_copies,
            point_colors=tuple(colors),
            centroid_colors=centroid_colors,
            iteration=state.iteration,
            max_iterations=state.max_iterations,
            running=state.running,
            complete=state.complete,
            has_projection=engine.has_projection,
            transform=self.transform.copy(),
            selected=self.interaction.state.selected,
            hovered=self.interaction.state.hovered,
            show_trails=engine.show_trails,
            color_mode=self.color_mode,
            bounds=bounds,
            speed=self.speed,
            dataset=engine.preset,
        )

    # ----------------------------------------------------------------- lifecycle
    def toggle_running(self) -> bool:
        return self._notify(self.engine.toggle_running())

    def start(self) -> bool:
        return self._notify(self.engine.start())

    def pause(self) -> bool:
        return self._notify(self.engine.pause())

    def step(self) -> bool:
        return self._notify(self.engine.step())

    def advance(self) -> bool:
        """One scheduled step; called by the animation clock."""

        return self._notify(self.engine.advance())

    def reset(self) -> bool:
        self.engine.reset()
        self.transform.reset()
        self.interaction.clear_selection()
        return self._notify(True)

    def show_final(self) -> bool:
        show_final = getattr(self.engine, "show_final", None)
        if show_final is None:
            return False
        return self._notify(show_final())

    def resize(self, width: float, height: float) -> bool:
        if self.engine.bounds == (width, height):
            return False
        return self._notify(self.engine.resize(width, height))

    # ------------------------------------------------------------------ datasets
    def select_dataset(self, name: str) -> bool:
        if self.engine.state.running:
            return False
        return self._notify(self.engine.select_dataset(name))

    def regenerate(self) -> bool:
        if self.engine.state.running:
            return False
        return self._notify(self.engine.regenerate())

    # ------------------------------------------------------------- configuration
    def set_speed(self, value: object) -> bool:
        number = coerce_int(value)
        low, high = SPEED_RANGE
        if number is None or not low <= number <= high or number == self.speed:
            return False
        self.speed = number
        return self._notify(True)

    def set_k(self, value: object) -> bool:
        setter = getattr(self.engine, "set_k", None) or getattr(self.engine, "set_cluster_count", None)
        if setter is None:
            return False
        return self._notify(setter(value))

    def set_max_iterations(self, value: object) -> bool:
        return self._notify(self.engine.set_max_iterations(value))

    def set_perplexity(self, value: object) -> bool:
        setter = getattr(self.engine, "set_perplexity", None)
        return self._notify(setter(value)) if setter is not None else False

    def set_dimensions(self, value: object) -> bool:
        setter = getattr(self.engine, "set_dimensions", None)
        return self._notify(setter(value)) if setter is not None else False

    def toggle_trails(self) -> bool:
        return self._notify(self.engine.set_show_trails(not self.engine.show_trails))

    def set_show_trails(self, enabled: object) -> bool:
        flag = _coerce_bool(enabled)
        if flag is None:
            return False
        return self._notify(self.engine.set_show_trails(flag))

    def set_color_mode(self, value: object) -> bool:
        mode = ColorMode.parse(value)
        if mode is None or mode is self.color_mode:
            return False
        self.color_mode = mode
        return self._notify(True)

    def set_params(self, payload: Mapping[str, object]) -> bool:
        """Apply a ``{"simulation": {...}, "view": {...}}`` payload from the control window.

        Only values that differ from the live configuration are applied, so a
        full form push does not regenerate the dataset or reseed centroids.
        Unknown keys and invalid values are ignored.
        """

        applied = False
        simulation = payload.get("simulation") if isinstance(payload, Mapping) else None
        view = payload.get("view") if isinstance(payload, Mapping) else None
        engine = self.engine
        if isinstance(simulation, Mapping):
            dataset = simulation.get("dataset")
            if dataset is not None:
                # unknown names resolve to the engine fallback, as select_dataset does
                preset = str(dataset).strip().lower()
                if preset not in engine.PRESETS:
                    preset = engine.DEFAULT_PRESET
                if preset != engine.preset:
                    applied = self.select_dataset(preset) or applied
            for key, attr, setter_name in _ENGINE_PARAMS:
                setter = getattr(engine, setter_name, None)
                if key not in simulation or setter is None:
                    continue
                if coerce_int(simulation[key]) == getattr(engine, attr):
                    continue
                applied = self._notify(setter(simulation[key])) or applied
            if "max_iterations" in simulation and coerce_int(simulation["max_iterations"]) != engine.state.max_iterations:
                applied = self.set_max_iterations(simulation["max_iterations"]) or applied
            if "speed" in simulation:
                applied = self.set_speed(simulation["speed"]) or applied
        if isinstance(view, Mapping):
            if "color_mode" in view:
                applied = self.set_color_mode(view["color_mode"]) or applied
            if "show_trails" in view:
                applied = self.set_show_trails(view["show_trails"]) or applied
        return applied

    # ---------------------------------------------------------------------- view
    def toggle_zoom_tool(self) -> bool:
        self.transform.toggle_zoom_tool()
        return self._notify(True)

    def toggle_pan_tool(self) -> bool:
        self.transform.toggle_pan_tool()
        return self._notify(True)

    def zoom_in(self) -> bool:
        before = self.transform.zoom
        self.transform.zoom_in()
        return self._notify(not math.isclose(before, self.transform.zoom))

    def zoom_out(self) -> bool:
        before = self.transform.zoom
        self.transform.zoom_out()
        return self._notify(not math.isclose(before, self.transform.zoom))

    def reset_view(self) -> bool:
        self.transform.reset()
        return self._notify(True)

    # ------------------------------------------------------------------- pointer
    def click(self, sx: float, sy: float) -> bool:
        return self._notify(self.interaction.click(sx, sy))

    def pointer_down(self, sx: float, sy: float) -> bool:
        return self._notify(self.interaction.pointer_down(sx, sy))

    def pointer_move(self, sx: float, sy: float) -> bool:
        return self._notify(self.interaction.pointer_move(sx, sy))

    def pointer_up(self) -> bool:
        return self._notify(self.interaction.pointer_up())

    def pointer_leave(self) -> bool:
        return self._notify(self.interaction.pointer_leave())


def create_visualization(
    kind: str = "kmeans",
    rng: Optional[random.Random] = None,
    settings: Optional[Mapping[str, object]] = None,
) -> Visualization:
    """Build a session for ``kind`` (``"kmeans"`` or ``"tsne"``)."""

    engine_cls = ENGINE_KINDS.get(str(kind).strip().lower())
    if engine_cls is None:
        raise ValueError(f"unknown visualization kind: {kind!r}")
    return Visualization(engine_cls(rng), settings)
