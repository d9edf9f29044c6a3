"""Pointer handling: selection, hover, point dragging and panning.

Events arrive in widget (screen) coordinates.  Hit tests run in data space
against the engine's active collection, so the controller has to be told
through :meth:`InteractionController.sync` whenever that collection is
replaced wholesale; stale indices are dropped at that point.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from .geometry import ViewTransform, find_nearest, to_data_space

__all__ = ["InteractionState", "InteractionController"]


@dataclass
class InteractionState:
    selected: Optional[int] = None
    hovered: Optional[int] = None
    point_drag: bool = False
    pan_drag: bool = False
    # Screen position for a pan drag, data position for the zoom tool.
    anchor: Optional[Tuple[float, float]] = None

    def clear(self) -> None:
        self.selected = None
        self.hovered = None
        self.point_drag = False
        self.pan_drag = False
        self.anchor = None


class InteractionController:
    def __init__(self, engine, transform: ViewTransform) -> None:
        self.engine = engine
        self.transform = transform
        self.state = InteractionState()
        self._generation = engine.generation

    # ------------------------------------------------------------------ helpers
    def _points(self):
        return self.engine.active_points()

    def _hit(self, sx: float, sy: float) -> Tuple[Optional[int], float, float]:
        x, y = to_data_space(sx, sy, self.transform)
        return find_nearest(x, y, self._points(), self.transform.zoom), x, y

    def _valid(self, index: Optional[int]) -> bool:
        return index is not None and 0 <= index < len(self._points())

    def sync(self) -> bool:
        """Forget indices that referred to a replaced collection."""

        if self.engine.generation == self._generation:
            if self.state.selected is not None and not self._valid(self.state.selected):
                self.state.clear()
                return True
            return False
        self._generation = self.engine.generation
        self.state.clear()
        for point in self._points():
            point.selected = False
        return True

    def clear_selection(self) -> bool:
        changed = self.state.selected is not None
        for point in self._points():
            point.selected = False
        self.state.clear()
        return changed

    # ------------------------------------------------------------------- events
    def click(self, sx: float, sy: float) -> bool:
        self.sync()
        running = self.engine.state.running
        index, x, y = self._hit(sx, sy)
        if index is not None:
            if running:
                return False
            points = self._points()
            if self.state.selected == index:
                self.state.selected = None
                points[index].selected = False
            else:
                self.state.selected = index
                for i, point in enumerate(points):
                    point.selected = i == index
            return True
        if running or self.transform.pan_tool or self.transform.zoom_tool:
            return False
        return self.engine.add_point(x, y)

    def pointer_down(self, sx: float, sy: float) -> bool:
        self.sync()
        index, x, y = self._hit(sx, sy)
        if index is not None and index == self.state.selected:
            self.state.point_drag = True
            return True
        if self.transform.pan_tool:
            self.state.pan_drag = True
            self.state.anchor = (sx, sy)
            return True
        if self.transform.zoom_tool:
            self.state.anchor = (x, y)
            return True
        return False

    def pointer_move(self, sx: float, sy: float) -> bool:
        self.sync()
        index, x, y = self._hit(sx, sy)
        changed = index != self.state.hovered
        self.state.hovered = index

        if self.state.point_drag and self._valid(self.state.selected):
            point = self._points()[self.state.selected]
            point.x = x
            point.y = y
            point.trail.append(x, y, bounded=False)
            return True

        if self.state.pan_drag and self.transform.pan_tool and self.state.anchor is not None:
            ax, ay = self.state.anchor
            self.transform.pan_by(sx - ax, sy - ay)
            self.state.anchor = (sx, sy)
            return True
        return changed

    def pointer_up(self) -> bool:
        changed = self.state.point_drag or self.state.pan_drag
        self.state.point_drag = False
        self.state.pan_drag = False
        return changed

    def pointer_leave(self) -> bool:
        changed = self.pointer_up() or self.state.hovered is not None
        self.state.hovered = None
        return changed
