"""Screen/data coordinate mapping and point picking shared by the view and the controller.

The canvas is drawn with a translate-then-scale transform, so a data point
``p`` lands on screen at ``p * zoom + pan``.  Pointer events travel the other
way through :func:`to_data_space`.  Everything here is pure; the
:class:`ViewTransform` container is mutated only by the session and the
interaction controller.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

__all__ = [
    "ZOOM_MIN",
    "ZOOM_MAX",
    "ZOOM_RATIO",
    "PICK_RADIUS",
    "PICK_RADIUS_SELECTED",
    "ViewTransform",
    "clamp_zoom",
    "zoom_step_in",
    "zoom_step_out",
    "to_data_space",
    "to_screen_space",
    "distance",
    "pick_radius",
    "find_nearest",
]

ZOOM_MIN = 0.5
ZOOM_MAX = 5.0
ZOOM_RATIO = 1.2

PICK_RADIUS = 7.0
PICK_RADIUS_SELECTED = 10.0


def clamp_zoom(value: float) -> float:
    return max(ZOOM_MIN, min(ZOOM_MAX, float(value)))


def zoom_step_in(zoom: float) -> float:
    return clamp_zoom(zoom * ZOOM_RATIO)


def zoom_step_out(zoom: float) -> float:
    return clamp_zoom(zoom / ZOOM_RATIO)


@dataclass
class ViewTransform:
    """Zoom factor, pan offset (screen pixels) and the two pointer tool modes."""

    zoom: float = 1.0
    pan_x: float = 0.0
    pan_y: float = 0.0
    zoom_tool: bool = False
    pan_tool: bool = False

    def copy(self) -> "ViewTransform":
        return ViewTransform(self.zoom, self.pan_x, self.pan_y, self.zoom_tool, self.pan_tool)

    def toggle_zoom_tool(self) -> None:
        self.zoom_tool = not self.zoom_tool
        self.pan_tool = False

    def toggle_pan_tool(self) -> None:
        self.pan_tool = not self.pan_tool
        self.zoom_tool = False

    def zoom_in(self) -> None:
        self.zoom = zoom_step_in(self.zoom)

    def zoom_out(self) -> None:
        self.zoom = zoom_step_out(self.zoom)

    def pan_by(self, dx: float, dy: float) -> None:
        self.pan_x += dx
        self.pan_y += dy

    def reset(self) -> None:
        """Return to the identity view. Tool modes are left untouched."""

        self.zoom = 1.0
        self.pan_x = 0.0
        self.pan_y = 0.0


def to_data_space(sx: float, sy: float, transform: ViewTransform) -> Tuple[float, float]:
    zoom = transform.zoom
    return (sx - transform.pan_x) / zoom, (sy - transform.pan_y) / zoom


def to_screen_space(x: float, y: float, transform: ViewTransform) -> Tuple[float, float]:
    zoom = transform.zoom
    return x * zoom + transform.pan_x, y * zoom + transform.pan_y


def distance(ax: float, ay: float, bx: float, by: float) -> float:
    return math.hypot(ax - bx, ay - by)


def pick_radius(selected: bool, zoom: float) -> float:
    """Hit radius in data units; constant on screen whatever the zoom."""

    base = PICK_RADIUS_SELECTED if selected else PICK_RADIUS
    return base / zoom


def find_nearest(x: float, y: float, points: Sequence, zoom: float) -> Optional[int]:
    """Return the index of the first point under ``(x, y)``.

    Parameters
    ----------
    x, y:
        Pointer position in data space.
    points:
        Objects exposing ``x``, ``y`` and ``selected``.
    zoom:
        Current zoom factor, used to keep the pick radius constant on screen.

    The scan stops at the first point closer than its pick radius, in
    collection order.  This is not the closest point overall: two overlapping
    points always resolve to the lower index.
    """

    for index, point in enumerate(points):
        if distance(point.x, point.y, x, y) < pick_radius(bool(point.selected), zoom):
            return index
    return None
