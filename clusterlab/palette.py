"""Colour assignment for points and centroids.

Colours are returned as ``#RRGGBB`` strings; the view wraps them in
``QColor`` at paint time so this module stays free of Qt.
"""

from __future__ import annotations

import enum
import math
from typing import Optional, Tuple

__all__ = [
    "ColorMode",
    "CLUSTER_COLORS",
    "UNASSIGNED_COLOR",
    "cluster_color",
    "centroid_color",
    "point_color",
]

CLUSTER_COLORS: Tuple[str, ...] = (
    "#3498DB",
    "#E74C3C",
    "#2ECC71",
    "#F39C12",
    "#9B59B6",
    "#1ABC9C",
    "#D35400",
    "#34495E",
    "#16A085",
    "#C0392B",
)

UNASSIGNED_COLOR = "#CCCCCC"


class ColorMode(enum.Enum):
    CLUSTER = "cluster"
    GRADIENT = "gradient"
    DISTANCE = "distance"

    @classmethod
    def parse(cls, value: object) -> Optional["ColorMode"]:
        """Return the matching mode, or ``None`` for anything unknown."""

        if isinstance(value, ColorMode):
            return value
        text = str(value or "").strip().lower()
        for mode in cls:
            if mode.value == text:
                return mode
        return None


def clamp01(value: float) -> float:
    return max(0.0, min(1.0, value))


def _rgb_to_hex(r: int, g: int, b: int) -> str:
    return f"#{r:02X}{g:02X}{b:02X}"


def _hsl_to_rgb(h: float, s: float, l: float) -> Tuple[int, int, int]:
    def _hue(p: float, q: float, t: float) -> float:
        if t < 0:
            t += 1
        if t > 1:
            t -= 1
        if t < 1 / 6:
            return p + (q - p) * 6 * t
        if t < 1 / 2:
            return q
        if t < 2 / 3:
            return p + (q - p) * (2 / 3 - t) * 6
        return p

    if s == 0:
        v = int(round(l * 255))
        return v, v, v
    q = l * (1 + s) if l < 0.5 else l + s - l * s
    p = 2 * l - q
    r = _hue(p, q, h + 1 / 3)
    g = _hue(p, q, h)
    b = _hue(p, q, h - 1 / 3)
    return int(round(r * 255)), int(round(g * 255)), int(round(b * 255))


def cluster_color(cluster: int) -> str:
    if cluster < 0:
        return UNASSIGNED_COLOR
    return CLUSTER_COLORS[cluster % len(CLUSTER_COLORS)]


def centroid_color(index: int) -> str:
    return CLUSTER_COLORS[index % len(CLUSTER_COLORS)]


def _gradient_color(x: float, y: float, width: float, height: float) -> str:
    hue = (x / width) % 1.0
    saturation = clamp01(0.7 + clamp01(y / height) * 0.3)
    return _rgb_to_hex(*_hsl_to_rgb(hue, saturation, 0.5))


def _distance_color(intensity: float) -> str:
    intensity = clamp01(intensity)
    return _rgb_to_hex(int(round(255 - intensity * 255)), int(round(intensity * 255)), 100)


def point_color(
    point,
    mode: ColorMode,
    width: float,
    height: float,
    reference: Optional[Tuple[float, float]] = None,
    scale: Optional[float] = None,
) -> str:
    """Pick the fill colour of ``point`` for the active colour mode.

    ``reference`` and ``scale`` only matter in distance mode: the colour fades
    from red to green as the point moves away from ``reference``, saturating at
    ``scale``.  Without a reference (an unassigned K-means point) the point is
    drawn grey.
    """

    if mode is ColorMode.GRADIENT and width > 0 and height > 0:
        return _gradient_color(point.x, point.y, width, height)
    if mode is ColorMode.DISTANCE:
        if reference is None or not scale or scale <= 0:
            return UNASSIGNED_COLOR
        dist = math.hypot(point.x - reference[0], point.y - reference[1])
        return _distance_color(dist / scale)
    return cluster_color(point.cluster)
