"""Qt rendering collaborator for a :class:`~clusterlab.session.Visualization`.

The widget never touches the engines directly.  It paints the latest
:class:`~clusterlab.session.Snapshot` received from the session and forwards
mouse activity back as pointer commands.  A press and release less than
``CLICK_SLOP`` pixels apart also counts as a click, mirroring how a browser
canvas fires ``click`` after ``mouseup``.

:func:`ClusterViewWidget` is a factory returning either an OpenGL-backed or a
raster widget; both expose the same API.
"""

from __future__ import annotations

import math
import os
import sys
from typing import Optional

from PyQt5 import QtCore, QtGui, QtWidgets

from ..clock import AnimationClock

__all__ = ["ClusterViewWidget", "CLICK_SLOP"]

CLICK_SLOP = 3.0

POINT_RADIUS = 5.0
POINT_RADIUS_SELECTED = 8.0
RING_RADIUS = 7.0
RING_RADIUS_SELECTED = 10.0
CENTROID_RADIUS = 8.0

_BACKGROUND = "#FFFFFF"
_AXIS = "#CCCCCC"
_TEXT = "#333333"
_TRAIL_ALPHA = 0x80


def _qcolor(value: str, alpha: Optional[int] = None) -> QtGui.QColor:
    color = QtGui.QColor(value)
    if alpha is not None:
        color.setAlpha(alpha)
    return color


def _trail_path(positions) -> Optional[QtGui.QPainterPath]:
    if len(positions) < 2:
        return None
    path = QtGui.QPainterPath(QtCore.QPointF(*positions[0]))
    for x, y in positions[1:]:
        path.lineTo(x, y)
    return path


class _ViewWidgetBase:
    """Common behaviour shared by both the OpenGL and raster backends."""

    def _init_view_widget(self, session) -> None:
        self.setMouseTracking(True)
        self.setMinimumSize(320, 240)
        self.session = session
        self._snapshot = session.snapshot()
        self._press_pos: Optional[QtCore.QPointF] = None
        self.clock = AnimationClock(session, self)
        session.subscribe(self._on_snapshot)

    def _on_snapshot(self, snapshot) -> None:
        self._snapshot = snapshot
        self.clock.sync(snapshot)
        self.update()

    def shutdown(self) -> None:
        """Stop the animation and detach from the session."""

        self.clock.cancel()
        self.session.unsubscribe(self._on_snapshot)

    # ------------------------------------------------------------------ events
    def _handle_resize(self) -> None:
        self.session.resize(float(self.width()), float(self.height()))
        self.update()

    def _handle_press(self, event: QtGui.QMouseEvent) -> None:
        if event.button() != QtCore.Qt.LeftButton:
            return
        pos = QtCore.QPointF(event.pos())
        self._press_pos = pos
        self.session.pointer_down(pos.x(), pos.y())

    def _handle_move(self, event: QtGui.QMouseEvent) -> None:
        pos = QtCore.QPointF(event.pos())
        self.session.pointer_move(pos.x(), pos.y())

    def _handle_release(self, event: QtGui.QMouseEvent) -> None:
        if event.button() != QtCore.Qt.LeftButton:
            return
        pos = QtCore.QPointF(event.pos())
        self.session.pointer_up()
        press = self._press_pos
        self._press_pos = None
        if press is not None and math.hypot(pos.x() - press.x(), pos.y() - press.y()) < CLICK_SLOP:
            self.session.click(pos.x(), pos.y())

    def _handle_leave(self) -> None:
        self._press_pos = None
        self.session.pointer_leave()

    # --------------------------------------------------------------- painting
    def _render_with_painter(self, painter: QtGui.QPainter) -> None:
        snap = self._snapshot
        painter.setRenderHint(QtGui.QPainter.Antialiasing, True)
        painter.fillRect(self.rect(), _qcolor(_BACKGROUND))
        width = float(self.width())
        height = float(self.height())

        painter.save()
        painter.translate(snap.transform.pan_x, snap.transform.pan_y)
        painter.scale(snap.transform.zoom, snap.transform.zoom)

        if snap.centroids is None:
            painter.setPen(QtGui.QPen(_qcolor(_AXIS), 1.0))
            painter.drawLine(QtCore.QLineF(0.0, height / 2.0, width, height / 2.0))
            painter.drawLine(QtCore.QLineF(width / 2.0, 0.0, width / 2.0, height))

        painter.setBrush(QtCore.Qt.NoBrush)
        if snap.show_trails:
            for point, color in zip(snap.points, snap.point_colors):
                path = _trail_path(point.trail.positions())
                if path is None:
                    continue
                painter.setPen(QtGui.QPen(_qcolor(color, _TRAIL_ALPHA), 1.0))
                painter.drawPath(path)
            for centroid, color in zip(snap.centroids or (), snap.centroid_colors):
                path = _trail_path(centroid.trail.positions())
                if path is None:
                    continue
                painter.setPen(QtGui.QPen(_qcolor(color, _TRAIL_ALPHA), 2.0))
                painter.drawPath(path)

        for index, (point, color) in enumerate(zip(snap.points, snap.point_colors)):
            radius = POINT_RADIUS_SELECTED if point.selected else POINT_RADIUS
            painter.setPen(QtCore.Qt.NoPen)
            painter.setBrush(_qcolor(color))
            painter.drawEllipse(QtCore.QPointF(point.x, point.y), radius, radius)
            if index == snap.hovered or index == snap.selected:
                ring = RING_RADIUS_SELECTED if point.selected else RING_RADIUS
                pen_color = "#000000" if index == snap.selected else "#555555"
                painter.setPen(QtGui.QPen(_qcolor(pen_color), 2.0))
                painter.setBrush(QtCore.Qt.NoBrush)
                painter.drawEllipse(QtCore.QPointF(point.x, point.y), ring, ring)

        for centroid, color in zip(snap.centroids or (), snap.centroid_colors):
            painter.setPen(QtGui.QPen(_qcolor("#000000"), 2.0))
            painter.setBrush(_qcolor(color))
            painter.drawEllipse(QtCore.QPointF(centroid.x, centroid.y), CENTROID_RADIUS, CENTROID_RADIUS)

        painter.restore()

        painter.setPen(_qcolor(_TEXT))
        font = painter.font()
        font.setPixelSize(14)
        painter.setFont(font)
        label = f"Itération : {snap.iteration}/{snap.max_iterations}"
        if snap.complete:
            label += "  (terminé)"
        painter.drawText(QtCore.QPointF(10.0, 20.0), label)


class _OpenGLViewWidget(QtWidgets.QOpenGLWidget, _ViewWidgetBase):
    """OpenGL-backed renderer when the system can create a GL context."""

    def __init__(self, session, parent: Optional[QtWidgets.QWidget] = None) -> None:
        QtWidgets.QOpenGLWidget.__init__(self, parent)
        self._init_view_widget(session)

    def paintGL(self) -> None:  # pragma: no cover - requires GUI context
        painter = QtGui.QPainter(self)
        try:
            self._render_with_painter(painter)
        finally:
            painter.end()

    def resizeEvent(self, event: QtGui.QResizeEvent) -> None:  # type: ignore[override]
        super().resizeEvent(event)
        self._handle_resize()

    def mousePressEvent(self, event: QtGui.QMouseEvent) -> None:  # type: ignore[override]
        self._handle_press(event)

    def mouseMoveEvent(self, event: QtGui.QMouseEvent) -> None:  # type: ignore[override]
        self._handle_move(event)

    def mouseReleaseEvent(self, event: QtGui.QMouseEvent) -> None:  # type: ignore[override]
        self._handle_release(event)

    def leaveEvent(self, event: QtCore.QEvent) -> None:  # type: ignore[override]
        super().leaveEvent(event)
        self._handle_leave()


class _RasterViewWidget(QtWidgets.QWidget, _ViewWidgetBase):
    """Fallback renderer using the traditional raster ``QWidget`` backend."""

    def __init__(self, session, parent: Optional[QtWidgets.QWidget] = None) -> None:
        QtWidgets.QWidget.__init__(self, parent)
        self._init_view_widget(session)

    def paintEvent(self, event: QtGui.QPaintEvent) -> None:  # type: ignore[override]
        del event
        painter = QtGui.QPainter(self)
        try:
            self._render_with_painter(painter)
        finally:
            painter.end()

    def resizeEvent(self, event: QtGui.QResizeEvent) -> None:  # type: ignore[override]
        super().resizeEvent(event)
        self._handle_resize()

    def mousePressEvent(self, event: QtGui.QMouseEvent) -> None:  # type: ignore[override]
        self._handle_press(event)

    def mouseMoveEvent(self, event: QtGui.QMouseEvent) -> None:  # type: ignore[override]
        self._handle_move(event)

    def mouseReleaseEvent(self, event: QtGui.QMouseEvent) -> None:  # type: ignore[override]
        self._handle_release(event)

    def leaveEvent(self, event: QtCore.QEvent) -> None:  # type: ignore[override]
        super().leaveEvent(event)
        self._handle_leave()


def _should_use_opengl(force_backend: Optional[str]) -> bool:
    """``None`` and ``"auto"`` defer to the environment."""
    if force_backend == "raster":
        return False
    if force_backend == "opengl":
        return True

    env_backend = os.environ.get("CLUSTERLAB_FORCE_BACKEND", "").strip().lower()
    if env_backend == "opengl":
        return True
    # A flat 2D canvas gains nothing from GL; raster is the default.
    return False


def ClusterViewWidget(
    session,
    parent: Optional[QtWidgets.QWidget] = None,
    *,
    force_backend: Optional[str] = None,
) -> QtWidgets.QWidget:
    """Factory returning the renderer widget for ``session``.

    Parameters
    ----------
    session:
        The :class:`~clusterlab.session.Visualization` to draw and drive.
    parent:
        Parent widget used by Qt for ownership.
    force_backend:
        ``"opengl"`` selects the ``QOpenGLWidget`` implementation, ``"raster"``
        the plain ``QWidget`` one.  ``CLUSTERLAB_FORCE_BACKEND`` is consulted
        when this is ``None`` or ``"auto"``.
    """

    if _should_use_opengl(force_backend) and hasattr(QtWidgets, "QOpenGLWidget"):
        try:
            widget = _OpenGLViewWidget(session, parent)
            setattr(widget, "backend_name", "opengl")
            return widget
        except Exception as exc:
            print(
                f"[Clusterlab][WARN] Unable to initialise OpenGL backend ({exc!r}). Using raster widget instead.",
                file=sys.stderr,
            )
    widget = _RasterViewWidget(session, parent)
    setattr(widget, "backend_name", "raster")
    return widget
