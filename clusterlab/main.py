# -*- coding: utf-8 -*-
import argparse
import io
import os
import sys
from typing import NoReturn, Optional, Sequence


def _handle_qt_import_error(exc: ImportError) -> NoReturn:
    """Exit with a helpful message when the Qt bindings cannot be imported."""

    details = str(exc)
    message_lines = [
        "Impossible de lancer Clusterlab : l'import de PyQt5 a échoué.",
        "Vérifiez que PyQt5 est installé (pip install PyQt5).",
    ]
    if "libGL.so.1" in details:
        message_lines.append(
            "Indice : la bibliothèque système libGL.so.1 est manquante. Installez les paquets Mesa/OpenGL appropriés."
        )
    message_lines.append(f"Erreur d'origine : {details}")
    raise SystemExit("\n".join(message_lines)) from exc


try:
    from PyQt5 import QtCore, QtWidgets, QtGui
    from PyQt5.QtCore import Qt
except ImportError as exc:  # pragma: no cover - dépendances environnementales
    _handle_qt_import_error(exc)


DEBUG_MARKER = "[Clusterlab][DEBUG]"


class _DebugSilencer(io.TextIOBase):
    """Pass text through to ``stream``, dropping whole lines that carry ``marker``.

    A line is only judged once it is complete, so a diagnostic printed in
    several ``write`` calls is still recognised.
    """

    def __init__(self, stream: io.TextIOBase, marker: str) -> None:
        super().__init__()
        self._stream = stream
        self._marker = marker
        self._pending = ""

    def writable(self) -> bool:
        return True

    def write(self, text: str) -> int:  # type: ignore[override]
        lines = (self._pending + text).splitlines(keepends=True)
        self._pending = lines.pop() if lines and not lines[-1].endswith(("\n", "\r")) else ""
        for line in lines:
            if self._marker not in line:
                self._stream.write(line)
        return len(text)

    def flush(self) -> None:  # type: ignore[override]
        pending, self._pending = self._pending, ""
        if pending and self._marker not in pending:
            self._stream.write(pending)
        self._stream.flush()

    def __getattr__(self, name):
        return getattr(self._stream, name)


def _debug_enabled() -> bool:
    return os.environ.get("CLUSTERLAB_DEBUG", "").strip().lower() in {"1", "true", "yes"}


def _install_debug_silencer(marker: str = DEBUG_MARKER) -> None:
    if _debug_enabled():
        return
    if marker and not isinstance(sys.stdout, _DebugSilencer):
        sys.stdout = _DebugSilencer(sys.stdout, marker)
    if marker and not isinstance(sys.stderr, _DebugSilencer):
        sys.stderr = _DebugSilencer(sys.stderr, marker)


from .control.config import DEFAULTS  # noqa: E402
from .control.control_window import ControlWindow  # noqa: E402
from .session import ENGINE_KINDS, create_visualization  # noqa: E402
from .view.view_widget import ClusterViewWidget  # noqa: E402


class ViewWindow(QtWidgets.QMainWindow):
    """Top-level window hosting the canvas for one session."""

    def __init__(self, session, *, backend: Optional[str] = None):
        super().__init__(None)
        self.session = session
        self.view = ClusterViewWidget(session, self, force_backend=backend)
        self.setCentralWidget(self.view)
        self.setWindowTitle("Clusterlab - " + ("K-means" if session.kind == "kmeans" else "t-SNE"))
        self.setMinimumSize(320, 240)
        QtWidgets.QShortcut(QtGui.QKeySequence(Qt.Key_Escape), self, activated=self.close)

    def place(self, area: QtCore.QRect) -> None:
        """Occupy ``area`` in screen coordinates."""
        self.move(area.topLeft())
        self.resize(area.size())

    def closeEvent(self, event: QtGui.QCloseEvent) -> None:  # type: ignore[override]
        self.view.shutdown()
        super().closeEvent(event)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="clusterlab",
        description="Visualisation pas à pas du K-means et d'une projection façon t-SNE.",
    )
    parser.add_argument(
        "--mode",
        choices=sorted(ENGINE_KINDS),
        default=os.environ.get("CLUSTERLAB_MODE", DEFAULTS["system"]["mode"]).strip().lower() or "kmeans",
        help="Algorithme à afficher (défaut : $CLUSTERLAB_MODE ou kmeans).",
    )
    parser.add_argument(
        "--backend",
        choices=("auto", "raster", "opengl"),
        default=DEFAULTS["system"]["backend"],
        help="Moteur de rendu du canevas (auto : $CLUSTERLAB_FORCE_BACKEND, sinon raster).",
    )
    return parser


def main(argv: Optional[Sequence[str]] = None, headless: bool = False) -> int:
    """Start the application and return the exit code.

    When ``headless`` is True the session is built and the function returns 0
    without instantiating any Qt objects, which keeps tests free of an event
    loop.
    """

    args = build_parser().parse_args(argv)
    if args.mode not in ENGINE_KINDS:
        raise SystemExit(f"Mode inconnu : {args.mode!r} (attendu : {', '.join(sorted(ENGINE_KINDS))})")
    _install_debug_silencer()
    session = create_visualization(args.mode)
    if headless:
        return 0

    QtWidgets.QApplication.setAttribute(QtCore.Qt.AA_EnableHighDpiScaling, True)
    QtWidgets.QApplication.setAttribute(QtCore.Qt.AA_UseHighDpiPixmaps, True)
    app = QtWidgets.QApplication(sys.argv[:1])
    area = QtGui.QGuiApplication.primaryScreen().availableGeometry()

    view_win = ViewWindow(session, backend=args.backend)
    control_win = ControlWindow(app, session)

    # canvas on the left two thirds, controls on the right
    split = max(320, (area.width() * 2) // 3)
    view_win.place(QtCore.QRect(area.left(), area.top(), split, area.height()))
    control_win.move(area.left() + split, area.top())
    control_win.resize(max(320, area.width() - split), area.height())

    view_win.show()
    control_win.show()
    return app.exec_()


if __name__ == "__main__":
    sys.exit(main())
