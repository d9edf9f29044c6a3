from PyQt5 import QtWidgets, QtCore

from .config import COLOR_MODES, DEFAULTS, TOOLTIPS
from .widgets import row


class DisplayTab(QtWidgets.QWidget):
    changed = QtCore.pyqtSignal(dict)

    def __init__(self):
        super().__init__()
        d = DEFAULTS["view"]
        fl = QtWidgets.QFormLayout(self)

        self.cb_color_mode = QtWidgets.QComboBox()
        for value, label in COLOR_MODES:
            self.cb_color_mode.addItem(label, value)
        self._select_mode(d["color_mode"])
        self.chk_trails = QtWidgets.QCheckBox(); self.chk_trails.setChecked(d["show_trails"])

        row(fl, "Couleurs", self.cb_color_mode, TOOLTIPS["view.color_mode"], lambda: self._select_mode(d["color_mode"]))
        row(fl, "Afficher les traces", self.chk_trails, TOOLTIPS["view.show_trails"], lambda: self.chk_trails.setChecked(d["show_trails"]))

        self.cb_color_mode.currentIndexChanged.connect(self.emit_delta)
        self.chk_trails.stateChanged.connect(self.emit_delta)

    def _select_mode(self, value):
        idx = self.cb_color_mode.findData(value)
        self.cb_color_mode.setCurrentIndex(max(0, idx))

    def emit_delta(self, *a):
        self.changed.emit({"view": self.collect()})

    def collect(self):
        return dict(
            color_mode=self.cb_color_mode.currentData(),
            show_trails=self.chk_trails.isChecked(),
        )

    def set_defaults(self, cfg):
        cfg = cfg or {}
        d = DEFAULTS["view"]
        with QtCore.QSignalBlocker(self.cb_color_mode):
            self._select_mode(cfg.get("color_mode", d["color_mode"]))
        with QtCore.QSignalBlocker(self.chk_trails):
            self.chk_trails.setChecked(bool(cfg.get("show_trails", d["show_trails"])))
