from PyQt5 import QtWidgets, QtCore

from ..datasets import CLUSTERING_PRESETS, PROJECTION_PRESETS
from .config import LIMITS, TOOLTIPS, defaults_for
from .widgets import row, spin, set_enabled, set_visible


class SimulationTab(QtWidgets.QWidget):
    changed = QtCore.pyqtSignal(dict)

    def __init__(self, mode: str = "kmeans"):
        super().__init__()
        self._mode = mode
        d = defaults_for(mode)["simulation"]
        fl = QtWidgets.QFormLayout(self)

        presets = PROJECTION_PRESETS if mode == "tsne" else CLUSTERING_PRESETS
        self.cb_dataset = QtWidgets.QComboBox()
        for name, description in presets.items():
            self.cb_dataset.addItem(name, name)
            self.cb_dataset.setItemData(self.cb_dataset.count() - 1, description, QtCore.Qt.ToolTipRole)
        self._select_dataset(d["dataset"])

        self.sp_k = spin(LIMITS["simulation.k"], d["k"])
        self.sp_clusters = spin(LIMITS["simulation.clusters"], d["clusters"])
        self.sp_dimensions = spin(LIMITS["simulation.dimensions"], d["dimensions"])
        self.sp_perplexity = spin(LIMITS["simulation.perplexity"], d["perplexity"])
        self.sp_max_iterations = spin(LIMITS["simulation.max_iterations"], d["max_iterations"])
        low, high, _step = LIMITS["simulation.speed"]
        self.sl_speed = QtWidgets.QSlider(QtCore.Qt.Horizontal); self.sl_speed.setRange(low, high); self.sl_speed.setValue(d["speed"])

        self._row_dataset = row(fl, "Jeu de données", self.cb_dataset, TOOLTIPS["simulation.dataset"], lambda: self._select_dataset(defaults_for(self._mode)["simulation"]["dataset"]))
        self._row_k = row(fl, "Nombre de centroïdes (K)", self.sp_k, TOOLTIPS["simulation.k"], lambda: self.sp_k.setValue(d["k"]))
        self._row_clusters = row(fl, "Nombre de groupes", self.sp_clusters, TOOLTIPS["simulation.clusters"], lambda: self.sp_clusters.setValue(d["clusters"]))
        self._row_dimensions = row(fl, "Dimensions", self.sp_dimensions, TOOLTIPS["simulation.dimensions"], lambda: self.sp_dimensions.setValue(d["dimensions"]))
        self._row_perplexity = row(fl, "Perplexité", self.sp_perplexity, TOOLTIPS["simulation.perplexity"], lambda: self.sp_perplexity.setValue(d["perplexity"]))
        self._row_max_iterations = row(fl, "Itérations max", self.sp_max_iterations, TOOLTIPS["simulation.max_iterations"], lambda: self.sp_max_iterations.setValue(d["max_iterations"]))
        row(fl, "Vitesse (itérations/s)", self.sl_speed, TOOLTIPS["simulation.speed"], lambda: self.sl_speed.setValue(d["speed"]))

        projection = mode == "tsne"
        set_visible(self._row_k, not projection)
        for r in (self._row_clusters, self._row_dimensions, self._row_perplexity):
            set_visible(r, projection)

        self.cb_dataset.currentIndexChanged.connect(self.emit_delta)
        for w in [self.sp_k, self.sp_clusters, self.sp_dimensions, self.sp_perplexity, self.sp_max_iterations, self.sl_speed]:
            w.valueChanged.connect(self.emit_delta)

    def _select_dataset(self, name):
        idx = self.cb_dataset.findData(name)
        self.cb_dataset.setCurrentIndex(max(0, idx))

    def emit_delta(self, *a):
        self.changed.emit({"simulation": self.collect()})

    def collect(self):
        out = dict(
            dataset=self.cb_dataset.currentData(),
            max_iterations=self.sp_max_iterations.value(),
            speed=self.sl_speed.value(),
        )
        if self._mode == "tsne":
            out.update(
                clusters=self.sp_clusters.value(),
                dimensions=self.sp_dimensions.value(),
                perplexity=self.sp_perplexity.value(),
            )
        else:
            out["k"] = self.sp_k.value()
        return out

    def set_defaults(self, cfg):
        cfg = cfg or {}
        d = defaults_for(self._mode)["simulation"]
        with QtCore.QSignalBlocker(self.cb_dataset):
            self._select_dataset(cfg.get("dataset", d["dataset"]))
        mappings = [
            (self.sp_k, cfg.get("k", d["k"])),
            (self.sp_clusters, cfg.get("clusters", d["clusters"])),
            (self.sp_dimensions, cfg.get("dimensions", d["dimensions"])),
            (self.sp_perplexity, cfg.get("perplexity", d["perplexity"])),
            (self.sp_max_iterations, cfg.get("max_iterations", d["max_iterations"])),
            (self.sl_speed, cfg.get("speed", d["speed"])),
        ]
        for widget, value in mappings:
            try:
                value = int(value)
            except (TypeError, ValueError):
                continue
            with QtCore.QSignalBlocker(widget):
                widget.setValue(value)

    def set_running(self, running: bool):
        """Lock the settings the engines refuse to change mid-run."""
        for r in (self._row_dataset, self._row_k, self._row_clusters, self._row_dimensions,
                  self._row_perplexity, self._row_max_iterations):
            set_enabled(r, not running)
