from PyQt5 import QtWidgets, QtCore

_INFO_STYLE = ("QToolButton{border:1px solid #7aa7c7;border-radius:%dpx;font-weight:bold;padding:0;"
               "color:#2b6ea8;background:#e6f2fb;}QToolButton:hover{background:#d8ecfa;}")
_RESET_STYLE = ("QToolButton{border:1px solid #9aa5b1;border-radius:%dpx;padding:0;font-weight:bold;"
                "color:#2b2b2b;background:#f2f4f7;}QToolButton:hover{background:#e9edf2;}")


def _round_button(text: str, tip: str, size: int, style: str) -> QtWidgets.QToolButton:
    b = QtWidgets.QToolButton(); b.setText(text); b.setToolTip(tip)
    b.setCursor(QtCore.Qt.PointingHandCursor); b.setFixedSize(size, size)
    b.setStyleSheet(style % (size // 2))
    return b

def mk_info(text: str) -> QtWidgets.QToolButton:
    b = _round_button("i", text, 20, _INFO_STYLE)
    b.setToolTipDuration(0)
    return b

def mk_reset(cb) -> QtWidgets.QToolButton:
    b = _round_button("↺", "Valeur par défaut", 22, _RESET_STYLE)
    b.clicked.connect(lambda checked=False, _cb=cb: _cb())
    return b

def row(form: QtWidgets.QFormLayout, label: str, widget: QtWidgets.QWidget, tip: str, reset_cb=None):
    """Add ``label | widget [reset] (i)`` to ``form`` and return the row container."""
    container = QtWidgets.QWidget()
    h = QtWidgets.QHBoxLayout(container); h.setContentsMargins(0,0,0,0); h.setSpacing(6)
    h.addWidget(widget, 1)
    if reset_cb:
        h.addWidget(mk_reset(reset_cb), 0)
    h.addWidget(mk_info(tip), 0)
    lbl = QtWidgets.QLabel(label); lbl.setBuddy(widget)
    form.addRow(lbl, container)
    container._form_label = lbl  # type: ignore[attr-defined]
    return container

def spin(limits, value) -> QtWidgets.QSpinBox:
    """Integer spin box bounded by a ``(minimum, maximum, step)`` triple."""
    low, high, step = limits
    s = QtWidgets.QSpinBox(); s.setRange(low, high); s.setSingleStep(step); s.setValue(int(value))
    return s

def _apply(form_row: QtWidgets.QWidget, setter: str, flag: bool) -> None:
    for w in (form_row, getattr(form_row, "_form_label", None)):
        if w is not None:
            getattr(w, setter)(flag)

def set_enabled(form_row: QtWidgets.QWidget, enabled: bool) -> None:
    _apply(form_row, "setEnabled", enabled)

def set_visible(form_row: QtWidgets.QWidget, visible: bool) -> None:
    _apply(form_row, "setVisible", visible)
