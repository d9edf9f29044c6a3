# clusterlab/control/control_window.py
import copy
from typing import Optional

from PyQt5 import QtWidgets, QtCore, QtGui

from .config import defaults_for
from .display_tab import DisplayTab
from .profile_manager import ProfileManager
from .simulation_tab import SimulationTab

_ALGORITHM_LABELS = {"kmeans": "K-means", "tsne": "t-SNE"}


class ControlWindow(QtWidgets.QMainWindow):
    """Command toolbar, parameter tabs and profiles for one session."""

    def __init__(self, app: QtWidgets.QApplication, session, profile_mgr: Optional[ProfileManager] = None):
        super().__init__(None)
        self.session = session
        self.mode = session.kind
        self.profile_mgr = profile_mgr if profile_mgr is not None else ProfileManager()
        self._loading_profile = False
        self._dirty = False
        self.state = defaults_for(self.mode)
        self.current_profile = ProfileManager.DEFAULT_PROFILE

        self._build_profile_bar(app)
        self.addToolBarBreak(QtCore.Qt.TopToolBarArea)
        self._build_simulation_bar()

        status = QtWidgets.QStatusBar()
        status.setSizeGripEnabled(False)
        self.setStatusBar(status)
        self.lbl_progress = QtWidgets.QLabel()
        status.addPermanentWidget(self.lbl_progress)

        # Onglets
        self.tabs = QtWidgets.QTabWidget()
        self.tabs.setDocumentMode(True)
        self.tab_simulation = SimulationTab(self.mode)
        self.tab_display = DisplayTab()
        self.tabs.addTab(self.tab_simulation, "Simulation")
        self.tabs.addTab(self.tab_display, "Affichage")
        for tab in (self.tab_simulation, self.tab_display):
            tab.changed.connect(self.on_delta)
        self.setCentralWidget(self.tabs)

        session.subscribe(self.on_snapshot)
        self.on_snapshot(session.snapshot())
        self.load_profile(self.current_profile)
        self.resize(520, 420)

    # ----------------------------------------------------------------- layout
    def _toolbar(self, title: str) -> QtWidgets.QToolBar:
        bar = QtWidgets.QToolBar(title)
        bar.setMovable(False)
        bar.setFloatable(False)
        bar.setIconSize(QtCore.QSize(18, 18))
        self.addToolBar(QtCore.Qt.TopToolBarArea, bar)
        return bar

    def _action(self, bar, icon, text, slot, shortcut=None):
        act = QtWidgets.QAction(self.style().standardIcon(icon), text, self)
        if shortcut:
            act.setShortcut(QtGui.QKeySequence(shortcut))
            act.setShortcutContext(QtCore.Qt.ApplicationShortcut)
            self.addAction(act)
        act.setToolTip(text)
        act.setStatusTip(text)
        act.triggered.connect(lambda checked=False, _slot=slot: _slot())
        bar.addAction(act)
        return act

    def _build_profile_bar(self, app):
        S = QtWidgets.QStyle
        bar = self._toolbar("Profils")
        self._action(bar, S.SP_TitleBarCloseButton, "Quitter", app.quit, "Ctrl+Q")
        bar.addSeparator()
        bar.addWidget(QtWidgets.QLabel("Profil :"))
        self.cb_profiles = QtWidgets.QComboBox()
        self.cb_profiles.setSizeAdjustPolicy(QtWidgets.QComboBox.AdjustToContents)
        self.cb_profiles.setMinimumContentsLength(8)
        self.cb_profiles.currentTextChanged.connect(self.on_profile_selected)
        bar.addWidget(self.cb_profiles)
        self.act_save_profile = self._action(bar, S.SP_DialogSaveButton, "Sauver", self.save_profile, "Ctrl+S")
        self.act_save_as_profile = self._action(bar, S.SP_DialogOpenButton, "Sauver sous…", self.save_profile_as, "Ctrl+Shift+S")
        self.act_rename_profile = self._action(bar, S.SP_FileDialogNewFolder, "Renommer", self.rename_profile)
        self.act_delete_profile = self._action(bar, S.SP_TrashIcon, "Supprimer", self.delete_profile)
        self.act_reload_profile = self._action(bar, S.SP_BrowserReload, "Recharger", self.reload_profile, "F5")

    def _build_simulation_bar(self):
        S = QtWidgets.QStyle
        session = self.session
        bar = self._toolbar("Simulation")
        bar.setToolButtonStyle(QtCore.Qt.ToolButtonTextBesideIcon)
        self.act_run = self._action(bar, S.SP_MediaPlay, "Démarrer", session.toggle_running, "Ctrl+Space")
        self.act_step = self._action(bar, S.SP_MediaSkipForward, "Pas", session.step, "Ctrl+Right")
        self.act_reset = self._action(bar, S.SP_DialogResetButton, "Réinitialiser", self.reset_simulation, "Ctrl+R")
        self.act_regenerate = self._action(bar, S.SP_BrowserReload, "Nouveau jeu", session.regenerate)
        self.act_final = None
        if self.mode == "tsne":
            self.act_final = self._action(bar, S.SP_MediaSeekForward, "Résultat final", session.show_final)
        bar.addSeparator()
        self.act_zoom_tool = self._action(bar, S.SP_FileDialogContentsView, "Outil zoom", session.toggle_zoom_tool)
        self.act_pan_tool = self._action(bar, S.SP_ArrowUp, "Outil déplacement", session.toggle_pan_tool)
        for act in (self.act_zoom_tool, self.act_pan_tool):
            act.setCheckable(True)
        self._action(bar, S.SP_ArrowUp, "Zoom +", session.zoom_in, "Ctrl++")
        self._action(bar, S.SP_ArrowDown, "Zoom −", session.zoom_out, "Ctrl+-")
        self._action(bar, S.SP_DialogResetButton, "Vue initiale", session.reset_view, "Ctrl+0")

    # --------------------------------------------------------------- session
    def on_snapshot(self, snap):
        running = snap.running
        if running:
            self.act_run.setText("Pause")
            self.act_run.setIcon(self.style().standardIcon(QtWidgets.QStyle.SP_MediaPause))
        else:
            self.act_run.setText("Recommencer" if snap.complete else "Démarrer")
            self.act_run.setIcon(self.style().standardIcon(QtWidgets.QStyle.SP_MediaPlay))
        self.act_step.setEnabled(not running and not snap.complete)
        self.act_regenerate.setEnabled(not running)
        if self.act_final is not None:
            self.act_final.setEnabled(not running and not snap.complete)
        for act, flag in ((self.act_zoom_tool, snap.transform.zoom_tool), (self.act_pan_tool, snap.transform.pan_tool)):
            with QtCore.QSignalBlocker(act):
                act.setChecked(flag)
        self.tab_simulation.set_running(running)
        if snap.complete:
            phase = "convergence atteinte" if snap.kind == "kmeans" else "terminé"
        elif running:
            phase = "en cours"
        else:
            phase = "en attente"
        self.lbl_progress.setText(
            f"Itération {snap.iteration}/{snap.max_iterations} · {phase} · zoom ×{snap.transform.zoom:.2f}"
        )

    def reset_simulation(self):
        self.session.reset()
        self.statusBar().showMessage("Simulation réinitialisée", 3000)

    def push_params(self):
        self.session.set_params(self.state)

    def on_delta(self, delta: dict):
        for section, values in delta.items():
            self.state.setdefault(section, {}).update(values)
        if not self._loading_profile:
            self.set_dirty(not self.profile_mgr.profile_equals(self.current_profile, self.state))
        self.push_params()

    def collect_state(self) -> dict:
        return dict(simulation=self.tab_simulation.collect(), view=self.tab_display.collect())

    # ----------------------------------------------------------------- profil
    def refresh_profiles(self, select: Optional[str] = None):
        names = list(self.profile_mgr.list_profiles(self.mode))
        target = select if select in names else ProfileManager.DEFAULT_PROFILE
        with QtCore.QSignalBlocker(self.cb_profiles):
            self.cb_profiles.clear()
            self.cb_profiles.addItems(names)
            self.cb_profiles.setCurrentIndex(max(0, self.cb_profiles.findText(target)))

    def on_profile_selected(self, name: str):
        if name and not self._loading_profile:
            self.load_profile(name)

    def load_profile(self, name: str):
        """Fill the tabs from profile ``name`` and push it to the session."""
        defaults = defaults_for(self.mode)
        if name == ProfileManager.DEFAULT_PROFILE:
            profile = defaults
        else:
            profile = self.profile_mgr.get_profile(name, defaults)
        self._loading_profile = True
        try:
            self.state = copy.deepcopy(profile)
            self.tab_simulation.set_defaults(self.state.get("simulation"))
            self.tab_display.set_defaults(self.state.get("view"))
        finally:
            self._loading_profile = False
        self.current_profile = name
        self.refresh_profiles(select=name)
        self.set_dirty(False)
        self.push_params()
        self.statusBar().showMessage(f"Profil '{name}' chargé", 3000)

    def reload_profile(self):
        self.load_profile(self.current_profile)

    def _ask_name(self, title: str, prompt: str, suggestion: str = "") -> Optional[str]:
        name, ok = QtWidgets.QInputDialog.getText(self, title, prompt, text=suggestion)
        name = name.strip()
        return name if ok and name else None

    def _confirm(self, title: str, question: str) -> bool:
        return QtWidgets.QMessageBox.question(self, title, question) == QtWidgets.QMessageBox.Yes

    def _refuse_default(self, participle: str) -> bool:
        if self.current_profile != ProfileManager.DEFAULT_PROFILE:
            return False
        QtWidgets.QMessageBox.information(
            self, "Action impossible", f"Le profil par défaut ne peut pas être {participle}."
        )
        return True

    def _store(self, call, *args) -> bool:
        """Run a profile manager call; failures end up in a message box."""
        try:
            call(*args)
        except (OSError, KeyError, ValueError) as exc:
            QtWidgets.QMessageBox.warning(self, "Erreur", str(exc))
            return False
        return True

    def _profile_changed(self, name: str, message: str):
        self.current_profile = name
        self.refresh_profiles(select=name)
        self.set_dirty(False)
        self.statusBar().showMessage(message, 3000)

    def save_profile(self):
        if self.current_profile == ProfileManager.DEFAULT_PROFILE:
            self.save_profile_as()
            return
        state = self.collect_state()
        if self._store(self.profile_mgr.save_profile, self.current_profile, state):
            self.state.update(state)
            self._profile_changed(self.current_profile, f"Profil '{self.current_profile}' enregistré")

    def save_profile_as(self):
        suggestion = "" if self.current_profile == ProfileManager.DEFAULT_PROFILE else self.current_profile
        name = self._ask_name("Sauver le profil", "Nom du profil :", suggestion)
        if name is None:
            return
        if name == ProfileManager.DEFAULT_PROFILE:
            QtWidgets.QMessageBox.warning(self, "Nom invalide", "Veuillez saisir un autre nom de profil.")
            return
        if (name != self.current_profile and self.profile_mgr.has_profile(name)
                and not self._confirm("Écraser le profil", f"Le profil '{name}' existe déjà. L'écraser ?")):
            return
        state = self.collect_state()
        if self._store(self.profile_mgr.save_profile, name, state):
            self.state.update(state)
            self._profile_changed(name, f"Profil '{name}' enregistré")

    def rename_profile(self):
        if self._refuse_default("renommé"):
            return
        name = self._ask_name("Renommer le profil", "Nouveau nom :", self.current_profile)
        if name is None or name == self.current_profile:
            return
        if self._store(self.profile_mgr.rename_profile, self.current_profile, name):
            self._profile_changed(name, f"Profil renommé en '{name}'")

    def delete_profile(self):
        if self._refuse_default("supprimé"):
            return
        if not self._confirm("Supprimer le profil", f"Supprimer définitivement le profil '{self.current_profile}' ?"):
            return
        if self._store(self.profile_mgr.delete_profile, self.current_profile):
            self.load_profile(ProfileManager.DEFAULT_PROFILE)
            self.statusBar().showMessage("Profil supprimé", 3000)

    def set_dirty(self, dirty: bool):
        self._dirty = dirty
        editable = self.current_profile != ProfileManager.DEFAULT_PROFILE
        for act in (self.act_rename_profile, self.act_delete_profile):
            act.setEnabled(editable)
        self.update_window_title()

    def update_window_title(self):
        algorithm = _ALGORITHM_LABELS.get(self.mode, self.mode)
        self.setWindowTitle(f"Clusterlab - {algorithm} - {self.current_profile}{'*' if self._dirty else ''}")

    def closeEvent(self, event: QtGui.QCloseEvent) -> None:  # type: ignore[override]
        self.session.unsubscribe(self.on_snapshot)
        super().closeEvent(event)
