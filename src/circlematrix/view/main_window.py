"""
Main Application Window
=======================
The primary GUI container that holds the Menu Bar, the control tabs and the 3D view.

Why is this file needed?
------------------------
1. Layout: It organizes the high-level visual structure of the application.
2. Routing: It connects global actions (like Project -> Save) and panel edits
   to the scene controller and the IO manager.
"""
from typing import Any, Dict

from PySide6.QtWidgets import (
    QMainWindow, QWidget, QVBoxLayout, QSplitter, QTabBar, QStackedWidget,
    QScrollArea, QMessageBox, QInputDialog, QFileDialog, QApplication
)
from PySide6.QtCore import Qt
from PySide6.QtGui import QAction, QKeySequence
import json
import logging

from circlematrix.config import PROJECT, UI
from circlematrix.controller.scene import SceneController
from circlematrix.model.io import IOManager, build_share_url, parse_share_url
from circlematrix.model.settings import Settings, SettingsError
from circlematrix.model.state import ProjectState
from circlematrix.view.qt_scheduler import QtFrameScheduler
from circlematrix.view.tabs.base import RecordPanel
from circlematrix.view.tabs.tab_colors import ColorsControlPanel
from circlematrix.view.tabs.tab_layout import LayoutControlPanel
from circlematrix.view.widgets.plot_3d import PyVistaWidget

logger = logging.getLogger(__name__)


class MainWindow(QMainWindow):
    def __init__(self, project_state: ProjectState) -> None:
        super().__init__()
        self.project: ProjectState = project_state
        self.is_modified: bool = False

        self.resize(1400, 900)

        # --- MAIN CONTAINER ---
        main_widget = QWidget()
        self.setCentralWidget(main_widget)
        main_layout = QVBoxLayout(main_widget)
        main_layout.setContentsMargins(0, 0, 0, 0)
        main_layout.setSpacing(0)

        # --- 1. TOP TAB BAR ---
        self.tab_bar = QTabBar()
        self.tab_bar.setDrawBase(True)
        self.tab_bar.setExpanding(True)
        self.tab_bar.addTab("1. Layout")
        self.tab_bar.addTab("2. Colours")
        self.tab_bar.setStyleSheet("""
                    QTabBar::tab { height: 35px; min-width: 100px; }
                    QTabBar::tab:selected { font-weight: bold; }
                """)
        main_layout.addWidget(self.tab_bar)

        # --- 2. SPLITTER (CONTENT AREA) ---
        splitter = QSplitter(Qt.Horizontal)
        main_layout.addWidget(splitter)

        # --- LEFT SIDE: Control Panels (Stacked) ---
        self.layout_panel = LayoutControlPanel(self.project)
        self.colors_panel = ColorsControlPanel(self.project)
        self.panels: list[RecordPanel] = [self.layout_panel, self.colors_panel]

        self.controls_stack = QStackedWidget()
        for panel in self.panels:
            scroll = QScrollArea()
            scroll.setWidgetResizable(True)
            scroll.setWidget(panel)
            self.controls_stack.addWidget(scroll)
            panel.changes_requested.connect(self.on_changes_requested)
        splitter.addWidget(self.controls_stack)

        # --- RIGHT SIDE: 3D View ---
        self.visualizer = PyVistaWidget()
        splitter.addWidget(self.visualizer)
        splitter.setSizes([380, 1020])

        # --- SCENE ---
        self.scheduler = QtFrameScheduler(parent=self)
        self.scene = SceneController(self.visualizer.adapter, self.scheduler, self.project)
        self.scene.on_settings_changed = self.on_settings_changed
        self.scene.animation.on_finished = self._sync_animation_action

        # --- ACTIONS & MENUS ---
        self._create_actions()
        self._create_menus()

        # --- CONNECTIONS ---
        self.tab_bar.currentChanged.connect(self.controls_stack.setCurrentIndex)
        self.colors_panel.btn_regenerate.clicked.connect(self.on_regenerate_colors)

        # Initial Render
        self.scene.build()
        self.visualizer.reset_view()
        self.update_window_title()

    def _create_actions(self) -> None:
        # Project Actions
        self.act_new = QAction("New Project", self)
        self.act_new.setShortcut(QKeySequence.StandardKey.New)
        self.act_new.triggered.connect(self.on_project_new)

        self.act_open = QAction("Open Project...", self)
        self.act_open.setShortcut("Ctrl+O")
        self.act_open.triggered.connect(self.on_project_open)

        self.act_save = QAction("Save Project", self)
        self.act_save.setShortcut("Ctrl+S")
        self.act_save.triggered.connect(self.on_project_save)

        self.act_save_as = QAction("Save Project As...", self)
        self.act_save_as.setShortcut("Ctrl+Shift+S")
        self.act_save_as.triggered.connect(self.on_project_save_as)

        self.act_rename = QAction("Rename Project...", self)
        self.act_rename.triggered.connect(self.on_project_rename)

        self.act_delete = QAction("Delete Project...", self)
        self.act_delete.triggered.connect(self.on_project_delete)

        self.act_import = QAction("Import Settings...", self)
        self.act_import.triggered.connect(self.on_settings_import)

        self.act_export = QAction("Export Settings...", self)
        self.act_export.triggered.connect(self.on_settings_export)

        self.act_exit = QAction("Exit", self)
        self.act_exit.triggered.connect(self.close)

        # Scene Actions
        self.act_regenerate = QAction("Regenerate Colours", self)
        self.act_regenerate.setShortcut("Ctrl+R")
        self.act_regenerate.triggered.connect(self.on_regenerate_colors)

        self.act_animate = QAction("Rotate 360°", self)
        self.act_animate.setShortcut("Space")
        self.act_animate.setCheckable(True)
        self.act_animate.triggered.connect(self.on_toggle_animation)

        self.act_reset_camera = QAction("Reset Camera", self)
        self.act_reset_camera.triggered.connect(self.visualizer.reset_view)

        self.act_capture = QAction("Capture Screenshot", self)
        self.act_capture.setShortcut("Ctrl+P")
        self.act_capture.triggered.connect(self.on_capture)

        # Share Actions
        self.act_copy_url = QAction("Copy Share URL", self)
        self.act_copy_url.triggered.connect(self.on_copy_share_url)

        self.act_open_url = QAction("Open Share URL...", self)
        self.act_open_url.triggered.connect(self.on_open_share_url)

    def _create_menus(self) -> None:
        menu_bar = self.menuBar()

        project_menu = menu_bar.addMenu("&Project")
        project_menu.addAction(self.act_new)
        project_menu.addSeparator()
        project_menu.addAction(self.act_open)
        project_menu.addAction(self.act_save)
        project_menu.addAction(self.act_save_as)
        project_menu.addAction(self.act_rename)
        project_menu.addAction(self.act_delete)
        project_menu.addSeparator()
        project_menu.addAction(self.act_import)
        project_menu.addAction(self.act_export)
        project_menu.addSeparator()
        project_menu.addAction(self.act_exit)

        scene_menu = menu_bar.addMenu("&Scene")
        scene_menu.addAction(self.act_regenerate)
        scene_menu.addAction(self.act_animate)
        scene_menu.addSeparator()
        scene_menu.addAction(self.act_reset_camera)
        scene_menu.addAction(self.act_capture)

        share_menu = menu_bar.addMenu("S&hare")
        share_menu.addAction(self.act_copy_url)
        share_menu.addAction(self.act_open_url)

    # --- HELPER METHODS ---
    def update_window_title(self) -> None:
        """Updates the window title based on project name and dirty state."""
        title = f"{UI['WINDOW_TITLE']} - [{self.project.project_name}"
        if self.is_modified:
            title += "*"
        title += "]"
        self.setWindowTitle(title)

    def set_modified(self, modified: bool) -> None:
        if self.is_modified != modified:
            self.is_modified = modified
            self.update_window_title()

    def refresh_ui_from_state(self) -> None:
        """Force every panel to read from the state again."""
        for panel in self.panels:
            panel.load_from_state()

    def _project_names(self) -> list[str]:
        try:
            return [entry.name for entry in IOManager.list_projects()]
        except (KeyError, ValueError) as e:
            QMessageBox.critical(self, "Error", f"Could not read the project library:\n{e}")
            return []

    def _choose_project(self, title: str) -> str:
        names = self._project_names()
        if not names:
            QMessageBox.information(self, title, "No saved projects.")
            return ""
        name, ok = QInputDialog.getItem(self, title, "Project:", names, len(names) - 1, False)
        return name if ok else ""

    # --- SCENE SLOTS ---

    def on_changes_requested(self, changes: Dict[str, Any]) -> None:
        """Slot for panel edits (record-keyed)."""
        try:
            self.scene.update(**changes)
        except SettingsError as e:
            self.statusBar().showMessage(str(e), 5000)
            self.refresh_ui_from_state()

    def on_settings_changed(self, settings: Settings) -> None:
        self.set_modified(True)
        self.refresh_ui_from_state()

    def on_regenerate_colors(self) -> None:
        seed = self.scene.regenerate_colors()
        self.set_modified(True)
        self.statusBar().showMessage(f"New colour seed: {seed}", 3000)

    def on_toggle_animation(self) -> None:
        self.scene.toggle_rotation_animation()
        self._sync_animation_action()

    def _sync_animation_action(self) -> None:
        self.act_animate.setChecked(self.scene.animation.is_animating)

    def on_capture(self) -> None:
        try:
            image = self.visualizer.capture()
            key = IOManager.save_capture(image, project_name=self.project.project_name)
        except Exception as e:
            QMessageBox.critical(self, "Error", f"Could not save the capture:\n{e}")
            return
        self.statusBar().showMessage(f"Capture {key} saved.", 3000)

    # --- PROJECT SLOTS ---

    def on_project_new(self) -> None:
        self.scene.reset()
        self.set_modified(False)
        self.update_window_title()

    def on_project_open(self) -> None:
        name = self._choose_project("Open Project")
        if not name:
            return
        try:
            IOManager.load_project(self.project, name)
        except Exception as e:
            QMessageBox.critical(self, "Error", f"Could not open project:\n{e}")
            return
        self.scene.reload()
        self.is_modified = False
        self.update_window_title()

    def on_project_save(self) -> None:
        if self.project.active_project:
            self._save_as(self.project.active_project)
        else:
            self.on_project_save_as()

    def on_project_save_as(self) -> None:
        name, ok = QInputDialog.getText(self, "Save Project", "Project name:", text=self.project.project_name)
        if ok and name.strip():
            self._save_as(name.strip())

    def _save_as(self, name: str) -> None:
        try:
            IOManager.save_project(self.project, name, preview=self.visualizer.capture())
        except Exception as e:
            QMessageBox.critical(self, "Error", f"Could not save project:\n{e}")
            return
        self.is_modified = False
        self.update_window_title()
        self.statusBar().showMessage(f"Project '{name}' saved.", 3000)

    def on_project_rename(self) -> None:
        old_name = self._choose_project("Rename Project")
        if not old_name:
            return
        new_name, ok = QInputDialog.getText(self, "Rename Project", "New name:", text=old_name)
        if not ok or not new_name.strip():
            return
        try:
            IOManager.rename_project(old_name, new_name.strip(), state=self.project)
        except (KeyError, ValueError) as e:
            QMessageBox.critical(self, "Error", f"Could not rename project:\n{e}")
            return
        self.update_window_title()

    def on_project_delete(self) -> None:
        name = self._choose_project("Delete Project")
        if not name:
            return
        reply = QMessageBox.question(self, "Delete Project", f"Delete project '{name}'?")
        if reply != QMessageBox.Yes:
            return
        try:
            IOManager.delete_project(name, state=self.project)
        except KeyError as e:
            QMessageBox.critical(self, "Error", f"Could not delete project:\n{e}")

    def on_settings_import(self) -> None:
        fname, _ = QFileDialog.getOpenFileName(self, "Import Settings", "", "JSON Files (*.json)")
        if not fname:
            return
        try:
            with open(fname, "r", encoding="utf-8") as fh:
                record = json.load(fh)
            self.scene.load_record(record)
        except (OSError, ValueError) as e:
            QMessageBox.critical(self, "Error", f"Could not import settings:\n{e}")

    def on_settings_export(self) -> None:
        fname, _ = QFileDialog.getSaveFileName(self, "Export Settings", "", "JSON Files (*.json)")
        if not fname:
            return
        if not fname.endswith(".json"):
            fname += ".json"
        try:
            IOManager.save_settings_json(self.project, fname)
        except OSError as e:
            QMessageBox.critical(self, "Error", f"Could not export settings:\n{e}")

    # --- SHARE SLOTS ---

    def on_copy_share_url(self) -> None:
        url = build_share_url(self.project.to_record(), PROJECT["SHARE_BASE_URL"])
        QApplication.clipboard().setText(url)
        self.statusBar().showMessage("Share URL copied to clipboard.", 3000)

    def on_open_share_url(self) -> None:
        url, ok = QInputDialog.getText(self, "Open Share URL", "URL:")
        if not ok or not url.strip():
            return
        self.apply_share_url(url.strip())

    def apply_share_url(self, url: str) -> bool:
        record = parse_share_url(url)
        if record is None:
            QMessageBox.warning(self, "Share URL", "The URL does not contain a project.")
            return False
        try:
            self.scene.load_record(record)
        except SettingsError as e:
            QMessageBox.critical(self, "Share URL", f"The shared project is invalid:\n{e}")
            return False
        return True

    def closeEvent(self, event, /) -> None:
        """Autosave the session, release the scene and close the plotter."""
        self.scene.dispose()
        self.scheduler.cancel_all()
        logger.debug(f"Live render resources after dispose: {self.visualizer.adapter.live_counts}")
        try:
            IOManager.save_settings_json(self.project)
        except OSError as e:
            logger.warning(f"Could not autosave settings: {e}")

        if self.visualizer and self.visualizer.plotter:
            self.visualizer.close_plotter()

        event.accept()
