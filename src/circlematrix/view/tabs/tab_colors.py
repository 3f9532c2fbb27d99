"""
Colours Control Panel
Three colour groups (fill, stroke, frequency, sync), background and animation speed.
"""
from typing import Optional

from PySide6.QtWidgets import QWidget, QVBoxLayout, QGroupBox, QFormLayout, QPushButton

from circlematrix.config import ANIMATION
from circlematrix.model.state import ProjectState
from circlematrix.view.tabs.base import RecordPanel


class ColorsControlPanel(RecordPanel):
    def __init__(self, project_state: ProjectState, parent: Optional[QWidget] = None) -> None:
        super().__init__(project_state, parent)
        layout = QVBoxLayout(self)

        for i in (1, 2, 3):
            group = QGroupBox(f"Colour group {i}")
            form = QFormLayout(group)
            form.addRow("Fill:", self._color_field(f"fill{i}"))
            form.addRow("Stroke:", self._color_field(f"stroke{i}"))
            form.addRow(self._bool_field(f"syncColors{i}", "Stroke follows fill"))
            form.addRow("Frequency:", self._float_field(f"frequency{i}", 0.0, 100.0, 0.5))
            layout.addWidget(group)

        scene_group = QGroupBox("Scene")
        form = QFormLayout(scene_group)
        form.addRow("Background:", self._color_field("backgroundColor", with_alpha=False))
        form.addRow("Animation speed:", self._float_field(
            "animationSpeed", ANIMATION["MIN_SPEED"], ANIMATION["MAX_SPEED"], 0.1
        ))
        layout.addWidget(scene_group)

        # Wired by the main window to SceneController.regenerate_colors
        self.btn_regenerate = QPushButton("Regenerate colours")
        self.btn_regenerate.setFixedHeight(36)
        layout.addWidget(self.btn_regenerate)

        layout.addStretch()
        self.load_from_state()
