"""
Layout Control Panel
Grid dimensions, shape and the cylinder/rotation transform.
"""
from typing import Optional

from PySide6.QtWidgets import QWidget, QVBoxLayout, QGroupBox, QFormLayout

from circlematrix.model.settings import CylinderAxis, ShapeKind
from circlematrix.model.state import ProjectState
from circlematrix.view.tabs.base import RecordPanel


class LayoutControlPanel(RecordPanel):
    def __init__(self, project_state: ProjectState, parent: Optional[QWidget] = None) -> None:
        super().__init__(project_state, parent)
        layout = QVBoxLayout(self)

        # 1. Grid
        grid_group = QGroupBox("Grid")
        form = QFormLayout(grid_group)
        form.addRow("Rows:", self._int_field("rows", 1, 100))
        form.addRow("Columns:", self._int_field("cols", 1, 100))
        form.addRow("Row spacing:", self._float_field("rowSpacing", 0.1, 20.0, 0.1))
        form.addRow("Column spacing:", self._float_field("colSpacing", 0.1, 20.0, 0.1))
        layout.addWidget(grid_group)

        # 2. Shape
        shape_group = QGroupBox("Shape")
        form = QFormLayout(shape_group)
        form.addRow("Type:", self._choice_field("shapeType", {
            str(ShapeKind.DISC): "Circle", str(ShapeKind.QUAD): "Rectangle",
        }))
        form.addRow("Circle radius:", self._float_field("circleRadius", 0.05, 10.0, 0.05))
        form.addRow("Rectangle width:", self._float_field("rectangleWidth", 0.05, 20.0, 0.05))
        form.addRow("Rectangle height:", self._float_field("rectangleHeight", 0.05, 20.0, 0.05))
        form.addRow("Border thickness:", self._float_field("borderThickness", 0.01, 0.49, 0.01))
        form.addRow(self._bool_field("enableWidthScaling", "Scale width across columns"))
        form.addRow("Width scale factor:", self._float_field("widthScaleFactor", 1.0, 10.0, 0.1))
        layout.addWidget(shape_group)

        # 3. Transform
        transform_group = QGroupBox("Transform")
        form = QFormLayout(transform_group)
        form.addRow("Cylinder axis:", self._choice_field("cylinderAxis", {
            str(CylinderAxis.Y): "Y (wrap columns)", str(CylinderAxis.X): "X (wrap rows)",
        }))
        form.addRow("Curvature:", self._float_field("cylinderCurvature", 0.0, 1.0, 0.05))
        form.addRow("Cylinder radius:", self._float_field("cylinderRadius", 0.5, 100.0, 0.5))
        for axis in "XYZ":
            form.addRow(
                f"Rotation {axis} [rad]:",
                self._float_field(f"rotation{axis}", -1000.0, 1000.0, 0.05, decimals=3)
            )
        for axis in "XYZ":
            form.addRow(f"Position {axis}:", self._float_field(f"objectPosition{axis}", -50.0, 50.0, 0.1))
        layout.addWidget(transform_group)

        layout.addStretch()
        self.load_from_state()
