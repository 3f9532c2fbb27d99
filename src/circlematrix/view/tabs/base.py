from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

from PySide6.QtCore import Signal
from PySide6.QtGui import QColor
from PySide6.QtWidgets import (
    QWidget, QDoubleSpinBox, QSpinBox, QComboBox, QCheckBox, QPushButton, QColorDialog
)

from circlematrix.model.state import ProjectState


class ColorButton(QPushButton):
    """Swatch button; emits a record value (RGBA dict, or '#rrggbb' without alpha)."""
    color_picked = Signal(object)

    def __init__(self, with_alpha: bool = True, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.with_alpha = with_alpha
        self._color = QColor("black")
        self.setFixedHeight(24)
        self.clicked.connect(self._pick)

    def set_value(self, value: Any) -> None:
        if isinstance(value, Mapping):
            self._color = QColor(value["r"], value["g"], value["b"], round(value["a"] * 255))
        else:
            self._color = QColor(value)
        self.setStyleSheet(f"background-color: {self._color.name()}; border: 1px solid #888;")

    def _pick(self) -> None:
        if self.with_alpha:
            color = QColorDialog.getColor(
                self._color, self, "Choose colour", QColorDialog.ColorDialogOption.ShowAlphaChannel
            )
        else:
            color = QColorDialog.getColor(self._color, self, "Choose colour")
        if not color.isValid():
            return
        if self.with_alpha:
            self.color_picked.emit({
                "r": color.red(), "g": color.green(), "b": color.blue(), "a": round(color.alphaF(), 3)
            })
        else:
            self.color_picked.emit(color.name())


class RecordPanel(QWidget):
    """
    Base class for left-side panels.

    Every input is bound to one settings-record key. Edits are emitted as
    `{key: value}`; the main window applies them through the scene controller.
    """
    changes_requested = Signal(dict)

    def __init__(self, project_state: ProjectState, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.project = project_state
        self._fields: Dict[str, QWidget] = {}

    # --- Field factories ---

    def _float_field(self, key: str, minimum: float, maximum: float, step: float, decimals: int = 2) -> QDoubleSpinBox:
        spin = QDoubleSpinBox()
        spin.setRange(minimum, maximum)
        spin.setSingleStep(step)
        spin.setDecimals(decimals)
        spin.setKeyboardTracking(False)
        spin.valueChanged.connect(lambda v, k=key: self._request(k, v))
        self._fields[key] = spin
        return spin

    def _int_field(self, key: str, minimum: int, maximum: int) -> QSpinBox:
        spin = QSpinBox()
        spin.setRange(minimum, maximum)
        spin.setKeyboardTracking(False)
        spin.valueChanged.connect(lambda v, k=key: self._request(k, v))
        self._fields[key] = spin
        return spin

    def _choice_field(self, key: str, choices: Mapping[str, str]) -> QComboBox:
        """`choices` maps record values to labels."""
        combo = QComboBox()
        for value, label in choices.items():
            combo.addItem(label, value)
        combo.currentIndexChanged.connect(lambda _, k=key, c=combo: self._request(k, c.currentData()))
        self._fields[key] = combo
        return combo

    def _bool_field(self, key: str, label: str) -> QCheckBox:
        check = QCheckBox(label)
        check.toggled.connect(lambda v, k=key: self._request(k, v))
        self._fields[key] = check
        return check

    def _color_field(self, key: str, with_alpha: bool = True) -> ColorButton:
        button = ColorButton(with_alpha)
        button.color_picked.connect(lambda v, k=key: self._request(k, v))
        self._fields[key] = button
        return button

    # --- State sync ---

    def load_from_state(self) -> None:
        """Push the current settings into every bound widget without emitting."""
        record = self.project.to_record()
        for key, widget in self._fields.items():
            widget.blockSignals(True)
            try:
                value = record[key]
                if isinstance(widget, (QDoubleSpinBox, QSpinBox)):
                    widget.setValue(value)
                elif isinstance(widget, QComboBox):
                    widget.setCurrentIndex(max(widget.findData(value), 0))
                elif isinstance(widget, QCheckBox):
                    widget.setChecked(value)
                elif isinstance(widget, ColorButton):
                    widget.set_value(value)
            finally:
                widget.blockSignals(False)

    def _request(self, key: str, value: Any) -> None:
        self.changes_requested.emit({key: value})
