"""
3D Visualization Widget (PyVista Wrapper)
"""
from __future__ import annotations

from typing import Optional
import logging

import numpy as np
import numpy.typing as npt

from PySide6.QtWidgets import QWidget, QVBoxLayout

from pyvistaqt import QtInteractor

from circlematrix.view.render_adapter import PyVistaRenderAdapter, configure_camera

logger = logging.getLogger(__name__)


class PyVistaWidget(QWidget):
    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)

        self.layout_box: QVBoxLayout = QVBoxLayout(self)
        self.layout_box.setContentsMargins(0, 0, 0, 0)

        self.plotter: QtInteractor = QtInteractor(self)
        self.layout_box.addWidget(self.plotter)

        self._init_plotter()

        # Scene controllers talk to the plotter only through this adapter
        self.adapter = PyVistaRenderAdapter(self.plotter)

    # ------------------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------------------

    def reset_view(self) -> None:
        configure_camera(self.plotter)
        self.plotter.render()

    def capture(self) -> npt.NDArray[np.uint8]:
        """Screenshot of the current frame as an (H, W, 3) uint8 array."""
        image = self.plotter.screenshot(transparent_background=False, return_img=True)
        logger.debug(f"Captured frame {image.shape[1]}x{image.shape[0]}.")
        return np.asarray(image, dtype=np.uint8)

    def close_plotter(self) -> None:
        self.plotter.close()

    # ------------------------------------------------------------------------------
    # Setup
    # ------------------------------------------------------------------------------

    def _init_plotter(self) -> None:
        self.plotter.enable_anti_aliasing("ssaa")
        self.plotter.enable_trackball_style()
        configure_camera(self.plotter)
