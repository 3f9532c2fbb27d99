"""
Application Initialization
==========================
This module constructs the MVC (Model-View-Controller) architecture and starts
the Qt Event Loop.

Why is this file needed?
------------------------
It acts as the "Dependency Injection" root. It:
1. Instantiates the Global Data Model (ProjectState) and restores the last session.
2. Instantiates the Main Window (View), which builds the scene controller.
3. Applies a share URL passed on the command line.
"""
from typing import Optional
import logging
import sys

from PySide6.QtWidgets import QApplication

from circlematrix.config import SETTINGS_PATH, UI
from circlematrix.logging_config import setup_logging
from circlematrix.model.io import IOManager
from circlematrix.model.state import ProjectState
from circlematrix.view.main_window import MainWindow


def main(share_url: Optional[str] = None, log_level: int = logging.INFO, log_file: Optional[str] = None) -> int:
    # 1. Setup Logging (Console + Optional File)
    setup_logging(level=log_level, log_file=log_file)

    # 2. Create the Qt Application
    app = QApplication.instance() or QApplication(sys.argv)
    app.setApplicationName(UI["WINDOW_TITLE"])

    # 3. Initialize the Data Model (last session, if any)
    project = ProjectState()
    IOManager.load_settings_json(project, SETTINGS_PATH)

    # 4. Initialize the Main Window, passing the model
    window = MainWindow(project)
    if share_url:
        window.apply_share_url(share_url)
    window.show()

    # 5. Start Event Loop
    return app.exec()


if __name__ == "__main__":
    sys.exit(main())
