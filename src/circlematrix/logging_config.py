"""
Logging Configuration
Sets up the global logger for the application.
"""
import logging
import sys
from typing import Optional, Sequence

# Third-party loggers that flood the console at DEBUG level
NOISY_LOGGERS: tuple[str, ...] = ("pyvista", "vtkmodules", "h5py")


def setup_logging(
    level: int = logging.INFO,
    log_file: Optional[str] = None,
    quiet: Sequence[str] = NOISY_LOGGERS
) -> None:
    """
    Configures the root logger for the 'circlematrix' namespace.

    Args:
        level: Logging level (e.g. logging.DEBUG, logging.INFO)
        log_file: Optional path to save logs to a file.
        quiet: Names of third-party loggers capped at WARNING.
    """
    for name in quiet:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    logger = logging.getLogger("circlematrix")
    logger.setLevel(level)

    # Avoid duplicate handlers when the app is restarted in the same process
    if logger.hasHandlers():
        logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)

    # Format: Time - Module - Level - Message
    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%H:%M:%S'
    )
    console_handler.setFormatter(formatter)

    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, mode='w', encoding='utf-8')
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.info("Logging initialized.")
