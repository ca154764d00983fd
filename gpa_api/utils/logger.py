import logging
from pathlib import Path
from typing import Optional

LOGGER_NAME = "gpa_api"


def setup_logger(level: str = "INFO", log_file: Optional[Path] = None) -> logging.Logger:
    """Configures and returns the package logger."""
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level.upper())

    # Prevent adding multiple handlers if called more than once
    if not logger.handlers:
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(logging.Formatter("%(levelname)s: %(name)s: %(message)s"))
        logger.addHandler(console_handler)

        if log_file is not None:
            log_file.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(log_file, encoding="utf-8")
            file_handler.setFormatter(
                logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
            )
            logger.addHandler(file_handler)

    return logger
