# logger_utils.py

import logging
import os

# Log next to the sources unless ORPHEUS_LOG_PATH says otherwise
LOG_PATH = os.getenv(
    "ORPHEUS_LOG_PATH", os.path.join(os.path.dirname(__file__), "orpheus.log")
)


def setup_logger(name: str, log_path: str | None = None) -> logging.Logger:
    """
    Set up and return a file logger; the terminal belongs to the TUI.
    """
    logger = logging.getLogger(name)
    if log_path is None:
        log_path = LOG_PATH
    if not logger.handlers:
        if os.path.dirname(log_path):
            os.makedirs(os.path.dirname(log_path), exist_ok=True)
        handler = logging.FileHandler(log_path, encoding="utf-8")
        formatter = logging.Formatter("[%(asctime)s] %(levelname)s: %(message)s")
        handler.setFormatter(formatter)
        logger.setLevel(logging.DEBUG)
        logger.addHandler(handler)
        logger.propagate = False
    return logger

