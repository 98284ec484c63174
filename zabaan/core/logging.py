"""
Centralized logging configuration.

Console output for development, a rotating file for everything else, and an
optional one-JSON-object-per-line format for log shipping.
"""

import logging
import logging.handlers
import os

from zabaan.core.config import BASE_DIR

LOGGER_NAME = "zabaan"


def configure_logging(
    log_level: str = "INFO",
    log_dir: str | None = None,
    json_format: bool = False,
) -> logging.Logger:
    """
    Configure the application logger.

    Args:
        log_level: DEBUG, INFO, WARNING or ERROR
        log_dir: directory for the rotating log file (default: <repo>/logs)
        json_format: emit structured JSON lines instead of plain text

    Returns:
        The configured ``zabaan`` logger.
    """
    if log_dir is None:
        log_dir = os.path.join(BASE_DIR, "logs")
    os.makedirs(log_dir, exist_ok=True)

    level = getattr(logging, log_level.upper(), logging.INFO)

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    logger.handlers.clear()

    if json_format:
        format_str = '{"time": "%(asctime)s", "level": "%(levelname)s", "module": "%(module)s", "message": "%(message)s"}'
    else:
        format_str = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
    formatter = logging.Formatter(format_str, datefmt="%Y-%m-%d %H:%M:%S")

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    file_handler = logging.handlers.RotatingFileHandler(
        os.path.join(log_dir, "zabaan.log"),
        maxBytes=10 * 1024 * 1024,  # 10 MB
        backupCount=5,
        encoding="utf-8",
    )
    file_handler.setLevel(level)
    file_handler.setFormatter(formatter)
    logger.addHandler(file_handler)

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

    logger.info("Logging initialized: level=%s, dir=%s", log_level, log_dir)
    return logger
