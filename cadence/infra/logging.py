from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from cadence.config import PROJECT_ROOT, Settings

PACKAGE_LOGGER = "cadence"
LOG_FILE_NAME = "cadence.log"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def setup_logging(settings: Settings) -> Path:
    """Send ``cadence.*`` records to a rotating file and the console.

    Handlers go on the package logger, not the root. Calling this again
    replaces them. Returns the log file path.
    """
    log_dir = PROJECT_ROOT / settings.log_dir
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / LOG_FILE_NAME
    level = logging.getLevelName(settings.log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    formatter = logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    file_handler = RotatingFileHandler(log_file, maxBytes=2_000_000, backupCount=3, encoding="utf-8")
    file_handler.setFormatter(formatter)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)

    package_logger = logging.getLogger(PACKAGE_LOGGER)
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
        handler.close()
    package_logger.addHandler(file_handler)
    package_logger.addHandler(console_handler)
    package_logger.setLevel(level)
    package_logger.propagate = False

    # SQL echo only at DEBUG
    logging.getLogger("sqlalchemy.engine").setLevel(
        logging.INFO if level <= logging.DEBUG else logging.WARNING
    )
    return log_file
