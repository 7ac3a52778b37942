"""Logging configuration for backend application."""

from __future__ import annotations

import logging
import logging.handlers
from pathlib import Path


# Module-level flag to track if logging has been configured
_logging_configured = False

LOG_FORMAT = "%(asctime)s %(levelname)-5s %(name)s %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

APP_LOGGERS = (
    "ludicboard",
    "ludicboard.auth",
    "ludicboard.projects",
    "ludicboard.tasks",
    "ludicboard.search",
    "ludicboard.database",
    "ludicboard.system",
)


def setup_logging(log_dir: Path | None = None, debug: bool = False) -> None:
    """Configure logging to write to the console and, optionally, to files.

    This function is idempotent - multiple calls will only configure logging once.

    Args:
        log_dir: Directory for log files. If None, only the console handler is installed.
        debug: If True, sets DEBUG level, otherwise INFO.
    """
    global _logging_configured

    if _logging_configured:
        return

    log_level = logging.DEBUG if debug else logging.INFO
    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # Clear existing handlers to avoid duplicates
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_dir is not None:
        log_dir.mkdir(parents=True, exist_ok=True)

        # Rotates daily, keeps 30 days
        file_handler = logging.handlers.TimedRotatingFileHandler(
            filename=str(log_dir / "ludicboard.log"),
            when="midnight",
            interval=1,
            backupCount=30,
            encoding="utf-8",
        )
        file_handler.setLevel(log_level)
        file_handler.setFormatter(formatter)

        error_file_handler = logging.handlers.TimedRotatingFileHandler(
            filename=str(log_dir / "ludicboard_errors.log"),
            when="midnight",
            interval=1,
            backupCount=90,  # Keep error logs longer
            encoding="utf-8",
        )
        error_file_handler.setLevel(logging.ERROR)
        error_file_handler.setFormatter(formatter)

        root_logger.addHandler(file_handler)
        root_logger.addHandler(error_file_handler)

    for name in APP_LOGGERS:
        logging.getLogger(name).setLevel(log_level)

    # Reduce noise from third-party libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("uvicorn").setLevel(logging.DEBUG if debug else logging.INFO)

    _logging_configured = True

    logger = logging.getLogger("ludicboard.system")
    logger.info(
        "Logging configured: level=%s, log_dir=%s",
        logging.getLevelName(log_level),
        log_dir,
    )
