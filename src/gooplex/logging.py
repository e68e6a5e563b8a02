from __future__ import annotations

import logging
import logging.handlers
import os
from pathlib import Path

LOG_FILE = "gooplex.log"

# Library loggers that flood DEBUG output with connection details
NOISY_LOGGERS = ("aiohttp", "asyncio", "urllib3")


def configure_logging(log_dir: Path | None = None, level: str | None = None) -> Path | None:
    """Configure console logging and, when a directory is known, a rotating file.

    ``level`` falls back to ``GOOPLEX_LOG_LEVEL`` and ``log_dir`` to
    ``GOOPLEX_LOG_DIR``. Returns the log file path, or None for console only.
    """
    level_name = (level or os.environ.get("GOOPLEX_LOG_LEVEL", "INFO")).upper()
    log_level = getattr(logging, level_name, logging.INFO)
    if log_dir is None and os.environ.get("GOOPLEX_LOG_DIR"):
        log_dir = Path(os.environ["GOOPLEX_LOG_DIR"])

    formatter = logging.Formatter(
        "%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(log_level, logging.INFO))

    if not log_dir:
        return None

    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / LOG_FILE
    file_handler = logging.handlers.RotatingFileHandler(
        log_file,
        maxBytes=5 * 1024 * 1024,
        backupCount=3,
        encoding="utf-8",
    )
    file_handler.setLevel(log_level)
    file_handler.setFormatter(formatter)
    root_logger.addHandler(file_handler)
    return log_file
