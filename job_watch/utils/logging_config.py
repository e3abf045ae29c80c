"""Logging for long-running watch processes: rotating file plus stdout."""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
LOG_FILENAME = "job_watch.log"

# Libraries whose INFO output drowns out ours (per-request lines, scheduler ticks)
NOISY_LOGGERS = ("apscheduler", "urllib3", "openai", "httpx")


def _build_handlers(log_path: Path, level: int) -> list[logging.Handler]:
    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    file_handler = RotatingFileHandler(
        log_path / LOG_FILENAME,
        maxBytes=5 * 1024 * 1024,
        backupCount=3,
        encoding="utf-8",
    )
    console_handler = logging.StreamHandler(sys.stdout)

    handlers = [file_handler, console_handler]
    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
    return handlers


def setup_logging(log_dir: str = "logs", level: int = logging.INFO) -> logging.Logger:
    """Configure the ``job_watch`` logger tree and return its root.

    Third-party loggers in ``NOISY_LOGGERS`` share the same handlers but
    only pass warnings through, unless ``level`` is DEBUG.
    """
    log_path = Path(log_dir)
    log_path.mkdir(parents=True, exist_ok=True)
    handlers = _build_handlers(log_path, level)

    logger = logging.getLogger("job_watch")
    logger.setLevel(level)
    logger.handlers.clear()  # safe to call twice
    for handler in handlers:
        logger.addHandler(handler)

    library_level = logging.DEBUG if level <= logging.DEBUG else logging.WARNING
    for name in NOISY_LOGGERS:
        library_logger = logging.getLogger(name)
        library_logger.setLevel(library_level)
        library_logger.handlers.clear()
        library_logger.propagate = False
        for handler in handlers:
            library_logger.addHandler(handler)

    return logger
