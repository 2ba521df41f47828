"""Logging configuration for rotating file + console output."""
import logging
from logging.handlers import RotatingFileHandler

from frameplay.core.paths import LOG_FILE_NAME

LOG = logging.getLogger(__name__)


def _build_file_handler(log_dir, formatter):
    log_dir.mkdir(parents=True, exist_ok=True)
    file_handler = RotatingFileHandler(
        log_dir / LOG_FILE_NAME,
        maxBytes=5 * 1024 * 1024,
        backupCount=5,
        encoding="utf-8",
    )
    file_handler.setLevel(logging.INFO)
    file_handler.setFormatter(formatter)
    return file_handler


def setup_logging(config):
    """Configure global logging handlers (idempotent).

    The console handler writes to stderr; stdout is reserved for the frame.
    An unusable log directory leaves console-only logging.
    """
    root_logger = logging.getLogger()
    if root_logger.handlers:
        return

    formatter = logging.Formatter(
        "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
    )

    console_handler = logging.StreamHandler()
    console_handler.setLevel(getattr(logging, config.console_log_level, logging.WARNING))
    console_handler.setFormatter(formatter)

    root_logger.setLevel(logging.DEBUG if config.console_log_level == "DEBUG" else logging.INFO)
    root_logger.addHandler(console_handler)

    if config.log_dir is None:
        return
    try:
        root_logger.addHandler(_build_file_handler(config.log_dir, formatter))
    except OSError as exc:
        LOG.warning("[LOGGING] file logging disabled, cannot use %s: %s", config.log_dir, exc)
