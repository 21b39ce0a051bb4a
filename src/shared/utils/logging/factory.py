"""Process-wide logging setup for the configuration loader."""
import logging
import logging.handlers
import sys
from typing import List, Optional

from src.shared.utils.logging.formatters import StructuredJSONFormatter

_logger = logging.getLogger(__name__)

PLAIN_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

LOG_FILE_MAX_BYTES = 10 * 1024 * 1024
LOG_FILE_BACKUPS = 5


def configure_logging(
    service_name: str,
    level: int = logging.INFO,
    log_file: Optional[str] = None,
    enable_console: bool = True,
    json_format: bool = True,
    kazoo_level: int = logging.WARNING,
) -> None:
    """Replace the root logger's handlers.

    Args:
        service_name: Stamped on every JSON entry
        level: Root log level
        log_file: Path of a rotating log file (optional)
        enable_console: Emit to stdout
        json_format: Structured JSON (True) or plain text (False)
        kazoo_level: Level for kazoo's connection and retry loggers
    """
    if json_format:
        formatter: logging.Formatter = StructuredJSONFormatter(service_name=service_name)
    else:
        formatter = logging.Formatter(PLAIN_FORMAT)

    handlers: List[logging.Handler] = []
    if enable_console:
        handlers.append(logging.StreamHandler(sys.stdout))
    if log_file:
        handlers.append(
            logging.handlers.RotatingFileHandler(
                log_file,
                maxBytes=LOG_FILE_MAX_BYTES,
                backupCount=LOG_FILE_BACKUPS,
            )
        )

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()
    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        root_logger.addHandler(handler)

    # kazoo logs every reconnect attempt at INFO
    logging.getLogger("kazoo").setLevel(kazoo_level)

    _logger.info(
        "Logging configured",
        extra={
            "service_name": service_name,
            "level": logging.getLevelName(level),
            "log_file": log_file,
            "handlers_count": len(handlers),
        },
    )


def get_logger(name: str) -> logging.Logger:
    """Module logger, typically ``get_logger(__name__)``."""
    return logging.getLogger(name)


def disable_logging() -> None:
    """Drop all log output. Useful for tests."""
    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(logging.NullHandler())
