"""
CONDUCTOR — Shared Logging Configuration

Centralized logging setup for all CONDUCTOR components.
"""

import logging
from pathlib import Path
from typing import Optional

from . import settings


# =============================================================================
# Log Format
# =============================================================================
LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%dT%H:%M:%S"


def setup_logging(level: Optional[str] = None) -> None:
    """Configure root logging for applications embedding CONDUCTOR."""
    logging.basicConfig(
        level=getattr(logging, (level or settings.LOG_LEVEL).upper(), logging.INFO),
        format=LOG_FORMAT,
        datefmt=DATE_FORMAT,
    )


def configure_file_logging(
    logger: logging.Logger,
    filename: str,
    max_bytes: int = 10_000_000,  # 10MB
    backup_count: int = 5,
) -> None:
    """
    Add file logging to a logger with rotation.

    Args:
        logger: Logger to configure
        filename: Name of the log file (will be in LOG_DIR)
        max_bytes: Maximum file size before rotation
        backup_count: Number of backup files to keep
    """
    log_path = Path(settings.LOG_DIR)
    log_path.mkdir(parents=True, exist_ok=True)

    from logging.handlers import RotatingFileHandler

    file_handler = RotatingFileHandler(
        log_path / filename,
        maxBytes=max_bytes,
        backupCount=backup_count,
    )
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))
    logger.addHandler(file_handler)
