"""
Logging for the maintenance commands.

loguru carries the operational log (connections, deletions, import outcomes);
the rich console in ``maintenance.main`` carries what the operator reads.
Setting LOG_FILE keeps a rotating audit trail of every run.
"""

import os
import sys
from pathlib import Path

from loguru import logger

from maintenance.config import settings

CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan> - <level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {extra[app_env]} | {name}:{function}:{line} - {message}"


def setup_logging(
    level: str | None = None,
    log_file: Path | None = None,
    rotation: str = "10 MB",
    retention: str | None = None,
) -> Path | None:
    """
    Configure loguru handlers.

    Args:
        level: Log level, defaults to LOG_LEVEL
        log_file: File to append to, defaults to LOG_FILE (no file if unset)
        rotation: Size or age at which the file rotates
        retention: How long rotated files are kept, defaults to LOG_RETENTION

    Returns:
        The log file path in use, if any
    """
    level = level or settings.maintenance.log_level
    log_file = log_file or settings.maintenance.log_file
    retention = retention or settings.maintenance.log_retention

    logger.remove()
    logger.configure(extra={"app_env": settings.maintenance.app_env})
    logger.add(sys.stderr, level=level, format=CONSOLE_FORMAT, colorize=True)

    if log_file:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            log_file,
            level=level,
            format=FILE_FORMAT,
            rotation=rotation,
            retention=retention,
            compression="gz",
        )

    logger.debug(f"Logging configured: level={level}, file={log_file or '-'}")
    return log_file


if os.environ.get("DISABLE_LOGGING") != "1":
    setup_logging()
