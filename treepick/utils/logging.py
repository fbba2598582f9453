"""
Logging configuration using loguru.

Game events are logged at INFO, session traffic and dropped actions at
DEBUG. Bound context (e.g. `logger.bind(username="alice")`) is rendered
through the `{extra}` field.
"""

import sys
from pathlib import Path

from loguru import logger


DEFAULT_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "<level>{message}</level> | "
    "{extra}"
)

VALID_LEVELS = {"TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"}


def setup_logging(
    log_level: str = "INFO",
    log_file: str | Path | None = None,
    format_string: str | None = None,
    rotation: str = "10 MB",
    retention: str = "7 days",
) -> None:
    """
    Configure loguru sinks for the server process.

    Args:
        log_level: Minimum level for every sink
        log_file: Optional file to log to as well as stderr
        format_string: Custom format string (default: DEFAULT_FORMAT)
        rotation: When to rotate the log file
        retention: How long to keep rotated files

    Raises:
        ValueError: If log_level is not a loguru level name
    """
    log_level = log_level.upper()
    if log_level not in VALID_LEVELS:
        raise ValueError(
            f"Invalid log level: '{log_level}'. "
            f"Must be one of: {', '.join(sorted(VALID_LEVELS))}"
        )

    logger.remove()
    fmt = format_string or DEFAULT_FORMAT

    logger.add(
        sys.stderr,
        format=fmt,
        level=log_level,
        colorize=True,
        backtrace=True,
        diagnose=False,
    )

    if log_file is not None:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            str(log_path),
            format=fmt,
            level=log_level,
            rotation=rotation,
            retention=retention,
            enqueue=True,
        )

    logger.debug("Logging configured: level={}, file={}", log_level, log_file)
