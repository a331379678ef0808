"""Logging configuration for the path tracer."""

import logging
import logging.handlers
import os
from pathlib import Path
from typing import Optional

from pathtracer.config import DEFAULT_LOG_LEVEL, ENV_LOG_LEVEL, LOG_FORMAT, LOG_LEVELS


def setup_logging(
    level: Optional[str] = None,
    log_file: Optional[Path] = None,
    name: str = "pathtracer",
) -> logging.Logger:
    """
    Set up logging for the package.

    Log records go to stderr so that a PPM written to stdout stays clean.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL). Defaults to
            $PATHTRACER_LOG_LEVEL, then INFO.
        log_file: Optional path of a rotating log file
        name: Logger name

    Returns:
        Configured logger instance

    Raises:
        ValueError: if the level is not one of LOG_LEVELS
    """
    if level is None:
        level = os.getenv(ENV_LOG_LEVEL) or DEFAULT_LOG_LEVEL
    level = level.upper()
    if level not in LOG_LEVELS:
        raise ValueError(f"unknown log level {level!r}, expected one of {', '.join(LOG_LEVELS)}")
    numeric_level = getattr(logging, level)

    logger = logging.getLogger(name)
    logger.setLevel(numeric_level)

    # Calling this twice must not duplicate output
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOG_FORMAT)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(numeric_level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file is not None:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=10485760,  # 10MB
            backupCount=5,
        )
        file_handler.setLevel(numeric_level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger
