"""
Logging configuration for the artist sorter.

Sets up console and optional rotating file output, and provides helpers
for module loggers and progress reporting.
"""

import logging
import logging.handlers
import sys
from pathlib import Path
from typing import Optional

APP_LOGGER_NAME = 'artist-sorter'
DEFAULT_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def setup_logging(
    level: str = "INFO",
    log_file: Optional[Path] = None,
    max_file_size: int = 10 * 1024 * 1024,  # 10MB
    backup_count: int = 5,
    console_output: bool = True,
    log_format: str = DEFAULT_FORMAT
) -> logging.Logger:
    """
    Set up logging configuration.

    Args:
        level: Logging level ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')
        log_file: Path to log file (optional)
        max_file_size: Maximum log file size in bytes before rotation
        backup_count: Number of backup files to keep
        console_output: Whether to output logs to console
        log_format: Format string for both handlers

    Returns:
        Configured application logger
    """
    # Clear any existing handlers
    root_logger = logging.getLogger()
    root_logger.handlers.clear()

    numeric_level = getattr(logging, level.upper(), None)
    if not isinstance(numeric_level, int):
        raise ValueError(f'Invalid log level: {level}')

    root_logger.setLevel(numeric_level)

    formatter = logging.Formatter(fmt=log_format, datefmt='%Y-%m-%d %H:%M:%S')

    if console_output:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(numeric_level)
        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.handlers.RotatingFileHandler(
            filename=str(log_file),
            maxBytes=max_file_size,
            backupCount=backup_count,
            encoding='utf-8'
        )
        file_handler.setLevel(numeric_level)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    configure_library_logging()

    app_logger = logging.getLogger(APP_LOGGER_NAME)
    app_logger.setLevel(numeric_level)

    app_logger.debug(f"Logging initialized - Level: {level}")
    if log_file:
        app_logger.debug(f"Log file: {log_file}")

    return app_logger


def log_processing_progress(
    current: int,
    total: int,
    logger: logging.Logger,
    message_template: str = "Processed {current}/{total} files ({percentage:.1f}%)"
):
    """
    Log processing progress at intervals that scale with the batch size.

    Args:
        current: Current item count
        total: Total item count
        logger: Logger instance to use
        message_template: Template for progress message
    """
    if total == 0:
        return

    percentage = (current / total) * 100

    if total <= 100:
        step = max(1, total // 10)
    elif total <= 1000:
        step = max(1, total // 20)
    else:
        step = max(1, total // 100)

    if current % step == 0 or current == total:
        logger.info(message_template.format(
            current=current, total=total, percentage=percentage
        ))


def configure_library_logging():
    """Reduce noise from third-party libraries."""
    for lib_name in ('mutagen',):
        logging.getLogger(lib_name).setLevel(logging.WARNING)
