"""
Logging configuration for the analysis packages.
"""

import logging
import sys
from pathlib import Path
from datetime import datetime
from typing import Optional

PACKAGES = ['analysis', 'data', 'models', 'pipeline']


def setup_logging(
    log_level: str = "INFO",
    log_file: Optional[str] = None,
    log_dir: Optional[Path] = None
) -> logging.Logger:
    """
    Set up logging for every package of the project.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        log_file: Optional log file name
        log_dir: Optional directory for log files

    Returns:
        The 'pipeline' logger
    """
    level = getattr(logging, log_level.upper())

    detailed_formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    simple_formatter = logging.Formatter(
        '%(levelname)s: %(message)s'
    )

    handlers = []

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(simple_formatter)
    handlers.append(console_handler)

    log_path = None
    if log_file or log_dir:
        if log_dir:
            log_dir = Path(log_dir)
            log_dir.mkdir(parents=True, exist_ok=True)

            if not log_file:
                timestamp = datetime.now().strftime('%Y%m%d_%H%M%S')
                log_file = f"analysis_{timestamp}.log"

            log_path = log_dir / log_file
        else:
            log_path = Path(log_file)

        file_handler = logging.FileHandler(log_path)
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(detailed_formatter)
        handlers.append(file_handler)

    for package in PACKAGES:
        package_logger = logging.getLogger(package)
        package_logger.handlers = []
        # File handler receives DEBUG even when the console does not
        package_logger.setLevel(logging.DEBUG if log_path else level)
        package_logger.propagate = False
        for handler in handlers:
            package_logger.addHandler(handler)

    logger = logging.getLogger('pipeline')
    if log_path:
        logger.info(f"Logging to file: {log_path}")
    return logger
