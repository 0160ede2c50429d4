"""
Logging configuration for the Bookmark Importer.

This module sets up logging based on configuration settings.
"""

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(config=None, log_dir: Optional[Path] = None) -> Optional[Path]:
    """
    Set up logging configuration.

    Args:
        config: LoggingConfig instance (defaults are used when None)
        log_dir: Optional directory override for the log file

    Returns:
        Path of the log file, or None when file logging is disabled
    """
    log_level = getattr(config, "level", "INFO")
    log_file = getattr(config, "log_file", "bookmark_importer.log")
    console_output = getattr(config, "console_output", True)

    handlers = []
    log_path = None

    if log_file:
        if log_dir is None:
            if getattr(sys, "frozen", False):
                # Running as executable
                app_dir = Path(sys.executable).parent
            else:
                app_dir = Path.cwd()
            log_dir = app_dir / "logs"

        log_dir = Path(log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)

        # Create timestamped log file
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        log_path = log_dir / f"{Path(log_file).stem}_{timestamp}.log"

        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))
        handlers.append(file_handler)

    if console_output:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))
        handlers.append(console_handler)

    logging.basicConfig(
        level=getattr(logging, log_level.upper()), handlers=handlers, force=True
    )

    logger = logging.getLogger(__name__)
    if log_path:
        logger.info(f"Bookmark Importer logging to {log_path}")
    logger.info(f"Log level: {log_level}")

    # Reduce noise from the markup stack
    logging.getLogger("bs4").setLevel(logging.WARNING)
    logging.getLogger("chardet").setLevel(logging.WARNING)

    return log_path
