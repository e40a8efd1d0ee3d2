import csv
import logging
import os
import tempfile
import time
from datetime import datetime
from functools import wraps
from logging.handlers import RotatingFileHandler
from pathlib import Path

from flask import request
from pytz import timezone

from my_config import get_config

config = get_config()
local_tz = timezone(config.countdown_timezone)

# Setup logger for this module
logger = logging.getLogger(__name__)


class ColoredFormatter(logging.Formatter):
    """Custom formatter to add colors to console output"""

    def format(self, record):
        log_message = super().format(record)

        # Only colorize WARNING and above, leave INFO as default
        if record.levelname == 'WARNING':
            return f"\033[33m{log_message}\033[0m"  # Yellow
        elif record.levelname == 'ERROR':
            return f"\033[31m{log_message}\033[0m"  # Red
        elif record.levelname == 'CRITICAL':
            return f"\033[35m{log_message}\033[0m"  # Magenta
        else:
            return log_message


def setup_logging(
        app_name: str,
        log_level=logging.INFO,
        log_dir: str = None,
        info_modules: list[str] = None,
        console: bool = True
):
    """
    Configure standardized logging with rotation.

    Sets up both file and console handlers with:
    - Rotating file handler (10MB max per file, 5 backups)
    - Console handler with colored output (by default)
    - Local timezone formatting

    Args:
        app_name: Name of the log file stem (e.g., 'web_server', 'countdown_cli')
        log_level: Logging level for root logger (default: logging.INFO)
        log_dir: Directory for log files (default: LOG_DIR from config)
        info_modules: List of module names to set to INFO level (useful when root is WARNING)
        console: Also log to stderr with colors

    Returns:
        logging.Logger: Root logger instance (configured)
    """
    log_dir = log_dir or config.log_dir
    os.makedirs(log_dir, exist_ok=True)
    log_file = os.path.join(log_dir, f'{app_name}.log')

    # Create rotating file handler (10MB max, 5 backups = ~50MB total)
    file_handler = RotatingFileHandler(
        log_file,
        maxBytes=10 * 1024 * 1024,  # 10MB
        backupCount=5
    )
    file_handler.setLevel(log_level)
    file_formatter = logging.Formatter('%(asctime)s - %(filename)s:%(lineno)d - %(levelname)s - %(message)s')
    file_formatter.converter = time.localtime  # Use local timezone instead of UTC
    file_handler.setFormatter(file_formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # Clear any existing handlers (force=True equivalent)
    root_logger.handlers.clear()
    root_logger.addHandler(file_handler)

    if console:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(log_level)
        console_handler.setFormatter(ColoredFormatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s'))
        root_logger.addHandler(console_handler)

    if info_modules:
        for module_name in info_modules:
            logging.getLogger(module_name).setLevel(logging.INFO)

    return logging.getLogger()


# Directory for activity logs
LOG_FILE_DIR = Path(config.log_dir)

# Fallback directory if primary fails (user's temp directory)
FALLBACK_LOG_DIR = Path(tempfile.gettempdir()) / 'countdown_gif_logs'


def _append_csv_with_header(file_path: Path, headers: list[str], row: list[str], retry_with_fallback: bool = True):
    """
    Append a row to a CSV file, writing headers first if the file is new/empty.

    Returns:
        bool: True if write succeeded, False otherwise
    """
    try:
        file_path.parent.mkdir(parents=True, exist_ok=True)
        is_new = not file_path.exists() or file_path.stat().st_size == 0

        with open(file_path, 'a', newline='') as f:
            writer = csv.writer(f, quoting=csv.QUOTE_MINIMAL)
            if is_new:
                writer.writerow(headers)
            writer.writerow(row)

        return True

    except PermissionError as e:
        logger.error(f"Permission denied writing to {file_path}: {e}")

        if retry_with_fallback:
            fallback_path = FALLBACK_LOG_DIR / file_path.name
            logger.warning(f"Retrying log write to fallback location: {fallback_path}")
            return _append_csv_with_header(fallback_path, headers, row, retry_with_fallback=False)

        return False

    except OSError as e:
        logger.error(f"OS error writing CSV log {file_path.name}: {e}")
        return False


def log_web_activity(func):
    """
    Decorator for logging web activity to a CSV file.

    A failure to write the activity row is logged and never blocks the request.
    """

    @wraps(func)
    def wrapper(*args, **kwargs):
        now_local = datetime.now(local_tz).strftime('%m/%d/%Y %I:%M:%S %p %Z')
        success = _append_csv_with_header(
            LOG_FILE_DIR / "web_server_activity_log.csv",
            headers=["remote_addr", "method", "path", "query", "timestamp_local"],
            row=[
                request.remote_addr,
                request.method,
                request.path,
                request.query_string.decode('utf-8', errors='replace'),
                now_local
            ]
        )
        if not success:
            logger.warning("Failed to log web activity, but continuing...")

        return func(*args, **kwargs)

    return wrapper
