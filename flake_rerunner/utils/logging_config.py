import logging
import sys
import os
from datetime import datetime
from typing import Optional

class ColoredFormatter(logging.Formatter):
    """Custom formatter to add colors to console output."""

    cyan = "\x1b[36m"
    green = "\x1b[32m"
    yellow = "\x1b[33m"
    red = "\x1b[31m"
    bold_red = "\x1b[31;1m"
    reset = "\x1b[0m"

    format_str = "%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d - %(message)s"

    FORMATS = {
        logging.DEBUG: cyan + format_str + reset,
        logging.INFO: green + format_str + reset,
        logging.WARNING: yellow + format_str + reset,
        logging.ERROR: red + format_str + reset,
        logging.CRITICAL: bold_red + format_str + reset
    }

    def format(self, record):
        log_fmt = self.FORMATS.get(record.levelno)
        # Handle cases where level might be outside standard range
        if not log_fmt:
            log_fmt = self.format_str
        formatter = logging.Formatter(log_fmt, datefmt="%Y-%m-%d %H:%M:%S")
        return formatter.format(record)

def setup_logging(level=logging.INFO, log_dir: Optional[str] = None):
    """Setup centralized logging: colored stderr, plus a daily file when log_dir is given."""
    root_logger = logging.getLogger()

    # Clear existing handlers to prevent duplicate logs
    if root_logger.handlers:
        for handler in root_logger.handlers[:]:
            root_logger.removeHandler(handler)

    root_logger.setLevel(level)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(ColoredFormatter())
    root_logger.addHandler(console_handler)

    # httpx logs every request at INFO; keep it quiet unless debugging
    logging.getLogger("httpx").setLevel(max(level, logging.WARNING))
    logging.getLogger("flake_rerunner").setLevel(level)

    if log_dir:
        add_file_handler(log_dir)

    root_logger.debug("Logging initialized (console%s).", " + file" if log_dir else "")

def add_file_handler(log_dir: str) -> str:
    """Attach the daily log file under log_dir to the root logger and return its path."""
    os.makedirs(log_dir, exist_ok=True)
    log_path = os.path.join(log_dir, f"rerunner_{datetime.now().strftime('%Y%m%d')}.log")
    file_handler = logging.FileHandler(log_path)
    file_fmt = logging.Formatter(
        "%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )
    file_handler.setFormatter(file_fmt)
    logging.getLogger().addHandler(file_handler)
    return log_path
