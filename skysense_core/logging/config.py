# =============================================================================
# skysense_core/logging/config.py
# Logging Setup for the SkySense Runtime
# =============================================================================

import logging
import sys
import time
from datetime import datetime
from pathlib import Path
from typing import Optional

# The runtime loop and the Streamlit script thread log side by side
LOG_FORMAT = "%(asctime)s | %(threadName)s | %(name)s | %(levelname)s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

LOG_DIR = Path("logs")

# HTTP and Supabase client chatter stays at WARNING and above
NOISY_LOGGERS = ("urllib3", "httpx", "httpcore", "hpack", "supabase", "postgrest")


def setup_logging(
    level: int = logging.INFO,
    log_to_file: bool = True,
    log_filename: Optional[str] = None,
    log_dir: Path = LOG_DIR,
) -> Optional[Path]:
    """
    Configure root logging for the app process.

    Safe to call again (Streamlit reruns the script): the previous
    handlers are replaced rather than stacked.

    Args:
        level: Root level, e.g. ``AppConfig.log_level_value``
        log_to_file: Also write a dated file under ``log_dir``
        log_filename: Override the default ``skysense_YYYY-MM-DD.log``
        log_dir: Directory for the log file

    Returns:
        Path of the log file, or None when logging to stdout only
    """
    handlers = [logging.StreamHandler(sys.stdout)]
    log_path = None

    if log_to_file:
        log_dir = Path(log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        log_path = log_dir / (log_filename or f"skysense_{datetime.now():%Y-%m-%d}.log")
        handlers.append(logging.FileHandler(log_path, encoding="utf-8"))

    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT,
        handlers=handlers,
        force=True,
    )

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.getLogger("skysense_core").info(
        f"Logging ready (level={logging.getLevelName(level)}, file={log_path or 'none'})"
    )
    return log_path


def get_logger(name: str) -> logging.Logger:
    """
    Module logger.

    Usage:
        from skysense_core.logging import get_logger
        logger = get_logger(__name__)
    """
    return logging.getLogger(name)


class LogContext:
    """
    Times a named operation and logs how it ended.

    Usage:
        with LogContext(logger, "Hydrating profile p-42"):
            ...
        # Hydrating profile p-42... started
        # Hydrating profile p-42... completed (0.42s)

    Exceptions are logged and re-raised.
    """

    def __init__(self, logger: logging.Logger, operation: str, level: int = logging.INFO):
        self.logger = logger
        self.operation = operation
        self.level = level
        self.start_time: Optional[float] = None

    @property
    def elapsed(self) -> float:
        if self.start_time is None:
            return 0.0
        return time.perf_counter() - self.start_time

    def __enter__(self):
        self.start_time = time.perf_counter()
        self.logger.log(self.level, f"{self.operation}... started")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type is None:
            self.logger.log(self.level, f"{self.operation}... completed ({self.elapsed:.2f}s)")
        elif issubclass(exc_type, Exception):
            self.logger.error(f"{self.operation}... failed ({self.elapsed:.2f}s): {exc_val}", exc_info=True)
        else:
            # Cancellation on shutdown
            self.logger.log(self.level, f"{self.operation}... interrupted ({self.elapsed:.2f}s)")
        return False
