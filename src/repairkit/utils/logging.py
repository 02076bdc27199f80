import os
import sys
from datetime import datetime
from typing import Optional

from loguru import logger

from ..config.settings import LoggingConfig, config

PACKAGE_NAME = "repairkit"


def setup_logging(log_level: Optional[str] = None, logging_config: Optional[LoggingConfig] = None):
    """Setup logging configuration and enable repairkit log output."""
    logging_config = logging_config or config.logging
    log_level = (log_level or logging_config.level).upper()

    logger.remove()
    logger.add(sys.stdout, level=log_level, format=logging_config.format)
    logger.enable(PACKAGE_NAME)

    # Add file logging when DEBUG level is specified
    if log_level == "DEBUG":
        os.makedirs(logging_config.logs_dir, exist_ok=True)

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        log_file = os.path.join(logging_config.logs_dir, f"debug_session_{timestamp}.log")

        logger.add(
            log_file,
            level="DEBUG",
            format="{time:YYYY-MM-DD HH:mm:ss} | {level} | {name} | {message}",
        )
        logger.debug(f"Debug logging enabled. Logs will be stored in {log_file}")

        cleanup_old_logs(logging_config.logs_dir, max_files=10)


def disable_logging():
    """Silence repairkit log output (the default for library use)."""
    logger.disable(PACKAGE_NAME)


def cleanup_old_logs(log_dir: str, max_files: int = 50):
    """Clean up old log files if there are too many in the directory."""
    try:
        log_files = [
            f for f in os.listdir(log_dir) if f.startswith("debug_session_") and f.endswith(".log")
        ]

        if len(log_files) > max_files:
            # Oldest first
            log_files.sort(key=lambda x: os.path.getmtime(os.path.join(log_dir, x)))

            for f in log_files[:-max_files]:
                try:
                    os.remove(os.path.join(log_dir, f))
                    logger.debug(f"Cleaned up old log file: {f}")
                except OSError as e:
                    logger.warning(f"Failed to remove old log file {f}: {e}")
    except OSError as e:
        logger.warning(f"Failed to clean up old log files: {e}")
