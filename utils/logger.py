# utils/logger.py
import logging
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path

from utils.config import Config


def setup_logger(log_dir: str | None = None):
    """
    Configure the shared logger for the storefront console.

    Features:
    - Daily rotating log files (one file per day, 7 kept)
    - Console + file output
    - Unified log format with timestamp and level
    - Service modules log through child loggers ("storefront.pricing", ...)
      and propagate into these handlers
    """

    log_dir = Path(log_dir or Config.LOG_DIR)
    log_dir.mkdir(parents=True, exist_ok=True)

    log_file = log_dir / "storefront.log"

    logger = logging.getLogger("storefront")
    logger.setLevel(getattr(logging, Config.LOG_LEVEL, logging.INFO))

    # Avoid duplicate handlers if setup_logger() is called multiple times
    if logger.handlers:
        return logger

    formatter = logging.Formatter(
        fmt="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )

    file_handler = TimedRotatingFileHandler(
        filename=log_file,
        when="midnight",
        interval=1,
        backupCount=7,
        encoding="utf-8"
    )
    file_handler.setFormatter(formatter)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)

    logger.addHandler(file_handler)
    logger.addHandler(console_handler)

    logger.info("Logger initialized (daily rotation enabled)")
    return logger
