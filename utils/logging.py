import logging
import sys
from typing import Optional

# Third-party loggers that are too chatty at INFO
_NOISY_LOGGERS = ("botocore", "boto3", "s3transfer", "urllib3", "aiosqlite")


def setup_logging(level: Optional[str] = "INFO") -> None:
    """
    Configure application-wide logging on stdout.
    Uses a concise formatter compatible with Uvicorn's style.
    """
    log_level = getattr(logging, str(level).upper(), logging.INFO)
    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # Clear existing handlers to avoid duplicates in reloads
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    root_logger.addHandler(handler)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(log_level, logging.WARNING))
