"""Logging configuration for the crawlability auditor."""

import logging
import sys
from pathlib import Path
from typing import Optional

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DEBUG_LOG_FORMAT = '%(asctime)s - %(name)s:%(lineno)d - %(levelname)s - %(message)s'

# Log every request at INFO/DEBUG, which drowns out audit progress
HTTP_CLIENT_LOGGERS = ('httpx', 'httpcore', 'hpack')


def setup_logging(level: str = "WARNING", log_file: Optional[str] = None) -> None:
    """Configure root logging for a CLI run.

    Records go to stderr so JSON written to stdout stays parseable. At DEBUG
    the source line of each record is included.

    Args:
        level: Log level name; unknown names fall back to WARNING
        log_file: Optional file that receives the same records
    """
    numeric_level = getattr(logging, level.upper(), logging.WARNING)
    log_format = DEBUG_LOG_FORMAT if numeric_level <= logging.DEBUG else LOG_FORMAT

    handlers = [logging.StreamHandler(sys.stderr)]
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, encoding='utf-8'))

    logging.basicConfig(level=numeric_level, format=log_format, handlers=handlers, force=True)

    for name in HTTP_CLIENT_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Logger for a seocrawl module (usually called with __name__)."""
    return logging.getLogger(name)
