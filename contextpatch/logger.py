import logging
from pathlib import Path
from typing import Optional, TextIO

import structlog

from contextpatch.config import get_log_file_path


def configure_logging(log_file: Optional[Path] = None, verbose: bool = False) -> TextIO:
    """
    Configures structlog to write JSONL to disk.

    Returns the opened log stream; the caller closes it once logging is done.
    """
    if log_file is None:
        log_file = get_log_file_path()
    stream = open(log_file, "a", encoding="utf-8", buffering=1)  # Line buffered

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.DEBUG if verbose else logging.INFO
        ),
        logger_factory=structlog.WriteLoggerFactory(file=stream),
        cache_logger_on_first_use=False,
    )
    return stream


def get_logger(**initial_values) -> structlog.stdlib.BoundLogger:
    """
    Returns a structured logger instance.

    Library code must stay silent until the host application opts in, so an
    unconfigured structlog gets a logger that renders events without writing
    them anywhere.
    """
    if not structlog.is_configured():
        return structlog.wrap_logger(structlog.ReturnLogger(), **initial_values)
    logger: structlog.stdlib.BoundLogger = structlog.get_logger(**initial_values)
    return logger
