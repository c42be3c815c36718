"""
Logging setup for console output and the append-only trace log.

The trace log receives exactly one line per evaluated transaction and is
never truncated between runs.
"""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

LOG_FORMAT = "%(asctime)s | %(name)s | %(levelname)s | %(message)s"
TRACE_FORMAT = "%(asctime)s   %(levelname)s   %(message)s"
TRACE_LOGGER_NAME = "discount_engine.trace"


def configure_logging(level: str = "INFO") -> None:
    """Configure console logging for the application."""
    log_level = getattr(logging, level.upper(), logging.INFO)

    logging.basicConfig(level=log_level, format=LOG_FORMAT)

    if log_level == logging.DEBUG:
        logging.getLogger("discount_engine").setLevel(logging.DEBUG)


@contextmanager
def trace_log(path: Path) -> Iterator[logging.Logger]:
    """
    Open the append-only trace file for one batch.

    Each call gets its own logger, kept out of the logging registry, so
    overlapping batches never see each other's handlers. The handler is
    closed when the block exits, however it exits.

    Usage:
        with trace_log(settings.trace_log_path) as trace:
            trace.info("Applied discount 10.0% to Wine")
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    trace = logging.Logger(TRACE_LOGGER_NAME, logging.INFO)
    trace.propagate = False

    handler = logging.FileHandler(path, mode="a", encoding="utf-8")
    handler.setFormatter(logging.Formatter(TRACE_FORMAT))
    trace.addHandler(handler)
    try:
        yield trace
    finally:
        trace.removeHandler(handler)
        handler.close()
