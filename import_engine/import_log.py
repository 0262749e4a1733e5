"""
import_engine.import_log - Run-scoped log file + console output.

Logging is useful for a batch job like this, so every run appends to
its own log file as well as printing to stdout.  Handlers are attached
to the ``import_engine`` logger only for the duration of the run.
"""

from __future__ import annotations

import logging
import sys
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

LOGGER_NAME = "import_engine"
LOG_FORMAT = "[%(asctime)s] [%(levelname)s] %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


@contextmanager
def run_log(path: str | Path | None, *, console: bool = True) -> Iterator[logging.Logger]:
    """Attach file/stdout handlers to the import logger while the block runs."""
    logger = logging.getLogger(LOGGER_NAME)
    formatter = logging.Formatter(LOG_FORMAT, DATE_FORMAT)
    handlers: list[logging.Handler] = []

    if path is not None:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(path, encoding="utf-8"))
    if console:
        handlers.append(logging.StreamHandler(sys.stdout))

    previous_level = logger.level
    if logger.level == logging.NOTSET or logger.level > logging.INFO:
        logger.setLevel(logging.INFO)
    for h in handlers:
        h.setFormatter(formatter)
        logger.addHandler(h)
    try:
        yield logger
    finally:
        for h in handlers:
            logger.removeHandler(h)
            h.close()
        logger.setLevel(previous_level)
