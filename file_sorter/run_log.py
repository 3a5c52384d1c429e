"""
Append-only run log.

The log file is attached to the "file_sorter.run" logger for the duration
of one run and is always flushed and closed when the run ends.
"""

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

RUN_LOGGER_NAME = "file_sorter.run"


@contextmanager
def open_run_log(log_file: Path) -> Iterator[logging.Logger]:
    """
    Attach a log file to the run logger.

    Messages are written as-is (the reporter already formats them) and
    appended to any earlier runs in the same file.

    Example:
        with open_run_log(destination / "file_sorter.log") as log:
            log.info(reporter.render_header())
    """
    log_file.parent.mkdir(parents=True, exist_ok=True)

    logger = logging.getLogger(RUN_LOGGER_NAME)
    logger.setLevel(logging.INFO)
    logger.propagate = False

    handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    try:
        yield logger
    finally:
        logger.removeHandler(handler)
        handler.close()
