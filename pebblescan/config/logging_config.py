# pebblescan/config/logging_config.py

"""Per-run logging for pebblescan.

Every CLI invocation writes ``logs/run_<timestamp>.log`` at DEBUG level,
so a scrape that silently fell back to a URL-derived title can be
traced strategy by strategy afterwards.  The console only shows
warnings unless ``verbose`` is requested.
"""

import logging
import sys
from datetime import datetime
from pathlib import Path

from pebblescan.config.settings import Settings

_FILE_FORMAT = (
    "%(asctime)s | %(levelname)-8s | %(name)s | "
    "%(module)s:%(funcName)s:%(lineno)d | %(message)s"
)
_CONSOLE_FORMAT = "%(levelname)-8s | %(name)s | %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Chatty third-party loggers pinned to WARNING in the run log
_NOISY_LOGGERS: tuple[str, ...] = ("urllib3", "charset_normalizer")


def setup_logging(
    verbose: bool = False,
    log_dir: Path | None = None,
) -> Path:
    """Attach file and console handlers to the ``pebblescan`` logger.

    Args:
        verbose: Lower the console threshold from WARNING to INFO.
        log_dir: Override for :attr:`Settings.LOGS_DIR`.

    Returns:
        Path of the log file for this run.
    """
    target_dir = log_dir or Settings.LOGS_DIR
    target_dir.mkdir(parents=True, exist_ok=True)
    stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    log_file = target_dir / f"run_{stamp}.log"

    app_logger = logging.getLogger("pebblescan")
    app_logger.setLevel(logging.DEBUG)

    # Repeated calls (tests, chained commands) keep the first handlers
    if app_logger.handlers:
        return log_file

    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(
        logging.Formatter(_FILE_FORMAT, datefmt=_DATE_FORMAT)
    )

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(
        logging.INFO if verbose else logging.WARNING
    )
    console_handler.setFormatter(
        logging.Formatter(_CONSOLE_FORMAT, datefmt=_DATE_FORMAT)
    )

    app_logger.addHandler(file_handler)
    app_logger.addHandler(console_handler)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    app_logger.info("Logging initialised, run log at %s", log_file)
    return log_file
