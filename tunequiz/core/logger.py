"""
Logging configuration for tunequiz.

Outputs:
    - Console: level-colored lines routed through tqdm.write(), so the
      cache warm-up progress bar stays intact
    - log_full_<ts>.log: every record, DEBUG and up
    - log_errors_<ts>.log: ERROR and CRITICAL only
    - provider_failures_<ts>.log: one block per category whose provider
      fetch failed (playlist id, reason, whether fallback data was served)

Files are written only when setup_logging() receives a log directory.

Usage:
    from tunequiz.core.logger import setup_logging, get_logger

    setup_logging(log_dir)
    logger = get_logger(__name__)

    logger.info("Fetching kpop")
    log_provider_failure(logger, "kpop", "PL...", "timed out", used_fallback=True)
"""

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import TextIO

from tqdm import tqdm


LOG_LINE_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOG_TIME_FORMAT = "%Y-%m-%d %H:%M:%S"

# Extra fields read by ProviderFailureHandler
FAILURE_FIELDS = ("category", "collection_id", "reason", "fallback")


class Colors:
    """ANSI escape sequences used on the console."""
    RESET = "\033[0m"
    BOLD = "\033[1m"
    RED = "\033[31m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    BLUE = "\033[34m"
    CYAN = "\033[36m"
    WHITE = "\033[37m"


LEVEL_STYLES = {
    logging.DEBUG: Colors.BLUE,
    logging.INFO: Colors.GREEN,
    logging.WARNING: Colors.YELLOW,
    logging.ERROR: Colors.RED,
    logging.CRITICAL: Colors.BOLD + Colors.RED,
}

PROVENANCE_STYLES = {
    "fresh": Colors.GREEN,
    "cache": Colors.CYAN,
    "fallback": Colors.YELLOW,
}


class ColoredConsoleFormatter(logging.Formatter):
    """Formats console records as '<LEVEL>: message' with a colored level."""

    def format(self, record: logging.LogRecord) -> str:
        style = LEVEL_STYLES.get(record.levelno, Colors.WHITE)
        line = f"{style}{record.levelname}{Colors.RESET}: {record.getMessage()}"
        if record.exc_info and record.levelno >= logging.ERROR:
            line += "\n" + self.formatException(record.exc_info)
        return line


class TqdmLoggingHandler(logging.StreamHandler):
    """Console handler that prints through tqdm.write()."""

    def __init__(self, stream: TextIO = sys.stderr) -> None:
        super().__init__(stream)

    def emit(self, record: logging.LogRecord) -> None:
        try:
            tqdm.write(self.format(record), file=self.stream)
        except Exception:
            self.handleError(record)


class ProviderFailureHandler(logging.Handler):
    """
    Writes provider failures to a review file.

    Only records logged through log_provider_failure() are written; they
    carry 'provider_failed_<field>' extras for each of FAILURE_FIELDS.
    Each failure becomes one block:

        kpop  PLxQODuHe4E5MPk6anBwqCgyfIa00KhK0c
        Request timed out after 8.0s
        Served fallback data

    Attributes:
        report_path: Path of the provider_failures log file.
    """

    def __init__(self, report_path: Path) -> None:
        super().__init__()
        self.report_path = report_path
        self._file: TextIO | None = None

    def open(self) -> None:
        """Create (or truncate) the report file."""
        self._file = self.report_path.open("w", encoding="utf-8")

    def emit(self, record: logging.LogRecord) -> None:
        if self._file is None or not hasattr(record, "provider_failed_category"):
            return

        fields = {name: getattr(record, f"provider_failed_{name}", "") for name in FAILURE_FIELDS}
        outcome = "Served fallback data" if fields["fallback"] else "No fallback available"
        block = f"{fields['category']}  {fields['collection_id']}\n{fields['reason']}\n{outcome}\n\n"

        try:
            with self.lock:
                self._file.write(block)
                self._file.flush()
        except Exception:
            self.handleError(record)

    def close(self) -> None:
        if self._file is not None:
            self._file.close()
            self._file = None
        super().close()


class ErrorOnlyFilter(logging.Filter):
    """Lets through ERROR and CRITICAL records."""

    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno >= logging.ERROR


def _file_handler(path: Path, error_only: bool = False) -> logging.FileHandler:
    handler = logging.FileHandler(path, mode="w", encoding="utf-8")
    handler.setFormatter(logging.Formatter(LOG_LINE_FORMAT, LOG_TIME_FORMAT))
    if error_only:
        handler.addFilter(ErrorOnlyFilter())
    return handler


def setup_logging(log_dir: Path | None = None, level: str = "INFO") -> None:
    """
    Install the tunequiz handlers on the root logger.

    Call once at startup, after the configuration is loaded. A web
    service embedding the pipeline can skip this and keep its own
    logging setup.

    Args:
        log_dir: Directory for the log files, or None for console only.
                 Created if missing.
        level: Console level name (DEBUG, INFO, WARNING, ...). Files
               always receive everything.

    Not thread-safe: run it before any worker starts logging.
    """
    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    root.handlers.clear()

    console = TqdmLoggingHandler()
    console.setLevel(getattr(logging, level.upper(), logging.INFO))
    console.setFormatter(ColoredConsoleFormatter())
    root.addHandler(console)

    logging.getLogger("urllib3").setLevel(logging.WARNING)

    if log_dir is None:
        return

    log_dir.mkdir(parents=True, exist_ok=True)
    stamp = datetime.now().strftime("%Y-%m-%d_%H-%M-%S")

    root.addHandler(_file_handler(log_dir / f"log_full_{stamp}.log"))
    root.addHandler(_file_handler(log_dir / f"log_errors_{stamp}.log", error_only=True))

    failures = ProviderFailureHandler(log_dir / f"provider_failures_{stamp}.log")
    failures.open()
    root.addHandler(failures)


def get_logger(name: str) -> logging.Logger:
    """Return the logger for a module (pass __name__)."""
    return logging.getLogger(name)


def format_provenance_message(category: str, provenance: str, count: int) -> str:
    """
    One-line summary of where a category's tracks came from.

    Fresh fetches are green, cache hits cyan, fallback data yellow.
    """
    style = PROVENANCE_STYLES.get(provenance, Colors.WHITE)
    return f"{category}: {count} tracks ({style}{provenance}{Colors.RESET})"


def log_provider_failure(
    logger: logging.Logger,
    category: str,
    collection_id: str,
    reason: str,
    used_fallback: bool
) -> None:
    """
    Log a category whose provider fetch failed.

    The record is a WARNING when fallback data covered the failure and
    an ERROR when it did not. ProviderFailureHandler picks it up through
    its extra fields.

    Example:
        log_provider_failure(
            logger,
            category="kpop",
            collection_id="PLxQODuHe4E5MPk6anBwqCgyfIa00KhK0c",
            reason="Request timed out after 8.0s",
            used_fallback=True
        )
    """
    values = (category, collection_id, reason, used_fallback)
    logger.log(
        logging.WARNING if used_fallback else logging.ERROR,
        f"Provider fetch failed for {category}: {reason}",
        extra={f"provider_failed_{name}": value for name, value in zip(FAILURE_FIELDS, values)}
    )


def shutdown_logging() -> None:
    """Flush, close and detach every root handler. Call at exit."""
    root = logging.getLogger()
    for handler in list(root.handlers):
        handler.flush()
        handler.close()
        root.removeHandler(handler)
