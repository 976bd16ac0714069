"""Logging configuration for superchat-scraper runs.

The report itself is printed to stdout, so all log output goes to stderr
and to a per-run DEBUG file. Normal runs keep the console terse: stage
counts and dropped triplets. ``--verbose`` turns on the per-row decisions
from the extractor and repairer, and tags each line with its logger so it
is clear which stage made the call.
"""

import logging
import re
import sys
from datetime import datetime
from pathlib import Path

CONSOLE_FORMAT = "%(asctime)s %(levelname)-5s %(message)s"
VERBOSE_CONSOLE_FORMAT = "%(asctime)s %(levelname)-5s [%(name)s] %(message)s"
FILE_FORMAT = "%(asctime)s %(levelname)-5s [%(name)s] %(message)s"

# The browser driver and its websocket transport log every CDP message.
_QUIET_LOGGERS = ("nodriver", "uc", "websockets")


def log_label(url: str | None) -> str:
    """Short filesystem-safe label for a page URL (its last path segment).

    ``https://example.org/archive/abc?x=1`` -> ``abc``. Empty when the URL
    has no usable segment.
    """
    if not url:
        return ""
    path = re.split(r"[?#]", url, maxsplit=1)[0].rstrip("/")
    segment = path.rsplit("/", 1)[-1]
    if "://" in url and segment == path.split("://", 1)[-1]:
        # bare host, no path
        return ""
    return re.sub(r"[^A-Za-z0-9_-]+", "_", segment).strip("_")[:40]


def setup_logging(
    data_dir: str = "data", verbose: bool = False, url: str | None = None
) -> Path:
    """Attach stderr and file handlers to the root logger.

    The log file is ``{data_dir}/logs/superchat-[<label>-]<timestamp>.log``
    where the label comes from ``url`` so runs over different pages are
    easy to tell apart. Existing root handlers are removed first so
    repeated calls do not duplicate output.

    Args:
        data_dir: Base data directory. ``logs/`` is created inside it.
        verbose: Console shows DEBUG with logger names instead of INFO.
        url: Page being scraped, used only to name the log file.

    Returns:
        Path to the newly created log file.
    """
    log_dir = Path(data_dir) / "logs"
    log_dir.mkdir(parents=True, exist_ok=True)

    timestamp = datetime.now().strftime("%Y-%m-%d-%H%M%S")
    label = log_label(url)
    stem = f"superchat-{label}-{timestamp}" if label else f"superchat-{timestamp}"
    log_file = log_dir / f"{stem}.log"

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    root.handlers.clear()

    console = logging.StreamHandler(sys.stderr)
    if verbose:
        console.setLevel(logging.DEBUG)
        console.setFormatter(logging.Formatter(VERBOSE_CONSOLE_FORMAT, datefmt="%H:%M:%S"))
    else:
        console.setLevel(logging.INFO)
        console.setFormatter(logging.Formatter(CONSOLE_FORMAT, datefmt="%H:%M:%S"))
    root.addHandler(console)

    file_handler = logging.FileHandler(str(log_file), encoding="utf-8")
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(logging.Formatter(FILE_FORMAT))
    root.addHandler(file_handler)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return log_file
