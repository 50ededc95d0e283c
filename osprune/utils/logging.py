"""Logging configuration.

Logs go to stderr; stdout is reserved for the JSON run report.
"""

from __future__ import annotations

import logging
import sys
import time
from typing import Optional

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"
DATE_FORMAT = "%Y/%m/%d %H:%M:%S"

# Third-party loggers that are only useful when debugging
NOISY_LOGGERS = ("openstack", "keystoneauth", "urllib3", "stevedore")


def setup_logging(level: str = "INFO", verbose: bool = False, stream: Optional[object] = None) -> None:
    """Configure root logging for the CLI.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR)
        verbose: Keep third-party SDK loggers at the requested level
        stream: Output stream (default: stderr)
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    formatter.converter = time.gmtime

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    for existing in list(root.handlers):
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(numeric_level)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(numeric_level if verbose else logging.WARNING)
