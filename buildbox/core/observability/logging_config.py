"""
Logging configuration — set up once by the CLI entrypoint.

Every module logs through ``logging.getLogger(__name__)``; this module
only decides where those records go and how they look.

Console level, highest precedence first:
    --debug  >  --verbose  >  --quiet  >  BUILDBOX_LOG_LEVEL  >  WARNING

``BUILDBOX_LOG_FILE`` adds a file handler that always records DEBUG.
"""

from __future__ import annotations

import logging
import sys

_DEBUG_FORMAT = "%(asctime)s %(levelname)-5s %(name)s:%(lineno)d — %(message)s"
_INFO_FORMAT = "%(asctime)s [%(name)s] %(message)s"


def _console_formatter(level: int) -> logging.Formatter:
    if level <= logging.DEBUG:
        return logging.Formatter(_DEBUG_FORMAT, datefmt="%H:%M:%S")
    if level <= logging.INFO:
        return logging.Formatter(_INFO_FORMAT, datefmt="%H:%M:%S")
    return logging.Formatter("%(message)s")


def setup_logging(level: str = "WARNING", log_file: str | None = None) -> None:
    """Replace the root logger's handlers with a stderr handler at ``level``.

    When ``log_file`` is set, a second handler appends full DEBUG
    detail to that file regardless of the console level.
    """
    console_level = _parse_level(level)

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(_console_formatter(console_level))

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(console)
    root.setLevel(console_level)

    if log_file:
        fh = logging.FileHandler(log_file, encoding="utf-8")
        fh.setLevel(logging.DEBUG)
        fh.setFormatter(logging.Formatter(_DEBUG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        root.addHandler(fh)
        root.setLevel(logging.DEBUG)

    # Errors inside logging itself are never raised
    logging.raiseExceptions = False


def _parse_level(level: str | None) -> int:
    """Level name → numeric level; unknown or empty names mean WARNING."""
    if not level:
        return logging.WARNING
    return logging.getLevelNamesMapping().get(level.upper(), logging.WARNING)
