"""Logging setup shared by the engine, the OCR pipeline and the CLI."""
from __future__ import annotations

import logging
import sys
from typing import Optional, Union


_LOG_FORMAT = (
    "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
)

# chatty third-party loggers, capped at WARNING unless the root level is stricter
_QUIET_LOGGERS = ("PIL", "pytesseract")


def configure_logging(level: Union[int, str] = logging.INFO, logfile: Optional[str] = None) -> None:
    """
    Configure the root logger with a stderr (and optional file) handler.

    stdout is left alone so CLI commands can print JSON reports on it.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    handlers = [logging.StreamHandler(sys.stderr)]
    if logfile:
        handlers.append(logging.FileHandler(logfile))
    logging.basicConfig(level=level, format=_LOG_FORMAT, handlers=handlers)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))


logger = logging.getLogger("docengine")
