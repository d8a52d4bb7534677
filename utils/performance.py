"""Per-operation timing records for the engine facade and the OCR pipeline."""
from __future__ import annotations

import threading
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Dict, Generator, List

from utils.logging import logger


@dataclass
class Timing:
    name: str
    duration: float
    metadata: dict = field(default_factory=dict)


_timings: List[Timing] = []
_lock = threading.Lock()


@contextmanager
def track_time(name: str, **metadata) -> Generator[Timing, None, None]:
    """
    Record how long the enclosed block takes under ``name``.

    The record is kept even when the block raises, so failed operations
    still show up in :func:`summarize_timings`.
    """
    timing = Timing(name=name, duration=0, metadata=metadata)
    start = time.perf_counter()
    try:
        yield timing
    finally:
        timing.duration = time.perf_counter() - start
        with _lock:
            _timings.append(timing)
        logger.debug("Timing: %s took %.3f seconds %s", name, timing.duration, metadata or "")


def get_timings() -> List[Timing]:
    with _lock:
        return list(_timings)


def clear_timings() -> None:
    with _lock:
        _timings.clear()


def summarize_timings() -> Dict[str, float]:
    """Total seconds spent per operation name, in first-recorded order."""
    totals: Dict[str, float] = {}
    for timing in get_timings():
        totals[timing.name] = totals.get(timing.name, 0.0) + timing.duration
    return totals
