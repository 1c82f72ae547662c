"""Elapsed-time logging for pipeline stages."""

from __future__ import annotations

import time
from contextlib import contextmanager
from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from collections.abc import Generator

logger = structlog.get_logger(__name__)


@contextmanager
def timed(label: str) -> Generator[dict[str, float], None, None]:
    """Context manager that measures and logs elapsed wall-clock time.

    Usage::

        with timed("page_scan") as t:
            elements = await analyzer.analyze_page()
        print(t["elapsed"])  # seconds as float
    """
    result: dict[str, float] = {"elapsed": 0.0}
    start = time.monotonic()
    try:
        yield result
    finally:
        result["elapsed"] = time.monotonic() - start
        logger.info("stage_timed", label=label, elapsed_seconds=round(result["elapsed"], 3))
