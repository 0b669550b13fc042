"""
Progress Reporting

Progress is a stream of ProgressEvent values. A ProgressReporter forwards
each event to a callback or onto a queue the caller drains on its own
schedule. Reporting is observational only: a failing observer is logged
and ignored, never allowed to affect the run.
"""

import logging
import queue
from dataclasses import dataclass
from typing import Callable, Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProgressEvent:
    """One progress update: a stage plus free text or counters."""
    stage: str
    detail: str = ""
    current: int = 0
    total: int = 0
    found: int = 0


class ProgressReporter:
    """
    Fan-out point for progress events.

    Usage:
        events = queue.Queue()
        reporter = ProgressReporter(sink=events)
        ...
        while not events.empty():
            print(events.get_nowait())
    """

    def __init__(
        self,
        callback: Optional[Callable[[ProgressEvent], None]] = None,
        sink: Optional[queue.Queue] = None,
    ):
        self.callback = callback
        self.sink = sink

    def emit(self, stage: str, detail: str = "", current: int = 0, total: int = 0, found: int = 0) -> None:
        event = ProgressEvent(stage=stage, detail=detail, current=current, total=total, found=found)
        logger.debug("Progress: %s", event)

        if self.sink is not None:
            self.sink.put_nowait(event)

        if self.callback is not None:
            try:
                self.callback(event)
            except Exception as e:
                logger.warning("Progress callback failed: %s", e)


# Reporter that drops everything, used when the caller passes none
NULL_REPORTER = ProgressReporter()
