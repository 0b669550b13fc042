"""
Bounded Batch Fan-out

Runs a worker over items in batches no larger than batch_size. Each batch
runs concurrently and is joined with all-settle semantics: one failing or
slow member never cancels its siblings. Results are collected per task.
"""

from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Callable, Generic, Iterator, List, Optional, Sequence, TypeVar

from .deadline import Deadline

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


@dataclass
class TaskResult(Generic[T, R]):
    """Outcome of one task: a value, or the exception it raised."""
    item: T
    value: Optional[R] = None
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def chunked(items: Sequence[T], size: int) -> Iterator[Sequence[T]]:
    """Yield consecutive slices of at most size items."""
    size = max(1, size)
    for i in range(0, len(items), size):
        yield items[i:i + size]


def run_batch(items: Sequence[T], worker: Callable[[T], R]) -> List[TaskResult[T, R]]:
    """Run worker over every item concurrently and wait for all of them."""
    if not items:
        return []

    with ThreadPoolExecutor(max_workers=len(items)) as executor:
        futures = [(item, executor.submit(worker, item)) for item in items]

    results: List[TaskResult[T, R]] = []
    for item, future in futures:
        error = future.exception()
        if error is not None:
            logger.warning("Task failed for %s: %s: %s", item, type(error).__name__, error)
            results.append(TaskResult(item=item, error=error))
        else:
            results.append(TaskResult(item=item, value=future.result()))
    return results


def run_in_batches(
    items: Sequence[T],
    worker: Callable[[T], R],
    batch_size: int,
    delay_seconds: float = 0.0,
    deadline: Optional[Deadline] = None,
    on_batch_done: Optional[Callable[[int, List[TaskResult[T, R]]], Any]] = None,
) -> List[TaskResult[T, R]]:
    """
    Run worker over items in concurrent batches.

    Args:
        items: Work items
        worker: Function applied to each item
        batch_size: Maximum tasks in flight at once
        delay_seconds: Politeness pause between batches (not after the last)
        deadline: Checked before each batch; once expired no new batch starts
        on_batch_done: Called with (items processed so far, batch results)

    Returns:
        Results for every item that was started, in input order
    """
    results: List[TaskResult[T, R]] = []
    processed = 0

    for batch in chunked(items, batch_size):
        if deadline is not None and deadline.expired():
            logger.warning(
                "Time budget exhausted - processed %d/%d items", processed, len(items)
            )
            break

        batch_results = run_batch(batch, worker)
        results.extend(batch_results)
        processed += len(batch)

        if on_batch_done is not None:
            on_batch_done(processed, batch_results)

        if delay_seconds > 0 and processed < len(items):
            time.sleep(delay_seconds)

    return results
