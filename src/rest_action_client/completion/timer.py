# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Recurring background task used by non-blocking polling.
"""

import logging
import threading
from collections.abc import Callable

logger = logging.getLogger(__name__)


class RecurringTask:
    """
    Runs ``func`` on a daemon thread: once immediately, then again
    ``interval`` seconds after each run finishes, until cancelled.

    Runs never overlap. ``cancel()`` may be called from inside ``func``; the
    current run completes and no further run starts. An exception escaping
    ``func`` is logged and cancels the task.
    """

    def __init__(
        self,
        func: Callable[[], None],
        interval: float,
        name: str | None = None,
    ) -> None:
        if interval <= 0:
            raise ValueError("interval must be positive")
        self._func = func
        self._interval = interval
        self._cancelled = threading.Event()
        self._thread = threading.Thread(
            target=self._run, name=name or "recurring-task", daemon=True
        )
        self._runs = 0

    @property
    def interval(self) -> float:
        return self._interval

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    @property
    def runs(self) -> int:
        """Number of completed runs."""
        return self._runs

    def is_alive(self) -> bool:
        return self._thread.is_alive()

    def start(self) -> None:
        self._thread.start()
        logger.debug(f"Started {self._thread.name} (interval {self._interval}s)")

    def cancel(self) -> None:
        self._cancelled.set()

    def join(self, timeout: float | None = None) -> bool:
        """Wait for the thread to exit; True if it did."""
        self._thread.join(timeout)
        return not self._thread.is_alive()

    def _run(self) -> None:
        while not self._cancelled.is_set():
            try:
                self._func()
            except Exception:
                logger.exception(f"{self._thread.name} failed; cancelling")
                self._cancelled.set()
            self._runs += 1
            if self._cancelled.wait(self._interval):
                break
        logger.debug(f"{self._thread.name} stopped after {self._runs} runs")


__all__ = ["RecurringTask"]
