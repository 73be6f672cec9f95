# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Completion engine: drives the polling protocol for accepted (202) calls.

Two modes share one poll step:

- Blocking: the caller's thread loops GET -> sleep -> advance until a
  terminal status, an unexpected status, a transport failure, or the
  deadline.
- Non-blocking: a RecurringTask ticks on a background thread, immediately
  and then once per interval, and hands the terminal result to the
  completion callback exactly once before cancelling itself.

The elapsed clock advances by one interval per still-running poll, so the
number of poll requests before a timeout is ``ceil(timeout / interval)``.
"""

from __future__ import annotations

import logging
import math
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

import httpx

from ..config import ClientConfig
from ..constants import POLLING_INTERVAL, TIMEOUT
from ..exceptions import InvalidParameterError
from ..observability.collector import UnifiedMetricsCollector
from ..observability.constants import (
    ACTIVE_POLL_SESSIONS,
    POLL_REQUESTS_TOTAL,
    POLL_TIMEOUTS_TOTAL,
)
from ..protocols.action import ActionProtocol
from ..protocols.completion import CompletionProtocol
from ..request.builder import RequestBuilder
from ..types.result import ApiResult, ErrorKind
from .decoder import decode_poll, internal_error
from .timer import RecurringTask

logger = logging.getLogger(__name__)

TaskFactory = Callable[[Callable[[], None], float, str], RecurringTask]


def _option_ms(name: str, value: Any, default: int) -> int:
    """Millisecond value of a client option, or ``default`` when unset."""
    if value is None:
        return default
    if (
        isinstance(value, bool)
        or not isinstance(value, (int, float))
        or not math.isfinite(value)
    ):
        raise InvalidParameterError(
            f"field[{name}] must be a number of milliseconds, but got {value!r}",
            field_name=name,
        )
    return int(value)


@dataclass
class PollSession:
    """State of one in-flight poll; private to a single invocation."""

    url: str
    action_name: str
    timeout_ms: int
    interval_ms: int
    elapsed_ms: int = 0
    polls: int = 0
    started_at: float = field(default_factory=time.monotonic)

    def __post_init__(self) -> None:
        if self.interval_ms <= 0:
            raise ValueError("interval_ms must be positive")
        if self.timeout_ms < 0:
            raise ValueError("timeout_ms must not be negative")

    @property
    def interval_seconds(self) -> float:
        return self.interval_ms / 1000.0

    @property
    def expired(self) -> bool:
        return self.elapsed_ms >= self.timeout_ms

    def advance(self) -> None:
        self.elapsed_ms += self.interval_ms

    def timeout_result(self) -> ApiResult:
        return ApiResult.failure(
            ErrorKind.POLLING_TIMEOUT,
            "timeout of polling async API result",
            f"polling result of api[{self.action_name}] timeout after "
            f"{self.timeout_ms} ms",
        )


class CompletionEngine:
    """
    Polls job locations until they reach a terminal state.

    Args:
        http_client: Shared HTTP client used for every poll request
        builder: Builds poll requests (authorization header included)
        config: Source of default timeout and interval
        metrics: Optional collector for poll metrics
        sleep: Wait function of the blocking loop (seconds)
        task_factory: Creates the recurring task of non-blocking polling
    """

    def __init__(
        self,
        http_client: httpx.Client,
        builder: RequestBuilder,
        config: ClientConfig,
        metrics: UnifiedMetricsCollector | None = None,
        sleep: Callable[[float], None] = time.sleep,
        task_factory: TaskFactory = RecurringTask,
    ) -> None:
        self._http = http_client
        self._builder = builder
        self._config = config
        self._metrics = metrics
        self._sleep = sleep
        self._task_factory = task_factory

    def poll_options(self, action: ActionProtocol) -> tuple[int, int]:
        """
        Resolve the action's ``timeout`` and ``pollingInterval`` options.

        Unset options fall back to the config defaults.

        Returns:
            ``(timeout_ms, interval_ms)``

        Raises:
            InvalidParameterError: If an option is not a finite number, the
                timeout is negative, or the interval is not positive
        """
        timeout_ms = _option_ms(
            TIMEOUT,
            action.get_parameter_value(TIMEOUT),
            self._config.default_poll_timeout_ms,
        )
        interval_ms = _option_ms(
            POLLING_INTERVAL,
            action.get_parameter_value(POLLING_INTERVAL),
            self._config.default_poll_interval_ms,
        )
        if timeout_ms < 0:
            raise InvalidParameterError(
                f"field[{TIMEOUT}] must not be negative, but got {timeout_ms}",
                field_name=TIMEOUT,
            )
        if interval_ms <= 0:
            raise InvalidParameterError(
                f"field[{POLLING_INTERVAL}] must be at least 1 ms, "
                f"but got {interval_ms}",
                field_name=POLLING_INTERVAL,
            )
        return timeout_ms, interval_ms

    def open_session(
        self,
        location: str,
        action: ActionProtocol,
        options: tuple[int, int] | None = None,
    ) -> PollSession:
        """Resolve the polling URL and the action's timeout and interval."""
        timeout_ms, interval_ms = options or self.poll_options(action)
        return PollSession(
            url=self._builder.resolve_location(location),
            action_name=type(action).__name__,
            timeout_ms=timeout_ms,
            interval_ms=interval_ms,
        )

    def _poll_once(self, session: PollSession, action: ActionProtocol) -> ApiResult | None:
        request = self._builder.build_poll_request(session.url, action)
        session.polls += 1
        if self._metrics:
            self._metrics.inc_counter(
                POLL_REQUESTS_TOTAL, labels={"action": session.action_name}
            )
        response = self._http.send(request)
        logger.debug(
            f"Poll #{session.polls} of {session.action_name} at {session.url}: "
            f"{response.status_code}"
        )
        return decode_poll(response)

    def _begin(self, session: PollSession, mode: str) -> None:
        logger.debug(
            f"Polling {session.url} for {session.action_name} every "
            f"{session.interval_ms} ms, timeout {session.timeout_ms} ms ({mode})"
        )
        if self._metrics:
            self._metrics.inc_gauge(ACTIVE_POLL_SESSIONS, labels={"mode": mode})

    def _finish(self, session: PollSession, mode: str, result: ApiResult) -> ApiResult:
        if self._metrics:
            self._metrics.dec_gauge(ACTIVE_POLL_SESSIONS, labels={"mode": mode})
            if result.error is not None and result.error.kind is ErrorKind.POLLING_TIMEOUT:
                self._metrics.inc_counter(
                    POLL_TIMEOUTS_TOTAL, labels={"action": session.action_name}
                )
        if result.error is not None and result.error.kind is ErrorKind.POLLING_TIMEOUT:
            logger.warning(
                f"Polling {session.action_name} timed out after {session.polls} "
                f"polls ({session.timeout_ms} ms)"
            )
        else:
            logger.debug(
                f"Polling {session.action_name} finished after {session.polls} polls"
            )
        return result

    def poll_blocking(self, session: PollSession, action: ActionProtocol) -> ApiResult:
        """
        Poll on the calling thread until a terminal result.

        Returns:
            The decoded terminal result, an HTTP error for an unexpected
            status, an internal error for a transport failure, or a polling
            timeout error
        """
        self._begin(session, "blocking")
        while not session.expired:
            try:
                result = self._poll_once(session, action)
            except httpx.HTTPError as e:
                logger.warning(f"Poll of {session.action_name} failed: {e!r}")
                return self._finish(
                    session,
                    "blocking",
                    internal_error("an internal error happened", str(e) or repr(e)),
                )

            if result is not None:
                return self._finish(session, "blocking", result)

            try:
                self._sleep(session.interval_seconds)
            except InterruptedError:
                # Interrupted waits retry the poll without advancing the clock
                logger.warning(
                    f"Wait between polls of {session.action_name} was interrupted"
                )
                continue
            session.advance()

        return self._finish(session, "blocking", session.timeout_result())

    def poll_async(
        self,
        session: PollSession,
        action: ActionProtocol,
        completion: CompletionProtocol,
    ) -> RecurringTask:
        """
        Poll on a background task and deliver the terminal result to
        ``completion`` exactly once.

        Returns:
            The started task; it cancels itself on the terminal state
        """
        pending: list[CompletionProtocol] = [completion]
        task: RecurringTask

        def deliver(result: ApiResult) -> None:
            task.cancel()
            if not pending:
                return
            callback = pending.pop()
            self._finish(session, "callback", result)
            try:
                callback.complete(result)
            except Exception:
                logger.exception(
                    f"Completion callback of {session.action_name} raised"
                )

        def tick() -> None:
            try:
                result = self._poll_once(session, action)
            except Exception as e:
                logger.warning(f"Poll of {session.action_name} failed: {e!r}")
                deliver(internal_error("an internal error happened", str(e) or repr(e)))
                return

            if result is not None:
                deliver(result)
                return

            session.advance()
            if session.expired:
                deliver(session.timeout_result())

        task = self._task_factory(
            tick, session.interval_seconds, f"poll-{session.action_name}"
        )
        self._begin(session, "callback")
        task.start()
        return task


__all__ = ["CompletionEngine", "PollSession"]
