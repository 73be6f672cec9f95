# SPDX-License-Identifier: Apache-2.0
"""
Shared fixtures for the REST action client test suite.

The control-plane server is simulated with ``httpx.MockTransport``: a
ScriptedServer answers each (method, path) route from a queue of replies and
records every request it sees. Blocking polls get a recording sleep, and
non-blocking polls get a ManualTask factory so tests drive ticks by hand.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import httpx
import pytest

from rest_action_client import ClientConfig, Dispatcher
from rest_action_client.observability.collector import (
    UnifiedMetricsCollector,
    reset_metrics_collector,
)

BASE_URL = "http://10.0.0.5:8080/v1"


class ScriptedServer:
    """
    In-memory control-plane server.

    Each route holds a queue of replies; the last reply repeats once the
    queue is down to one entry. A reply is ``(status, body)`` where body is a
    dict (JSON), a str (raw text) or None (empty), or an exception instance
    that the transport raises.
    """

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self._routes: dict[tuple[str, str], list[Any]] = {}
        self.transport = httpx.MockTransport(self._handle)

    def on(self, method: str, path: str, *replies: Any) -> None:
        self._routes[(method.upper(), path)] = list(replies)

    def requests_to(self, method: str, path: str) -> list[httpx.Request]:
        return [
            r for r in self.requests if r.method == method and r.url.path == path
        ]

    def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        replies = self._routes.get((request.method, request.url.path))
        if not replies:
            return httpx.Response(404, text=f"no route for {request.url.path}")

        reply = replies.pop(0) if len(replies) > 1 else replies[0]
        if isinstance(reply, Exception):
            raise reply

        status, body = reply
        if body is None:
            return httpx.Response(status)
        if isinstance(body, str):
            return httpx.Response(status, text=body)
        return httpx.Response(status, json=body)


class ManualTask:
    """Stand-in for RecurringTask whose ticks are run by the test."""

    def __init__(
        self, func: Callable[[], None], interval: float, name: str | None = None
    ) -> None:
        self.func = func
        self.interval = interval
        self.name = name
        self.started = False
        self.cancelled = False
        self.runs = 0

    def start(self) -> None:
        self.started = True

    def cancel(self) -> None:
        self.cancelled = True

    def tick(self) -> None:
        self.func()
        self.runs += 1

    def run_until_cancelled(self, limit: int = 1000) -> None:
        while not self.cancelled and self.runs < limit:
            self.tick()


class ManualTaskFactory:
    """Task factory that records every ManualTask it creates."""

    def __init__(self) -> None:
        self.created: list[ManualTask] = []

    def __call__(
        self, func: Callable[[], None], interval: float, name: str | None = None
    ) -> ManualTask:
        task = ManualTask(func, interval, name)
        self.created.append(task)
        return task


@pytest.fixture(autouse=True)
def reset_global_metrics():
    """Keep the process-wide collector from leaking between tests."""
    reset_metrics_collector()
    yield
    reset_metrics_collector()


@pytest.fixture
def server() -> ScriptedServer:
    return ScriptedServer()


@pytest.fixture
def http_client(server: ScriptedServer):
    client = httpx.Client(transport=server.transport)
    yield client
    client.close()


@pytest.fixture
def config() -> ClientConfig:
    return ClientConfig(
        hostname="10.0.0.5",
        port=8080,
        default_poll_timeout_ms=10_000,
        default_poll_interval_ms=1_000,
    )


@pytest.fixture
def metrics() -> UnifiedMetricsCollector:
    return UnifiedMetricsCollector(enable_prometheus=False)


@pytest.fixture
def sleeps() -> list[float]:
    return []


@pytest.fixture
def manual_tasks() -> ManualTaskFactory:
    return ManualTaskFactory()


@pytest.fixture
def dispatcher(config, http_client, metrics, sleeps, manual_tasks) -> Dispatcher:
    return Dispatcher(
        config,
        http_client=http_client,
        metrics=metrics,
        sleep=sleeps.append,
        task_factory=manual_tasks,
    )
