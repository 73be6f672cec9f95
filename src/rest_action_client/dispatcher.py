# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Dispatcher: the entry point that turns an action into a result.

One logical call is:

1. ``action.check_parameters()``, resolution of the polling options of async
   actions, and request construction; malformed calls raise a ParameterError
   before any I/O
2. The initial HTTP exchange; a transport failure here raises
   ApiTransportError
3. Decoding of the initial response into a terminal result, or an accepted
   job location
4. For accepted jobs, the completion engine polls the location, blocking the
   caller or on a background task

Every outcome after step 2 is an ApiResult. Callers check ``result.error``.
"""

import logging
import time
from collections.abc import Callable
from typing import Any

import httpx
from typing_extensions import Self

from .completion.decoder import decode_initial
from .completion.engine import CompletionEngine, TaskFactory
from .completion.timer import RecurringTask
from .config import ClientConfig
from .exceptions import ApiTransportError, ConfigurationError
from .observability.collector import UnifiedMetricsCollector, get_metrics_collector
from .observability.constants import (
    CALL_DURATION_SECONDS,
    CALL_RESULTS_TOTAL,
    CALLS_TOTAL,
    TRANSPORT_ERRORS_TOTAL,
)
from .protocols.action import ActionProtocol
from .protocols.completion import CompletionProtocol, FunctionCompletion, as_completion
from .request.builder import RequestBuilder
from .types.result import ApiResult

logger = logging.getLogger(__name__)


class Dispatcher:
    """
    Executes actions against one control-plane server.

    The HTTP client is long-lived and shared by every invocation; call sites
    never mutate it. A dispatcher created without an ``http_client`` owns its
    client and closes it in ``close()``.

    Example:
        >>> config = ClientConfig(hostname="10.0.0.5", port=8080)
        >>> with Dispatcher(config) as dispatcher:
        ...     result = dispatcher.call(QueryHostAction(uuid="abc-123", sessionId=sid))
        ...     if result.error:
        ...         print(result.error)
    """

    def __init__(
        self,
        config: ClientConfig,
        http_client: httpx.Client | None = None,
        metrics: UnifiedMetricsCollector | None = None,
        *,
        sleep: Callable[[float], None] = time.sleep,
        task_factory: TaskFactory = RecurringTask,
    ) -> None:
        """
        Args:
            config: Server location and polling defaults (required)
            http_client: Shared client; one is created if omitted
            metrics: Collector; the global one is used if omitted and
                ``config.metrics_enabled`` is set
            sleep: Wait function of blocking polls
            task_factory: Recurring task used by non-blocking polls

        Raises:
            ConfigurationError: If ``config`` is None
        """
        if config is None:
            raise ConfigurationError(
                "a ClientConfig must be provided before any call can be made"
            )

        self._config = config
        self._owns_client = http_client is None
        self._http = (
            http_client
            if http_client is not None
            else httpx.Client(timeout=config.request_timeout)
        )

        if metrics is None and config.metrics_enabled:
            metrics = get_metrics_collector()
        self._metrics = metrics if config.metrics_enabled else None

        self._builder = RequestBuilder(config)
        self._engine = CompletionEngine(
            self._http,
            self._builder,
            config,
            metrics=self._metrics,
            sleep=sleep,
            task_factory=task_factory,
        )

    @property
    def config(self) -> ClientConfig:
        return self._config

    @property
    def engine(self) -> CompletionEngine:
        return self._engine

    def call(
        self,
        action: ActionProtocol,
        completion: CompletionProtocol | Callable[[ApiResult], None] | None = None,
    ) -> ApiResult | None:
        """
        Execute ``action``.

        Blocking when ``completion`` is None: returns the terminal result,
        polling on the calling thread if the server accepts the job.

        Non-blocking otherwise: returns None, and ``completion`` is invoked
        exactly once with the terminal result. Immediate outcomes are
        delivered on the calling thread; polled outcomes on a background
        thread.

        Raises:
            ParameterError: Missing or invalid parameters, missing session
            ApiTransportError: The initial request failed at transport level
        """
        name = type(action).__name__
        callback = None if completion is None else as_completion(completion)
        mode = "blocking" if callback is None else "callback"

        info = action.get_rest_info()
        action.check_parameters()
        options = self._engine.poll_options(action) if info.need_poll else None
        request = self._builder.build(action)

        self._count(CALLS_TOTAL, action=name, mode=mode)
        started = time.monotonic()
        logger.debug(f"Dispatching {name}: {request.method} {request.url} ({mode})")

        try:
            response = self._http.send(request)
        except httpx.TransportError as e:
            self._count(TRANSPORT_ERRORS_TOTAL, action=name)
            logger.error(f"{name}: {request.method} {request.url} failed: {e!r}")
            raise ApiTransportError(
                f"{request.method} {request.url} failed: {e}", url=str(request.url)
            ) from e

        decision = decode_initial(response, info, name)

        if decision.result is not None:
            self._record_result(name, decision.result, started)
            if callback is None:
                return decision.result
            callback.complete(decision.result)
            return None

        session = self._engine.open_session(decision.location, action, options)

        if callback is None:
            result = self._engine.poll_blocking(session, action)
            self._record_result(name, result, started)
            return result

        def on_complete(result: ApiResult) -> None:
            self._record_result(name, result, started)
            callback.complete(result)

        self._engine.poll_async(session, action, FunctionCompletion(on_complete))
        return None

    def _count(self, metric: str, **labels: str) -> None:
        if self._metrics:
            self._metrics.inc_counter(metric, labels=labels)

    def _record_result(self, name: str, result: ApiResult, started: float) -> None:
        if result.error is None:
            outcome = "success"
        elif result.error.kind is not None:
            outcome = result.error.kind.value
        else:
            outcome = "server_error"
        logger.debug(f"{name} finished: {outcome}")

        if self._metrics:
            self._metrics.inc_counter(
                CALL_RESULTS_TOTAL, labels={"action": name, "outcome": outcome}
            )
            self._metrics.observe_histogram(
                CALL_DURATION_SECONDS,
                time.monotonic() - started,
                labels={"action": name},
            )

    def close(self) -> None:
        """Close the HTTP client if this dispatcher created it."""
        if self._owns_client:
            self._http.close()

    def __enter__(self) -> Self:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()


def create_dispatcher(
    hostname: str,
    port: int = 8080,
    http_client: httpx.Client | None = None,
    metrics: UnifiedMetricsCollector | None = None,
    **config_kwargs: Any,
) -> Dispatcher:
    """
    Factory for a Dispatcher with a freshly built ClientConfig.

    Args:
        hostname: Control-plane server host
        port: Control-plane server port
        http_client: Optional shared HTTP client
        metrics: Optional metrics collector
        **config_kwargs: Further ClientConfig fields

    Raises:
        ConfigurationError: If the configuration is invalid
    """
    config = ClientConfig(hostname=hostname, port=port, **config_kwargs)
    return Dispatcher(config, http_client=http_client, metrics=metrics)


__all__ = ["Dispatcher", "create_dispatcher"]
