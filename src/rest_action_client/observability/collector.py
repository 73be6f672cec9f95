# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Metrics collector for dispatcher and polling activity.

The UnifiedMetricsCollector keeps a dict-based snapshot of every metric (for
JSON export and tests) and mirrors each update into a prometheus_client
Counter, Gauge or Histogram.

Usage:
    >>> from rest_action_client.observability.collector import get_metrics_collector
    >>> collector = get_metrics_collector()
    >>> collector.inc_counter('action_client_calls_total',
    ...                       labels={'action': 'QueryHostAction', 'mode': 'blocking'})
    >>> metrics = collector.get_metrics()

Thread Safety:
    All operations are thread-safe. Poll ticks of non-blocking calls update
    metrics from background threads, so every update goes through an RLock.
"""

from __future__ import annotations

import logging
import threading
from collections import defaultdict
from dataclasses import dataclass
from typing import Any, ClassVar

from prometheus_client import (
    REGISTRY,
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    start_http_server,
)

from .constants import (
    ACTIVE_POLL_SESSIONS,
    CALL_DURATION_BUCKETS,
    CALL_DURATION_SECONDS,
    CALL_RESULTS_TOTAL,
    CALLS_TOTAL,
    POLL_REQUESTS_TOTAL,
    POLL_TIMEOUTS_TOTAL,
    TRANSPORT_ERRORS_TOTAL,
)

logger = logging.getLogger(__name__)


@dataclass
class MetricDefinition:
    """Schema of a metric: type, description, labels and histogram buckets."""

    name: str
    metric_type: str  # 'counter', 'gauge', 'histogram'
    description: str
    label_names: tuple[str, ...] = ()
    buckets: list[float] | None = None


METRIC_DEFINITIONS: dict[str, MetricDefinition] = {
    CALLS_TOTAL: MetricDefinition(
        CALLS_TOTAL,
        "counter",
        "Total logical calls dispatched",
        ("action", "mode"),
    ),
    CALL_RESULTS_TOTAL: MetricDefinition(
        CALL_RESULTS_TOTAL,
        "counter",
        "Total terminal call results",
        ("action", "outcome"),
    ),
    TRANSPORT_ERRORS_TOTAL: MetricDefinition(
        TRANSPORT_ERRORS_TOTAL,
        "counter",
        "Total transport failures on initial requests",
        ("action",),
    ),
    POLL_REQUESTS_TOTAL: MetricDefinition(
        POLL_REQUESTS_TOTAL,
        "counter",
        "Total poll requests issued",
        ("action",),
    ),
    POLL_TIMEOUTS_TOTAL: MetricDefinition(
        POLL_TIMEOUTS_TOTAL,
        "counter",
        "Total poll sessions that timed out",
        ("action",),
    ),
    ACTIVE_POLL_SESSIONS: MetricDefinition(
        ACTIVE_POLL_SESSIONS,
        "gauge",
        "Poll sessions currently in flight",
        ("mode",),
    ),
    CALL_DURATION_SECONDS: MetricDefinition(
        CALL_DURATION_SECONDS,
        "histogram",
        "Time from dispatch to terminal result",
        ("action",),
        buckets=CALL_DURATION_BUCKETS,
    ),
}


class UnifiedMetricsCollector:
    """
    Thread-safe metrics collector with Prometheus mirroring.

    Cardinality Protection:
        At most MAX_LABEL_COMBINATIONS unique label combinations are tracked
        per metric; further combinations are dropped with a warning.

    Example:
        >>> collector = UnifiedMetricsCollector(enable_prometheus=False)
        >>> collector.inc_counter('action_client_poll_requests_total',
        ...                       labels={'action': 'CreateVmAction'})
        >>> collector.get_metrics()["counters"]
        {'action_client_poll_requests_total': {'action=CreateVmAction': 1.0}}
    """

    MAX_LABEL_COMBINATIONS: ClassVar[int] = 1000

    def __init__(
        self,
        enable_prometheus: bool = True,
        registry: CollectorRegistry | None = None,
    ) -> None:
        """
        Args:
            enable_prometheus: Mirror updates into prometheus_client metrics
            registry: CollectorRegistry to register with (default registry if None)
        """
        self._enable_prometheus = enable_prometheus
        self._registry = registry if registry is not None else REGISTRY

        self._counters: dict[str, dict[str, float]] = defaultdict(
            lambda: defaultdict(float)
        )
        self._gauges: dict[str, dict[str, float]] = defaultdict(
            lambda: defaultdict(float)
        )
        self._histograms: dict[str, dict[str, list[float]]] = defaultdict(
            lambda: defaultdict(list)
        )
        self._label_combinations: dict[str, set[str]] = defaultdict(set)
        self._prom_metrics: dict[str, Any] = {}

        self._lock = threading.RLock()
        self._server_running = False

        logger.debug(
            f"UnifiedMetricsCollector initialized "
            f"(prometheus={'enabled' if self._enable_prometheus else 'disabled'})"
        )

    def _labels_to_key(self, labels: dict[str, str] | None) -> str:
        if not labels:
            return ""
        return ",".join(f"{k}={v}" for k, v in sorted(labels.items()))

    def _check_cardinality(self, name: str, label_key: str) -> bool:
        """True if the label combination may be recorded."""
        seen = self._label_combinations[name]
        if label_key in seen:
            return True
        if len(seen) >= self.MAX_LABEL_COMBINATIONS:
            logger.warning(
                f"Cardinality limit ({self.MAX_LABEL_COMBINATIONS}) reached "
                f"for metric {name}. Dropping label combination: {label_key}"
            )
            return False
        seen.add(label_key)
        return True

    def _prom_metric(self, name: str, metric_type: str) -> Any | None:
        """Get or lazily register the prometheus_client metric for ``name``."""
        if not self._enable_prometheus:
            return None

        with self._lock:
            if name in self._prom_metrics:
                return self._prom_metrics[name]

            defn = METRIC_DEFINITIONS.get(name) or MetricDefinition(
                name, metric_type, f"Dynamic {metric_type}: {name}"
            )
            try:
                if metric_type == "counter":
                    metric = Counter(
                        name,
                        defn.description,
                        list(defn.label_names),
                        registry=self._registry,
                    )
                elif metric_type == "gauge":
                    metric = Gauge(
                        name,
                        defn.description,
                        list(defn.label_names),
                        registry=self._registry,
                    )
                else:
                    metric = Histogram(
                        name,
                        defn.description,
                        list(defn.label_names),
                        buckets=defn.buckets or CALL_DURATION_BUCKETS,
                        registry=self._registry,
                    )
            except ValueError as e:
                # Duplicate registration in a shared registry
                logger.warning(f"Failed to create Prometheus {metric_type} {name}: {e}")
                metric = None

            self._prom_metrics[name] = metric
            return metric

    def _mirror(
        self,
        name: str,
        metric_type: str,
        op: str,
        value: float,
        labels: dict[str, str] | None,
    ) -> None:
        metric = self._prom_metric(name, metric_type)
        if metric is None:
            return
        try:
            target = metric.labels(**labels) if labels else metric
            getattr(target, op)(value)
        except ValueError as e:
            logger.debug(f"Prometheus {metric_type} update failed for {name}: {e}")

    # === Counter Operations ===

    def inc_counter(
        self,
        name: str,
        value: float = 1,
        labels: dict[str, str] | None = None,
    ) -> None:
        """
        Increment a counter metric.

        Raises:
            ValueError: If value is negative
        """
        if value < 0:
            raise ValueError("Counter increment must be non-negative")

        label_key = self._labels_to_key(labels)
        with self._lock:
            if not self._check_cardinality(name, label_key):
                return
            self._counters[name][label_key] += value

        self._mirror(name, "counter", "inc", value, labels)

    # === Gauge Operations ===

    def set_gauge(
        self, name: str, value: float, labels: dict[str, str] | None = None
    ) -> None:
        label_key = self._labels_to_key(labels)
        with self._lock:
            if not self._check_cardinality(name, label_key):
                return
            self._gauges[name][label_key] = value

        self._mirror(name, "gauge", "set", value, labels)

    def inc_gauge(
        self, name: str, value: float = 1.0, labels: dict[str, str] | None = None
    ) -> None:
        label_key = self._labels_to_key(labels)
        with self._lock:
            if not self._check_cardinality(name, label_key):
                return
            self._gauges[name][label_key] += value

        self._mirror(name, "gauge", "inc", value, labels)

    def dec_gauge(
        self, name: str, value: float = 1.0, labels: dict[str, str] | None = None
    ) -> None:
        label_key = self._labels_to_key(labels)
        with self._lock:
            if not self._check_cardinality(name, label_key):
                return
            self._gauges[name][label_key] -= value

        self._mirror(name, "gauge", "dec", value, labels)

    # === Histogram Operations ===

    def observe_histogram(
        self, name: str, value: float, labels: dict[str, str] | None = None
    ) -> None:
        label_key = self._labels_to_key(labels)
        with self._lock:
            if not self._check_cardinality(name, label_key):
                return
            observations = self._histograms[name][label_key]
            observations.append(value)
            # Keep only recent observations
            if len(observations) > 10000:
                del observations[:-5000]

        self._mirror(name, "histogram", "observe", value, labels)

    # === Snapshot Operations ===

    def get_metrics(self) -> dict[str, Any]:
        """
        Snapshot of all metrics, suitable for JSON serialization:

        {
            "counters": {"metric_name": {"label_key": value, ...}, ...},
            "gauges": {"metric_name": {"label_key": value, ...}, ...},
            "histograms": {"metric_name": {"label_key": {...}, ...}, ...}
        }
        """
        with self._lock:
            counters = {name: dict(values) for name, values in self._counters.items()}
            gauges = {name: dict(values) for name, values in self._gauges.items()}

            histograms: dict[str, dict[str, dict[str, Any]]] = {}
            for name, label_values in self._histograms.items():
                histograms[name] = {
                    label_key: {
                        "count": len(obs),
                        "sum": sum(obs),
                        "avg": sum(obs) / len(obs),
                        "min": min(obs),
                        "max": max(obs),
                    }
                    for label_key, obs in label_values.items()
                    if obs
                }

        return {"counters": counters, "gauges": gauges, "histograms": histograms}

    def get_counter(self, name: str, labels: dict[str, str] | None = None) -> float:
        """Current value of one counter series (0 if never incremented)."""
        with self._lock:
            return self._counters.get(name, {}).get(self._labels_to_key(labels), 0)

    def get_gauge(self, name: str, labels: dict[str, str] | None = None) -> float:
        """Current value of one gauge series (0 if never set)."""
        with self._lock:
            return self._gauges.get(name, {}).get(self._labels_to_key(labels), 0.0)

    # === Lifecycle ===

    def reset(self) -> None:
        """Reset the dict-based metrics. Prometheus series are left as is."""
        with self._lock:
            self._counters.clear()
            self._gauges.clear()
            self._histograms.clear()
            self._label_combinations.clear()

        logger.debug("Metrics collector reset")

    # === Prometheus HTTP Server ===

    def start_http_server(self, host: str = "127.0.0.1", port: int = 9090) -> bool:
        """
        Start the Prometheus HTTP server for metrics scraping.

        Binds to localhost by default. Returns True if the server is running.
        """
        if self._server_running:
            logger.warning("Prometheus server already running")
            return True

        try:
            start_http_server(port, addr=host, registry=self._registry)
        except OSError as e:
            logger.error(f"Failed to start Prometheus server: {e}")
            return False

        self._server_running = True
        logger.info(f"Prometheus metrics server started on {host}:{port}")
        return True

    @property
    def prometheus_enabled(self) -> bool:
        return self._enable_prometheus

    @property
    def server_running(self) -> bool:
        return self._server_running


# =============================================================================
# Singleton Pattern
# =============================================================================

_global_collector: UnifiedMetricsCollector | None = None
_collector_lock = threading.Lock()


def get_metrics_collector(enable_prometheus: bool = True) -> UnifiedMetricsCollector:
    """
    Get or create the process-wide metrics collector.

    Args:
        enable_prometheus: Only used on first call
    """
    global _global_collector

    if _global_collector is None:
        with _collector_lock:
            if _global_collector is None:
                _global_collector = UnifiedMetricsCollector(
                    enable_prometheus=enable_prometheus
                )

    return _global_collector


def reset_metrics_collector() -> None:
    """Drop the process-wide collector (mainly for testing)."""
    global _global_collector
    with _collector_lock:
        if _global_collector:
            _global_collector.reset()
        _global_collector = None


__all__ = [
    "METRIC_DEFINITIONS",
    "MetricDefinition",
    "UnifiedMetricsCollector",
    "get_metrics_collector",
    "reset_metrics_collector",
]
