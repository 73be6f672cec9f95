# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Observability for the REST action client.

Classes:
    UnifiedMetricsCollector: Thread-safe metrics with Prometheus mirroring.

Functions:
    get_metrics_collector: Get the global metrics collector singleton.
    reset_metrics_collector: Reset the global metrics collector singleton.
"""

from .collector import (
    METRIC_DEFINITIONS,
    MetricDefinition,
    UnifiedMetricsCollector,
    get_metrics_collector,
    reset_metrics_collector,
)
from .constants import (
    ACTIVE_POLL_SESSIONS,
    CALL_DURATION_BUCKETS,
    CALL_DURATION_SECONDS,
    CALL_RESULTS_TOTAL,
    CALLS_TOTAL,
    METRIC_PREFIX,
    POLL_REQUESTS_TOTAL,
    POLL_TIMEOUTS_TOTAL,
    TRANSPORT_ERRORS_TOTAL,
)

__all__ = [
    "ACTIVE_POLL_SESSIONS",
    "CALLS_TOTAL",
    "CALL_DURATION_BUCKETS",
    "CALL_DURATION_SECONDS",
    "CALL_RESULTS_TOTAL",
    "METRIC_DEFINITIONS",
    "METRIC_PREFIX",
    "POLL_REQUESTS_TOTAL",
    "POLL_TIMEOUTS_TOTAL",
    "TRANSPORT_ERRORS_TOTAL",
    "MetricDefinition",
    "UnifiedMetricsCollector",
    "get_metrics_collector",
    "reset_metrics_collector",
]
