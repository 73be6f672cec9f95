# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Metric name constants following Prometheus naming conventions.

All metric names use the ``action_client_`` prefix.

Naming Conventions:
    - Counter metrics end with `_total`
    - Histogram metrics for time end with `_seconds`
    - Gauges use present-tense descriptive names

Label Best Practices:
    To prevent label cardinality explosion, use only:
    - `action` - Action class name (categorical: QueryHostAction)
    - `outcome` - success, or an error kind tag
    - `mode` - blocking, callback

    NEVER use:
    - `session_id` - Unique per login (unbounded, and a credential!)
    - `url` - Contains resource UUIDs (unbounded!)
    - `location` - Unique per job (unbounded!)

Usage:
    >>> from rest_action_client.observability.constants import CALLS_TOTAL
    >>> print(CALLS_TOTAL)
    'action_client_calls_total'
"""


# =============================================================================
# Global Prefix
# =============================================================================

METRIC_PREFIX = "action_client"
"""Prefix for all Prometheus metrics in this library."""


# =============================================================================
# Call Metrics (dispatcher.py)
# =============================================================================

CALLS_TOTAL = f"{METRIC_PREFIX}_calls_total"
"""Total logical calls dispatched."""

CALL_RESULTS_TOTAL = f"{METRIC_PREFIX}_call_results_total"
"""Total terminal results, labelled by outcome."""

CALL_DURATION_SECONDS = f"{METRIC_PREFIX}_call_duration_seconds"
"""Time from dispatch to terminal result."""

TRANSPORT_ERRORS_TOTAL = f"{METRIC_PREFIX}_transport_errors_total"
"""Total transport failures on initial requests."""


# =============================================================================
# Polling Metrics (completion/engine.py)
# =============================================================================

POLL_REQUESTS_TOTAL = f"{METRIC_PREFIX}_poll_requests_total"
"""Total GET requests issued against polling locations."""

POLL_TIMEOUTS_TOTAL = f"{METRIC_PREFIX}_poll_timeouts_total"
"""Total poll sessions that hit their deadline."""

ACTIVE_POLL_SESSIONS = f"{METRIC_PREFIX}_active_poll_sessions"
"""Number of poll sessions currently in flight."""


# =============================================================================
# Histogram Bucket Configurations
# =============================================================================

CALL_DURATION_BUCKETS = [
    0.01,
    0.05,
    0.1,
    0.5,
    1.0,
    5.0,
    30.0,
    60.0,
    300.0,
    1800.0,
    10800.0,
]
"""Call durations from 10ms up to the 3 hour default poll deadline."""


__all__ = [
    "ACTIVE_POLL_SESSIONS",
    "CALLS_TOTAL",
    "CALL_DURATION_BUCKETS",
    "CALL_DURATION_SECONDS",
    "CALL_RESULTS_TOTAL",
    "METRIC_PREFIX",
    "POLL_REQUESTS_TOTAL",
    "POLL_TIMEOUTS_TOTAL",
    "TRANSPORT_ERRORS_TOTAL",
]
