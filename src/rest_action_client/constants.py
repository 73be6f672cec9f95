# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Wire-level constants shared by the request builder, decoder and engine.
"""

SESSION_ID = "sessionId"
"""Reserved parameter carrying the session credential; never sent in a body."""

TIMEOUT = "timeout"
"""Client option: polling deadline in milliseconds."""

POLLING_INTERVAL = "pollingInterval"
"""Client option: delay between poll attempts in milliseconds."""

LOCATION = "location"
"""Field of a 202 body holding the polling URL."""

HEADER_AUTHORIZATION = "Authorization"
OAUTH = "OAuth"
CONTENT_TYPE_JSON = "application/json; charset=utf-8"

DEFAULT_API_PREFIX = "/v1"
DEFAULT_POLL_TIMEOUT_MS = 3 * 60 * 60 * 1000
DEFAULT_POLL_INTERVAL_MS = 5 * 1000

# Poll status codes
STATUS_OK = 200
STATUS_ACCEPTED = 202
STATUS_NO_CONTENT = 204
STATUS_SERVICE_UNAVAILABLE = 503

TERMINAL_POLL_STATUSES = frozenset({STATUS_OK, STATUS_SERVICE_UNAVAILABLE})
EXPECTED_POLL_STATUSES = TERMINAL_POLL_STATUSES | {STATUS_ACCEPTED}
