# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Client configuration for the REST action client.

A ClientConfig is handed to the Dispatcher at construction time; there is no
process-wide configuration.
"""

from dataclasses import dataclass

from .constants import (
    DEFAULT_API_PREFIX,
    DEFAULT_POLL_INTERVAL_MS,
    DEFAULT_POLL_TIMEOUT_MS,
)
from .exceptions import ConfigurationError


@dataclass
class ClientConfig:
    """
    Connection and polling settings for a Dispatcher.

    Polling defaults apply to actions that do not set the ``timeout`` or
    ``pollingInterval`` options themselves.
    """

    # === Connection ===

    hostname: str
    """Control-plane server host name or address."""

    port: int = 8080
    """Control-plane server port."""

    scheme: str = "http"
    """URL scheme: 'http' or 'https'."""

    api_prefix: str = DEFAULT_API_PREFIX
    """Fixed prefix prepended to every action path."""

    request_timeout: float = 30.0
    """Timeout in seconds for each individual HTTP exchange."""

    # === Polling ===

    default_poll_timeout_ms: int = DEFAULT_POLL_TIMEOUT_MS
    """Polling deadline in milliseconds (3 hours)."""

    default_poll_interval_ms: int = DEFAULT_POLL_INTERVAL_MS
    """Delay between poll attempts in milliseconds (5 seconds)."""

    # === Metrics and Monitoring ===

    metrics_enabled: bool = True
    """Record call and poll metrics."""

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if not self.hostname:
            raise ConfigurationError("hostname must not be empty")
        if not 0 < self.port <= 65535:
            raise ConfigurationError("port must be between 1 and 65535")
        if self.scheme not in ("http", "https"):
            raise ConfigurationError("scheme must be 'http' or 'https'")
        if not self.api_prefix.startswith("/"):
            raise ConfigurationError("api_prefix must start with '/'")
        if self.request_timeout <= 0:
            raise ConfigurationError("request_timeout must be positive")
        if self.default_poll_timeout_ms < 0:
            raise ConfigurationError("default_poll_timeout_ms must not be negative")
        if self.default_poll_interval_ms <= 0:
            raise ConfigurationError("default_poll_interval_ms must be positive")

    @property
    def base_url(self) -> str:
        """Scheme, host, port and API prefix, without a trailing slash."""
        return (
            f"{self.scheme}://{self.hostname}:{self.port}"
            f"{self.api_prefix.rstrip('/')}"
        )


__all__ = ["ClientConfig"]
