# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""Exception classes for the REST action client.

Exceptions in this module signal malformed calls or fatal conditions. They are
raised before any network I/O happens (bad configuration, missing or invalid
parameters) or when the initial HTTP exchange fails at the transport level.

Every other failure discovered during or after I/O (HTTP errors, polling
timeouts, protocol violations) is delivered as the ``error`` field of an
``ApiResult`` and is never raised. All exceptions inherit from
ActionClientError, so a single except clause catches anything the library
raises.
"""


class ActionClientError(Exception):
    """Base exception for all REST action client errors.

    Example:
        try:
            result = dispatcher.call(action)
        except ActionClientError as e:
            logger.error(f"Action client error: {e}")
    """

    pass


class ConfigurationError(ActionClientError):
    """Raised when the client configuration is missing or invalid.

    Common causes include:
    - Constructing a Dispatcher without a ClientConfig
    - An empty hostname or an out-of-range port
    - An unsupported URL scheme
    - Non-positive timeouts or polling intervals

    Example:
        try:
            config = ClientConfig(hostname="", port=8080)
        except ConfigurationError as e:
            logger.error(f"Invalid configuration: {e}")
            raise SystemExit(1)
    """

    pass


class ParameterError(ActionClientError):
    """Base class for caller errors detected on an action's parameters.

    These are programmer errors: the call is malformed and is rejected before
    any request is sent. They are never retried.

    Attributes:
        field_name: Name of the offending parameter, if known.
    """

    def __init__(self, message: str, field_name: str | None = None):
        super().__init__(message)
        self.field_name = field_name


class MissingParameterError(ParameterError):
    """Raised when a required parameter or URL variable has no value.

    Example:
        try:
            dispatcher.call(GetHostAction())  # no uuid set
        except MissingParameterError as e:
            print(f"forgot to set {e.field_name}")
    """

    pass


class InvalidParameterError(ParameterError):
    """Raised when a parameter value violates its declared constraints.

    This covers values outside ``valid_values``, empty values for ``non_empty``
    parameters, strings longer than ``max_length``, numbers outside
    ``number_range``, and names the action does not declare.
    """

    pass


class ApiTransportError(ActionClientError):
    """Raised when the initial HTTP exchange of a call fails at transport level.

    Connection refused, DNS failures, and read timeouts on the first request
    of a call are fatal and propagate to the caller. The original ``httpx``
    exception is available as ``__cause__``.

    Transport failures while polling an accepted job are not raised; they are
    delivered as an ``SDK.INTERNAL_ERROR`` result instead.

    Attributes:
        url: The URL of the request that failed.
    """

    def __init__(self, message: str, url: str | None = None):
        super().__init__(message)
        self.url = url


__all__ = [
    "ActionClientError",
    "ApiTransportError",
    "ConfigurationError",
    "InvalidParameterError",
    "MissingParameterError",
    "ParameterError",
]
