# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""REST Action Client - dispatch actions against a control-plane REST API.

This library turns declarative action objects into HTTP calls and resolves
their results, synchronously or through a bounded poll loop for
long-running jobs the server answers with ``202 Accepted``.

Key Features:
    - Declarative actions with path templates and parameter constraints
    - Sparse JSON bodies and ``OAuth`` session headers
    - Blocking calls that poll on the caller's thread
    - Non-blocking calls whose completion callback fires exactly once
    - Structured results instead of exceptions for HTTP and protocol errors
    - Prometheus metrics for calls and poll sessions

Quick Start:
    >>> from rest_action_client import AbstractAction, Param, RestInfo, create_dispatcher
    >>>
    >>> class CreateVmAction(AbstractAction):
    ...     REST_INFO = RestInfo(path="/vm-instances", http_method="POST", need_poll=True)
    ...     PARAMS = {"name": Param(required=True), "imageUuid": Param(required=True)}
    >>>
    >>> dispatcher = create_dispatcher("10.0.0.5", 8080)
    >>> action = CreateVmAction(name="vm1", imageUuid="img-1", sessionId=sid)
    >>> result = dispatcher.call(action)
    >>> if result.error is None:
    ...     print(result.get_payload())

Main Exports:
    - Dispatcher, create_dispatcher: Entry points
    - ClientConfig: Configuration
    - AbstractAction, Param, RestInfo: Action definitions
    - ApiResult, ErrorCode, ErrorKind: Results
    - CompletionProtocol: Callback interface for non-blocking calls

Version: 1.0.0
"""

__version__ = "1.0.0"

from .actions import AbstractAction, Param
from .config import ClientConfig
from .dispatcher import Dispatcher, create_dispatcher
from .exceptions import (
    ActionClientError,
    ApiTransportError,
    ConfigurationError,
    InvalidParameterError,
    MissingParameterError,
    ParameterError,
)
from .protocols import ActionProtocol, CompletionProtocol
from .types import ApiResult, ErrorCode, ErrorKind, RestInfo

__all__ = [
    # Actions
    "AbstractAction",
    # Exceptions
    "ActionClientError",
    # Protocols
    "ActionProtocol",
    # Results
    "ApiResult",
    "ApiTransportError",
    # Config
    "ClientConfig",
    "CompletionProtocol",
    "ConfigurationError",
    # Dispatcher
    "Dispatcher",
    "ErrorCode",
    "ErrorKind",
    "InvalidParameterError",
    "MissingParameterError",
    "Param",
    "ParameterError",
    "RestInfo",
    "create_dispatcher",
]
