# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""Protocol consumed from action definitions."""

from typing import Any, Protocol, runtime_checkable

from ..types.rest_info import RestInfo


@runtime_checkable
class ActionProtocol(Protocol):
    """
    Accessor contract the dispatcher needs from an action.

    ``AbstractAction`` implements it, but any object exposing these four
    methods can be dispatched.
    """

    def get_rest_info(self) -> RestInfo:
        """Static endpoint metadata."""
        ...

    def check_parameters(self) -> None:
        """Validate parameter values; raise ParameterError on violation."""
        ...

    def get_parameter_value(self, name: str) -> Any:
        """Value of a parameter or client option, or None if unset."""
        ...

    def get_all_parameter_names(self) -> set[str]:
        """Names of all parameters that may be sent to the server."""
        ...
