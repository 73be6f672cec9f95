# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Base class for action definitions.

A concrete action declares its endpoint and parameters as class attributes:

    class QueryHostAction(AbstractAction):
        REST_INFO = RestInfo(path="/hosts/{uuid}", http_method="GET")
        PARAMS = {
            "uuid": Param(required=True, non_empty=True),
            "fields": Param(),
        }

    action = QueryHostAction(uuid="abc-123", sessionId=session)
    result = action.call(dispatcher)

Parameter values live in an explicit name -> value mapping; nothing is looked
up by reflection. Every action additionally accepts the reserved ``sessionId``
parameter and the client options ``timeout`` and ``pollingInterval``
(milliseconds), which steer polling and are never sent to the server.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Collection
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, ClassVar

from ..constants import POLLING_INTERVAL, SESSION_ID, TIMEOUT
from ..exceptions import InvalidParameterError, MissingParameterError
from ..types.rest_info import RestInfo

if TYPE_CHECKING:
    from ..dispatcher import Dispatcher
    from ..protocols.completion import CompletionProtocol
    from ..types.result import ApiResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Param:
    """
    Declarative constraints for one action parameter.

    Attributes:
        required: The value must be set before the call
        valid_values: Closed set of accepted values
        non_empty: Strings and collections must not be empty
        max_length: Maximum string length
        number_range: Inclusive (low, high) bounds for numeric values
    """

    required: bool = False
    valid_values: tuple[Any, ...] | None = None
    non_empty: bool = False
    max_length: int | None = None
    number_range: tuple[float, float] | None = None

    def validate(self, name: str, value: Any) -> None:
        """Raise a ParameterError if ``value`` breaks a constraint."""
        if value is None:
            if self.required:
                raise MissingParameterError(
                    f"missing required field[{name}]", field_name=name
                )
            return

        if self.non_empty and isinstance(value, (str, Collection)) and not value:
            raise InvalidParameterError(
                f"field[{name}] cannot be empty", field_name=name
            )

        if self.valid_values is not None and value not in self.valid_values:
            raise InvalidParameterError(
                f"field[{name}] must be one of {list(self.valid_values)}, "
                f"but got {value!r}",
                field_name=name,
            )

        if (
            self.max_length is not None
            and isinstance(value, str)
            and len(value) > self.max_length
        ):
            raise InvalidParameterError(
                f"field[{name}] exceeds the max length of {self.max_length} chars",
                field_name=name,
            )

        if self.number_range is not None:
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise InvalidParameterError(
                    f"field[{name}] must be a number, but got {value!r}",
                    field_name=name,
                )
            low, high = self.number_range
            if not low <= value <= high:
                raise InvalidParameterError(
                    f"field[{name}] must be in range [{low}, {high}], "
                    f"but got {value}",
                    field_name=name,
                )


_RESERVED_PARAMS = {
    SESSION_ID: Param(),
    TIMEOUT: Param(number_range=(0, float("inf"))),
    POLLING_INTERVAL: Param(number_range=(1, float("inf"))),
}


class AbstractAction:
    """
    Caller-constructed descriptor of one API operation.

    Subclasses set ``REST_INFO`` and ``PARAMS``. Metadata is static; parameter
    values are set before the call and the action is discarded afterwards.
    """

    REST_INFO: ClassVar[RestInfo]
    PARAMS: ClassVar[dict[str, Param]] = {}

    def __init__(self, **values: Any) -> None:
        self._values: dict[str, Any] = {}
        for name, value in values.items():
            self.set_parameter_value(name, value)

    @classmethod
    def _declared(cls) -> dict[str, Param]:
        declared = dict(_RESERVED_PARAMS)
        declared.update(cls.PARAMS)
        return declared

    def get_rest_info(self) -> RestInfo:
        try:
            return self.REST_INFO
        except AttributeError:
            raise NotImplementedError(
                f"{type(self).__name__} does not declare REST_INFO"
            ) from None

    def set_parameter_value(self, name: str, value: Any) -> AbstractAction:
        """
        Set a parameter or client option.

        Returns:
            The action itself, so setters can be chained

        Raises:
            InvalidParameterError: If the action does not declare ``name``
        """
        if name not in self._declared():
            raise InvalidParameterError(
                f"{type(self).__name__} has no parameter[{name}]", field_name=name
            )
        self._values[name] = value
        return self

    def get_parameter_value(self, name: str) -> Any:
        return self._values.get(name)

    def get_all_parameter_names(self) -> set[str]:
        """Server-bound parameter names: declared params plus ``sessionId``."""
        return {SESSION_ID, *self.PARAMS}

    def check_parameters(self) -> None:
        """
        Validate every declared parameter against its Param constraints.

        Raises:
            MissingParameterError: A required value is not set
            InvalidParameterError: A value breaks a constraint
        """
        for name, param in self._declared().items():
            param.validate(name, self._values.get(name))

    @property
    def session_id(self) -> Any:
        return self._values.get(SESSION_ID)

    def call(
        self,
        dispatcher: Dispatcher,
        completion: CompletionProtocol | Callable[[ApiResult], None] | None = None,
    ) -> ApiResult | None:
        """
        Dispatch this action.

        Blocking when ``completion`` is None (returns the result); otherwise
        the result is delivered to ``completion`` and None is returned.
        """
        if completion is None:
            return dispatcher.call(self)
        dispatcher.call(self, completion)
        return None

    def __repr__(self) -> str:
        shown = {
            k: ("***" if k == SESSION_ID else v) for k, v in self._values.items()
        }
        return f"{type(self).__name__}({shown})"


__all__ = ["AbstractAction", "Param"]
