# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Result envelope types.

An ``ApiResult`` is the outcome of one logical call. It is either successful
with a raw payload, successful and empty, or failed with an ``ErrorCode``;
never both payload and error. Server error envelopes are decoded with pydantic
so that every field the server sends survives the round trip.
"""

import json
from enum import Enum
from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, model_validator

ModelT = TypeVar("ModelT", bound=BaseModel)


class ErrorKind(str, Enum):
    """Kind tags for errors produced by the client itself.

    - HTTP_ERROR: unsuccessful HTTP status; details carry the raw body
    - POLLING_TIMEOUT: the job was still pending when the deadline passed
    - INTERNAL_ERROR: protocol violations and transport failures while polling
    """

    HTTP_ERROR = "SDK.HTTP_ERROR"
    POLLING_TIMEOUT = "SDK.POLLING_TIMEOUT"
    INTERNAL_ERROR = "SDK.INTERNAL_ERROR"


class ErrorCode(BaseModel):
    """
    Structured error carried by an ApiResult.

    ``code`` is either one of the ``ErrorKind`` values or a server-defined
    code decoded from a 503 envelope. Unknown envelope fields are kept as
    extras so a decoded error matches the server's body exactly.
    """

    model_config = ConfigDict(frozen=True, extra="allow")

    code: str
    description: str | None = None
    details: str | None = None

    @classmethod
    def of(cls, kind: ErrorKind, description: str, details: str | None) -> "ErrorCode":
        return cls(code=kind.value, description=description, details=details)

    @property
    def kind(self) -> ErrorKind | None:
        """The client-side kind tag, or None for server-defined codes."""
        try:
            return ErrorKind(self.code)
        except ValueError:
            return None

    def __str__(self) -> str:
        return f"[{self.code}] {self.description}: {self.details}"


class ApiResult(BaseModel):
    """
    Outcome of one logical API call.

    Attributes:
        error: Populated when the call failed
        result_string: Raw response payload for successful calls with a body
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    error: ErrorCode | None = None
    result_string: str | None = None

    @model_validator(mode="after")
    def _validate_exclusive(self) -> "ApiResult":
        """A result never carries both a payload and an error."""
        if self.error is not None and self.result_string is not None:
            raise ValueError("ApiResult cannot carry both error and result_string")
        return self

    @classmethod
    def failure(
        cls, kind: ErrorKind, description: str, details: str | None = None
    ) -> "ApiResult":
        """Build a failed result with a client-side error kind."""
        return cls(error=ErrorCode.of(kind, description, details))

    @property
    def success(self) -> bool:
        return self.error is None

    def get_payload(self) -> Any:
        """
        Decode the raw payload as JSON.

        Returns:
            The decoded JSON value, or None for empty results

        Raises:
            ValueError: If the result is a failure
        """
        if self.error is not None:
            raise ValueError(f"cannot read payload of a failed result: {self.error}")
        if not self.result_string:
            return None
        return json.loads(self.result_string)

    def get_result(self, model: type[ModelT]) -> ModelT | None:
        """
        Validate the raw payload into a caller-supplied pydantic model.

        Args:
            model: Model class describing the endpoint's response body

        Returns:
            A model instance, or None for empty results
        """
        if self.error is not None:
            raise ValueError(f"cannot read payload of a failed result: {self.error}")
        if not self.result_string:
            return None
        return model.model_validate_json(self.result_string)


__all__ = ["ApiResult", "ErrorCode", "ErrorKind"]
