# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""Protocol for completion callbacks of non-blocking calls."""

from collections.abc import Callable
from typing import Protocol, runtime_checkable

from ..types.result import ApiResult


@runtime_checkable
class CompletionProtocol(Protocol):
    """
    Handler invoked exactly once with the terminal result of a call.

    The handler may run on a background thread.
    """

    def complete(self, result: ApiResult) -> None: ...


class FunctionCompletion:
    """Adapts a plain callable to CompletionProtocol."""

    def __init__(self, func: Callable[[ApiResult], None]) -> None:
        self._func = func

    def complete(self, result: ApiResult) -> None:
        self._func(result)


def as_completion(
    completion: CompletionProtocol | Callable[[ApiResult], None],
) -> CompletionProtocol:
    """Return ``completion`` as a CompletionProtocol, wrapping callables."""
    if isinstance(completion, CompletionProtocol):
        return completion
    if callable(completion):
        return FunctionCompletion(completion)
    raise TypeError(
        f"completion must provide complete(result) or be callable, "
        f"got {type(completion).__name__}"
    )


__all__ = ["CompletionProtocol", "FunctionCompletion", "as_completion"]
