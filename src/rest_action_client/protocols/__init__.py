# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Protocol definitions for pluggable collaborators.

Available protocols:
- ActionProtocol: Interface the dispatcher consumes from action definitions
- CompletionProtocol: Interface for callbacks of non-blocking calls
"""

from .action import ActionProtocol
from .completion import CompletionProtocol, FunctionCompletion, as_completion

__all__ = [
    "ActionProtocol",
    "CompletionProtocol",
    "FunctionCompletion",
    "as_completion",
]
