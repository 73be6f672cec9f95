# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""Type definitions and constants."""

from .rest_info import RestInfo
from .result import ApiResult, ErrorCode, ErrorKind

__all__ = [
    # Results
    "ApiResult",
    "ErrorCode",
    "ErrorKind",
    # Metadata
    "RestInfo",
]
