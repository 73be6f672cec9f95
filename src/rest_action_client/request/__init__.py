# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Outbound request construction.

This module provides:
- Parameter resolution (URL template substitution, sparse JSON bodies)
- RequestBuilder: initial and poll requests as ``httpx.Request`` objects
"""

from .builder import RequestBuilder
from .params import (
    build_body,
    get_url_var_names,
    resolve_path,
    resolve_url_vars,
    substitute_url,
)

__all__ = [
    "RequestBuilder",
    "build_body",
    "get_url_var_names",
    "resolve_path",
    "resolve_url_vars",
    "substitute_url",
]
