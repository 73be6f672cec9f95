# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""Action definitions: base class and parameter constraints."""

from .base import AbstractAction, Param

__all__ = ["AbstractAction", "Param"]
