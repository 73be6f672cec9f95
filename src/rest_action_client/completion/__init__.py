# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Result decoding and the asynchronous completion protocol.

This module provides:
- decoder: status-code classification and result envelope decoding
- CompletionEngine: blocking and non-blocking polling of job locations
- PollSession: per-invocation polling state
- RecurringTask: background task behind non-blocking polling
"""

from .decoder import (
    Decision,
    Outcome,
    classify,
    decode_envelope,
    decode_initial,
    decode_poll,
)
from .engine import CompletionEngine, PollSession
from .timer import RecurringTask

__all__ = [
    "CompletionEngine",
    "Decision",
    "Outcome",
    "PollSession",
    "RecurringTask",
    "classify",
    "decode_envelope",
    "decode_initial",
    "decode_poll",
]
