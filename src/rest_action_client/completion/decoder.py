# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Result decoder: maps HTTP responses onto ApiResult outcomes.

Initial responses:

    non-2xx          -> HTTP error result (details = body text)
    200 / 204        -> decoded envelope
    202              -> accepted; poll the ``location`` from the body
    other 2xx        -> internal error (unknown status code)

Poll responses:

    200 / 503        -> terminal; decoded envelope (503 envelopes carry the
                        job's failure as a structured error)
    202              -> still running, no payload
    anything else    -> HTTP error result
"""

import json
import logging
from dataclasses import dataclass
from enum import Enum

import httpx
from pydantic import ValidationError

from ..constants import (
    EXPECTED_POLL_STATUSES,
    LOCATION,
    STATUS_ACCEPTED,
    STATUS_NO_CONTENT,
    STATUS_OK,
    TERMINAL_POLL_STATUSES,
)
from ..types.rest_info import RestInfo
from ..types.result import ApiResult, ErrorCode, ErrorKind

logger = logging.getLogger(__name__)


class Outcome(Enum):
    """Classification of an initial response."""

    SUCCESS = "success"
    FAILURE = "failure"
    ACCEPTED = "accepted"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class Decision:
    """Decoder verdict for an initial response.

    Terminal decisions carry ``result``; accepted ones carry a non-empty
    ``location`` to poll instead.
    """

    outcome: Outcome
    result: ApiResult | None = None
    location: str = ""

    @property
    def terminal(self) -> bool:
        return self.result is not None


def classify(status_code: int) -> Outcome:
    if not 200 <= status_code < 300:
        return Outcome.FAILURE
    if status_code in (STATUS_OK, STATUS_NO_CONTENT):
        return Outcome.SUCCESS
    if status_code == STATUS_ACCEPTED:
        return Outcome.ACCEPTED
    return Outcome.UNKNOWN


def http_error(status_code: int, details: str) -> ApiResult:
    return ApiResult.failure(
        ErrorKind.HTTP_ERROR,
        f"the http status code[{status_code}] indicates a failure happened",
        details,
    )


def internal_error(description: str, details: str | None = None) -> ApiResult:
    return ApiResult.failure(ErrorKind.INTERNAL_ERROR, description, details)


def decode_envelope(body: str) -> ApiResult:
    """
    Decode a response body into the result envelope.

    An empty body is a successful empty result. A JSON object with a
    non-null ``error`` object is a failure carrying that error verbatim.
    Any other body is the raw payload of a successful result.
    """
    if not body or not body.strip():
        return ApiResult()

    try:
        data = json.loads(body)
    except ValueError:
        return ApiResult(result_string=body)

    if isinstance(data, dict) and data.get("error") is not None:
        try:
            return ApiResult(error=ErrorCode.model_validate(data["error"]))
        except ValidationError as e:
            return internal_error("the server returns a malformed error envelope", str(e))

    return ApiResult(result_string=body)


def extract_location(body: str) -> str | None:
    """Return the ``location`` field of a 202 body, or None."""
    try:
        data = json.loads(body) if body else None
    except ValueError:
        return None
    if not isinstance(data, dict):
        return None
    location = data.get(LOCATION)
    if not isinstance(location, str) or not location:
        return None
    return location


def decode_initial(
    response: httpx.Response, info: RestInfo, action_name: str
) -> Decision:
    """Classify the response to the first request of a call."""
    status = response.status_code
    outcome = classify(status)

    if outcome is Outcome.FAILURE:
        return Decision(outcome, result=http_error(status, response.text))

    if outcome is Outcome.SUCCESS:
        return Decision(outcome, result=decode_envelope(response.text))

    if outcome is Outcome.UNKNOWN:
        logger.error(f"Server returned unknown status code {status} for {action_name}")
        return Decision(
            outcome,
            result=internal_error(
                f"the server returns an unknown status code[{status}]",
                response.text,
            ),
        )

    if not info.need_poll:
        return Decision(
            outcome,
            result=internal_error(
                f"the api[{action_name}] is not an async API but the server "
                f"returns {STATUS_ACCEPTED} status code",
                response.text,
            ),
        )

    location = extract_location(response.text)
    if location is None:
        return Decision(
            outcome,
            result=internal_error(
                f"the api[{action_name}] is an async API but the server doesn't "
                f"return the polling location url",
                response.text,
            ),
        )

    return Decision(outcome, location=location)


def decode_poll(response: httpx.Response) -> ApiResult | None:
    """
    Decode one poll response.

    Returns:
        The terminal result, or None while the job is still running
    """
    status = response.status_code
    if status not in EXPECTED_POLL_STATUSES:
        return http_error(status, response.text)
    if status in TERMINAL_POLL_STATUSES:
        return decode_envelope(response.text)
    return None


__all__ = [
    "Decision",
    "Outcome",
    "classify",
    "decode_envelope",
    "decode_initial",
    "decode_poll",
    "extract_location",
    "http_error",
    "internal_error",
]
