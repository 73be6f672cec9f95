# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Static REST metadata attached to every action definition.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class RestInfo:
    """
    Endpoint metadata for one API operation.

    Attributes:
        path: Path template relative to the API prefix, with ``{name}``
            placeholders (e.g. ``/hosts/{uuid}``)
        http_method: HTTP verb sent verbatim (GET, POST, PUT, DELETE, ...)
        need_session: Whether the request carries an ``Authorization`` header
            built from the action's session id
        need_poll: Whether the server may answer 202 and the result must be
            polled from a location URL
    """

    path: str
    http_method: str
    need_session: bool = True
    need_poll: bool = False

    def __post_init__(self) -> None:
        if not self.http_method:
            raise ValueError("http_method must not be empty")
        object.__setattr__(self, "http_method", self.http_method.upper())


__all__ = ["RestInfo"]
