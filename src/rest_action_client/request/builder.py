# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Request builder: turns an action into an ``httpx.Request``.
"""

import logging

import httpx

from ..config import ClientConfig
from ..constants import CONTENT_TYPE_JSON, HEADER_AUTHORIZATION, OAUTH, SESSION_ID
from ..exceptions import MissingParameterError
from ..protocols.action import ActionProtocol
from .params import build_body, resolve_path

logger = logging.getLogger(__name__)


class RequestBuilder:
    """
    Builds the outbound requests of one dispatcher.

    The full URL is ``{scheme}://{host}:{port}{api_prefix}/{path}`` with path
    variables substituted from the action. One request is built per call
    attempt; builders hold no per-call state.
    """

    def __init__(self, config: ClientConfig) -> None:
        self._config = config
        self._base_url = config.base_url
        self._extensions = {"timeout": httpx.Timeout(config.request_timeout).as_dict()}

    @property
    def base_url(self) -> str:
        return self._base_url

    def url_for(self, path: str) -> str:
        return f"{self._base_url}/{path.lstrip('/')}"

    def resolve_location(self, location: str) -> str:
        """Resolve a polling location that may be relative to the base URL."""
        return str(httpx.URL(self._base_url + "/").join(location))

    def auth_headers(self, action: ActionProtocol) -> dict[str, str]:
        """
        ``Authorization: OAuth <session>`` if the endpoint needs a session.

        Raises:
            MissingParameterError: If a session is required but not set
        """
        if not action.get_rest_info().need_session:
            return {}
        session_id = action.get_parameter_value(SESSION_ID)
        if session_id is None:
            raise MissingParameterError(
                f"missing required field[{SESSION_ID}]: "
                f"{type(action).__name__} requires a session",
                field_name=SESSION_ID,
            )
        return {HEADER_AUTHORIZATION: f"{OAUTH} {session_id}"}

    def build(self, action: ActionProtocol) -> httpx.Request:
        """
        Build the initial request of a call.

        Raises:
            MissingParameterError: Missing URL variable or session
        """
        info = action.get_rest_info()
        path, url_vars = resolve_path(action, info.path)
        body = build_body(action, url_vars)

        headers = {"Content-Type": CONTENT_TYPE_JSON}
        headers.update(self.auth_headers(action))

        url = self.url_for(path)
        logger.debug(f"Built {info.http_method} {url} with body fields {sorted(body)}")
        return httpx.Request(
            info.http_method,
            url,
            json=body,
            headers=headers,
            extensions=dict(self._extensions),
        )

    def build_poll_request(self, url: str, action: ActionProtocol) -> httpx.Request:
        """Build the GET issued against a polling location."""
        return httpx.Request(
            "GET",
            url,
            headers=self.auth_headers(action),
            extensions=dict(self._extensions),
        )


__all__ = ["RequestBuilder"]
