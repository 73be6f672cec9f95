# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Parameter resolution: URL template substitution and body extraction.

Placeholders use the ``{identifier}`` syntax. Variables consumed by the URL
are positional and never appear in the JSON body; neither does the reserved
session field.
"""

import re
from collections.abc import Mapping
from typing import Any

from ..constants import SESSION_ID
from ..exceptions import MissingParameterError
from ..protocols.action import ActionProtocol

_URL_VAR = re.compile(r"\{(.+?)\}")


def get_url_var_names(template: str) -> list[str]:
    """Return placeholder names in order of appearance."""
    return _URL_VAR.findall(template)


def substitute_url(template: str, tokens: Mapping[str, Any]) -> str:
    """
    Replace every ``{name}`` placeholder with ``str(tokens[name])``.

    Raises:
        MissingParameterError: If a placeholder has no token
    """

    def _replace(match: re.Match[str]) -> str:
        name = match.group(1)
        value = tokens.get(name)
        if value is None:
            raise MissingParameterError(
                f"cannot find value for URL variable[{name}]", field_name=name
            )
        return str(value)

    return _URL_VAR.sub(_replace, template)


def resolve_url_vars(action: ActionProtocol, names: list[str]) -> dict[str, Any]:
    """
    Look up a value for every URL variable before any substitution happens.

    Raises:
        MissingParameterError: If the action has no value for a variable
    """
    values: dict[str, Any] = {}
    for name in names:
        value = action.get_parameter_value(name)
        if value is None:
            raise MissingParameterError(
                f"missing required field[{name}]", field_name=name
            )
        values[name] = value
    return values


def build_body(action: ActionProtocol, url_vars: list[str]) -> dict[str, Any]:
    """
    Collect the JSON body: every set parameter that is neither a URL
    variable nor the session field. Unset parameters are omitted.
    """
    excluded = set(url_vars)
    excluded.add(SESSION_ID)

    body: dict[str, Any] = {}
    for name in sorted(action.get_all_parameter_names()):
        if name in excluded:
            continue
        value = action.get_parameter_value(name)
        if value is not None:
            body[name] = value
    return body


def resolve_path(action: ActionProtocol, template: str) -> tuple[str, list[str]]:
    """
    Substitute ``template`` from the action's values.

    Returns:
        The substituted path and the list of consumed variable names
    """
    names = get_url_var_names(template)
    if not names:
        return template, names
    return substitute_url(template, resolve_url_vars(action, names)), names


__all__ = [
    "build_body",
    "get_url_var_names",
    "resolve_path",
    "resolve_url_vars",
    "substitute_url",
]
