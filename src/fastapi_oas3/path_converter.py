"""Translate framework-style path templates into OpenAPI path templates."""

from __future__ import annotations

import re
from dataclasses import dataclass, field

# ``:name`` optionally followed by an inline ``(regex)`` constraint. Existing
# ``{name}`` / ``{name:convertor}`` placeholders are matched first and kept.
_PARAM = re.compile(r"(\{[^}]*\})|:(\w+)(\([^)]+\))?")


@dataclass(frozen=True)
class PathConversion:
    url: str
    param_patterns: dict[str, str] = field(default_factory=dict)


def convert_path(template: str) -> PathConversion:
    """Convert ``/users/:id(\\d+)`` into ``/users/{id}``.

    Regex constraints are returned separately in ``param_patterns``, keyed by
    parameter name with the surrounding parentheses removed. Templates that
    are already in ``{name}`` form are returned unchanged.
    """
    patterns: dict[str, str] = {}

    def _replace(match: re.Match[str]) -> str:
        placeholder, name, regex = match.groups()
        if placeholder:
            return placeholder
        if regex:
            patterns[name] = regex[1:-1]
        return "{" + name + "}"

    return PathConversion(url=_PARAM.sub(_replace, template), param_patterns=patterns)
