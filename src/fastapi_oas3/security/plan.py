"""Compile a declared security requirement into an immutable evaluation plan."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING

from fastapi_oas3._types import SecurityRequirement, WrappedHandler
from fastapi_oas3.exceptions import OAS3PluginError, OAS3PluginOptionsError
from fastapi_oas3.security.handlers import (
    build_api_key_handler,
    build_http_basic_handler,
    build_http_bearer_handler,
)
from fastapi_oas3.security.schemes import (
    ApiKeySecurityScheme,
    HttpBasicSecurityScheme,
    HttpBearerSecurityScheme,
    SecurityScheme,
)

if TYPE_CHECKING:
    from fastapi_oas3.options import AutowireSecurityOptions

logger = logging.getLogger(__name__)

# Schemes in one clause are AND'ed; clauses are OR'ed.
AndedHandlers = tuple[tuple[str, WrappedHandler], ...]


@dataclass(frozen=True)
class SecurityPlan:
    """Immutable, pre-computed evaluation plan for one requirement."""

    clauses: tuple[AndedHandlers, ...]
    debug: bool = False


def normalize_security_requirement(
    requirement: SecurityRequirement,
) -> list[dict[str, list[str]]]:
    """A bare clause becomes a one-element list; clauses are copied."""
    if isinstance(requirement, Mapping):
        return [{name: list(scopes) for name, scopes in requirement.items()}]
    return [
        {name: list(scopes) for name, scopes in clause.items()}
        for clause in requirement
    ]


def build_scheme_handler(scheme: SecurityScheme) -> WrappedHandler:
    if isinstance(scheme, ApiKeySecurityScheme):
        return build_api_key_handler(scheme)
    if isinstance(scheme, HttpBasicSecurityScheme):
        return build_http_basic_handler(scheme)
    if isinstance(scheme, HttpBearerSecurityScheme):
        return build_http_bearer_handler(scheme)
    raise OAS3PluginOptionsError(
        f"Unsupported security scheme: {type(scheme).__name__}"
    )


def compile_security_plan(
    requirement: SecurityRequirement, options: AutowireSecurityOptions
) -> SecurityPlan:
    """Look up every named scheme and build one handler per clause entry.

    Scopes are ignored until OAuth2/OIDC are supported.
    """
    clauses: list[AndedHandlers] = []

    for clause in normalize_security_requirement(requirement):
        anded: list[tuple[str, WrappedHandler]] = []
        for name in clause:
            scheme = options.security_schemes.get(name)
            if scheme is None:
                logger.warning(
                    "Unrecognized security scheme.",
                    extra={"security_scheme": name},
                )
                if not options.allow_unrecognized_security:
                    raise OAS3PluginError(f'Security scheme "{name}" not defined.')
                logger.warning(
                    "Ignoring unrecognized security scheme; "
                    "it is on you to implement it.",
                    extra={"security_scheme": name},
                )
                continue
            anded.append((name, build_scheme_handler(scheme)))  # type: ignore[arg-type]
        clauses.append(tuple(anded))

    return SecurityPlan(clauses=tuple(clauses), debug=options.debug)
