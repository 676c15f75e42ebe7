"""Shared type aliases and protocols."""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Mapping
from typing import TYPE_CHECKING, Any, Union

if TYPE_CHECKING:
    from starlette.requests import Request

    from fastapi_oas3.security.handlers import HandlerResult

JSONSchema = Mapping[str, Any]
OpenAPIDocument = dict[str, Any]

# A security clause maps scheme names to (unused) scope lists.
SecurityClause = Mapping[str, list[str]]
SecurityRequirement = Union[SecurityClause, list[SecurityClause]]

MaybeAwaitable = Union["HandlerResult", Awaitable["HandlerResult"]]

# Scheme callbacks receive the extracted credential, the request and, when the
# scheme requires the parsed body, a SecurityHandlerContext.
SchemeFn = Callable[..., MaybeAwaitable]

# Wrapped per-scheme evaluator produced by the handler builders.
WrappedHandler = Callable[["Request"], Awaitable["HandlerResult"]]
RequestEvaluator = Callable[["Request"], Awaitable["HandlerResult"]]

FailureHandler = Callable[["HandlerResult", "Request"], Any]
