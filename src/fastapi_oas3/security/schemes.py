"""Security scheme declarations."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, ClassVar, Literal, Union

from fastapi_oas3._types import SchemeFn
from fastapi_oas3.exceptions import OAS3PluginOptionsError

ApiKeyLocation = Literal["header", "cookie", "query"]

# Not evaluated by the plugin; rejected at configuration time.
UNSUPPORTED_SCHEME_TYPES = ("oauth2", "openIdConnect")


@dataclass(frozen=True)
class ApiKeySecurityScheme:
    """API key read from a header, cookie or query parameter.

    ``fn(value, request[, context])`` decides; ``value`` is ``None`` only when
    ``pass_null_if_none_provided`` is set and the key is absent.
    """

    name: str
    location: ApiKeyLocation
    fn: SchemeFn
    description: str | None = None
    pass_null_if_none_provided: bool = False
    requires_parsed_body: bool = False

    type: ClassVar[str] = "apiKey"

    def to_openapi(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "type": self.type,
            "name": self.name,
            "in": self.location,
        }
        if self.description is not None:
            result["description"] = self.description
        return result


@dataclass(frozen=True)
class HttpBasicSecurityScheme:
    """``Authorization: Basic`` credentials, decoded to ``BasicCredentials``."""

    fn: SchemeFn
    description: str | None = None
    pass_null_if_none_provided: bool = False
    requires_parsed_body: bool = False

    type: ClassVar[str] = "http"
    scheme: ClassVar[str] = "basic"

    def to_openapi(self) -> dict[str, Any]:
        result: dict[str, Any] = {"type": self.type, "scheme": self.scheme}
        if self.description is not None:
            result["description"] = self.description
        return result


@dataclass(frozen=True)
class HttpBearerSecurityScheme:
    """``Authorization: Bearer <token>``; ``fn`` receives the token string."""

    fn: SchemeFn
    description: str | None = None
    bearer_format: str | None = None
    pass_null_if_none_provided: bool = False
    requires_parsed_body: bool = False

    type: ClassVar[str] = "http"
    scheme: ClassVar[str] = "bearer"

    def to_openapi(self) -> dict[str, Any]:
        result: dict[str, Any] = {"type": self.type, "scheme": self.scheme}
        if self.bearer_format is not None:
            result["bearerFormat"] = self.bearer_format
        if self.description is not None:
            result["description"] = self.description
        return result


SecurityScheme = Union[
    ApiKeySecurityScheme, HttpBasicSecurityScheme, HttpBearerSecurityScheme
]


def _flags(mapping: Mapping[str, Any]) -> dict[str, Any]:
    return {
        "description": mapping.get("description"),
        "pass_null_if_none_provided": bool(
            mapping.get("passNullIfNoneProvided", False)
        ),
        "requires_parsed_body": bool(mapping.get("requiresParsedBody", False)),
    }


def parse_security_scheme(mapping: Mapping[str, Any]) -> SecurityScheme:
    """Build a scheme from an OpenAPI-shaped mapping carrying an ``fn``.

    ``{"type": "apiKey", "in": "header", "name": "X-Key", "fn": check}``
    """
    scheme_type = mapping.get("type")
    fn = mapping.get("fn")
    if not callable(fn):
        raise OAS3PluginOptionsError(
            f'Security scheme of type "{scheme_type}" needs a callable "fn".'
        )

    if scheme_type == "apiKey":
        location = mapping.get("in")
        if location not in ("header", "cookie", "query"):
            raise OAS3PluginOptionsError(
                f'Security scheme type "apiKey" requires "in" to be "header", '
                f'"cookie" or "query", got "{location}".'
            )
        name = mapping.get("name")
        if not name:
            raise OAS3PluginOptionsError(
                'Security scheme type "apiKey" requires a "name".'
            )
        return ApiKeySecurityScheme(
            name=name, location=location, fn=fn, **_flags(mapping)
        )

    if scheme_type == "http":
        http_scheme = str(mapping.get("scheme", "")).lower()
        if http_scheme == "basic":
            return HttpBasicSecurityScheme(fn=fn, **_flags(mapping))
        if http_scheme == "bearer":
            return HttpBearerSecurityScheme(
                fn=fn, bearer_format=mapping.get("bearerFormat"), **_flags(mapping)
            )
        raise OAS3PluginOptionsError(f"Unsupported HTTP scheme: {http_scheme}")

    if scheme_type in UNSUPPORTED_SCHEME_TYPES:
        raise OAS3PluginOptionsError(
            f'Security scheme type "{scheme_type}" is not supported. '
            'Consider using "bearer" or "apiKey" instead.'
        )
    raise OAS3PluginOptionsError(f"Unsupported security scheme: {scheme_type}")
