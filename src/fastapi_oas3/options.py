"""Plugin, security and per-route configuration."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Literal

from fastapi_oas3._types import FailureHandler, JSONSchema, SecurityRequirement
from fastapi_oas3.exceptions import OAS3PluginOptionsError
from fastapi_oas3.security.schemes import (
    UNSUPPORTED_SCHEME_TYPES,
    SecurityScheme,
    parse_security_scheme,
)

if TYPE_CHECKING:
    from fastapi_oas3.hooks import DocumentHook
    from fastapi_oas3.routes import RouteSpec
    from fastapi_oas3.validation import DocumentValidator

logger = logging.getLogger(__name__)

ParameterStyle = Literal[
    "matrix", "label", "form", "simple", "spaceDelimited", "pipeDelimited", "deepObject"
]


@dataclass
class AutowireSecurityOptions:
    """Wires declared security requirements to request-time checks.

    ``security_schemes`` values may be scheme objects or OpenAPI-shaped
    mappings with an ``fn``; mappings are parsed on construction.
    """

    security_schemes: Mapping[str, SecurityScheme | Mapping[str, Any]] = field(
        default_factory=dict
    )
    disabled: bool = False
    # Unknown scheme names are skipped (with a warning) instead of failing.
    allow_unrecognized_security: bool = False
    # Routes without security are allowed when root_security is unset.
    allow_empty_security_with_no_root: bool = True
    root_security: SecurityRequirement | None = None
    on_request_failed: FailureHandler | None = None
    debug: bool = False

    def __post_init__(self) -> None:
        resolved: dict[str, SecurityScheme] = {}
        for name, scheme in self.security_schemes.items():
            if not isinstance(scheme, Mapping):
                resolved[name] = scheme
                continue
            if (
                scheme.get("type") in UNSUPPORTED_SCHEME_TYPES
                and self.allow_unrecognized_security
            ):
                logger.warning(
                    'Security scheme type "%s" is not supported. Ignoring.',
                    scheme.get("type"),
                    extra={"security_scheme": name},
                )
                continue
            resolved[name] = parse_security_scheme(scheme)
        self.security_schemes = resolved


@dataclass
class PublishOptions:
    """Where the finished document is served.

    JSON and the interactive docs are FastAPI's own ``openapi_url`` and
    ``docs_url``; this only controls the YAML rendition.
    """

    yaml: bool | str = True


@dataclass
class OAS3PluginOptions:
    openapi_info: Mapping[str, Any]
    # Raise instead of warn when the assembled document does not validate.
    exit_on_invalid_document: bool = False
    hooks: Sequence[DocumentHook] = ()
    autowired_security: AutowireSecurityOptions | None = None
    publish: PublishOptions = field(default_factory=PublishOptions)
    # Document FastAPI routes that were not registered through the plugin.
    include_unconfigured_operations: bool = False
    operation_id_fn: Callable[[RouteSpec, str], str] | None = None
    # Log the whole document on validation failure (large in big apps).
    print_specification_on_validation_failure: bool = False
    validator: DocumentValidator | None = None

    def __post_init__(self) -> None:
        info = self.openapi_info
        if not info:
            raise OAS3PluginOptionsError("options.openapi_info is required.")
        for key in ("title", "version"):
            if not info.get(key):
                raise OAS3PluginOptionsError(f"options.openapi_info.{key} is required.")


@dataclass
class RequestBodyInfo:
    description: str | None = None
    content_type: str | None = None
    schema_override: JSONSchema | None = None


@dataclass
class ResponseInfo:
    description: str | None = None
    content_type: str | None = None
    schema_override: JSONSchema | None = None


@dataclass
class QueryParamExtras:
    deprecated: bool | None = None
    description: str | None = None
    example: Any = None
    allow_empty_value: bool | None = None
    allow_reserved: bool | None = None
    style: ParameterStyle | None = None
    explode: bool | None = None
    schema_override: JSONSchema | None = None


@dataclass
class PathParamExtras:
    description: str | None = None
    example: Any = None
    schema_override: JSONSchema | None = None


@dataclass
class RouteSchema:
    """JSON schemas describing a route's inputs and outputs.

    ``querystring`` and ``params`` are object schemas whose properties become
    query and path parameters. ``response`` maps status codes (or
    ``"default"``) to body schemas.
    """

    body: JSONSchema | None = None
    querystring: JSONSchema | None = None
    params: JSONSchema | None = None
    response: Mapping[int | str, JSONSchema] = field(default_factory=dict)


@dataclass
class RouteOAS:
    """OpenAPI options for one route."""

    operation_id: str | None = None
    tags: list[str] | None = None
    summary: str | None = None
    description: str | None = None
    deprecated: bool | None = None
    external_docs: Mapping[str, Any] | None = None
    callbacks: Mapping[str, Any] | None = None
    # Overrides root_security; an empty list means "no security".
    # Evaluated even when the route is omitted from the document.
    security: SecurityRequirement | None = None
    omit: bool = False
    vendor_prefixed_fields: Mapping[str, Any] = field(default_factory=dict)
    body: RequestBodyInfo | None = None
    querystring: Mapping[str, QueryParamExtras] = field(default_factory=dict)
    params: Mapping[str, PathParamExtras] = field(default_factory=dict)
    responses: Mapping[str, ResponseInfo] = field(default_factory=dict)

    def __post_init__(self) -> None:
        for key in self.vendor_prefixed_fields:
            if not key.startswith("x-"):
                raise OAS3PluginOptionsError(
                    f'Vendor-prefixed field "{key}" must start with "x-".'
                )
