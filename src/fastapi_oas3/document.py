"""DocumentBuilder and build_document() — assemble the OpenAPI document."""

from __future__ import annotations

import json
import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

from fastapi_oas3.constants import HTTP_METHODS, OPENAPI_VERSION
from fastapi_oas3.exceptions import OAS3SpecValidationError
from fastapi_oas3.operation import build_operation
from fastapi_oas3.security.plan import normalize_security_requirement
from fastapi_oas3.spec_transforms import canonicalize_annotated_schemas
from fastapi_oas3.validation import validate_document

if TYPE_CHECKING:
    from fastapi_oas3.options import OAS3PluginOptions
    from fastapi_oas3.routes import RouteSpec

logger = logging.getLogger(__name__)


class DocumentBuilder:
    """Mutable OpenAPI document handed to hooks.

    ``root_doc`` is the document itself; the ``add_*`` helpers create the
    intermediate objects they need and return the builder for chaining.
    """

    def __init__(self, root_doc: dict[str, Any]) -> None:
        self.root_doc = root_doc

    @classmethod
    def create(cls, info: dict[str, Any]) -> DocumentBuilder:
        return cls({"openapi": OPENAPI_VERSION, "info": info, "paths": {}})

    def _components(self, registry: str) -> dict[str, Any]:
        components = self.root_doc.setdefault("components", {})
        section: dict[str, Any] = components.setdefault(registry, {})
        return section

    def add_schema(self, name: str, schema: dict[str, Any]) -> DocumentBuilder:
        self._components("schemas")[name] = schema
        return self

    def add_security_scheme(self, name: str, scheme: dict[str, Any]) -> DocumentBuilder:
        self._components("securitySchemes")[name] = scheme
        return self

    def add_response(self, name: str, response: dict[str, Any]) -> DocumentBuilder:
        self._components("responses")[name] = response
        return self

    def add_parameter(self, name: str, parameter: dict[str, Any]) -> DocumentBuilder:
        self._components("parameters")[name] = parameter
        return self

    def add_request_body(self, name: str, body: dict[str, Any]) -> DocumentBuilder:
        self._components("requestBodies")[name] = body
        return self

    def add_callback(self, name: str, callback: dict[str, Any]) -> DocumentBuilder:
        self._components("callbacks")[name] = callback
        return self

    def add_tag(self, tag: dict[str, Any]) -> DocumentBuilder:
        self.root_doc.setdefault("tags", []).append(tag)
        return self

    def add_server(self, server: dict[str, Any]) -> DocumentBuilder:
        self.root_doc.setdefault("servers", []).append(server)
        return self

    def add_extension(self, key: str, value: Any) -> DocumentBuilder:
        if not key.startswith("x-"):
            raise ValueError(f'Extension "{key}" must start with "x-".')
        self.root_doc[key] = value
        return self

    def add_path(self, url: str, path_item: dict[str, Any]) -> DocumentBuilder:
        self.root_doc["paths"][url] = path_item
        return self


def _add_security(builder: DocumentBuilder, options: OAS3PluginOptions) -> None:
    security = options.autowired_security
    if security is None:
        return
    for name, scheme in security.security_schemes.items():
        builder.add_security_scheme(name, scheme.to_openapi())  # type: ignore[union-attr]
    if security.root_security is not None:
        builder.root_doc["security"] = normalize_security_requirement(
            security.root_security
        )


async def build_document(
    options: OAS3PluginOptions, routes: Sequence[RouteSpec]
) -> dict[str, Any]:
    """Assemble, canonicalize, validate and return the OpenAPI document.

    Raises :class:`OAS3SpecValidationError` for an invalid document when
    ``exit_on_invalid_document`` is set; any other failure propagates as is.
    """
    builder = DocumentBuilder.create(dict(options.openapi_info))

    for hook in options.hooks:
        await hook.pre_parse(builder)

    _add_security(builder, options)
    paths = builder.root_doc.setdefault("paths", {})

    for route in routes:
        if route.oas is not None and route.oas.omit:
            logger.debug("Route has omit = True; skipping.", extra={"route_path": route.url})
            continue
        if not route.configured and not options.include_unconfigured_operations:
            logger.debug("Route has no OAS config; skipping.", extra={"route_path": route.url})
            continue

        path_item = paths.setdefault(route.url, {})

        for method in route.methods:
            method = method.lower()
            if method not in HTTP_METHODS:
                logger.warning(
                    "Method %s cannot be documented; skipping.",
                    method,
                    extra={"route_path": route.url},
                )
                continue
            operation = build_operation(route, method, options)
            for hook in options.hooks:
                await hook.post_operation_build(route, operation)
            path_item[method] = operation

    builder = DocumentBuilder(canonicalize_annotated_schemas(builder.root_doc))

    for hook in options.hooks:
        await hook.post_parse(builder)

    doc = builder.root_doc
    validator = options.validator or validate_document
    result = validator(doc)
    if not result.valid:
        extra: dict[str, Any] = {"openapi_errors": list(result.errors)}
        if options.print_specification_on_validation_failure:
            extra["doc"] = json.dumps(doc, indent=2, default=repr)

        if options.exit_on_invalid_document:
            logger.error("Errors in OpenAPI validation.", extra=extra)
            raise OAS3SpecValidationError(result.errors)
        logger.warning("Errors in OpenAPI validation.", extra=extra)

    return doc
