"""Operation objects built from route descriptors."""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from fastapi_oas3.constants import APPLICATION_JSON
from fastapi_oas3.options import PathParamExtras, QueryParamExtras
from fastapi_oas3.routes import RouteSpec, path_param_names
from fastapi_oas3.schemas import camel_case, is_tagged_schema
from fastapi_oas3.security.plan import normalize_security_requirement

if TYPE_CHECKING:
    from fastapi_oas3.options import OAS3PluginOptions

logger = logging.getLogger(__name__)

_RESPONSE_CODE = re.compile(r"^[1-5][0-9]{2}")

NO_OPERATION_DESCRIPTION = "No operation description specified."
NO_BODY_DESCRIPTION = "No request body description specified."
NO_RESPONSE_DESCRIPTION = "No response description specified."
NO_QUERY_DESCRIPTION = "No querystring parameter description specified."
NO_PATH_DESCRIPTION = "No path parameter description specified."


def default_operation_id(route: RouteSpec, method: str) -> str:
    """``/api/ping`` + ``GET`` -> ``apiPingGet``. Router prefixes are ignored."""
    return camel_case(f"{route.path} {method}")


def _compact(mapping: dict[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in mapping.items() if value is not None}


def _is_object_schema(schema: Any) -> bool:
    return isinstance(schema, Mapping) and (
        schema.get("type") == "object" or "properties" in schema
    )


def _warn_unmatched_extras(
    kind: str, extras: Mapping[str, Any], properties: Mapping[str, Any], url: str
) -> None:
    unmatched = [key for key in extras if key not in properties]
    if unmatched:
        logger.warning(
            "Route's %s has extra properties. These will be ignored: %s",
            kind,
            ", ".join(unmatched),
            extra={"route_path": url, "unmatched_extras": unmatched},
        )


def _query_parameters(
    route: RouteSpec, querystring: Mapping[str, Any]
) -> list[dict[str, Any]]:
    if not _is_object_schema(querystring):
        logger.warning(
            "Route has a querystring that is not an object schema. Skipping.",
            extra={"route_path": route.url},
        )
        return []
    if querystring.get("additionalProperties"):
        logger.warning(
            "Route's querystring has additionalProperties. This will be ignored.",
            extra={"route_path": route.url},
        )

    properties: Mapping[str, Any] = querystring.get("properties") or {}
    required = querystring.get("required") or []
    all_extras = route.oas.querystring if route.oas else {}
    _warn_unmatched_extras("querystring", all_extras, properties, route.url)

    parameters = []
    for name, value in properties.items():
        extras = all_extras.get(name) or QueryParamExtras()
        parameters.append(
            _compact(
                {
                    "name": name,
                    "in": "query",
                    "deprecated": extras.deprecated,
                    "description": extras.description
                    or value.get("description")
                    or NO_QUERY_DESCRIPTION,
                    "example": extras.example
                    if extras.example is not None
                    else value.get("example"),
                    "required": name in required,
                    "schema": extras.schema_override or value,
                    "style": extras.style,
                    "allowEmptyValue": extras.allow_empty_value,
                    "allowReserved": extras.allow_reserved,
                    "explode": extras.explode,
                }
            )
        )
    return parameters


def _path_schema(route: RouteSpec, name: str, schema: Any) -> Any:
    pattern = route.param_patterns.get(name)
    if (
        pattern
        and isinstance(schema, Mapping)
        and not is_tagged_schema(schema)
        and "pattern" not in schema
    ):
        return {**schema, "pattern": pattern}
    return schema


def _path_parameters(route: RouteSpec) -> list[dict[str, Any]]:
    params = route.schema.params
    properties: Mapping[str, Any] = {}
    required: list[str] = []

    if params is not None:
        if not _is_object_schema(params):
            logger.warning(
                "Route has a params that is not an object schema. Skipping.",
                extra={"route_path": route.url},
            )
        else:
            if params.get("additionalProperties"):
                logger.warning(
                    "Route's params has additionalProperties. This will be ignored.",
                    extra={"route_path": route.url},
                )
            properties = params.get("properties") or {}
            required = params.get("required") or []

    all_extras = route.oas.params if route.oas else {}
    _warn_unmatched_extras("params", all_extras, properties, route.url)

    parameters = []
    for name, value in properties.items():
        if name not in required:
            logger.warning(
                "Route's param '%s' is marked as not required. This will be ignored.",
                name,
                extra={"route_path": route.url},
            )
        extras = all_extras.get(name) or PathParamExtras()
        parameters.append(
            _compact(
                {
                    "name": name,
                    "in": "path",
                    "description": extras.description
                    or value.get("description")
                    or NO_PATH_DESCRIPTION,
                    "required": True,
                    "example": extras.example
                    if extras.example is not None
                    else value.get("example"),
                    "schema": extras.schema_override
                    or _path_schema(route, name, value),
                }
            )
        )

    # every templated segment must be documented
    for name in path_param_names(route.url):
        if name in properties:
            continue
        parameters.append(
            {
                "name": name,
                "in": "path",
                "description": NO_PATH_DESCRIPTION,
                "required": True,
                "schema": _path_schema(route, name, {"type": "string"}),
            }
        )
    return parameters


def _request_body(route: RouteSpec) -> dict[str, Any] | None:
    info = route.oas.body if route.oas else None
    body = route.schema.body
    if body is None and (info is None or info.schema_override is None):
        return None
    if body is not None and not isinstance(body, Mapping):
        logger.warning(
            "Route has a request body that is not a schema. Skipping.",
            extra={"route_path": route.url},
        )
        return None

    content_type = (info.content_type if info else None) or APPLICATION_JSON
    schema = (info.schema_override if info else None) or body
    return {
        "description": (info.description if info else None) or NO_BODY_DESCRIPTION,
        "content": {content_type: {"schema": schema}},
    }


def _responses(route: RouteSpec) -> dict[str, Any]:
    responses: dict[str, Any] = {}
    all_info = route.oas.responses if route.oas else {}

    for code, schema in route.schema.response.items():
        code = str(code)
        if code != "default" and not _RESPONSE_CODE.match(code):
            logger.warning(
                "Route has a response schema of code '%s', which is not supported.",
                code,
                extra={"route_path": route.url},
            )
            continue

        info = all_info.get(code)
        content_type = (info.content_type if info else None) or APPLICATION_JSON
        responses[code] = {
            "description": (info.description if info else None)
            or NO_RESPONSE_DESCRIPTION,
            "content": {
                content_type: {
                    "schema": (info.schema_override if info else None) or schema
                }
            },
        }
    return responses


def build_operation(
    route: RouteSpec, method: str, options: OAS3PluginOptions
) -> dict[str, Any]:
    """Build the operation object documenting ``method`` on ``route``."""
    oas = route.oas
    operation_id_fn = options.operation_id_fn or default_operation_id

    operation_id = oas.operation_id if oas else None
    if operation_id is None:
        operation_id = operation_id_fn(route, method)
    elif len(route.methods) > 1:
        # operationIds are unique per document
        operation_id = camel_case(f"{operation_id} {method}")

    operation = _compact(
        {
            "operationId": operation_id,
            "summary": (oas.summary if oas else None) or route.url,
            "description": (oas.description if oas else None)
            or NO_OPERATION_DESCRIPTION,
            "deprecated": oas.deprecated if oas else None,
            "tags": list(oas.tags) if oas and oas.tags else None,
            "externalDocs": dict(oas.external_docs)
            if oas and oas.external_docs
            else None,
            "callbacks": dict(oas.callbacks) if oas and oas.callbacks else None,
        }
    )

    if oas is not None and oas.security is not None:
        operation["security"] = normalize_security_requirement(oas.security)

    parameters = []
    querystring = route.schema.querystring
    if querystring is not None:
        parameters.extend(_query_parameters(route, querystring))
    parameters.extend(_path_parameters(route))
    if parameters:
        operation["parameters"] = parameters

    request_body = _request_body(route)
    if request_body is not None:
        operation["requestBody"] = request_body

    responses = _responses(route)
    if responses:
        operation["responses"] = responses

    if oas is not None:
        operation.update(oas.vendor_prefixed_fields)

    logger.info(
        "Built operation for route.",
        extra={"route_path": route.url, "method": method, "operation_id": operation_id},
    )
    return operation
