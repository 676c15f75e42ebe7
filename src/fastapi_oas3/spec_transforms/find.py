"""Discover every tagged schema reachable from an OpenAPI document."""

from __future__ import annotations

import logging
from typing import Any

from fastapi_oas3.exceptions import SchemaCycleError
from fastapi_oas3.schemas import TaggedSchema, is_tagged_schema
from fastapi_oas3.spec_transforms.oas_helpers import (
    callback_path_items,
    is_inline,
    is_universal_schema,
    iter_subschemas,
    media_types,
    operations,
    path_items,
)

logger = logging.getLogger(__name__)


def _find_in_schema(
    schema: dict[str, Any], active: set[int], out: list[TaggedSchema]
) -> None:
    # `active` holds the nodes on the current descent path; meeting one
    # again means the schema contains itself.
    if id(schema) in active:
        name = schema.schema_name if is_tagged_schema(schema) else "<untagged>"
        raise SchemaCycleError(name)

    if not is_universal_schema(schema):
        active.add(id(schema))
        for child in iter_subschemas(schema):
            _find_in_schema(child, active, out)
        active.discard(id(schema))

    if is_tagged_schema(schema):
        out.append(schema)  # type: ignore[arg-type]


def find_tagged_schemas_in_schema(schema: Any) -> list[TaggedSchema]:
    """Tagged schemas within ``schema``, children before their parents."""
    out: list[TaggedSchema] = []
    if is_inline(schema):
        _find_in_schema(schema, set(), out)
    return out


def _in_schema_holder(holder: Any) -> list[TaggedSchema]:
    if not is_inline(holder):
        return []
    return find_tagged_schemas_in_schema(holder.get("schema"))


def _in_parameters(parameters: Any) -> list[TaggedSchema]:
    found: list[TaggedSchema] = []
    for parameter in parameters or ():
        found.extend(_in_schema_holder(parameter))
    return found


def _in_content(holder: Any) -> list[TaggedSchema]:
    if not is_inline(holder):
        return []
    found: list[TaggedSchema] = []
    for media in media_types(holder):
        found.extend(_in_schema_holder(media))
    return found


def _in_callbacks(callbacks: Any) -> list[TaggedSchema]:
    found: list[TaggedSchema] = []
    for path_item in callback_path_items(callbacks or {}):
        found.extend(_in_path_item(path_item))
    return found


def _in_operation(operation: dict[str, Any]) -> list[TaggedSchema]:
    found = _in_parameters(operation.get("parameters"))
    found.extend(_in_content(operation.get("requestBody")))
    for response in (operation.get("responses") or {}).values():
        found.extend(_in_content(response))
    # callbacks hold whole path items, so this recurses into the same walk
    found.extend(_in_callbacks(operation.get("callbacks")))
    return found


def _in_path_item(path_item: dict[str, Any]) -> list[TaggedSchema]:
    found: list[TaggedSchema] = []
    for operation in operations(path_item):
        found.extend(_in_operation(operation))
    found.extend(_in_parameters(path_item.get("parameters")))
    return found


def find_tagged_schemas(doc: dict[str, Any]) -> list[TaggedSchema]:
    """Every tagged schema occurrence in ``doc``.

    The same schema may appear more than once; the canonicalizer collapses
    repeats. Raises :class:`SchemaCycleError` if a schema contains itself.
    """
    components = doc.get("components") or {}
    found: list[TaggedSchema] = []

    for schema in (components.get("schemas") or {}).values():
        found.extend(find_tagged_schemas_in_schema(schema))

    for path_item in path_items(doc):
        found.extend(_in_path_item(path_item))

    found.extend(_in_callbacks(components.get("callbacks")))
    for request_body in (components.get("requestBodies") or {}).values():
        found.extend(_in_content(request_body))
    for response in (components.get("responses") or {}).values():
        found.extend(_in_content(response))
    for parameter in (components.get("parameters") or {}).values():
        found.extend(_in_schema_holder(parameter))

    logger.debug("Found %d tagged schema occurrences.", len(found))
    return found
