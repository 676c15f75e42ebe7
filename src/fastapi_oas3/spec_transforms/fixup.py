"""Replace inline tagged schemas with ``$ref`` pointers into the registry."""

from __future__ import annotations

from typing import Any

from fastapi_oas3.constants import COMPONENTS_SCHEMAS_REF_PREFIX
from fastapi_oas3.schemas import TaggedSchema, is_tagged_schema
from fastapi_oas3.spec_transforms.oas_helpers import (
    callback_path_items,
    is_inline,
    iter_subschema_slots,
    media_types,
    operations,
    path_items,
)


def ref_from_tagged_schema(schema: TaggedSchema) -> dict[str, str]:
    return {"$ref": COMPONENTS_SCHEMAS_REF_PREFIX + schema.schema_name}


def _fixed(schema: Any) -> Any:
    """Fix up ``schema``'s children, then swap it for a ref if it is tagged."""
    if not is_inline(schema):
        return schema
    fixup_references_in_schema(schema)
    if is_tagged_schema(schema):
        return ref_from_tagged_schema(schema)
    return schema


def fixup_references_in_schema(schema: dict[str, Any]) -> None:
    for container, key in list(iter_subschema_slots(schema)):
        container[key] = _fixed(container[key])  # type: ignore[index]


def _fixup_schema_holder(holder: Any) -> None:
    if is_inline(holder) and isinstance(holder.get("schema"), dict):
        holder["schema"] = _fixed(holder["schema"])


def _fixup_content(holder: Any) -> None:
    if is_inline(holder):
        for media in media_types(holder):
            _fixup_schema_holder(media)


def _fixup_callbacks(callbacks: Any) -> None:
    for path_item in callback_path_items(callbacks or {}):
        _fixup_path_item(path_item)


def _fixup_path_item(path_item: dict[str, Any]) -> None:
    for parameter in path_item.get("parameters") or ():
        _fixup_schema_holder(parameter)

    for operation in operations(path_item):
        for parameter in operation.get("parameters") or ():
            _fixup_schema_holder(parameter)
        _fixup_content(operation.get("requestBody"))
        for response in (operation.get("responses") or {}).values():
            _fixup_content(response)
        _fixup_callbacks(operation.get("callbacks"))


def fixup_spec_schema_refs(doc: dict[str, Any]) -> None:
    """Rewrite ``doc`` in place.

    Root ``components.schemas`` entries are the ref targets: their insides are
    fixed up but they are never replaced themselves.
    """
    components = doc.get("components") or {}

    for schema in (components.get("schemas") or {}).values():
        if is_inline(schema):
            fixup_references_in_schema(schema)

    for path_item in path_items(doc):
        _fixup_path_item(path_item)

    _fixup_callbacks(components.get("callbacks"))
    for request_body in (components.get("requestBodies") or {}).values():
        _fixup_content(request_body)
    for response in (components.get("responses") or {}).values():
        _fixup_content(response)
    for parameter in (components.get("parameters") or {}).values():
        _fixup_schema_holder(parameter)


def strip_schema_tags(node: Any, memo: dict[int, Any] | None = None) -> Any:
    """Turn every remaining :class:`TaggedSchema` under ``node`` into a ``dict``."""
    if memo is None:
        memo = {}
    if isinstance(node, list):
        node[:] = [strip_schema_tags(item, memo) for item in node]
        return node
    if not isinstance(node, dict):
        return node
    if id(node) in memo:
        return memo[id(node)]

    target = dict(node) if isinstance(node, TaggedSchema) else node
    memo[id(node)] = target
    for key, value in target.items():
        target[key] = strip_schema_tags(value, memo)
    return target
