"""Structural helpers shared by the tagged-schema walker and the fixup pass."""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any

from fastapi_oas3.constants import HTTP_METHODS

COMPONENT_REGISTRIES = (
    "schemas",
    "callbacks",
    "requestBodies",
    "parameters",
    "responses",
)


def is_inline(value: object) -> bool:
    """A mapping that is not a ``$ref`` pointer."""
    return isinstance(value, dict) and "$ref" not in value


def is_universal_schema(schema: dict[str, Any]) -> bool:
    """``{}``-like schemas match any value and have nothing to descend into."""
    return not (
        schema.get("type")
        or schema.get("allOf")
        or schema.get("anyOf")
        or schema.get("oneOf")
        or schema.get("properties")
    )


def is_array_schema(schema: dict[str, Any]) -> bool:
    schema_type = schema.get("type")
    if isinstance(schema_type, list):
        return "array" in schema_type
    return schema_type == "array"


def iter_subschema_slots(
    schema: dict[str, Any],
) -> Iterator[tuple[dict[str, Any] | list[Any], str | int]]:
    """Yield ``(container, key)`` for each child schema the walk descends into.

    Universal schemas have no children, and ``items`` only counts on array
    schemas. Shared by the walker and the fixup pass.
    """
    if is_universal_schema(schema):
        return

    for key in ("allOf", "anyOf", "oneOf"):
        members = schema.get(key)
        if isinstance(members, list):
            for index, member in enumerate(members):
                if is_inline(member):
                    yield members, index

    properties = schema.get("properties")
    if isinstance(properties, dict):
        for name, prop in properties.items():
            if is_inline(prop):
                yield properties, name

    if is_inline(schema.get("additionalProperties")):
        yield schema, "additionalProperties"

    if is_array_schema(schema) and is_inline(schema.get("items")):
        yield schema, "items"


def iter_subschemas(schema: dict[str, Any]) -> Iterator[dict[str, Any]]:
    """Yield the direct child schemas the walker descends into."""
    for container, key in iter_subschema_slots(schema):
        yield container[key]  # type: ignore[index]


def ensure_components(doc: dict[str, Any]) -> dict[str, Any]:
    components: dict[str, Any] = doc.setdefault("components", {})
    for registry in COMPONENT_REGISTRIES:
        components.setdefault(registry, {})
    return components


def operations(path_item: dict[str, Any]) -> list[dict[str, Any]]:
    return [
        path_item[method]
        for method in HTTP_METHODS
        if isinstance(path_item.get(method), dict)
    ]


def path_items(doc: dict[str, Any]) -> list[dict[str, Any]]:
    return [p for p in (doc.get("paths") or {}).values() if is_inline(p)]


def callback_path_items(callbacks: dict[str, Any]) -> list[dict[str, Any]]:
    """Path items nested in a ``callbacks`` map (name -> expression -> item)."""
    items: list[dict[str, Any]] = []
    for callback in (callbacks or {}).values():
        if not is_inline(callback):
            continue
        items.extend(p for p in callback.values() if is_inline(p))
    return items


def media_types(holder: dict[str, Any]) -> list[dict[str, Any]]:
    """Media type objects of a request body or response."""
    return [m for m in (holder.get("content") or {}).values() if isinstance(m, dict)]
