"""Build the deduplicated ``name -> schema`` registry from tagged occurrences."""

from __future__ import annotations

import json
from collections.abc import Iterable, Iterator
from typing import Any

from fastapi_oas3.exceptions import (
    OAS3PluginOptionsError,
    SchemaCollisionError,
    SchemaCycleError,
)
from fastapi_oas3.schemas import SchemaTag, TaggedSchema, is_tagged_schema
from fastapi_oas3.spec_transforms.oas_helpers import iter_subschemas


def _dump(schema: dict[str, Any]) -> str:
    return json.dumps(schema, sort_keys=True, default=repr)


def _nearest_tagged(
    schema: dict[str, Any], visiting: set[int]
) -> Iterator[TaggedSchema]:
    """Tagged descendants of ``schema``, looking through untagged schemas."""
    for child in iter_subschemas(schema):
        if is_tagged_schema(child):
            yield child  # type: ignore[misc]
        elif id(child) not in visiting:
            visiting.add(id(child))
            yield from _nearest_tagged(child, visiting)
            visiting.discard(id(child))


def _canonicalize(
    current: TaggedSchema,
    completed: dict[str, TaggedSchema],
    seen: set[SchemaTag],
) -> None:
    tag = current.schema_tag
    if not tag.name:
        raise OAS3PluginOptionsError(
            "all schemas must be tagged with a non-empty string name"
        )

    # `seen` holds the tags on the active recursion stack.
    if tag in seen:
        raise SchemaCycleError(tag.name)
    seen.add(tag)

    # `completed` is keyed by display name so that two different tags that
    # share a name are caught here.
    existing = completed.get(tag.name)
    if existing is not None:
        if existing.schema_tag is not tag:
            raise SchemaCollisionError(tag.name, _dump(existing), _dump(current))
    else:
        completed[tag.name] = current
        for child in _nearest_tagged(current, set()):
            _canonicalize(child, completed, seen)

    seen.discard(tag)


def canonicalize_schemas(schemas: Iterable[TaggedSchema]) -> dict[str, TaggedSchema]:
    """Collapse tagged occurrences into one registry entry per tag.

    Raises :class:`SchemaCollisionError` when two distinct tags share a display
    name and :class:`SchemaCycleError` when a tag is reachable from itself.
    Reaching the same tag along two different paths is fine.
    """
    completed: dict[str, TaggedSchema] = {}
    seen: set[SchemaTag] = set()
    for schema in schemas:
        _canonicalize(schema, completed, seen)
    return completed
