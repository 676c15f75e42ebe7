"""Document transforms applied after the plugin has assembled a document."""

from __future__ import annotations

import copy
import logging
from typing import Any

from fastapi_oas3.spec_transforms.canonicalize import canonicalize_schemas
from fastapi_oas3.spec_transforms.find import find_tagged_schemas
from fastapi_oas3.spec_transforms.fixup import (
    fixup_spec_schema_refs,
    strip_schema_tags,
)
from fastapi_oas3.spec_transforms.oas_helpers import ensure_components

logger = logging.getLogger(__name__)


def canonicalize_annotated_schemas(doc: dict[str, Any]) -> dict[str, Any]:
    """Hoist every tagged schema into ``#/components/schemas`` exactly once.

    Works on a deep copy: the input document, and the schema objects routes
    were declared with, are left untouched. Tag identity survives the copy,
    so shared types stay shared.

    1. find every place a tagged schema can be hiding;
    2. build the canonical ``name -> schema`` map (collisions and cycles are
       fatal);
    3. walk the document again and replace every non-root occurrence with a
       ``$ref`` into ``#/components/schemas``.
    """
    doc = copy.deepcopy(doc)
    components = ensure_components(doc)

    canonicalized = canonicalize_schemas(find_tagged_schemas(doc))
    components["schemas"] = {**components["schemas"], **canonicalized}
    logger.debug(
        "Canonicalized %d tagged schemas.",
        len(canonicalized),
        extra={"schemas": sorted(canonicalized)},
    )

    fixup_spec_schema_refs(doc)
    result: dict[str, Any] = strip_schema_tags(doc)
    return result


__all__ = [
    "canonicalize_annotated_schemas",
    "canonicalize_schemas",
    "find_tagged_schemas",
    "fixup_spec_schema_refs",
    "strip_schema_tags",
]
