"""Schema tagging: identity tokens that let the canonicalizer deduplicate types.

A tagged schema is an ordinary JSON-schema ``dict`` that also carries a
:class:`SchemaTag`. Two occurrences of the same tag are the same logical type
and end up as one entry in ``#/components/schemas``; two different tags with
the same display name are a configuration error. Identity is never derived
from the name.
"""

from __future__ import annotations

import copy
import re
from collections.abc import Mapping
from typing import Any

from fastapi_oas3.exceptions import OAS3PluginOptionsError

_LOWER_UPPER = re.compile(r"([a-z0-9])([A-Z])")
_ACRONYM_WORD = re.compile(r"([A-Z])([A-Z][a-z])")
_SEPARATORS = re.compile(r"[^A-Za-z0-9]+")


def _words(value: str) -> list[str]:
    value = _LOWER_UPPER.sub(r"\1 \2", value)
    value = _ACRONYM_WORD.sub(r"\1 \2", value)
    return _SEPARATORS.sub(" ", value).split()


def pascal_case(value: str) -> str:
    """``"my type_a"`` -> ``"MyTypeA"``, ``"HTTPServer"`` -> ``"HttpServer"``."""
    return "".join(w[:1].upper() + w[1:].lower() for w in _words(value))


def camel_case(value: str) -> str:
    words = _words(value)
    if not words:
        return ""
    head, *rest = words
    return head.lower() + "".join(w[:1].upper() + w[1:].lower() for w in rest)


class SchemaTag:
    """Allocation-unique identity token with a display name.

    Equality and hashing are object identity. Copying a tag returns the tag
    itself so that a deep-copied document still refers to the same types.
    """

    __slots__ = ("name",)

    def __init__(self, name: str) -> None:
        self.name = name

    def __copy__(self) -> SchemaTag:
        return self

    def __deepcopy__(self, memo: dict[int, Any]) -> SchemaTag:
        return self

    def __repr__(self) -> str:
        return f"SchemaTag({self.name!r})"


class TaggedSchema(dict):  # type: ignore[type-arg]
    """A JSON-schema mapping decorated with a :class:`SchemaTag`.

    Serializers see a plain ``dict``; the tag lives on an attribute.
    """

    __slots__ = ("schema_tag",)

    def __init__(self, tag: SchemaTag, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.schema_tag = tag

    @property
    def schema_name(self) -> str:
        return self.schema_tag.name

    def __copy__(self) -> TaggedSchema:
        return TaggedSchema(self.schema_tag, self)

    def __deepcopy__(self, memo: dict[int, Any]) -> TaggedSchema:
        clone = TaggedSchema(self.schema_tag)
        memo[id(self)] = clone
        for key, value in self.items():
            clone[copy.deepcopy(key, memo)] = copy.deepcopy(value, memo)
        return clone

    def __repr__(self) -> str:
        return f"TaggedSchema({self.schema_name!r}, {dict.__repr__(self)})"


def is_tagged_schema(value: object) -> bool:
    return isinstance(value, TaggedSchema)


def schema_type(name: str, schema: Mapping[str, Any]) -> TaggedSchema:
    """Tag ``schema`` as the named type.

    The name is PascalCased and becomes the key under
    ``#/components/schemas``. Tagging two different schemas with the same
    name fails when the document is assembled.

    Example::

        Pet = schema_type("pet", {"type": "object", "properties": {...}})
    """
    display_name = pascal_case(name)
    if not display_name:
        raise OAS3PluginOptionsError(
            "all schemas must be tagged with a non-empty string name"
        )
    if not isinstance(schema, Mapping):
        raise OAS3PluginOptionsError(
            f"schema_type({name!r}) expects a JSON schema mapping, "
            f"got {type(schema).__name__}"
        )
    return TaggedSchema(SchemaTag(display_name), schema)
