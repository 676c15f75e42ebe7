"""Shared constants."""

from __future__ import annotations

OPENAPI_VERSION = "3.1.0"

# The only content type assumed when a route does not name one.
APPLICATION_JSON = "application/json"

# Operation keys of a path item, in document order.
HTTP_METHODS = ("get", "put", "post", "delete", "options", "head", "patch", "trace")

COMPONENTS_SCHEMAS_REF_PREFIX = "#/components/schemas/"
