"""Exception hierarchy for startup failures and request-time security aborts."""

from __future__ import annotations


class OAS3PluginError(Exception):
    """Base for all errors found during startup or route registration."""


class OAS3PluginOptionsError(OAS3PluginError):
    """Invalid plugin configuration."""

    def __init__(self, message: str) -> None:
        super().__init__(f"Problem with OAS3 plugin config: {message}")


class OAS3SpecValidationError(OAS3PluginError):
    """The assembled document failed OpenAPI validation."""

    def __init__(self, errors: tuple[str, ...] = ()) -> None:
        super().__init__(
            "Failed to validate OpenAPI specification. Check logs for errors."
        )
        self.errors = errors


class SchemaGraphError(OAS3PluginError):
    """Tagged schemas could not be canonicalized."""


class SchemaCollisionError(SchemaGraphError):
    """Two distinct tagged schemas share a display name."""

    def __init__(self, name: str, existing: str, current: str) -> None:
        super().__init__(
            f"Duplicate schemas found with tag '{name}':\n\n"
            f"    {existing}\n\n"
            f"    {current}"
        )
        self.name = name


class SchemaCycleError(SchemaGraphError):
    """A tagged schema is reachable from itself."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Schema cycle found at '{name}'.")
        self.name = name


class OAS3RequestError(Exception):
    """Base for errors raised while handling a request."""

    def __init__(self, detail: str, *, status_code: int) -> None:
        super().__init__(detail)
        self.status_code = status_code
        self.detail = detail


class BadRequest(OAS3RequestError):
    def __init__(self, detail: str = "Bad Request") -> None:
        super().__init__(detail, status_code=400)


class Unauthorized(OAS3RequestError):
    """No security clause accepted the request's credentials (401)."""

    def __init__(self, detail: str = "Unauthorized") -> None:
        super().__init__(detail, status_code=401)


class Forbidden(OAS3RequestError):
    """A security scheme recognised the caller and refused it (403)."""

    def __init__(self, detail: str = "Forbidden") -> None:
        super().__init__(detail, status_code=403)
