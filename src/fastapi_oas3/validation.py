"""Document validation adapter over openapi-spec-validator."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Protocol

from openapi_spec_validator import OpenAPIV31SpecValidator


@dataclass(frozen=True)
class ValidationResult:
    valid: bool
    errors: tuple[str, ...] = ()


class DocumentValidator(Protocol):
    def __call__(self, doc: Mapping[str, Any]) -> ValidationResult: ...


def validate_document(doc: Mapping[str, Any]) -> ValidationResult:
    """Validate ``doc`` as OpenAPI 3.1, collecting every error message."""
    errors = tuple(
        getattr(error, "message", str(error))
        for error in OpenAPIV31SpecValidator(doc).iter_errors()
    )
    return ValidationResult(valid=not errors, errors=errors)
