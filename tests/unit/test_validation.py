"""Tests for the openapi-spec-validator adapter."""

from __future__ import annotations

from fastapi_oas3.validation import ValidationResult, validate_document


class TestValidateDocument:
    def test_valid(self) -> None:
        result = validate_document(
            {"openapi": "3.1.0", "info": {"title": "t", "version": "1"}, "paths": {}}
        )
        assert result == ValidationResult(valid=True, errors=())

    def test_invalid_collects_messages(self) -> None:
        result = validate_document({"openapi": "3.1.0", "paths": {}})
        assert not result.valid
        assert result.errors
        assert all(isinstance(error, str) for error in result.errors)
