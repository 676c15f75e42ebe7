"""Tests for compiling security requirements into plans."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from fastapi_oas3.exceptions import OAS3PluginError
from fastapi_oas3.options import AutowireSecurityOptions
from fastapi_oas3.security.plan import (
    SecurityPlan,
    compile_security_plan,
    normalize_security_requirement,
)
from fastapi_oas3.security.schemes import (
    ApiKeySecurityScheme,
    HttpBearerSecurityScheme,
)


def _options(**kwargs: object) -> AutowireSecurityOptions:
    schemes = {
        "key": ApiKeySecurityScheme(name="X-Key", location="header", fn=AsyncMock()),
        "bearer": HttpBearerSecurityScheme(fn=AsyncMock()),
    }
    return AutowireSecurityOptions(security_schemes=schemes, **kwargs)  # type: ignore[arg-type]


class TestNormalizeSecurityRequirement:
    def test_bare_clause_becomes_list(self) -> None:
        assert normalize_security_requirement({"key": []}) == [{"key": []}]

    def test_list_is_copied(self) -> None:
        requirement = [{"key": ["a"]}, {"bearer": []}]
        normalized = normalize_security_requirement(requirement)
        assert normalized == requirement
        assert normalized[0] is not requirement[0]

    def test_empty(self) -> None:
        assert normalize_security_requirement([]) == []


class TestCompileSecurityPlan:
    def test_clause_structure_preserved(self) -> None:
        plan = compile_security_plan(
            [{"key": [], "bearer": []}, {"bearer": []}], _options()
        )
        assert isinstance(plan, SecurityPlan)
        assert [[name for name, _ in clause] for clause in plan.clauses] == [
            ["key", "bearer"],
            ["bearer"],
        ]

    def test_bare_clause(self) -> None:
        plan = compile_security_plan({"key": []}, _options())
        assert len(plan.clauses) == 1

    def test_unknown_scheme_raises(self) -> None:
        with pytest.raises(OAS3PluginError, match='Security scheme "nope" not defined.'):
            compile_security_plan([{"nope": []}], _options())

    def test_unknown_scheme_skipped_when_allowed(self) -> None:
        plan = compile_security_plan(
            [{"nope": [], "key": []}, {"nope": []}],
            _options(allow_unrecognized_security=True),
        )
        assert [[name for name, _ in clause] for clause in plan.clauses] == [["key"], []]

    def test_debug_flag_carried(self) -> None:
        assert compile_security_plan({"key": []}, _options(debug=True)).debug

    def test_plan_is_frozen(self) -> None:
        plan = compile_security_plan({"key": []}, _options())
        with pytest.raises(AttributeError):
            plan.clauses = ()  # type: ignore[misc]
