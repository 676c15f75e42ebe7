"""Tests for the FastAPI security dependency and route attachment."""

from __future__ import annotations

from typing import Any
from unittest.mock import AsyncMock, Mock

import pytest
from fastapi import HTTPException

from fastapi_oas3.exceptions import (
    BadRequest,
    Forbidden,
    OAS3PluginError,
    Unauthorized,
)
from fastapi_oas3.options import AutowireSecurityOptions
from fastapi_oas3.security.dependency import (
    attach_security_to_route,
    default_failure_handler,
    security_dependency,
)
from fastapi_oas3.security.handlers import (
    ALLOW,
    FORBIDDEN,
    UNAUTHORIZED,
    HandlerResult,
)
from fastapi_oas3.security.schemes import ApiKeySecurityScheme


def _options(**kwargs: Any) -> AutowireSecurityOptions:
    schemes = {
        "key": ApiKeySecurityScheme(name="X-Key", location="header", fn=AsyncMock()),
        "other": ApiKeySecurityScheme(name="X-Other", location="header", fn=AsyncMock()),
    }
    return AutowireSecurityOptions(security_schemes=schemes, **kwargs)


def _attach(route_security: Any, options: AutowireSecurityOptions, cache: dict[str, Any] | None = None) -> Any:
    return attach_security_to_route(
        route_security,
        options,
        {} if cache is None else cache,
        methods=["GET"],
        path="/x",
    )


class TestDefaultFailureHandler:
    def test_401(self, make_request: Any) -> None:
        with pytest.raises(Unauthorized):
            default_failure_handler(UNAUTHORIZED, make_request())

    def test_403(self, make_request: Any) -> None:
        with pytest.raises(Forbidden):
            default_failure_handler(FORBIDDEN, make_request())

    def test_out_of_domain_is_500(self, make_request: Any) -> None:
        with pytest.raises(HTTPException) as info:
            default_failure_handler(HandlerResult(ok=False, code=418), make_request())
        assert info.value.status_code == 500


class TestSecurityDependency:
    async def test_allow_returns_none(self, make_request: Any) -> None:
        dependency = security_dependency(AsyncMock(return_value=ALLOW), _options())
        assert await dependency(make_request()) is None

    @pytest.mark.parametrize(("result", "status"), [(UNAUTHORIZED, 401), (FORBIDDEN, 403)])
    async def test_failure_translated(
        self, make_request: Any, result: HandlerResult, status: int
    ) -> None:
        dependency = security_dependency(AsyncMock(return_value=result), _options())
        with pytest.raises(HTTPException) as info:
            await dependency(make_request())
        assert info.value.status_code == status

    async def test_custom_handler_may_raise(self, make_request: Any) -> None:
        def on_failed(result: HandlerResult, request: Any) -> None:
            raise BadRequest("nope")

        dependency = security_dependency(
            AsyncMock(return_value=UNAUTHORIZED), _options(on_request_failed=on_failed)
        )
        with pytest.raises(HTTPException) as info:
            await dependency(make_request())
        assert info.value.status_code == 400
        assert info.value.detail == "nope"

    async def test_custom_handler_that_returns_still_rejects(
        self, make_request: Any
    ) -> None:
        on_failed = AsyncMock(return_value=None)
        dependency = security_dependency(
            AsyncMock(return_value=FORBIDDEN), _options(on_request_failed=on_failed)
        )
        request = make_request()
        with pytest.raises(HTTPException) as info:
            await dependency(request)
        assert info.value.status_code == 403
        on_failed.assert_awaited_once_with(FORBIDDEN, request)

    async def test_custom_handler_may_raise_http_exception(
        self, make_request: Any
    ) -> None:
        on_failed = Mock(side_effect=HTTPException(status_code=404))
        dependency = security_dependency(
            AsyncMock(return_value=UNAUTHORIZED), _options(on_request_failed=on_failed)
        )
        with pytest.raises(HTTPException) as info:
            await dependency(make_request())
        assert info.value.status_code == 404


class TestAttachSecurityToRoute:
    def test_disabled(self) -> None:
        assert _attach([{"key": []}], _options(disabled=True)) is None

    def test_explicit_empty_bypasses_root(self) -> None:
        assert _attach([], _options(root_security=[{"key": []}])) is None

    def test_route_security_attached(self) -> None:
        dependency = _attach([{"key": []}], _options())
        assert dependency is not None
        plan = dependency._security_evaluator._security_plan
        assert [name for name, _ in plan.clauses[0]] == ["key"]

    def test_root_security_inherited(self) -> None:
        dependency = _attach(None, _options(root_security={"other": []}))
        plan = dependency._security_evaluator._security_plan
        assert [name for name, _ in plan.clauses[0]] == ["other"]

    def test_route_overrides_root(self) -> None:
        dependency = _attach({"key": []}, _options(root_security={"other": []}))
        plan = dependency._security_evaluator._security_plan
        assert [name for name, _ in plan.clauses[0]] == ["key"]

    def test_no_security_anywhere_allowed_by_default(self) -> None:
        assert _attach(None, _options()) is None

    def test_no_security_anywhere_rejected(self) -> None:
        with pytest.raises(OAS3PluginError, match="allow_empty_security_with_no_root"):
            _attach(None, _options(allow_empty_security_with_no_root=False))

    def test_structurally_equal_requirements_share_dependency(self) -> None:
        cache: dict[str, Any] = {}
        options = _options()
        first = _attach([{"key": []}], options, cache)
        second = _attach({"key": []}, options, cache)
        third = _attach([{"other": []}], options, cache)
        assert first is second
        assert third is not first
        assert len(cache) == 2

    def test_unknown_scheme_fails_at_attachment(self) -> None:
        with pytest.raises(OAS3PluginError):
            _attach([{"missing": []}], _options())
