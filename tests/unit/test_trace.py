"""Tests for SecurityTrace, TraceEntry, and debug integration."""

from __future__ import annotations

from typing import Any
from unittest.mock import AsyncMock

import pytest
from fastapi import HTTPException

from fastapi_oas3.options import AutowireSecurityOptions
from fastapi_oas3.security.dependency import attach_security_to_route
from fastapi_oas3.security.handlers import ALLOW, FORBIDDEN
from fastapi_oas3.security.schemes import ApiKeySecurityScheme
from fastapi_oas3.trace import SecurityTrace, TraceEntry


class TestTraceEntry:
    def test_construction(self) -> None:
        entry = TraceEntry(
            clause_index=0, scheme_name="key", duration_ms=1.5, outcome="OK"
        )
        assert entry.scheme_name == "key"
        assert entry.duration_ms == 1.5
        assert entry.code is None

    def test_frozen(self) -> None:
        entry = TraceEntry(
            clause_index=0, scheme_name="key", duration_ms=1.5, outcome="OK"
        )
        with pytest.raises(AttributeError):
            entry.scheme_name = "other"  # type: ignore[misc]


class TestSecurityTrace:
    def test_defaults(self) -> None:
        trace = SecurityTrace()
        assert trace.entries == []
        assert trace.outcome == "OK"
        assert trace.code is None


class TestDebugIntegration:
    def _dependency(self, fn: AsyncMock, debug: bool) -> Any:
        options = AutowireSecurityOptions(
            security_schemes={
                "key": ApiKeySecurityScheme(name="X-Key", location="header", fn=fn)
            },
            debug=debug,
        )
        return attach_security_to_route(
            {"key": []}, options, {}, methods=["GET"], path="/"
        )

    async def test_debug_produces_trace(self, make_request: Any) -> None:
        dependency = self._dependency(AsyncMock(return_value=ALLOW), debug=True)
        request = make_request(headers={"X-Key": "k"})
        await dependency(request)
        trace = request.state.security_trace
        assert len(trace.entries) == 1
        assert trace.outcome == "OK"

    async def test_denied_trace_survives_rejection(self, make_request: Any) -> None:
        dependency = self._dependency(AsyncMock(return_value=FORBIDDEN), debug=True)
        request = make_request(headers={"X-Key": "k"})
        with pytest.raises(HTTPException):
            await dependency(request)
        assert request.state.security_trace.outcome == "DENIED"
        assert request.state.security_trace.entries[0].code == 403

    async def test_no_trace_by_default(self, make_request: Any) -> None:
        dependency = self._dependency(AsyncMock(return_value=ALLOW), debug=False)
        request = make_request(headers={"X-Key": "k"})
        await dependency(request)
        assert not hasattr(request.state, "security_trace")
