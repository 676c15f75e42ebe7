"""Shared pytest fixtures for fastapi-oas3 tests."""

from __future__ import annotations

from typing import Any
from unittest.mock import AsyncMock

import pytest
from starlette.requests import Request

from fastapi_oas3.security.handlers import ALLOW


@pytest.fixture
def make_request() -> Any:
    """Factory for creating Starlette Request objects from a raw scope."""

    def _make(
        method: str = "GET",
        path: str = "/",
        headers: dict[str, str] | None = None,
        query_string: str = "",
        cookies: dict[str, str] | None = None,
        body: bytes = b"",
    ) -> Request:
        raw_headers = [
            (k.lower().encode(), v.encode()) for k, v in (headers or {}).items()
        ]
        if cookies:
            cookie = "; ".join(f"{k}={v}" for k, v in cookies.items())
            raw_headers.append((b"cookie", cookie.encode()))
        scope: dict[str, Any] = {
            "type": "http",
            "method": method,
            "path": path,
            "query_string": query_string.encode(),
            "headers": raw_headers,
            "root_path": "",
        }

        async def receive() -> dict[str, Any]:
            return {"type": "http.request", "body": body, "more_body": False}

        return Request(scope, receive)

    return _make


@pytest.fixture
def allow_fn() -> AsyncMock:
    """Mock async scheme function that accepts every credential."""
    return AsyncMock(return_value=ALLOW)


@pytest.fixture
def pet_schema() -> dict[str, Any]:
    return {
        "type": "object",
        "properties": {
            "name": {"type": "string"},
            "age": {"type": "integer"},
        },
        "required": ["name"],
    }
