"""DocumentHook base and convenience hook classes."""

from __future__ import annotations

import inspect
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from fastapi_oas3.document import DocumentBuilder
    from fastapi_oas3.routes import RouteSpec


async def _maybe_await(value: Any) -> None:
    if inspect.isawaitable(value):
        await value


class DocumentHook:
    """Base abstraction for document lifecycle hooks. All methods are no-op by default."""

    async def pre_parse(self, builder: DocumentBuilder) -> None:
        pass

    async def post_operation_build(
        self, route: RouteSpec, operation: dict[str, Any]
    ) -> None:
        pass

    async def post_parse(self, builder: DocumentBuilder) -> None:
        pass


class PreParse(DocumentHook):
    """Fires before any route is documented. ``callback`` may be sync or async."""

    def __init__(self, callback: Callable[[DocumentBuilder], Any]) -> None:
        self._callback = callback

    async def pre_parse(self, builder: DocumentBuilder) -> None:
        await _maybe_await(self._callback(builder))


class PostParse(DocumentHook):
    """Fires once the document is complete, before validation."""

    def __init__(self, callback: Callable[[DocumentBuilder], Any]) -> None:
        self._callback = callback

    async def post_parse(self, builder: DocumentBuilder) -> None:
        await _maybe_await(self._callback(builder))


class AfterOperationBuild(DocumentHook):
    """Fires for each operation object, which may be edited in place."""

    def __init__(
        self, callback: Callable[[RouteSpec, dict[str, Any]], Any]
    ) -> None:
        self._callback = callback

    async def post_operation_build(
        self, route: RouteSpec, operation: dict[str, Any]
    ) -> None:
        await _maybe_await(self._callback(route, operation))
