"""Route descriptors and the registry that resolves them against the app.

Routes registered through :class:`~fastapi_oas3.plugin.OAS3Plugin` are
recorded here as pending entries. Once the application is assembled, the
registry walks ``app.routes`` and produces one :class:`RouteSpec` per served
route, so prefixes added by ``include_router`` end up in the document.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import Any

from fastapi.routing import APIRoute

from fastapi_oas3.options import RouteOAS, RouteSchema

logger = logging.getLogger(__name__)

_PATH_PARAM = re.compile(r"\{(\w+)(?::[^}]*)?\}")


def path_param_names(url: str) -> list[str]:
    return _PATH_PARAM.findall(url)


@dataclass
class RouteSpec:
    """Everything the document builder knows about one served route.

    ``url`` is the full OpenAPI path as served; ``path`` is the path the
    route was declared with, before any router prefix.
    """

    methods: list[str]
    url: str
    path: str
    schema: RouteSchema = field(default_factory=RouteSchema)
    oas: RouteOAS | None = None
    param_patterns: dict[str, str] = field(default_factory=dict)
    endpoint: Callable[..., Any] | None = None
    configured: bool = True


@dataclass
class _PendingRoute:
    endpoint: Callable[..., Any]
    methods: frozenset[str]
    path_format: str
    schema: RouteSchema
    oas: RouteOAS | None
    param_patterns: dict[str, str]


class RouteRegistry:
    """Explicit builder of documented routes, keyed by endpoint."""

    def __init__(self) -> None:
        self._pending: list[_PendingRoute] = []

    def __len__(self) -> int:
        return len(self._pending)

    def add(
        self,
        route: APIRoute,
        *,
        schema: RouteSchema | None = None,
        oas: RouteOAS | None = None,
        param_patterns: dict[str, str] | None = None,
    ) -> None:
        self._pending.append(
            _PendingRoute(
                endpoint=route.endpoint,
                methods=frozenset(route.methods or ()),
                path_format=route.path_format,
                schema=schema or RouteSchema(),
                oas=oas,
                param_patterns=dict(param_patterns or {}),
            )
        )

    def _match(self, route: APIRoute) -> _PendingRoute | None:
        candidates = [
            pending
            for pending in self._pending
            if pending.endpoint is route.endpoint
            and pending.methods == frozenset(route.methods or ())
            and route.path_format.endswith(pending.path_format)
        ]
        # the longest declared path is the one the prefix was added to
        return max(candidates, key=lambda p: len(p.path_format), default=None)

    def resolve(
        self, app_routes: Iterable[Any], *, include_unconfigured: bool = False
    ) -> list[RouteSpec]:
        """Produce a :class:`RouteSpec` for each route the app serves.

        Routes registered through the plugin are always returned, omitted ones
        included (the builder skips them). Other FastAPI routes are returned
        as unconfigured descriptors only when ``include_unconfigured`` is set
        and they are part of FastAPI's own schema.
        """
        specs: list[RouteSpec] = []
        matched: set[int] = set()

        for route in app_routes:
            if not isinstance(route, APIRoute):
                continue
            methods = sorted(route.methods or ())
            pending = self._match(route)

            if pending is not None:
                matched.add(id(pending))
                specs.append(
                    RouteSpec(
                        methods=methods,
                        url=route.path_format,
                        path=pending.path_format,
                        schema=pending.schema,
                        oas=pending.oas,
                        param_patterns=pending.param_patterns,
                        endpoint=route.endpoint,
                    )
                )
                continue

            if not include_unconfigured or not route.include_in_schema:
                logger.debug(
                    "Skipping unconfigured route.",
                    extra={"route_path": route.path_format},
                )
                continue
            specs.append(_unconfigured_spec(route, methods))

        for pending in self._pending:
            if id(pending) not in matched:
                logger.warning(
                    "Registered route is not served by the application; "
                    "was its router included?",
                    extra={"route_path": pending.path_format},
                )

        return specs


def _unconfigured_spec(route: APIRoute, methods: list[str]) -> RouteSpec:
    names = path_param_names(route.path_format)
    params = (
        {
            "type": "object",
            "properties": {name: {"type": "string"} for name in names},
            "required": names,
        }
        if names
        else None
    )
    oas = RouteOAS(
        operation_id=route.operation_id,
        tags=[str(tag) for tag in route.tags] or None,
        summary=route.summary,
        description=route.description or None,
        deprecated=route.deprecated,
    )
    return RouteSpec(
        methods=methods,
        url=route.path_format,
        path=route.path_format,
        schema=RouteSchema(params=params),
        oas=oas,
        endpoint=route.endpoint,
        configured=False,
    )
