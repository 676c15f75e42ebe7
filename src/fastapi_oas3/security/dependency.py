"""security_dependency() and route attachment — FastAPI glue for the evaluator."""

from __future__ import annotations

import inspect
import json
import logging
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, NoReturn

from fastapi import HTTPException
from starlette.requests import Request

from fastapi_oas3._types import RequestEvaluator, SecurityRequirement
from fastapi_oas3.exceptions import (
    Forbidden,
    OAS3PluginError,
    OAS3RequestError,
    Unauthorized,
)
from fastapi_oas3.security.evaluator import build_security_evaluator
from fastapi_oas3.security.handlers import HandlerResult
from fastapi_oas3.security.plan import (
    compile_security_plan,
    normalize_security_requirement,
)

if TYPE_CHECKING:
    from fastapi_oas3.options import AutowireSecurityOptions

logger = logging.getLogger(__name__)

SecurityDependency = Callable[..., Awaitable[None]]


def default_failure_handler(result: HandlerResult, request: Request) -> NoReturn:
    if result.code == 401:
        raise Unauthorized()
    if result.code == 403:
        raise Forbidden()
    logger.error(
        "Out-of-domain value from security handlers.",
        extra={"handler_result": result, "path": request.url.path},
    )
    raise HTTPException(status_code=500, detail="Internal server error")


def security_dependency(
    evaluator: RequestEvaluator, options: AutowireSecurityOptions
) -> SecurityDependency:
    """Return a FastAPI dependency that runs ``evaluator`` before the endpoint.

    A custom ``on_request_failed`` handler rejects the request by raising. If
    it returns instead, the default handler still rejects it.
    """
    failure_handler = options.on_request_failed

    async def dependency(request: Request) -> None:
        result = await evaluator(request)
        if result.ok:
            return

        try:
            if failure_handler is not None:
                outcome = failure_handler(result, request)
                if inspect.isawaitable(outcome):
                    await outcome
            default_failure_handler(result, request)
        except OAS3RequestError as exc:
            raise HTTPException(status_code=exc.status_code, detail=exc.detail) from exc

    dependency._security_evaluator = evaluator  # type: ignore[attr-defined]
    return dependency


def attach_security_to_route(
    route_security: SecurityRequirement | None,
    options: AutowireSecurityOptions,
    cache: dict[str, SecurityDependency],
    *,
    methods: list[str],
    path: str,
) -> SecurityDependency | None:
    """Resolve a route's effective requirement and return its dependency.

    The route's own requirement wins over ``root_security``; an explicit empty
    requirement disables security for the route. Dependencies are shared
    between routes with structurally equal requirements.
    """
    if options.disabled:
        logger.debug("Autowire disabled; skipping.")
        return None

    if route_security is not None and not normalize_security_requirement(
        route_security
    ):
        logger.debug("Route security explicitly disabled; skipping.")
        return None

    security = route_security if route_security is not None else options.root_security
    if security is None:
        if not options.allow_empty_security_with_no_root:
            raise OAS3PluginError(
                f"Route {','.join(methods)} {path} has no security defined, and "
                "root_security is not defined. If this is intentional, set "
                "`allow_empty_security_with_no_root` to True."
            )
        logger.debug("No security defined at any level; skipping.")
        return None

    clauses = normalize_security_requirement(security)
    if not clauses:
        return None

    cache_key = json.dumps(clauses)
    dependency = cache.get(cache_key)
    if dependency is None:
        plan = compile_security_plan(clauses, options)
        dependency = security_dependency(build_security_evaluator(plan), options)
        cache[cache_key] = dependency

    logger.debug(
        "Adding security dependency to route.",
        extra={"route_path": path, "security_schemes": clauses},
    )
    return dependency
