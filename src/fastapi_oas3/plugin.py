"""OAS3Plugin — FastAPI integration for documented, autowired-security routes."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Callable, Sequence
from contextlib import asynccontextmanager
from typing import Any, TypeVar

import yaml
from fastapi import APIRouter, Depends, FastAPI
from fastapi.responses import Response

from fastapi_oas3.document import build_document
from fastapi_oas3.exceptions import OAS3PluginError
from fastapi_oas3.options import OAS3PluginOptions, RouteOAS, RouteSchema
from fastapi_oas3.path_converter import convert_path
from fastapi_oas3.routes import RouteRegistry
from fastapi_oas3.security.dependency import (
    SecurityDependency,
    attach_security_to_route,
)

logger = logging.getLogger(__name__)

EndpointT = TypeVar("EndpointT", bound=Callable[..., Any])

YAML_MEDIA_TYPE = "application/x-yaml"


class _NoAliasDumper(yaml.SafeDumper):
    def ignore_aliases(self, data: Any) -> bool:
        return True


class OAS3Plugin:
    """Documents routes as OpenAPI 3.1 and enforces their security.

    Usage::

        plugin = OAS3Plugin(OAS3PluginOptions(openapi_info={...}))
        app = FastAPI(lifespan=plugin.lifespan)
        plugin.install(app)

        @plugin.get(app, "/pets/:id", schema=RouteSchema(...))
        async def get_pet(id: str): ...
    """

    def __init__(self, options: OAS3PluginOptions) -> None:
        self.options = options
        self.registry = RouteRegistry()
        self._dependency_cache: dict[str, SecurityDependency] = {}
        self._document: dict[str, Any] | None = None
        self._yaml: str | None = None
        self._app: FastAPI | None = None
        logger.debug("Initializing OAS3 plugin.")

    # -- registration -----------------------------------------------------

    def route(
        self,
        router: APIRouter | FastAPI,
        path: str,
        *,
        methods: Sequence[str],
        schema: RouteSchema | None = None,
        oas: RouteOAS | None = None,
        **kwargs: Any,
    ) -> Callable[[EndpointT], EndpointT]:
        """Register the decorated endpoint on ``router`` and document it.

        ``path`` may use ``:name`` or ``:name(regex)`` segments. Remaining
        keyword arguments go to ``add_api_route``.
        """
        conversion = convert_path(path)
        dependencies = list(kwargs.pop("dependencies", None) or [])

        security_options = self.options.autowired_security
        if security_options is not None:
            dependency = attach_security_to_route(
                oas.security if oas else None,
                security_options,
                self._dependency_cache,
                methods=list(methods),
                path=conversion.url,
            )
            if dependency is not None:
                dependencies.insert(0, Depends(dependency))

        def decorator(endpoint: EndpointT) -> EndpointT:
            router.add_api_route(
                conversion.url,
                endpoint,
                methods=list(methods),
                dependencies=dependencies,
                **kwargs,
            )
            self.registry.add(
                router.routes[-1],  # type: ignore[arg-type]
                schema=schema,
                oas=oas,
                param_patterns=conversion.param_patterns,
            )
            return endpoint

        return decorator

    def get(self, router: APIRouter | FastAPI, path: str, **kwargs: Any) -> Callable[[EndpointT], EndpointT]:
        return self.route(router, path, methods=["GET"], **kwargs)

    def post(self, router: APIRouter | FastAPI, path: str, **kwargs: Any) -> Callable[[EndpointT], EndpointT]:
        return self.route(router, path, methods=["POST"], **kwargs)

    def put(self, router: APIRouter | FastAPI, path: str, **kwargs: Any) -> Callable[[EndpointT], EndpointT]:
        return self.route(router, path, methods=["PUT"], **kwargs)

    def patch(self, router: APIRouter | FastAPI, path: str, **kwargs: Any) -> Callable[[EndpointT], EndpointT]:
        return self.route(router, path, methods=["PATCH"], **kwargs)

    def delete(self, router: APIRouter | FastAPI, path: str, **kwargs: Any) -> Callable[[EndpointT], EndpointT]:
        return self.route(router, path, methods=["DELETE"], **kwargs)

    # -- publication ------------------------------------------------------

    @property
    def document(self) -> dict[str, Any]:
        if self._document is None:
            raise OAS3PluginError(
                "OpenAPI document is not ready; await OAS3Plugin.ready() first."
            )
        return self._document

    def install(self, app: FastAPI) -> None:
        """Serve the published document from ``app``.

        FastAPI's ``openapi_url`` and ``docs_url`` serve it as JSON and HTML;
        a YAML rendition is added according to ``options.publish``.
        """
        self._app = app
        app.openapi = lambda: self.document  # type: ignore[method-assign]

        publish_yaml = self.options.publish.yaml
        if publish_yaml:
            name = publish_yaml if isinstance(publish_yaml, str) else "openapi.yaml"
            app.add_api_route(
                "/" + name.lstrip("/"),
                self._yaml_endpoint,
                methods=["GET"],
                include_in_schema=False,
            )

    async def _yaml_endpoint(self) -> Response:
        if self._yaml is None:
            self._yaml = yaml.dump(
                self.document, Dumper=_NoAliasDumper, sort_keys=False
            )
        return Response(
            content=self._yaml,
            media_type=YAML_MEDIA_TYPE,
            headers={"Content-Disposition": "inline"},
        )

    async def ready(self, app: FastAPI | None = None) -> dict[str, Any]:
        """Build, validate and publish the document for ``app``.

        Call after every router has been included. Nothing is published if
        assembly fails.
        """
        app = app or self._app
        if app is None:
            raise OAS3PluginError("OAS3Plugin.ready() needs an app; call install() first.")

        try:
            routes = self.registry.resolve(
                app.routes,
                include_unconfigured=self.options.include_unconfigured_operations,
            )
            doc = await build_document(self.options, routes)
        except Exception:
            logger.error("Error during plugin instantiation.", exc_info=True)
            raise

        logger.debug("Assigning completed OAS document.")
        self._document = doc
        self._yaml = None
        return doc

    @asynccontextmanager
    async def lifespan(self, app: FastAPI) -> AsyncIterator[None]:
        await self.ready(app)
        yield
