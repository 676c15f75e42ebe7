"""Integration tests for OAS3Plugin document assembly and publication."""

from __future__ import annotations

from typing import Any

import pytest
import yaml
from fastapi import APIRouter, FastAPI
from httpx import ASGITransport, AsyncClient

from fastapi_oas3 import (
    AfterOperationBuild,
    OAS3Plugin,
    OAS3PluginError,
    OAS3PluginOptions,
    OAS3SpecValidationError,
    PostParse,
    PublishOptions,
    RequestBodyInfo,
    RouteOAS,
    RouteSchema,
    schema_type,
)
from fastapi_oas3.constants import APPLICATION_JSON

INFO = {"title": "test", "version": "0.1.0"}

PingResponse = schema_type(
    "PingResponse", {"type": "object", "properties": {"pong": {"type": "boolean"}}}
)
QwopModel = schema_type(
    "QwopRequestBody", {"type": "object", "properties": {"qwop": {"type": "number"}}}
)


def _plugin(**kwargs: Any) -> OAS3Plugin:
    kwargs.setdefault("exit_on_invalid_document", True)
    return OAS3Plugin(OAS3PluginOptions(openapi_info=INFO, **kwargs))


async def _client_get(app: FastAPI, path: str) -> Any:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        return await client.get(path)


def _prefixed_ping_app(plugin: OAS3Plugin) -> FastAPI:
    app = FastAPI()
    plugin.install(app)
    router = APIRouter()

    @plugin.get(router, "/ping", schema=RouteSchema(response={200: PingResponse}))
    async def ping() -> dict[str, Any]:
        return {"pong": True}

    app.include_router(router, prefix="/api")
    return app


class TestDocument:
    async def test_prefixed_get_route(self) -> None:
        plugin = _plugin()
        _prefixed_ping_app(plugin)
        await plugin.ready()

        oas = plugin.document
        op = oas["paths"]["/api/ping"]["get"]
        assert oas["components"]["schemas"]["PingResponse"]
        assert op["operationId"] == "pingGet"
        assert op["responses"]["200"]["content"][APPLICATION_JSON]["schema"] == {
            "$ref": "#/components/schemas/PingResponse"
        }

    async def test_nested_response_type(self) -> None:
        inner = schema_type("TestResponseInner", {"type": "object", "properties": {"foo": {"type": "string"}}})
        outer = schema_type("TestResponse", {"type": "object", "properties": {"bar": inner}})
        plugin = _plugin()
        app = FastAPI()
        plugin.install(app)

        @plugin.get(app, "/nested", schema=RouteSchema(response={200: outer}))
        async def nested() -> dict[str, Any]:
            return {"bar": {"foo": "baz"}}

        await plugin.ready()

        schemas = plugin.document["components"]["schemas"]
        assert schemas["TestResponse"]["properties"]["bar"] == {
            "$ref": "#/components/schemas/TestResponseInner"
        }
        assert "TestResponseInner" in schemas
        # the declared schema objects are untouched
        assert outer["properties"]["bar"] is inner

        resp = await _client_get(app, "/nested")
        assert resp.status_code == 200
        assert resp.json() == {"bar": {"foo": "baz"}}

    async def test_request_body_with_custom_content_type(self) -> None:
        plugin = _plugin()
        app = FastAPI()
        plugin.install(app)

        @plugin.post(
            app,
            "/qwop",
            schema=RouteSchema(body=QwopModel),
            oas=RouteOAS(body=RequestBodyInfo(content_type="application/x-www-form-urlencoded")),
        )
        async def qwop() -> dict[str, Any]:
            return {}

        await plugin.ready()

        body = plugin.document["paths"]["/qwop"]["post"]["requestBody"]
        assert body["content"] == {
            "application/x-www-form-urlencoded": {
                "schema": {"$ref": "#/components/schemas/QwopRequestBody"}
            }
        }

    async def test_path_regex_served_and_documented(self) -> None:
        plugin = _plugin()
        app = FastAPI()
        plugin.install(app)

        @plugin.get(
            app,
            "/pets/:pet_id(\\d+)",
            schema=RouteSchema(
                params={
                    "type": "object",
                    "properties": {"pet_id": {"type": "string"}},
                    "required": ["pet_id"],
                }
            ),
        )
        async def get_pet(pet_id: str) -> dict[str, Any]:
            return {"id": pet_id}

        await plugin.ready()

        [param] = plugin.document["paths"]["/pets/{pet_id}"]["get"]["parameters"]
        assert param["in"] == "path"
        assert param["schema"] == {"type": "string", "pattern": "\\d+"}

        resp = await _client_get(app, "/pets/12")
        assert resp.json() == {"id": "12"}

    async def test_post_operation_build_hook_fires_per_route(self) -> None:
        seen: list[str] = []
        plugin = _plugin(
            hooks=[AfterOperationBuild(lambda route, op: seen.append(op["operationId"]))]
        )
        app = FastAPI()
        plugin.install(app)

        @plugin.get(app, "/a")
        async def a() -> None: ...

        @plugin.put(app, "/b")
        async def b() -> None: ...

        await plugin.ready()
        assert seen == ["aGet", "bPut"]

    async def test_unconfigured_routes(self) -> None:
        plugin = _plugin(include_unconfigured_operations=True)
        app = FastAPI()
        plugin.install(app)

        @app.get("/plain/{slug}", summary="Plain route")
        async def plain(slug: str) -> dict[str, Any]:
            return {}

        await plugin.ready()

        op = plugin.document["paths"]["/plain/{slug}"]["get"]
        assert op["summary"] == "Plain route"
        assert op["parameters"][0]["name"] == "slug"
        assert "/openapi.yaml" not in plugin.document["paths"]

    async def test_invalid_document_fails_ready(self) -> None:
        def corrupt(builder: Any) -> None:
            builder.root_doc["openapi"] = 42

        plugin = _plugin(hooks=[PostParse(corrupt)])
        app = FastAPI()
        plugin.install(app)

        with pytest.raises(OAS3SpecValidationError):
            await plugin.ready()
        with pytest.raises(OAS3PluginError):
            plugin.document

    async def test_document_before_ready(self) -> None:
        with pytest.raises(OAS3PluginError, match="not ready"):
            _plugin().document

    async def test_ready_without_app(self) -> None:
        with pytest.raises(OAS3PluginError):
            await _plugin().ready()

    async def test_lifespan_publishes(self) -> None:
        plugin = _plugin()
        app = _prefixed_ping_app(plugin)
        async with plugin.lifespan(app):
            assert "/api/ping" in plugin.document["paths"]


class TestPublication:
    async def test_json_and_yaml(self) -> None:
        plugin = _plugin()
        app = _prefixed_ping_app(plugin)
        await plugin.ready()

        json_resp = await _client_get(app, "/openapi.json")
        assert json_resp.status_code == 200
        assert json_resp.json() == plugin.document

        yaml_resp = await _client_get(app, "/openapi.yaml")
        assert yaml_resp.status_code == 200
        assert yaml_resp.headers["content-type"].startswith("application/x-yaml")
        assert yaml.safe_load(yaml_resp.text) == plugin.document

    async def test_custom_yaml_path(self) -> None:
        plugin = _plugin(publish=PublishOptions(yaml="spec/openapi.yml"))
        app = _prefixed_ping_app(plugin)
        await plugin.ready()
        assert (await _client_get(app, "/spec/openapi.yml")).status_code == 200
        assert (await _client_get(app, "/openapi.yaml")).status_code == 404

    async def test_yaml_disabled(self) -> None:
        plugin = _plugin(publish=PublishOptions(yaml=False))
        app = _prefixed_ping_app(plugin)
        await plugin.ready()
        assert (await _client_get(app, "/openapi.yaml")).status_code == 404

    async def test_docs_ui_served(self) -> None:
        plugin = _plugin()
        app = _prefixed_ping_app(plugin)
        await plugin.ready()
        resp = await _client_get(app, "/docs")
        assert resp.status_code == 200
        assert "/openapi.json" in resp.text
