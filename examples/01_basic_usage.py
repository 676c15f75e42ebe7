"""
Basic usage example of fastapi-oas3.

Demonstrates:
- Registering documented routes with OAS3Plugin
- Sharing named schemas with schema_type
- Path parameters with regex constraints
- Serving the document as JSON, YAML and the docs UI
"""

from fastapi import APIRouter, FastAPI

from fastapi_oas3 import (
    OAS3Plugin,
    OAS3PluginOptions,
    RouteOAS,
    RouteSchema,
    schema_type,
)

Pet = schema_type(
    "Pet",
    {
        "type": "object",
        "properties": {
            "id": {"type": "integer"},
            "name": {"type": "string"},
        },
        "required": ["id", "name"],
    },
)

PETS = {1: {"id": 1, "name": "Rex"}}

plugin = OAS3Plugin(
    OAS3PluginOptions(
        openapi_info={"title": "Pet Store", "version": "1.0.0"},
        exit_on_invalid_document=True,
    )
)
app = FastAPI(title="Pet Store", lifespan=plugin.lifespan)
plugin.install(app)

router = APIRouter()


@plugin.get(
    router,
    "/pets",
    schema=RouteSchema(response={200: {"type": "array", "items": Pet}}),
    oas=RouteOAS(tags=["pets"], summary="List pets"),
)
async def list_pets():
    return list(PETS.values())


@plugin.get(
    router,
    "/pets/:pet_id(\\d+)",
    schema=RouteSchema(
        params={
            "type": "object",
            "properties": {"pet_id": {"type": "string"}},
            "required": ["pet_id"],
        },
        response={200: Pet},
    ),
    oas=RouteOAS(tags=["pets"]),
)
async def get_pet(pet_id: int):
    return PETS[pet_id]


app.include_router(router, prefix="/api")


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)

    # Test with:
    # curl http://localhost:8000/api/pets
    # curl http://localhost:8000/openapi.yaml
    # open http://localhost:8000/docs
