"""
Autowired security examples.

Demonstrates:
- Declaring API key, HTTP Basic and HTTP Bearer schemes
- Root security inherited by every route
- Route-level overrides, OR of AND'ed requirements, and opting out
"""

from fastapi import FastAPI

from fastapi_oas3 import (
    ALLOW,
    FORBIDDEN,
    UNAUTHORIZED,
    AutowireSecurityOptions,
    BasicCredentials,
    OAS3Plugin,
    OAS3PluginOptions,
    RouteOAS,
)


# Mock credential checks (replace with real lookups)
async def check_api_key(key, request):
    return ALLOW if key == "service-key" else UNAUTHORIZED


def check_basic(credentials: BasicCredentials, request):
    if credentials.username != "admin":
        return UNAUTHORIZED
    return ALLOW if credentials.password == "secret" else FORBIDDEN


async def check_token(token, request):
    return ALLOW if token == "jwt-token" else UNAUTHORIZED


plugin = OAS3Plugin(
    OAS3PluginOptions(
        openapi_info={"title": "Security Examples", "version": "1.0.0"},
        autowired_security=AutowireSecurityOptions(
            security_schemes={
                "ApiKey": {
                    "type": "apiKey",
                    "in": "header",
                    "name": "X-API-Key",
                    "fn": check_api_key,
                },
                "Basic": {"type": "http", "scheme": "basic", "fn": check_basic},
                "Bearer": {
                    "type": "http",
                    "scheme": "bearer",
                    "bearerFormat": "JWT",
                    "fn": check_token,
                },
            },
            root_security=[{"Bearer": []}],
        ),
    )
)
app = FastAPI(title="Security Examples", lifespan=plugin.lifespan)
plugin.install(app)


@plugin.get(app, "/me")
async def me():
    """Inherits the root Bearer requirement."""
    return {"user": "jwt-user"}


@plugin.get(app, "/admin", oas=RouteOAS(security=[{"Basic": []}, {"ApiKey": [], "Bearer": []}]))
async def admin():
    """Basic auth, or an API key together with a bearer token."""
    return {"admin": True}


@plugin.get(app, "/health", oas=RouteOAS(security=[]))
async def health():
    """Public: explicitly opts out of root security."""
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)

    # Test with:
    # curl http://localhost:8000/health
    # curl -H "Authorization: Bearer jwt-token" http://localhost:8000/me
    # curl -u admin:secret http://localhost:8000/admin
