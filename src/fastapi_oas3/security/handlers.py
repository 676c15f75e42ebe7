"""Per-scheme request evaluators for API key, HTTP Basic and HTTP Bearer.

Each builder wraps a scheme's ``fn`` into an async ``handler(request)`` that
extracts the credential, calls ``fn`` and always returns a
:class:`HandlerResult`. Nothing escapes a handler: errors raised while
extracting or by ``fn`` itself become 401.
"""

from __future__ import annotations

import base64
import binascii
import inspect
import logging
from dataclasses import dataclass
from typing import Any

from starlette.requests import Request

from fastapi_oas3._types import WrappedHandler
from fastapi_oas3.context import SecurityHandlerContext
from fastapi_oas3.security.schemes import (
    ApiKeySecurityScheme,
    HttpBasicSecurityScheme,
    HttpBearerSecurityScheme,
    SecurityScheme,
)

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "


@dataclass(frozen=True)
class HandlerResult:
    """Outcome of one scheme evaluation: ``ok``, or a 401/403 ``code``."""

    ok: bool
    code: int | None = None


ALLOW = HandlerResult(ok=True)
UNAUTHORIZED = HandlerResult(ok=False, code=401)
FORBIDDEN = HandlerResult(ok=False, code=403)


@dataclass(frozen=True)
class BasicCredentials:
    username: str
    password: str


def decode_basic_auth_header(header: str) -> BasicCredentials | None:
    """Decode ``Basic <base64(user:password)>``; ``None`` if malformed."""
    scheme, _, encoded = header.partition(" ")
    if scheme.lower() != "basic" or not encoded:
        return None
    try:
        decoded = base64.b64decode(encoded.strip(), validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError):
        return None

    username, sep, password = decoded.partition(":")
    if not sep or not username or not password:
        return None
    return BasicCredentials(username=username, password=password)


async def read_parsed_body(request: Request) -> Any:
    """JSON bodies are decoded; anything else is returned as raw bytes."""
    body = await request.body()
    if not body:
        return None
    if "json" in request.headers.get("content-type", ""):
        return await request.json()
    return body


async def _invoke(
    scheme: SecurityScheme, credential: Any, request: Request
) -> HandlerResult:
    if scheme.requires_parsed_body:
        context = SecurityHandlerContext(body=await read_parsed_body(request))
        result = scheme.fn(credential, request, context)
    else:
        result = scheme.fn(credential, request)

    if inspect.isawaitable(result):
        result = await result
    if not isinstance(result, HandlerResult):
        raise TypeError(
            f"Security scheme function returned {result!r}, expected HandlerResult."
        )
    return result


async def _no_credential(scheme: SecurityScheme, request: Request) -> HandlerResult:
    if scheme.pass_null_if_none_provided:
        return await _invoke(scheme, None, request)
    return UNAUTHORIZED


def _extract_api_key(scheme: ApiKeySecurityScheme, request: Request) -> str | None:
    if scheme.location == "header":
        return request.headers.get(scheme.name)
    if scheme.location == "cookie":
        return request.cookies.get(scheme.name.lower())
    if scheme.location == "query":
        return request.query_params.get(scheme.name)
    raise ValueError(f"Unsupported API key location: {scheme.location}")


def build_api_key_handler(scheme: ApiKeySecurityScheme) -> WrappedHandler:
    async def handler(request: Request) -> HandlerResult:
        try:
            value = _extract_api_key(scheme, request)
            if value is None:
                return await _no_credential(scheme, request)
            return await _invoke(scheme, value, request)
        except Exception:
            logger.warning(
                "Uncaught error in API key handler.",
                exc_info=True,
                extra={"security_scheme_key": scheme.name},
            )
            return UNAUTHORIZED

    return handler


def build_http_basic_handler(scheme: HttpBasicSecurityScheme) -> WrappedHandler:
    async def handler(request: Request) -> HandlerResult:
        try:
            header = request.headers.get("authorization")
            if not header:
                return await _no_credential(scheme, request)

            credentials = decode_basic_auth_header(header)
            if credentials is None:
                # a malformed header is never "no credential supplied"
                return UNAUTHORIZED
            return await _invoke(scheme, credentials, request)
        except Exception:
            logger.warning("Uncaught error in HTTP basic auth handler.", exc_info=True)
            return UNAUTHORIZED

    return handler


def build_http_bearer_handler(scheme: HttpBearerSecurityScheme) -> WrappedHandler:
    async def handler(request: Request) -> HandlerResult:
        try:
            header = request.headers.get("authorization")
            if not header or not header.startswith(BEARER_PREFIX):
                return await _no_credential(scheme, request)
            return await _invoke(scheme, header[len(BEARER_PREFIX) :], request)
        except Exception:
            logger.warning("Uncaught error in HTTP bearer handler.", exc_info=True)
            return UNAUTHORIZED

    return handler
