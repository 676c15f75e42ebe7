"""Autowired security: declared OpenAPI security requirements enforced per request."""

from fastapi_oas3.security.dependency import (
    attach_security_to_route,
    default_failure_handler,
    security_dependency,
)
from fastapi_oas3.security.evaluator import build_security_evaluator
from fastapi_oas3.security.handlers import (
    ALLOW,
    FORBIDDEN,
    UNAUTHORIZED,
    BasicCredentials,
    HandlerResult,
)
from fastapi_oas3.security.plan import (
    SecurityPlan,
    compile_security_plan,
    normalize_security_requirement,
)
from fastapi_oas3.security.schemes import (
    ApiKeySecurityScheme,
    HttpBasicSecurityScheme,
    HttpBearerSecurityScheme,
    SecurityScheme,
    parse_security_scheme,
)

__all__ = [
    "ALLOW",
    "FORBIDDEN",
    "UNAUTHORIZED",
    "ApiKeySecurityScheme",
    "BasicCredentials",
    "HandlerResult",
    "HttpBasicSecurityScheme",
    "HttpBearerSecurityScheme",
    "SecurityPlan",
    "SecurityScheme",
    "attach_security_to_route",
    "build_security_evaluator",
    "compile_security_plan",
    "default_failure_handler",
    "normalize_security_requirement",
    "parse_security_scheme",
    "security_dependency",
]
