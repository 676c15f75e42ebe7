"""FastAPI OAS3 - OpenAPI 3.1 documents and autowired security for FastAPI routes."""

from fastapi_oas3.context import SecurityHandlerContext
from fastapi_oas3.document import DocumentBuilder, build_document
from fastapi_oas3.exceptions import (
    BadRequest,
    Forbidden,
    OAS3PluginError,
    OAS3PluginOptionsError,
    OAS3RequestError,
    OAS3SpecValidationError,
    SchemaCollisionError,
    SchemaCycleError,
    SchemaGraphError,
    Unauthorized,
)
from fastapi_oas3.hooks import AfterOperationBuild, DocumentHook, PostParse, PreParse
from fastapi_oas3.operation import default_operation_id
from fastapi_oas3.options import (
    AutowireSecurityOptions,
    OAS3PluginOptions,
    PathParamExtras,
    PublishOptions,
    QueryParamExtras,
    RequestBodyInfo,
    ResponseInfo,
    RouteOAS,
    RouteSchema,
)
from fastapi_oas3.path_converter import PathConversion, convert_path
from fastapi_oas3.plugin import OAS3Plugin
from fastapi_oas3.routes import RouteRegistry, RouteSpec
from fastapi_oas3.schemas import SchemaTag, TaggedSchema, is_tagged_schema, schema_type
from fastapi_oas3.security import (
    ALLOW,
    FORBIDDEN,
    UNAUTHORIZED,
    ApiKeySecurityScheme,
    BasicCredentials,
    HandlerResult,
    HttpBasicSecurityScheme,
    HttpBearerSecurityScheme,
    SecurityPlan,
    build_security_evaluator,
    compile_security_plan,
)
from fastapi_oas3.spec_transforms import canonicalize_annotated_schemas
from fastapi_oas3.trace import SecurityTrace, TraceEntry
from fastapi_oas3.validation import ValidationResult, validate_document

__all__ = [
    "ALLOW",
    "FORBIDDEN",
    "UNAUTHORIZED",
    "AfterOperationBuild",
    "ApiKeySecurityScheme",
    "AutowireSecurityOptions",
    "BadRequest",
    "BasicCredentials",
    "DocumentBuilder",
    "DocumentHook",
    "Forbidden",
    "HandlerResult",
    "HttpBasicSecurityScheme",
    "HttpBearerSecurityScheme",
    "OAS3Plugin",
    "OAS3PluginError",
    "OAS3PluginOptions",
    "OAS3PluginOptionsError",
    "OAS3RequestError",
    "OAS3SpecValidationError",
    "PathConversion",
    "PathParamExtras",
    "PostParse",
    "PreParse",
    "PublishOptions",
    "QueryParamExtras",
    "RequestBodyInfo",
    "ResponseInfo",
    "RouteOAS",
    "RouteRegistry",
    "RouteSchema",
    "RouteSpec",
    "SchemaCollisionError",
    "SchemaCycleError",
    "SchemaGraphError",
    "SchemaTag",
    "SecurityHandlerContext",
    "SecurityPlan",
    "SecurityTrace",
    "TaggedSchema",
    "TraceEntry",
    "Unauthorized",
    "ValidationResult",
    "build_document",
    "build_security_evaluator",
    "canonicalize_annotated_schemas",
    "compile_security_plan",
    "convert_path",
    "default_operation_id",
    "is_tagged_schema",
    "schema_type",
    "validate_document",
]
