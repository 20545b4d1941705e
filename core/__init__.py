"""Core utilities for md-to-docs."""

from core.config import ServiceConfig, get_config, reset_config
from core.errors import (
    APIError,
    AuthenticationError,
    ConversionError,
    ConversionTimeoutError,
    LoweringRangeError,
    MarkdownDocsError,
    PackagingError,
    PermissionDeniedError,
    RateLimitError,
    ResourceNotFoundError,
    ValidationError,
    api_error_for_status,
    http_status_for,
)
from core.utils import (
    handle_http_errors,
    redact_authorization,
    validate_document_id,
    validate_markdown,
    validate_start_index,
)

__all__ = [
    "APIError",
    "api_error_for_status",
    "AuthenticationError",
    "ConversionError",
    "ConversionTimeoutError",
    "get_config",
    "handle_http_errors",
    "http_status_for",
    "LoweringRangeError",
    "MarkdownDocsError",
    "PackagingError",
    "PermissionDeniedError",
    "RateLimitError",
    "redact_authorization",
    "reset_config",
    "ResourceNotFoundError",
    "ServiceConfig",
    "validate_document_id",
    "validate_markdown",
    "validate_start_index",
    "ValidationError",
]
