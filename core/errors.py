"""
Custom error types for Markdown conversion and Google Docs submission.

Provides a single exception hierarchy so callers (the HTTP layer in particular)
can map failures to user-facing responses.
"""

# =============================================================================
# Base Exception Hierarchy
# =============================================================================


class MarkdownDocsError(Exception):
    """Base exception for all md-to-docs errors."""

    pass


# =============================================================================
# Conversion Errors
# =============================================================================


class ConversionError(MarkdownDocsError):
    """Raised when a Markdown document cannot be converted."""

    pass


class LoweringRangeError(ConversionError):
    """
    Raised when a computed style range falls outside its block's inserted range.

    This is an internal invariant violation; a correct lowerer never raises it.
    """

    def __init__(self, start: int, end: int, block_start: int, block_end: int):
        super().__init__(
            f"Range [{start}, {end}) lies outside its block range [{block_start}, {block_end})"
        )
        self.start = start
        self.end = end
        self.block_start = block_start
        self.block_end = block_end


class PackagingError(ConversionError):
    """Raised when the DOCX package cannot be serialised."""

    pass


class ConversionTimeoutError(ConversionError):
    """Raised when a conversion exceeds the configured timeout."""

    def __init__(self, timeout_seconds: float):
        super().__init__(f"Conversion did not finish within {timeout_seconds} seconds")
        self.timeout_seconds = timeout_seconds


# =============================================================================
# Authentication Errors
# =============================================================================


class AuthenticationError(MarkdownDocsError):
    """Raised when the caller did not supply a usable bearer token."""

    pass


# =============================================================================
# Validation Errors
# =============================================================================


class ValidationError(MarkdownDocsError):
    """Raised when input validation fails."""

    pass


# =============================================================================
# API Errors
# =============================================================================


class APIError(MarkdownDocsError):
    """Raised for general Google API errors."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class ResourceNotFoundError(APIError):
    """Raised when a requested document doesn't exist (404)."""

    pass


class PermissionDeniedError(APIError):
    """Raised when the token lacks permission for the document (401/403)."""

    pass


class RateLimitError(APIError):
    """Raised when API rate limits are exceeded (429)."""

    pass


def api_error_for_status(message: str, status_code: int | None) -> APIError:
    """Build the APIError subclass matching an HTTP status code."""
    if status_code == 404:
        return ResourceNotFoundError(message, status_code=status_code)
    if status_code in (401, 403):
        return PermissionDeniedError(message, status_code=status_code)
    if status_code == 429:
        return RateLimitError(message, status_code=status_code)
    return APIError(message, status_code=status_code)


def http_status_for(error: Exception) -> int:
    """Map an exception to the HTTP status the service should answer with."""
    if isinstance(error, ValidationError):
        return 400
    if isinstance(error, AuthenticationError):
        return 401
    if isinstance(error, ConversionTimeoutError):
        return 504
    if isinstance(error, APIError) and error.status_code:
        return error.status_code
    return 500
