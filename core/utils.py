import functools
import logging
import re

from googleapiclient.errors import HttpError

from core.errors import APIError, MarkdownDocsError, ValidationError, api_error_for_status

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "


def validate_document_id(document_id: str | None, param_name: str = "documentId") -> str:
    """Validate a Google Docs document ID."""
    if not document_id:
        raise ValidationError(f"Missing required field: {param_name}")

    document_id = document_id.strip()
    if not document_id:
        raise ValidationError(f"{param_name} cannot be empty")

    if not re.match(r"^[\w\-]+$", document_id):
        raise ValidationError(f"{param_name} contains invalid characters")

    return document_id


def validate_start_index(start_index: int, param_name: str = "startIndex") -> int:
    """Validate an insertion index (non-negative integer)."""
    if isinstance(start_index, bool) or not isinstance(start_index, int) or start_index < 0:
        raise ValidationError(f"{param_name} must be a non-negative integer")
    return start_index


def validate_markdown(markdown: str | None, param_name: str = "output") -> str:
    """Validate that Markdown content was supplied."""
    if markdown is None or not isinstance(markdown, str) or not markdown:
        raise ValidationError(f"Missing required field: {param_name}")
    return markdown


def redact_authorization(header: str | None) -> str | None:
    """Shorten an Authorization header for logging."""
    if not header:
        return None
    return f"{header[:20]}..."


def handle_http_errors(operation_name: str):
    """
    A decorator to handle Google API HttpErrors in a standardized way.

    It wraps an async function, catches HttpError, logs a detailed error
    message, and raises the matching APIError subclass. No retries are made;
    retry policy belongs to whoever calls the service.

    Args:
        operation_name (str): The name of the wrapped operation (e.g. 'submit_edit_operations').
    """

    def decorator(func):
        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            try:
                return await func(*args, **kwargs)
            except HttpError as error:
                status = getattr(error.resp, "status", None)
                status_code = int(status) if status is not None else None
                if status_code in (401, 403):
                    message = (
                        f"API error in {operation_name}: {error}. "
                        "The access token may be expired or lack access to the document."
                    )
                else:
                    message = f"API error in {operation_name}: {error}"
                logger.error(f"API error in {operation_name}: {error}", exc_info=True)
                raise api_error_for_status(message, status_code) from error
            except MarkdownDocsError:
                raise
            except Exception as e:
                message = f"An unexpected error occurred in {operation_name}: {e}"
                logger.exception(message)
                raise APIError(message) from e

        return wrapper

    return decorator
