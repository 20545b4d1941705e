"""
Google Docs Writing

Submits lowered edit operations to a Google Doc through the Docs API. The
conversion core never performs network I/O; this module is the API-client
collaborator that does.
"""

import asyncio
import logging
from typing import Any

from google.oauth2.credentials import Credentials
from googleapiclient.discovery import build

from core.errors import AuthenticationError
from core.utils import BEARER_PREFIX, handle_http_errors, validate_document_id
from gdocs.operations import EditOperation, to_batch_requests

logger = logging.getLogger(__name__)


def document_link(document_id: str) -> str:
    return f"https://docs.google.com/document/d/{document_id}/edit"


def access_token_from_header(authorization: str | None) -> str:
    """Extract the bearer token from an Authorization header."""
    if not authorization or not authorization.startswith(BEARER_PREFIX):
        raise AuthenticationError("Missing or invalid authorization header")
    token = authorization[len(BEARER_PREFIX) :].strip()
    if not token:
        raise AuthenticationError("Missing or invalid authorization header")
    return token


def build_docs_service(access_token: str) -> Any:
    """Build a Docs v1 client authorised with a caller-supplied access token."""
    credentials = Credentials(token=access_token)
    return build("docs", "v1", credentials=credentials, cache_discovery=False)


@handle_http_errors("submit_edit_operations")
async def submit_edit_operations(
    service: Any,
    document_id: str,
    operations: list[EditOperation],
) -> dict[str, Any]:
    """
    Submit edit operations to a document in a single batchUpdate call.

    Args:
        service: An authorised Google Docs API client.
        document_id: ID of the document to update.
        operations: Operations produced by the Google Docs lowerer.

    Returns:
        dict: ``documentId``, ``url``, ``requestsSubmitted`` and ``repliesCount``.
    """
    document_id = validate_document_id(document_id)
    requests = to_batch_requests(operations)
    logger.info(f"[submit_edit_operations] Doc={document_id}, operations={len(operations)}, requests={len(requests)}")

    replies_count = 0
    if requests:
        result = await asyncio.to_thread(
            service.documents().batchUpdate(documentId=document_id, body={"requests": requests}).execute
        )
        replies_count = len(result.get("replies", []))
    else:
        logger.info(f"[submit_edit_operations] Nothing to submit for document {document_id}")

    return {
        "documentId": document_id,
        "url": document_link(document_id),
        "requestsSubmitted": len(requests),
        "repliesCount": replies_count,
    }
