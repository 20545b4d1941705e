"""
HTTP surface for md-to-docs.

A thin FastAPI app in front of the conversion core:

- ``GET /health``: liveness probe
- ``POST /``: convert Markdown and submit it to existing Google Docs
  (one request object or an array of them, processed concurrently)
- ``POST /operations``: return edit operations without submitting them
- ``POST /docx``: return a DOCX attachment (``/test`` is the legacy debug alias)
"""

import asyncio
import logging
import time
from datetime import datetime, timezone
from typing import Any

from fastapi import Body, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel, ConfigDict, Field

from conversion.api import convert_many, convert_to_docx_bytes, convert_to_edit_operations, run_conversion
from core.config import get_config
from core.errors import MarkdownDocsError, ValidationError, http_status_for
from core.utils import redact_authorization, validate_document_id, validate_markdown
from docxgen.lowering import DOCX_MIME_TYPE
from gdocs.lowering import DEFAULT_START_INDEX
from gdocs.operations import describe_operation, to_batch_requests
from gdocs.writing import access_token_from_header, build_docs_service, submit_edit_operations

logger = logging.getLogger(__name__)

_started_at = time.monotonic()

app = FastAPI(title="md-to-docs")

# Any origin is allowed; the request Origin is echoed back
app.add_middleware(
    CORSMiddleware,
    allow_origin_regex=".*",
    allow_methods=["*"],
    allow_headers=["*"],
)


class MarkdownRequest(BaseModel):
    """One conversion request for the Google Docs path."""

    model_config = ConfigDict(populate_by_name=True)

    output: str | None = Field(default=None, description="Markdown content to convert")
    document_id: str | None = Field(default=None, alias="documentId")
    start_index: int = Field(default=DEFAULT_START_INDEX, alias="startIndex")
    file_name: str | None = Field(default=None, alias="fileName")
    webhook_url: str | None = Field(default=None, alias="webhookUrl")
    execution_mode: str | None = Field(default=None, alias="executionMode")


class OperationsRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    output: str | list[str]
    start_index: int = Field(default=DEFAULT_START_INDEX, alias="startIndex")


class DocxRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    markdown: str | None = None
    file_name: str | None = Field(default=None, alias="fileName")


@app.exception_handler(MarkdownDocsError)
async def markdown_docs_error_handler(request: Request, exc: MarkdownDocsError) -> JSONResponse:
    status = http_status_for(exc)
    logger.error(f"{request.method} {request.url.path} failed ({status}): {exc}")
    return JSONResponse({"error": str(exc)}, status_code=status)


@app.get("/health")
async def health() -> dict[str, Any]:
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "uptime": time.monotonic() - _started_at,
    }


@app.post("/")
async def convert_and_submit(
    request: Request,
    body: MarkdownRequest | list[MarkdownRequest] = Body(...),
) -> JSONResponse:
    """
    Convert Markdown payloads and submit them to their Google Docs.

    A single payload answers with its own status code; an array answers 200
    with one result (or error object) per payload, in order.
    """
    authorization = request.headers.get("authorization")
    payloads = body if isinstance(body, list) else [body]
    logger.info(f"Received request: {len(payloads)} payload(s), authorization={redact_authorization(authorization)}")

    results = await asyncio.gather(
        *(_process_payload(index, payload, authorization) for index, payload in enumerate(payloads))
    )

    if isinstance(body, list):
        logger.info(f"Sending {len(results)} responses")
        return JSONResponse(results)
    result = results[0]
    return JSONResponse(result, status_code=result["status"])


async def _process_payload(index: int, payload: MarkdownRequest, authorization: str | None) -> dict[str, Any]:
    label = f"Request {index + 1}"
    try:
        markdown = validate_markdown(payload.output)
        access_token = access_token_from_header(authorization)
        document_id = validate_document_id(payload.document_id)

        logger.info(f"{label}: converting {len(markdown)} chars for document {document_id}")
        operations = await run_conversion(convert_to_edit_operations, markdown, payload.start_index)
        service = await asyncio.to_thread(build_docs_service, access_token)
        result = await submit_edit_operations(service, document_id, operations)
        logger.info(f"{label}: conversion successful, {result['requestsSubmitted']} requests submitted")

        return {
            **result,
            "status": 200,
            "fileName": payload.file_name,
            "webhookUrl": payload.webhook_url,
            "executionMode": payload.execution_mode,
        }
    except MarkdownDocsError as e:
        status = http_status_for(e)
        logger.error(f"{label}: failed ({status}): {e}")
        return {"error": str(e), "status": status}
    except Exception as e:
        logger.exception(f"{label}: unexpected failure")
        return {"error": "Failed to convert markdown to Google Doc", "details": str(e), "status": 500}


@app.post("/operations")
async def preview_operations(body: OperationsRequest) -> Any:
    """Return the edit operations and batchUpdate requests without submitting anything."""
    if isinstance(body.output, list):
        results = await convert_many(body.output, body.start_index)
        return [_operations_payload(result) for result in results]

    operations = await run_conversion(convert_to_edit_operations, body.output, body.start_index)
    return _operations_payload(operations)


def _operations_payload(result: Any) -> dict[str, Any]:
    if isinstance(result, Exception):
        return {"error": str(result), "status": http_status_for(result)}
    return {
        "operations": [describe_operation(operation) for operation in result],
        "requests": to_batch_requests(result),
        "status": 200,
    }


@app.post("/docx")
async def convert_to_docx(body: DocxRequest) -> Response:
    """Return the Markdown as a DOCX attachment."""
    markdown = validate_markdown(body.markdown, param_name="markdown")
    data = await run_conversion(convert_to_docx_bytes, markdown)
    filename = _docx_filename(body.file_name)
    logger.info(f"DOCX conversion complete: {filename}, {len(data)} bytes")
    return Response(
        content=data,
        media_type=DOCX_MIME_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@app.post("/test")
async def test_conversion(body: DocxRequest) -> Response:
    """Legacy debug route; disabled in production."""
    if get_config().is_production:
        return JSONResponse({"error": "Test endpoint not available in production"}, status_code=403)
    return await convert_to_docx(body)


def _docx_filename(file_name: str | None) -> str:
    name = (file_name or get_config().default_document_title).replace('"', "").strip()
    if not name:
        raise ValidationError("fileName cannot be empty")
    if not name.lower().endswith(".docx"):
        name += ".docx"
    return name
