"""Tests for submitting edit operations through the Docs API."""

from unittest.mock import MagicMock, patch

import pytest
from googleapiclient.errors import HttpError

from core.errors import (
    APIError,
    AuthenticationError,
    PermissionDeniedError,
    RateLimitError,
    ResourceNotFoundError,
    ValidationError,
)
from gdocs.lowering import lower
from gdocs.operations import to_batch_requests
from gdocs.writing import (
    access_token_from_header,
    build_docs_service,
    document_link,
    submit_edit_operations,
)
from mdparse.parser import parse


def http_error(status: int) -> HttpError:
    return HttpError(resp=MagicMock(status=status, reason="error"), content=b"{}")


class TestAccessToken:
    def test_extracts_bearer_token(self):
        assert access_token_from_header("Bearer abc.def") == "abc.def"

    @pytest.mark.parametrize("header", [None, "", "Basic abc", "Bearer ", "bearer abc"])
    def test_rejects_missing_or_invalid(self, header):
        with pytest.raises(AuthenticationError, match="Missing or invalid authorization header"):
            access_token_from_header(header)


class TestBuildDocsService:
    def test_uses_token_credentials(self):
        with patch("gdocs.writing.build") as mock_build:
            build_docs_service("token-123")
        args, kwargs = mock_build.call_args
        assert args == ("docs", "v1")
        assert kwargs["credentials"].token == "token-123"


class TestSubmitEditOperations:
    @pytest.mark.asyncio
    async def test_submits_one_batch_update(self, mock_docs_service, sample_markdown):
        operations = lower(parse(sample_markdown))
        result = await submit_edit_operations(mock_docs_service, "doc_123", operations)

        expected = to_batch_requests(operations)
        mock_docs_service.documents.return_value.batchUpdate.assert_called_once_with(
            documentId="doc_123", body={"requests": expected}
        )
        assert result == {
            "documentId": "doc_123",
            "url": document_link("doc_123"),
            "requestsSubmitted": len(expected),
            "repliesCount": len(expected),
        }

    @pytest.mark.asyncio
    async def test_nothing_to_submit_skips_api_call(self, mock_docs_service):
        result = await submit_edit_operations(mock_docs_service, "doc_123", [])
        mock_docs_service.documents.return_value.batchUpdate.assert_not_called()
        assert result["requestsSubmitted"] == 0

    @pytest.mark.asyncio
    async def test_invalid_document_id(self, mock_docs_service):
        with pytest.raises(ValidationError):
            await submit_edit_operations(mock_docs_service, "bad/id", [])

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "status,error_type",
        [(404, ResourceNotFoundError), (403, PermissionDeniedError), (429, RateLimitError), (500, APIError)],
    )
    async def test_http_errors_are_mapped(self, status, error_type):
        service = MagicMock()
        service.documents.return_value.batchUpdate.return_value.execute.side_effect = http_error(status)
        with pytest.raises(error_type) as exc_info:
            await submit_edit_operations(service, "doc_123", lower(parse("text")))
        assert exc_info.value.status_code == status

    @pytest.mark.asyncio
    async def test_unexpected_errors_become_api_errors(self):
        service = MagicMock()
        service.documents.return_value.batchUpdate.return_value.execute.side_effect = ConnectionError("reset")
        with pytest.raises(APIError, match="submit_edit_operations"):
            await submit_edit_operations(service, "doc_123", lower(parse("text")))
