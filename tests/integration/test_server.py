"""
Integration tests for the HTTP surface.

The Docs API is never contacted: `build_docs_service` is patched to return the
mock service fixture, so POST / runs the real conversion and request
serialisation end to end.
"""

import io
from unittest.mock import patch

import pytest
from docx import Document as open_docx
from fastapi.testclient import TestClient

from core.server import app
from docxgen.lowering import DOCX_MIME_TYPE

AUTH = {"Authorization": "Bearer test-token"}


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def docs_service(mock_docs_service):
    with patch("core.server.build_docs_service", return_value=mock_docs_service) as mock_build:
        yield mock_docs_service, mock_build


class TestHealth:
    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["uptime"] >= 0
        assert "timestamp" in body


class TestCors:
    def test_preflight_reflects_origin(self, client):
        response = client.options(
            "/",
            headers={"Origin": "https://n8n.example.com", "Access-Control-Request-Method": "POST"},
        )
        assert response.status_code == 200
        assert response.headers["access-control-allow-origin"] == "https://n8n.example.com"

    def test_simple_request_carries_allow_origin(self, client):
        response = client.post("/operations", json={"output": "x"}, headers={"Origin": "http://localhost:5678"})
        assert response.status_code == 200
        assert response.headers["access-control-allow-origin"] == "http://localhost:5678"


class TestConvertAndSubmit:
    def test_single_request(self, client, docs_service):
        service, mock_build = docs_service
        response = client.post(
            "/",
            json={"output": "# Title\n\n- a\n- b", "documentId": "doc_1", "fileName": "notes"},
            headers=AUTH,
        )
        assert response.status_code == 200
        body = response.json()
        assert body["documentId"] == "doc_1"
        assert body["url"] == "https://docs.google.com/document/d/doc_1/edit"
        assert body["fileName"] == "notes"
        assert body["requestsSubmitted"] > 0
        mock_build.assert_called_once_with("test-token")

        requests = service.documents.return_value.batchUpdate.call_args.kwargs["body"]["requests"]
        assert requests[0] == {"insertText": {"location": {"index": 1}, "text": "Title\n"}}

    def test_custom_start_index(self, client, docs_service):
        service, _ = docs_service
        client.post("/", json={"output": "x", "documentId": "doc_1", "startIndex": 25}, headers=AUTH)
        requests = service.documents.return_value.batchUpdate.call_args.kwargs["body"]["requests"]
        assert requests[0]["insertText"]["location"]["index"] == 25

    def test_missing_markdown(self, client, docs_service):
        response = client.post("/", json={"documentId": "doc_1"}, headers=AUTH)
        assert response.status_code == 400
        assert response.json()["error"] == "Missing required field: output"

    def test_missing_document_id(self, client, docs_service):
        response = client.post("/", json={"output": "x"}, headers=AUTH)
        assert response.status_code == 400
        assert response.json()["error"] == "Missing required field: documentId"

    def test_missing_authorization(self, client, docs_service):
        response = client.post("/", json={"output": "x", "documentId": "doc_1"})
        assert response.status_code == 401
        assert response.json()["error"] == "Missing or invalid authorization header"

    def test_negative_start_index(self, client, docs_service):
        response = client.post("/", json={"output": "x", "documentId": "doc_1", "startIndex": -1}, headers=AUTH)
        assert response.status_code == 400

    def test_batch_reports_each_entry(self, client, docs_service):
        response = client.post(
            "/",
            json=[
                {"output": "one", "documentId": "doc_1"},
                {"documentId": "doc_2"},
                {"output": "three", "documentId": "doc_3", "executionMode": "test"},
            ],
            headers=AUTH,
        )
        assert response.status_code == 200
        first, second, third = response.json()
        assert first["status"] == 200
        assert second == {"error": "Missing required field: output", "status": 400}
        assert third["documentId"] == "doc_3"
        assert third["executionMode"] == "test"

    def test_unexpected_failure_is_500(self, client, docs_service):
        with patch("core.server.submit_edit_operations", side_effect=RuntimeError("boom")):
            response = client.post("/", json={"output": "x", "documentId": "doc_1"}, headers=AUTH)
        assert response.status_code == 500
        assert response.json()["error"] == "Failed to convert markdown to Google Doc"


class TestOperations:
    def test_returns_operations_and_requests(self, client):
        response = client.post("/operations", json={"output": "Some **bold** text"})
        assert response.status_code == 200
        body = response.json()
        assert [op["type"] for op in body["operations"]] == ["InsertText", "SetParagraphStyle", "SetTextStyle"]
        assert body["requests"][2]["updateTextStyle"]["textStyle"] == {"bold": True}

    def test_batch(self, client):
        response = client.post("/operations", json={"output": ["a", "b"], "startIndex": 5})
        assert [entry["requests"][0]["insertText"]["location"]["index"] for entry in response.json()] == [5, 5]

    def test_invalid_start_index(self, client):
        response = client.post("/operations", json={"output": "a", "startIndex": -3})
        assert response.status_code == 400


class TestDocx:
    def test_returns_attachment(self, client):
        response = client.post("/docx", json={"markdown": "# Hello", "fileName": "report"})
        assert response.status_code == 200
        assert response.headers["content-type"] == DOCX_MIME_TYPE
        assert response.headers["content-disposition"] == 'attachment; filename="report.docx"'
        docx_document = open_docx(io.BytesIO(response.content))
        assert docx_document.paragraphs[0].text == "Hello"

    def test_default_filename(self, client, env_override):
        env_override(DEFAULT_DOCUMENT_TITLE="Untitled")
        response = client.post("/docx", json={"markdown": "x"})
        assert response.headers["content-disposition"] == 'attachment; filename="Untitled.docx"'

    def test_missing_markdown(self, client):
        response = client.post("/docx", json={})
        assert response.status_code == 400

    def test_test_route_outside_production(self, client, env_override):
        env_override(MD_TO_DOCS_ENV="development")
        response = client.post("/test", json={"markdown": "x"})
        assert response.status_code == 200
        assert response.headers["content-type"] == DOCX_MIME_TYPE

    def test_test_route_forbidden_in_production(self, client, env_override):
        env_override(MD_TO_DOCS_ENV="production")
        response = client.post("/test", json={"markdown": "x"})
        assert response.status_code == 403
