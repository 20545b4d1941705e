"""Shared pytest fixtures for md-to-docs tests."""

from unittest.mock import MagicMock

import pytest

from core.config import reset_config


@pytest.fixture
def mock_docs_service():
    """Create a mock Google Docs service whose batchUpdate echoes one reply per request."""
    service = MagicMock()

    def _batch_update(documentId, body):
        request = MagicMock()
        request.execute.return_value = {"documentId": documentId, "replies": [{} for _ in body["requests"]]}
        return request

    service.documents.return_value.batchUpdate.side_effect = _batch_update
    return service


@pytest.fixture
def sample_markdown():
    return "# Title\n\nSome **bold** and *italic* text.\n\n- one\n- two\n  - nested\n"


@pytest.fixture
def env_override(monkeypatch):
    """Helper to override environment variables; the cached config is re-read afterwards."""

    def _override(**kwargs):
        for key, value in kwargs.items():
            if value is None:
                monkeypatch.delenv(key, raising=False)
            else:
                monkeypatch.setenv(key, value)
        reset_config()

    yield _override
    reset_config()
