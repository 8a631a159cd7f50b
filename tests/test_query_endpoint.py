"""Integration tests for the HTTP API."""
import pytest
from fastapi.testclient import TestClient
from unittest.mock import patch
import sys
import os

# Add backend to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'backend'))

JAVA_TEXT = (
    "Java is an object-oriented, platform-independent programming language. "
    "It is defined as a general-purpose language."
)


@pytest.fixture
def client():
    """Create a test client backed by a fresh QueryEngine."""
    # Import after path is set
    import main
    from services.query_engine import QueryEngine

    # The client is not used as a context manager, so startup does not run
    engine = QueryEngine()
    main.query_engine = engine
    yield TestClient(main.app)
    engine.shutdown()


@pytest.fixture
def java_client(client):
    """Client whose engine already holds the Java document."""
    response = client.post("/documents", json={
        "document_id": "java",
        "display_name": "java.txt",
        "text": JAVA_TEXT,
        "declared_kind": "text"
    })
    assert response.status_code == 201
    return client


def test_root(client):
    response = client.get("/")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_health_reports_corpus_size(java_client):
    data = java_client.get("/health").json()
    assert data["status"] == "healthy"
    assert data["documents"] == 1
    assert data["chunks"] == 1


def test_add_document(client):
    response = client.post("/documents", json={
        "document_id": "notes",
        "display_name": "notes.txt",
        "text": "First paragraph.\n\nSecond paragraph.",
        "declared_kind": "text"
    })

    assert response.status_code == 201
    data = response.json()
    assert data["chunks_added"] == 2
    assert data["total_chunks"] == 2


def test_add_document_default_kind_collapses_paragraphs(client):
    response = client.post("/documents", json={
        "document_id": "notes",
        "display_name": "notes",
        "text": "First paragraph.\n\nSecond paragraph."
    })
    assert response.json()["chunks_added"] == 1


def test_add_document_requires_id(client):
    response = client.post("/documents", json={
        "document_id": "",
        "display_name": "a.txt",
        "text": "text"
    })
    # Pydantic validation returns 422 for validation errors
    assert response.status_code == 422


def test_list_documents(java_client):
    data = java_client.get("/documents").json()
    assert data == {"documents": ["java.txt"], "chunk_count": 1}


def test_remove_document(java_client):
    response = java_client.delete("/documents/java")
    assert response.status_code == 204
    assert java_client.get("/documents").json()["documents"] == []


def test_remove_unknown_document(client):
    response = client.delete("/documents/missing")
    assert response.status_code == 404


def test_clear_documents(java_client):
    response = java_client.delete("/documents")
    assert response.status_code == 204
    assert java_client.get("/documents").json()["chunk_count"] == 0


def test_query_endpoint_basic(java_client):
    """Test basic query endpoint functionality."""
    response = java_client.post("/query", json={"question": "What is Java?"})

    assert response.status_code == 200
    data = response.json()
    assert data["answer"].startswith("**Definition:**")
    assert data["primary_source"] == "java.txt"
    assert data["supplementary_source_count"] == 0
    assert data["confidence"] > 0

    metadata = data["metadata"]
    assert metadata["classification"] == "definition"
    assert metadata["rule_triggered"] == "leading_word:what"
    assert metadata["key_terms"] == ["java"]
    assert metadata["error_code"] is None
    assert "latency_ms" in metadata


def test_query_endpoint_empty_corpus(client):
    from services.query_engine import NO_DOCUMENTS_MESSAGE

    response = client.post("/query", json={"question": "What is Java?"})

    assert response.status_code == 200
    data = response.json()
    assert data["answer"] == NO_DOCUMENTS_MESSAGE
    assert data["confidence"] == 0.0
    assert data["metadata"]["error_code"] == "EMPTY_CORPUS"
    assert data["metadata"]["classification"] is None


def test_query_endpoint_empty_question(java_client):
    """Test query endpoint with empty question."""
    response = java_client.post("/query", json={"question": "  "})

    assert response.status_code == 200
    assert response.json()["metadata"]["error_code"] == "BLANK_QUERY"


def test_query_endpoint_missing_question(client):
    response = client.post("/query", json={})
    assert response.status_code == 422


def test_query_endpoint_internal_error(java_client):
    import main

    with patch.object(main.query_engine.synthesizer, "synthesize", side_effect=RuntimeError("boom")):
        response = java_client.post("/query", json={"question": "What is Java?"})

    assert response.status_code == 200
    data = response.json()
    assert data["metadata"]["error_code"] == "INTERNAL_ERROR"
    assert "boom" in data["answer"]


@pytest.mark.parametrize("handler_name", [
    "add_document_endpoint",
    "list_documents_endpoint",
    "remove_document_endpoint",
    "clear_documents_endpoint",
])
def test_document_handlers_run_in_threadpool(handler_name):
    """Document handlers are plain functions, which FastAPI runs in its threadpool."""
    import inspect
    import main

    assert not inspect.iscoroutinefunction(getattr(main, handler_name))
