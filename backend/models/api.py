"""API request/response models."""
from typing import List, Optional
from pydantic import BaseModel, Field

from .document import DocumentKind


class DocumentRequest(BaseModel):
    """Request body for registering a document."""
    document_id: str = Field(..., min_length=1)
    display_name: str
    text: str
    declared_kind: DocumentKind = DocumentKind.UNKNOWN


class DocumentResponse(BaseModel):
    """Result of a document registration."""
    document_id: str
    display_name: str
    chunks_added: int
    total_chunks: int


class DocumentListResponse(BaseModel):
    """Registered documents and the size of the chunk index."""
    documents: List[str]
    chunk_count: int


class QueryRequest(BaseModel):
    """Request body for asking a question."""
    question: str


class ResponseMetadata(BaseModel):
    """Diagnostic metadata attached to every answer."""
    classification: Optional[str] = None
    rule_triggered: Optional[str] = None
    key_terms: List[str] = []
    latency_ms: int
    error_code: Optional[str] = None


class QueryResponse(BaseModel):
    """Response body for an answered question."""
    answer: str
    confidence: float
    primary_source: Optional[str] = None
    supplementary_source_count: int = 0
    metadata: ResponseMetadata
