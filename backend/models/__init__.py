"""Data models for DocQuery."""
from .document import Document, DocumentKind
from .chunk import Chunk, ScoredChunk
from .answer import Answer, QueryClassification, QueryType
from .api import (
    DocumentRequest,
    DocumentResponse,
    DocumentListResponse,
    QueryRequest,
    QueryResponse,
    ResponseMetadata,
)

__all__ = [
    "Document",
    "DocumentKind",
    "Chunk",
    "ScoredChunk",
    "Answer",
    "QueryClassification",
    "QueryType",
    "DocumentRequest",
    "DocumentResponse",
    "DocumentListResponse",
    "QueryRequest",
    "QueryResponse",
    "ResponseMetadata",
]
