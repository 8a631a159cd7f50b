"""Chunk data models."""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict

from .document import DocumentKind


@dataclass(frozen=True)
class Chunk:
    """Represents a bounded span of a document's text used for retrieval."""
    source_document_id: str
    source_display_name: str
    text: str
    declared_kind: DocumentKind = DocumentKind.UNKNOWN
    sequence: int = 0  # Position of the chunk within its document
    created_at: datetime = field(default_factory=datetime.now)


@dataclass
class ScoredChunk:
    """Chunk with relevance score from retrieval."""
    chunk: Chunk
    relevance_score: float  # Composite, not clamped to [0, 1]
    score_breakdown: Dict[str, float] = field(default_factory=dict)
