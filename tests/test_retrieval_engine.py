"""Unit tests for RetrievalEngine."""
import sys
from pathlib import Path

# Add backend to path
sys.path.insert(0, str(Path(__file__).parent.parent / "backend"))

import pytest
from unittest.mock import Mock
from services.retrieval_engine import RetrievalEngine
from services.chunk_store import ChunkStore
from services.similarity import similarity
from services.errors import BELOW_THRESHOLD, NO_CANDIDATES, QueryEngineError
from models.chunk import Chunk, ScoredChunk
from models.document import Document, DocumentKind


def make_chunk(text: str, name: str = "doc.txt") -> Chunk:
    return Chunk(source_document_id=name, source_display_name=name, text=text)


class TestRetrievalEngine:
    """Test suite for RetrievalEngine class."""

    @pytest.fixture
    def chunk_store(self):
        """Create a ChunkStore with a single document."""
        store = ChunkStore()
        store.add_document(Document(
            document_id="ml",
            display_name="ml.txt",
            raw_text=(
                "Machine learning models learn patterns from data.\n\n"
                "Bread is baked in an oven at high temperature."
            ),
            declared_kind=DocumentKind.TEXT,
        ))
        return store

    @pytest.fixture
    def retrieval_engine(self, chunk_store):
        """Create a RetrievalEngine over the real store."""
        return RetrievalEngine(chunk_store)

    def test_initialization(self, retrieval_engine, chunk_store):
        """Test that RetrievalEngine initializes with the configured floors."""
        assert retrieval_engine.chunk_store == chunk_store
        assert retrieval_engine.retrieval_floor == 0.0
        assert retrieval_engine.relevance_floor == 0.1
        assert retrieval_engine.relative_cutoff == 0.3

    def test_retrieve_empty_query(self, retrieval_engine):
        """Test that empty query returns empty list."""
        assert retrieval_engine.retrieve("") == []
        assert retrieval_engine.retrieve("   ") == []

    def test_retrieve_relevant_chunk(self, retrieval_engine):
        results = retrieval_engine.retrieve("machine learning models")
        assert results[0].chunk.text == "Machine learning models learn patterns from data."
        assert "composite" in results[0].score_breakdown

    def test_results_clear_dynamic_threshold(self, retrieval_engine):
        results = retrieval_engine.retrieve("machine learning models")
        threshold = retrieval_engine.dynamic_threshold(results[0].relevance_score)
        assert all(result.relevance_score >= threshold for result in results)
        scores = [result.relevance_score for result in results]
        assert scores == sorted(scores, reverse=True)

    def test_no_candidates(self):
        store = ChunkStore()
        store.add_document(Document(
            document_id="fruit",
            display_name="fruit.txt",
            raw_text="Bananas grow in tropical climates.",
        ))
        engine = RetrievalEngine(store)

        with pytest.raises(QueryEngineError) as exc_info:
            engine.retrieve("quantum chromodynamics")
        assert exc_info.value.error.code == NO_CANDIDATES

    def test_below_threshold(self):
        # Only the importance-keyword boost lifts the composite score above zero
        store = ChunkStore()
        store.add_document(Document(
            document_id="a",
            display_name="a.txt",
            raw_text="This is important.",
        ))
        engine = RetrievalEngine(store)

        with pytest.raises(QueryEngineError) as exc_info:
            engine.retrieve("quantum chromodynamics")
        assert exc_info.value.error.code == BELOW_THRESHOLD
        assert exc_info.value.error.details["threshold"] == pytest.approx(0.1)

    def test_retrieval_floor_filters_candidates(self):
        mock_store = Mock()
        mock_store.search.return_value = [
            ScoredChunk(chunk=make_chunk("machine learning"), relevance_score=0.05),
        ]
        engine = RetrievalEngine(mock_store, retrieval_floor=0.1)

        with pytest.raises(QueryEngineError) as exc_info:
            engine.retrieve("machine learning")
        assert exc_info.value.error.code == NO_CANDIDATES

    def test_passes_top_k_and_snapshot_to_store(self):
        mock_store = Mock()
        mock_store.search.return_value = [
            ScoredChunk(chunk=make_chunk("machine learning"), relevance_score=0.5),
        ]
        snapshot = object()
        engine = RetrievalEngine(mock_store)

        engine.retrieve("machine learning", top_k=3, snapshot=snapshot)

        mock_store.search.assert_called_once_with("machine learning", top_k=3, snapshot=snapshot)

    def test_rerank_drops_weak_chunks(self):
        mock_store = Mock()
        mock_store.search.return_value = [
            ScoredChunk(chunk=make_chunk("unrelated bread recipe"), relevance_score=0.9),
            ScoredChunk(chunk=make_chunk("machine learning"), relevance_score=0.2),
        ]
        engine = RetrievalEngine(mock_store)

        results = engine.retrieve("machine learning")

        # Re-ranking ignores the composite order
        assert [r.chunk.text for r in results] == ["machine learning"]
        assert results[0].score_breakdown["composite"] == 0.2

    def test_rerank_score_clamped(self, retrieval_engine):
        assert retrieval_engine.rerank_score("machine learning", "machine learning") == 1.0

    def test_rerank_keyword_boost(self, retrieval_engine):
        # Both query words appear in the chunk, adding the full 0.3 boost
        score = retrieval_engine.rerank_score("the cat", "the cat sat")
        assert score == pytest.approx(similarity("the cat", "the cat sat") + 0.3)

    @pytest.mark.parametrize("top_score,expected", [
        (0.2, 0.1),
        (1.0, 0.3),
        (0.5, 0.15),
    ])
    def test_dynamic_threshold(self, retrieval_engine, top_score, expected):
        assert retrieval_engine.dynamic_threshold(top_score) == pytest.approx(expected)
