"""Unit tests for ChunkStore."""
import sys
from pathlib import Path

# Add backend to path
sys.path.insert(0, str(Path(__file__).parent.parent / "backend"))

import pytest
from services.chunk_store import ChunkStore
from services.chunking_engine import ChunkingEngine
from models.document import Document, DocumentKind


def make_document(document_id: str, name: str, text: str, kind=DocumentKind.TEXT) -> Document:
    return Document(document_id=document_id, display_name=name, raw_text=text, declared_kind=kind)


@pytest.fixture
def store():
    """Create an empty ChunkStore."""
    return ChunkStore()


@pytest.fixture
def populated_store(store):
    """Create a ChunkStore holding three small documents."""
    store.add_document(make_document(
        "ml", "machine_learning.txt",
        "Machine learning models learn patterns from data.\n\n"
        "Training data quality is important for model accuracy."
    ))
    store.add_document(make_document(
        "cook", "cooking.txt",
        "Bread is baked in an oven at high temperature."
    ))
    store.add_document(make_document(
        "java", "java.txt",
        "Java is a programming language. It is defined as a general-purpose language."
    ))
    return store


class TestCorpusMutation:
    """Test suite for adding, replacing and removing documents."""

    def test_empty_store(self, store):
        assert store.chunk_count() == 0
        assert store.document_names() == []

    def test_add_document_returns_chunk_count(self, store):
        added = store.add_document(make_document("d1", "a.txt", "First.\n\nSecond."))
        assert added == 2
        assert store.chunk_count() == 2

    def test_document_names_in_insertion_order(self, populated_store):
        assert populated_store.document_names() == [
            "machine_learning.txt", "cooking.txt", "java.txt"
        ]

    def test_empty_document_id_rejected(self, store):
        with pytest.raises(ValueError):
            store.add_document(make_document("", "a.txt", "text"))

    def test_blank_document_registered_without_chunks(self, store):
        added = store.add_document(make_document("d1", "blank.txt", "   "))
        assert added == 0
        assert store.document_names() == ["blank.txt"]
        assert store.chunk_count() == 0

    def test_replace_existing_document(self, populated_store):
        added = populated_store.add_document(make_document("cook", "cooking.txt", "Soup.\n\nSalad."))
        assert added == 2
        assert populated_store.document_names() == [
            "machine_learning.txt", "cooking.txt", "java.txt"
        ]
        texts = [chunk.text for chunk in populated_store.snapshot().chunks]
        assert "Bread is baked in an oven at high temperature." not in texts
        assert "Soup." in texts

    def test_remove_document_rebuilds(self, populated_store):
        before = populated_store.chunk_count()
        assert populated_store.remove_document("cook") is True
        assert populated_store.chunk_count() == before - 1
        assert populated_store.document_names() == ["machine_learning.txt", "java.txt"]
        assert not populated_store.has_document("cook")

    def test_remove_unknown_document(self, populated_store):
        assert populated_store.remove_document("missing") is False
        assert len(populated_store.document_names()) == 3

    def test_clear(self, populated_store):
        populated_store.clear()
        assert populated_store.chunk_count() == 0
        assert populated_store.documents() == []

    def test_generation_advances(self, store):
        start = store.snapshot().generation
        store.add_document(make_document("d1", "a.txt", "text"))
        store.remove_document("d1")
        assert store.snapshot().generation == start + 2

    def test_markup_normalized_before_chunking(self, store):
        store.add_document(make_document(
            "h1", "page.html", "<p>Hello</p>\n\n<p>World</p>", DocumentKind.HTML
        ))
        assert [chunk.text for chunk in store.snapshot().chunks] == ["Hello World"]

    def test_custom_chunking_engine(self):
        store = ChunkStore(chunking_engine=ChunkingEngine(chunk_size=30))
        store.add_document(make_document(
            "d1", "a.txt", "Alpha beta gamma delta eps. Second sentence is here now."
        ))
        assert store.chunk_count() == 2


class TestSnapshots:
    """A snapshot stays valid while the store changes."""

    def test_snapshot_unaffected_by_later_writes(self, populated_store):
        snapshot = populated_store.snapshot()
        count = len(snapshot.chunks)

        populated_store.clear()

        assert len(snapshot.chunks) == count
        results = populated_store.search("machine learning", top_k=5, snapshot=snapshot)
        assert results
        assert populated_store.search("machine learning") == []


class TestSearch:
    """Test suite for composite-score search."""

    def test_invalid_top_k(self, populated_store):
        with pytest.raises(ValueError):
            populated_store.search("machine learning", top_k=0)

    def test_empty_store_returns_nothing(self, store):
        assert store.search("anything") == []

    def test_blank_query_returns_nothing(self, populated_store):
        assert populated_store.search("   ") == []

    def test_results_bounded_and_sorted(self, populated_store):
        results = populated_store.search("machine learning data", top_k=2)
        assert len(results) <= 2
        scores = [result.relevance_score for result in results]
        assert scores == sorted(scores, reverse=True)

    def test_best_match_first(self, populated_store):
        results = populated_store.search("How do machine learning models learn?", top_k=3)
        assert results[0].chunk.source_document_id == "ml"

    def test_search_is_deterministic(self, populated_store):
        first = populated_store.search("programming language", top_k=4)
        second = populated_store.search("programming language", top_k=4)
        assert [r.chunk.text for r in first] == [r.chunk.text for r in second]
        assert [r.relevance_score for r in first] == [r.relevance_score for r in second]

    def test_ties_keep_insertion_order(self, store):
        store.add_document(make_document("d1", "one.txt", "Zebra."))
        store.add_document(make_document("d2", "two.txt", "Zebra."))
        results = store.search("zebra", top_k=2)
        assert [r.chunk.source_document_id for r in results] == ["d1", "d2"]


class TestScoring:
    """Test suite for the composite score and its boosts."""

    def test_score_is_weighted_sum(self, populated_store):
        chunk = populated_store.snapshot().chunks[0]
        scored = populated_store.score_chunk("What is machine learning?", chunk)
        b = scored.score_breakdown
        expected = (
            0.4 * b["similarity"]
            + 0.25 * b["exact_match"]
            + 0.15 * b["keyword"]
            + 0.1 * b["title"]
            + 0.1 * b["question_type"]
        )
        assert scored.relevance_score == pytest.approx(expected)

    def test_exact_match_literal_phrase(self, store):
        assert store.exact_match_boost("machine learning", "Machine learning is great") == 1.0

    def test_exact_match_whole_words(self, store):
        score = store.exact_match_boost("learning machines today", "machine learning")
        assert score == pytest.approx(1 / 3)

    def test_exact_match_counts_every_query_word(self, store):
        # "is" and "it" can never match but still count toward the denominator
        assert store.exact_match_boost("is it java", "java rocks") == pytest.approx(1 / 3)

    def test_keyword_boost_capped(self, store):
        content = "important key main primary essential crucial"
        assert store.keyword_boost(content) == pytest.approx(0.5)

    def test_keyword_boost_step(self, store):
        assert store.keyword_boost("the main idea") == pytest.approx(0.1)

    def test_title_boost(self, store):
        assert store.title_boost("cooking", None) == 0.0
        assert store.title_boost("machine learning", "machine learning") == pytest.approx(0.3 * 0.85)

    def test_question_type_boost(self, store):
        assert store.question_type_boost("what is x", "the definition of x") == pytest.approx(0.3)
        assert store.question_type_boost("why now", "because it rained") == pytest.approx(0.3)
        assert store.question_type_boost("how now", "nothing relevant") == 0.0
