"""In-memory chunk store with copy-on-write snapshots and lexical search."""
import logging
import re
import string
import threading
from dataclasses import dataclass
from typing import List, Optional, Tuple

from models.chunk import Chunk, ScoredChunk
from models.document import Document
from services.chunking_engine import ChunkingEngine
from services.lexical import is_stop_word
from services.similarity import enhanced_similarity, similarity
from services.text_normalizer import normalize_content
from config import DEFAULT_TOP_K

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CorpusSnapshot:
    """Immutable view of the registered documents and their chunks."""
    documents: Tuple[Document, ...] = ()
    chunks: Tuple[Chunk, ...] = ()
    generation: int = 0


class ChunkStore:
    """
    Own the corpus of chunks and rank them against a query.

    Every mutation builds a new CorpusSnapshot and swaps it in with a single
    assignment, so a search running on another thread keeps reading the
    snapshot it started with. Writers are serialized by a lock; readers
    never take it.
    """

    # Composite score weights
    SIMILARITY_WEIGHT = 0.4
    EXACT_MATCH_WEIGHT = 0.25
    KEYWORD_WEIGHT = 0.15
    TITLE_WEIGHT = 0.1
    QUESTION_WEIGHT = 0.1

    IMPORTANT_KEYWORDS = (
        "important", "key", "main", "primary", "essential",
        "crucial", "significant", "definition", "meaning"
    )
    KEYWORD_BOOST_STEP = 0.1
    KEYWORD_BOOST_CAP = 0.5
    TITLE_BOOST_FACTOR = 0.3
    QUESTION_TYPE_BOOST = 0.3

    # (question word, content cues) pairs; first matching pair wins
    QUESTION_CUES = (
        ("what", ("definition", "meaning")),
        ("how", ("process", "method")),
        ("why", ("because", "reason")),
        ("when", ("date", "time")),
    )

    def __init__(self, chunking_engine: Optional[ChunkingEngine] = None):
        """
        Initialize an empty chunk store.

        Args:
            chunking_engine: Chunker used for new documents (default settings if omitted)
        """
        self.chunking_engine = chunking_engine or ChunkingEngine()
        self._snapshot = CorpusSnapshot()
        self._write_lock = threading.Lock()
        logger.info("Initialized ChunkStore")

    # ------------------------------------------------------------------
    # Corpus mutation
    # ------------------------------------------------------------------

    def add_document(self, document: Document) -> int:
        """
        Register a document and append its chunks.

        Registering an id that is already present replaces the old document
        and rebuilds the store.

        Args:
            document: Document to add

        Returns:
            Number of chunks created for this document

        Raises:
            ValueError: If the document id is empty
        """
        if not document.document_id:
            raise ValueError("Document id cannot be empty")

        with self._write_lock:
            current = self._snapshot
            if any(doc.document_id == document.document_id for doc in current.documents):
                logger.info(f"Replacing existing document: {document.document_id}")
                documents = tuple(
                    document if doc.document_id == document.document_id else doc
                    for doc in current.documents
                )
                self._snapshot = self._build_snapshot(documents, current.generation + 1)
            else:
                new_chunks = self._chunk(document)
                self._snapshot = CorpusSnapshot(
                    documents=current.documents + (document,),
                    chunks=current.chunks + tuple(new_chunks),
                    generation=current.generation + 1,
                )

            added = sum(
                1 for chunk in self._snapshot.chunks
                if chunk.source_document_id == document.document_id
            )

        logger.info(
            f"Added {added} chunks from {document.display_name} "
            f"(total chunks: {len(self._snapshot.chunks)})"
        )
        return added

    def remove_document(self, document_id: str) -> bool:
        """
        Remove a document and rebuild the chunk collection from the rest.

        Args:
            document_id: Identifier of the document to remove

        Returns:
            True if the document was registered, False otherwise
        """
        with self._write_lock:
            current = self._snapshot
            remaining = tuple(doc for doc in current.documents if doc.document_id != document_id)
            if len(remaining) == len(current.documents):
                logger.warning(f"Attempted to remove unknown document: {document_id}")
                return False

            self._snapshot = self._build_snapshot(remaining, current.generation + 1)

        logger.info(
            f"Removed document {document_id}. Remaining documents: {len(remaining)}"
        )
        return True

    def clear(self) -> None:
        """Remove every document and chunk."""
        with self._write_lock:
            count = len(self._snapshot.documents)
            self._snapshot = CorpusSnapshot(generation=self._snapshot.generation + 1)
        logger.info(f"Cleared chunk store. Removed {count} documents")

    def _build_snapshot(self, documents: Tuple[Document, ...], generation: int) -> CorpusSnapshot:
        chunks: List[Chunk] = []
        for document in documents:
            chunks.extend(self._chunk(document))
        return CorpusSnapshot(documents=documents, chunks=tuple(chunks), generation=generation)

    def _chunk(self, document: Document) -> List[Chunk]:
        content = normalize_content(document.raw_text, document.declared_kind)
        if not content:
            logger.warning(f"No content extracted from document: {document.display_name}")
            return []
        return self.chunking_engine.chunk_document(document, text=content)

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    def snapshot(self) -> CorpusSnapshot:
        """Return the current immutable snapshot."""
        return self._snapshot

    def chunk_count(self) -> int:
        """Get the total number of chunks in the store."""
        return len(self._snapshot.chunks)

    def document_names(self) -> List[str]:
        """Display names of the registered documents, in insertion order."""
        return [doc.display_name for doc in self._snapshot.documents]

    def documents(self) -> List[Document]:
        """Registered documents, in insertion order."""
        return list(self._snapshot.documents)

    def has_document(self, document_id: str) -> bool:
        """Check whether a document id is registered."""
        return any(doc.document_id == document_id for doc in self._snapshot.documents)

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------

    def search(
        self,
        query: str,
        top_k: int = DEFAULT_TOP_K,
        snapshot: Optional[CorpusSnapshot] = None
    ) -> List[ScoredChunk]:
        """
        Rank chunks against a query by composite lexical score.

        Args:
            query: User question
            top_k: Maximum number of chunks to return
            snapshot: Snapshot to search (defaults to the current one)

        Returns:
            Up to top_k ScoredChunk objects, highest score first; ties keep
            insertion order

        Raises:
            ValueError: If top_k is not positive
        """
        if top_k <= 0:
            raise ValueError("top_k must be positive")

        corpus = snapshot if snapshot is not None else self._snapshot
        if not corpus.chunks or not query or not query.strip():
            return []

        scored = [self.score_chunk(query, chunk) for chunk in corpus.chunks]
        # sorted() is stable, so equal scores keep insertion order
        ranked = sorted(scored, key=lambda item: item.relevance_score, reverse=True)

        logger.debug(
            f"Scored {len(scored)} chunks for query, returning top {min(top_k, len(ranked))}"
        )
        return ranked[:top_k]

    def score_chunk(self, query: str, chunk: Chunk) -> ScoredChunk:
        """
        Compute the composite score of one chunk for a query.

        Returns:
            ScoredChunk with the weighted total and every component
        """
        content = chunk.text
        breakdown = {
            "similarity": enhanced_similarity(query, content),
            "exact_match": self.exact_match_boost(query, content),
            "keyword": self.keyword_boost(content),
            "title": self.title_boost(query, chunk.source_display_name),
            "question_type": self.question_type_boost(query, content),
        }
        score = (
            breakdown["similarity"] * self.SIMILARITY_WEIGHT
            + breakdown["exact_match"] * self.EXACT_MATCH_WEIGHT
            + breakdown["keyword"] * self.KEYWORD_WEIGHT
            + breakdown["title"] * self.TITLE_WEIGHT
            + breakdown["question_type"] * self.QUESTION_WEIGHT
        )
        return ScoredChunk(chunk=chunk, relevance_score=score, score_breakdown=breakdown)

    def exact_match_boost(self, query: str, content: str) -> float:
        """
        1.0 for a literal phrase match, else the fraction of query words
        found as whole words in the content.

        Only content words (len > 2, not stop words) can match, but every
        query word counts toward the denominator.
        """
        lower_query = query.lower()
        lower_content = content.lower()

        if lower_query.strip() and lower_query in lower_content:
            return 1.0

        query_words = lower_query.split()
        if not query_words:
            return 0.0

        exact_matches = 0
        for word in query_words:
            word = word.strip(string.punctuation)
            if len(word) <= 2 or is_stop_word(word):
                continue
            if re.search(rf"\b{re.escape(word)}\b", lower_content):
                exact_matches += 1

        return exact_matches / len(query_words)

    def keyword_boost(self, content: str) -> float:
        """0.1 per importance keyword present in the content, capped at 0.5."""
        lower_content = content.lower()
        keyword_count = sum(1 for keyword in self.IMPORTANT_KEYWORDS if keyword in lower_content)
        return min(keyword_count * self.KEYWORD_BOOST_STEP, self.KEYWORD_BOOST_CAP)

    def title_boost(self, query: str, document_name: Optional[str]) -> float:
        """Scaled similarity between the query and the source document name."""
        if not document_name:
            return 0.0
        return similarity(query, document_name) * self.TITLE_BOOST_FACTOR

    def question_type_boost(self, query: str, content: str) -> float:
        """Boost content whose vocabulary matches the kind of question asked."""
        lower_query = query.lower()
        lower_content = content.lower()

        for question_word, cues in self.QUESTION_CUES:
            if question_word in lower_query and any(cue in lower_content for cue in cues):
                return self.QUESTION_TYPE_BOOST
        return 0.0

