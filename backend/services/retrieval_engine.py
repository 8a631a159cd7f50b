"""Retrieval engine for re-ranking chunks and applying the dynamic threshold."""
import logging
from typing import List, Optional

from models.chunk import ScoredChunk
from services.chunk_store import ChunkStore, CorpusSnapshot
from services.errors import BELOW_THRESHOLD, NO_CANDIDATES, EngineError, QueryEngineError
from services.similarity import similarity
from config import ANSWER_TOP_K, RETRIEVAL_FLOOR, RELEVANCE_FLOOR, RELATIVE_CUTOFF

logger = logging.getLogger(__name__)


class RetrievalEngine:
    """Select the chunks an answer is built from, with a dynamic relevance cutoff."""

    KEYWORD_BOOST_FACTOR = 0.3

    def __init__(
        self,
        chunk_store: ChunkStore,
        retrieval_floor: float = RETRIEVAL_FLOOR,
        relevance_floor: float = RELEVANCE_FLOOR,
        relative_cutoff: float = RELATIVE_CUTOFF
    ):
        """
        Initialize the retrieval engine.

        Args:
            chunk_store: ChunkStore instance for composite-score search
            retrieval_floor: Composite score a candidate must exceed
            relevance_floor: Lowest possible dynamic threshold
            relative_cutoff: Fraction of the top re-ranked score a chunk must reach
        """
        self.chunk_store = chunk_store
        self.retrieval_floor = retrieval_floor
        self.relevance_floor = relevance_floor
        self.relative_cutoff = relative_cutoff
        logger.info("Initialized RetrievalEngine")

    def retrieve(
        self,
        query: str,
        top_k: int = ANSWER_TOP_K,
        snapshot: Optional[CorpusSnapshot] = None
    ) -> List[ScoredChunk]:
        """
        Retrieve relevant chunks for query with a dynamic threshold.

        Implements the following filtering strategy:
        1. Rank chunks in the store by composite score (top_k candidates)
        2. Drop candidates at or below the retrieval floor
        3. Re-rank survivors with base similarity plus a keyword boost,
           clamped to 1.0
        4. Keep chunks scoring at least max(relevance_floor, top * relative_cutoff)

        Args:
            query: User question
            top_k: Number of candidates taken from the store
            snapshot: Corpus snapshot to read (defaults to the current one)

        Returns:
            Re-ranked chunks, highest score first; empty for a blank query

        Raises:
            QueryEngineError: NO_CANDIDATES or BELOW_THRESHOLD
        """
        if not query or not query.strip():
            logger.warning("Empty query string provided, returning empty results")
            return []

        candidates = self.chunk_store.search(query, top_k=top_k, snapshot=snapshot)
        candidates = [
            candidate for candidate in candidates
            if candidate.relevance_score > self.retrieval_floor
        ]

        if not candidates:
            logger.info("No chunks found above the retrieval floor")
            raise QueryEngineError(EngineError(
                code=NO_CANDIDATES,
                message="No chunk scored above the retrieval floor",
                details={"retrieval_floor": self.retrieval_floor}
            ))

        reranked = [
            ScoredChunk(
                chunk=candidate.chunk,
                relevance_score=self.rerank_score(query, candidate.chunk.text),
                score_breakdown={
                    **candidate.score_breakdown,
                    "composite": candidate.relevance_score,
                },
            )
            for candidate in candidates
        ]
        reranked.sort(key=lambda item: item.relevance_score, reverse=True)

        top_score = reranked[0].relevance_score
        threshold = self.dynamic_threshold(top_score)
        filtered = [chunk for chunk in reranked if chunk.relevance_score >= threshold]

        if not filtered:
            logger.info(f"All {len(reranked)} candidates fell below threshold {threshold:.3f}")
            raise QueryEngineError(EngineError(
                code=BELOW_THRESHOLD,
                message="Related chunks found but none cleared the relevance threshold",
                details={"top_score": top_score, "threshold": threshold}
            ))

        logger.info(
            f"Retrieved {len(filtered)} chunks "
            f"(top score: {top_score:.3f}, threshold: {threshold:.3f})"
        )
        return filtered

    def dynamic_threshold(self, top_score: float) -> float:
        """Cutoff proportional to the best score, never below the floor."""
        return max(self.relevance_floor, top_score * self.relative_cutoff)

    def rerank_score(self, query: str, text: str) -> float:
        """
        Base similarity plus 0.3 times the fraction of query words found in
        the chunk, clamped to 1.0.
        """
        query_words = query.lower().split()
        if not query_words:
            return 0.0

        lower_text = text.lower()
        exact_matches = sum(
            1 for word in query_words if len(word) > 2 and word in lower_text
        )
        keyword_boost = exact_matches / len(query_words) * self.KEYWORD_BOOST_FACTOR
        return min(1.0, similarity(query, text) + keyword_boost)
