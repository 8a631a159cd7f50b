"""Query engine: the caller-owned entry point for ingesting documents and asking questions."""
import logging
import time
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable, List, Optional

from models.answer import Answer, QueryClassification
from models.chunk import ScoredChunk
from models.document import Document, DocumentKind
from services.chunk_store import ChunkStore
from services.errors import (
    BELOW_THRESHOLD,
    BLANK_QUERY,
    EMPTY_CORPUS,
    INTERNAL_ERROR,
    NO_CANDIDATES,
    EngineError,
    QueryEngineError,
)
from services.query_classifier import QueryClassifier
from services.query_logger import QueryLogger
from services.response_synthesizer import ResponseSynthesizer
from services.retrieval_engine import RetrievalEngine
from config import ANSWER_TOP_K

logger = logging.getLogger(__name__)

NO_DOCUMENTS_MESSAGE = (
    "I don't have any documents uploaded yet. Please upload some documents first "
    "so I can help answer your questions."
)
INVALID_QUESTION_MESSAGE = "Please provide a valid question."
NO_RELEVANT_INFORMATION_MESSAGE = (
    "I couldn't find relevant information in the uploaded documents to answer your "
    "question. Try rephrasing your question or upload more relevant documents."
)
BELOW_THRESHOLD_MESSAGE = (
    "I found some related information in your documents, but couldn't find a specific "
    "answer to your question. Try rephrasing your question or upload more relevant documents."
)
INTERNAL_ERROR_MESSAGE = "Sorry, an error occurred while processing your question"

ERROR_MESSAGES = {
    EMPTY_CORPUS: NO_DOCUMENTS_MESSAGE,
    BLANK_QUERY: INVALID_QUESTION_MESSAGE,
    NO_CANDIDATES: NO_RELEVANT_INFORMATION_MESSAGE,
    BELOW_THRESHOLD: BELOW_THRESHOLD_MESSAGE,
}


class QueryEngine:
    """
    Answer questions against a caller-owned corpus.

    Questions are processed on a single background worker in submission
    order. Corpus changes may happen from any thread; every question reads
    one consistent snapshot of the store.
    """

    def __init__(
        self,
        chunk_store: Optional[ChunkStore] = None,
        classifier: Optional[QueryClassifier] = None,
        synthesizer: Optional[ResponseSynthesizer] = None,
        query_logger: Optional[QueryLogger] = None,
        top_k: int = ANSWER_TOP_K
    ):
        """
        Initialize the query engine.

        Args:
            chunk_store: Store holding the corpus (a new empty one if omitted)
            classifier: QueryClassifier instance
            synthesizer: ResponseSynthesizer instance
            query_logger: Optional decision logger
            top_k: Number of candidate chunks retrieved per question
        """
        self.chunk_store = chunk_store or ChunkStore()
        self.retrieval_engine = RetrievalEngine(self.chunk_store)
        self.classifier = classifier or QueryClassifier()
        self.synthesizer = synthesizer or ResponseSynthesizer()
        self.query_logger = query_logger
        self.top_k = top_k
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="query-worker")
        logger.info("Initialized QueryEngine")

    def __enter__(self) -> "QueryEngine":
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.shutdown()

    # ------------------------------------------------------------------
    # Corpus management
    # ------------------------------------------------------------------

    def add_document(
        self,
        document_id: str,
        display_name: str,
        text: str,
        declared_kind: DocumentKind = DocumentKind.UNKNOWN
    ) -> int:
        """
        Register a document's extracted text.

        Returns:
            Number of chunks created for the document
        """
        document = Document(
            document_id=document_id,
            display_name=display_name,
            raw_text=text or "",
            declared_kind=declared_kind,
        )
        return self.chunk_store.add_document(document)

    def remove_document(self, document_id: str) -> bool:
        """Remove a document; the store is rebuilt from the remaining ones."""
        return self.chunk_store.remove_document(document_id)

    def clear(self) -> None:
        """Remove every document."""
        self.chunk_store.clear()

    def chunk_count(self) -> int:
        """Get the total number of chunks in the corpus."""
        return self.chunk_store.chunk_count()

    def document_names(self) -> List[str]:
        """Display names of the registered documents, in insertion order."""
        return self.chunk_store.document_names()

    # ------------------------------------------------------------------
    # Question answering
    # ------------------------------------------------------------------

    def ask(self, query: str, callback: Optional[Callable[[Answer], None]] = None) -> "Future[Answer]":
        """
        Submit a question to the background worker.

        Args:
            query: User question
            callback: Optional function called with the Answer, on the worker
                thread unless the worker has stopped

        Returns:
            Future resolving to the Answer; it never resolves to an exception.
            After shutdown the Future is already resolved to an
            INTERNAL_ERROR answer.
        """
        def task() -> Answer:
            answer = self.answer(query)
            self._notify(callback, answer)
            return answer

        try:
            return self._executor.submit(task)
        except RuntimeError as e:
            logger.error(f"Question rejected by stopped worker: {e}")
            answer = Answer(
                text=f"{INTERNAL_ERROR_MESSAGE}: {e}",
                confidence=0.0,
                error_code=INTERNAL_ERROR,
            )
            self._notify(callback, answer)
            future: "Future[Answer]" = Future()
            future.set_result(answer)
            return future

    @staticmethod
    def _notify(callback: Optional[Callable[[Answer], None]], answer: Answer) -> None:
        if callback is None:
            return
        try:
            callback(answer)
        except Exception as e:
            logger.error(f"Answer callback failed: {e}", exc_info=True)

    def answer(self, query: str) -> Answer:
        """
        Answer a question synchronously.

        Steps:
        1. Reject an empty corpus or a blank question
        2. Retrieve, re-rank and threshold chunks from one store snapshot
        3. Classify the question
        4. Synthesize the answer text

        Every failure is turned into an Answer carrying a readable message.

        Args:
            query: User question

        Returns:
            Answer with text, confidence and source attribution
        """
        start_time = time.time()
        classification: Optional[QueryClassification] = None
        selected: List[ScoredChunk] = []

        try:
            snapshot = self.chunk_store.snapshot()
            if not snapshot.chunks:
                raise QueryEngineError(EngineError(
                    code=EMPTY_CORPUS,
                    message="No documents registered",
                ))

            if not query or not query.strip():
                raise QueryEngineError(EngineError(
                    code=BLANK_QUERY,
                    message="Question is empty",
                ))

            query = query.strip()
            logger.info(f"Processing query: {query[:100]}")

            selected = self.retrieval_engine.retrieve(query, top_k=self.top_k, snapshot=snapshot)
            classification = self.classifier.classify_query(query)

            text = self.synthesizer.synthesize(
                query,
                [scored.chunk.text for scored in selected],
                classification,
            )

            sources = self._distinct_sources(selected)
            answer = Answer(
                text=text,
                confidence=selected[0].relevance_score,
                primary_source=sources[0],
                supplementary_source_count=len(sources) - 1,
                classification=classification,
            )

        except QueryEngineError as e:
            logger.info(f"Question not answered ({e.error.code}): {e.error.message}")
            answer = Answer(
                text=ERROR_MESSAGES.get(e.error.code, e.error.message),
                confidence=0.0,
                error_code=e.error.code,
                classification=classification,
            )
        except Exception as e:
            logger.error(f"Unexpected error processing query: {e}", exc_info=True)
            answer = Answer(
                text=f"{INTERNAL_ERROR_MESSAGE}: {e}",
                confidence=0.0,
                error_code=INTERNAL_ERROR,
                classification=classification,
            )

        latency_ms = int((time.time() - start_time) * 1000)
        self._log_decision(query, answer, selected, latency_ms)
        return answer

    def shutdown(self, wait: bool = True) -> None:
        """Stop the worker after pending questions finish."""
        self._executor.shutdown(wait=wait)
        logger.info("QueryEngine shut down")

    def _distinct_sources(self, selected: List[ScoredChunk]) -> List[str]:
        sources: List[str] = []
        for scored in selected:
            name = scored.chunk.source_display_name
            if name not in sources:
                sources.append(name)
        return sources

    def _log_decision(
        self,
        query: str,
        answer: Answer,
        selected: List[ScoredChunk],
        latency_ms: int
    ) -> None:
        if self.query_logger is None:
            return

        classification = answer.classification
        try:
            self.query_logger.log_query_decision(
                query=query or "",
                classification=classification.primary_type.value if classification else None,
                rule_triggered=classification.rule_triggered if classification else None,
                chunks_retrieved=len(selected),
                top_score=selected[0].relevance_score if selected else 0.0,
                confidence=answer.confidence,
                latency_ms=latency_ms,
                key_terms=classification.key_terms if classification else None,
                sources=self._distinct_sources(selected),
                error_code=answer.error_code,
            )
        except OSError as e:
            logger.error(f"Failed to write query decision log: {e}")
