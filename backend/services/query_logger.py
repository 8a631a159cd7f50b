"""Query decision logger writing JSON Lines records."""
import json
import logging
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

logger = logging.getLogger(__name__)


class QueryLogger:
    """Append one JSON object per answered question to a log file."""

    def __init__(self, log_file_path: str = "logs/query_decisions.jsonl"):
        """
        Initialize the query logger.

        Args:
            log_file_path: Path of the JSON Lines file (parent directories are created)
        """
        self.log_file_path = Path(log_file_path)
        self.log_file_path.parent.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()
        self._file = open(self.log_file_path, "a", encoding="utf-8")
        logger.info(f"QueryLogger writing to {self.log_file_path}")

    def log_query_decision(
        self,
        query: str,
        classification: Optional[str],
        rule_triggered: Optional[str],
        chunks_retrieved: int,
        top_score: float,
        confidence: float,
        latency_ms: int,
        key_terms: Optional[List[str]] = None,
        sources: Optional[List[str]] = None,
        error_code: Optional[str] = None
    ) -> None:
        """
        Record how a question was answered.

        Args:
            query: User question
            classification: QueryType value chosen for the answer template
            rule_triggered: Classification rule that decided the type
            chunks_retrieved: Number of chunks that reached the synthesizer
            top_score: Best re-ranked relevance score
            confidence: Confidence reported in the answer
            latency_ms: Time spent answering
            key_terms: Stemmed key terms of the question
            sources: Display names of the documents used
            error_code: Error code when no answer could be built
        """
        entry = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "query": query,
            "classification": classification,
            "rule_triggered": rule_triggered,
            "chunks_retrieved": chunks_retrieved,
            "top_score": round(top_score, 4),
            "confidence": round(confidence, 4),
            "latency_ms": latency_ms,
            "key_terms": key_terms or [],
            "sources": sources or [],
            "error_code": error_code,
        }

        with self._lock:
            if self._file.closed:
                logger.warning("QueryLogger is closed, dropping entry")
                return
            self._file.write(json.dumps(entry) + "\n")
            self._file.flush()

    def close(self) -> None:
        """Close the underlying log file."""
        with self._lock:
            if not self._file.closed:
                self._file.close()
