"""Structured error types raised inside the answering pipeline."""
from dataclasses import dataclass, field
from typing import Any, Dict

EMPTY_CORPUS = "EMPTY_CORPUS"
BLANK_QUERY = "BLANK_QUERY"
NO_CANDIDATES = "NO_CANDIDATES"
BELOW_THRESHOLD = "BELOW_THRESHOLD"
INTERNAL_ERROR = "INTERNAL_ERROR"


@dataclass
class EngineError:
    """Structured error describing why a question could not be answered."""
    code: str
    message: str
    details: Dict[str, Any] = field(default_factory=dict)


class QueryEngineError(Exception):
    """Custom exception for answering failures with structured error information."""

    def __init__(self, error: EngineError):
        self.error = error
        super().__init__(error.message)
