"""Query classification and answer data models."""
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


class QueryType(str, Enum):
    """Rhetorical intent of a question, selecting the answer template."""
    DEFINITION = "definition"
    COMPARISON = "comparison"
    LIST = "list"
    REASON = "reason"
    EXPLANATION = "explanation"
    PROCEDURE = "procedure"
    FACTUAL = "factual"
    ANALYSIS = "analysis"
    SUMMARY = "summary"
    NUMERICAL = "numerical"
    TEMPORAL = "temporal"
    GENERAL = "general"


@dataclass
class QueryClassification:
    """
    Result of query classification.

    Attributes:
        primary_type: Detected intent of the question
        key_terms: Stemmed content words of the question, in order of appearance
        question_words: Interrogatives present in the question
        rule_triggered: Which classification rule decided the type
        reasoning: Explanation of the classification decision
    """
    primary_type: QueryType
    key_terms: List[str] = field(default_factory=list)
    question_words: List[str] = field(default_factory=list)
    rule_triggered: str = "default"
    reasoning: str = ""


@dataclass
class Answer:
    """Final answer returned to the caller; always carries displayable text."""
    text: str
    confidence: float = 0.0
    primary_source: Optional[str] = None
    supplementary_source_count: int = 0
    error_code: Optional[str] = None
    classification: Optional[QueryClassification] = None
