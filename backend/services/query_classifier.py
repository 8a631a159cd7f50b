"""
Query Classifier for DocQuery.

This module implements deterministic, rule-based classification of a question's
rhetorical intent, which selects the answer template used by the synthesizer.
"""

import logging
import re
from typing import List, Optional, Tuple

from models.answer import QueryClassification, QueryType
from services.lexical import QUESTION_WORDS, is_stop_word, stem

logger = logging.getLogger(__name__)


class QueryClassifier:
    """
    Deterministic query classifier.

    Runs two rule tiers in a single pass: a leading-word tier that looks at
    the interrogative the question starts with, then content-keyword
    overrides where every matching rule replaces the previous result.
    """

    STEP_PHRASES = ("steps", "procedure")
    DEFINITION_PHRASES = ("what is", "what are", "what does", "define")
    NUMERICAL_PHRASES = ("how many", "how much")
    EXPLANATION_PHRASES = ("how does", "how is")

    # Content overrides, applied in order; the last match wins
    CONTENT_OVERRIDES: Tuple[Tuple[QueryType, Tuple[str, ...]], ...] = (
        (QueryType.COMPARISON, ("compare", "difference", "vs", "versus")),
        (QueryType.LIST, ("list", "types of", "examples", "kinds of")),
        (QueryType.ANALYSIS, ("analyze", "analysis", "evaluate", "assess")),
        (QueryType.SUMMARY, ("summarize", "summary", "overview", "brief")),
    )

    def classify_query(self, query: str) -> QueryClassification:
        """
        Classify a question into a QueryType.

        The rules are:
        1. Leading word: what / how / why / when / where / who
        2. Content overrides: comparison, list, analysis, summary
           (each later match overrides the earlier result)
        3. Default: general

        Args:
            query: User question string

        Returns:
            QueryClassification with type, key terms and question words
        """
        if not query or not query.strip():
            logger.warning("Empty query received, classifying as general")
            return QueryClassification(
                primary_type=QueryType.GENERAL,
                rule_triggered="default",
                reasoning="Empty query defaults to general"
            )

        query_lower = query.lower().strip()

        primary_type = QueryType.GENERAL
        rule_triggered = "default"
        reasoning = "Query does not match any classification rule, defaults to general"

        leading = self._classify_leading_word(query_lower)
        if leading is not None:
            primary_type, leading_word = leading
            rule_triggered = f"leading_word:{leading_word}"
            reasoning = f"Query starts with '{leading_word}'"

        for query_type, cues in self.CONTENT_OVERRIDES:
            matched = self._get_matched_cues(query_lower, cues)
            if matched:
                primary_type = query_type
                rule_triggered = f"content:{query_type.value}"
                reasoning = f"Query contains {query_type.value} cues: {', '.join(matched)}"

        classification = QueryClassification(
            primary_type=primary_type,
            key_terms=self.extract_key_terms(query_lower),
            question_words=self.extract_question_words(query_lower),
            rule_triggered=rule_triggered,
            reasoning=reasoning,
        )

        logger.info(f"Classification: {primary_type.value} ({rule_triggered}) - {query[:50]}")
        return classification

    def _classify_leading_word(self, query_lower: str) -> Optional[Tuple[QueryType, str]]:
        """Apply the leading-word rules; None when no interrogative leads."""
        match = re.match(r"^(what|how|why|when|where|who)\b", query_lower)
        if not match:
            return None

        leading_word = match.group(1)

        if leading_word == "what":
            if self._contains_any(query_lower, self.STEP_PHRASES):
                return QueryType.PROCEDURE, leading_word
            if self._contains_any(query_lower, self.DEFINITION_PHRASES):
                return QueryType.DEFINITION, leading_word
            return QueryType.FACTUAL, leading_word

        if leading_word == "how":
            if self._contains_any(query_lower, self.NUMERICAL_PHRASES):
                return QueryType.NUMERICAL, leading_word
            if self._contains_any(query_lower, self.EXPLANATION_PHRASES):
                return QueryType.EXPLANATION, leading_word
            return QueryType.PROCEDURE, leading_word

        if leading_word == "why":
            return QueryType.REASON, leading_word
        if leading_word == "when":
            return QueryType.TEMPORAL, leading_word

        return QueryType.FACTUAL, leading_word

    def _contains_any(self, query_lower: str, phrases: Tuple[str, ...]) -> bool:
        """Check for phrases anchored at a word start."""
        return bool(self._get_matched_cues(query_lower, phrases))

    def _get_matched_cues(self, query_lower: str, cues: Tuple[str, ...]) -> List[str]:
        """
        Get the cues present in the query.

        Cues must begin at a word boundary so "list" does not fire inside
        "specialist", while inflections such as "compared" still match.
        """
        sorted_cues = sorted(cues, key=len, reverse=True)
        patterns_regex = '|'.join(re.escape(cue) for cue in sorted_cues)
        matches = set(re.findall(rf'\b({patterns_regex})', query_lower))
        return sorted(matches)

    def extract_key_terms(self, query_lower: str) -> List[str]:
        """Stemmed content words longer than three letters, in order, without repeats."""
        key_terms: List[str] = []
        for word in query_lower.split():
            word = re.sub(r"[^a-z0-9]", "", word)
            if len(word) > 3 and not is_stop_word(word):
                term = stem(word)
                if term not in key_terms:
                    key_terms.append(term)
        return key_terms

    def extract_question_words(self, query_lower: str) -> List[str]:
        """Interrogatives found anywhere in the query, in fixed list order."""
        return [word for word in QUESTION_WORDS if word in query_lower]
