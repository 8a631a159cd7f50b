"""
Unit tests for QueryClassifier.

Tests the leading-word rules, the content overrides and key-term extraction.
"""

import sys
from pathlib import Path

# Add backend to path
sys.path.insert(0, str(Path(__file__).parent.parent / "backend"))

import pytest
from services.query_classifier import QueryClassifier
from models.answer import QueryType


class TestQueryClassifier:
    """Test suite for QueryClassifier class."""

    @pytest.fixture
    def classifier(self):
        """Create a QueryClassifier instance for testing."""
        return QueryClassifier()

    # Leading-word rules

    @pytest.mark.parametrize("query,expected", [
        ("What is Java?", QueryType.DEFINITION),
        ("what are microservices", QueryType.DEFINITION),
        ("What does HTTP stand for?", QueryType.DEFINITION),
        ("What happened in 1990?", QueryType.FACTUAL),
        ("How many users are there?", QueryType.NUMERICAL),
        ("How much does it cost?", QueryType.NUMERICAL),
        ("How does photosynthesis work?", QueryType.EXPLANATION),
        ("How is steel made?", QueryType.EXPLANATION),
        ("How do I reset my password?", QueryType.PROCEDURE),
        ("Why is the sky blue?", QueryType.REASON),
        ("When was the company founded?", QueryType.TEMPORAL),
        ("Where is the office?", QueryType.FACTUAL),
        ("Who wrote the report?", QueryType.FACTUAL),
    ])
    def test_leading_word(self, classifier, query, expected):
        assert classifier.classify_query(query).primary_type == expected

    def test_what_with_steps_is_procedure(self, classifier):
        """Step wording is checked before the definition phrases."""
        result = classifier.classify_query("What are the steps to install the agent?")
        assert result.primary_type == QueryType.PROCEDURE
        assert result.rule_triggered == "leading_word:what"

    def test_leading_word_must_be_whole_word(self, classifier):
        result = classifier.classify_query("Whatever happened next")
        assert result.primary_type == QueryType.GENERAL
        assert result.rule_triggered == "default"

    # Content overrides

    def test_comparison_overrides_how(self, classifier):
        result = classifier.classify_query("how do plants compare to animals")
        assert result.primary_type == QueryType.COMPARISON
        assert result.rule_triggered == "content:comparison"

    @pytest.mark.parametrize("query,expected", [
        ("Python vs Java", QueryType.COMPARISON),
        ("What is the difference between TCP and UDP?", QueryType.COMPARISON),
        ("List the types of cloud services", QueryType.LIST),
        ("Give some examples of sorting algorithms", QueryType.LIST),
        ("Analyze the quarterly results", QueryType.ANALYSIS),
        ("Evaluate the proposal", QueryType.ANALYSIS),
        ("Give me an overview of the project", QueryType.SUMMARY),
        ("Summarize the meeting notes", QueryType.SUMMARY),
    ])
    def test_content_override(self, classifier, query, expected):
        assert classifier.classify_query(query).primary_type == expected

    def test_last_matching_override_wins(self, classifier):
        result = classifier.classify_query("Summarize and compare the two approaches")
        assert result.primary_type == QueryType.SUMMARY
        assert result.rule_triggered == "content:summary"

    def test_cue_inside_word_does_not_fire(self, classifier):
        result = classifier.classify_query("Ask the specialist about it")
        assert result.primary_type == QueryType.GENERAL

    def test_empty_query(self, classifier):
        result = classifier.classify_query("   ")
        assert result.primary_type == QueryType.GENERAL
        assert result.rule_triggered == "default"
        assert result.key_terms == []

    # Extraction

    def test_key_terms(self, classifier):
        result = classifier.classify_query("What are the benefits of cloud computing?")
        assert result.key_terms == ["benefit", "cloud", "comput"]

    def test_key_terms_unique(self, classifier):
        result = classifier.classify_query("cloud cloud clouds")
        assert result.key_terms == ["cloud"]

    def test_question_words(self, classifier):
        result = classifier.classify_query("how and why")
        assert result.question_words == ["why", "how"]

    def test_reasoning_mentions_rule(self, classifier):
        result = classifier.classify_query("Why is the sky blue?")
        assert result.rule_triggered == "leading_word:why"
        assert "why" in result.reasoning
