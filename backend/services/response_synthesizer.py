"""Template-driven answer synthesis from retrieved chunks."""
import logging
import re
from typing import Callable, Dict, List, Optional

from models.answer import QueryClassification, QueryType

logger = logging.getLogger(__name__)

ELLIPSIS = "..."


def truncate_text(text: str, max_length: int) -> str:
    """
    Shorten text to max_length, preferring a word boundary.

    Text that already fits is returned trimmed. Otherwise it is cut at
    max_length, pulled back to the last space when that space lies beyond
    80% of the limit, and suffixed with an ellipsis.

    Args:
        text: Text to shorten
        max_length: Character limit before the ellipsis

    Returns:
        Trimmed or truncated text
    """
    if len(text) <= max_length:
        return text.strip()

    truncated = text[:max_length]
    last_space = truncated.rfind(" ")
    if last_space > max_length * 0.8:
        truncated = truncated[:last_space]

    return truncated.strip() + ELLIPSIS


class ResponseSynthesizer:
    """Build structured answer text for each query type."""

    DEFINITION_CUES = ("is defined as", "refers to", "means", "definition of")
    CAUSAL_CUES = ("because", "reason", "due to", "since", "as a result", "therefore")
    PROCEDURE_CUES = ("step", "procedure", "process", "method")
    TIME_CUES = ("year", "month", "day", "time", "date", "when", "before", "after", "during")

    NUMBERED_ITEM = re.compile(r"(?:^|\s)\d+[.):]\s+(.+?)(?=\s\d+[.):]\s|$)", re.DOTALL)
    BULLET_ITEM = re.compile(r"(?:^|\s)[•·-]\s+(.+?)(?=\s[•·-]\s|$)", re.DOTALL)
    STEP_MARKER = r"(?:\bstep\s*\d+\b|(?<!\S)\d+[.):]|\b(?:first|second|third|then|next|finally)\b)"
    STEP_ITEM = re.compile(
        STEP_MARKER + r"[:.,\s]*(.+?)(?=" + STEP_MARKER + r"|$)",
        re.IGNORECASE | re.DOTALL,
    )
    DIGIT = re.compile(r"\d")

    MAX_LIST_ITEMS = 8
    MIN_STEP_LENGTH = 10
    PRIMARY_CHUNK_COUNT = 3
    SUPPLEMENTARY_CHUNK_COUNT = 3

    def __init__(self):
        """Initialize the builder table; every QueryType must have a builder."""
        self._builders: Dict[QueryType, Callable[[str, List[str], QueryClassification], str]] = {
            QueryType.DEFINITION: self._definition_response,
            QueryType.COMPARISON: self._comparison_response,
            QueryType.LIST: self._list_response,
            QueryType.REASON: self._reason_response,
            QueryType.EXPLANATION: self._explanation_response,
            QueryType.PROCEDURE: self._procedure_response,
            QueryType.FACTUAL: self._factual_response,
            QueryType.ANALYSIS: self._analysis_response,
            QueryType.SUMMARY: self._summary_response,
            QueryType.NUMERICAL: self._numerical_response,
            QueryType.TEMPORAL: self._temporal_response,
            QueryType.GENERAL: self._adaptive_response,
        }
        missing = set(QueryType) - set(self._builders)
        if missing:
            raise RuntimeError(f"No response builder for query types: {sorted(t.value for t in missing)}")

    def synthesize(
        self,
        query: str,
        chunks: List[str],
        classification: QueryClassification
    ) -> str:
        """
        Generate answer text for a classified query.

        Args:
            query: User question
            chunks: Chunk texts, most relevant first
            classification: Result of QueryClassifier.classify_query

        Returns:
            Answer text, with a supplementary block when more than three
            chunks were selected
        """
        builder = self._builders[classification.primary_type]
        logger.debug(f"Synthesizing {classification.primary_type.value} response from {len(chunks)} chunks")
        response = builder(query, chunks, classification)

        if len(chunks) > self.PRIMARY_CHUNK_COUNT:
            extra = chunks[self.PRIMARY_CHUNK_COUNT:self.PRIMARY_CHUNK_COUNT + self.SUPPLEMENTARY_CHUNK_COUNT]
            lines = [f"• {truncate_text(chunk, 150)}" for chunk in extra]
            response += "\n\n**Additional relevant information:**\n" + "\n".join(lines)

        return response.strip()

    # ------------------------------------------------------------------
    # Builders
    # ------------------------------------------------------------------

    def _definition_response(self, query, chunks, classification):
        parts = ["**Definition:**"]

        best_definition = self.find_best_definition(chunks, classification.key_terms)
        if best_definition is not None:
            parts.append(best_definition)

        others = [chunk for chunk in chunks if chunk.strip() != best_definition][:2]
        for chunk in others:
            parts.append(f"**Additional context:** {truncate_text(chunk, 200)}")

        return "\n\n".join(parts)

    def _comparison_response(self, query, chunks, classification):
        parts = ["**Comparison Analysis:**"]
        for i, chunk in enumerate(chunks[:4], start=1):
            parts.append(f"**Point {i}:** {truncate_text(chunk, 250)}")
        return "\n\n".join(parts)

    def _list_response(self, query, chunks, classification):
        list_items = self.extract_list_items(chunks)
        if list_items:
            lines = [f"• {item}" for item in list_items[:self.MAX_LIST_ITEMS]]
            return "**List of Items:**\n\n" + "\n".join(lines)

        parts = ["**List of Items:**"]
        parts.extend(f"• {truncate_text(chunk, 200)}" for chunk in chunks[:5])
        return "\n\n".join(parts)

    def _reason_response(self, query, chunks, classification):
        parts = ["**Reasons/Explanations:**"]
        causal = [chunk for chunk in chunks if self._contains_any(chunk, self.CAUSAL_CUES)]
        if not causal:
            causal = chunks[:1]
        parts.extend(f"• {truncate_text(chunk, 300)}" for chunk in causal)
        return "\n\n".join(parts)

    def _explanation_response(self, query, chunks, classification):
        parts = ["**Explanation:**"]
        parts.extend(chunk.strip() for chunk in chunks[:3])
        return "\n\n".join(parts)

    def _procedure_response(self, query, chunks, classification):
        parts = ["**Procedure/Steps:**"]

        steps = self.extract_steps(chunks)
        if steps:
            parts.extend(f"**Step {i}:** {step}" for i, step in enumerate(steps, start=1))
            return "\n\n".join(parts)

        related = [chunk for chunk in chunks if self._contains_any(chunk, self.PROCEDURE_CUES)]
        if not related:
            related = chunks[:1]
        parts.extend(f"• {truncate_text(chunk, 250)}" for chunk in related)
        return "\n\n".join(parts)

    def _factual_response(self, query, chunks, classification):
        parts = ["**Facts:**"]
        parts.extend(f"• {truncate_text(chunk, 200)}" for chunk in chunks[:4])
        return "\n\n".join(parts)

    def _analysis_response(self, query, chunks, classification):
        parts = ["**Analysis:**"]
        for i, chunk in enumerate(chunks[:3], start=1):
            parts.append(f"**Aspect {i}:** {truncate_text(chunk, 250)}")
        return "\n\n".join(parts)

    def _summary_response(self, query, chunks, classification):
        combined_text = " ".join(chunks)
        return "**Summary:**\n\n" + truncate_text(combined_text, 500)

    def _numerical_response(self, query, chunks, classification):
        parts = ["**Numerical Information:**"]
        numeric = [chunk for chunk in chunks if self.DIGIT.search(chunk)]
        if not numeric:
            numeric = chunks[:1]
        parts.extend(f"• {truncate_text(chunk, 200)}" for chunk in numeric)
        return "\n\n".join(parts)

    def _temporal_response(self, query, chunks, classification):
        parts = ["**Time-related Information:**"]
        temporal = [chunk for chunk in chunks if self._contains_any(chunk, self.TIME_CUES)]
        if not temporal:
            temporal = chunks[:1]
        parts.extend(f"• {truncate_text(chunk, 200)}" for chunk in temporal)
        return "\n\n".join(parts)

    def _adaptive_response(self, query, chunks, classification):
        parts = ["**Based on your documents:**"]
        parts.extend(f"• {truncate_text(chunk, 250)}" for chunk in chunks[:4])
        return "\n\n".join(parts)

    # ------------------------------------------------------------------
    # Extraction helpers
    # ------------------------------------------------------------------

    def find_best_definition(self, chunks: List[str], key_terms: List[str]) -> Optional[str]:
        """
        Pick the chunk most likely to define the subject.

        Prefers the first chunk with a definitional phrase, then the chunk
        matching the most key terms, then the top chunk.
        """
        for chunk in chunks:
            if self._contains_any(chunk, self.DEFINITION_CUES):
                return chunk.strip()

        best_chunk = None
        max_matches = 0
        for chunk in chunks:
            chunk_lower = chunk.lower()
            matches = sum(1 for term in key_terms if term in chunk_lower)
            if matches > max_matches:
                max_matches = matches
                best_chunk = chunk

        if best_chunk is None and chunks:
            best_chunk = chunks[0]

        return best_chunk.strip() if best_chunk is not None else None

    def extract_list_items(self, chunks: List[str]) -> List[str]:
        """Numbered and bulleted items found in the chunks, in order."""
        items: List[str] = []
        for chunk in chunks:
            for pattern in (self.NUMBERED_ITEM, self.BULLET_ITEM):
                for match in pattern.finditer(chunk):
                    item = match.group(1).strip()
                    if item:
                        items.append(item)
        return items

    def extract_steps(self, chunks: List[str]) -> List[str]:
        """Fragments following sequencing markers, longer than ten characters."""
        steps: List[str] = []
        for chunk in chunks:
            for match in self.STEP_ITEM.finditer(chunk):
                step = match.group(1).strip()
                if len(step) > self.MIN_STEP_LENGTH:
                    steps.append(step)
        return steps

    def _contains_any(self, text: str, cues) -> bool:
        text_lower = text.lower()
        return any(cue in text_lower for cue in cues)
