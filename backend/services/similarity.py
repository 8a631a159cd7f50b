"""
Composite lexical similarity for DocQuery.

Scores two arbitrary strings without embeddings by mixing keyword overlap,
synonym overlap, substring containment and a crude TF-IDF cosine. The
weighted sums are reproduced as-is; they are not renormalized to [0, 1].
"""

import math
from typing import Dict, List, Set

import numpy as np

from services.lexical import (
    QUESTION_WORDS,
    STOP_WORDS,
    are_synonyms,
    extract_keywords,
    extract_phrases,
)

# Base similarity weights
JACCARD_WEIGHT = 0.3
SYNONYM_WEIGHT = 0.3
SUBSTRING_WEIGHT = 0.2
TFIDF_WEIGHT = 0.2

# Enhanced similarity weights (question-word boost added)
ENHANCED_JACCARD_WEIGHT = 0.25
ENHANCED_SYNONYM_WEIGHT = 0.25
ENHANCED_SUBSTRING_WEIGHT = 0.2
ENHANCED_TFIDF_WEIGHT = 0.2
ENHANCED_QUESTION_WEIGHT = 0.1

QUESTION_BOOST_STEP = 0.1
QUESTION_BOOST_CAP = 0.3

PHRASE_MATCH_THRESHOLD = 0.6
RELEVANCE_CUTOFF = 0.15


def _is_blank(text: str) -> bool:
    return text is None or not text.strip()


def jaccard_similarity(words1: Set[str], words2: Set[str]) -> float:
    """Intersection over union of two keyword sets."""
    union = words1 | words2
    if not union:
        return 0.0
    return len(words1 & words2) / len(union)


def synonym_similarity(words1: Set[str], words2: Set[str]) -> float:
    """Fraction of cross-set word pairs that are synonyms (identity included)."""
    total_comparisons = len(words1) * len(words2)
    if total_comparisons == 0:
        return 0.0

    synonym_matches = sum(
        1 for word1 in words1 for word2 in words2 if are_synonyms(word1, word2)
    )
    return synonym_matches / total_comparisons


def substring_similarity(text1: str, text2: str) -> float:
    """
    Fraction of longer words (len > 3) on the shorter side that overlap a word
    on the other side by containment in either direction.
    """
    words1 = text1.lower().split()
    words2 = text2.lower().split()

    shorter, other = (words1, words2) if len(words1) <= len(words2) else (words2, words1)
    if not shorter:
        return 0.0

    matches = 0
    for word in shorter:
        if len(word) <= 3:
            continue
        if any(candidate in word or word in candidate for candidate in other):
            matches += 1

    return matches / len(shorter)


def _simple_tfidf(words: Set[str], text: str) -> Dict[str, float]:
    # Term counts use the raw tokens, so a stemmed keyword only counts where
    # the token already matches its stem exactly.
    all_words = text.lower().split()
    total_words = len(all_words)
    tfidf = {}
    for word in words:
        count = all_words.count(word)
        tf = count / total_words if total_words else 0.0
        idf = math.log(1.0 + len(word) / 5.0)
        tfidf[word] = tf * idf
    return tfidf


def tfidf_similarity(words1: Set[str], words2: Set[str], text1: str, text2: str) -> float:
    """Cosine similarity of per-string TF-IDF vectors over the keyword union."""
    tfidf1 = _simple_tfidf(words1, text1)
    tfidf2 = _simple_tfidf(words2, text2)

    vocabulary = sorted(words1 | words2)
    if not vocabulary:
        return 0.0

    vector1 = np.array([tfidf1.get(word, 0.0) for word in vocabulary])
    vector2 = np.array([tfidf2.get(word, 0.0) for word in vocabulary])

    norm1 = np.linalg.norm(vector1)
    norm2 = np.linalg.norm(vector2)
    if norm1 == 0.0 or norm2 == 0.0:
        return 0.0

    return float(np.dot(vector1, vector2) / (norm1 * norm2))


def question_word_boost(text1: str, text2: str) -> float:
    """0.1 per interrogative present in both strings, capped at 0.3."""
    lower1 = text1.lower()
    lower2 = text2.lower()
    boost = sum(
        QUESTION_BOOST_STEP for word in QUESTION_WORDS if word in lower1 and word in lower2
    )
    return min(boost, QUESTION_BOOST_CAP)


def score_components(text1: str, text2: str) -> Dict[str, float]:
    """
    Compute every lexical signal for a pair of strings.

    Returns:
        Dictionary with jaccard, synonym, substring and tfidf scores
    """
    words1 = extract_keywords(text1)
    words2 = extract_keywords(text2)

    return {
        "jaccard": jaccard_similarity(words1, words2),
        "synonym": synonym_similarity(words1, words2),
        "substring": substring_similarity(text1, text2),
        "tfidf": tfidf_similarity(words1, words2, text1, text2),
    }


def similarity(text1: str, text2: str) -> float:
    """
    Base composite similarity of two strings.

    Returns:
        0.3*Jaccard + 0.3*Synonym + 0.2*Substring + 0.2*TFIDF, or 0.0 when
        either side is empty
    """
    if _is_blank(text1) or _is_blank(text2):
        return 0.0

    components = score_components(text1, text2)
    return (
        components["jaccard"] * JACCARD_WEIGHT
        + components["synonym"] * SYNONYM_WEIGHT
        + components["substring"] * SUBSTRING_WEIGHT
        + components["tfidf"] * TFIDF_WEIGHT
    )


def enhanced_similarity(text1: str, text2: str) -> float:
    """Base signals reweighted with the shared question-word boost."""
    if _is_blank(text1) or _is_blank(text2):
        return 0.0

    components = score_components(text1, text2)
    return (
        components["jaccard"] * ENHANCED_JACCARD_WEIGHT
        + components["synonym"] * ENHANCED_SYNONYM_WEIGHT
        + components["substring"] * ENHANCED_SUBSTRING_WEIGHT
        + components["tfidf"] * ENHANCED_TFIDF_WEIGHT
        + question_word_boost(text1, text2) * ENHANCED_QUESTION_WEIGHT
    )


def phrase_similarity(text1: str, text2: str) -> float:
    """Fraction of phrases in text1 that have a close phrase in text2."""
    phrases1 = extract_phrases(text1)
    phrases2 = extract_phrases(text2)
    if not phrases1 or not phrases2:
        return 0.0

    matches = 0
    for phrase1 in phrases1:
        for phrase2 in phrases2:
            if similarity(phrase1, phrase2) > PHRASE_MATCH_THRESHOLD:
                matches += 1
                break

    return matches / max(len(phrases1), len(phrases2))


def positional_similarity(text1: str, text2: str) -> float:
    """
    Reward content words that appear at similar relative offsets.

    For each non-stop word of text1, the first equal or synonymous word of
    text2 contributes 1 - |relative position difference|; the result is the
    mean over all such matches.
    """
    words1: List[str] = text1.lower().split()
    words2: List[str] = text2.lower().split()
    if not words1 or not words2:
        return 0.0

    position_score = 0.0
    matches = 0
    for i, word1 in enumerate(words1):
        if word1 in STOP_WORDS or len(word1) <= 2:
            continue

        relative_pos1 = i / len(words1)
        for j, word2 in enumerate(words2):
            if are_synonyms(word1, word2):
                relative_pos2 = j / len(words2)
                position_score += 1.0 - abs(relative_pos1 - relative_pos2)
                matches += 1
                break

    return position_score / matches if matches else 0.0


def semantic_similarity(text1: str, text2: str) -> float:
    """0.5 lexical + 0.3 phrase + 0.2 positional similarity."""
    if _is_blank(text1) or _is_blank(text2):
        return 0.0

    return (
        similarity(text1, text2) * 0.5
        + phrase_similarity(text1, text2) * 0.3
        + positional_similarity(text1, text2) * 0.2
    )


def is_relevant(query: str, text: str) -> bool:
    """Check whether text clears the base relevance cutoff for a query."""
    return similarity(query, text) > RELEVANCE_CUTOFF
