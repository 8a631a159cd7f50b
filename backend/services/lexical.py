"""
Lexical toolkit for DocQuery.

Static word tables and pure helpers shared by the similarity scorer, the
chunk store and the query classifier: stop words, a crude suffix-stripping
stemmer, a hand-picked synonym table and keyword/phrase extraction.
"""

import re
from typing import Dict, FrozenSet, List, Set

STOP_WORDS: FrozenSet[str] = frozenset({
    "the", "a", "an", "and", "or", "but", "in", "on", "at", "to", "for", "of", "with", "by",
    "is", "are", "was", "were", "be", "been", "have", "has", "had", "do", "does", "did",
    "will", "would", "could", "should", "may", "might", "must", "can", "this", "that",
    "these", "those", "i", "you", "he", "she", "it", "we", "they", "me", "him", "her",
    "us", "them", "my", "your", "his", "its", "our", "their", "mine", "yours", "ours",
    "theirs", "myself", "yourself", "himself", "herself", "itself", "ourselves",
    "yourselves", "themselves", "what", "which", "who", "whom", "whose", "where", "when",
    "why", "how", "all", "any", "both", "each", "few", "more", "most", "other", "some",
    "such", "no", "nor", "not", "only", "own", "same", "so", "than", "too", "very", "just",
})

# Interrogatives used by the question-word boost and the classifier
QUESTION_WORDS = ("what", "who", "where", "when", "why", "how", "which")

SYNONYM_GROUPS = (
    ("big", "large", "huge", "enormous", "massive", "giant", "vast", "immense"),
    ("small", "little", "tiny", "minute", "compact", "mini", "petite"),
    ("good", "excellent", "great", "wonderful", "fantastic", "amazing", "superb", "outstanding"),
    ("bad", "terrible", "awful", "horrible", "poor", "dreadful"),
    ("fast", "quick", "rapid", "swift", "speedy", "hasty", "brisk"),
    ("slow", "sluggish", "gradual", "leisurely", "delayed", "tardy"),
    ("happy", "joyful", "cheerful", "glad", "pleased", "delighted", "content"),
    ("sad", "unhappy", "depressed", "gloomy", "melancholy", "sorrowful"),
    ("important", "significant", "crucial", "vital", "essential", "key", "critical"),
    ("help", "assist", "aid", "support", "facilitate", "enable"),
    ("show", "display", "demonstrate", "exhibit", "present", "reveal"),
    ("create", "make", "build", "construct", "develop", "generate", "produce"),
    ("use", "utilize", "employ", "apply", "implement", "adopt"),
    ("find", "discover", "locate", "identify", "detect", "uncover"),
    ("explain", "describe", "clarify", "elaborate", "detail", "illustrate"),
    ("method", "approach", "technique", "procedure", "process", "way"),
    ("result", "outcome", "consequence", "effect", "conclusion", "finding"),
    ("problem", "issue", "challenge", "difficulty", "obstacle", "trouble"),
    ("solution", "answer", "resolution", "fix", "remedy", "approach"),
)


def _build_synonym_index() -> Dict[str, FrozenSet[str]]:
    # A word listed in two groups keeps the group registered last
    index: Dict[str, FrozenSet[str]] = {}
    for group in SYNONYM_GROUPS:
        members = frozenset(group)
        for word in group:
            index[word] = members
    return index


SYNONYMS: Dict[str, FrozenSet[str]] = _build_synonym_index()

# Ordered (suffix, minimum exclusive word length) rules; first match wins
_SUFFIX_RULES = (
    ("ing", 4),
    ("ed", 3),
    ("ly", 3),
    ("tion", 5),
    ("ment", 5),
    ("ness", 5),
    ("able", 5),
    ("ible", 5),
    ("er", 3),
    ("est", 4),
)

_NON_ALPHANUMERIC = re.compile(r"[^a-zA-Z0-9\s]")
_NON_ALPHA = re.compile(r"[^a-zA-Z]")
_SENTENCE_BREAK = re.compile(r"[.!?]+")


def is_stop_word(word: str) -> bool:
    """Check if a word is in the stop-word list (case-insensitive)."""
    return word.lower() in STOP_WORDS


def stem(word: str) -> str:
    """
    Strip one common English suffix from a word.

    This is a crude approximation, not a real stemmer: suffixes are tried in
    a fixed priority order and only the first match is removed.

    Args:
        word: Lower-case word

    Returns:
        Word with at most one suffix removed
    """
    if len(word) <= 3:
        return word

    for suffix, min_length in _SUFFIX_RULES:
        if word.endswith(suffix) and len(word) > min_length:
            return word[:-len(suffix)]

    if word.endswith("s") and len(word) > 2 and not word.endswith("ss"):
        return word[:-1]

    return word


def are_synonyms(word1: str, word2: str) -> bool:
    """Return True for identical words or words sharing a synonym group."""
    if word1 == word2:
        return True

    group1 = SYNONYMS.get(word1)
    if group1 is not None and word2 in group1:
        return True

    group2 = SYNONYMS.get(word2)
    return group2 is not None and word1 in group2


def extract_keywords(text: str) -> Set[str]:
    """
    Extract normalized content keywords from text.

    Lower-cases, drops punctuation, discards short tokens, stop words and
    numbers, then stems what remains.

    Args:
        text: Arbitrary input text

    Returns:
        Set of stemmed keywords
    """
    if not text:
        return set()

    clean_text = _NON_ALPHANUMERIC.sub("", text.lower())
    keywords = set()
    for word in clean_text.split():
        if len(word) > 2 and word not in STOP_WORDS and not word.isdigit():
            keywords.add(stem(word))
    return keywords


def extract_phrases(text: str) -> List[str]:
    """
    Extract short phrases (2-5 words) that carry at least one content word.

    Each sentence of the text is a phrase candidate; its words are reduced
    to lower-case letters.

    Args:
        text: Arbitrary input text

    Returns:
        Phrases in order of appearance
    """
    phrases = []
    for sentence in _SENTENCE_BREAK.split(text):
        words = sentence.split()
        if not 2 <= len(words) <= 5:
            continue

        clean_words = [_NON_ALPHA.sub("", word).lower() for word in words]
        has_important_word = any(
            word not in STOP_WORDS and len(word) > 2 for word in clean_words
        )
        if has_important_word:
            phrases.append(" ".join(clean_words))

    return phrases
