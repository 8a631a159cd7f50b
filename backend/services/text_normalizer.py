"""Kind-specific cleanup of extracted document text."""
import logging
import re

from models.document import DocumentKind

logger = logging.getLogger(__name__)

_WHITESPACE = re.compile(r"\s+")
_TAG = re.compile(r"<[^>]+>")
_ENTITY = re.compile(r"&[^;]+;")


def _collapse_whitespace(text: str) -> str:
    return _WHITESPACE.sub(" ", text).strip()


def normalize_content(text: str, kind: DocumentKind) -> str:
    """
    Clean extracted text according to the document's declared kind.

    Markup is stripped from XML and HTML; PDF, Word and unknown kinds get
    their whitespace collapsed (which also removes paragraph breaks). Plain
    text is only trimmed so its paragraph structure survives chunking.

    Args:
        text: Text handed over by the external extractor
        kind: Declared kind of the source document

    Returns:
        Normalized text, empty string for blank input
    """
    if not text or not text.strip():
        return ""

    if kind == DocumentKind.TEXT:
        return text.strip()
    if kind == DocumentKind.PDF:
        return _collapse_whitespace(text)
    if kind == DocumentKind.WORD:
        return _collapse_whitespace(text.replace("\r\n", "\n"))
    if kind == DocumentKind.XML:
        return _collapse_whitespace(_TAG.sub("", text))
    if kind == DocumentKind.HTML:
        return _collapse_whitespace(_ENTITY.sub("", _TAG.sub("", text)))

    logger.debug(f"Applying generic normalization for kind: {kind}")
    return _collapse_whitespace(text)
