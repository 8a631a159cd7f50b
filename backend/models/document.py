"""Document data models."""
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class DocumentKind(str, Enum):
    """Declared file kind of an uploaded document."""
    TEXT = "text"
    PDF = "pdf"
    WORD = "word"
    XML = "xml"
    HTML = "html"
    UNKNOWN = "unknown"

    @classmethod
    def from_filename(cls, filename: str, mime_type: Optional[str] = None) -> "DocumentKind":
        """
        Infer the declared kind from a file name, falling back to a MIME type.

        Args:
            filename: Name of the uploaded file
            mime_type: Optional MIME type reported by the host

        Returns:
            Matching DocumentKind, UNKNOWN when nothing matches
        """
        extension = ""
        if filename:
            last_dot = filename.rfind(".")
            if 0 < last_dot < len(filename) - 1:
                extension = filename[last_dot + 1:].lower()

        if extension in _EXTENSION_KINDS:
            return _EXTENSION_KINDS[extension]

        if mime_type:
            mime_lower = mime_type.lower()
            if mime_lower in _MIME_KINDS:
                return _MIME_KINDS[mime_lower]
            if "word" in mime_lower:
                return cls.WORD

        return cls.UNKNOWN


_EXTENSION_KINDS = {
    "txt": DocumentKind.TEXT,
    "md": DocumentKind.TEXT,
    "pdf": DocumentKind.PDF,
    "doc": DocumentKind.WORD,
    "docx": DocumentKind.WORD,
    "xml": DocumentKind.XML,
    "html": DocumentKind.HTML,
    "htm": DocumentKind.HTML,
}

_MIME_KINDS = {
    "text/plain": DocumentKind.TEXT,
    "application/pdf": DocumentKind.PDF,
    "application/msword": DocumentKind.WORD,
    "application/xml": DocumentKind.XML,
    "text/xml": DocumentKind.XML,
    "text/html": DocumentKind.HTML,
}


@dataclass(frozen=True)
class Document:
    """Represents an uploaded document whose text has already been extracted."""
    document_id: str
    display_name: str
    raw_text: str
    declared_kind: DocumentKind = DocumentKind.UNKNOWN
