"""Chunking engine with sentence-level overlap."""
import logging
import re
from typing import List, Optional

from models.chunk import Chunk
from models.document import Document, DocumentKind
from config import CHUNK_SIZE

logger = logging.getLogger(__name__)


class ChunkingEngine:
    """Segments document text into bounded, overlapping chunks."""

    PARAGRAPH_BREAK = re.compile(r"\n\n+")
    SENTENCE_BREAK = re.compile(r"(?<=[.!?])\s+")
    MAX_OVERLAP_SENTENCES = 2

    def __init__(self, chunk_size: int = CHUNK_SIZE):
        """
        Initialize ChunkingEngine.

        Args:
            chunk_size: Maximum chunk length in characters
        """
        if chunk_size <= 0:
            raise ValueError("chunk_size must be positive")
        self.chunk_size = chunk_size

    def chunk_document(self, document: Document, text: Optional[str] = None) -> List[Chunk]:
        """
        Chunk a document, optionally using pre-normalized text.

        Args:
            document: Source document
            text: Text to chunk (defaults to document.raw_text)

        Returns:
            List of Chunk objects in document order
        """
        return self.chunk_text(
            document_id=document.document_id,
            display_name=document.display_name,
            text=document.raw_text if text is None else text,
            kind=document.declared_kind,
        )

    def chunk_text(
        self,
        document_id: str,
        display_name: str,
        text: str,
        kind: DocumentKind = DocumentKind.UNKNOWN
    ) -> List[Chunk]:
        """
        Split text into chunks on paragraph boundaries, then sentences.

        A paragraph that fits within chunk_size becomes one chunk verbatim;
        longer paragraphs are packed sentence by sentence, each new chunk
        seeded with the last sentences of the previous one. Text without
        blank lines is a single paragraph.

        Args:
            document_id: Identifier of the source document
            display_name: Human-readable document name
            text: Document text
            kind: Declared kind of the source document

        Returns:
            List of chunks for this text
        """
        if not text or not text.strip():
            return []

        pieces: List[str] = []
        for paragraph in self.PARAGRAPH_BREAK.split(text):
            paragraph = paragraph.strip()
            if not paragraph:
                continue

            if len(paragraph) <= self.chunk_size:
                pieces.append(paragraph)
            else:
                pieces.extend(self._split_by_sentences(paragraph))

        chunks = [
            Chunk(
                source_document_id=document_id,
                source_display_name=display_name,
                text=piece,
                declared_kind=kind,
                sequence=idx,
            )
            for idx, piece in enumerate(pieces)
        ]

        logger.info(f"Created {len(chunks)} chunks from {display_name}")
        return chunks

    def _split_by_sentences(self, text: str) -> List[str]:
        """
        Pack sentences into chunks no longer than chunk_size.

        A single sentence longer than chunk_size is emitted on its own.

        Args:
            text: Text to split

        Returns:
            List of chunk texts
        """
        chunks: List[str] = []
        current_sentences: List[str] = []
        current_chunk = ""

        for sentence in self.SENTENCE_BREAK.split(text):
            sentence = sentence.strip()
            if not sentence:
                continue

            if current_chunk and len(current_chunk) + len(sentence) + 1 > self.chunk_size:
                chunks.append(current_chunk)

                # Start new chunk with overlap
                current_sentences = self._overlap_start(current_sentences, sentence)
                current_chunk = " ".join(current_sentences)

            current_chunk = f"{current_chunk} {sentence}" if current_chunk else sentence
            current_sentences.append(sentence)

        # Add the last chunk if it has content
        if current_chunk:
            chunks.append(current_chunk)

        return chunks

    def _overlap_start(self, sentences: List[str], next_sentence: str) -> List[str]:
        """
        Pick the trailing sentences that seed the next chunk.

        Overlap is dropped oldest-first until the seed plus the incoming
        sentence fits within chunk_size.
        """
        if len(sentences) <= 1:
            return []

        overlap = sentences[-self.MAX_OVERLAP_SENTENCES:]
        while overlap and len(" ".join(overlap + [next_sentence])) > self.chunk_size:
            overlap = overlap[1:]
        return overlap
