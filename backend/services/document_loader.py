"""Document loading service for text-family files."""
import logging
import os
from typing import List, Optional

from models.document import Document, DocumentKind

logger = logging.getLogger(__name__)

SUPPORTED_EXTENSIONS = (".txt", ".md", ".xml", ".html", ".htm")


class DocumentLoader:
    """Loads already-textual files from a directory into Documents."""

    def __init__(self, docs_directory: str = "docs", encoding: str = "utf-8"):
        """
        Initialize DocumentLoader.

        Args:
            docs_directory: Path to directory containing the documents
            encoding: Text encoding used to read the files
        """
        self.docs_directory = docs_directory
        self.encoding = encoding

    def load_documents(self) -> List[Document]:
        """
        Load all supported files from the documents directory.

        Binary formats (PDF, Word) need an external extractor and are skipped.

        Returns:
            List of Document objects, ordered by file name
        """
        documents = []

        if not os.path.isdir(self.docs_directory):
            logger.error(f"Documents directory not found: {self.docs_directory}")
            return documents

        filenames = sorted(
            f for f in os.listdir(self.docs_directory)
            if os.path.isfile(os.path.join(self.docs_directory, f))
        )
        logger.info(f"Found {len(filenames)} files in {self.docs_directory}")

        for filename in filenames:
            if not filename.lower().endswith(SUPPORTED_EXTENSIONS):
                logger.warning(f"Skipping unsupported file: {filename}")
                continue

            filepath = os.path.join(self.docs_directory, filename)
            try:
                document = self.load_file(filepath)
                if document:
                    documents.append(document)
                    logger.info(f"Loaded {filename}: {len(document.raw_text)} characters")
            except (OSError, UnicodeDecodeError) as e:
                logger.error(f"Error loading {filename}: {str(e)}")
                # Skip unreadable file and continue
                continue

        logger.info(f"Successfully loaded {len(documents)} documents")
        return documents

    def load_file(self, filepath: str, document_id: Optional[str] = None) -> Optional[Document]:
        """
        Load a single file.

        Args:
            filepath: Full path to the file
            document_id: Identifier to register (defaults to the file name)

        Returns:
            Document, or None when the file is empty
        """
        filename = os.path.basename(filepath)
        with open(filepath, "r", encoding=self.encoding) as f:
            text = f.read()

        if not text.strip():
            logger.warning(f"File is empty: {filename}")
            return None

        return Document(
            document_id=document_id or filename,
            display_name=filename,
            raw_text=text,
            declared_kind=DocumentKind.from_filename(filename),
        )
