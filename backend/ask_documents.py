"""
Command-line question answering for DocQuery.

This script:
1. Loads all text-family documents from a directory
2. Chunks and indexes them in memory
3. Answers the questions given with -q, or reads questions from stdin

Usage:
    python ask_documents.py DOCS_DIR [-q QUESTION ...] [--top-k N]
"""
import argparse
import sys
import logging
from pathlib import Path

# Add backend to path
sys.path.insert(0, str(Path(__file__).parent))

from services.document_loader import DocumentLoader
from services.query_engine import QueryEngine
from services.query_logger import QueryLogger
from models.answer import Answer
from config import ANSWER_TOP_K, LOG_FORMAT, QUERY_LOG_PATH
from logger import setup_logging

logger = logging.getLogger(__name__)


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Ask questions about a folder of documents.")
    parser.add_argument("docs_dir", help="Directory containing .txt, .md, .xml or .html files")
    parser.add_argument(
        "-q", "--question",
        action="append",
        dest="questions",
        help="Question to ask (repeatable). Reads stdin when omitted."
    )
    parser.add_argument(
        "--top-k",
        type=int,
        default=ANSWER_TOP_K,
        help=f"Candidate chunks retrieved per question (default: {ANSWER_TOP_K})"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Show info-level logs")
    return parser.parse_args(argv)


def format_answer(answer: Answer) -> str:
    """Render an answer with its confidence and sources."""
    lines = [answer.text]
    if answer.primary_source:
        sources = f"Source: {answer.primary_source}"
        if answer.supplementary_source_count:
            sources += f" (+{answer.supplementary_source_count} more)"
        lines.append("")
        lines.append(f"{sources} | confidence {answer.confidence:.2f}")
    return "\n".join(lines)


def main(argv=None) -> int:
    """Main question answering process."""
    args = parse_args(argv)
    setup_logging("INFO" if args.verbose else "WARNING", LOG_FORMAT)

    if args.top_k <= 0:
        logger.error("--top-k must be positive")
        return 2

    documents = DocumentLoader(docs_directory=args.docs_dir).load_documents()
    if not documents:
        logger.error(f"No documents found in {args.docs_dir}")
        return 1

    query_logger = QueryLogger(QUERY_LOG_PATH) if QUERY_LOG_PATH else None

    try:
        with QueryEngine(query_logger=query_logger, top_k=args.top_k) as engine:
            for document in documents:
                engine.add_document(
                    document.document_id,
                    document.display_name,
                    document.raw_text,
                    document.declared_kind
                )
            print(f"Indexed {len(documents)} documents ({engine.chunk_count()} chunks)")

            questions = args.questions or (line.strip() for line in sys.stdin)
            for question in questions:
                if not question:
                    continue
                answer = engine.ask(question).result()
                print(f"\nQ: {question}\n")
                print(format_answer(answer))
    except KeyboardInterrupt:
        logger.warning("Interrupted by user")
        return 1
    finally:
        if query_logger is not None:
            query_logger.close()

    return 0


if __name__ == "__main__":
    sys.exit(main())
