"""Services for DocQuery."""
from .document_loader import DocumentLoader
from .chunking_engine import ChunkingEngine
from .chunk_store import ChunkStore, CorpusSnapshot
from .retrieval_engine import RetrievalEngine
from .query_classifier import QueryClassifier
from .response_synthesizer import ResponseSynthesizer, truncate_text
from .query_logger import QueryLogger
from .query_engine import QueryEngine
from .errors import EngineError, QueryEngineError

__all__ = ['DocumentLoader', 'ChunkingEngine', 'ChunkStore', 'CorpusSnapshot', 'RetrievalEngine', 'QueryClassifier', 'ResponseSynthesizer', 'truncate_text', 'QueryLogger', 'QueryEngine', 'EngineError', 'QueryEngineError']
