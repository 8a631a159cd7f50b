"""Main entry point for the DocQuery API."""
import asyncio
import logging
import time
from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from config import CORS_ORIGINS, LOG_FORMAT, LOG_LEVEL, PORT, QUERY_LOG_PATH
from logger import setup_logging
from models.api import (
    DocumentListResponse,
    DocumentRequest,
    DocumentResponse,
    QueryRequest,
    QueryResponse,
    ResponseMetadata,
)
from services.query_engine import QueryEngine
from services.query_logger import QueryLogger

# Initialize logging
setup_logging(LOG_LEVEL, LOG_FORMAT)
logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title="DocQuery",
    description="Question answering over uploaded documents using lexical retrieval",
    version="1.0.0"
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Initialize services (will be done on startup)
query_engine: QueryEngine = None
query_logger: QueryLogger = None


@app.on_event("startup")
async def startup_event():
    """Initialize services on startup."""
    global query_engine, query_logger

    logger.info("Initializing DocQuery services...")

    try:
        if QUERY_LOG_PATH:
            query_logger = QueryLogger(QUERY_LOG_PATH)
            logger.info("Initialized QueryLogger")

        query_engine = QueryEngine(query_logger=query_logger)

        logger.info("All services initialized successfully")
    except Exception as e:
        logger.error(f"Failed to initialize services: {e}", exc_info=True)
        raise


@app.on_event("shutdown")
async def shutdown_event():
    """Stop the answering worker and close the decision log."""
    if query_engine is not None:
        query_engine.shutdown()
    if query_logger is not None:
        query_logger.close()


@app.get("/")
async def root():
    """Health check endpoint."""
    return {"status": "ok", "message": "DocQuery API"}


@app.get("/health")
async def health():
    """Detailed health check."""
    return {
        "status": "healthy",
        "service": "docquery",
        "version": "1.0.0",
        "documents": len(query_engine.document_names()),
        "chunks": query_engine.chunk_count()
    }


@app.post("/documents", response_model=DocumentResponse, status_code=201)
def add_document_endpoint(request: DocumentRequest) -> DocumentResponse:
    """
    Register the extracted text of a document.

    Registering an existing document_id replaces that document.
    """
    try:
        chunks_added = query_engine.add_document(
            document_id=request.document_id,
            display_name=request.display_name,
            text=request.text,
            declared_kind=request.declared_kind
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return DocumentResponse(
        document_id=request.document_id,
        display_name=request.display_name,
        chunks_added=chunks_added,
        total_chunks=query_engine.chunk_count()
    )


@app.get("/documents", response_model=DocumentListResponse)
def list_documents_endpoint() -> DocumentListResponse:
    """List registered document names."""
    return DocumentListResponse(
        documents=query_engine.document_names(),
        chunk_count=query_engine.chunk_count()
    )


@app.delete("/documents/{document_id}", status_code=204)
def remove_document_endpoint(document_id: str):
    """Remove one document; the chunk index is rebuilt from the rest."""
    if not query_engine.remove_document(document_id):
        raise HTTPException(status_code=404, detail=f"Document not found: {document_id}")


@app.delete("/documents", status_code=204)
def clear_documents_endpoint():
    """Remove every document."""
    query_engine.clear()


@app.post("/query", response_model=QueryResponse)
async def query_endpoint(request: QueryRequest) -> QueryResponse:
    """
    Answer a question against the registered documents.

    The question is queued on the engine's worker, so concurrent requests
    are answered in arrival order. Degenerate input (no documents, blank
    question, nothing relevant) still returns 200 with an explanatory
    answer and an error_code in the metadata.

    Args:
        request: QueryRequest with the question

    Returns:
        QueryResponse with answer, confidence, sources and metadata
    """
    start_time = time.time()

    answer = await asyncio.wrap_future(query_engine.ask(request.question))

    total_latency_ms = int((time.time() - start_time) * 1000)
    classification = answer.classification

    response = QueryResponse(
        answer=answer.text,
        confidence=answer.confidence,
        primary_source=answer.primary_source,
        supplementary_source_count=answer.supplementary_source_count,
        metadata=ResponseMetadata(
            classification=classification.primary_type.value if classification else None,
            rule_triggered=classification.rule_triggered if classification else None,
            key_terms=classification.key_terms if classification else [],
            latency_ms=total_latency_ms,
            error_code=answer.error_code
        )
    )

    logger.info(f"Query processed in {total_latency_ms}ms")
    return response


if __name__ == "__main__":
    import uvicorn
    logger.info(f"Starting DocQuery API on port {PORT}")
    uvicorn.run(app, host="0.0.0.0", port=PORT)
