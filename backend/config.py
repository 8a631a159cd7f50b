"""Configuration management for DocQuery."""
import os
import logging
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# Server Configuration
PORT = int(os.getenv("PORT", "8000"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FORMAT = os.getenv("LOG_FORMAT", "text")  # "text" or "json"

# CORS Configuration
CORS_ORIGINS = os.getenv(
    "CORS_ORIGINS",
    "http://localhost:3000,http://localhost:3001"
).split(",")

# Chunking Configuration
CHUNK_SIZE = int(os.getenv("CHUNK_SIZE", "400"))  # characters

# Retrieval Configuration
DEFAULT_TOP_K = int(os.getenv("DEFAULT_TOP_K", "5"))
ANSWER_TOP_K = int(os.getenv("ANSWER_TOP_K", "8"))
RETRIEVAL_FLOOR = float(os.getenv("RETRIEVAL_FLOOR", "0.0"))
RELEVANCE_FLOOR = float(os.getenv("RELEVANCE_FLOOR", "0.1"))
RELATIVE_CUTOFF = float(os.getenv("RELATIVE_CUTOFF", "0.3"))  # fraction of top score

# Decision log (JSON Lines); disabled when unset
QUERY_LOG_PATH = os.getenv("QUERY_LOG_PATH")

# Logging Configuration
logging.basicConfig(
    level=getattr(logging, LOG_LEVEL),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
