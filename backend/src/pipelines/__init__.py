from .base import (
    DEFAULT_CHUNK_OVERLAP,
    DEFAULT_CHUNK_SIZE,
    DEFAULT_CONTEXT_TEMPLATE,
    DEFAULT_TOP_K,
    create_backend_from_config,
    create_embedder_from_config,
    create_session_from_config,
    create_vector_store_from_config,
    get_vector_store_paths,
)
from .ingestion import DEFAULT_BATCH_SIZE, IngestionPipeline, run_ingestion
from .orchestrator import QueryOrchestrator
from .retrieval import Retriever, format_context

__all__ = [
    "IngestionPipeline",
    "run_ingestion",
    "QueryOrchestrator",
    "Retriever",
    "format_context",
    "create_backend_from_config",
    "create_embedder_from_config",
    "create_session_from_config",
    "create_vector_store_from_config",
    "get_vector_store_paths",
    "DEFAULT_CONTEXT_TEMPLATE",
    "DEFAULT_BATCH_SIZE",
    "DEFAULT_CHUNK_SIZE",
    "DEFAULT_CHUNK_OVERLAP",
    "DEFAULT_TOP_K",
]
