from pathlib import Path
from typing import Any, Optional

from .base import BaseVectorStore
from .faiss import FAISSVectorStore

VectorStore = FAISSVectorStore


def create_vector_store(
    provider: str,
    dimension: int,
    index_path: Optional[Path] = None,
    metadata_path: Optional[Path] = None,
    **kwargs: Any,
) -> BaseVectorStore:
    """Create a vector store instance based on provider.

    Args:
        provider: Provider name (currently only "faiss" supported)
        dimension: Embedding dimension
        index_path: Optional FAISS index file for persistence
        metadata_path: Optional JSON entries file for persistence
        **kwargs: Additional provider-specific parameters

    Returns:
        BaseVectorStore instance
    """
    if provider == "faiss":
        return FAISSVectorStore(
            dimension=dimension,
            index_path=index_path,
            metadata_path=metadata_path,
            **kwargs,
        )
    raise ValueError(f"Unknown vector store provider: {provider}")


__all__ = ["BaseVectorStore", "FAISSVectorStore", "VectorStore", "create_vector_store"]
