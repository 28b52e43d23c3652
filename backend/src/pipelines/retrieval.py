import logging
from typing import Optional

from adapters import BaseEmbedder
from models.chunk import SearchResult
from stores import BaseVectorStore
from .base import DEFAULT_TOP_K

logger = logging.getLogger(__name__)


class Retriever:
    """Embeds a query and finds its nearest stored chunks."""

    def __init__(
        self,
        embedder: BaseEmbedder,
        vector_store: BaseVectorStore,
        top_k: int = DEFAULT_TOP_K,
    ):
        if embedder.dimension != vector_store.dimension:
            raise ValueError(
                f"Embedder dimension {embedder.dimension} does not match "
                f"store dimension {vector_store.dimension}"
            )
        self.embedder = embedder
        self.vector_store = vector_store
        self.top_k = top_k

    def retrieve(self, query: str, top_k: Optional[int] = None) -> list[SearchResult]:
        """Retrieve relevant chunks for a query, most similar first."""
        k = self.top_k if top_k is None else top_k
        logger.info(f"Embedding query: {query[:50]}...")

        query_embedding = self.embedder.embed(query)
        results = self.vector_store.search(query_embedding, k=k)

        logger.info(f"Found {len(results)} results")
        return results


def format_context(results: list[SearchResult]) -> str:
    """One numbered block per result: source, similarity, then content."""
    blocks = [
        f"[{i}] Source: {result.source} (similarity: {result.similarity:.3f})\n"
        f"{result.content}"
        for i, result in enumerate(results, start=1)
    ]
    return "\n\n".join(blocks)
