from abc import ABC, abstractmethod
from typing import Any, Iterable

from errors import DimensionMismatchError
from models.chunk import SearchResult, TextChunk


class BaseVectorStore(ABC):
    """Abstract base class for vector stores.

    Entries are ``(key, TextChunk, vector)`` triples. Every vector held by
    a store has the store's ``dimension``.
    """

    def __init__(self, dimension: int, **kwargs: Any):
        if dimension <= 0:
            raise ValueError("dimension must be positive")
        self.dimension = dimension

    def check_dimension(self, vector: list[float]) -> None:
        if len(vector) != self.dimension:
            raise DimensionMismatchError(self.dimension, len(vector))

    def upsert(self, key: str, chunk: TextChunk, vector: list[float]) -> None:
        """Insert or replace the entry stored under ``key``."""
        self.upsert_many([(key, chunk, vector)])

    @abstractmethod
    def upsert_many(self, items: Iterable[tuple[str, TextChunk, list[float]]]) -> None:
        """Insert or replace several entries at once."""
        pass

    @abstractmethod
    def search(self, query_embedding: list[float], k: int = 3) -> list[SearchResult]:
        """Return up to k entries by descending cosine similarity."""
        pass

    @abstractmethod
    def delete(self, key: str) -> bool:
        """Delete one entry. Returns False if the key is unknown."""
        pass

    @abstractmethod
    def remove_source(self, source: str) -> int:
        """Delete every entry of a source. Returns the number removed."""
        pass

    @abstractmethod
    def clear(self) -> None:
        """Delete all entries from the store."""
        pass

    @property
    @abstractmethod
    def count(self) -> int:
        """Return the number of vectors in the store."""
        pass
