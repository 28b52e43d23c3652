"""Data models for indexed text."""

import uuid
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

CHUNK_NAMESPACE = uuid.UUID("8f0e5b8e-4c1d-4a57-9a39-2a5f0c6d7e11")


def make_chunk_id(source: str, ordinal: int) -> str:
    """Derive a stable chunk identifier from its source and position."""
    return str(uuid.uuid5(CHUNK_NAMESPACE, f"{source}#{ordinal}"))


class TextChunk(BaseModel):
    """A bounded slice of source text, the unit of retrieval.

    Attributes:
        id: Stable identifier derived from source and ordinal.
        content: Trimmed, non-empty chunk text.
        source: Label of the originating document (e.g. "data.txt").
        ordinal: Emission order of the chunk within its source.
        metadata: Extra attributes such as the character offset.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    content: str = Field(min_length=1)
    source: str
    ordinal: int = Field(ge=0)
    metadata: dict[str, Any] = Field(default_factory=dict)


class SearchResult(BaseModel):
    """A retrieved chunk with its similarity to the query.

    Attributes:
        key: Index key of the matching entry.
        content: The chunk text.
        source: The chunk's source label.
        similarity: Cosine similarity clamped to [0, 1]; 1.0 means same direction.
        metadata: Remaining stored attributes of the entry.
    """

    key: str
    content: str
    source: str
    similarity: float
    metadata: dict[str, Any] = Field(default_factory=dict)
