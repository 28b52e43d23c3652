from .chunk import SearchResult, TextChunk, make_chunk_id
from .conversation import BackendHandle, ConversationTurn, Role

__all__ = [
    "BackendHandle",
    "ConversationTurn",
    "Role",
    "SearchResult",
    "TextChunk",
    "make_chunk_id",
]
