from .base import BaseTextSplitter, document_source
from .character import (
    DEFAULT_CHUNK_OVERLAP,
    DEFAULT_CHUNK_SIZE,
    CharacterTextSplitter,
)

TextSplitter = CharacterTextSplitter

__all__ = [
    "BaseTextSplitter",
    "CharacterTextSplitter",
    "TextSplitter",
    "document_source",
    "DEFAULT_CHUNK_SIZE",
    "DEFAULT_CHUNK_OVERLAP",
]
