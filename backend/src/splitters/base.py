from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from llama_index.core.schema import Document as LlamaDocument

if TYPE_CHECKING:
    from models.chunk import TextChunk


def document_source(document: LlamaDocument) -> str:
    """Source label of a loaded document (file name when known)."""
    metadata = document.metadata or {}
    return metadata.get("file_name") or metadata.get("file_path") or "unknown"


class BaseTextSplitter(ABC):
    """Abstract base class for text splitters."""

    @abstractmethod
    def split_text(self, text: str, source: str) -> list["TextChunk"]:
        """Split raw text from one source into ordered chunks."""
        pass

    def split_documents(self, documents: list[LlamaDocument]) -> list["TextChunk"]:
        """Split loaded documents, one chunk sequence per source.

        Readers may return several documents for one file; their texts are
        joined so that ordinals stay unique per source.
        """
        grouped: dict[str, list[str]] = {}
        for document in documents:
            grouped.setdefault(document_source(document), []).append(document.text)

        chunks = []
        for source, texts in grouped.items():
            chunks.extend(self.split_text("\n\n".join(texts), source))
        return chunks
