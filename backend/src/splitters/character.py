from models.chunk import TextChunk, make_chunk_id
from .base import BaseTextSplitter

DEFAULT_CHUNK_SIZE = 500
DEFAULT_CHUNK_OVERLAP = 50


class CharacterTextSplitter(BaseTextSplitter):
    """Fixed-size character windows with a constant overlap.

    The window advances by ``chunk_size - chunk_overlap`` characters.
    Windows that are blank after trimming are skipped but still advance,
    and the last window may be shorter than ``chunk_size``.
    """

    def __init__(
        self,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        chunk_overlap: int = DEFAULT_CHUNK_OVERLAP,
    ):
        if chunk_size <= 0 or chunk_overlap <= 0:
            raise ValueError("chunk_size and chunk_overlap must be positive")
        if chunk_overlap >= chunk_size:
            raise ValueError(
                f"chunk_overlap ({chunk_overlap}) must be smaller than "
                f"chunk_size ({chunk_size})"
            )
        self.chunk_size = chunk_size
        self.chunk_overlap = chunk_overlap

    @property
    def step(self) -> int:
        return self.chunk_size - self.chunk_overlap

    def split_text(self, text: str, source: str) -> list[TextChunk]:
        text = text.strip()
        chunks: list[TextChunk] = []

        start = 0
        while start < len(text):
            end = min(start + self.chunk_size, len(text))
            content = text[start:end].strip()

            if content:
                ordinal = len(chunks)
                chunks.append(
                    TextChunk(
                        id=make_chunk_id(source, ordinal),
                        content=content,
                        source=source,
                        ordinal=ordinal,
                        metadata={"offset": start},
                    )
                )

            if end >= len(text):
                break
            start += self.step

        return chunks
