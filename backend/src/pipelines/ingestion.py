import hashlib
import json
import logging
from pathlib import Path
from typing import Any

from adapters import BaseEmbedder
from config import get_config_value, get_ingestion_dir, get_storage_dir
from loaders import BaseDocumentLoader, DocumentLoader
from models.chunk import TextChunk
from splitters import BaseTextSplitter, TextSplitter, document_source
from stores import BaseVectorStore
from .base import (
    DEFAULT_CHUNK_OVERLAP,
    DEFAULT_CHUNK_SIZE,
    create_embedder_from_config,
    create_vector_store_from_config,
)

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 100
TRACKING_FILE = "processed_files.json"


def compute_file_hash(file_path: Path) -> str:
    """MD5 of a file's bytes, used to detect changed documents."""
    hasher = hashlib.md5()
    with open(file_path, "rb") as f:
        for block in iter(lambda: f.read(8192), b""):
            hasher.update(block)
    return hasher.hexdigest()


class IngestionPipeline:
    """Pipeline for chunking documents and storing their embeddings.

    Chunks are upserted under their ids, which are stable per source and
    position. A source's previous entries are removed before it is
    re-ingested so a shortened document leaves no stale chunks behind.
    """

    def __init__(
        self,
        embedder: BaseEmbedder,
        splitter: BaseTextSplitter,
        loader: BaseDocumentLoader,
        vector_store: BaseVectorStore,
        config: dict[str, Any] | None = None,
        config_path: Path | None = None,
        batch_size: int = DEFAULT_BATCH_SIZE,
    ):
        self.embedder = embedder
        self.splitter = splitter
        self.loader = loader
        self.vector_store = vector_store
        self.config = config or {}
        self.config_path = config_path
        self.batch_size = batch_size

        self._processed_files: dict[str, str] = {}  # filepath -> hash

    @classmethod
    def from_config(
        cls, config: dict[str, Any], config_path: Path
    ) -> "IngestionPipeline":
        """Create pipeline from configuration dictionary."""
        embedder = create_embedder_from_config(config)

        splitter = TextSplitter(
            chunk_size=get_config_value(
                config, "ingestion.chunk_size", DEFAULT_CHUNK_SIZE
            ),
            chunk_overlap=get_config_value(
                config, "ingestion.chunk_overlap", DEFAULT_CHUNK_OVERLAP
            ),
        )

        return cls(
            embedder=embedder,
            splitter=splitter,
            loader=DocumentLoader(get_ingestion_dir(config, config_path)),
            vector_store=create_vector_store_from_config(config, config_path, embedder),
            config=config,
            config_path=config_path,
            batch_size=get_config_value(
                config, "ingestion.batch_size", DEFAULT_BATCH_SIZE
            ),
        )

    def _embed_chunks(self, chunks: list[TextChunk]) -> list[list[float]]:
        """Embed chunk contents batch by batch."""
        embeddings: list[list[float]] = []
        for i in range(0, len(chunks), self.batch_size):
            batch = chunks[i : i + self.batch_size]
            embeddings.extend(self.embedder.embed_batch([c.content for c in batch]))
        return embeddings

    def _replace_sources(self, sources: set[str], chunks: list[TextChunk]) -> int:
        """Swap the stored entries of ``sources`` for ``chunks``.

        Every chunk is embedded before the store is touched, so a failing
        embedder leaves the previous entries in place.
        """
        embeddings = self._embed_chunks(chunks)

        for source in sources:
            removed = self.vector_store.remove_source(source)
            if removed:
                logger.info(f"Removed {removed} previous chunks of {source}")

        self.vector_store.upsert_many(
            (chunk.id, chunk, embedding)
            for chunk, embedding in zip(chunks, embeddings)
        )
        return len(chunks)

    def ingest_text(self, text: str, source: str) -> int:
        """Replace a source's entries with the chunks of ``text``."""
        chunks = self.splitter.split_text(text, source)
        stored = self._replace_sources({source}, chunks)
        logger.info(f"Stored {stored} chunks from {source}")
        return stored

    def _ingest_documents(self, documents: list[Any]) -> int:
        sources = {document_source(document) for document in documents}
        chunks = self.splitter.split_documents(documents)
        logger.info(f"Created {len(chunks)} chunks from {len(sources)} sources")
        return self._replace_sources(sources, chunks)

    def _tracking_file(self) -> Path | None:
        if not self.config_path:
            return None
        return get_storage_dir(self.config, self.config_path) / TRACKING_FILE

    def _load_processed_files(self) -> dict[str, str]:
        tracking_file = self._tracking_file()
        if tracking_file and tracking_file.exists():
            try:
                with open(tracking_file, "r") as f:
                    return json.load(f)
            except (json.JSONDecodeError, IOError) as e:
                logger.warning(f"Ignoring unreadable {tracking_file}: {e}")
        return {}

    def _save_processed_files(self) -> None:
        tracking_file = self._tracking_file()
        if not tracking_file:
            return
        tracking_file.parent.mkdir(parents=True, exist_ok=True)
        with open(tracking_file, "w") as f:
            json.dump(self._processed_files, f, indent=2)

    def _get_changed_files(self, files: list[Path]) -> list[tuple[Path, bool]]:
        """Files that are new or whose content hash changed.

        Returns:
            List of (file_path, is_new) tuples
        """
        results = []
        for file_path in files:
            str_path = str(file_path)
            if str_path not in self._processed_files:
                results.append((file_path, True))
            elif self._processed_files[str_path] != compute_file_hash(file_path):
                results.append((file_path, False))
        return results

    def process_all_documents(self, force: bool = False) -> dict[str, Any]:
        """Load, chunk and embed every document in the ingestion directory."""
        if force:
            logger.info("Force re-indexing - clearing existing index")
            self.vector_store.clear()
            self._processed_files = {}

        logger.info("Loading documents...")
        documents = self.loader.load()
        logger.info(f"Loaded {len(documents)} documents")

        embeddings_count = self._ingest_documents(documents)

        for file_path in self.loader.discover_files():
            self._processed_files[str(file_path)] = compute_file_hash(file_path)
        self._save_processed_files()

        return {
            "documents": len(documents),
            "chunks": embeddings_count,
            "embeddings": embeddings_count,
            "total_vectors": self.vector_store.count,
        }

    def process_new_and_changed_documents(
        self,
        files: list[Path] | None = None,
    ) -> dict[str, Any]:
        """Only re-ingest files that are new or changed since the last run."""
        self._processed_files = self._load_processed_files()

        candidates = files if files is not None else self.loader.discover_files()
        changed_files = self._get_changed_files(candidates)

        if not changed_files:
            logger.info("No new or changed files to process")
            return {
                "documents": 0,
                "chunks": 0,
                "embeddings": 0,
                "total_vectors": self.vector_store.count,
            }

        new_files = [f for f, is_new in changed_files if is_new]
        updated_files = [f for f, is_new in changed_files if not is_new]
        logger.info(
            f"Processing {len(new_files)} new files, {len(updated_files)} updated files"
        )

        total = 0
        for file_path, _ in changed_files:
            try:
                documents = self.loader.load_file(file_path)
            except Exception as e:
                logger.warning(f"Failed to load {file_path}: {e}")
                continue
            total += self._ingest_documents(documents)
            self._processed_files[str(file_path)] = compute_file_hash(file_path)

        self._save_processed_files()

        return {
            "documents": len(changed_files),
            "new_documents": len(new_files),
            "updated_documents": len(updated_files),
            "chunks": total,
            "embeddings": total,
            "total_vectors": self.vector_store.count,
        }

    def run(self, force: bool = False) -> dict[str, Any]:
        return self.process_all_documents(force=force)

    def run_incremental(self, files: list[Path] | None = None) -> dict[str, Any]:
        return self.process_new_and_changed_documents(files=files)


def run_ingestion(
    config_path: Path = Path("config.toml"),
    force: bool = False,
    incremental: bool = False,
    files: list[Path] | None = None,
) -> dict[str, Any]:
    """Run the ingestion pipeline.

    Args:
        config_path: Path to configuration file.
        force: If True, clear the index before ingesting everything.
        incremental: If True, only process new/changed files.
        files: Optional list of specific files to consider.

    Returns:
        Dictionary with ingestion results.
    """
    from config import load_config

    config = load_config(config_path)
    pipeline = IngestionPipeline.from_config(config, config_path)

    if incremental:
        return pipeline.run_incremental(files=files)
    return pipeline.run(force=force)
