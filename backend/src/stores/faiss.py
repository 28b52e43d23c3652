import fcntl
import json
import logging
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterable, Iterator, Optional

import faiss
import numpy as np

from errors import DimensionMismatchError
from models.chunk import SearchResult, TextChunk
from .base import BaseVectorStore

logger = logging.getLogger(__name__)


class FAISSVectorStore(BaseVectorStore):
    """FAISS-based cosine-similarity store with optional persistence.

    Vectors are L2-normalized and kept in an exact inner-product index, so
    the inner product of a stored vector and a normalized query is their
    cosine similarity. Each upsert receives a fresh, increasing FAISS id;
    ids double as insertion order when breaking similarity ties.

    Entry attributes live in a JSON file next to the FAISS index file:
    one record per key with ``id``, ``chunk_id``, ``content``, ``source``,
    ``ordinal`` and ``metadata``.
    """

    def __init__(
        self,
        dimension: int,
        index_path: Optional[Path] = None,
        metadata_path: Optional[Path] = None,
    ):
        super().__init__(dimension)
        self._index_path = index_path
        self._metadata_path = metadata_path
        self._lock = threading.RLock()

        self._index: faiss.Index = self._load_index()
        self._entries: dict[str, dict[str, Any]] = {}
        self._keys_by_id: dict[int, str] = {}
        self._next_id = 0
        self._load_metadata()

    def _new_index(self) -> faiss.Index:
        return faiss.IndexIDMap2(faiss.IndexFlatIP(self.dimension))

    def _load_index(self) -> faiss.Index:
        if self._index_path and self._index_path.exists():
            index = faiss.read_index(str(self._index_path))
            if index.d != self.dimension:
                raise DimensionMismatchError(self.dimension, index.d)
            return index
        return self._new_index()

    def _load_metadata(self) -> None:
        if not (self._metadata_path and self._metadata_path.exists()):
            return
        with open(self._metadata_path, "r") as f:
            data = json.load(f)

        for entry in data.get("entries", []):
            self._entries[entry["key"]] = entry
            self._keys_by_id[entry["id"]] = entry["key"]
        self._next_id = data.get("next_id", len(self._entries))

        if len(self._entries) != self._index.ntotal:
            logger.warning(
                f"Index holds {self._index.ntotal} vectors but metadata lists "
                f"{len(self._entries)} entries; re-ingest to repair"
            )

    @contextmanager
    def _file_lock(self) -> Iterator[None]:
        if not self._metadata_path:
            yield
            return
        self._metadata_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self._metadata_path.with_suffix(".lock"), "w") as lock_file:
            fcntl.flock(lock_file.fileno(), fcntl.LOCK_EX)
            try:
                yield
            finally:
                fcntl.flock(lock_file.fileno(), fcntl.LOCK_UN)

    def save(self) -> None:
        with self._lock, self._file_lock():
            if self._index_path:
                self._index_path.parent.mkdir(parents=True, exist_ok=True)
                faiss.write_index(self._index, str(self._index_path))

            if self._metadata_path:
                with open(self._metadata_path, "w") as f:
                    json.dump(
                        {
                            "dimension": self.dimension,
                            "next_id": self._next_id,
                            "entries": list(self._entries.values()),
                        },
                        f,
                        indent=2,
                    )

    def _as_matrix(self, vectors: list[list[float]]) -> np.ndarray:
        for vector in vectors:
            self.check_dimension(vector)
        matrix = np.array(vectors, dtype=np.float32).reshape(len(vectors), self.dimension)
        faiss.normalize_L2(matrix)
        return matrix

    def _remove_keys(self, keys: Iterable[str]) -> int:
        ids = [self._entries.pop(key)["id"] for key in keys if key in self._entries]
        if ids:
            self._index.remove_ids(np.array(ids, dtype=np.int64))
            for faiss_id in ids:
                del self._keys_by_id[faiss_id]
        return len(ids)

    def upsert_many(self, items: Iterable[tuple[str, TextChunk, list[float]]]) -> None:
        # A key repeated within one batch keeps its last vector.
        items = list({key: (key, chunk, vector) for key, chunk, vector in items}.values())
        if not items:
            return
        matrix = self._as_matrix([vector for _, _, vector in items])

        with self._lock:
            self._remove_keys(key for key, _, _ in items)

            ids = np.arange(self._next_id, self._next_id + len(items), dtype=np.int64)
            self._next_id += len(items)
            self._index.add_with_ids(matrix, ids)

            for faiss_id, (key, chunk, _) in zip(ids.tolist(), items):
                self._entries[key] = {
                    "key": key,
                    "id": faiss_id,
                    "chunk_id": chunk.id,
                    "content": chunk.content,
                    "source": chunk.source,
                    "ordinal": chunk.ordinal,
                    "metadata": dict(chunk.metadata),
                }
                self._keys_by_id[faiss_id] = key

            self.save()

    def search(self, query_embedding: list[float], k: int = 3) -> list[SearchResult]:
        query = self._as_matrix([query_embedding])

        with self._lock:
            total = self._index.ntotal
            if total == 0 or k <= 0:
                return []

            # One extra neighbour reveals a tie across the cut-off; ties are
            # then resolved over the full ranking by insertion order.
            fetch = min(total, k + 1)
            scores, ids = self._index.search(query, fetch)
            if fetch > k and scores[0][k - 1] == scores[0][k]:
                scores, ids = self._index.search(query, total)

            hits = sorted(
                (
                    (float(score), int(faiss_id))
                    for score, faiss_id in zip(scores[0], ids[0])
                    if faiss_id >= 0
                ),
                key=lambda hit: (-hit[0], hit[1]),
            )
            return [self._to_result(self._keys_by_id[i], s) for s, i in hits[:k]]

    def _to_result(self, key: str, score: float) -> SearchResult:
        entry = self._entries[key]
        return SearchResult(
            key=key,
            content=entry["content"],
            source=entry["source"],
            similarity=min(max(score, 0.0), 1.0),
            metadata={
                "chunk_id": entry["chunk_id"],
                "ordinal": entry["ordinal"],
                **entry.get("metadata", {}),
            },
        )

    def delete(self, key: str) -> bool:
        with self._lock:
            removed = self._remove_keys([key])
            if removed:
                self.save()
            return bool(removed)

    def remove_source(self, source: str) -> int:
        with self._lock:
            keys = [k for k, e in self._entries.items() if e["source"] == source]
            removed = self._remove_keys(keys)
            if removed:
                self.save()
            return removed

    def clear(self) -> None:
        with self._lock:
            self._index = self._new_index()
            self._entries = {}
            self._keys_by_id = {}
            self._next_id = 0
            self.save()

    @property
    def count(self) -> int:
        with self._lock:
            return self._index.ntotal
