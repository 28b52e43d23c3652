from pathlib import Path

import pytest
from llama_index.core.schema import Document

from errors import DimensionMismatchError
from loaders import DocumentLoader, create_loader
from models.chunk import TextChunk, make_chunk_id
from splitters import TextSplitter
from stores import VectorStore, create_vector_store


def make_chunk(content: str, source: str = "a.txt", ordinal: int = 0) -> TextChunk:
    return TextChunk(
        id=make_chunk_id(source, ordinal),
        content=content,
        source=source,
        ordinal=ordinal,
    )


class TestTextSplitter:
    def test_split_documents_empty(self) -> None:
        splitter = TextSplitter(chunk_size=512, chunk_overlap=50)
        chunks = splitter.split_documents([])
        assert chunks == []

    def test_1200_characters_yield_three_chunks(self) -> None:
        splitter = TextSplitter(chunk_size=500, chunk_overlap=50)
        text = "abcdefghij" * 120

        chunks = splitter.split_text(text, "doc.txt")

        assert len(chunks) == 3
        assert [len(c.content) for c in chunks] == [500, 500, 300]
        assert [c.metadata["offset"] for c in chunks] == [0, 450, 900]
        assert [c.ordinal for c in chunks] == [0, 1, 2]

    def test_consecutive_chunks_share_overlap(self) -> None:
        splitter = TextSplitter(chunk_size=500, chunk_overlap=50)
        text = "abcdefghij" * 120

        chunks = splitter.split_text(text, "doc.txt")

        for previous, current in zip(chunks, chunks[1:]):
            assert previous.content[-50:] == current.content[:50]

        rebuilt = chunks[0].content + "".join(c.content[50:] for c in chunks[1:])
        assert rebuilt == text

    def test_short_text_is_single_chunk(self) -> None:
        splitter = TextSplitter(chunk_size=500, chunk_overlap=50)
        chunks = splitter.split_text("  Hello world.  ", "doc.txt")

        assert len(chunks) == 1
        assert chunks[0].content == "Hello world."

    def test_text_of_exactly_chunk_size_is_single_chunk(self) -> None:
        splitter = TextSplitter(chunk_size=500, chunk_overlap=50)
        assert len(splitter.split_text("x" * 500, "doc.txt")) == 1

    def test_blank_text_yields_no_chunks(self) -> None:
        splitter = TextSplitter(chunk_size=100, chunk_overlap=10)
        assert splitter.split_text("", "doc.txt") == []
        assert splitter.split_text(" \n\t ", "doc.txt") == []

    def test_chunk_ids_are_stable_and_unique(self) -> None:
        splitter = TextSplitter(chunk_size=100, chunk_overlap=10)
        text = "The quick brown fox jumps over the lazy dog. " * 10

        first = splitter.split_text(text, "doc.txt")
        second = splitter.split_text(text, "doc.txt")

        assert [c.id for c in first] == [c.id for c in second]
        assert len({c.id for c in first}) == len(first)
        assert first[0].id == make_chunk_id("doc.txt", 0)

    @pytest.mark.parametrize(
        "chunk_size, chunk_overlap",
        [(0, 10), (100, 0), (100, 100), (100, 150), (-5, 1)],
    )
    def test_invalid_parameters_raise(self, chunk_size: int, chunk_overlap: int) -> None:
        with pytest.raises(ValueError):
            TextSplitter(chunk_size=chunk_size, chunk_overlap=chunk_overlap)

    def test_split_documents_groups_by_source(self) -> None:
        splitter = TextSplitter(chunk_size=100, chunk_overlap=10)
        documents = [
            Document(text="First part.", metadata={"file_name": "a.txt"}),
            Document(text="Second part.", metadata={"file_name": "a.txt"}),
            Document(text="Other file.", metadata={"file_name": "b.txt"}),
        ]

        chunks = splitter.split_documents(documents)

        assert [(c.source, c.ordinal) for c in chunks] == [("a.txt", 0), ("b.txt", 0)]
        assert chunks[0].content == "First part.\n\nSecond part."


class TestVectorStore:
    def test_search_returns_two_most_similar_in_order(
        self, temp_vector_store: VectorStore
    ) -> None:
        temp_vector_store.upsert("a", make_chunk("A", ordinal=0), [1.0, 0.0, 0.0])
        temp_vector_store.upsert("b", make_chunk("B", ordinal=1), [0.8, 0.6, 0.0])
        temp_vector_store.upsert("c", make_chunk("C", ordinal=2), [0.0, 0.0, 1.0])

        results = temp_vector_store.search([1.0, 0.1, 0.0], k=2)

        assert [r.content for r in results] == ["A", "B"]
        assert results[0].similarity > results[1].similarity
        assert results[0].similarity == pytest.approx(0.995, abs=1e-3)
        assert results[1].similarity == pytest.approx(0.856, abs=1e-3)

    def test_search_empty_index_returns_empty(
        self, temp_vector_store: VectorStore
    ) -> None:
        assert temp_vector_store.search([1.0, 0.0, 0.0], k=3) == []

    def test_search_with_k_larger_than_count(
        self, temp_vector_store: VectorStore
    ) -> None:
        temp_vector_store.upsert("a", make_chunk("A"), [1.0, 0.0, 0.0])
        assert len(temp_vector_store.search([1.0, 0.0, 0.0], k=10)) == 1

    def test_dimension_mismatch_raises(self, temp_vector_store: VectorStore) -> None:
        with pytest.raises(DimensionMismatchError) as exc_info:
            temp_vector_store.upsert("a", make_chunk("A"), [1.0, 0.0])
        assert exc_info.value.expected == 3
        assert exc_info.value.actual == 2

        temp_vector_store.upsert("a", make_chunk("A"), [1.0, 0.0, 0.0])
        with pytest.raises(DimensionMismatchError):
            temp_vector_store.search([1.0, 0.0, 0.0, 0.0], k=1)
        assert temp_vector_store.count == 1

    def test_ties_broken_by_insertion_order(
        self, temp_vector_store: VectorStore
    ) -> None:
        temp_vector_store.upsert("z", make_chunk("Z", ordinal=0), [0.0, 1.0, 0.0])
        temp_vector_store.upsert("x", make_chunk("X", ordinal=1), [1.0, 0.0, 0.0])
        temp_vector_store.upsert("y", make_chunk("Y", ordinal=2), [2.0, 0.0, 0.0])

        assert [r.key for r in temp_vector_store.search([1.0, 0.0, 0.0], k=1)] == ["x"]
        assert [r.key for r in temp_vector_store.search([1.0, 0.0, 0.0], k=2)] == [
            "x",
            "y",
        ]

    def test_upsert_replaces_existing_key(
        self, temp_vector_store: VectorStore
    ) -> None:
        temp_vector_store.upsert("x", make_chunk("old"), [1.0, 0.0, 0.0])
        temp_vector_store.upsert("y", make_chunk("Y", ordinal=1), [1.0, 0.0, 0.0])
        temp_vector_store.upsert("x", make_chunk("new"), [1.0, 0.0, 0.0])

        assert temp_vector_store.count == 2
        results = temp_vector_store.search([1.0, 0.0, 0.0], k=2)
        # The replaced entry counts as the most recent insertion.
        assert [r.key for r in results] == ["y", "x"]
        assert results[1].content == "new"

    def test_results_carry_chunk_metadata(
        self, temp_vector_store: VectorStore
    ) -> None:
        chunk = TextChunk(
            id=make_chunk_id("notes.md", 4),
            content="Body",
            source="notes.md",
            ordinal=4,
            metadata={"offset": 1800},
        )
        temp_vector_store.upsert(chunk.id, chunk, [0.0, 0.0, 1.0])

        result = temp_vector_store.search([0.0, 0.0, 1.0], k=1)[0]

        assert result.source == "notes.md"
        assert result.metadata == {
            "chunk_id": chunk.id,
            "ordinal": 4,
            "offset": 1800,
        }

    def test_similarity_is_clamped_to_zero(
        self, temp_vector_store: VectorStore
    ) -> None:
        temp_vector_store.upsert("a", make_chunk("A"), [1.0, 0.0, 0.0])
        result = temp_vector_store.search([-1.0, 0.0, 0.0], k=1)[0]
        assert result.similarity == 0.0

    def test_delete(self, temp_vector_store: VectorStore) -> None:
        temp_vector_store.upsert("a", make_chunk("A"), [1.0, 0.0, 0.0])

        assert temp_vector_store.delete("a") is True
        assert temp_vector_store.delete("a") is False
        assert temp_vector_store.count == 0

    def test_remove_source(self, temp_vector_store: VectorStore) -> None:
        temp_vector_store.upsert_many(
            [
                ("a0", make_chunk("A0", "a.txt", 0), [1.0, 0.0, 0.0]),
                ("a1", make_chunk("A1", "a.txt", 1), [0.0, 1.0, 0.0]),
                ("b0", make_chunk("B0", "b.txt", 0), [0.0, 0.0, 1.0]),
            ]
        )

        assert temp_vector_store.remove_source("a.txt") == 2
        assert temp_vector_store.count == 1
        assert [r.key for r in temp_vector_store.search([1.0, 1.0, 1.0], k=3)] == [
            "b0"
        ]

    def test_upsert_many_with_repeated_key_keeps_last(
        self, temp_vector_store: VectorStore
    ) -> None:
        temp_vector_store.upsert_many(
            [
                ("k", make_chunk("old"), [1.0, 0.0, 0.0]),
                ("k", make_chunk("new"), [0.0, 1.0, 0.0]),
            ]
        )

        assert temp_vector_store.count == 1
        results = temp_vector_store.search([0.0, 1.0, 0.0], k=3)
        assert [(r.key, r.content) for r in results] == [("k", "new")]

        assert temp_vector_store.delete("k") is True
        assert temp_vector_store.count == 0
        assert temp_vector_store.search([1.0, 0.0, 0.0], k=3) == []

    def test_clear(self, temp_vector_store: VectorStore) -> None:
        temp_vector_store.upsert("a", make_chunk("A"), [1.0, 0.0, 0.0])
        temp_vector_store.clear()

        assert temp_vector_store.count == 0
        assert temp_vector_store.search([1.0, 0.0, 0.0], k=1) == []

    def test_persists_across_instances(self, temp_storage_dir: Path) -> None:
        paths = {
            "index_path": temp_storage_dir / "p.index",
            "metadata_path": temp_storage_dir / "p.json",
        }
        store = VectorStore(dimension=3, **paths)
        store.upsert("a", make_chunk("A"), [1.0, 0.0, 0.0])
        store.upsert("b", make_chunk("B", ordinal=1), [0.0, 1.0, 0.0])

        reloaded = VectorStore(dimension=3, **paths)

        assert reloaded.count == 2
        assert reloaded.search([0.0, 1.0, 0.0], k=1)[0].content == "B"

        reloaded.upsert("c", make_chunk("C", ordinal=2), [0.0, 1.0, 0.0])
        # New ids continue after the persisted ones, so "b" still wins the tie.
        assert [r.key for r in reloaded.search([0.0, 1.0, 0.0], k=2)] == ["b", "c"]

    def test_reload_with_other_dimension_raises(self, temp_storage_dir: Path) -> None:
        paths = {
            "index_path": temp_storage_dir / "d.index",
            "metadata_path": temp_storage_dir / "d.json",
        }
        VectorStore(dimension=3, **paths).upsert("a", make_chunk("A"), [1.0, 0.0, 0.0])

        with pytest.raises(DimensionMismatchError):
            VectorStore(dimension=4, **paths)

    def test_invalid_dimension_raises(self) -> None:
        with pytest.raises(ValueError):
            VectorStore(dimension=0)

    def test_create_vector_store_unknown_provider(self) -> None:
        with pytest.raises(ValueError, match="Unknown vector store provider"):
            create_vector_store("pinecone", dimension=3)


class TestDocumentLoader:
    def test_load_nonexistent_directory_raises(self, tmp_path: Path) -> None:
        loader = DocumentLoader(tmp_path / "nonexistent")
        with pytest.raises(FileNotFoundError):
            loader.load()

    def test_load_empty_directory_raises_value_error(self, tmp_path: Path) -> None:
        empty_dir = tmp_path / "empty"
        empty_dir.mkdir()
        loader = DocumentLoader(empty_dir)
        with pytest.raises(ValueError, match="No files found"):
            loader.load()

    def test_load_text_files(self, temp_data_dir: Path) -> None:
        (temp_data_dir / "a.txt").write_text("Alpha document.")
        (temp_data_dir / "b.md").write_text("# Beta\n\nSome notes.")
        (temp_data_dir / "c.csv").write_text("x,y\n1,2")

        loader = DocumentLoader(temp_data_dir)
        documents = loader.load()

        names = sorted(d.metadata["file_name"] for d in documents)
        assert names == ["a.txt", "b.md"]
        assert [p.name for p in loader.discover_files()] == ["a.txt", "b.md"]

    def test_load_single_file(self, temp_data_dir: Path) -> None:
        path = temp_data_dir / "a.txt"
        path.write_text("Alpha document.")

        documents = DocumentLoader(temp_data_dir).load_file(path)

        assert len(documents) == 1
        assert documents[0].text == "Alpha document."

    def test_create_loader_unknown_provider(self, tmp_path: Path) -> None:
        with pytest.raises(ValueError, match="Unknown loader provider"):
            create_loader("pdf", tmp_path)
