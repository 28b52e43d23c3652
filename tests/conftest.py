import sys
import threading
from pathlib import Path
from typing import Any, Optional

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent / "backend" / "src"))

from adapters.base import BaseEmbedder, BaseGenerationBackend
from sessions import ConversationSession
from stores import VectorStore


class MockEmbedder(BaseEmbedder):
    """Mock embedder for testing."""

    def __init__(self, dimension: int = 1536, **kwargs: Any):
        super().__init__("mock-embedder", **kwargs)
        self._dimension = dimension

    @property
    def dimension(self) -> int:
        return self._dimension

    def embed(self, text: str) -> list[float]:
        return [0.1] * self._dimension

    def embed_batch(self, texts: list[str]) -> list[list[float]]:
        return [[0.1] * self._dimension for _ in texts]


class MockBackend(BaseGenerationBackend):
    """Mock generation backend that records every request.

    With ``release`` set, ``generate`` blocks until the event fires, which
    lets tests hold a call in flight. ``started`` is set on entry.
    """

    def __init__(
        self,
        model: str = "mock-model",
        credential: str = "",
        provider: str = "mock",
        reply: str = "Mock response",
        error: Optional[Exception] = None,
        release: Optional[threading.Event] = None,
        **kwargs: Any,
    ):
        super().__init__(model, credential, **kwargs)
        self.provider = provider
        self.reply = reply
        self.error = error
        self.release = release
        self.started = threading.Event()
        self.calls: list[list[dict[str, str]]] = []

    def generate(self, messages: list[dict[str, str]]) -> str:
        self.calls.append(messages)
        self.started.set()
        if self.release is not None:
            self.release.wait(timeout=5)
        if self.error is not None:
            raise self.error
        return self.reply


def mock_backend_factory(provider: str, credential: str, model: str, **kwargs: Any):
    return MockBackend(model=model, credential=credential, provider=provider, **kwargs)


@pytest.fixture
def mock_embedder() -> MockEmbedder:
    return MockEmbedder(dimension=128)


@pytest.fixture
def mock_backend() -> MockBackend:
    return MockBackend()


@pytest.fixture
def session(mock_backend: MockBackend):
    session = ConversationSession(
        backend=mock_backend, backend_factory=mock_backend_factory
    )
    yield session
    session.close()


@pytest.fixture
def temp_storage_dir(tmp_path: Path) -> Path:
    storage_dir = tmp_path / "storage"
    storage_dir.mkdir()
    return storage_dir


@pytest.fixture
def temp_vector_store(temp_storage_dir: Path) -> VectorStore:
    return VectorStore(
        dimension=3,
        index_path=temp_storage_dir / "test.index",
        metadata_path=temp_storage_dir / "test.json",
    )


@pytest.fixture
def temp_data_dir(tmp_path: Path) -> Path:
    data_dir = tmp_path / "data"
    data_dir.mkdir()
    return data_dir


@pytest.fixture
def temp_config(tmp_path: Path, temp_data_dir: Path) -> Path:
    config_content = """
[llm]
provider = "groq"
model = "llama-3.3-70b-versatile"
system_prompt = "Be brief."
history_window = 4

[llm.credentials]
groq = "test-groq-key"

[embedding]
provider = "hash"
model = "rolling-hash"
dimension = 64

[storage]
directory = "storage"

[ingestion]
directory = "data"
chunk_size = 500
chunk_overlap = 50

[retrieval]
enabled = true
top_k = 2
"""
    config_path = tmp_path / "config.toml"
    config_path.write_text(config_content)
    return config_path
