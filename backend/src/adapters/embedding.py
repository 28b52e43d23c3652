import os
from typing import Any, Optional

import numpy as np
import openai
import requests
from openai import OpenAI

from adapters.base import BaseEmbedder
from adapters.utils import create_session_with_pooling
from errors import EmbeddingError

EMBEDDING_DIMENSIONS = {
    "text-embedding-3-small": 1536,
    "text-embedding-3-large": 3072,
    "text-embedding-ada-002": 1536,
}

DEFAULT_HASH_DIMENSION = 384
DEFAULT_OLLAMA_DIMENSION = 768
HASH_MODULUS = 1_000_000
HASH_MULTIPLIER = 31
NORM_EPSILON = 1e-4


class HashEmbedder(BaseEmbedder):
    """Deterministic rolling-hash embedder.

    Not semantically meaningful: paraphrases do not land near each other.
    It gives the pipeline a reproducible, dependency-free vector of fixed
    dimension until a real model is configured behind the same contract.

    Coordinate ``i`` holds the last two decimal digits of the rolling hash
    after character ``i``, scaled to [0, 1); characters past the dimension
    do not contribute. The result is L2-normalized with a small epsilon.
    """

    def __init__(
        self,
        model: str = "rolling-hash",
        dimension: int = DEFAULT_HASH_DIMENSION,
        **kwargs: Any,
    ):
        super().__init__(model, **kwargs)
        if dimension <= 0:
            raise ValueError("dimension must be positive")
        self._dimension = dimension

    @property
    def dimension(self) -> int:
        return self._dimension

    def embed(self, text: str) -> list[float]:
        vector = np.zeros(self._dimension, dtype=np.float64)

        rolling = 0
        for i, char in enumerate(text[: self._dimension]):
            rolling = (rolling * HASH_MULTIPLIER + ord(char)) % HASH_MODULUS
            vector[i] = (rolling % 100) / 100.0

        vector /= np.linalg.norm(vector) + NORM_EPSILON
        return vector.tolist()

    def embed_batch(self, texts: list[str]) -> list[list[float]]:
        return [self.embed(text) for text in texts]


class OpenAIEmbedder(BaseEmbedder):
    """OpenAI embedding provider."""

    def __init__(self, model: str = "text-embedding-3-small", **kwargs: Any):
        super().__init__(model, **kwargs)
        api_key = kwargs.pop("api_key", None) or os.environ.get("OPENAI_API_KEY")
        base_url = kwargs.pop("base_url", None)

        self.client = OpenAI(api_key=api_key, base_url=base_url, max_retries=0)
        self._dimension: Optional[int] = kwargs.get("dimensions")

    @property
    def dimension(self) -> int:
        return self._dimension or EMBEDDING_DIMENSIONS.get(self.model, 1536)

    def _create_embedding_params(self, input_data: str | list[str]) -> dict[str, Any]:
        """Build parameters for embedding API call."""
        params = {"model": self.model, "input": input_data}
        if self._dimension is not None:
            params["dimensions"] = self._dimension
        return params

    def _create(self, input_data: str | list[str]) -> Any:
        try:
            return self.client.embeddings.create(
                **self._create_embedding_params(input_data)
            )
        except openai.OpenAIError as e:
            raise EmbeddingError("openai", str(e)) from e

    def embed(self, text: str) -> list[float]:
        return self._create(text).data[0].embedding

    def embed_batch(self, texts: list[str]) -> list[list[float]]:
        if not texts:
            return []
        return [item.embedding for item in self._create(texts).data]


class OllamaEmbedder(BaseEmbedder):
    """Ollama local embedding provider."""

    def __init__(
        self,
        model: str = "nomic-embed-text",
        base_url: str = "http://localhost:11434",
        **kwargs: Any,
    ):
        super().__init__(model, **kwargs)
        self.base_url = base_url.rstrip("/")
        self._dimension = kwargs.get("dimension", DEFAULT_OLLAMA_DIMENSION)
        self.session = create_session_with_pooling()

    @property
    def dimension(self) -> int:
        return self._dimension

    def embed(self, text: str) -> list[float]:
        return self.embed_batch([text])[0]

    def embed_batch(self, texts: list[str]) -> list[list[float]]:
        if not texts:
            return []

        try:
            response = self.session.post(
                f"{self.base_url}/api/embed",
                json={"model": self.model, "input": texts},
                timeout=120,
            )
            response.raise_for_status()
            embeddings = response.json().get("embeddings", [])
        except (requests.exceptions.RequestException, ValueError) as e:
            raise EmbeddingError("ollama", f"request failed: {e}") from e

        if len(embeddings) != len(texts):
            raise EmbeddingError(
                "ollama",
                f"returned {len(embeddings)} embeddings for {len(texts)} texts",
            )
        return embeddings
