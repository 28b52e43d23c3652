from abc import ABC, abstractmethod
from typing import Any

from models.conversation import BackendHandle

DEFAULT_TIMEOUT = 60.0
DEFAULT_TEMPERATURE = 0.7
DEFAULT_MAX_TOKENS = 1024


class BaseEmbedder(ABC):
    """Abstract base class for embedding providers."""

    def __init__(self, model: str, **kwargs: Any):
        self.model = model
        self.kwargs = kwargs

    @abstractmethod
    def embed(self, text: str) -> list[float]:
        pass

    @abstractmethod
    def embed_batch(self, texts: list[str]) -> list[list[float]]:
        pass

    @property
    @abstractmethod
    def dimension(self) -> int:
        pass


class BaseGenerationBackend(ABC):
    """A hosted text-generation service behind one capability.

    ``generate`` takes the conversation as ordered ``{"role", "content"}``
    messages (roles ``system``, ``user``, ``assistant``) and returns the
    completion text. Each implementation owns its provider's wire format.
    """

    provider: str = ""

    def __init__(
        self,
        model: str,
        credential: str = "",
        timeout: float = DEFAULT_TIMEOUT,
        temperature: float = DEFAULT_TEMPERATURE,
        max_tokens: int = DEFAULT_MAX_TOKENS,
    ):
        self.model = model
        self.credential = credential
        self.timeout = timeout
        self.temperature = temperature
        self.max_tokens = max_tokens

    @abstractmethod
    def generate(self, messages: list[dict[str, str]]) -> str:
        pass

    @property
    def handle(self) -> BackendHandle:
        return BackendHandle(
            provider=self.provider, model=self.model, credential=self.credential
        )

    def __repr__(self) -> str:
        return f"{type(self).__name__}(provider={self.provider!r}, model={self.model!r})"
