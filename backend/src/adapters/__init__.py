from adapters.base import (
    DEFAULT_MAX_TOKENS,
    DEFAULT_TEMPERATURE,
    DEFAULT_TIMEOUT,
    BaseEmbedder,
    BaseGenerationBackend,
)
from adapters.registry import (
    create_backend,
    create_embedder,
    list_backend_providers,
    list_embedder_providers,
    register_embedder,
)

__all__ = [
    "BaseEmbedder",
    "BaseGenerationBackend",
    "DEFAULT_MAX_TOKENS",
    "DEFAULT_TEMPERATURE",
    "DEFAULT_TIMEOUT",
    "create_backend",
    "create_embedder",
    "list_backend_providers",
    "list_embedder_providers",
    "register_embedder",
]
