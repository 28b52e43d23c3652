"""Provider-name factories for generation backends and embedders."""

from functools import partial
from types import MappingProxyType
from typing import Any, Callable, Mapping, Type

from adapters.anthropic import AnthropicBackend
from adapters.base import BaseEmbedder, BaseGenerationBackend
from adapters.embedding import HashEmbedder, OllamaEmbedder, OpenAIEmbedder
from adapters.gemini import GeminiBackend
from adapters.llm import OPENROUTER_HEADERS, ChatCompletionsBackend, OllamaBackend
from errors import UnsupportedProviderError

_BACKEND_FACTORIES: Mapping[str, Callable[..., BaseGenerationBackend]] = MappingProxyType(
    {
        "groq": partial(ChatCompletionsBackend, provider="groq"),
        "openai": partial(ChatCompletionsBackend, provider="openai"),
        "openrouter": partial(
            ChatCompletionsBackend,
            provider="openrouter",
            default_headers=OPENROUTER_HEADERS,
        ),
        "anthropic": AnthropicBackend,
        "gemini": GeminiBackend,
        "ollama": OllamaBackend,
    }
)

_EMBEDDER_REGISTRY: dict[str, Type[BaseEmbedder]] = {
    "hash": HashEmbedder,
    "openai": OpenAIEmbedder,
    "ollama": OllamaEmbedder,
}


def _normalize(provider: str) -> str:
    return provider.strip().lower()


def create_backend(
    provider: str, credential: str, model: str, **kwargs: Any
) -> BaseGenerationBackend:
    """Create a generation backend for a provider.

    Performs no I/O and keeps no state between calls.

    Args:
        provider: Provider name (e.g., "groq", "anthropic")
        credential: API key for the provider (ignored by local providers)
        model: Model identifier understood by the provider
        **kwargs: Additional backend parameters (timeout, base_url, ...)

    Returns:
        BaseGenerationBackend instance

    Raises:
        UnsupportedProviderError: If provider is not known
        MissingCredentialError: If a hosted provider gets an empty credential
    """
    name = _normalize(provider)
    if name not in _BACKEND_FACTORIES:
        raise UnsupportedProviderError(provider, list_backend_providers())
    return _BACKEND_FACTORIES[name](model=model, credential=credential, **kwargs)


def list_backend_providers() -> list[str]:
    """List all supported generation providers."""
    return list(_BACKEND_FACTORIES.keys())


def register_embedder(provider: str, cls: Type[BaseEmbedder]) -> None:
    """Register an embedder provider.

    Args:
        provider: Provider name (e.g., "openai", "ollama")
        cls: Embedder class to register
    """
    _EMBEDDER_REGISTRY[_normalize(provider)] = cls


def create_embedder(provider: str, **kwargs: Any) -> BaseEmbedder:
    """Create an embedder instance based on provider.

    Args:
        provider: Provider name
        **kwargs: Additional provider-specific parameters

    Returns:
        BaseEmbedder instance

    Raises:
        UnsupportedProviderError: If provider is not registered
    """
    name = _normalize(provider)
    if name not in _EMBEDDER_REGISTRY:
        raise UnsupportedProviderError(provider, list_embedder_providers())
    return _EMBEDDER_REGISTRY[name](**kwargs)


def list_embedder_providers() -> list[str]:
    """List all registered embedder providers."""
    return list(_EMBEDDER_REGISTRY.keys())
