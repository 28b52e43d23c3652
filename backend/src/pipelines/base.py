from pathlib import Path
from typing import Any, Callable

from adapters import (
    BaseEmbedder,
    BaseGenerationBackend,
    create_backend,
    create_embedder,
)
from config import get_config_value, resolve_backend_settings, resolve_path
from sessions import DEFAULT_HISTORY_WINDOW, DEFAULT_SYSTEM_PROMPT, ConversationSession
from splitters import DEFAULT_CHUNK_OVERLAP, DEFAULT_CHUNK_SIZE
from stores import BaseVectorStore, create_vector_store

DEFAULT_CONTEXT_TEMPLATE = """Context information:
{context}

Question: {question}

Answer:"""

DEFAULT_TOP_K = 3


def _create_adapter_from_config(
    config: dict[str, Any],
    section: str,
    create_fn: Callable[..., Any],
    defaults: dict[str, str],
) -> Any:
    """Create an adapter from a config section's provider, model and extras."""
    section_config = config.get(section, {})
    provider = section_config.get("provider", defaults["provider"])
    model = section_config.get("model", defaults["model"])

    extra_kwargs = {
        k: v for k, v in section_config.items() if k not in ("provider", "model")
    }

    return create_fn(provider, model=model, **extra_kwargs)


def create_embedder_from_config(config: dict[str, Any]) -> BaseEmbedder:
    """Create an embedder instance from configuration."""
    defaults = {"provider": "hash", "model": "rolling-hash"}
    return _create_adapter_from_config(config, "embedding", create_embedder, defaults)


def create_backend_from_config(
    config: dict[str, Any],
    provider: str | None = None,
    model: str | None = None,
) -> BaseGenerationBackend:
    """Create the generation backend named by ``[llm]`` (or the overrides)."""
    settings = resolve_backend_settings(config, provider=provider, model=model)
    return create_backend(
        settings["provider"],
        credential=settings["credential"],
        model=settings["model"],
    )


def create_session_from_config(
    config: dict[str, Any],
    provider: str | None = None,
    model: str | None = None,
) -> ConversationSession:
    """Create a conversation session with the configured backend and prompt."""
    return ConversationSession(
        backend=create_backend_from_config(config, provider=provider, model=model),
        system_prompt=get_config_value(
            config, "llm.system_prompt", DEFAULT_SYSTEM_PROMPT
        ),
        history_window=get_config_value(
            config, "llm.history_window", DEFAULT_HISTORY_WINDOW
        ),
    )


def get_vector_store_paths(
    config: dict[str, Any], config_path: Path, embedder_model: str
) -> tuple[Path, Path]:
    """Get index and metadata paths for the vector store."""
    storage_dir = resolve_path(
        config.get("storage", {}).get("directory", "storage"), config_path
    )
    embedding_id = embedder_model.replace("/", "_").replace("-", "_")
    return (
        storage_dir / f"faiss_{embedding_id}.index",
        storage_dir / f"faiss_{embedding_id}.json",
    )


def create_vector_store_from_config(
    config: dict[str, Any], config_path: Path, embedder: BaseEmbedder
) -> BaseVectorStore:
    """Create the persistent vector store matching an embedder."""
    index_path, metadata_path = get_vector_store_paths(
        config, config_path, embedder.model
    )
    return create_vector_store(
        get_config_value(config, "storage.provider", "faiss"),
        dimension=embedder.dimension,
        index_path=index_path,
        metadata_path=metadata_path,
    )
