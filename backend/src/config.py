import os
import re
from pathlib import Path
from typing import Any

import toml

DEFAULT_PROVIDER = "groq"

PROVIDER_API_KEY_ENV = {
    "groq": "GROQ_API_KEY",
    "openai": "OPENAI_API_KEY",
    "anthropic": "ANTHROPIC_API_KEY",
    "gemini": "GEMINI_API_KEY",
    "openrouter": "OPENROUTER_API_KEY",
}

PROVIDER_DEFAULT_MODELS = {
    "groq": "llama-3.3-70b-versatile",
    "openai": "gpt-4o-mini",
    "anthropic": "claude-3-5-sonnet-20241022",
    "gemini": "gemini-1.5-flash",
    "openrouter": "meta-llama/llama-3.1-8b-instruct:free",
    "ollama": "llama3",
}

_ENV_PATTERN = re.compile(r"\$\{([^}:]+)(?::-([^}]*))?\}")


def resolve_path(path: str | Path, config_path: Path) -> Path:
    """Resolve a path relative to the config file's parent directory.

    Absolute paths are returned as-is.
    """
    path = Path(path)
    if path.is_absolute():
        return path
    return (config_path.parent / path).resolve()


def find_config_path(explicit_path: Path | None = None) -> Path:
    """Centralized config path resolution."""
    if explicit_path:
        return explicit_path
    candidates = [
        Path("config.toml"),
        Path(__file__).parent.parent.parent / "config.toml",
    ]
    for path in candidates:
        if path.exists():
            return path
    raise FileNotFoundError("config.toml not found")


def load_config(config_path: Path = Path("config.toml")) -> dict[str, Any]:
    """Load configuration from TOML file with environment variable substitution.

    Supports ${ENV_VAR} and ${ENV_VAR:-default} syntax.

    Args:
        config_path: Path to the TOML configuration file.

    Returns:
        Dictionary with configuration values.
    """
    config = toml.load(config_path)
    return _substitute_env_vars(config)


def _substitute_env_vars(value: Any) -> Any:
    """Recursively substitute environment variables in config values."""
    if isinstance(value, str):
        return _substitute_string(value)
    elif isinstance(value, dict):
        return {k: _substitute_env_vars(v) for k, v in value.items()}
    elif isinstance(value, list):
        return [_substitute_env_vars(item) for item in value]
    return value


def _substitute_string(value: str) -> str:
    def replacer(match):
        var_name = match.group(1)
        default = match.group(2) or ""
        return os.environ.get(var_name, default)

    return _ENV_PATTERN.sub(replacer, value)


def get_config_value(config: dict, key_path: str, default: Any = None) -> Any:
    """Get a nested config value using dot notation.

    Args:
        config: Configuration dictionary.
        key_path: Dot-separated path (e.g., "llm.credentials.groq").
        default: Default value if key not found.

    Returns:
        The config value or default.
    """
    keys = key_path.split(".")
    value = config

    for key in keys:
        if isinstance(value, dict) and key in value:
            value = value[key]
        else:
            return default

    return value


def get_api_key(config: dict, provider: str) -> str:
    """Credential for a provider.

    Looks in ``[llm.credentials]`` first, then in the provider's
    ``*_API_KEY`` environment variable. Returns "" when neither is set.
    """
    provider = provider.strip().lower()
    key = get_config_value(config, f"llm.credentials.{provider}", "")
    if key:
        return key
    env_var = PROVIDER_API_KEY_ENV.get(provider)
    return os.environ.get(env_var, "") if env_var else ""


def resolve_backend_settings(
    config: dict,
    provider: str | None = None,
    model: str | None = None,
) -> dict[str, str]:
    """Provider, model and credential for a generation backend.

    Explicit arguments win over ``[llm]`` values. ``llm.model`` only applies
    to the configured provider; otherwise an empty model falls back to the
    provider's default model.
    """
    configured_model = ""
    if not provider:
        provider = get_config_value(config, "llm.provider", "") or DEFAULT_PROVIDER
        configured_model = get_config_value(config, "llm.model", "")
    provider = provider.strip().lower()
    model = model or configured_model or PROVIDER_DEFAULT_MODELS.get(provider, "")
    return {
        "provider": provider,
        "model": model,
        "credential": get_api_key(config, provider),
    }


def get_storage_dir(config: dict, config_path: Path) -> Path:
    """Resolved absolute path to the storage directory."""
    storage_dir = config.get("storage", {}).get("directory", "storage")
    return resolve_path(storage_dir, config_path)


def get_ingestion_dir(config: dict, config_path: Path) -> Path:
    """Resolved absolute path to the directory of documents to ingest."""
    ingestion_dir = config.get("ingestion", {}).get("directory", "data")
    return resolve_path(ingestion_dir, config_path)
