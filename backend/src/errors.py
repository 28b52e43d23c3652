"""Exception taxonomy shared by stores, adapters and sessions."""


class DimensionMismatchError(ValueError):
    """A vector's length differs from the index's dimensionality."""

    def __init__(self, expected: int, actual: int):
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Vector dimension mismatch: expected {expected}, got {actual}"
        )


class UnsupportedProviderError(ValueError):
    """No generation backend or embedder is registered under this name."""

    def __init__(self, provider: str, available: list[str]):
        self.provider = provider
        self.available = available
        super().__init__(
            f"Unsupported provider: {provider!r}. Available: {available}"
        )


class MissingCredentialError(ValueError):
    """A hosted provider was configured without an API key."""

    def __init__(self, provider: str):
        self.provider = provider
        super().__init__(f"No API key configured for provider {provider!r}")


class GenerationError(RuntimeError):
    """Base class for failures of a single generation call."""

    def __init__(self, provider: str, message: str):
        self.provider = provider
        super().__init__(f"{provider}: {message}")


class BackendError(GenerationError):
    """The provider answered with a non-success HTTP status."""

    def __init__(self, provider: str, status_code: int, body: str):
        self.status_code = status_code
        self.body = body
        super().__init__(provider, f"API error {status_code}: {body}")


class ProtocolError(GenerationError):
    """The provider's response body could not be interpreted."""


class EmptyResponseError(GenerationError):
    """The provider returned zero completion candidates."""

    def __init__(self, provider: str):
        super().__init__(provider, "no completion in response")


class TransportError(GenerationError):
    """The request never produced an HTTP response (connection, timeout)."""


class GenerationCancelledError(GenerationError):
    """The caller cancelled the request before the backend answered."""

    def __init__(self, provider: str):
        super().__init__(provider, "request cancelled")


class EmbeddingError(RuntimeError):
    """An embedding provider failed to return vectors for the given texts."""

    def __init__(self, provider: str, message: str):
        self.provider = provider
        super().__init__(f"{provider} embeddings: {message}")
