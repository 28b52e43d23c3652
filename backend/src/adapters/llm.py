import logging
from typing import Any, Optional

import openai
from openai import OpenAI

from adapters.base import BaseGenerationBackend
from adapters.utils import create_session_with_pooling, post_json
from errors import (
    BackendError,
    EmptyResponseError,
    MissingCredentialError,
    ProtocolError,
    TransportError,
)

logger = logging.getLogger(__name__)

CHAT_COMPLETIONS_BASE_URLS = {
    "openai": "https://api.openai.com/v1",
    "groq": "https://api.groq.com/openai/v1",
    "openrouter": "https://openrouter.ai/api/v1",
}

OPENROUTER_HEADERS = {
    "HTTP-Referer": "https://github.com/ragchat/ragchat",
    "X-Title": "RagChat",
}


class ChatCompletionsBackend(BaseGenerationBackend):
    """Backend for providers speaking the OpenAI chat-completions protocol.

    Serves OpenAI itself plus Groq and OpenRouter, which differ only in
    base URL and extra headers. Roles are sent unchanged.
    """

    def __init__(
        self,
        model: str,
        credential: str,
        provider: str = "openai",
        base_url: Optional[str] = None,
        default_headers: Optional[dict[str, str]] = None,
        **kwargs: Any,
    ):
        super().__init__(model, credential, **kwargs)
        if not credential:
            raise MissingCredentialError(provider)
        self.provider = provider

        self.client = OpenAI(
            api_key=credential,
            base_url=base_url or CHAT_COMPLETIONS_BASE_URLS.get(provider),
            timeout=self.timeout,
            max_retries=0,
            default_headers=default_headers,
        )

    def _get_completion_params(self, messages: list[dict[str, str]]) -> dict[str, Any]:
        """Build parameters for chat completion."""
        return {
            "model": self.model,
            "messages": messages,
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
        }

    def generate(self, messages: list[dict[str, str]]) -> str:
        params = self._get_completion_params(messages)
        logger.debug(
            f"Calling {self.provider} model {self.model} with {len(messages)} messages"
        )
        try:
            response = self.client.chat.completions.create(**params)
        except openai.APIStatusError as e:
            raise BackendError(self.provider, e.status_code, e.response.text) from e
        except openai.APIResponseValidationError as e:
            raise ProtocolError(self.provider, f"invalid response: {e}") from e
        except openai.APIConnectionError as e:
            raise TransportError(self.provider, f"request failed: {e}") from e

        if not hasattr(response, "choices"):
            raise ProtocolError(self.provider, "response has no choices field")
        if not response.choices:
            raise EmptyResponseError(self.provider)

        content = response.choices[0].message.content
        if content is None:
            raise ProtocolError(self.provider, "first choice has no message content")
        return content


class OllamaBackend(BaseGenerationBackend):
    """Ollama local backend with connection pooling. Needs no credential."""

    provider = "ollama"

    def __init__(
        self,
        model: str = "llama3",
        credential: str = "",
        base_url: str = "http://localhost:11434",
        **kwargs: Any,
    ):
        super().__init__(model, credential, **kwargs)
        self.base_url = base_url.rstrip("/")
        self.session = create_session_with_pooling()

    def _build_payload(self, messages: list[dict[str, str]]) -> dict[str, Any]:
        """Build request payload for Ollama API."""
        return {
            "model": self.model,
            "messages": messages,
            "stream": False,
            "options": {
                "temperature": self.temperature,
                "num_predict": self.max_tokens,
            },
        }

    def generate(self, messages: list[dict[str, str]]) -> str:
        data = post_json(
            self.session,
            self.provider,
            f"{self.base_url}/api/chat",
            self._build_payload(messages),
            timeout=self.timeout,
        )

        message = data.get("message")
        if not isinstance(message, dict) or not isinstance(message.get("content"), str):
            raise ProtocolError(self.provider, "response has no message content")
        if not message["content"]:
            raise EmptyResponseError(self.provider)
        return message["content"]
