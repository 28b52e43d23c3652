"""Anthropic Messages API backend."""

from typing import Any

from adapters.base import BaseGenerationBackend
from adapters.utils import conversation_turns, create_session_with_pooling, post_json
from errors import EmptyResponseError, MissingCredentialError, ProtocolError

ANTHROPIC_URL = "https://api.anthropic.com/v1/messages"
ANTHROPIC_VERSION = "2023-06-01"


class AnthropicBackend(BaseGenerationBackend):
    """Anthropic Claude backend.

    The Messages API takes the system prompt as a top-level ``system``
    field; ``messages`` may only carry ``user`` and ``assistant`` turns.
    """

    provider = "anthropic"

    def __init__(self, model: str, credential: str, url: str = ANTHROPIC_URL, **kwargs: Any):
        super().__init__(model, credential, **kwargs)
        if not credential:
            raise MissingCredentialError(self.provider)
        self.url = url
        self.session = create_session_with_pooling()

    def _build_payload(self, messages: list[dict[str, str]]) -> dict[str, Any]:
        system_parts = [m["content"] for m in messages if m["role"] == "system"]
        payload: dict[str, Any] = {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "temperature": self.temperature,
            "messages": [
                {"role": m["role"], "content": m["content"]}
                for m in conversation_turns(messages)
            ],
        }
        if system_parts:
            payload["system"] = "\n\n".join(system_parts)
        return payload

    def generate(self, messages: list[dict[str, str]]) -> str:
        data = post_json(
            self.session,
            self.provider,
            self.url,
            self._build_payload(messages),
            headers={
                "x-api-key": self.credential,
                "anthropic-version": ANTHROPIC_VERSION,
            },
            timeout=self.timeout,
        )

        blocks = data.get("content")
        if not isinstance(blocks, list):
            raise ProtocolError(self.provider, "response has no content list")

        texts = [
            block["text"]
            for block in blocks
            if isinstance(block, dict) and block.get("type") == "text"
            and isinstance(block.get("text"), str)
        ]
        if not texts:
            raise EmptyResponseError(self.provider)
        return "".join(texts)
