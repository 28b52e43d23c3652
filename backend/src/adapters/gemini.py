"""Google Gemini generateContent backend."""

from typing import Any

from adapters.base import BaseGenerationBackend
from adapters.utils import conversation_turns, create_session_with_pooling, post_json
from errors import EmptyResponseError, MissingCredentialError, ProtocolError

GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"

# Gemini names the assistant role "model".
GEMINI_ROLES = {"user": "user", "assistant": "model"}


class GeminiBackend(BaseGenerationBackend):
    """Google Gemini backend."""

    provider = "gemini"

    def __init__(
        self,
        model: str,
        credential: str,
        base_url: str = GEMINI_BASE_URL,
        **kwargs: Any,
    ):
        super().__init__(model, credential, **kwargs)
        if not credential:
            raise MissingCredentialError(self.provider)
        self.base_url = base_url.rstrip("/")
        self.session = create_session_with_pooling()

    @property
    def url(self) -> str:
        return f"{self.base_url}/models/{self.model}:generateContent"

    def _build_payload(self, messages: list[dict[str, str]]) -> dict[str, Any]:
        system_parts = [
            {"text": m["content"]} for m in messages if m["role"] == "system"
        ]
        contents = [
            {
                "role": GEMINI_ROLES.get(m["role"], m["role"]),
                "parts": [{"text": m["content"]}],
            }
            for m in conversation_turns(messages)
        ]

        payload: dict[str, Any] = {
            "contents": contents,
            "generationConfig": {
                "temperature": self.temperature,
                "maxOutputTokens": self.max_tokens,
            },
        }
        if system_parts:
            payload["systemInstruction"] = {"parts": system_parts}
        return payload

    def generate(self, messages: list[dict[str, str]]) -> str:
        data = post_json(
            self.session,
            self.provider,
            self.url,
            self._build_payload(messages),
            headers={"X-Goog-Api-Key": self.credential},
            timeout=self.timeout,
        )

        candidates = data.get("candidates", [])
        if not isinstance(candidates, list):
            raise ProtocolError(self.provider, "candidates is not a list")
        if not candidates:
            raise EmptyResponseError(self.provider)

        try:
            parts = candidates[0]["content"]["parts"]
            texts = [part["text"] for part in parts if "text" in part]
        except (KeyError, TypeError) as e:
            raise ProtocolError(self.provider, f"malformed candidate: {e}") from e

        if not texts:
            raise EmptyResponseError(self.provider)
        return "".join(texts)
