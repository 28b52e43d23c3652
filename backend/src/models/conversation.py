"""Data models for conversation state."""

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class Role(str, Enum):
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


class ConversationTurn(BaseModel):
    """One role-tagged message in a conversation.

    Attributes:
        role: Who produced the message.
        content: Message text.
        created_at: UTC creation time.
        backend: Identifier of the backend that produced an assistant turn;
            empty for user and system turns.
    """

    model_config = ConfigDict(frozen=True)

    role: Role
    content: str
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    backend: str = ""

    def to_message(self) -> dict[str, str]:
        return {"role": self.role.value, "content": self.content}


class BackendHandle(BaseModel):
    """Provider, model and credential of a generation backend."""

    model_config = ConfigDict(frozen=True)

    provider: str
    model: str
    credential: str = Field(default="", repr=False)

    @property
    def identifier(self) -> str:
        return f"{self.provider}:{self.model}"
