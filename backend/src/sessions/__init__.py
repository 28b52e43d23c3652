from .conversation import (
    DEFAULT_HISTORY_WINDOW,
    DEFAULT_SYSTEM_PROMPT,
    ConversationSession,
    SessionState,
)
from .locks import ReadWriteLock

__all__ = [
    "ConversationSession",
    "ReadWriteLock",
    "SessionState",
    "DEFAULT_HISTORY_WINDOW",
    "DEFAULT_SYSTEM_PROMPT",
]
