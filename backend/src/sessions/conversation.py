"""Conversation state shared between concurrent callers.

A session owns the append-only turn log and the active generation backend.
One read/write lock guards both:

* appends to the log, in-flight bookkeeping and backend swaps take the
  write lock;
* building the outbound request takes the read lock, which is released
  before the network call starts.

A generation call therefore never blocks ``switch_backend`` or
``history``, and a switch that lands mid-flight does not affect the call:
its answer is tagged with the backend captured when it was dispatched.
"""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor, wait
from enum import Enum
from typing import Any, Callable, Optional

from adapters import BaseGenerationBackend, create_backend
from errors import GenerationCancelledError
from models.conversation import BackendHandle, ConversationTurn, Role
from .locks import ReadWriteLock

logger = logging.getLogger(__name__)

DEFAULT_SYSTEM_PROMPT = (
    "You are a helpful assistant. "
    "Use the conversation history to provide contextual responses."
)
DEFAULT_HISTORY_WINDOW = 20
DEFAULT_MAX_WORKERS = 4
CANCEL_POLL_INTERVAL = 0.05


class SessionState(str, Enum):
    IDLE = "idle"
    AWAITING_RESPONSE = "awaiting_response"


class ConversationSession:
    """Turn log plus an atomically swappable generation backend."""

    def __init__(
        self,
        backend: BaseGenerationBackend,
        system_prompt: str = DEFAULT_SYSTEM_PROMPT,
        history_window: int = DEFAULT_HISTORY_WINDOW,
        backend_factory: Callable[..., BaseGenerationBackend] = create_backend,
        max_workers: int = DEFAULT_MAX_WORKERS,
    ):
        if history_window <= 0:
            raise ValueError("history_window must be positive")
        self.system_prompt = system_prompt
        self.history_window = history_window
        self._backend_factory = backend_factory

        self._lock = ReadWriteLock()
        self._turns: list[ConversationTurn] = []
        self._backend = backend
        self._handle = backend.handle
        self._in_flight = 0
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="generation"
        )

    @property
    def state(self) -> SessionState:
        with self._lock.read_locked():
            if self._in_flight:
                return SessionState.AWAITING_RESPONSE
            return SessionState.IDLE

    @property
    def active_handle(self) -> BackendHandle:
        with self._lock.read_locked():
            return self._handle

    def history(self, window: Optional[int] = None) -> list[ConversationTurn]:
        """Return the full log, or only its trailing ``window`` turns."""
        with self._lock.read_locked():
            if window is None:
                return list(self._turns)
            if window <= 0:
                return []
            return self._turns[-window:]

    def _outbound_messages(self) -> list[dict[str, str]]:
        """System prompt followed by the trailing window, oldest first.

        Caller must hold the lock.
        """
        system = ConversationTurn(role=Role.SYSTEM, content=self.system_prompt)
        recent = self._turns[-self.history_window :]
        return [system.to_message()] + [turn.to_message() for turn in recent]

    def query(self, question: str, cancel: Optional[threading.Event] = None) -> str:
        """Send ``question`` with recent history to the active backend.

        The user turn stays in the log even when generation fails; an
        assistant turn is appended only for a successful answer.

        Args:
            question: The user's message.
            cancel: Optional event; setting it stops waiting for the
                backend and raises ``GenerationCancelledError``.

        Returns:
            The backend's answer.
        """
        with self._lock.write_locked():
            self._turns.append(ConversationTurn(role=Role.USER, content=question))
            self._in_flight += 1

        answer = ""
        completed = False
        try:
            with self._lock.read_locked():
                backend = self._backend
                handle = self._handle
                messages = self._outbound_messages()

            logger.info(
                f"Dispatching {len(messages)} messages to {handle.identifier}"
            )
            answer = self._dispatch(backend, messages, cancel)
            completed = True
        finally:
            with self._lock.write_locked():
                self._in_flight -= 1
                if completed:
                    self._turns.append(
                        ConversationTurn(
                            role=Role.ASSISTANT,
                            content=answer,
                            backend=handle.identifier,
                        )
                    )
        return answer

    def _dispatch(
        self,
        backend: BaseGenerationBackend,
        messages: list[dict[str, str]],
        cancel: Optional[threading.Event],
    ) -> str:
        if cancel is None:
            return backend.generate(messages)
        if cancel.is_set():
            raise GenerationCancelledError(backend.provider)

        future = self._executor.submit(backend.generate, messages)
        while True:
            done, _ = wait([future], timeout=CANCEL_POLL_INTERVAL)
            if done:
                return future.result()
            if cancel.is_set():
                future.cancel()
                logger.warning(f"Request to {backend.provider} cancelled by caller")
                raise GenerationCancelledError(backend.provider)

    def switch_backend(
        self, provider: str, model: str, credential: str, **options: Any
    ) -> BackendHandle:
        """Replace the active backend.

        Calls already in flight keep the backend they started with. If the
        new backend cannot be built, the previous one stays active.
        """
        with self._lock.write_locked():
            backend = self._backend_factory(
                provider, credential=credential, model=model, **options
            )
            previous = self._handle
            self._backend = backend
            self._handle = backend.handle

        logger.info(
            f"Switched backend from {previous.identifier} to {backend.handle.identifier}"
        )
        return backend.handle

    def close(self) -> None:
        self._executor.shutdown(wait=False, cancel_futures=True)
