import logging
import threading
from pathlib import Path
from typing import Any, Optional

from config import get_config_value
from sessions import ConversationSession
from .base import (
    DEFAULT_CONTEXT_TEMPLATE,
    DEFAULT_TOP_K,
    create_embedder_from_config,
    create_session_from_config,
    create_vector_store_from_config,
)
from .retrieval import Retriever, format_context

logger = logging.getLogger(__name__)


class QueryOrchestrator:
    """Answers questions through a conversation session.

    With a retriever, each question is first matched against the vector
    store and any hits are prepended as a context block. Without one the
    question goes to the session unchanged. Errors from retrieval or
    generation propagate as-is; nothing is retried here.
    """

    def __init__(
        self,
        session: ConversationSession,
        retriever: Optional[Retriever] = None,
        context_template: str = DEFAULT_CONTEXT_TEMPLATE,
    ):
        self.session = session
        self.retriever = retriever
        self.context_template = context_template

    @classmethod
    def from_config(
        cls,
        config: dict[str, Any],
        config_path: Path,
        retrieval: Optional[bool] = None,
        provider: Optional[str] = None,
        model: Optional[str] = None,
    ) -> "QueryOrchestrator":
        """Create an orchestrator from configuration.

        ``retrieval`` overrides ``retrieval.enabled``; ``provider`` and
        ``model`` override the ``[llm]`` section.
        """
        session = create_session_from_config(config, provider=provider, model=model)

        if retrieval is None:
            retrieval = get_config_value(config, "retrieval.enabled", True)

        retriever = None
        if retrieval:
            embedder = create_embedder_from_config(config)
            vector_store = create_vector_store_from_config(config, config_path, embedder)
            retriever = Retriever(
                embedder=embedder,
                vector_store=vector_store,
                top_k=get_config_value(config, "retrieval.top_k", DEFAULT_TOP_K),
            )

        return cls(
            session=session,
            retriever=retriever,
            context_template=get_config_value(
                config, "retrieval.context_template", DEFAULT_CONTEXT_TEMPLATE
            ),
        )

    def build_prompt(self, question: str) -> str:
        """Question augmented with retrieved context, if any was found."""
        if self.retriever is None:
            return question

        results = self.retriever.retrieve(question)
        if not results:
            return question

        return self.context_template.format(
            context=format_context(results), question=question
        )

    def answer(self, question: str, cancel: Optional[threading.Event] = None) -> str:
        prompt = self.build_prompt(question)
        return self.session.query(prompt, cancel=cancel)
