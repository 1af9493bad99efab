"""
Cowriter service - turn runner facade.

Records each user turn and the streamed model reply on a ChatSession,
aggregates token usage, turns terminal generation failures into an error
turn, periodically extracts long-term memories, and persists through a
SessionStore.
"""

import logging
from datetime import datetime
from typing import Callable, List, Optional, Sequence

from casual_cowriter.catalog import MEMORY_CONTEXT_MESSAGES, MEMORY_UPDATE_INTERVAL
from casual_cowriter.extractors import LLMMemoryExtractor
from casual_cowriter.generation import GenerationOrchestrator
from casual_cowriter.models import Attachment, ChatMessage, ChatSession, MemoryItem, StreamUpdate
from casual_cowriter.storage import SessionStore

logger = logging.getLogger(__name__)

DEFAULT_SESSION_TITLE = ChatSession.model_fields["title"].default
TITLE_LENGTH = 30


def title_from_text(text: str) -> str:
    return text[:TITLE_LENGTH] + ("..." if len(text) > TITLE_LENGTH else "")


class CowriterService:
    """
    Runs chat turns against a started GenerationOrchestrator.

    Example:
        >>> service = CowriterService(orchestrator, store=InMemorySessionStore())
        >>> session = ChatSession()
        >>> reply = await service.send_message(session, "Open on a rainy harbour")
        >>> print(reply.text)
    """

    def __init__(
        self,
        orchestrator: GenerationOrchestrator,
        store: Optional[SessionStore] = None,
        memory_extractor: Optional[LLMMemoryExtractor] = None,
        memory_interval: int = MEMORY_UPDATE_INTERVAL,
        memory_context: int = MEMORY_CONTEXT_MESSAGES,
    ):
        """
        Args:
            orchestrator: Generation orchestrator (start_chat() already called)
            store: Optional persistence for sessions and config
            memory_extractor: Optional extractor run every `memory_interval` user turns
            memory_interval: User turns between memory extractions
            memory_context: Number of most recent messages sent to the extractor
        """
        self.orchestrator = orchestrator
        self.store = store
        self.memory_extractor = memory_extractor
        self.memory_interval = memory_interval
        self.memory_context = memory_context

        logger.info(
            f"CowriterService initialized: store={type(store).__name__ if store else None}, "
            f"memory_extraction={'enabled' if memory_extractor else 'disabled'}"
        )

    async def send_message(
        self,
        session: ChatSession,
        text: str,
        attachments: Sequence[Attachment] = (),
        on_update: Optional[Callable[[ChatMessage, StreamUpdate], None]] = None,
    ) -> ChatMessage:
        """
        Run one turn and record it on `session`.

        Args:
            session: Session to append the user and model turns to (mutated)
            text: User input
            attachments: Files sent with the turn
            on_update: Called with the model turn after every stream update

        Returns:
            The model turn; `is_error` is set if generation failed
        """
        history = list(session.messages)

        user_message = ChatMessage(role="user", text=text, attachments=list(attachments))
        model_message = ChatMessage(role="model", text="")
        session.messages.extend([user_message, model_message])

        if session.title == DEFAULT_SESSION_TITLE and text:
            session.title = title_from_text(text)

        try:
            stream = self.orchestrator.send_message_stream(
                text,
                attachments=attachments,
                history=history,
                story_summary=session.story_summary,
            )
            async for update in stream:
                model_message.text += update.text
                if update.thought:
                    model_message.thought = update.thought
                if update.grounding:
                    model_message.grounding = update.grounding
                if update.usage:
                    user_message.token_count = update.usage.input_tokens
                    model_message.token_count = update.usage.output_tokens
                    session.total_tokens += update.usage.total_tokens
                if on_update:
                    on_update(model_message, update)
        except Exception as e:
            logger.error(f"Turn failed in session {session.id}: {e}")
            model_message.text = f"Error: {e}"
            model_message.is_error = True

        session.updated_at = datetime.now()

        if self._should_extract_memories(session):
            await self._extract_memories(session)

        if self.store:
            self.store.save_session(session)

        return model_message

    def _should_extract_memories(self, session: ChatSession) -> bool:
        if not self.memory_extractor or self.memory_interval <= 0:
            return False
        user_turns = sum(1 for message in session.messages if message.role == "user")
        return user_turns > 0 and user_turns % self.memory_interval == 0

    async def _extract_memories(self, session: ChatSession) -> List[MemoryItem]:
        config = self.orchestrator.config
        if config is None:
            return []

        recent = session.messages[-self.memory_context :]
        new_memories = await self.memory_extractor.extract(recent)
        if not new_memories:
            return []

        config = config.model_copy(update={"memories": [*config.memories, *new_memories]})
        self.orchestrator.config = config
        if self.store:
            self.store.save_app_config(config)

        logger.info(f"Added {len(new_memories)} auto memories (total {len(config.memories)})")
        return new_memories
