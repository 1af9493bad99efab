"""
Generation orchestrator.

Runs one chat turn end to end: compose the prompt, open a backend session,
stream the response through the thought-tag parser, and recover from quota
failures by falling back from a pro model and then rotating credentials.
"""

import logging
from typing import AsyncIterator, Optional, Sequence

from casual_cowriter.catalog import FALLBACK_MODEL_ID, is_pro_model
from casual_cowriter.config import keys_from_environment
from casual_cowriter.context import ContextComposer
from casual_cowriter.credentials import KeyRotationManager
from casual_cowriter.exceptions import ConfigurationError, ContentBlockedError
from casual_cowriter.generation.backend import GenerationBackend, MessagePart
from casual_cowriter.generation.errors import classify_error
from casual_cowriter.generation.session import (
    build_history,
    build_message_parts,
    build_session_config,
)
from casual_cowriter.generation.tag_parser import ThoughtTagParser
from casual_cowriter.knowledge import KnowledgeRetriever
from casual_cowriter.models import (
    AppConfig,
    Attachment,
    ChatMessage,
    StreamUpdate,
    TurnUsage,
)
from casual_cowriter.prompts import CRITIC_PROMPT, DRAFTING_INSTRUCTION, REFINE_TEMPLATE
from casual_cowriter.utils.tokens import estimate_tokens

logger = logging.getLogger(__name__)


class GenerationOrchestrator:
    """
    Turn state machine over a generation backend.

    Share `credentials` with the embedding client so retrieval follows the
    same key rotation as generation.

    Example:
        >>> credentials = KeyRotationManager()
        >>> embedding = OpenAIEmbeddingClient(credentials=credentials)
        >>> orchestrator = GenerationOrchestrator(
        ...     backend=OpenAIChatBackend(),
        ...     retriever=KnowledgeRetriever(embedding),
        ...     credentials=credentials,
        ... )
        >>> orchestrator.start_chat(config)
        >>> async for update in orchestrator.send_message_stream("Continue the chapter"):
        ...     print(update.text, end="")
    """

    def __init__(
        self,
        backend: GenerationBackend,
        retriever: KnowledgeRetriever,
        credentials: Optional[KeyRotationManager] = None,
    ):
        self.backend = backend
        self.composer = ContextComposer(retriever)
        self.credentials = credentials or KeyRotationManager()
        self.config: Optional[AppConfig] = None

    def start_chat(self, config: AppConfig) -> None:
        """Bind a configuration and restart key rotation from its first key."""
        self.config = config
        keys = config.api_keys or keys_from_environment()
        self.credentials.reset(keys)
        logger.info(f"Chat started: model={config.model}, keys={len(self.credentials)}")

    async def send_message_stream(
        self,
        text: str,
        attachments: Sequence[Attachment] = (),
        history: Sequence[ChatMessage] = (),
        story_summary: Optional[str] = None,
    ) -> AsyncIterator[StreamUpdate]:
        """
        Generate a response for one user turn.

        Yields StreamUpdates carrying visible-text deltas and the aggregated
        thought trace; the last update carries TurnUsage.
        Fallback and key rotation only happen before the first update of an
        attempt; a failure after output has streamed is re-raised.

        Raises:
            ConfigurationError: If start_chat() was not called or no key is available
            ContentBlockedError: If the backend blocked the content
            Exception: The last backend error once fallback and rotation are exhausted
                or once output has already been streamed
        """
        if self.config is None:
            raise ConfigurationError("Chat session not initialized. Call start_chat() first.")
        if not self.credentials.has_keys:
            raise ConfigurationError("No API key provided. Please add one in settings.")

        config = self.config
        history_turns = build_history(history)
        composed = await self.composer.compose(config, text, attachments, story_summary)

        parts = build_message_parts(composed.prompt, attachments)
        if config.enable_auto_refine:
            parts.append(MessagePart.from_text(DRAFTING_INSTRUCTION))

        model = config.model
        attempts = 0
        max_attempts = max(1, len(self.credentials))

        while attempts < max_attempts:
            emitted = False
            try:
                session_config = build_session_config(config, self.credentials.current_key, model)
                session = self.backend.create_session(session_config, history_turns)

                if config.enable_auto_refine:
                    logger.info(f"Auto-refine: drafting with {session_config.model}")
                    draft = await session.send_message(parts)
                    refine_prompt = REFINE_TEMPLATE.format(critic_prompt=CRITIC_PROMPT, draft=draft.text)
                    stream = session.send_message_stream([MessagePart.from_text(refine_prompt)])
                else:
                    stream = session.send_message_stream(parts)

                parser = ThoughtTagParser()
                visible = ""
                thought = ""

                async for fragment in stream:
                    parsed = parser.feed(fragment.text)
                    visible += parsed.text
                    thought += parsed.thought
                    if parsed or fragment.grounding:
                        emitted = True
                        yield StreamUpdate(text=parsed.text, thought=thought, grounding=fragment.grounding)

                tail = parser.flush()
                if tail:
                    visible += tail.text
                    thought += tail.thought
                    emitted = True
                    yield StreamUpdate(text=tail.text, thought=thought)

                output_tokens = estimate_tokens(visible + thought)
                yield StreamUpdate(
                    thought=thought,
                    usage=TurnUsage(
                        input_tokens=composed.input_tokens,
                        output_tokens=output_tokens,
                        total_tokens=composed.input_tokens + output_tokens,
                    ),
                )
                return

            except Exception as e:
                kind = classify_error(e)
                logger.error(f"Generation attempt failed ({kind}) on {model}: {e}")

                if kind == "safety":
                    if isinstance(e, ContentBlockedError):
                        raise
                    raise ContentBlockedError() from e

                if kind != "quota":
                    raise

                if emitted:
                    logger.error("Output already streamed for this turn, not retrying")
                    raise

                if is_pro_model(model):
                    logger.warning(f"Falling back from {model} to {FALLBACK_MODEL_ID}")
                    model = FALLBACK_MODEL_ID
                    continue

                if not self.credentials.rotate():
                    raise
                attempts += 1
