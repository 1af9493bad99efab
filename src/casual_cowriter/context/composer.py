"""
Prompt composition from the story's context sources.

Sections are always emitted in the same order and only when their source is
non-empty: story summary, long-term memory, character notes, retrieved
knowledge, length mandate, then the user's own input.
"""

import logging
from typing import List, Optional, Sequence, Tuple

from casual_cowriter.catalog import MIN_MANDATED_WORD_COUNT
from casual_cowriter.knowledge import KnowledgeRetriever
from casual_cowriter.models import (
    AppConfig,
    Attachment,
    CharacterProfile,
    ComposedPrompt,
    MemoryItem,
)
from casual_cowriter.prompts import LENGTH_MANDATE_TEMPLATE
from casual_cowriter.utils.tokens import estimate_attachment_tokens, estimate_tokens

logger = logging.getLogger(__name__)


def format_memories(memories: Sequence[MemoryItem]) -> str:
    return "\n".join(f"- {m.content}" for m in memories)


def format_character_profiles(profiles: Sequence[CharacterProfile]) -> str:
    return "\n".join(
        f"\n[CHARACTER]\nName: {p.name}\nDescription: {p.description}\nStatus: {p.current_status}\n"
        for p in profiles
    )


class ContextComposer:
    """Assembles the final prompt and an advisory input-token estimate."""

    def __init__(self, retriever: KnowledgeRetriever):
        self.retriever = retriever

    async def compose(
        self,
        config: AppConfig,
        user_input: str,
        attachments: Sequence[Attachment] = (),
        story_summary: Optional[str] = None,
    ) -> ComposedPrompt:
        """
        Compose the prompt for one turn.

        Args:
            config: Current application configuration
            user_input: Raw text typed by the user
            attachments: Files sent with the turn (non-text ones add a flat token cost)
            story_summary: Running "story so far" summary, if any

        Returns:
            ComposedPrompt with the prompt text, estimated input tokens and
            the names of the sections that were included
        """
        sections: List[Tuple[str, str]] = []
        input_tokens = estimate_tokens(user_input)

        if story_summary:
            sections.append(
                (
                    "story_summary",
                    f"\nTHE STORY SO FAR:\n<narrative_context>\n{story_summary}\n</narrative_context>",
                )
            )
            input_tokens += estimate_tokens(story_summary)

        if config.memories:
            memory_text = format_memories(config.memories)
            sections.append(
                ("memory", f"\nLONG-TERM MEMORY:\n<memory_bank>\n{memory_text}\n</memory_bank>")
            )
            input_tokens += estimate_tokens(memory_text)

        if config.character_profiles:
            character_text = format_character_profiles(config.character_profiles)
            sections.append(
                (
                    "characters",
                    f"\nCHARACTER NOTES:\n<character_profiles>\n{character_text}\n</character_profiles>",
                )
            )
            input_tokens += estimate_tokens(character_text)

        if config.knowledge_files:
            relevant_context = await self.retriever.retrieve(user_input, config.knowledge_files)
            if relevant_context:
                sections.append(
                    (
                        "knowledge",
                        f"\nSTORY BIBLE CONTEXT:\n<active_story_context>\n{relevant_context}\n</active_story_context>",
                    )
                )
                input_tokens += estimate_tokens(relevant_context)

        if config.target_word_count > MIN_MANDATED_WORD_COUNT:
            mandate = LENGTH_MANDATE_TEMPLATE.format(target=config.target_word_count)
            sections.append(("length_mandate", mandate))
            input_tokens += estimate_tokens(mandate)

        for attachment in attachments:
            if not attachment.is_text:
                input_tokens += estimate_attachment_tokens()

        if sections:
            body = "\n".join(text for _, text in sections)
            prompt = f"{body}\n\nUSER INPUT: {user_input}"
        else:
            prompt = user_input

        logger.debug(
            f"Composed prompt with sections={[name for name, _ in sections]}, "
            f"estimated input tokens={input_tokens}"
        )

        return ComposedPrompt(
            prompt=prompt,
            input_tokens=input_tokens,
            sections=[name for name, _ in sections],
        )
