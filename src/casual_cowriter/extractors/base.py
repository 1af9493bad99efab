"""
Shared plumbing for single-prompt LLM helpers.

Every extractor sends one user message to a casual-llm provider and parses
the plain-text answer. Point the provider at a fast model; these calls run
in the background of a chat turn.
"""

import logging
from typing import Sequence

from casual_llm import LLMProvider, UserMessage

from casual_cowriter.models import ChatMessage

logger = logging.getLogger(__name__)

NO_UPDATE = "NO_UPDATE"


def format_transcript(messages: Sequence[ChatMessage]) -> str:
    """Render messages as `ROLE: text` lines."""
    return "\n".join(f"{message.role.upper()}: {message.text}" for message in messages)


class LLMTextTask:
    """Base class holding the provider and the single-call helper."""

    def __init__(self, llm_provider: LLMProvider, temperature: float = 0.3):
        self.llm_provider = llm_provider
        self.temperature = temperature

    async def _complete(self, prompt: str) -> str:
        """
        Send one prompt and return the response text.

        Raises:
            Exception: If the provider call fails
        """
        response = await self.llm_provider.chat(
            [UserMessage(content=prompt)],
            response_format="text",
            temperature=self.temperature,
        )
        return response.content or ""
