import logging
import re
from typing import List, Sequence

from casual_cowriter.extractors.base import NO_UPDATE, LLMTextTask, format_transcript
from casual_cowriter.models import ChatMessage, MemoryItem
from casual_cowriter.prompts import MEMORY_EXTRACTION_PROMPT

logger = logging.getLogger(__name__)

BULLET_PATTERN = re.compile(r"^[•\-\*]\s*")
MIN_FACT_LENGTH = 5


def parse_memory_bullets(text: str) -> List[str]:
    """
    Parse a bulleted fact list.

    Returns [] when the model answered NO_UPDATE. Bullet markers are stripped
    and lines of 5 characters or fewer are dropped.
    """
    if not text or NO_UPDATE in text:
        return []

    facts = []
    for line in text.split("\n"):
        fact = BULLET_PATTERN.sub("", line.strip()).strip()
        if len(fact) > MIN_FACT_LENGTH:
            facts.append(fact)
    return facts


class LLMMemoryExtractor(LLMTextTask):
    """Extracts long-term story facts from recent conversation turns."""

    async def extract(self, messages: Sequence[ChatMessage]) -> List[MemoryItem]:
        if not messages:
            return []

        prompt = f"{MEMORY_EXTRACTION_PROMPT}\n\nCONVERSATION:\n{format_transcript(messages)}"

        try:
            logger.debug(f"Extracting memories from {len(messages)} messages")
            text = await self._complete(prompt)
        except Exception as e:
            logger.error(f"Memory extraction failed: {e}")
            return []

        memories = [MemoryItem(content=fact, origin="auto") for fact in parse_memory_bullets(text)]
        logger.info(f"Extracted {len(memories)} story memories")
        return memories
