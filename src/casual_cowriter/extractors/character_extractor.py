"""
Character profile extraction and reconciliation.

The model reports changed characters as `name | description | status`
lines. Updates are folded into the existing profile list by name.
"""

import logging
from typing import Dict, List, Sequence

from casual_cowriter.extractors.base import NO_UPDATE, LLMTextTask, format_transcript
from casual_cowriter.models import CharacterProfile, ChatMessage
from casual_cowriter.prompts import CHARACTER_EXTRACTION_PROMPT

logger = logging.getLogger(__name__)


def parse_character_lines(text: str) -> List[CharacterProfile]:
    if not text or NO_UPDATE in text:
        return []

    profiles = []
    for line in text.split("\n"):
        if "|" not in line:
            continue
        parts = [part.strip() for part in line.split("|")]
        if len(parts) < 3 or not parts[0]:
            continue
        profiles.append(
            CharacterProfile(name=parts[0], description=parts[1], current_status=parts[2])
        )
    return profiles


def merge_character_profiles(
    existing: Sequence[CharacterProfile], updates: Sequence[CharacterProfile]
) -> List[CharacterProfile]:
    """
    Fold updates into existing profiles.

    Profiles match on case-insensitive exact name. A matched profile takes the
    update's description, status and timestamp but keeps its own id; later
    updates for the same name win. Unmatched updates are appended in order.

    Returns:
        New list; the inputs are not modified
    """
    merged = [profile.model_copy() for profile in existing]
    by_name: Dict[str, int] = {profile.name.strip().lower(): i for i, profile in enumerate(merged)}

    for update in updates:
        key = update.name.strip().lower()
        if key in by_name:
            index = by_name[key]
            merged[index] = merged[index].model_copy(
                update={
                    "description": update.description,
                    "current_status": update.current_status,
                    "updated_at": update.updated_at,
                }
            )
        else:
            by_name[key] = len(merged)
            merged.append(update.model_copy())

    return merged


class LLMCharacterExtractor(LLMTextTask):
    """Extracts character description and status changes from recent turns."""

    async def extract(self, messages: Sequence[ChatMessage]) -> List[CharacterProfile]:
        if not messages:
            return []

        prompt = f"{CHARACTER_EXTRACTION_PROMPT}\n\nCONVERSATION:\n{format_transcript(messages)}"

        try:
            text = await self._complete(prompt)
        except Exception as e:
            logger.error(f"Character extraction failed: {e}")
            return []

        updates = parse_character_lines(text)
        logger.info(f"Extracted {len(updates)} character updates")
        return updates
