"""Prompt composition from summary, memory, characters and retrieved knowledge."""

from casual_cowriter.context.composer import (
    ContextComposer,
    format_character_profiles,
    format_memories,
)

__all__ = [
    "ContextComposer",
    "format_character_profiles",
    "format_memories",
]
