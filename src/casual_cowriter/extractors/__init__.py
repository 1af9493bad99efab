"""
Background story analysis via casual-llm providers.

Memory facts, character updates, the running summary, style guides and
plot branches. All helpers degrade to an empty (or unchanged) result on
provider failure.
"""

from casual_cowriter.extractors.base import LLMTextTask, format_transcript
from casual_cowriter.extractors.character_extractor import (
    LLMCharacterExtractor,
    merge_character_profiles,
    parse_character_lines,
)
from casual_cowriter.extractors.memory_extractor import LLMMemoryExtractor, parse_memory_bullets
from casual_cowriter.extractors.plot_brancher import PlotBrancher, parse_plot_branches
from casual_cowriter.extractors.style_analyzer import StyleAnalyzer
from casual_cowriter.extractors.summarizer import StorySummarizer

__all__ = [
    "LLMCharacterExtractor",
    "LLMMemoryExtractor",
    "LLMTextTask",
    "PlotBrancher",
    "StorySummarizer",
    "StyleAnalyzer",
    "format_transcript",
    "merge_character_profiles",
    "parse_character_lines",
    "parse_memory_bullets",
    "parse_plot_branches",
]
