import json
import logging
import re
from typing import List

from casual_llm import LLMProvider
from pydantic import ValidationError

from casual_cowriter.extractors.base import LLMTextTask
from casual_cowriter.models import PlotBranch
from casual_cowriter.prompts import BRANCHING_PROMPT

logger = logging.getLogger(__name__)

JSON_ARRAY_PATTERN = re.compile(r"\[.*\]", re.DOTALL)


def parse_plot_branches(text: str) -> List[PlotBranch]:
    """
    Parse the first JSON array in `text` into PlotBranch objects.

    Raises:
        json.JSONDecodeError: If the bracketed text is not valid JSON
        ValidationError: If an element does not match PlotBranch
    """
    match = JSON_ARRAY_PATTERN.search(text or "")
    if not match:
        return []
    return [PlotBranch.model_validate(item) for item in json.loads(match.group(0))]


class PlotBrancher(LLMTextTask):
    """Suggests alternative directions for the story."""

    def __init__(self, llm_provider: LLMProvider, temperature: float = 1.0):
        super().__init__(llm_provider, temperature=temperature)

    async def generate(self, context: str) -> List[PlotBranch]:
        try:
            text = await self._complete(f"{BRANCHING_PROMPT}\n\nCONTEXT:\n{context}")
            branches = parse_plot_branches(text)
        except (json.JSONDecodeError, ValidationError) as e:
            logger.error(f"Failed to parse plot branches: {e}")
            return []
        except Exception as e:
            logger.error(f"Plot branching failed: {e}")
            return []

        logger.info(f"Generated {len(branches)} plot branches")
        return branches
