import logging

from casual_cowriter.extractors.base import LLMTextTask
from casual_cowriter.prompts import STYLE_ANALYSIS_PROMPT

logger = logging.getLogger(__name__)


class StyleAnalyzer(LLMTextTask):
    """Derives a reusable style guide from a sample of prose."""

    async def analyze(self, sample: str) -> str:
        try:
            text = await self._complete(f"{STYLE_ANALYSIS_PROMPT}\n\nSAMPLE TEXT:\n{sample}")
        except Exception as e:
            logger.error(f"Style analysis failed: {e}")
            return ""
        return text.strip()
