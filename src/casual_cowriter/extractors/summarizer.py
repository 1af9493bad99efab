import logging

from casual_cowriter.extractors.base import LLMTextTask
from casual_cowriter.prompts import SUMMARY_TEMPLATE

logger = logging.getLogger(__name__)

EMPTY_SUMMARY = "The story begins."


class StorySummarizer(LLMTextTask):
    """Maintains the running "story so far" summary."""

    async def summarize(self, current_summary: str, new_events: str) -> str:
        """
        Fold new events into the summary.

        Returns:
            The updated summary, or `current_summary` unchanged on any failure
        """
        prompt = SUMMARY_TEMPLATE.format(
            current_summary=current_summary or EMPTY_SUMMARY,
            new_events=new_events,
        )

        try:
            text = await self._complete(prompt)
        except Exception as e:
            logger.error(f"Story summary update failed: {e}")
            return current_summary

        return text.strip() or current_summary
