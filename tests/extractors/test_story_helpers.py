"""Tests for the summarizer, style analyzer and plot brancher."""

from unittest.mock import AsyncMock, Mock

import pytest

from casual_cowriter.extractors import PlotBrancher, StorySummarizer, StyleAnalyzer, parse_plot_branches


def provider_returning(content):
    provider = Mock()
    provider.chat = AsyncMock(return_value=Mock(content=content))
    return provider


def failing_provider():
    provider = Mock()
    provider.chat = AsyncMock(side_effect=RuntimeError("503 unavailable"))
    return provider


class TestStorySummarizer:
    @pytest.mark.asyncio
    async def test_returns_updated_summary(self):
        provider = provider_returning("  Ada survived the storm.  ")

        summary = await StorySummarizer(provider).summarize("Ada waited.", "MODEL: The storm hit.")

        assert summary == "Ada survived the storm."
        prompt = provider.chat.await_args.args[0][0].content
        assert "OLD SUMMARY:\nAda waited." in prompt
        assert "NEW EVENTS:\nMODEL: The storm hit." in prompt

    @pytest.mark.asyncio
    async def test_empty_summary_uses_story_begins(self):
        provider = provider_returning("Summary")

        await StorySummarizer(provider).summarize("", "events")

        assert "The story begins." in provider.chat.await_args.args[0][0].content

    @pytest.mark.asyncio
    async def test_failure_keeps_current_summary(self):
        summary = await StorySummarizer(failing_provider()).summarize("Ada waited.", "events")
        assert summary == "Ada waited."


class TestStyleAnalyzer:
    @pytest.mark.asyncio
    async def test_returns_style_guide(self):
        analyzer = StyleAnalyzer(provider_returning("Short sentences. Present tense."))
        assert await analyzer.analyze("She runs. He waits.") == "Short sentences. Present tense."

    @pytest.mark.asyncio
    async def test_failure_returns_empty_string(self):
        assert await StyleAnalyzer(failing_provider()).analyze("sample") == ""


class TestPlotBrancher:
    def test_parses_first_json_array(self):
        text = 'Here you go:\n[{"title": "Mutiny", "description": "The crew turns."}]\nEnjoy!'

        branches = parse_plot_branches(text)

        assert [(b.title, b.description) for b in branches] == [("Mutiny", "The crew turns.")]

    def test_no_array_means_no_branches(self):
        assert parse_plot_branches("I cannot help with that.") == []

    @pytest.mark.asyncio
    async def test_generate(self):
        content = '[{"title": "A", "description": "a"}, {"title": "B", "description": "b"}]'
        branches = await PlotBrancher(provider_returning(content)).generate("context")

        assert [b.title for b in branches] == ["A", "B"]

    @pytest.mark.asyncio
    async def test_invalid_json_returns_empty(self):
        branches = await PlotBrancher(provider_returning("[not json]")).generate("context")
        assert branches == []

    @pytest.mark.asyncio
    async def test_provider_failure_returns_empty(self):
        assert await PlotBrancher(failing_provider()).generate("context") == []
