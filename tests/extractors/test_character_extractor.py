"""Tests for character extraction and merging."""

from datetime import datetime
from unittest.mock import AsyncMock, Mock

import pytest

from casual_cowriter.extractors import (
    LLMCharacterExtractor,
    merge_character_profiles,
    parse_character_lines,
)
from casual_cowriter.models import CharacterProfile, ChatMessage


def test_parse_pipe_separated_lines():
    text = (
        "Ada | Lighthouse keeper, grey eyes | Waiting for the storm\n"
        "Not a character line\n"
        "Bram | Fisherman |\n"
        "Broken | only two\n"
    )

    profiles = parse_character_lines(text)

    assert [(p.name, p.description, p.current_status) for p in profiles] == [
        ("Ada", "Lighthouse keeper, grey eyes", "Waiting for the storm"),
        ("Bram", "Fisherman", ""),
    ]


def test_parse_no_update():
    assert parse_character_lines("NO_UPDATE") == []


def test_merge_matches_names_case_insensitively():
    existing = [CharacterProfile(id="ada-1", name="Ada", description="Keeper", current_status="Asleep")]
    updates = [CharacterProfile(name="ADA", description="Keeper, older", current_status="Awake")]

    merged = merge_character_profiles(existing, updates)

    assert len(merged) == 1
    assert merged[0].id == "ada-1"
    assert merged[0].name == "Ada"
    assert merged[0].current_status == "Awake"
    assert merged[0].description == "Keeper, older"


def test_merge_last_update_wins_and_new_names_append():
    existing = [CharacterProfile(name="Ada", description="Keeper", current_status="Asleep")]
    updates = [
        CharacterProfile(name="Bram", description="Fisherman", current_status="At sea"),
        CharacterProfile(name="bram", description="Fisherman", current_status="Drowned"),
        CharacterProfile(name="ada", description="Keeper", current_status="Awake", updated_at=datetime(2030, 1, 1)),
    ]

    merged = merge_character_profiles(existing, updates)

    assert [p.name for p in merged] == ["Ada", "Bram"]
    assert merged[1].current_status == "Drowned"
    assert merged[0].updated_at == datetime(2030, 1, 1)


def test_merge_does_not_mutate_inputs():
    existing = [CharacterProfile(name="Ada", description="Keeper", current_status="Asleep")]

    merge_character_profiles(existing, [CharacterProfile(name="Ada", current_status="Awake")])

    assert existing[0].current_status == "Asleep"


@pytest.mark.asyncio
async def test_extract_parses_provider_response():
    provider = Mock()
    provider.chat = AsyncMock(return_value=Mock(content="Ada | Keeper | Awake"))
    extractor = LLMCharacterExtractor(provider)

    updates = await extractor.extract([ChatMessage(role="model", text="Ada woke.")])

    assert [p.name for p in updates] == ["Ada"]


@pytest.mark.asyncio
async def test_extract_failure_returns_empty():
    provider = Mock()
    provider.chat = AsyncMock(side_effect=RuntimeError("timeout"))

    assert await LLMCharacterExtractor(provider).extract([ChatMessage(role="user", text="hi")]) == []
