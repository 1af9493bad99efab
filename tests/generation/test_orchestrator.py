"""Tests for the generation orchestrator turn loop."""

from typing import List, Optional, Sequence, Union
from unittest.mock import AsyncMock, Mock

import pytest

from casual_cowriter.credentials import KeyRotationManager
from casual_cowriter.exceptions import ConfigurationError, ContentBlockedError, QuotaExceededError
from casual_cowriter.generation import (
    GenerationOrchestrator,
    GenerationResponse,
    MessagePart,
    SessionConfig,
    StreamFragment,
)
from casual_cowriter.models import AppConfig, ChatMessage

Outcome = Union[Exception, List[Union[str, Exception]]]


class ScriptedSession:
    def __init__(self, outcome: Outcome, draft: str = "DRAFT"):
        self.outcome = outcome
        self.draft = draft
        self.sent: List[Sequence[MessagePart]] = []

    async def send_message(self, parts):
        self.sent.append(parts)
        if isinstance(self.outcome, Exception):
            raise self.outcome
        return GenerationResponse(text=self.draft)

    async def send_message_stream(self, parts):
        self.sent.append(parts)
        if isinstance(self.outcome, Exception):
            raise self.outcome
        for text in self.outcome:
            if isinstance(text, Exception):
                raise text
            yield StreamFragment(text=text)


class ScriptedBackend:
    """Backend that hands out one scripted outcome per created session."""

    def __init__(self, *outcomes: Outcome):
        self.outcomes = list(outcomes)
        self.configs: List[SessionConfig] = []
        self.sessions: List[ScriptedSession] = []
        self.histories = []

    def create_session(self, config, history):
        self.configs.append(config)
        self.histories.append(history)
        session = ScriptedSession(self.outcomes.pop(0))
        self.sessions.append(session)
        return session


@pytest.fixture
def retriever():
    stub = Mock()
    stub.retrieve = AsyncMock(return_value="")
    return stub


def make_config(**overrides) -> AppConfig:
    values = {"api_keys": ["key-1"], "model": "gemini-2.5-flash", "target_word_count": 0}
    values.update(overrides)
    return AppConfig(**values)


async def collect(orchestrator, text="Continue.", **kwargs):
    return [update async for update in orchestrator.send_message_stream(text, **kwargs)]


def quota_error():
    return QuotaExceededError("429 Resource exhausted", status_code=429)


@pytest.mark.asyncio
async def test_streams_visible_text_thought_and_usage(retriever):
    backend = ScriptedBackend(["Hello <thou", "ght>plan</thought>", " world"])
    orchestrator = GenerationOrchestrator(backend, retriever)
    orchestrator.start_chat(make_config())

    updates = await collect(orchestrator, "abcd")

    assert "".join(u.text for u in updates) == "Hello  world"
    assert updates[-1].thought == "plan"
    usage = updates[-1].usage
    assert usage.input_tokens == 1
    assert usage.output_tokens == 4  # ceil(len("Hello  world" + "plan") / 4)
    assert usage.total_tokens == 5


@pytest.mark.asyncio
async def test_no_credentials_fails_before_any_call(retriever, monkeypatch):
    """With zero keys the turn fails fast and no session is created."""
    monkeypatch.delenv("COWRITER_API_KEYS", raising=False)
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    monkeypatch.delenv("API_KEY", raising=False)
    backend = ScriptedBackend()
    orchestrator = GenerationOrchestrator(backend, retriever)
    orchestrator.start_chat(make_config(api_keys=[]))

    with pytest.raises(ConfigurationError):
        await collect(orchestrator)

    assert backend.configs == []
    retriever.retrieve.assert_not_awaited()


@pytest.mark.asyncio
async def test_not_started_raises_configuration_error(retriever):
    orchestrator = GenerationOrchestrator(ScriptedBackend(), retriever)

    with pytest.raises(ConfigurationError):
        await collect(orchestrator)


def test_environment_key_used_when_config_has_none(retriever, monkeypatch):
    monkeypatch.delenv("COWRITER_API_KEYS", raising=False)
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    monkeypatch.setenv("API_KEY", "env-key")
    orchestrator = GenerationOrchestrator(ScriptedBackend(), retriever)

    orchestrator.start_chat(make_config(api_keys=[]))

    assert orchestrator.credentials.keys == ["env-key"]


@pytest.mark.asyncio
async def test_pro_quota_falls_back_once_then_rotates(retriever):
    backend = ScriptedBackend(quota_error(), quota_error(), ["recovered"])
    orchestrator = GenerationOrchestrator(backend, retriever)
    orchestrator.start_chat(make_config(api_keys=["key-1", "key-2"], model="gemini-3-pro-preview"))

    updates = await collect(orchestrator)

    assert [(c.model, c.api_key) for c in backend.configs] == [
        ("gemini-3-pro-preview", "key-1"),
        ("gemini-2.5-flash", "key-1"),
        ("gemini-2.5-flash", "key-2"),
    ]
    assert "".join(u.text for u in updates) == "recovered"
    assert orchestrator.config.model == "gemini-3-pro-preview"


@pytest.mark.asyncio
async def test_fallback_does_not_consume_an_attempt(retriever):
    """A single key still gets the fallback retry after the pro model fails."""
    backend = ScriptedBackend(quota_error(), ["ok"])
    orchestrator = GenerationOrchestrator(backend, retriever)
    orchestrator.start_chat(make_config(model="gemini-2.5-pro"))

    updates = await collect(orchestrator)

    assert [c.model for c in backend.configs] == ["gemini-2.5-pro", "gemini-2.5-flash"]
    assert "".join(u.text for u in updates) == "ok"


@pytest.mark.asyncio
async def test_quota_exhaustion_reraises_last_error(retriever):
    last = quota_error()
    backend = ScriptedBackend(quota_error(), last)
    orchestrator = GenerationOrchestrator(backend, retriever)
    orchestrator.start_chat(make_config(api_keys=["key-1", "key-2"]))

    with pytest.raises(QuotaExceededError) as exc_info:
        await collect(orchestrator)

    assert exc_info.value is last
    assert [c.api_key for c in backend.configs] == ["key-1", "key-2"]
    assert orchestrator.credentials.index == 1


@pytest.mark.asyncio
async def test_quota_after_streamed_output_is_not_retried(retriever):
    """Once an attempt has yielded output, a later quota error ends the turn."""
    backend = ScriptedBackend(["Partial <thought>half", quota_error()], ["Full"])
    orchestrator = GenerationOrchestrator(backend, retriever)
    orchestrator.start_chat(make_config(api_keys=["key-1", "key-2"]))

    updates = []
    with pytest.raises(QuotaExceededError):
        async for update in orchestrator.send_message_stream("Continue."):
            updates.append(update)

    assert len(backend.configs) == 1
    assert orchestrator.credentials.current_key == "key-1"
    assert "".join(u.text for u in updates) == "Partial "
    assert [u.thought for u in updates] == ["half"]


@pytest.mark.asyncio
async def test_quota_before_output_still_rotates(retriever):
    backend = ScriptedBackend([quota_error()], ["Full"])
    orchestrator = GenerationOrchestrator(backend, retriever)
    orchestrator.start_chat(make_config(api_keys=["key-1", "key-2"]))

    updates = await collect(orchestrator)

    assert [c.api_key for c in backend.configs] == ["key-1", "key-2"]
    assert "".join(u.text for u in updates) == "Full"


@pytest.mark.asyncio
async def test_safety_block_is_not_retried(retriever):
    backend = ScriptedBackend(RuntimeError("Response was blocked due to SAFETY"), ["unused"])
    orchestrator = GenerationOrchestrator(backend, retriever)
    orchestrator.start_chat(make_config(api_keys=["key-1", "key-2"]))

    with pytest.raises(ContentBlockedError):
        await collect(orchestrator)

    assert len(backend.configs) == 1


@pytest.mark.asyncio
async def test_other_errors_propagate_immediately(retriever):
    backend = ScriptedBackend(ValueError("malformed request"), ["unused"])
    orchestrator = GenerationOrchestrator(backend, retriever)
    orchestrator.start_chat(make_config(api_keys=["key-1", "key-2"]))

    with pytest.raises(ValueError):
        await collect(orchestrator)

    assert orchestrator.credentials.index == 0


@pytest.mark.asyncio
async def test_auto_refine_drafts_then_streams_rewrite(retriever):
    backend = ScriptedBackend(["Polished scene"])
    orchestrator = GenerationOrchestrator(backend, retriever)
    orchestrator.start_chat(make_config(enable_auto_refine=True))

    updates = await collect(orchestrator, "Write the storm.")

    session = backend.sessions[0]
    draft_parts, refine_parts = session.sent
    assert draft_parts[0].text == "Write the storm."
    assert "[DRAFTING PHASE]" in draft_parts[-1].text
    assert "ORIGINAL DRAFT:\nDRAFT" in refine_parts[0].text
    assert "".join(u.text for u in updates) == "Polished scene"


@pytest.mark.asyncio
async def test_history_is_windowed(retriever):
    backend = ScriptedBackend(["ok"])
    orchestrator = GenerationOrchestrator(backend, retriever)
    orchestrator.start_chat(make_config())
    history = [ChatMessage(role="user", text=f"m{i}") for i in range(30)]
    history.append(ChatMessage(role="model", text="Error: boom", is_error=True))

    await collect(orchestrator, history=history)

    turns = backend.histories[0]
    assert len(turns) == 20
    assert turns[-1].text == "m29"


@pytest.mark.asyncio
async def test_session_rebuilt_with_current_key(retriever):
    """Rotation takes effect on the very next attempt."""
    shared = KeyRotationManager()
    backend = ScriptedBackend(quota_error(), ["ok"])
    orchestrator = GenerationOrchestrator(backend, retriever, credentials=shared)
    orchestrator.start_chat(make_config(api_keys=["a", "b"]))

    await collect(orchestrator)

    assert [c.api_key for c in backend.configs] == ["a", "b"]
    assert shared.current_key == "b"
