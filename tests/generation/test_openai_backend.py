"""Tests for the OpenAI-compatible chat backend."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, Mock

import pytest

from casual_cowriter.exceptions import ContentBlockedError, QuotaExceededError
from casual_cowriter.generation import HistoryTurn, MessagePart, SafetySetting, SessionConfig


class StatusError(Exception):
    def __init__(self, message, status_code):
        super().__init__(message)
        self.status_code = status_code


class FakeStream:
    """Async iterable of chat completion chunks."""

    def __init__(self, deltas, finish_reason=None):
        self.chunks = [
            SimpleNamespace(
                choices=[SimpleNamespace(delta=SimpleNamespace(content=delta), finish_reason=None)]
            )
            for delta in deltas
        ]
        if finish_reason:
            self.chunks.append(
                SimpleNamespace(
                    choices=[SimpleNamespace(delta=SimpleNamespace(content=None), finish_reason=finish_reason)]
                )
            )

    def __aiter__(self):
        return self._iterate()

    async def _iterate(self):
        for chunk in self.chunks:
            yield chunk


def completion(text, finish_reason="stop"):
    return SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(content=text), finish_reason=finish_reason)]
    )


@pytest.fixture
def session_config():
    return SessionConfig(
        api_key="key-1",
        model="gemini-2.5-flash",
        system_instruction="You are a novelist.",
        temperature=0.9,
        top_p=0.95,
        top_k=40,
        max_output_tokens=1024,
        thinking_budget=1024,
        safety_settings=(SafetySetting("HARM_CATEGORY_HARASSMENT", "BLOCK_NONE"),),
    )


@pytest.fixture
def client():
    fake = Mock()
    fake.chat.completions.create = AsyncMock()
    return fake


@pytest.fixture
def backend(client):
    pytest.importorskip("openai")

    from casual_cowriter.generation.openai_backend import OpenAIChatBackend

    return OpenAIChatBackend(client_factory=lambda api_key: client)


def test_content_conversion():
    from casual_cowriter.generation.openai_backend import to_openai_content

    assert to_openai_content([MessagePart.from_text("hello")]) == "hello"

    content = to_openai_content(
        [MessagePart(data=b"png", mime_type="image/png", name="map.png"), MessagePart.from_text("Describe")]
    )
    assert content[0] == {"type": "image_url", "image_url": {"url": "data:image/png;base64,cG5n"}}
    assert content[1] == {"type": "text", "text": "Describe"}


@pytest.mark.asyncio
async def test_request_carries_history_and_options(backend, client, session_config):
    client.chat.completions.create.return_value = completion("Draft text")
    history = [HistoryTurn(role="user", text="Hi"), HistoryTurn(role="model", text="Hello")]

    session = backend.create_session(session_config, history)
    response = await session.send_message([MessagePart.from_text("Write")])

    assert response.text == "Draft text"
    kwargs = client.chat.completions.create.await_args.kwargs
    assert [m["role"] for m in kwargs["messages"]] == ["system", "user", "assistant", "user"]
    assert kwargs["model"] == "gemini-2.5-flash"
    assert kwargs["max_tokens"] == 1024
    assert "stop" not in kwargs
    google = kwargs["extra_body"]["extra_body"]["google"]
    assert google["thinking_config"]["thinking_budget"] == 1024
    assert google["safety_settings"] == [
        {"category": "HARM_CATEGORY_HARASSMENT", "threshold": "BLOCK_NONE"}
    ]


@pytest.mark.asyncio
async def test_follow_up_message_sees_previous_reply(backend, client, session_config):
    """The refine pass is sent on the same session and sees the draft."""
    client.chat.completions.create.side_effect = [completion("DRAFT"), FakeStream(["final"])]

    session = backend.create_session(session_config, [])
    await session.send_message([MessagePart.from_text("Write")])
    fragments = [f.text async for f in session.send_message_stream([MessagePart.from_text("Refine")])]

    assert fragments == ["final"]
    messages = client.chat.completions.create.await_args.kwargs["messages"]
    assert messages[-2] == {"role": "assistant", "content": "DRAFT"}
    assert messages[-1] == {"role": "user", "content": "Refine"}
    assert session.messages[-1] == {"role": "assistant", "content": "final"}


@pytest.mark.asyncio
async def test_stream_yields_deltas(backend, client, session_config):
    client.chat.completions.create.return_value = FakeStream(["Once ", None, "upon"])

    session = backend.create_session(session_config, [])
    fragments = [f.text async for f in session.send_message_stream([MessagePart.from_text("Go")])]

    assert fragments == ["Once ", "upon"]
    assert client.chat.completions.create.await_args.kwargs["stream"] is True


@pytest.mark.asyncio
async def test_content_filter_raises_blocked(backend, client, session_config):
    client.chat.completions.create.return_value = FakeStream(["partial"], finish_reason="content_filter")

    session = backend.create_session(session_config, [])
    with pytest.raises(ContentBlockedError):
        async for _ in session.send_message_stream([MessagePart.from_text("Go")]):
            pass


@pytest.mark.asyncio
async def test_rate_limit_maps_to_quota_error(backend, client, session_config):
    client.chat.completions.create.side_effect = StatusError("Resource has been exhausted", 429)

    session = backend.create_session(session_config, [])
    with pytest.raises(QuotaExceededError) as exc_info:
        await session.send_message([MessagePart.from_text("Go")])

    assert exc_info.value.status_code == 429


@pytest.mark.asyncio
async def test_other_errors_propagate_unchanged(backend, client, session_config):
    client.chat.completions.create.side_effect = StatusError("Internal", 500)

    session = backend.create_session(session_config, [])
    with pytest.raises(StatusError):
        await session.send_message([MessagePart.from_text("Go")])


def test_clients_are_cached_per_key(session_config):
    pytest.importorskip("openai")

    from casual_cowriter.generation.openai_backend import OpenAIChatBackend

    factory = Mock(side_effect=lambda key: Mock(name=key))
    backend = OpenAIChatBackend(client_factory=factory)

    backend.create_session(session_config, [])
    backend.create_session(session_config, [])

    factory.assert_called_once_with("key-1")
