"""OpenAI-compatible chat backend for casual-cowriter."""

import base64
import logging
from typing import Any, AsyncIterator, Callable, Dict, List, Optional, Sequence

from casual_cowriter.catalog import GEMINI_OPENAI_BASE_URL
from casual_cowriter.exceptions import ContentBlockedError, QuotaExceededError
from casual_cowriter.generation.backend import (
    GenerationResponse,
    HistoryTurn,
    MessagePart,
    SessionConfig,
    StreamFragment,
)

logger = logging.getLogger(__name__)

QUOTA_STATUS_CODES = (401, 403, 429)
SAFETY_MARKERS = ("safety", "blocked", "prohibited_content")


def translate_error(error: Exception) -> Optional[Exception]:
    """
    Map an SDK error onto the cowriter error taxonomy.

    Returns:
        The typed replacement, or None if the error should propagate unchanged
    """
    status = getattr(error, "status_code", None)
    message = str(error)

    if status in QUOTA_STATUS_CODES:
        return QuotaExceededError(message, status_code=status)
    if status == 400 and any(marker in message.lower() for marker in SAFETY_MARKERS):
        return ContentBlockedError()
    return None


def _data_url(part: MessagePart) -> str:
    encoded = base64.b64encode(part.data or b"").decode("ascii")
    return f"data:{part.mime_type};base64,{encoded}"


def to_openai_content(parts: Sequence[MessagePart]) -> Any:
    """Convert message parts to an OpenAI chat `content` value."""
    if len(parts) == 1 and parts[0].is_text:
        return parts[0].text

    content: List[Dict[str, Any]] = []
    for part in parts:
        if part.is_text:
            content.append({"type": "text", "text": part.text})
        elif (part.mime_type or "").startswith("image/"):
            content.append({"type": "image_url", "image_url": {"url": _data_url(part)}})
        elif (part.mime_type or "").startswith("text/"):
            text = (part.data or b"").decode("utf-8", errors="replace")
            content.append({"type": "text", "text": f"[{part.name or 'attachment'}]\n{text}"})
        else:
            content.append(
                {
                    "type": "file",
                    "file": {"filename": part.name or "attachment", "file_data": _data_url(part)},
                }
            )
    return content


class OpenAIChatSession:
    """
    A chat session that keeps its own message list.

    Each reply is appended to the list, so a follow-up message on the same
    session (e.g. the refine pass after a draft) sees the earlier reply.
    """

    def __init__(self, client: Any, config: SessionConfig, history: Sequence[HistoryTurn]):
        self._client = client
        self._config = config
        self._messages: List[Dict[str, Any]] = []

        if config.system_instruction:
            self._messages.append({"role": "system", "content": config.system_instruction})
        for turn in history:
            role = "assistant" if turn.role == "model" else "user"
            self._messages.append({"role": role, "content": turn.text})

    @property
    def messages(self) -> List[Dict[str, Any]]:
        return list(self._messages)

    def _request_kwargs(self) -> Dict[str, Any]:
        config = self._config
        # top_k has no OpenAI-compatible field
        kwargs: Dict[str, Any] = {
            "model": config.model,
            "messages": list(self._messages),
            "temperature": config.temperature,
            "top_p": config.top_p,
            "max_tokens": config.max_output_tokens,
        }
        if config.stop_sequences:
            kwargs["stop"] = list(config.stop_sequences)

        google: Dict[str, Any] = {
            "safety_settings": [
                {"category": s.category, "threshold": s.threshold}
                for s in config.safety_settings
            ]
        }
        if config.thinking_budget is not None:
            google["thinking_config"] = {
                "thinking_budget": config.thinking_budget,
                "include_thoughts": True,
            }
        kwargs["extra_body"] = {"extra_body": {"google": google}}

        if config.enable_search:
            logger.warning(
                "Search grounding is not available through the OpenAI-compatible "
                "endpoint; sending request without it"
            )
        return kwargs

    async def send_message(self, parts: Sequence[MessagePart]) -> GenerationResponse:
        self._messages.append({"role": "user", "content": to_openai_content(parts)})

        try:
            response = await self._client.chat.completions.create(**self._request_kwargs())
        except Exception as e:
            translated = translate_error(e)
            if translated is None:
                raise
            raise translated from e

        choice = response.choices[0]
        if choice.finish_reason == "content_filter":
            raise ContentBlockedError()

        text = choice.message.content or ""
        self._messages.append({"role": "assistant", "content": text})
        logger.debug(f"Received {len(text)} chars from {self._config.model}")
        return GenerationResponse(text=text)

    async def send_message_stream(self, parts: Sequence[MessagePart]) -> AsyncIterator[StreamFragment]:
        self._messages.append({"role": "user", "content": to_openai_content(parts)})
        collected: List[str] = []

        try:
            stream = await self._client.chat.completions.create(
                stream=True, **self._request_kwargs()
            )
            async for chunk in stream:
                if not chunk.choices:
                    continue
                choice = chunk.choices[0]
                if choice.finish_reason == "content_filter":
                    raise ContentBlockedError()

                text = choice.delta.content if choice.delta else None
                if text:
                    collected.append(text)
                    yield StreamFragment(text=text)
        except ContentBlockedError:
            raise
        except Exception as e:
            translated = translate_error(e)
            if translated is None:
                raise
            raise translated from e

        self._messages.append({"role": "assistant", "content": "".join(collected)})


class OpenAIChatBackend:
    """
    Generation backend using an OpenAI-compatible chat completions API.

    Defaults to the Gemini API's OpenAI-compatible endpoint. A client is
    created per API key and reused, so rotating keys switches clients.

    Example:
        >>> backend = OpenAIChatBackend()
        >>> session = backend.create_session(session_config, history=[])
        >>> async for fragment in session.send_message_stream(parts):
        ...     print(fragment.text, end="")
    """

    def __init__(
        self,
        base_url: Optional[str] = GEMINI_OPENAI_BASE_URL,
        timeout: float = 120.0,
        max_retries: int = 0,
        client_factory: Optional[Callable[[str], Any]] = None,
    ):
        """
        Initialize the chat backend.

        Args:
            base_url: OpenAI-compatible endpoint (None = official OpenAI)
            timeout: Request timeout in seconds
            max_retries: SDK-level retries per request (0 = rely on the orchestrator)
            client_factory: Builds a client for an API key (defaults to AsyncOpenAI)
        """
        try:
            from openai import AsyncOpenAI
        except ImportError as e:
            raise ImportError(
                "openai is required for OpenAIChatBackend. "
                "Install with: pip install casual-cowriter"
            ) from e

        if client_factory is None:

            def client_factory(api_key: str) -> Any:
                return AsyncOpenAI(
                    api_key=api_key,
                    base_url=base_url,
                    timeout=timeout,
                    max_retries=max_retries,
                )

        self._client_factory = client_factory
        self._clients: Dict[str, Any] = {}

        logger.info(f"OpenAI chat backend initialized (base_url={base_url})")

    def _client_for(self, api_key: str) -> Any:
        if api_key not in self._clients:
            self._clients[api_key] = self._client_factory(api_key)
        return self._clients[api_key]

    def create_session(
        self, config: SessionConfig, history: Sequence[HistoryTurn]
    ) -> OpenAIChatSession:
        logger.debug(f"Creating chat session: model={config.model}, history={len(history)} turns")
        return OpenAIChatSession(self._client_for(config.api_key), config, history)
