"""
Text-to-speech with an in-process cache.

Audio is cached per (voice, text) for the life of the synthesizer; the cache
only ever grows.
"""

import logging
from typing import Any, Callable, Dict, Optional, Protocol

from typing_extensions import runtime_checkable

from casual_cowriter.catalog import DEFAULT_TTS_VOICE, GEMINI_OPENAI_BASE_URL, TTS_MODEL_ID
from casual_cowriter.credentials import KeyRotationManager
from casual_cowriter.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


@runtime_checkable
class SpeechBackend(Protocol):
    async def synthesize(self, text: str, voice: str, api_key: str) -> Optional[bytes]:
        """Return audio bytes, or None if the service returned no audio."""
        ...


class OpenAISpeechBackend:
    """Speech backend using an OpenAI-compatible audio.speech endpoint."""

    def __init__(
        self,
        model: str = TTS_MODEL_ID,
        base_url: Optional[str] = GEMINI_OPENAI_BASE_URL,
        response_format: str = "wav",
        client_factory: Optional[Callable[[str], Any]] = None,
    ):
        try:
            from openai import AsyncOpenAI
        except ImportError as e:
            raise ImportError(
                "openai is required for OpenAISpeechBackend. "
                "Install with: pip install casual-cowriter"
            ) from e

        self.model = model
        self.response_format = response_format

        if client_factory is None:

            def client_factory(api_key: str) -> Any:
                return AsyncOpenAI(api_key=api_key, base_url=base_url)

        self._client_factory = client_factory
        self._clients: Dict[str, Any] = {}

    async def synthesize(self, text: str, voice: str, api_key: str) -> Optional[bytes]:
        if api_key not in self._clients:
            self._clients[api_key] = self._client_factory(api_key)

        response = await self._clients[api_key].audio.speech.create(
            model=self.model,
            voice=voice,
            input=text,
            response_format=self.response_format,
        )
        return response.content or None


class SpeechSynthesizer:
    """
    Cached speech synthesis.

    Example:
        >>> synthesizer = SpeechSynthesizer(OpenAISpeechBackend(), credentials)
        >>> audio = await synthesizer.synthesize("Chapter one.", voice="Kore")
    """

    def __init__(self, backend: SpeechBackend, credentials: KeyRotationManager):
        self.backend = backend
        self.credentials = credentials
        self._cache: Dict[str, bytes] = {}

    @staticmethod
    def cache_key(text: str, voice: str) -> str:
        return f"{voice}:{text}"

    @property
    def cache_size(self) -> int:
        return len(self._cache)

    async def synthesize(self, text: str, voice: str = DEFAULT_TTS_VOICE) -> Optional[bytes]:
        """
        Synthesize `text` with `voice`.

        Returns:
            Audio bytes, or None if synthesis failed or returned nothing

        Raises:
            ConfigurationError: If no API key is configured
        """
        key = self.cache_key(text, voice)
        if key in self._cache:
            logger.debug("Serving speech from cache")
            return self._cache[key]

        api_key = self.credentials.current_key
        if not api_key:
            raise ConfigurationError("API key required for speech synthesis")

        try:
            audio = await self.backend.synthesize(text, voice, api_key)
        except Exception as e:
            logger.error(f"Speech synthesis failed: {e}")
            return None

        if not audio:
            logger.warning("Speech synthesis returned no audio")
            return None

        self._cache[key] = audio
        return audio
