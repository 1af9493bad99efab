"""OpenAI-compatible embedding client for casual-cowriter."""

import logging
from typing import Any, Callable, Dict, List, Optional

from casual_cowriter.catalog import EMBEDDING_MODEL_ID, GEMINI_OPENAI_BASE_URL
from casual_cowriter.credentials import KeyRotationManager

logger = logging.getLogger(__name__)


class OpenAIEmbeddingClient:
    """
    Embedding client using an OpenAI-compatible embeddings API.

    Defaults to the Gemini API's OpenAI-compatible endpoint, but any
    compatible service (OpenAI, Azure, OpenRouter, local servers) works by
    passing `base_url` and `model`.

    The ambient credential comes from a shared KeyRotationManager, so live
    retrieval follows key rotation. Bulk vectorization passes an explicit
    `api_key` instead.

    Example:
        >>> credentials = KeyRotationManager(["key-1", "key-2"])
        >>> client = OpenAIEmbeddingClient(credentials=credentials)
        >>> vector = await client.embed("Chapter one begins at dawn")
    """

    def __init__(
        self,
        credentials: Optional[KeyRotationManager] = None,
        model: str = EMBEDDING_MODEL_ID,
        base_url: Optional[str] = GEMINI_OPENAI_BASE_URL,
        dimensions: Optional[int] = None,
        timeout: float = 30.0,
        max_retries: int = 0,
        client_factory: Optional[Callable[[str], Any]] = None,
    ):
        """
        Initialize the embedding client.

        Args:
            credentials: Shared rotation state providing the ambient key
            model: Embedding model name (default: text-embedding-004)
            base_url: OpenAI-compatible endpoint (None = official OpenAI)
            dimensions: Optional output dimension for models that support it
            timeout: Request timeout in seconds
            max_retries: SDK-level retries per request (0 = rely on callers)
            client_factory: Builds a client for an API key (defaults to AsyncOpenAI)
        """
        try:
            from openai import AsyncOpenAI
        except ImportError as e:
            raise ImportError(
                "openai is required for OpenAIEmbeddingClient. "
                "Install with: pip install casual-cowriter"
            ) from e

        self._credentials = credentials or KeyRotationManager()
        self._model = model
        self._dimensions = dimensions

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

        logger.info(f"OpenAI embedding client initialized: {model} (base_url={base_url})")

    @property
    def model_name(self) -> str:
        """Identifier of the embedding model."""
        return self._model

    def _client_for(self, api_key: str) -> Any:
        if api_key not in self._clients:
            self._clients[api_key] = self._client_factory(api_key)
        return self._clients[api_key]

    async def embed(self, text: str, api_key: Optional[str] = None) -> Optional[List[float]]:
        """
        Embed text, returning None instead of raising on any failure.

        Args:
            text: Text to embed
            api_key: Credential override (falls back to the active rotation key)

        Returns:
            Embedding vector, or None
        """
        key = api_key or self._credentials.current_key
        if not key:
            logger.debug("No API key available for embedding")
            return None

        kwargs: Dict[str, Any] = {"model": self._model, "input": text}
        if self._dimensions is not None:
            kwargs["dimensions"] = self._dimensions

        try:
            response = await self._client_for(key).embeddings.create(**kwargs)
            vector = list(response.data[0].embedding)
        except Exception as e:
            logger.warning(f"Embedding error (possibly rate limited): {e}")
            return None

        if not vector:
            return None
        return vector
