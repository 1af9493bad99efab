"""
Embedding client protocol for casual-cowriter.

Unlike a plain embedder, an EmbeddingClient never raises on transport or API
failure: it returns None so retrieval and vectorization can degrade to "no
context" instead of failing the whole turn.
"""

from typing import List, Optional, Protocol

from typing_extensions import runtime_checkable


@runtime_checkable
class EmbeddingClient(Protocol):
    """
    Protocol for text embedding providers.

    Example:
        >>> client = OpenAIEmbeddingClient(credentials=KeyRotationManager(["key"]))
        >>> vector = await client.embed("The dragon sleeps under the mountain")
        >>> vector is None or len(vector) > 0
        True
    """

    @property
    def model_name(self) -> str:
        """Identifier of the embedding model (e.g., "text-embedding-004")."""
        ...

    async def embed(self, text: str, api_key: Optional[str] = None) -> Optional[List[float]]:
        """
        Embed text into a vector.

        Args:
            text: Text to embed
            api_key: Credential override. When omitted, the client's ambient
                credential (the active rotation key) is used.

        Returns:
            Embedding vector, or None if no credential is available or the
            request failed for any reason
        """
        ...
