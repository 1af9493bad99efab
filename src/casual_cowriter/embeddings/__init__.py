"""
Text embedding abstractions for casual-cowriter.

Provides the EmbeddingClient protocol and an OpenAI-compatible adapter
(used against the Gemini API's OpenAI-compatible endpoint by default).
"""

from casual_cowriter.embeddings.protocol import EmbeddingClient

__all__ = [
    "EmbeddingClient",
]

try:
    from casual_cowriter.embeddings.openai_embedding import OpenAIEmbeddingClient  # noqa: F401

    __all__.append("OpenAIEmbeddingClient")
except ImportError:
    pass
