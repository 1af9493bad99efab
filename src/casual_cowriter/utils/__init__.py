"""Utility functions for vector math and token estimation."""

from casual_cowriter.utils.tokens import estimate_attachment_tokens, estimate_tokens
from casual_cowriter.utils.vector_math import cosine_similarity, dot_product, magnitude

__all__ = [
    "cosine_similarity",
    "dot_product",
    "magnitude",
    "estimate_tokens",
    "estimate_attachment_tokens",
]
