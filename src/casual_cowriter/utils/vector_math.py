"""Vector helpers for embedding similarity."""

import math
from typing import Optional, Sequence


def dot_product(a: Sequence[float], b: Sequence[float]) -> float:
    return sum(x * y for x, y in zip(a, b))


def magnitude(a: Sequence[float]) -> float:
    return math.sqrt(sum(x * x for x in a))


def cosine_similarity(a: Optional[Sequence[float]], b: Optional[Sequence[float]]) -> float:
    """
    Cosine similarity between two vectors.

    Returns 0.0 instead of raising when either vector is missing or empty,
    when the lengths differ, or when either magnitude is zero.
    """
    if not a or not b or len(a) != len(b):
        return 0.0

    mag_a = magnitude(a)
    mag_b = magnitude(b)
    if mag_a == 0 or mag_b == 0:
        return 0.0

    return dot_product(a, b) / (mag_a * mag_b)
