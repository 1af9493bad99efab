"""
Heuristic token estimates.

These numbers are for display only. Hard budgets (such as the retrieval
character cap) are enforced in characters and never derived from here.
"""

import math

# Flat cost charged per image or other binary attachment
ATTACHMENT_TOKENS = 258


def estimate_tokens(text: str) -> int:
    """Rough token estimate (~4 chars per token, rounded up)."""
    return math.ceil(len(text) / 4)


def estimate_attachment_tokens() -> int:
    return ATTACHMENT_TOKENS
