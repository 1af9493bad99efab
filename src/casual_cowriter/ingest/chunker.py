"""Fixed-size text chunking for embedding."""

from typing import List

from casual_cowriter.catalog import CHUNK_SIZE_CHARS


def chunk_text(text: str, size: int = CHUNK_SIZE_CHARS) -> List[str]:
    """
    Split text into consecutive, non-overlapping chunks of `size` characters.

    Boundaries ignore words and sentences. Joining the result reproduces the
    input exactly; only the last chunk may be shorter than `size`.

    Raises:
        ValueError: If size is not positive
    """
    if size <= 0:
        raise ValueError("Chunk size must be positive")

    return [text[i : i + size] for i in range(0, len(text), size)]
