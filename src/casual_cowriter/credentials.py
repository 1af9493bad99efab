"""
API key rotation.

Holds an ordered list of credentials and the index of the active one. The
index only moves forward; once the last key fails the caller must treat the
list as exhausted. Only reset() (a fresh key list) brings it back to zero.
"""

import logging
from typing import Iterable, List, Optional

logger = logging.getLogger(__name__)


class KeyRotationManager:
    """Ordered credentials with monotonic, non-wrapping rotation."""

    def __init__(self, keys: Optional[Iterable[str]] = None):
        self._keys: List[str] = []
        self._index = 0
        self.reset(keys or [])

    @property
    def keys(self) -> List[str]:
        return list(self._keys)

    @property
    def index(self) -> int:
        return self._index

    @property
    def has_keys(self) -> bool:
        return len(self._keys) > 0

    @property
    def current_key(self) -> Optional[str]:
        """Active credential, or None when no keys are configured."""
        if not self._keys:
            return None
        return self._keys[self._index]

    def rotate(self) -> bool:
        """
        Advance to the next credential.

        Returns:
            True if a next key existed, False if all keys are exhausted
            (the index is left unchanged)
        """
        if self._index < len(self._keys) - 1:
            self._index += 1
            logger.info(f"Rotating to API key #{self._index + 1} of {len(self._keys)}")
            return True

        logger.warning(f"No more API keys to rotate to ({len(self._keys)} configured)")
        return False

    def reset(self, keys: Iterable[str]) -> None:
        """Replace the key list and restart from the first key."""
        self._keys = [key.strip() for key in keys if key and key.strip()]
        self._index = 0
        logger.debug(f"Key rotation reset with {len(self._keys)} keys")

    def __len__(self) -> int:
        return len(self._keys)
