"""
Failure classification for generation attempts.

Typed errors raised by the backend adapters are checked first; untyped
errors fall back to the status code and message heuristics used by the
hosted API's error strings.
"""

import logging
from typing import Literal

from casual_cowriter.exceptions import ContentBlockedError, QuotaExceededError

logger = logging.getLogger(__name__)

ErrorKind = Literal["safety", "quota", "other"]

QUOTA_STATUS_CODES = (429, 403)


def classify_error(error: BaseException) -> ErrorKind:
    """
    Classify a failed generation attempt.

    Returns:
        "safety" - content-policy block, never retried
        "quota" - rate-limit, quota or credential failure, recoverable by
            model fallback or key rotation
        "other" - anything else, never retried
    """
    if isinstance(error, ContentBlockedError):
        return "safety"
    if isinstance(error, QuotaExceededError):
        return "quota"

    message = str(error)
    if "SAFETY" in message or "blocked" in message:
        return "safety"

    status = getattr(error, "status_code", None) or getattr(error, "status", None)
    if status in QUOTA_STATUS_CODES:
        return "quota"

    if (
        "429" in message
        or "403" in message
        or "quota" in message.lower()
        or "RESOURCE_EXHAUSTED" in message
    ):
        return "quota"

    return "other"
