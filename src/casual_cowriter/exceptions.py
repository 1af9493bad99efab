"""
Error taxonomy for casual-cowriter.

Degraded-data failures (an embedding that could not be computed) are never
raised; they surface as missing context instead. Everything else that ends a
turn is one of the exceptions below, or the backend's own exception when no
recovery path remains.
"""

from typing import Optional


class CowriterError(Exception):
    """Base class for all casual-cowriter errors."""


class ConfigurationError(CowriterError):
    """Raised before any network call when the client cannot run (e.g. no API key)."""


class ContentBlockedError(CowriterError):
    """Raised when the backend refuses a request on content-policy grounds. Never retried."""

    def __init__(
        self,
        message: str = (
            "Content blocked by safety settings. "
            "Try lowering the safety threshold in settings."
        ),
    ):
        super().__init__(message)


class QuotaExceededError(CowriterError):
    """Raised for rate-limit, quota and credential failures. Recoverable by fallback or rotation."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code
