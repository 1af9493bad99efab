"""
Generation backend protocols for casual-cowriter.

The orchestrator depends only on these shapes: a backend creates a session
from an immutable SessionConfig plus prior history, and the session sends a
(possibly multi-part) message either as a single call or as a stream of
fragments. Any implementation that satisfies the protocols can be plugged in
- no inheritance required.
"""

from dataclasses import dataclass, field
from typing import AsyncIterator, List, Literal, Optional, Protocol, Sequence, Tuple

from typing_extensions import runtime_checkable

from casual_cowriter.models import Attachment, GroundingCitation


@dataclass(frozen=True)
class SafetySetting:
    category: str
    threshold: str


@dataclass(frozen=True)
class SessionConfig:
    """
    Everything needed to open a generation session.

    Built fresh before every request by build_session_config(), so a
    rotated key or a fallback model always takes effect on the next call.
    """

    api_key: str
    model: str
    system_instruction: str
    temperature: float
    top_p: float
    top_k: int
    max_output_tokens: int
    stop_sequences: Tuple[str, ...] = ()
    thinking_budget: Optional[int] = None
    enable_search: bool = False
    safety_settings: Tuple[SafetySetting, ...] = ()


@dataclass(frozen=True)
class HistoryTurn:
    role: Literal["user", "model"]
    text: str


@dataclass(frozen=True)
class MessagePart:
    """One part of a multi-part message: either text or inline binary data."""

    text: Optional[str] = None
    data: Optional[bytes] = None
    mime_type: Optional[str] = None
    name: Optional[str] = None

    @classmethod
    def from_text(cls, text: str) -> "MessagePart":
        return cls(text=text)

    @classmethod
    def from_attachment(cls, attachment: Attachment) -> "MessagePart":
        return cls(data=attachment.data, mime_type=attachment.mime_type, name=attachment.name)

    @property
    def is_text(self) -> bool:
        return self.text is not None


@dataclass
class GenerationResponse:
    text: str
    grounding: Optional[List[GroundingCitation]] = None


@dataclass
class StreamFragment:
    text: str = ""
    grounding: Optional[List[GroundingCitation]] = field(default=None)


@runtime_checkable
class GenerationSession(Protocol):
    """A conversation bound to one SessionConfig. Messages sent on it share context."""

    async def send_message(self, parts: Sequence[MessagePart]) -> GenerationResponse:
        """
        Send a message and wait for the complete response.

        Raises:
            ContentBlockedError: If the request was refused on content-policy grounds
            QuotaExceededError: On rate-limit, quota or credential failures
        """
        ...

    def send_message_stream(self, parts: Sequence[MessagePart]) -> AsyncIterator[StreamFragment]:
        """
        Send a message and iterate over the response as it is generated.

        Raises (during iteration):
            ContentBlockedError: If the request was refused on content-policy grounds
            QuotaExceededError: On rate-limit, quota or credential failures
        """
        ...


@runtime_checkable
class GenerationBackend(Protocol):
    def create_session(
        self, config: SessionConfig, history: Sequence[HistoryTurn]
    ) -> GenerationSession:
        """Open a new session seeded with prior conversation turns."""
        ...
