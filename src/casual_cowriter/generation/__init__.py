"""Response generation: session building, backends, streaming and recovery."""

from casual_cowriter.generation.backend import (
    GenerationBackend,
    GenerationResponse,
    GenerationSession,
    HistoryTurn,
    MessagePart,
    SafetySetting,
    SessionConfig,
    StreamFragment,
)
from casual_cowriter.generation.errors import classify_error
from casual_cowriter.generation.orchestrator import GenerationOrchestrator
from casual_cowriter.generation.session import (
    build_history,
    build_message_parts,
    build_session_config,
)
from casual_cowriter.generation.tag_parser import ParsedFragment, ThoughtTagParser

__all__ = [
    "GenerationBackend",
    "GenerationOrchestrator",
    "GenerationResponse",
    "GenerationSession",
    "HistoryTurn",
    "MessagePart",
    "ParsedFragment",
    "SafetySetting",
    "SessionConfig",
    "StreamFragment",
    "ThoughtTagParser",
    "build_history",
    "build_message_parts",
    "build_session_config",
    "classify_error",
]

try:
    from casual_cowriter.generation.openai_backend import OpenAIChatBackend  # noqa: F401

    __all__.append("OpenAIChatBackend")
except ImportError:
    pass
