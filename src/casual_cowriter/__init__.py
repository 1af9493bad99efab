"""
casual-cowriter: Story co-writing chat engine for the Gemini API.

Core components:
- knowledge: Document vectorization and cosine-similarity retrieval (RAG)
- context: Prompt composition from summary, memory, characters and knowledge
- generation: Streaming generation with thought parsing, model fallback and key rotation
- extractors: Memory, character, summary, style and plot-branch helpers
- storage: Session persistence (in-memory, SQLAlchemy)
- models: Core data models (AppConfig, ChatSession, ChatMessage, etc.)
"""

__version__ = "0.1.0"

from casual_cowriter.config import apply_writer_mode, load_app_config, parse_api_keys
from casual_cowriter.cowriter_service import CowriterService
from casual_cowriter.credentials import KeyRotationManager
from casual_cowriter.exceptions import (
    ConfigurationError,
    ContentBlockedError,
    CowriterError,
    QuotaExceededError,
)
from casual_cowriter.generation import GenerationOrchestrator
from casual_cowriter.models import (
    AppConfig,
    Attachment,
    CharacterProfile,
    ChatMessage,
    ChatSession,
    GenerationConfig,
    KnowledgeDocument,
    MemoryItem,
    SafetyThreshold,
    StreamUpdate,
    WriterMode,
)

__all__ = [
    "__version__",
    # Models
    "AppConfig",
    "Attachment",
    "CharacterProfile",
    "ChatMessage",
    "ChatSession",
    "GenerationConfig",
    "KnowledgeDocument",
    "MemoryItem",
    "SafetyThreshold",
    "StreamUpdate",
    "WriterMode",
    # Errors
    "CowriterError",
    "ConfigurationError",
    "ContentBlockedError",
    "QuotaExceededError",
    # Services
    "CowriterService",
    "GenerationOrchestrator",
    "KeyRotationManager",
    # Config
    "apply_writer_mode",
    "load_app_config",
    "parse_api_keys",
]
