"""
Model catalogue and fixed pipeline constants.
"""

from dataclasses import dataclass
from typing import List, Optional


@dataclass(frozen=True)
class ModelInfo:
    id: str
    name: str
    description: str
    is_thinking: bool = False


AVAILABLE_MODELS: List[ModelInfo] = [
    ModelInfo(
        id="gemini-2.5-flash",
        name="Gemini 2.5 Flash",
        description="Fast and economical, 1M context window",
        is_thinking=True,
    ),
    ModelInfo(
        id="gemini-2.5-flash-thinking",
        name="Gemini 2.5 Flash (Thinking)",
        description="Flash with a native reasoning budget for plot logic",
        is_thinking=True,
    ),
    ModelInfo(
        id="gemini-2.5-pro",
        name="Gemini 2.5 Pro",
        description="Balanced quality and cost",
        is_thinking=True,
    ),
    ModelInfo(
        id="gemini-3-pro-preview",
        name="Gemini 3.0 Pro",
        description="Best for creative writing, 2M context",
        is_thinking=True,
    ),
]

DEFAULT_MODEL_ID = "gemini-3-pro-preview"

# Cheaper model used when a "pro" model hits quota
FALLBACK_MODEL_ID = "gemini-2.5-flash"
EXTRACTION_MODEL_ID = "gemini-2.5-flash"

# Pseudo-model that maps onto flash with a native reasoning budget
FLASH_THINKING_MODEL_ID = "gemini-2.5-flash-thinking"
DEFAULT_THINKING_BUDGET = 1024

EMBEDDING_MODEL_ID = "text-embedding-004"
TTS_MODEL_ID = "gemini-2.5-flash-preview-tts"
DEFAULT_TTS_VOICE = "Kore"

GEMINI_OPENAI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta/openai/"

# Knowledge ingestion
CHUNK_SIZE_CHARS = 1000
MIN_CHUNK_CHARS = 50
EMBEDDING_PACING_SECONDS = 0.2
MAX_FILE_SIZE_BYTES = 100 * 1024 * 1024

# Retrieval
RELEVANCE_THRESHOLD = 0.4
MAX_RAG_CHARS = 150_000
MAX_RAG_CHUNKS = 20

# Conversation
HISTORY_WINDOW = 20
MAX_STOP_SEQUENCES = 5
DEFAULT_TARGET_WORD_COUNT = 3000
MIN_MANDATED_WORD_COUNT = 500
MEMORY_UPDATE_INTERVAL = 4
MEMORY_CONTEXT_MESSAGES = 5

HARM_CATEGORIES = [
    "HARM_CATEGORY_HATE_SPEECH",
    "HARM_CATEGORY_SEXUALLY_EXPLICIT",
    "HARM_CATEGORY_HARASSMENT",
    "HARM_CATEGORY_DANGEROUS_CONTENT",
]


def get_model_info(model_id: str) -> Optional[ModelInfo]:
    for model in AVAILABLE_MODELS:
        if model.id == model_id:
            return model
    return None


def is_pro_model(model_id: str) -> bool:
    return "pro" in model_id
