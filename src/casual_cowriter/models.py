import uuid
from datetime import datetime
from enum import Enum
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from casual_cowriter.catalog import (
    DEFAULT_MODEL_ID,
    DEFAULT_TARGET_WORD_COUNT,
    DEFAULT_TTS_VOICE,
    MAX_STOP_SEQUENCES,
)
from casual_cowriter.prompts import NOVELIST_SYSTEM_INSTRUCTION


def _new_id() -> str:
    return str(uuid.uuid4())


class SafetyThreshold(str, Enum):
    BLOCK_NONE = "BLOCK_NONE"
    BLOCK_ONLY_HIGH = "BLOCK_ONLY_HIGH"
    BLOCK_MEDIUM_AND_ABOVE = "BLOCK_MEDIUM_AND_ABOVE"
    BLOCK_LOW_AND_ABOVE = "BLOCK_LOW_AND_ABOVE"


class WriterMode(str, Enum):
    BRAINSTORM = "brainstorm"
    DRAFTING = "drafting"
    POLISHING = "polishing"
    CUSTOM = "custom"


class VectorChunk(BaseModel):
    """An embedded, immutable slice of a knowledge document."""

    model_config = ConfigDict(frozen=True)

    text: str
    vector: List[float]
    source_id: Optional[str] = Field(
        default=None, description="ID of the KnowledgeDocument this chunk came from"
    )
    index: int = Field(default=0, ge=0, description="Position of the chunk in the source text")


class KnowledgeDocument(BaseModel):
    """An uploaded document, optionally vectorized for retrieval."""

    id: str = Field(default_factory=_new_id)
    name: str
    content: str = Field(..., description="Raw extracted text, kept for reference")
    mime_type: str = "text/plain"
    size: int = Field(default=0, ge=0, description="Original upload size in bytes")
    is_active: bool = Field(default=True, description="Whether the document takes part in retrieval")
    chunks: List[VectorChunk] = Field(default_factory=list)

    @property
    def is_vectorized(self) -> bool:
        return len(self.chunks) > 0


class MemoryItem(BaseModel):
    """A long-term fact about the story (plot event, world detail, ...)."""

    id: str = Field(default_factory=_new_id)
    content: str
    timestamp: datetime = Field(default_factory=datetime.now)
    origin: Literal["auto", "manual"] = Field(
        default="manual", description="'auto' for extracted memories, 'manual' for user-entered"
    )


class CharacterProfile(BaseModel):
    id: str = Field(default_factory=_new_id)
    name: str
    description: str = ""
    current_status: str = ""
    updated_at: datetime = Field(default_factory=datetime.now)


class Attachment(BaseModel):
    """A binary file sent alongside a user turn."""

    model_config = ConfigDict(ser_json_bytes="base64", val_json_bytes="base64")

    name: str
    mime_type: str
    data: bytes = b""

    @property
    def is_text(self) -> bool:
        return self.mime_type.startswith("text/")


class GroundingCitation(BaseModel):
    uri: str
    title: Optional[str] = None


class ChatMessage(BaseModel):
    """A single conversation turn."""

    id: str = Field(default_factory=_new_id)
    role: Literal["user", "model"]
    text: str = ""
    thought: Optional[str] = None
    attachments: List[Attachment] = Field(default_factory=list)
    timestamp: datetime = Field(default_factory=datetime.now)
    is_error: bool = False
    token_count: Optional[int] = None
    grounding: Optional[List[GroundingCitation]] = None


class ChatSession(BaseModel):
    id: str = Field(default_factory=_new_id)
    title: str = "New story"
    messages: List[ChatMessage] = Field(default_factory=list)
    updated_at: datetime = Field(default_factory=datetime.now)
    total_tokens: int = Field(default=0, ge=0)
    story_summary: Optional[str] = None


class GenerationConfig(BaseModel):
    """Sampling parameters for a generation call."""

    temperature: float = Field(default=1.0, ge=0.0, le=2.0)
    top_p: float = Field(default=0.95, ge=0.0, le=1.0)
    top_k: int = Field(default=40, ge=1)
    max_output_tokens: int = Field(default=8192, ge=1)
    stop_sequences: List[str] = Field(default_factory=list)
    thinking_budget: Optional[int] = Field(default=None, ge=0)

    @field_validator("stop_sequences")
    @classmethod
    def _normalize_stop_sequences(cls, value: List[str]) -> List[str]:
        seen: List[str] = []
        for seq in value:
            seq = seq.strip()
            if seq and seq not in seen:
                seen.append(seq)
        if len(seen) > MAX_STOP_SEQUENCES:
            raise ValueError(f"At most {MAX_STOP_SEQUENCES} stop sequences are allowed")
        return seen

    def with_stop_sequence(self, sequence: str) -> "GenerationConfig":
        """Return a copy with `sequence` appended, unchanged if full or already present."""
        sequence = sequence.strip()
        if (
            not sequence
            or sequence in self.stop_sequences
            or len(self.stop_sequences) >= MAX_STOP_SEQUENCES
        ):
            return self.model_copy()
        return self.model_copy(update={"stop_sequences": [*self.stop_sequences, sequence]})

    def without_stop_sequence(self, sequence: str) -> "GenerationConfig":
        return self.model_copy(
            update={"stop_sequences": [s for s in self.stop_sequences if s != sequence]}
        )


class AppConfig(BaseModel):
    api_keys: List[str] = Field(default_factory=list, description="Credentials, in rotation order")
    model: str = DEFAULT_MODEL_ID
    system_instruction: str = NOVELIST_SYSTEM_INSTRUCTION
    generation_config: GenerationConfig = Field(default_factory=GenerationConfig)
    safety_threshold: SafetyThreshold = SafetyThreshold.BLOCK_NONE
    enable_search: bool = False
    enable_thinking: bool = True
    enable_logic_analysis: bool = False
    enable_auto_refine: bool = False
    writing_style: Optional[str] = None
    banned_words: Optional[str] = None
    knowledge_files: List[KnowledgeDocument] = Field(default_factory=list)
    memories: List[MemoryItem] = Field(default_factory=list)
    character_profiles: List[CharacterProfile] = Field(default_factory=list)
    writer_mode: WriterMode = WriterMode.DRAFTING
    target_word_count: int = Field(default=DEFAULT_TARGET_WORD_COUNT, ge=0)
    tts_voice: str = DEFAULT_TTS_VOICE


class PlotBranch(BaseModel):
    title: str
    description: str = ""


class TurnUsage(BaseModel):
    """Estimated token usage for one turn. Advisory, for display only."""

    input_tokens: int
    output_tokens: int
    total_tokens: int


class StreamUpdate(BaseModel):
    """
    Incremental result of a generation turn.

    `text` is a delta of visible output, `thought` is the full reasoning
    trace aggregated so far. The final update of a turn carries `usage`.
    """

    text: str = ""
    thought: str = ""
    grounding: Optional[List[GroundingCitation]] = None
    usage: Optional[TurnUsage] = None


class ComposedPrompt(BaseModel):
    prompt: str
    input_tokens: int
    sections: List[str] = Field(default_factory=list)
