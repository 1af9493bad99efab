"""
Pure builders for per-request generation inputs.

Nothing here holds state: the orchestrator calls these before every attempt
with the current credential and model, and passes the results to a fresh
backend session.
"""

from typing import List, Optional, Sequence

from casual_cowriter.catalog import (
    DEFAULT_THINKING_BUDGET,
    FALLBACK_MODEL_ID,
    FLASH_THINKING_MODEL_ID,
    HARM_CATEGORIES,
    HISTORY_WINDOW,
    get_model_info,
)
from casual_cowriter.generation.backend import (
    HistoryTurn,
    MessagePart,
    SafetySetting,
    SessionConfig,
)
from casual_cowriter.models import AppConfig, Attachment, ChatMessage
from casual_cowriter.prompts import (
    BANNED_WORDS_TEMPLATE,
    LOGIC_ANALYSIS_PROMPT,
    WRITING_STYLE_TEMPLATE,
)


def build_history(messages: Sequence[ChatMessage], window: int = HISTORY_WINDOW) -> List[HistoryTurn]:
    """Last `window` turns that are not errors and carry text."""
    recent = [m for m in messages if not m.is_error and m.text][-window:]
    return [HistoryTurn(role=m.role, text=m.text) for m in recent]


def build_message_parts(prompt: str, attachments: Sequence[Attachment] = ()) -> List[MessagePart]:
    """Attachments first, then the composed prompt text (if any)."""
    if not attachments:
        return [MessagePart.from_text(prompt)]

    parts = [MessagePart.from_attachment(a) for a in attachments]
    if prompt.strip():
        parts.append(MessagePart.from_text(prompt))
    return parts


def resolve_thinking(config: AppConfig, model: str) -> tuple[str, Optional[int]]:
    """
    Map a selected model to the model actually called and its reasoning budget.

    Returns:
        (actual_model, thinking_budget) where thinking_budget is None when
        native thinking should not be configured
    """
    actual_model = model
    budget = config.generation_config.thinking_budget or 0

    model_info = get_model_info(model)
    is_thinking_model = model_info.is_thinking if model_info else False

    if model == FLASH_THINKING_MODEL_ID:
        actual_model = FALLBACK_MODEL_ID
        if budget == 0:
            budget = DEFAULT_THINKING_BUDGET
    elif is_thinking_model:
        if config.enable_thinking:
            if budget == 0 and "thinking" in model:
                budget = DEFAULT_THINKING_BUDGET
        else:
            budget = 0
    else:
        budget = 0

    if budget > 0 and config.enable_thinking:
        return actual_model, budget
    return actual_model, None


def build_system_instruction(config: AppConfig) -> str:
    instruction = config.system_instruction

    if config.writing_style:
        instruction += WRITING_STYLE_TEMPLATE.format(style=config.writing_style)

    if config.enable_logic_analysis:
        instruction = f"{LOGIC_ANALYSIS_PROMPT}\n\n{instruction}"

    if config.banned_words and config.banned_words.strip():
        instruction += BANNED_WORDS_TEMPLATE.format(banned_words=config.banned_words)

    return instruction


def build_session_config(config: AppConfig, api_key: str, model: Optional[str] = None) -> SessionConfig:
    """
    Build the immutable configuration for one generation request.

    Args:
        config: Current application configuration
        api_key: Credential to bind the session to
        model: Model override (e.g. a fallback model); defaults to config.model

    Returns:
        SessionConfig
    """
    actual_model, thinking_budget = resolve_thinking(config, model or config.model)
    generation = config.generation_config

    return SessionConfig(
        api_key=api_key,
        model=actual_model,
        system_instruction=build_system_instruction(config),
        temperature=generation.temperature,
        top_p=generation.top_p,
        top_k=generation.top_k,
        max_output_tokens=generation.max_output_tokens,
        stop_sequences=tuple(generation.stop_sequences),
        thinking_budget=thinking_budget,
        enable_search=config.enable_search,
        safety_settings=tuple(
            SafetySetting(category=category, threshold=config.safety_threshold.value)
            for category in HARM_CATEGORIES
        ),
    )
