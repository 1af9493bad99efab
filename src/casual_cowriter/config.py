"""
Configuration loading for casual-cowriter.

AppConfig values come from (lowest to highest precedence) the model defaults,
an optional JSON file, and environment variables.
"""

import logging
import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Union

from pydantic import ValidationError

from casual_cowriter.models import AppConfig, WriterMode

logger = logging.getLogger(__name__)

API_KEYS_ENV = "COWRITER_API_KEYS"
FALLBACK_KEY_ENVS = ("GEMINI_API_KEY", "API_KEY")


@dataclass(frozen=True)
class WriterPreset:
    label: str
    temperature: float
    top_p: float
    top_k: int


WRITER_PRESETS: Dict[WriterMode, WriterPreset] = {
    WriterMode.BRAINSTORM: WriterPreset("Brainstorm", temperature=1.6, top_p=0.99, top_k=64),
    WriterMode.DRAFTING: WriterPreset("Drafting", temperature=1.0, top_p=0.95, top_k=40),
    WriterMode.POLISHING: WriterPreset("Polishing", temperature=0.3, top_p=0.8, top_k=20),
}


def parse_api_keys(text: str) -> List[str]:
    """Split user-entered key text (one key per line) into a clean list."""
    return [key.strip() for key in text.split("\n") if key.strip()]


def keys_from_environment() -> List[str]:
    """
    Keys from the environment.

    COWRITER_API_KEYS may hold several keys separated by newlines or commas;
    otherwise a single GEMINI_API_KEY or API_KEY is used.
    """
    raw = os.environ.get(API_KEYS_ENV)
    if raw:
        return [key.strip() for key in re.split(r"[\n,]", raw) if key.strip()]

    for name in FALLBACK_KEY_ENVS:
        value = os.environ.get(name, "").strip()
        if value:
            return [value]
    return []


def apply_writer_mode(config: AppConfig, mode: WriterMode) -> AppConfig:
    """
    Return a copy of `config` switched to `mode`.

    Preset modes overwrite temperature, top-p and top-k; CUSTOM only records
    the mode and leaves sampling values untouched.
    """
    if mode == WriterMode.CUSTOM:
        return config.model_copy(update={"writer_mode": mode})

    preset = WRITER_PRESETS[mode]
    generation_config = config.generation_config.model_copy(
        update={
            "temperature": preset.temperature,
            "top_p": preset.top_p,
            "top_k": preset.top_k,
        }
    )
    logger.debug(f"Applied writer preset {mode.value}")
    return config.model_copy(update={"writer_mode": mode, "generation_config": generation_config})


def load_app_config(path: Optional[Union[str, Path]] = None) -> AppConfig:
    """
    Load application configuration.

    Args:
        path: Optional JSON file; None means defaults only

    Returns:
        AppConfig with environment overrides applied

    Raises:
        ValueError: If the file cannot be read or holds invalid JSON or structure
    """
    if path is None:
        config = AppConfig()
    else:
        path = Path(path)
        try:
            raw = path.read_text(encoding="utf-8")
        except OSError as e:
            raise ValueError(f"Cannot read configuration file {path}: {e}") from e
        try:
            config = AppConfig.model_validate_json(raw)
        except ValidationError as e:
            raise ValueError(f"Invalid configuration in {path}: {e}") from e
        logger.info(f"Loaded configuration from {path}")

    env_keys = keys_from_environment() if os.environ.get(API_KEYS_ENV) else []
    if env_keys:
        logger.info(f"Using {len(env_keys)} API keys from {API_KEYS_ENV}")
        config = config.model_copy(update={"api_keys": env_keys})

    return config
