"""Tests for configuration loading."""

import json

import pytest

from casual_cowriter.config import (
    WRITER_PRESETS,
    apply_writer_mode,
    keys_from_environment,
    load_app_config,
    parse_api_keys,
)
from casual_cowriter.models import AppConfig, WriterMode


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("COWRITER_API_KEYS", "GEMINI_API_KEY", "API_KEY"):
        monkeypatch.delenv(name, raising=False)


def test_parse_api_keys():
    assert parse_api_keys("  key-1 \n\nkey-2\n   \n") == ["key-1", "key-2"]


def test_defaults_without_file():
    config = load_app_config()
    assert config == AppConfig()


def test_load_from_json_file(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"model": "gemini-2.5-flash", "api_keys": ["a"], "target_word_count": 800}))

    config = load_app_config(path)

    assert config.model == "gemini-2.5-flash"
    assert config.api_keys == ["a"]
    assert config.target_word_count == 800


@pytest.mark.parametrize("content", ["{not json", json.dumps({"target_word_count": "lots"})])
def test_invalid_file_raises_value_error(tmp_path, content):
    path = tmp_path / "config.json"
    path.write_text(content)

    with pytest.raises(ValueError, match="config.json"):
        load_app_config(path)


def test_missing_file_raises_value_error(tmp_path):
    with pytest.raises(ValueError, match="missing.json"):
        load_app_config(tmp_path / "missing.json")


def test_environment_keys_override_file(tmp_path, monkeypatch):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"api_keys": ["from-file"]}))
    monkeypatch.setenv("COWRITER_API_KEYS", "env-1, env-2\nenv-3")

    assert load_app_config(path).api_keys == ["env-1", "env-2", "env-3"]


def test_single_key_environment_fallback(monkeypatch):
    monkeypatch.setenv("GEMINI_API_KEY", " gem-key ")
    assert keys_from_environment() == ["gem-key"]


def test_no_environment_keys():
    assert keys_from_environment() == []


@pytest.mark.parametrize("mode", [WriterMode.BRAINSTORM, WriterMode.DRAFTING, WriterMode.POLISHING])
def test_writer_presets_copy_sampling_values(mode):
    config = apply_writer_mode(AppConfig(), mode)
    preset = WRITER_PRESETS[mode]

    assert config.writer_mode == mode
    assert config.generation_config.temperature == preset.temperature
    assert config.generation_config.top_p == preset.top_p
    assert config.generation_config.top_k == preset.top_k


def test_custom_mode_keeps_sampling_values():
    original = apply_writer_mode(AppConfig(), WriterMode.POLISHING)

    config = apply_writer_mode(original, WriterMode.CUSTOM)

    assert config.writer_mode == WriterMode.CUSTOM
    assert config.generation_config == original.generation_config
