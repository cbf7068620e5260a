"""Tests for settings loading."""

import pytest
from gena.config import load_settings


def test_load_settings_defaults():
    settings = load_settings({})
    assert settings.api_key == ""
    assert settings.provider == "gemini"
    assert settings.model == "gemini-1.5-flash"
    assert settings.port == 3001
    assert settings.allowed_origins == ("http://localhost:5173", "http://localhost:3000")


def test_first_api_key_wins():
    settings = load_settings({"GENAI_API_KEY": "second", "GOOGLE_API_KEY": "third"})
    assert settings.api_key == "second"

    settings = load_settings({"GEMINI_API_KEY": "first", "GENAI_API_KEY": "second"})
    assert settings.api_key == "first"


def test_blank_api_key_is_skipped():
    settings = load_settings({"GEMINI_API_KEY": "  ", "GOOGLE_API_KEY": "third"})
    assert settings.api_key == "third"


def test_allowed_origins_are_split_and_stripped():
    settings = load_settings({"ALLOWED_ORIGINS": "https://a.example, https://b.example ,"})
    assert settings.allowed_origins == ("https://a.example", "https://b.example")


def test_provider_default_model():
    assert load_settings({"GENA_PROVIDER": "OpenAI"}).model == "gpt-4o-mini"
    assert load_settings({"GENA_PROVIDER": "echo", "GENA_MODEL": "x"}).model == "x"


@pytest.mark.parametrize(
    "env",
    [
        {"PORT": "abc"},
        {"PORT": "70000"},
        {"GENA_PROVIDER": "palm"},
        {"GENA_TEMPERATURE": "3"},
        {"GENA_MAX_OUTPUT_TOKENS": "0"},
        {"LOG_FORMAT": "xml"},
    ],
)
def test_invalid_values_raise(env):
    with pytest.raises(ValueError):
        load_settings(env)
