"""Configuration loading and validation for the GENA server."""

import os
from dataclasses import dataclass, field
from typing import Mapping, Optional, Tuple

from dotenv import load_dotenv

from .llm import DEFAULT_MODEL, PROVIDERS

API_KEY_VARIABLES = ("GEMINI_API_KEY", "GENAI_API_KEY", "GOOGLE_API_KEY")
DEFAULT_ALLOWED_ORIGINS = "http://localhost:5173,http://localhost:3000"

DEFAULT_MODELS = {
    "gemini": DEFAULT_MODEL,
    "openai": "gpt-4o-mini",
    "anthropic": "claude-3-5-sonnet-20241022",
    "ollama": "llama3.1",
    "echo": "echo-v1",
}


@dataclass(frozen=True)
class Settings:
    """Application settings loaded from environment variables."""

    api_key: str = ""
    provider: str = "gemini"
    model: str = DEFAULT_MODEL
    temperature: float = 0.7
    max_output_tokens: int = 2048
    allowed_origins: Tuple[str, ...] = field(
        default_factory=lambda: _split_origins(DEFAULT_ALLOWED_ORIGINS)
    )
    host: str = "0.0.0.0"
    port: int = 3001
    log_level: str = "INFO"
    log_format: str = "text"


def load_settings(env: Optional[Mapping[str, str]] = None) -> Settings:
    """Load and validate settings.

    When ``env`` is not given, ``.env`` is loaded first (without overriding
    variables already set in the process) and ``os.environ`` is read.
    """
    if env is None:
        load_dotenv()
        env = os.environ

    provider = env.get("GENA_PROVIDER", "gemini").strip().lower()
    settings = Settings(
        api_key=first_api_key(env),
        provider=provider,
        model=env.get("GENA_MODEL") or DEFAULT_MODELS.get(provider, DEFAULT_MODEL),
        temperature=_parse_float(env.get("GENA_TEMPERATURE"), 0.7, "GENA_TEMPERATURE"),
        max_output_tokens=_parse_int(
            env.get("GENA_MAX_OUTPUT_TOKENS"), 2048, "GENA_MAX_OUTPUT_TOKENS"
        ),
        allowed_origins=_split_origins(
            env.get("ALLOWED_ORIGINS") or DEFAULT_ALLOWED_ORIGINS
        ),
        host=env.get("HOST", "0.0.0.0"),
        port=_parse_int(env.get("PORT"), 3001, "PORT"),
        log_level=env.get("LOG_LEVEL", "INFO").upper(),
        log_format=env.get("LOG_FORMAT", "text").lower(),
    )
    _validate(settings)
    return settings


def first_api_key(env: Mapping[str, str]) -> str:
    """Returns the first non-empty credential among the recognized names."""
    for name in API_KEY_VARIABLES:
        value = (env.get(name) or "").strip()
        if value:
            return value
    return ""


def _split_origins(value: str) -> Tuple[str, ...]:
    return tuple(origin.strip() for origin in value.split(",") if origin.strip())


def _parse_int(value: Optional[str], default: int, name: str) -> int:
    if value is None or value == "":
        return default
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {value!r}") from None


def _parse_float(value: Optional[str], default: float, name: str) -> float:
    if value is None or value == "":
        return default
    try:
        return float(value)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {value!r}") from None


def _validate(settings: Settings) -> None:
    if settings.provider not in PROVIDERS:
        raise ValueError(
            f"GENA_PROVIDER must be one of {', '.join(PROVIDERS)}, got {settings.provider!r}"
        )
    if not 1 <= settings.port <= 65535:
        raise ValueError("PORT must be in [1, 65535]")
    if not 0.0 <= settings.temperature <= 2.0:
        raise ValueError("GENA_TEMPERATURE must be in [0, 2]")
    if settings.max_output_tokens <= 0:
        raise ValueError("GENA_MAX_OUTPUT_TOKENS must be positive")
    if settings.log_format not in {"text", "json"}:
        raise ValueError("LOG_FORMAT must be text or json")
