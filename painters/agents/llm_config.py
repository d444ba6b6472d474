from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any

from autogen import LLMConfig

from painters.errors import TransportFailure

DEFAULT_GEMINI_MODEL = "gemini-2.5-flash"
DEFAULT_GEMINI_BASE_URL = "https://generativelanguage.googleapis.com"
DEFAULT_OPENAI_MODEL = "gpt-4o-mini"


@dataclass(frozen=True, slots=True)
class GeminiSettings:
    model: str
    base_url: str
    api_key: str | None


@dataclass(frozen=True, slots=True)
class OpenAICompatibleSettings:
    model: str
    base_url: str | None
    api_key: str | None


def provider_kind_from_env() -> str:
    """Which backend to talk to: `gemini` (default) or `openai`."""

    return os.environ.get("PAINTERS_PROVIDER", "gemini").strip().lower()


def gemini_settings_from_env() -> GeminiSettings:
    return GeminiSettings(
        model=os.environ.get("GEMINI_MODEL", DEFAULT_GEMINI_MODEL),
        base_url=os.environ.get("GEMINI_BASE_URL", DEFAULT_GEMINI_BASE_URL),
        api_key=os.environ.get("GEMINI_API_KEY"),
    )


def openai_settings_from_env(*, default_model: str = DEFAULT_OPENAI_MODEL) -> OpenAICompatibleSettings:
    return OpenAICompatibleSettings(
        model=os.environ.get("OPENAI_MODEL", default_model),
        # For Ollama, typically http://127.0.0.1:11434/v1
        base_url=os.environ.get("OPENAI_BASE_URL"),
        api_key=os.environ.get("OPENAI_API_KEY"),
    )


def llm_config_from_settings(s: OpenAICompatibleSettings) -> LLMConfig:
    # Many OpenAI-compatible servers ignore the key but some SDKs require it.
    api_key = s.api_key or ("ollama" if s.base_url else None)

    if not api_key:
        # Missing credentials look the same to the game as an unreachable server.
        raise TransportFailure(
            "Set OPENAI_API_KEY for hosted OpenAI, or set OPENAI_BASE_URL for a local OpenAI-compatible server"
        )

    config: dict[str, Any] = {"model": s.model, "api_key": api_key}
    if s.base_url:
        config["base_url"] = s.base_url

    return LLMConfig(config_list=[config])
