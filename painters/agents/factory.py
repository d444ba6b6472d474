from __future__ import annotations

from typing import cast

from painters.agents.ag2_backend import Ag2ChatBackend
from painters.agents.base import TextBackend
from painters.agents.gemini_backend import GeminiBackend
from painters.agents.llm_config import gemini_settings_from_env, openai_settings_from_env, provider_kind_from_env


def create_default_backend(*, name: str) -> TextBackend:
    """Create the LLM backend selected by PAINTERS_PROVIDER.

    `gemini` talks to the Generative Language REST API; `openai` goes through
    AG2 to any OpenAI-compatible server.
    """

    kind = provider_kind_from_env()
    if kind == "openai":
        return cast(TextBackend, Ag2ChatBackend(name=name, settings=openai_settings_from_env()))
    if kind == "gemini":
        return cast(TextBackend, GeminiBackend(name=name, settings=gemini_settings_from_env()))
    raise ValueError(f"Unknown PAINTERS_PROVIDER: {kind!r} (expected 'gemini' or 'openai')")
