from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any

from autogen import ConversableAgent

from painters.agents.json_schema import JsonSchema
from painters.agents.llm_config import OpenAICompatibleSettings, llm_config_from_settings
from painters.errors import TransportFailure

logger = logging.getLogger(__name__)

SYSTEM_MESSAGE = (
    "You write short, warm, age-appropriate content for a children's perspective-taking game. "
    "Follow the requested output format exactly."
)


def _extract_last_content(messages: object) -> str:
    """Extract the last non-empty message content from AG2 chat history."""

    if not isinstance(messages, list):
        return ""

    for msg in reversed(messages):
        if isinstance(msg, dict):
            content = msg.get("content")
            if isinstance(content, str) and content.strip():
                return content.strip()
    return ""


@dataclass(slots=True)
class Ag2ChatBackend:
    """One-turn AG2 chat against an OpenAI-compatible server.

    Environment variables supported (via `openai_settings_from_env`):
    - OPENAI_MODEL
    - OPENAI_API_KEY (optional if OPENAI_BASE_URL is set)
    - OPENAI_BASE_URL (e.g. http://127.0.0.1:11434/v1 for Ollama)
    """

    name: str
    settings: OpenAICompatibleSettings

    async def generate(self, *, prompt: str, structured_output: JsonSchema | None = None) -> list[str]:
        llm_config = llm_config_from_settings(self.settings)

        # AG2 forwards unknown kwargs through to the OpenAI client.
        extra: dict[str, Any] = {}
        if structured_output is not None:
            extra["response_format"] = structured_output.as_openai_response_format()

        def _run() -> str:
            agent = ConversableAgent(
                name=self.name,
                system_message=SYSTEM_MESSAGE,
                llm_config=llm_config,
                human_input_mode="NEVER",
            )
            result = agent.run(message=prompt, max_turns=1, **extra)
            result.process()

            text = _extract_last_content(list(result.messages))
            if not text:
                summary = result.summary
                if isinstance(summary, str):
                    text = summary.strip()
            return text

        try:
            # agent.run is blocking; keep the event loop free while it talks to the server.
            text = await asyncio.to_thread(_run)
        except Exception as e:
            logger.warning("AG2 request failed (model=%s): %s", self.settings.model, e)
            raise TransportFailure(f"AG2 request failed: {e}") from e

        return [text] if text else []
