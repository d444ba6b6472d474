from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any

from painters.agents.base import TextBackend
from painters.agents.json_schema import JsonSchema
from painters.errors import MalformedResponse
from painters.prompts import load_prompt, render_prompt

logger = logging.getLogger(__name__)


_CHARACTER_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "name": {"type": "string"},
        "emoji": {"type": "string"},
        "thought": {"type": "string"},
        "action": {
            "type": "object",
            "properties": {
                "name": {"type": "string"},
                "icon": {"type": "string"},
            },
            "required": ["name", "icon"],
        },
    },
    "required": ["name", "emoji", "thought", "action"],
}

SCENARIO_SCHEMA = JsonSchema(
    name="perspective_scenario",
    schema={
        "type": "object",
        "properties": {
            "title": {"type": "string"},
            "goal": {"type": "string"},
            "sceneEmoji": {"type": "string"},
            "solution": {"type": "string", "enum": ["A", "B", "C"]},
            "characters": {
                "type": "object",
                "properties": {
                    "A": _CHARACTER_SCHEMA,
                    "B": _CHARACTER_SCHEMA,
                    "C": _CHARACTER_SCHEMA,
                },
                "required": ["A", "B", "C"],
            },
        },
        "required": ["title", "goal", "sceneEmoji", "solution", "characters"],
    },
    # Gemini's responseSchema rejects `additionalProperties`, which OpenAI strict mode requires.
    strict=False,
)


def parse_scenario_reply(text: str) -> dict[str, Any]:
    """Parse the model's text payload as a JSON object.

    Some models wrap JSON in a ```json fence even when asked not to; the fence
    is stripped. Anything else that isn't a JSON object is rejected.
    """

    cleaned = text.strip()
    if cleaned.startswith("```"):
        cleaned = cleaned.strip("`").strip()
        if cleaned.lower().startswith("json"):
            cleaned = cleaned[4:].strip()

    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as e:
        raise MalformedResponse(f"Invalid JSON: {e}") from e

    if not isinstance(data, dict):
        raise MalformedResponse("Expected a JSON object")
    return data


@dataclass(slots=True)
class ScenarioProvider:
    """The two exchanges the game has with the language model.

    Neither call retries or validates scenario structure; the session does
    that. Both raise `ProviderError` subclasses on failure.
    """

    backend: TextBackend

    async def request_scenario(self) -> dict[str, Any]:
        texts = await self.backend.generate(prompt=load_prompt("scenario.txt"), structured_output=SCENARIO_SCHEMA)
        if not texts:
            raise MalformedResponse("Scenario reply contained no candidates")
        return parse_scenario_reply(texts[0])

    async def request_hint(self, *, goal: str, character_name: str, character_thought: str) -> str:
        prompt = render_prompt(
            "hint.txt",
            goal=goal,
            character_name=character_name,
            character_thought=character_thought,
        )
        texts = await self.backend.generate(prompt=prompt)
        if not texts or not texts[0].strip():
            raise MalformedResponse("Hint reply contained no candidates")
        logger.debug("Hint from %s: %r", self.backend.name, texts[0])
        return texts[0].strip()
