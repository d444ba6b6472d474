from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class JsonSchema:
    """Minimal JSON Schema wrapper for structured outputs.

    `schema` uses the OpenAPI-ish subset both Gemini `responseSchema` and
    OpenAI `json_schema` response formats understand.
    """

    name: str
    schema: dict[str, Any]
    strict: bool = True

    def as_openai_response_format(self) -> dict[str, Any]:
        return {
            "type": "json_schema",
            "json_schema": {"name": self.name, "schema": self.schema, "strict": self.strict},
        }
