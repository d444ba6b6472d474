"""Google Generative Language (Gemini) REST backend."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import httpx

from painters.agents.json_schema import JsonSchema
from painters.agents.llm_config import GeminiSettings
from painters.errors import MalformedResponse, TransportFailure

logger = logging.getLogger(__name__)


def _candidate_texts(data: Any) -> list[str]:
    """Pull the text payload out of each candidate in a generateContent reply.

    A candidate's text is the concatenation of its text parts. Candidates
    without any text are skipped.
    """

    if not isinstance(data, dict):
        raise MalformedResponse("Expected a JSON object from generateContent")

    candidates = data.get("candidates") or []
    if not isinstance(candidates, list):
        raise MalformedResponse("'candidates' is not a list")

    texts: list[str] = []
    for cand in candidates:
        if not isinstance(cand, dict):
            continue
        content = cand.get("content")
        parts = content.get("parts") if isinstance(content, dict) else None
        if not isinstance(parts, list):
            continue
        text = "".join(p["text"] for p in parts if isinstance(p, dict) and isinstance(p.get("text"), str))
        if text.strip():
            texts.append(text)
    return texts


@dataclass(slots=True)
class GeminiBackend:
    """Calls POST {base_url}/v1beta/models/{model}:generateContent.

    `transport` lets tests plug in an `httpx.MockTransport`.
    """

    name: str
    settings: GeminiSettings
    timeout: float = 120.0
    transport: httpx.AsyncBaseTransport | None = None

    def _url(self) -> str:
        return f"{self.settings.base_url.rstrip('/')}/v1beta/models/{self.settings.model}:generateContent"

    def _body(self, prompt: str, structured_output: JsonSchema | None) -> dict[str, Any]:
        body: dict[str, Any] = {"contents": [{"parts": [{"text": prompt}]}]}
        if structured_output is not None:
            body["generationConfig"] = {
                "responseMimeType": "application/json",
                "responseSchema": structured_output.schema,
            }
        return body

    async def generate(self, *, prompt: str, structured_output: JsonSchema | None = None) -> list[str]:
        if not self.settings.api_key:
            raise TransportFailure("Set GEMINI_API_KEY to enable scenario generation")

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                resp = await client.post(
                    self._url(),
                    params={"key": self.settings.api_key},
                    json=self._body(prompt, structured_output),
                )
                resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise TransportFailure(f"Gemini returned {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise TransportFailure(f"Cannot reach Gemini: {e}") from e

        try:
            data = resp.json()
        except ValueError as e:
            raise MalformedResponse("Gemini reply was not JSON") from e

        texts = _candidate_texts(data)
        logger.debug("Gemini %s returned %d candidate(s)", self.settings.model, len(texts))
        return texts
