from __future__ import annotations

from typing import Protocol

from painters.agents.json_schema import JsonSchema


class TextBackend(Protocol):
    """A generative-language endpoint: one prompt in, candidate texts out.

    Implementations raise `TransportFailure` when the exchange itself fails.
    An empty list means the service answered with no candidates.
    """

    name: str

    async def generate(self, *, prompt: str, structured_output: JsonSchema | None = None) -> list[str]:  # pragma: no cover
        ...
