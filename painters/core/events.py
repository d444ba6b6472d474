from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Literal

EventType = Literal[
    "MODE_CHANGED",
    "VIEWPOINT_SELECTED",
    "ACTION_PERFORMED",
    "HINT_READY",
    "SCENARIO_INSTALLED",
]


@dataclass(frozen=True, slots=True)
class SessionEvent:
    type: EventType
    mode: str
    payload: dict[str, Any]
    ts: datetime

    @staticmethod
    def now(*, type: EventType, mode: str, payload: dict[str, Any] | None = None) -> "SessionEvent":
        return SessionEvent(type=type, mode=mode, payload=payload or {}, ts=datetime.now(timezone.utc))

    def as_message(self) -> dict[str, object]:
        """JSON-serializable form pushed to WebSocket clients."""

        return {"type": self.type, "mode": self.mode, "ts": self.ts.isoformat(), **self.payload}
