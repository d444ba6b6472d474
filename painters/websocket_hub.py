from __future__ import annotations

import asyncio

from fastapi import WebSocket

from painters.core.events import SessionEvent


class SessionWebSocketHub:
    """In-process WebSocket fan-out for session events.

    Contract:
      - register a browser with `connect(websocket)`.
      - every SessionEvent passed to `publish` is sent to all connections.

    There is one game session per process, so connections aren't keyed.
    """

    def __init__(self) -> None:
        self._conns: set[WebSocket] = set()
        self._lock = asyncio.Lock()

    async def connect(self, websocket: WebSocket) -> None:
        await websocket.accept()
        async with self._lock:
            self._conns.add(websocket)

    async def disconnect(self, websocket: WebSocket) -> None:
        async with self._lock:
            self._conns.discard(websocket)

    async def broadcast(self, payload: dict[str, object]) -> None:
        async with self._lock:
            conns = list(self._conns)

        if not conns:
            return

        dead: list[WebSocket] = []
        for ws in conns:
            try:
                await ws.send_json(payload)
            except Exception:
                dead.append(ws)

        if dead:
            async with self._lock:
                for ws in dead:
                    self._conns.discard(ws)

    async def publish(self, event: SessionEvent) -> None:
        await self.broadcast(event.as_message())


hub = SessionWebSocketHub()
