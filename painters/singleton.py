from __future__ import annotations

from painters.agents.factory import create_default_backend
from painters.agents.scenario_provider import ScenarioProvider
from painters.session import GameSession
from painters.websocket_hub import hub


_SESSION: GameSession | None = None


def init_session(*, provider: ScenarioProvider | None = None) -> GameSession:
    """Create the process-wide session once and wire it to the WebSocket hub.

    Safe to call multiple times; subsequent calls return the existing session.
    """

    global _SESSION
    if _SESSION is None:
        if provider is None:
            provider = ScenarioProvider(backend=create_default_backend(name="perspective-painters"))
        _SESSION = GameSession(provider=provider)
        _SESSION.add_listener(hub.publish)
    return _SESSION


def reset_session_for_tests() -> None:
    """Drop the cached session so tests can start from a fresh Intro state."""

    global _SESSION
    _SESSION = None


def get_game_session() -> GameSession:
    if _SESSION is None:
        raise RuntimeError("Session not initialized. Call init_session() at startup.")
    return _SESSION
