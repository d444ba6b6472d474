from __future__ import annotations

from painters.session import GameSession
from painters.singleton import get_game_session


def get_session() -> GameSession:
    # Tests override this dependency with a session built around a fake provider.
    return get_game_session()
