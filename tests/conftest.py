from __future__ import annotations

import asyncio
import os
from collections.abc import Generator
from dataclasses import dataclass, field
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from painters.agents.json_schema import JsonSchema
from painters.agents.scenario_provider import ScenarioProvider
from painters.session import GameSession


@pytest.fixture(scope="session", autouse=True)
def _load_dotenv_for_tests() -> None:
    """Load repo .env for local runs.

    In CI, we *don't* auto-load `.env` by default so nothing accidentally
    talks to a real model. Opt in with PAINTERS_LOAD_DOTENV_FOR_TESTS=1.
    """

    if os.environ.get("CI") and os.environ.get("PAINTERS_LOAD_DOTENV_FOR_TESTS") != "1":
        return

    env_path = Path(__file__).resolve().parents[1] / ".env"
    if env_path.exists():
        from dotenv import load_dotenv

        load_dotenv(dotenv_path=env_path, override=False)


@dataclass
class FakeBackend:
    """Scripted TextBackend.

    Each call pops the next entry of `replies`: a list of candidate texts, or an
    exception to raise. With `gate` set, calls wait for it before answering.
    """

    name: str = "fake"
    replies: list[list[str] | Exception] = field(default_factory=list)
    calls: list[tuple[str, JsonSchema | None]] = field(default_factory=list)
    gate: asyncio.Event | None = None

    async def generate(self, *, prompt: str, structured_output: JsonSchema | None = None) -> list[str]:
        self.calls.append((prompt, structured_output))
        if self.gate is not None:
            await self.gate.wait()
        reply = self.replies.pop(0) if self.replies else []
        if isinstance(reply, Exception):
            raise reply
        return reply


@pytest.fixture()
def fake_backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture()
def session(fake_backend: FakeBackend) -> GameSession:
    return GameSession(provider=ScenarioProvider(backend=fake_backend))


@pytest.fixture()
def client(fake_backend: FakeBackend) -> Generator[TestClient, None, None]:
    """TestClient around a fresh process session backed by `fake_backend`."""

    from painters.main import app
    from painters.singleton import init_session, reset_session_for_tests

    reset_session_for_tests()
    init_session(provider=ScenarioProvider(backend=fake_backend))
    with TestClient(app) as c:
        yield c
    reset_session_for_tests()
