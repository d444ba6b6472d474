from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Coroutine
from dataclasses import dataclass
from typing import Any

from statemachine.exceptions import TransitionNotAllowed

from painters.agents.scenario_provider import ScenarioProvider
from painters.api.models import GameMode, Scenario, SessionState
from painters.core.events import EventType, SessionEvent
from painters.errors import ProviderError, SessionStateError, TransportFailure, UnknownCharacterError
from painters.fsm import SessionFSM
from painters.scenarios import default_scenario, normalize_scenario

logger = logging.getLogger(__name__)

# Wrong attempts (on one viewpoint) before the coach steps in.
HINT_TRIGGER_COUNT = 2

HINT_FALLBACK_MALFORMED = "Hmm, let's think again! How does everyone else in the story see the problem?"
HINT_FALLBACK_TRANSPORT = "Try looking through someone else's eyes. Who could really help here?"

SessionListener = Callable[[SessionEvent], Awaitable[None]]


@dataclass(frozen=True, slots=True)
class ActionOutcome:
    solved: bool
    wrong_attempt_count: int
    # Session as it was right after the action.
    state: SessionState
    # Set when this action kicked off a coach-hint request.
    hint_task: asyncio.Task[None] | None = None

    @property
    def hint_requested(self) -> bool:
        return self.hint_task is not None


@dataclass(frozen=True, slots=True)
class PendingScenario:
    # Session as it was on entering Loading.
    state: SessionState
    task: asyncio.Task[None]


class GameSession:
    """The single game session and its state machine.

    Every mutation goes through the methods below while holding `_lock`.
    Provider calls run as background tasks; each one captures the session
    generation when it starts and its result is dropped if the viewpoint or
    scenario changed in the meantime.
    """

    def __init__(self, *, provider: ScenarioProvider, state: SessionState | None = None) -> None:
        if state is None:
            scenario = default_scenario()
            state = SessionState(scenario=scenario, active_character_key=scenario.first_character_key)

        self.state = state
        self.fsm = SessionFSM(state)
        self.provider = provider

        self._lock = asyncio.Lock()
        self._generation = 0
        self._tasks: set[asyncio.Task[None]] = set()
        self._listeners: list[SessionListener] = []

    # ---- listeners / tasks ----

    def add_listener(self, listener: SessionListener) -> None:
        self._listeners.append(listener)

    async def _emit(self, type: EventType, payload: dict[str, Any] | None = None, *, mode: GameMode | None = None) -> None:
        # Callers pass `mode` when a background task may already have moved the session on.
        event = SessionEvent.now(type=type, mode=(mode or self.state.mode).value, payload=payload)
        logger.info("session event %s mode=%s %s", event.type, event.mode, event.payload)
        for listener in list(self._listeners):
            try:
                await listener(event)
            except Exception:
                logger.exception("Session listener failed for %s", event.type)

    def _spawn(self, coro: Coroutine[Any, Any, None]) -> asyncio.Task[None]:
        task = asyncio.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def wait_idle(self) -> None:
        """Wait until no hint or scenario request is in flight."""

        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    # ---- state helpers (call with _lock held) ----

    def _fire(self, event: str) -> None:
        try:
            self.fsm.send(event)
        except TransitionNotAllowed as e:
            raise SessionStateError(f"Cannot {event.replace('_', ' ')} while {self.state.mode.value}") from e
        self.fsm.sync_mode_to_model()

    def _reset_viewpoint(self, character_key: str) -> None:
        self.state.active_character_key = character_key
        self.state.wrong_attempt_count = 0
        self.state.coach_hint = None
        self.state.hint_pending = False
        self._generation += 1

    def _install(self, scenario: Scenario) -> None:
        self.state.scenario = scenario
        self._reset_viewpoint(scenario.first_character_key)

    def snapshot(self) -> SessionState:
        return self.state.model_copy(deep=True)

    # ---- transitions ----

    async def start(self) -> SessionState:
        """Intro -> Playing with the built-in scenario."""

        async with self._lock:
            self._fire("begin")
            self._install(default_scenario())
            snap = self.snapshot()
        await self._emit("MODE_CHANGED")
        return snap

    async def select_viewpoint(self, character_key: str) -> SessionState:
        async with self._lock:
            self._fire("select_viewpoint")
            if character_key not in self.state.scenario.characters:
                raise UnknownCharacterError(f"Unknown character: {character_key}")
            self._reset_viewpoint(character_key)
            snap = self.snapshot()
        await self._emit("VIEWPOINT_SELECTED", {"character_key": character_key})
        return snap

    async def perform_action(self) -> ActionOutcome:
        """Act as the current viewpoint character.

        The right character wins the round. Anything else counts as a wrong
        attempt; the second one on the same viewpoint asks the coach for a hint.
        """

        async with self._lock:
            state = self.state
            if state.mode == GameMode.playing and state.active_character_key == state.scenario.solution:
                self._fire("solve")
                outcome = ActionOutcome(solved=True, wrong_attempt_count=state.wrong_attempt_count, state=self.snapshot())
            else:
                self._fire("miss")
                state.wrong_attempt_count += 1

                hint_task = None
                if state.wrong_attempt_count == HINT_TRIGGER_COUNT:
                    state.hint_pending = True
                    character = state.active_character
                    hint_task = self._spawn(
                        self._fetch_hint(
                            generation=self._generation,
                            goal=state.scenario.goal,
                            character_name=character.name,
                            character_thought=character.thought,
                        )
                    )
                outcome = ActionOutcome(
                    solved=False,
                    wrong_attempt_count=state.wrong_attempt_count,
                    state=self.snapshot(),
                    hint_task=hint_task,
                )

        if outcome.solved:
            await self._emit("MODE_CHANGED", mode=GameMode.success)
        else:
            await self._emit(
                "ACTION_PERFORMED",
                {"wrong_attempt_count": outcome.wrong_attempt_count, "hint_requested": outcome.hint_requested},
            )
        return outcome

    async def request_new_scenario(self) -> PendingScenario:
        """Intro/Success -> Loading; the returned task moves on to Playing."""

        async with self._lock:
            self._fire("request_scenario")
            self.state.coach_hint = None
            self.state.hint_pending = False
            self._generation += 1
            task = self._spawn(self._fetch_scenario(generation=self._generation))
            pending = PendingScenario(state=self.snapshot(), task=task)
        await self._emit("MODE_CHANGED", mode=GameMode.loading)
        return pending

    # ---- background work ----

    async def _fetch_hint(self, *, generation: int, goal: str, character_name: str, character_thought: str) -> None:
        try:
            hint = await self.provider.request_hint(
                goal=goal,
                character_name=character_name,
                character_thought=character_thought,
            )
        except TransportFailure as e:
            logger.warning("Hint request failed, using fallback: %s", e)
            hint = HINT_FALLBACK_TRANSPORT
        except ProviderError as e:
            logger.warning("Hint reply unusable, using fallback: %s", e)
            hint = HINT_FALLBACK_MALFORMED
        except Exception:
            logger.exception("Unexpected error while requesting a hint")
            hint = HINT_FALLBACK_TRANSPORT

        async with self._lock:
            if generation != self._generation or self.state.mode != GameMode.playing:
                logger.info("Discarding stale hint (generation %s, now %s)", generation, self._generation)
                return
            self.state.coach_hint = hint
            self.state.hint_pending = False
        await self._emit("HINT_READY", {"coach_hint": hint})

    async def _fetch_scenario(self, *, generation: int) -> None:
        fallback = True
        try:
            scenario = normalize_scenario(await self.provider.request_scenario())
            fallback = False
        except ProviderError as e:
            logger.warning("Scenario generation failed, using the built-in story: %s", e)
            scenario = default_scenario()
        except Exception:
            logger.exception("Unexpected error while generating a scenario")
            scenario = default_scenario()

        async with self._lock:
            if generation != self._generation or self.state.mode != GameMode.loading:
                logger.info("Discarding stale scenario (generation %s, now %s)", generation, self._generation)
                return
            self._fire("scenario_ready")
            self._install(scenario)
        await self._emit("SCENARIO_INSTALLED", {"title": scenario.title, "fallback": fallback})
