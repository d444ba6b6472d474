from __future__ import annotations

import pytest
from statemachine.exceptions import TransitionNotAllowed

from painters.api.models import GameMode, SessionState
from painters.fsm import SessionFSM
from painters.scenarios import default_scenario


def _state(mode: GameMode = GameMode.intro) -> SessionState:
    s = default_scenario()
    return SessionState(mode=mode, scenario=s, active_character_key=s.first_character_key)


def test_full_round_trip_syncs_mode_to_model() -> None:
    state = _state()
    fsm = SessionFSM(state)

    fsm.begin()
    fsm.sync_mode_to_model()
    assert state.mode == GameMode.playing

    fsm.miss()
    fsm.select_viewpoint()
    fsm.solve()
    fsm.sync_mode_to_model()
    assert state.mode == GameMode.success

    fsm.request_scenario()
    fsm.sync_mode_to_model()
    assert state.mode == GameMode.loading

    fsm.scenario_ready()
    fsm.sync_mode_to_model()
    assert state.mode == GameMode.playing


def test_fsm_resumes_from_model_mode() -> None:
    fsm = SessionFSM(_state(GameMode.success))
    assert fsm.current_state == fsm.success


def test_intro_can_go_straight_to_loading() -> None:
    fsm = SessionFSM(_state())
    fsm.request_scenario()
    assert fsm.current_state == fsm.loading


def test_loading_not_allowed_mid_play() -> None:
    fsm = SessionFSM(_state(GameMode.playing))
    with pytest.raises(TransitionNotAllowed):
        fsm.request_scenario()


@pytest.mark.parametrize("mode", [GameMode.intro, GameMode.success, GameMode.loading])
def test_play_events_only_while_playing(mode: GameMode) -> None:
    fsm = SessionFSM(_state(mode))
    for event in ("miss", "solve", "select_viewpoint"):
        with pytest.raises(TransitionNotAllowed):
            fsm.send(event)
