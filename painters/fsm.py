from __future__ import annotations

from statemachine import State, StateMachine

from painters.api.models import GameMode, SessionState


class SessionFSM(StateMachine):
    """FSM wrapper around SessionState.

    Modes: intro -> playing -> success -> loading -> playing, plus intro -> loading.
    The session service mutates the model; the FSM only guards transitions.
    """

    intro = State(GameMode.intro.value, value=GameMode.intro.value, initial=True)
    playing = State(GameMode.playing.value, value=GameMode.playing.value)
    success = State(GameMode.success.value, value=GameMode.success.value)
    loading = State(GameMode.loading.value, value=GameMode.loading.value)

    begin = intro.to(playing)
    select_viewpoint = playing.to.itself()
    miss = playing.to.itself()
    solve = playing.to(success)
    request_scenario = intro.to(loading) | success.to(loading)
    scenario_ready = loading.to(playing)

    def __init__(self, session: SessionState):
        self.session = session
        super().__init__(start_value=session.mode.value)

    def sync_mode_to_model(self) -> None:
        self.session.mode = GameMode(str(self.current_state.value))
