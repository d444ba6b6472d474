from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, WebSocket, WebSocketDisconnect, status

from painters.api.deps import get_session
from painters.api.models import ActionResponse, SelectViewpointRequest, SessionState
from painters.errors import SessionStateError, UnknownCharacterError
from painters.session import GameSession
from painters.websocket_hub import hub

router = APIRouter()


def _conflict(e: SessionStateError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))


@router.websocket("/ws/session")
async def session_updates_ws(websocket: WebSocket) -> None:
    await hub.connect(websocket)

    try:
        # Keep the socket open; client can optionally send pings.
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        await hub.disconnect(websocket)
    except Exception:
        await hub.disconnect(websocket)
        raise


@router.get("/healthcheck")
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/session", response_model=SessionState)
async def get_session_route(session: GameSession = Depends(get_session)) -> SessionState:
    return session.snapshot()


@router.post("/session/start", response_model=SessionState)
async def start_route(session: GameSession = Depends(get_session)) -> SessionState:
    try:
        return await session.start()
    except SessionStateError as e:
        raise _conflict(e) from e


@router.post("/session/viewpoint", response_model=SessionState)
async def select_viewpoint_route(
    payload: SelectViewpointRequest,
    session: GameSession = Depends(get_session),
) -> SessionState:
    try:
        return await session.select_viewpoint(payload.character_key)
    except SessionStateError as e:
        raise _conflict(e) from e
    except UnknownCharacterError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e)) from e


@router.post("/session/act", response_model=ActionResponse)
async def act_route(session: GameSession = Depends(get_session)) -> ActionResponse:
    try:
        outcome = await session.perform_action()
    except SessionStateError as e:
        raise _conflict(e) from e

    return ActionResponse(
        solved=outcome.solved,
        wrong_attempt_count=outcome.wrong_attempt_count,
        hint_requested=outcome.hint_requested,
        state=outcome.state,
    )


@router.post("/session/next", response_model=SessionState, status_code=status.HTTP_202_ACCEPTED)
async def next_story_route(session: GameSession = Depends(get_session)) -> SessionState:
    """Ask for a freshly generated story.

    Returns immediately in Loading mode; a SCENARIO_INSTALLED event is pushed
    over /ws/session once the new (or fallback) story is in place.
    """

    try:
        pending = await session.request_new_scenario()
    except SessionStateError as e:
        raise _conflict(e) from e
    return pending.state
