"""Session creation, retrieval, action submission, and history endpoints."""

import logging
from uuid import uuid4

from fastapi import APIRouter, HTTPException, Query, Request

from engine.session import SessionManager
from engine.turn_order import create_initial_state
from models.actions import Action
from models.characters import CamelModel, Character
from models.game_state import Resolution, SessionStatus, State
from store.base import CombatOverError, SessionExistsError, SessionNotFoundError, StoreError

logger = logging.getLogger(__name__)

router = APIRouter()


class CreateSessionRequest(CamelModel):
    """Start a session from a ready-made state, or from two rosters and a seed."""
    session_id: str | None = None
    name: str | None = None
    state: State | None = None
    players: list[Character] = []
    enemies: list[Character] = []
    seed: int = 0


class CreateSessionResponse(CamelModel):
    success: bool
    session_id: str


class SessionActionRequest(CamelModel):
    """An action for the session's current state and the seed to roll it with."""
    action: Action
    seed: int


class SessionResponse(CamelModel):
    session_id: str
    status: SessionStatus
    state: State


def _get_sessions(request: Request) -> SessionManager:
    """Get the session manager from app state."""
    return request.app.state.sessions


@router.post("", response_model=CreateSessionResponse, response_model_exclude_none=True)
def create_session(body: CreateSessionRequest, request: Request) -> CreateSessionResponse:
    """Create a session and store its opening snapshot."""
    sessions = _get_sessions(request)
    session_id = body.session_id or str(uuid4())

    if body.state is not None:
        state = body.state
    elif body.players or body.enemies:
        try:
            state = create_initial_state(body.players, body.enemies, body.seed)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
    else:
        raise HTTPException(status_code=400, detail="Either state or players and enemies are required")

    try:
        sessions.create_session(session_id, state, name=body.name)
    except SessionExistsError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except StoreError:
        logger.exception("Failed to create session %s", session_id)
        raise HTTPException(status_code=500, detail="Failed to create session")

    return CreateSessionResponse(success=True, session_id=session_id)


@router.get("")
def session_counts(request: Request) -> dict:
    """How many sessions are loaded and how many exist in the store."""
    sessions = _get_sessions(request)
    return {
        "activeSessions": len(sessions.store.list_sessions(SessionStatus.ACTIVE)),
        "totalSessions": len(sessions.store.list_sessions()),
        "loadedSessions": len(sessions.list_states()),
    }


@router.get("/{session_id}", response_model=SessionResponse, response_model_exclude_none=True)
def get_session(session_id: str, request: Request) -> SessionResponse:
    """Get a session's status and current state."""
    sessions = _get_sessions(request)
    state = sessions.get_state(session_id)
    if state is None:
        raise HTTPException(status_code=404, detail="Session not found")

    record = sessions.store.get_session(session_id)
    status = record.status if record is not None else SessionStatus.ACTIVE
    return SessionResponse(session_id=session_id, status=status, state=state)


@router.post(
    "/{session_id}/actions",
    response_model=Resolution,
    response_model_exclude_none=True,
)
def submit_action(
    session_id: str,
    body: SessionActionRequest,
    request: Request,
) -> Resolution:
    """Resolve an action against the session's current state and persist it."""
    sessions = _get_sessions(request)
    try:
        return sessions.apply_action(session_id, body.action, body.seed)
    except SessionNotFoundError:
        raise HTTPException(status_code=404, detail="Session not found")
    except CombatOverError:
        raise HTTPException(status_code=409, detail="Combat is already over")


@router.get("/{session_id}/events")
def get_events(
    session_id: str,
    request: Request,
    from_round: int = Query(default=0, alias="fromRound", ge=0),
) -> list[dict]:
    """Get the session's event log from a given round on."""
    sessions = _get_sessions(request)
    if sessions.store.get_session(session_id) is None:
        raise HTTPException(status_code=404, detail="Session not found")
    return [event.to_json() for event in sessions.store.get_events(session_id, from_round)]


@router.get("/{session_id}/snapshots/{round}")
def get_snapshot(session_id: str, round: int, request: Request) -> dict:
    """Get the most recent snapshot taken at or before a round."""
    sessions = _get_sessions(request)
    snapshot = sessions.store.get_snapshot_at_round(session_id, round)
    if snapshot is None:
        raise HTTPException(status_code=404, detail="No snapshot at or before that round")
    return snapshot.to_json()
