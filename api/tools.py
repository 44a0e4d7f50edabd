"""Stateless tool endpoints: summaries, d20 checks, pure action resolution."""

import secrets

from fastapi import APIRouter, Header, Request

from engine.combat import get_state_summary, resolve
from engine.dice import SeededRNG
from engine.rules import roll_check
from models.actions import Action
from models.characters import CamelModel
from models.game_state import Resolution, RollCheck, RollResult, State

router = APIRouter()


class StateSummaryRequest(CamelModel):
    """Request body for a plain-text state summary."""
    state: State


class StateSummaryResponse(CamelModel):
    summary: str


class RollCheckRequest(RollCheck):
    """A RollCheck plus an optional seed; a random one is drawn if omitted."""
    seed: int | None = None


class ApplyActionRequest(CamelModel):
    """Request body for resolving one action without touching any session."""
    state: State
    action: Action
    seed: int


@router.post("/get_state_summary", response_model=StateSummaryResponse)
def state_summary(body: StateSummaryRequest) -> StateSummaryResponse:
    """Summarize an encounter for display or prompting."""
    return StateSummaryResponse(summary=get_state_summary(body.state))


@router.post("/roll_check", response_model=RollResult)
def roll_check_endpoint(
    body: RollCheckRequest,
    request: Request,
    session_id: str | None = Header(default=None, alias="session-id"),
) -> RollResult:
    """Roll a d20 check, using the actor's stats if the session is known."""
    state = None
    if session_id:
        state = request.app.state.sessions.get_state(session_id)

    seed = body.seed if body.seed is not None else secrets.randbelow(2**31)
    check = RollCheck(actor=body.actor, type=body.type, dc=body.dc)
    return roll_check(state, check, SeededRNG(seed))


@router.post("/apply_action", response_model=Resolution, response_model_exclude_none=True)
def apply_action(body: ApplyActionRequest) -> Resolution:
    """Resolve an action against the supplied state. Nothing is persisted."""
    return resolve(body.state, body.action, body.seed)
