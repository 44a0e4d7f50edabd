"""Encounter state, resolution, and session models for Skirmish Server."""

from datetime import datetime
from enum import Enum

from pydantic import Field

from models.characters import CamelModel, Character
from models.events import Event


class Winner(str, Enum):
    """Which side won a completed encounter."""
    PLAYER = "player"
    ENEMY = "enemy"
    DRAW = "draw"


class State(CamelModel):
    """The full state of one encounter."""
    round: int = Field(default=1, ge=1)
    characters: list[Character] = []
    turn_order: list[str] = []      # Fixed at creation, never reordered
    current_turn: int = Field(default=0, ge=0)
    is_complete: bool = False
    winner: Winner | None = None    # Set iff is_complete


class Resolution(CamelModel):
    """Everything produced by resolving one action."""
    events: list[Event] = []
    state: State
    logs: list[str] = []


class SessionStatus(str, Enum):
    """Lifecycle of a persisted session."""
    ACTIVE = "active"
    COMPLETED = "completed"


class Session(CamelModel):
    """Persistent identity of one encounter."""
    id: str
    name: str
    status: SessionStatus = SessionStatus.ACTIVE
    created_at: datetime
    updated_at: datetime


class CheckType(str, Enum):
    """Kinds of ad-hoc d20 checks."""
    ATTACK = "attack"
    DEFENSE = "defense"
    SKILL = "skill"
    SAVE = "save"


class RollCheck(CamelModel):
    """A request to roll a d20 against a difficulty class."""
    actor: str
    type: CheckType
    dc: int = Field(ge=1)


class RollResult(CamelModel):
    """Outcome of a RollCheck."""
    roll: int = Field(ge=1, le=20)
    modifier: int
    total: int
    success: bool
