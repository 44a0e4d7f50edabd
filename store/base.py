"""Event store contract: append-only events plus per-round state snapshots."""

from __future__ import annotations

from abc import ABC, abstractmethod

from models.events import Event
from models.game_state import Session, SessionStatus, State


class StoreError(Exception):
    """Base class for event store failures."""


class PersistenceError(StoreError):
    """The backing storage failed to read or write."""


class SessionNotFoundError(StoreError):
    def __init__(self, session_id: str) -> None:
        super().__init__(f"Session not found: {session_id}")
        self.session_id = session_id


class SessionExistsError(StoreError):
    def __init__(self, session_id: str) -> None:
        super().__init__(f"Session already exists: {session_id}")
        self.session_id = session_id


class CombatOverError(StoreError):
    def __init__(self, session_id: str) -> None:
        super().__init__(f"Combat is already over in session {session_id}")
        self.session_id = session_id


def state_to_json(state: State) -> str:
    return state.model_dump_json(by_alias=True, exclude_none=True)


def state_from_json(data: str | bytes) -> State:
    return State.model_validate_json(data)


class EventStore(ABC):
    """Where sessions, their event log and their snapshots live."""

    @abstractmethod
    def create_session(self, session_id: str, name: str) -> Session:
        """Register a new session as active.

        Raises:
            SessionExistsError: If the id is already taken.
        """

    @abstractmethod
    def append_events(self, session_id: str, round: int, events: list[Event]) -> None:
        """Append events for a round. An empty list is a no-op."""

    @abstractmethod
    def save_snapshot(self, session_id: str, round: int, state: State) -> None:
        """Store a full copy of the state as of a round."""

    @abstractmethod
    def save_latest_state(self, session_id: str, state: State) -> None:
        """Overwrite the session's current state, written after every action.

        Raises:
            SessionNotFoundError: If the session doesn't exist.
        """

    @abstractmethod
    def get_latest_state(self, session_id: str) -> State | None:
        """The state last written by ``save_latest_state``, or None."""

    @abstractmethod
    def get_events(self, session_id: str, from_round: int = 0) -> list[Event]:
        """Events from ``from_round`` on, ordered by round then insertion."""

    @abstractmethod
    def get_latest_snapshot(self, session_id: str) -> State | None:
        """The snapshot with the highest round, or None."""

    @abstractmethod
    def get_snapshot_at_round(self, session_id: str, round: int) -> State | None:
        """The most recent snapshot taken at or before ``round``, or None."""

    @abstractmethod
    def update_session_status(self, session_id: str, status: SessionStatus) -> None:
        """Change a session's status.

        Raises:
            SessionNotFoundError: If the session doesn't exist.
        """

    @abstractmethod
    def get_session(self, session_id: str) -> Session | None:
        ...

    @abstractmethod
    def list_sessions(self, status: SessionStatus | None = None) -> list[Session]:
        ...

    def close(self) -> None:
        """Release any held resources."""
