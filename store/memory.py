"""In-memory event store for tests and demo mode."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from datetime import datetime, timezone

from models.events import Event, event_from_json, event_to_json
from models.game_state import Session, SessionStatus, State
from store.base import (
    EventStore,
    SessionExistsError,
    SessionNotFoundError,
    state_from_json,
    state_to_json,
)


@dataclass
class _Row:
    session_id: str
    round: int
    data: str                       # Wire JSON, exactly as it would hit disk


class MemoryEventStore(EventStore):
    """Keeps everything in lists; rows hold serialized JSON like the SQL store."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._sessions: dict[str, Session] = {}
        self._events: list[_Row] = []
        self._snapshots: list[_Row] = []
        self._latest: dict[str, str] = {}

    def create_session(self, session_id: str, name: str) -> Session:
        with self._lock:
            if session_id in self._sessions:
                raise SessionExistsError(session_id)
            now = datetime.now(timezone.utc)
            session = Session(id=session_id, name=name, created_at=now, updated_at=now)
            self._sessions[session_id] = session
            return session.model_copy()

    def append_events(self, session_id: str, round: int, events: list[Event]) -> None:
        with self._lock:
            self._events.extend(
                _Row(session_id, round, event_to_json(event)) for event in events
            )

    def save_snapshot(self, session_id: str, round: int, state: State) -> None:
        with self._lock:
            self._snapshots.append(_Row(session_id, round, state_to_json(state)))

    def save_latest_state(self, session_id: str, state: State) -> None:
        with self._lock:
            if session_id not in self._sessions:
                raise SessionNotFoundError(session_id)
            self._latest[session_id] = state_to_json(state)

    def get_latest_state(self, session_id: str) -> State | None:
        with self._lock:
            data = self._latest.get(session_id)
        return state_from_json(data) if data is not None else None

    def get_events(self, session_id: str, from_round: int = 0) -> list[Event]:
        with self._lock:
            rows = [
                r for r in self._events
                if r.session_id == session_id and r.round >= from_round
            ]
        # sorted() is stable, so insertion order holds within a round
        rows = sorted(rows, key=lambda r: r.round)
        return [event_from_json(r.data) for r in rows]

    def get_latest_snapshot(self, session_id: str) -> State | None:
        return self._find_snapshot(session_id, None)

    def get_snapshot_at_round(self, session_id: str, round: int) -> State | None:
        return self._find_snapshot(session_id, round)

    def _find_snapshot(self, session_id: str, max_round: int | None) -> State | None:
        best: _Row | None = None
        with self._lock:
            for row in self._snapshots:
                if row.session_id != session_id:
                    continue
                if max_round is not None and row.round > max_round:
                    continue
                if best is None or row.round >= best.round:
                    best = row
        return state_from_json(best.data) if best is not None else None

    def update_session_status(self, session_id: str, status: SessionStatus) -> None:
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                raise SessionNotFoundError(session_id)
            session.status = status
            session.updated_at = datetime.now(timezone.utc)

    def get_session(self, session_id: str) -> Session | None:
        with self._lock:
            session = self._sessions.get(session_id)
            return session.model_copy() if session is not None else None

    def list_sessions(self, status: SessionStatus | None = None) -> list[Session]:
        with self._lock:
            return [
                s.model_copy() for s in self._sessions.values()
                if status is None or s.status == status
            ]
