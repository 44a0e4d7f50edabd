"""Session layer: live encounter states, per-session locking, persistence."""

from __future__ import annotations

import logging
import threading

from engine.combat import check_combat_end, resolve
from models.actions import Action
from models.game_state import Resolution, SessionStatus, State
from store.base import CombatOverError, EventStore, SessionNotFoundError, StoreError

logger = logging.getLogger(__name__)


class SessionManager:
    """Owns the live State of every session and keeps the store in step.

    Calls for the same session run one at a time; different sessions don't
    block each other. The in-memory state is swapped before anything is
    written, so a failed write never leaves it half-updated.

    Args:
        store: Where events, snapshots and session status are persisted.
    """

    def __init__(self, store: EventStore) -> None:
        self.store = store
        self._states: dict[str, State] = {}
        self._locks: dict[str, threading.Lock] = {}
        self._registry_lock = threading.Lock()

    def _lock_for(self, session_id: str) -> threading.Lock:
        with self._registry_lock:
            lock = self._locks.get(session_id)
            if lock is None:
                lock = self._locks[session_id] = threading.Lock()
            return lock

    def create_session(self, session_id: str, state: State, name: str | None = None) -> None:
        """Start tracking a new encounter and persist its opening snapshot.

        Raises:
            SessionExistsError: If the id is already in use.
            PersistenceError: If the session row can't be written.
        """
        with self._lock_for(session_id):
            self.store.create_session(session_id, name or f"Session {session_id}")
            self._states[session_id] = state
            try:
                self.store.save_snapshot(session_id, state.round, state)
                self.store.save_latest_state(session_id, state)
            except StoreError:
                logger.exception("Failed to save initial snapshot for session %s", session_id)
        logger.info("Created session %s", session_id)

    def get_state(self, session_id: str) -> State | None:
        return self._states.get(session_id)

    def list_states(self) -> dict[str, State]:
        return dict(self._states)

    def delete_state(self, session_id: str) -> None:
        with self._lock_for(session_id):
            self._states.pop(session_id, None)
        with self._registry_lock:
            self._locks.pop(session_id, None)

    def apply_action(self, session_id: str, action: Action, seed: int) -> Resolution:
        """Resolve an action against a session's current state and persist it.

        Events are appended under the new round. A snapshot is written only
        when the round rolls over, and the session is marked completed the
        first time the encounter ends.

        Raises:
            SessionNotFoundError: If the session isn't loaded.
            CombatOverError: If the encounter has already ended.
        """
        with self._lock_for(session_id):
            previous = self._states.get(session_id)
            if previous is None:
                raise SessionNotFoundError(session_id)
            if check_combat_end(previous):
                raise CombatOverError(session_id)

            resolution = resolve(previous, action, seed)
            current = resolution.state
            self._states[session_id] = current
            logger.debug("Session %s: %s", session_id, " | ".join(resolution.logs))

            self._persist(session_id, previous, resolution)
            return resolution

    def _persist(self, session_id: str, previous: State, resolution: Resolution) -> None:
        current = resolution.state
        try:
            self.store.append_events(session_id, current.round, resolution.events)
        except StoreError:
            logger.exception("Failed to append events for session %s", session_id)

        if current is not previous:
            try:
                self.store.save_latest_state(session_id, current)
            except StoreError:
                logger.exception("Failed to save current state for session %s", session_id)

        if current.round > previous.round:
            try:
                self.store.save_snapshot(session_id, current.round, current)
            except StoreError:
                logger.exception("Failed to save snapshot for session %s", session_id)

        if check_combat_end(current) and not check_combat_end(previous):
            try:
                self.store.update_session_status(session_id, SessionStatus.COMPLETED)
                logger.info("Session %s completed (winner: %s)", session_id, current.winner)
            except StoreError:
                logger.exception("Failed to mark session %s completed", session_id)

    def load_active_sessions(self) -> int:
        """Rehydrate every active session from its last written state.

        Falls back to the latest round snapshot for sessions that have no
        current-state record.

        Returns:
            How many sessions were loaded.
        """
        loaded = 0
        for session in self.store.list_sessions(SessionStatus.ACTIVE):
            try:
                state = self.store.get_latest_state(session.id)
                if state is None:
                    state = self.store.get_latest_snapshot(session.id)
            except StoreError:
                logger.exception("Failed to load state for session %s", session.id)
                continue
            if state is None:
                logger.warning("Session %s has no saved state, skipping", session.id)
                continue
            self._states[session.id] = state
            loaded += 1
        logger.info("Loaded %d active sessions", loaded)
        return loaded
