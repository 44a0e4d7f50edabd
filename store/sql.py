"""SQLite-backed event store built on SQLAlchemy."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Iterator

from sqlalchemy import DateTime, Index, Integer, String, Text, create_engine, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, sessionmaker
from sqlalchemy.orm import Session as DbSession
from sqlalchemy.pool import StaticPool

from models.events import Event, event_from_json, event_to_json
from models.game_state import Session, SessionStatus, State
from store.base import (
    EventStore,
    PersistenceError,
    SessionExistsError,
    SessionNotFoundError,
    state_from_json,
    state_to_json,
)

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    pass


class SessionRow(Base):
    __tablename__ = "sessions"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    status: Mapped[str] = mapped_column(String, nullable=False, default=SessionStatus.ACTIVE.value)
    latest_state: Mapped[str | None] = mapped_column(Text, nullable=True)  # Current State JSON
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)

    def to_model(self) -> Session:
        return Session(
            id=self.id,
            name=self.name,
            status=SessionStatus(self.status),
            created_at=self.created_at,
            updated_at=self.updated_at,
        )


class EventRow(Base):
    """One event, stored as its wire JSON."""
    __tablename__ = "events"
    __table_args__ = (Index("idx_events_session_round", "session_id", "round"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    session_id: Mapped[str] = mapped_column(String, nullable=False)
    round: Mapped[int] = mapped_column(Integer, nullable=False)
    event_data: Mapped[str] = mapped_column(Text, nullable=False)
    timestamp: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)


class SnapshotRow(Base):
    """A full State as of a round, stored as its wire JSON."""
    __tablename__ = "snapshots"
    __table_args__ = (Index("idx_snapshots_session_round", "session_id", "round"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    session_id: Mapped[str] = mapped_column(String, nullable=False)
    round: Mapped[int] = mapped_column(Integer, nullable=False)
    state_data: Mapped[str] = mapped_column(Text, nullable=False)
    timestamp: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)


class SqlEventStore(EventStore):
    """Event store persisted through an SQLAlchemy engine.

    Args:
        url: SQLAlchemy database URL, e.g. ``sqlite:///skirmish.db``.
            ``sqlite://`` gives a private in-memory database.
    """

    def __init__(self, url: str) -> None:
        connect_args = {}
        engine_kwargs = {}
        if url.startswith("sqlite"):
            # FastAPI runs sync routes on a thread pool
            connect_args["check_same_thread"] = False
            if url in ("sqlite://", "sqlite:///:memory:"):
                engine_kwargs["poolclass"] = StaticPool

        try:
            self._engine = create_engine(url, connect_args=connect_args, **engine_kwargs)
            Base.metadata.create_all(self._engine)
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to initialize database: {e}") from e

        self._sessionmaker = sessionmaker(self._engine, expire_on_commit=False)
        logger.info("Event store ready at %s", self._engine.url)

    @contextmanager
    def _db(self) -> Iterator[DbSession]:
        """Open a unit of work; commit on success, translate driver errors."""
        try:
            with self._sessionmaker.begin() as db:
                yield db
        except SQLAlchemyError as e:
            raise PersistenceError(str(e)) from e

    def create_session(self, session_id: str, name: str) -> Session:
        with self._db() as db:
            if db.get(SessionRow, session_id) is not None:
                raise SessionExistsError(session_id)
            now = _utcnow()
            row = SessionRow(id=session_id, name=name, created_at=now, updated_at=now)
            db.add(row)
            db.flush()
            return row.to_model()

    def append_events(self, session_id: str, round: int, events: list[Event]) -> None:
        if not events:
            return
        with self._db() as db:
            db.add_all(
                EventRow(session_id=session_id, round=round, event_data=event_to_json(event))
                for event in events
            )

    def save_snapshot(self, session_id: str, round: int, state: State) -> None:
        with self._db() as db:
            db.add(SnapshotRow(session_id=session_id, round=round, state_data=state_to_json(state)))

    def save_latest_state(self, session_id: str, state: State) -> None:
        with self._db() as db:
            row = db.get(SessionRow, session_id)
            if row is None:
                raise SessionNotFoundError(session_id)
            row.latest_state = state_to_json(state)
            row.updated_at = _utcnow()

    def get_latest_state(self, session_id: str) -> State | None:
        with self._db() as db:
            row = db.get(SessionRow, session_id)
            data = row.latest_state if row is not None else None
        return state_from_json(data) if data is not None else None

    def get_events(self, session_id: str, from_round: int = 0) -> list[Event]:
        stmt = (
            select(EventRow.event_data)
            .where(EventRow.session_id == session_id, EventRow.round >= from_round)
            .order_by(EventRow.round, EventRow.id)
        )
        with self._db() as db:
            rows = db.scalars(stmt).all()
        return [event_from_json(data) for data in rows]

    def get_latest_snapshot(self, session_id: str) -> State | None:
        stmt = (
            select(SnapshotRow.state_data)
            .where(SnapshotRow.session_id == session_id)
            .order_by(SnapshotRow.round.desc(), SnapshotRow.id.desc())
            .limit(1)
        )
        return self._one_snapshot(stmt)

    def get_snapshot_at_round(self, session_id: str, round: int) -> State | None:
        stmt = (
            select(SnapshotRow.state_data)
            .where(SnapshotRow.session_id == session_id, SnapshotRow.round <= round)
            .order_by(SnapshotRow.round.desc(), SnapshotRow.id.desc())
            .limit(1)
        )
        return self._one_snapshot(stmt)

    def _one_snapshot(self, stmt) -> State | None:
        with self._db() as db:
            data = db.scalars(stmt).first()
        return state_from_json(data) if data is not None else None

    def update_session_status(self, session_id: str, status: SessionStatus) -> None:
        with self._db() as db:
            row = db.get(SessionRow, session_id)
            if row is None:
                raise SessionNotFoundError(session_id)
            row.status = status.value
            row.updated_at = _utcnow()

    def get_session(self, session_id: str) -> Session | None:
        with self._db() as db:
            row = db.get(SessionRow, session_id)
            return row.to_model() if row is not None else None

    def list_sessions(self, status: SessionStatus | None = None) -> list[Session]:
        stmt = select(SessionRow).order_by(SessionRow.created_at)
        if status is not None:
            stmt = stmt.where(SessionRow.status == status.value)
        with self._db() as db:
            return [row.to_model() for row in db.scalars(stmt).all()]

    def close(self) -> None:
        self._engine.dispose()
