"""FastAPI app entry point for Skirmish Server."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from api.sessions import router as sessions_router
from api.tools import router as tools_router
from config import LOG_LEVEL, STORE_BACKEND, database_url
from engine.session import SessionManager
from store.base import EventStore
from store.memory import MemoryEventStore
from store.sql import SqlEventStore

logger = logging.getLogger(__name__)


def build_store(backend: str = STORE_BACKEND) -> EventStore:
    """Create the configured event store."""
    if backend == "memory":
        logger.info("Using in-memory event store (nothing survives a restart)")
        return MemoryEventStore()
    return SqlEventStore(database_url())


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Apps built with an explicit store (tests) are already wired up
    if not hasattr(app.state, "sessions"):
        app.state.sessions = SessionManager(build_store())
        app.state.sessions.load_active_sessions()
    yield
    app.state.sessions.store.close()


def create_app(store: EventStore | None = None) -> FastAPI:
    """Build the app; the session manager lives on ``app.state.sessions``.

    Args:
        store: Event store to use. When omitted, the configured backend is
            opened at startup.
    """
    app = FastAPI(
        title="Skirmish Server",
        description="Deterministic turn-based combat resolution with event-sourced sessions",
        version="0.1.0",
        lifespan=lifespan,
    )
    if store is not None:
        app.state.sessions = SessionManager(store)

    app.include_router(tools_router, prefix="/tools", tags=["Tools"])
    app.include_router(sessions_router, prefix="/sessions", tags=["Sessions"])

    @app.get("/")
    def root() -> dict:
        """Root endpoint returning server info."""
        return {"name": "Skirmish Server", "version": "0.1.0", "status": "running"}

    @app.get("/health")
    def health() -> dict:
        """Health check endpoint."""
        return {"healthy": True}

    return app


logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = create_app()
