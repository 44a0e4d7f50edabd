"""Server-wide configuration constants for Skirmish Server."""

import os

DATA_DIR = os.environ.get("DATA_DIR", ".")  # Persistent data directory
DB_PATH = os.environ.get("DB_PATH", os.path.join(DATA_DIR, "skirmish.db"))
STORE_BACKEND = os.environ.get("STORE_BACKEND", "sql")  # "sql" or "memory"
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

MAX_ROUNDS = 20          # Hard cap: combat is over once this round is reached
HIT_DC_BASE = 10         # Attack hits if d20 + attack >= defense + HIT_DC_BASE
DEFEND_BONUS = 2         # Defense added by the Defend action
DEFENSE_BASELINE = 5     # Defense above this decays by DEFEND_BONUS each turn
FLEE_DC = 15             # Flee succeeds if d20 + speed >= FLEE_DC
POTION_HEAL = 20         # Base heal of any item whose name contains "Potion"


def database_url(path: str = DB_PATH) -> str:
    """Build an SQLAlchemy URL for the configured SQLite file."""
    if path == ":memory:":
        return "sqlite://"
    return f"sqlite:///{path}"
