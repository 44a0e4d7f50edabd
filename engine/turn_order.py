"""Encounter setup: initiative rolls and the frozen turn order."""

from __future__ import annotations

from engine.dice import SeededRNG
from engine.rules import roll_initiative
from models.characters import Character
from models.game_state import State


def roll_initiatives(characters: list[Character], seed: int) -> list[int]:
    """Roll initiative for each character in order, from one shared RNG.

    Args:
        characters: Characters in roster order (players first, then enemies).
        seed: Encounter seed.

    Returns:
        Initiative totals, index-aligned with ``characters``.
    """
    rng = SeededRNG(seed)
    return [roll_initiative(char, rng) for char in characters]


def create_initial_state(
    players: list[Character],
    enemies: list[Character],
    seed: int,
) -> State:
    """Build the opening state of an encounter.

    Turn order is initiative descending; equal initiatives keep roster
    order (players before enemies, then list position).

    Args:
        players: The player roster.
        enemies: The enemy roster.
        seed: Seed for the initiative rolls.

    Returns:
        A State at round 1 with the first character in turn order to act.

    Raises:
        ValueError: If a roster is empty or two characters share an id.
    """
    if not players or not enemies:
        raise ValueError("Need at least one player and one enemy to start combat")

    characters = [c.model_copy(deep=True) for c in [*players, *enemies]]
    ids = [c.id for c in characters]
    if len(set(ids)) != len(ids):
        raise ValueError("Character ids must be unique within an encounter")

    initiatives = roll_initiatives(characters, seed)
    ranked = sorted(
        range(len(characters)),
        key=lambda i: (-initiatives[i], i),
    )

    return State(
        round=1,
        characters=characters,
        turn_order=[characters[i].id for i in ranked],
        current_turn=0,
        is_complete=False,
    )
