"""Server-side action policy for enemies and auto-played characters."""

from __future__ import annotations

from engine.combat import check_combat_end, get_current_character
from engine.rules import FIST
from models.actions import Action, AttackAction, DefendAction
from models.characters import Character
from models.game_state import State


def choose_action(state: State) -> Action | None:
    """Decide what the character whose turn it is does.

    A fallen character can only brace, which passes the turn. Anyone else
    strikes the first opponent still standing with their first weapon,
    falling back to bare fists when unarmed.

    Returns:
        An Action for the current character, or None if combat is over.
    """
    if check_combat_end(state):
        return None

    actor = get_current_character(state)
    if actor is None:
        return None

    if not actor.is_alive:
        return DefendAction(actor=actor.id)

    target = first_living_opponent(state, actor)
    if target is None:
        return DefendAction(actor=actor.id)

    weapon_id = actor.weapons[0].id if actor.weapons else FIST.id
    return AttackAction(attacker=actor.id, target=target.id, weapon=weapon_id)


def first_living_opponent(state: State, actor: Character) -> Character | None:
    """First character on the other side with HP left, in roster order."""
    for char in state.characters:
        if char.is_player != actor.is_player and char.is_alive:
            return char
    return None
