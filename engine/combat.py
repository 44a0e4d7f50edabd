"""Action resolution: validate, dispatch, advance the turn, report.

``resolve`` never mutates its input and never raises for domain problems;
anything it can't act on is reported in the Resolution's logs.
"""

from __future__ import annotations

from config import DEFEND_BONUS, DEFENSE_BASELINE, MAX_ROUNDS
from engine.dice import SeededRNG
from engine.rules import (
    FIST,
    apply_damage,
    apply_defend,
    apply_heal,
    attack_damage,
    attack_hits,
    flee_succeeds,
    is_potion,
    potion_heal,
)
from models.actions import (
    AbilityAction,
    Action,
    AttackAction,
    DefendAction,
    FleeAction,
    UseItemAction,
    actor_id,
)
from models.characters import AbilityEffect, Character
from models.events import (
    AbilityUsedEvent,
    DamageEvent,
    DeathEvent,
    Event,
    FleeEvent,
    HealEvent,
    ItemUsedEvent,
)
from models.game_state import Resolution, State, Winner

_ACTION_TYPES = (AttackAction, DefendAction, AbilityAction, UseItemAction, FleeAction)


def get_character_by_id(state: State, character_id: str) -> Character | None:
    """Find a character in the state by id."""
    for char in state.characters:
        if char.id == character_id:
            return char
    return None


def get_current_character(state: State) -> Character | None:
    """Get the character whose turn it currently is."""
    if state.current_turn >= len(state.turn_order):
        return None
    return get_character_by_id(state, state.turn_order[state.current_turn])


def check_combat_end(state: State) -> bool:
    """True once combat is over, either decided or at the round cap."""
    return state.is_complete or state.round >= MAX_ROUNDS


def resolve(state: State, action: Action, seed: int) -> Resolution:
    """Apply one action to a state.

    Args:
        state: Current encounter state. Not modified.
        action: The action to resolve.
        seed: Seed for this resolution's dice.

    Returns:
        Resolution with the emitted events, the next state and log lines.
        On an invalid action the original state is returned unchanged.
    """
    if not isinstance(action, _ACTION_TYPES):
        return _reject(state, "Invalid action kind")

    rng = SeededRNG(seed)
    working = state.model_copy(deep=True)
    actor = get_character_by_id(working, actor_id(action))
    if actor is None:
        return _reject(state, "Invalid action: character not found")

    if isinstance(action, AttackAction):
        return _resolve_attack(state, working, actor, action, rng)
    elif isinstance(action, DefendAction):
        return _resolve_defend(working, actor)
    elif isinstance(action, AbilityAction):
        return _resolve_ability(state, working, actor, action, rng)
    elif isinstance(action, UseItemAction):
        return _resolve_use_item(state, working, actor, action, rng)
    else:
        return _resolve_flee(working, actor, rng)


def _reject(state: State, message: str) -> Resolution:
    return Resolution(events=[], state=state, logs=[message])


def _finish(working: State, events: list[Event], logs: list[str]) -> Resolution:
    advance_turn(working)
    return Resolution(events=events, state=working, logs=logs)


def _hit(
    source: Character,
    target: Character,
    amount: int,
    events: list[Event],
    logs: list[str],
) -> None:
    """Apply damage and record the damage (and possibly death) event."""
    slain = apply_damage(target, amount)
    events.append(DamageEvent(target=target.id, amount=amount, source=source.id))
    if slain:
        events.append(DeathEvent(target=target.id))
        logs.append(f"{target.name} has been defeated!")


# --- ATTACK ---

def _resolve_attack(
    original: State,
    working: State,
    attacker: Character,
    action: AttackAction,
    rng: SeededRNG,
) -> Resolution:
    target = get_character_by_id(working, action.target)
    if target is None:
        return _reject(original, "Invalid attack action: target not found")

    events: list[Event] = []
    logs: list[str] = []

    weapon = next((w for w in attacker.weapons if w.id == action.weapon), None)
    if weapon is None:
        logs.append("Weapon not found - using default")
        weapon = FIST

    attack_roll = rng.roll_d20()
    if attack_hits(attack_roll, attacker, target):
        damage = attack_damage(weapon, attacker, target, rng.roll_d6())
        logs.append(
            f"{attacker.name} attacks {target.name} with {weapon.name} for {damage} damage!"
        )
        _hit(attacker, target, damage, events, logs)
    else:
        logs.append(f"{attacker.name} misses {target.name}!")

    return _finish(working, events, logs)


# --- DEFEND ---

def _resolve_defend(working: State, actor: Character) -> Resolution:
    apply_defend(actor)
    return _finish(working, [], [f"{actor.name} takes a defensive stance!"])


# --- ABILITY ---

def _resolve_ability(
    original: State,
    working: State,
    actor: Character,
    action: AbilityAction,
    rng: SeededRNG,
) -> Resolution:
    ability = next((a for a in actor.abilities if a.id == action.ability), None)
    if ability is None:
        return _reject(original, "Ability not found")

    if actor.ability_cooldowns.get(ability.id, 0) > 0:
        return _reject(original, f"{ability.name} is on cooldown!")

    actor.ability_cooldowns[ability.id] = ability.cooldown
    events: list[Event] = [
        AbilityUsedEvent(actor=actor.id, ability=ability.id, target=action.target)
    ]
    logs: list[str] = []

    if ability.effect == AbilityEffect.DAMAGE:
        target = None
        if action.target is not None:
            target = get_character_by_id(working, action.target)
        if target is None:
            logs.append(f"{actor.name} uses {ability.name}, but there is no target!")
        else:
            damage = ability.power + rng.roll_d6()
            logs.append(
                f"{actor.name} uses {ability.name} on {target.name} for {damage} damage!"
            )
            _hit(actor, target, damage, events, logs)

    elif ability.effect == AbilityEffect.HEAL:
        amount = ability.power + rng.roll_d6()
        apply_heal(actor, amount)
        events.append(HealEvent(target=actor.id, amount=amount))
        logs.append(f"{actor.name} uses {ability.name} and heals for {amount} HP!")

    # BUFF and DEBUFF only start the cooldown.

    return _finish(working, events, logs)


# --- USE ITEM ---

def _resolve_use_item(
    original: State,
    working: State,
    actor: Character,
    action: UseItemAction,
    rng: SeededRNG,
) -> Resolution:
    index = next((i for i, it in enumerate(actor.items) if it.id == action.item), None)
    if index is None:
        return _reject(original, "Item not found")

    item = actor.items.pop(index)
    events: list[Event] = [ItemUsedEvent(actor=actor.id, item=item.id)]
    logs: list[str] = []

    if is_potion(item):
        amount = potion_heal(rng)
        apply_heal(actor, amount)
        events.append(HealEvent(target=actor.id, amount=amount))
        logs.append(f"{actor.name} uses {item.name} and heals for {amount} HP!")
    else:
        logs.append(f"{actor.name} uses {item.name}, but nothing happens.")

    return _finish(working, events, logs)


# --- FLEE ---

def _resolve_flee(working: State, actor: Character, rng: SeededRNG) -> Resolution:
    if not flee_succeeds(rng.roll_d20(), actor):
        return _finish(working, [], [f"{actor.name} fails to flee!"])

    # A successful escape ends the encounter on the spot; no turn advance.
    working.is_complete = True
    working.winner = Winner.ENEMY if actor.is_player else Winner.PLAYER
    return Resolution(
        events=[FleeEvent(actor=actor.id)],
        state=working,
        logs=[f"{actor.name} successfully flees from combat!"],
    )


def advance_turn(state: State) -> State:
    """End-of-action bookkeeping, applied in place.

    Ticks cooldowns, decays raised defense, checks whether a side has been
    wiped out and otherwise passes the turn, bumping the round on wrap.

    Args:
        state: The working state (mutated in place).

    Returns:
        The same state, for chaining.
    """
    for char in state.characters:
        for ability_id, remaining in char.ability_cooldowns.items():
            if remaining > 0:
                char.ability_cooldowns[ability_id] = remaining - 1

        # No per-effect durations are tracked: anything above the baseline
        # is treated as a Defend bonus and taken back.
        if char.stats.defense > DEFENSE_BASELINE:
            char.stats.defense = max(0, char.stats.defense - DEFEND_BONUS)

    winner = check_win_condition(state)
    if winner is not None:
        state.is_complete = True
        state.winner = winner
        return state

    if state.turn_order:
        state.current_turn = (state.current_turn + 1) % len(state.turn_order)
        if state.current_turn == 0:
            state.round += 1

    return state


def check_win_condition(state: State) -> Winner | None:
    """Return the winning side once the other has no one left standing.

    Players are checked first, so if both sides are down the enemy wins.
    """
    players_alive = any(c.is_player and c.is_alive for c in state.characters)
    enemies_alive = any(not c.is_player and c.is_alive for c in state.characters)

    if not players_alive:
        return Winner.ENEMY
    if not enemies_alive:
        return Winner.PLAYER
    return None


def get_state_summary(state: State) -> str:
    """Render a short plain-text overview of the encounter."""

    def _line(char: Character) -> str:
        status = f"{char.stats.hp}/{char.stats.max_hp} HP" if char.is_alive else "DEFEATED"
        return f"  {char.name}: {status}\n"

    summary = f"Round {state.round}\n\n"
    summary += "Players:\n"
    summary += "".join(_line(c) for c in state.characters if c.is_player)
    summary += "\nEnemies:\n"
    summary += "".join(_line(c) for c in state.characters if not c.is_player)

    if state.is_complete:
        winner = state.winner.value.title() if state.winner else "Draw"
        summary += f"\nCombat Complete! Winner: {winner}"
    else:
        current = get_current_character(state)
        summary += f"\nCurrent Turn: {current.name if current else 'Unknown'}"

    return summary
