"""Combat rules: initiative, hit and damage formulas, healing, flee, checks."""

from __future__ import annotations

from typing import TYPE_CHECKING

from config import DEFEND_BONUS, FLEE_DC, HIT_DC_BASE, POTION_HEAL
from engine.dice import SeededRNG
from models.characters import Weapon
from models.game_state import CheckType, RollCheck, RollResult

if TYPE_CHECKING:
    from models.characters import Character, Item
    from models.game_state import State

# Used when an attack names a weapon the attacker doesn't carry.
FIST = Weapon(id="", name="Fist", damage=1, accuracy=0)


def roll_initiative(character: Character, rng: SeededRNG) -> int:
    """Roll initiative for a character: speed + d20.

    Args:
        character: The character rolling initiative.
        rng: The encounter's shared RNG.

    Returns:
        The initiative total.
    """
    return character.stats.speed + rng.roll_d20()


def attack_hits(attack_roll: int, attacker: Character, target: Character) -> bool:
    """An attack lands if d20 + attack meets defense + 10."""
    return attack_roll + attacker.stats.attack >= target.stats.defense + HIT_DC_BASE


def attack_damage(
    weapon: Weapon,
    attacker: Character,
    target: Character,
    damage_roll: int,
) -> int:
    """Calculate weapon damage after the target's defense. Never below 1.

    Args:
        weapon: The weapon used.
        attacker: The attacking character.
        target: The character being hit.
        damage_roll: The d6 rolled for damage.

    Returns:
        Damage to apply.
    """
    raw = weapon.damage + attacker.stats.attack // 2 + damage_roll - target.stats.defense
    return max(1, raw)


def apply_damage(character: Character, damage: int) -> bool:
    """Reduce HP by damage, clamped at 0.

    Returns:
        True if the character is now at 0 HP.
    """
    character.stats.hp = max(0, character.stats.hp - damage)
    return character.stats.hp == 0


def apply_heal(character: Character, amount: int) -> None:
    """Restore HP, clamped at max HP."""
    character.stats.hp = min(character.stats.max_hp, character.stats.hp + amount)


def apply_defend(character: Character) -> None:
    character.stats.defense += DEFEND_BONUS


def flee_succeeds(flee_roll: int, character: Character) -> bool:
    """A flee attempt works if d20 + speed reaches the flee DC."""
    return flee_roll + character.stats.speed >= FLEE_DC


def is_potion(item: Item) -> bool:
    """Items heal only when "Potion" appears in their name.

    The declared type and effect text are ignored; only the name counts.
    """
    return "Potion" in item.name


def potion_heal(rng: SeededRNG) -> int:
    return POTION_HEAL + rng.roll_d6()


def check_modifier(character: Character | None, check_type: CheckType) -> int:
    """Stat modifier applied to an ad-hoc check."""
    if character is None:
        return 0
    if check_type == CheckType.ATTACK:
        return character.stats.attack
    if check_type == CheckType.DEFENSE:
        return character.stats.defense
    return character.stats.speed // 2


def roll_check(state: State | None, check: RollCheck, rng: SeededRNG) -> RollResult:
    """Roll a d20 check for an actor against a difficulty class.

    Args:
        state: Encounter the actor belongs to, if known.
        check: The check to roll.
        rng: Dice source.

    Returns:
        RollResult with the raw roll, modifier, total and outcome.
    """
    character = None
    if state is not None:
        character = next((c for c in state.characters if c.id == check.actor), None)

    modifier = check_modifier(character, check.type)
    roll = rng.roll_d20()
    total = roll + modifier
    return RollResult(roll=roll, modifier=modifier, total=total, success=total >= check.dc)
