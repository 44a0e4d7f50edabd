"""Tests for combat formulas and ad-hoc checks."""

from engine.dice import SeededRNG
from engine.rules import (
    FIST,
    apply_damage,
    apply_defend,
    apply_heal,
    attack_damage,
    attack_hits,
    check_modifier,
    flee_succeeds,
    is_potion,
    potion_heal,
    roll_check,
    roll_initiative,
)
from models.characters import Character, Item, ItemType, Stat, Weapon
from models.game_state import CheckType, RollCheck, State


def _make_character(
    char_id: str = "c1",
    is_player: bool = True,
    hp: int = 20,
    attack: int = 5,
    defense: int = 3,
    speed: int = 4,
) -> Character:
    """Helper to create a test character."""
    return Character(
        id=char_id,
        name=f"Char_{char_id}",
        is_player=is_player,
        stats=Stat(hp=hp, max_hp=hp, attack=attack, defense=defense, speed=speed),
        weapons=[Weapon(id=f"{char_id}-w", name="Sword", damage=6, accuracy=85)],
    )


class TestInitiative:
    """Tests for roll_initiative()."""

    def test_speed_plus_d20(self):
        char = _make_character(speed=7)
        expected = 7 + SeededRNG(10).roll_d20()
        assert roll_initiative(char, SeededRNG(10)) == expected

    def test_range(self):
        char = _make_character(speed=4)
        rng = SeededRNG(1)
        for _ in range(50):
            assert 5 <= roll_initiative(char, rng) <= 24


class TestAttackFormulas:
    """Tests for attack_hits() and attack_damage()."""

    def test_hit_threshold_inclusive(self):
        attacker = _make_character(attack=5)
        target = _make_character("c2", defense=3)
        # 8 + 5 == 3 + 10
        assert attack_hits(8, attacker, target)
        assert not attack_hits(7, attacker, target)

    def test_strong_attacker_always_hits(self):
        attacker = _make_character(attack=15)
        target = _make_character("c2", defense=2)
        assert all(attack_hits(roll, attacker, target) for roll in range(1, 21))

    def test_damage_formula(self):
        attacker = _make_character(attack=7)
        target = _make_character("c2", defense=2)
        weapon = Weapon(id="w", name="Axe", damage=6)
        # 6 + 7 // 2 + 4 - 2
        assert attack_damage(weapon, attacker, target, 4) == 11

    def test_damage_never_below_one(self):
        attacker = _make_character(attack=0)
        target = _make_character("c2", defense=50)
        assert attack_damage(FIST, attacker, target, 1) == 1

    def test_fist_defaults(self):
        assert FIST.name == "Fist"
        assert FIST.damage == 1
        assert FIST.accuracy == 0


class TestHpChanges:
    """Tests for apply_damage() and apply_heal()."""

    def test_damage_reduces_hp(self):
        char = _make_character(hp=20)
        slain = apply_damage(char, 5)
        assert char.stats.hp == 15
        assert not slain

    def test_damage_clamped_at_zero(self):
        char = _make_character(hp=10)
        slain = apply_damage(char, 25)
        assert char.stats.hp == 0
        assert slain
        assert not char.is_alive

    def test_heal_clamped_at_max(self):
        char = _make_character(hp=20)
        char.stats.hp = 18
        apply_heal(char, 10)
        assert char.stats.hp == 20

    def test_defend_adds_bonus(self):
        char = _make_character(defense=3)
        apply_defend(char)
        assert char.stats.defense == 5


class TestFlee:
    """Tests for flee_succeeds()."""

    def test_threshold(self):
        char = _make_character(speed=4)
        assert flee_succeeds(11, char)
        assert not flee_succeeds(10, char)

    def test_fast_character_always_escapes(self):
        char = _make_character(speed=100)
        assert all(flee_succeeds(roll, char) for roll in range(1, 21))


class TestItems:
    """Tests for is_potion() and potion_heal()."""

    def test_potion_by_name(self):
        assert is_potion(Item(id="i", name="Health Potion"))
        assert is_potion(Item(id="i", name="Potion of Vigor"))

    def test_name_is_case_sensitive(self):
        assert not is_potion(Item(id="i", name="health potion"))

    def test_effect_text_ignored(self):
        item = Item(id="i", name="Bandage", type=ItemType.CONSUMABLE, effect="heal 20 HP")
        assert not is_potion(item)

    def test_potion_heal_range(self):
        rng = SeededRNG(4)
        assert all(21 <= potion_heal(rng) <= 26 for _ in range(30))


class TestRollCheck:
    """Tests for check_modifier() and roll_check()."""

    def test_modifiers(self):
        char = _make_character(attack=6, defense=4, speed=9)
        assert check_modifier(char, CheckType.ATTACK) == 6
        assert check_modifier(char, CheckType.DEFENSE) == 4
        assert check_modifier(char, CheckType.SKILL) == 4
        assert check_modifier(char, CheckType.SAVE) == 4

    def test_unknown_actor_no_modifier(self):
        assert check_modifier(None, CheckType.ATTACK) == 0

    def test_roll_check_uses_state(self):
        char = _make_character(attack=6)
        state = State(characters=[char], turn_order=[char.id])
        result = roll_check(state, RollCheck(actor="c1", type=CheckType.ATTACK, dc=10), SeededRNG(1))
        assert result.roll == 6
        assert result.modifier == 6
        assert result.total == 12
        assert result.success

    def test_roll_check_without_state(self):
        result = roll_check(None, RollCheck(actor="c1", type=CheckType.ATTACK, dc=10), SeededRNG(1))
        assert result.modifier == 0
        assert result.total == 6
        assert not result.success
