"""Tests for the server-side action policy."""

from engine.combat import resolve
from engine.npc import choose_action, first_living_opponent
from models.actions import AttackAction, DefendAction
from models.characters import Character, Stat, Weapon
from models.game_state import State, Winner


def _make_character(
    char_id: str,
    is_player: bool,
    hp: int = 20,
    armed: bool = True,
) -> Character:
    """Helper to create a test character."""
    weapons = [Weapon(id=f"{char_id}-club", name="Club", damage=4)] if armed else []
    return Character(
        id=char_id,
        name=f"Char_{char_id}",
        is_player=is_player,
        stats=Stat(hp=hp, max_hp=20, attack=4, defense=2, speed=3),
        weapons=weapons,
    )


def _make_state(*characters: Character, current_turn: int = 0) -> State:
    return State(
        characters=list(characters),
        turn_order=[c.id for c in characters],
        current_turn=current_turn,
    )


class TestChooseAction:
    """Tests for choose_action()."""

    def test_enemy_attacks_first_living_player(self):
        state = _make_state(
            _make_character("e1", False),
            _make_character("p1", True, hp=0),
            _make_character("p2", True),
        )
        action = choose_action(state)
        assert action == AttackAction(attacker="e1", target="p2", weapon="e1-club")

    def test_player_side_targets_enemies(self):
        state = _make_state(_make_character("p1", True), _make_character("e1", False))
        action = choose_action(state)
        assert isinstance(action, AttackAction)
        assert action.target == "e1"

    def test_unarmed_falls_back_to_fists(self):
        state = _make_state(
            _make_character("e1", False, armed=False),
            _make_character("p1", True),
        )
        action = choose_action(state)
        assert action.weapon == ""
        res = resolve(state, action, 1)
        assert res.logs[0] == "Weapon not found - using default"

    def test_fallen_character_defends(self):
        state = _make_state(
            _make_character("e1", False, hp=0),
            _make_character("e2", False),
            _make_character("p1", True),
        )
        assert choose_action(state) == DefendAction(actor="e1")

    def test_none_when_complete(self):
        state = _make_state(_make_character("p1", True), _make_character("e1", False))
        state.is_complete = True
        state.winner = Winner.PLAYER
        assert choose_action(state) is None

    def test_none_at_round_cap(self):
        state = _make_state(_make_character("p1", True), _make_character("e1", False))
        state.round = 20
        assert choose_action(state) is None

    def test_none_without_current_character(self):
        assert choose_action(State()) is None


class TestFirstLivingOpponent:
    """Tests for first_living_opponent()."""

    def test_roster_order(self):
        p1 = _make_character("p1", True)
        state = _make_state(
            p1,
            _make_character("e1", False, hp=0),
            _make_character("e2", False),
            _make_character("e3", False),
        )
        assert first_living_opponent(state, p1).id == "e2"

    def test_none_when_side_wiped(self):
        p1 = _make_character("p1", True)
        state = _make_state(p1, _make_character("e1", False, hp=0))
        assert first_living_opponent(state, p1) is None
