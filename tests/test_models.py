"""Tests for wire-format behavior of the data models."""

import pytest
from pydantic import ValidationError

from models.actions import AbilityAction, ActionAdapter, AttackAction, FleeAction, actor_id
from models.characters import Character, Stat
from models.events import (
    AbilityUsedEvent,
    DamageEvent,
    EventAdapter,
    HealEvent,
    event_from_json,
    event_to_json,
)
from models.game_state import Resolution, State


class TestCharacterModels:
    """Tests for Stat and Character."""

    def test_camel_case_dump(self):
        char = Character(
            id="c1",
            name="Gruk",
            is_player=True,
            stats=Stat(hp=10, max_hp=12, attack=3),
        )
        data = char.to_json()
        assert data["isPlayer"] is True
        assert data["stats"]["maxHp"] == 12
        assert data["abilityCooldowns"] == {}
        assert "is_player" not in data

    def test_accepts_camel_and_snake_input(self):
        camel = Character.model_validate(
            {"id": "c1", "name": "A", "isPlayer": False, "stats": {"hp": 1, "maxHp": 2}}
        )
        snake = Character(id="c1", name="A", is_player=False, stats=Stat(hp=1, max_hp=2))
        assert camel == snake

    def test_hp_above_max_rejected(self):
        with pytest.raises(ValidationError, match="exceeds maxHp"):
            Stat(hp=11, max_hp=10)

    def test_negative_stats_rejected(self):
        with pytest.raises(ValidationError):
            Stat(hp=5, max_hp=10, defense=-1)

    def test_defaults_not_shared(self):
        a = Character(id="a", name="A", is_player=True, stats=Stat(hp=1, max_hp=1))
        b = Character(id="b", name="B", is_player=True, stats=Stat(hp=1, max_hp=1))
        a.ability_cooldowns["x"] = 1
        assert b.ability_cooldowns == {}


class TestActions:
    """Tests for the action union."""

    def test_parse_by_kind(self):
        action = ActionAdapter.validate_python(
            {"kind": "Attack", "attacker": "a", "target": "b", "weapon": "w"}
        )
        assert isinstance(action, AttackAction)
        assert actor_id(action) == "a"

    def test_unknown_kind_rejected(self):
        with pytest.raises(ValidationError):
            ActionAdapter.validate_python({"kind": "Dance", "actor": "a"})

    def test_optional_target_omitted(self):
        data = ActionAdapter.dump_python(
            AbilityAction(actor="a", ability="x"), mode="json", by_alias=True, exclude_none=True
        )
        assert data == {"kind": "Ability", "actor": "a", "ability": "x"}

    def test_actor_id(self):
        assert actor_id(FleeAction(actor="z")) == "z"


class TestEvents:
    """Tests for the event union."""

    def test_json_shape(self):
        data = event_to_json(DamageEvent(target="t", amount=4))
        assert data == '{"type":"damage","target":"t","amount":4}'

    def test_parse_by_type(self):
        event = event_from_json('{"type":"ability_used","actor":"a","ability":"x","target":"t"}')
        assert event == AbilityUsedEvent(actor="a", ability="x", target="t")

    def test_round_trip_keeps_variant(self):
        event = HealEvent(target="t", amount=3)
        assert event_from_json(event_to_json(event)) == event

    def test_events_are_immutable(self):
        event = DamageEvent(target="t", amount=4)
        with pytest.raises(ValidationError):
            event.amount = 5

    def test_zero_amount_rejected(self):
        with pytest.raises(ValidationError):
            EventAdapter.validate_python({"type": "heal", "target": "t", "amount": 0})


class TestResolution:
    """Tests for State and Resolution serialization."""

    def test_resolution_dump(self):
        res = Resolution(
            events=[DamageEvent(target="t", amount=2, source="s")],
            state=State(round=2, current_turn=1),
            logs=["hit"],
        )
        data = res.to_json()
        assert data["events"] == [{"type": "damage", "target": "t", "amount": 2, "source": "s"}]
        assert data["state"]["currentTurn"] == 1
        assert data["state"]["isComplete"] is False
        assert "winner" not in data["state"]

    def test_round_must_be_positive(self):
        with pytest.raises(ValidationError):
            State(round=0)
