"""Character and equipment data models for Skirmish Server."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model serialized with camelCase field names (maxHp, isPlayer...)."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json(self) -> dict:
        """Dump to the wire shape: aliased names, absent optionals omitted."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class AbilityEffect(str, Enum):
    """What an ability does when used."""
    DAMAGE = "damage"
    HEAL = "heal"
    BUFF = "buff"                   # Declared, no effect yet
    DEBUFF = "debuff"               # Declared, no effect yet


class ItemType(str, Enum):
    """Inventory item categories."""
    CONSUMABLE = "consumable"
    EQUIPMENT = "equipment"


class Stat(CamelModel):
    """Core combat statistics."""
    hp: int = Field(ge=0)
    max_hp: int = Field(ge=0)
    attack: int = Field(default=0, ge=0)
    defense: int = Field(default=0, ge=0)
    speed: int = Field(default=0, ge=0)

    @model_validator(mode="after")
    def _hp_within_max(self) -> "Stat":
        if self.hp > self.max_hp:
            raise ValueError(f"hp {self.hp} exceeds maxHp {self.max_hp}")
        return self


class Position(CamelModel):
    """Location on the battle map (carried along, not used by the rules)."""
    x: int = 0
    y: int = 0


class Weapon(CamelModel):
    """A weapon a character can attack with."""
    id: str
    name: str                       # e.g., "Longsword"
    damage: int = Field(ge=0)
    accuracy: int = 0               # Not used by the hit formula


class Ability(CamelModel):
    """A special ability gated by a cooldown."""
    id: str
    name: str
    cooldown: int = Field(default=0, ge=0)  # Turns before it can be reused
    effect: AbilityEffect
    power: int = Field(default=0, ge=0)


class Item(CamelModel):
    """A single-use inventory item."""
    id: str
    name: str                       # "Potion" in the name makes it heal
    type: ItemType = ItemType.CONSUMABLE
    effect: str = ""                # Free text, not interpreted


class Character(CamelModel):
    """A player character or an enemy in an encounter."""
    id: str                         # Unique identifier
    name: str
    is_player: bool
    stats: Stat
    position: Position = Position()
    weapons: list[Weapon] = []
    abilities: list[Ability] = []
    items: list[Item] = []
    ability_cooldowns: dict[str, int] = {}  # ability_id -> turns remaining

    @property
    def is_alive(self) -> bool:
        return self.stats.hp > 0
