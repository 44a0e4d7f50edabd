"""Combat events: immutable facts emitted by action resolution."""

from typing import Annotated, Literal, Union

from pydantic import ConfigDict, Field, TypeAdapter

from models.characters import CamelModel


class BaseEvent(CamelModel):
    model_config = ConfigDict(frozen=True)


class DamageEvent(BaseEvent):
    type: Literal["damage"] = "damage"
    target: str
    amount: int = Field(ge=1)
    source: str | None = None


class HealEvent(BaseEvent):
    type: Literal["heal"] = "heal"
    target: str
    amount: int = Field(ge=1)


class DeathEvent(BaseEvent):
    type: Literal["death"] = "death"
    target: str


class FleeEvent(BaseEvent):
    type: Literal["flee"] = "flee"
    actor: str


class AbilityUsedEvent(BaseEvent):
    type: Literal["ability_used"] = "ability_used"
    actor: str
    ability: str
    target: str | None = None


class ItemUsedEvent(BaseEvent):
    type: Literal["item_used"] = "item_used"
    actor: str
    item: str


Event = Annotated[
    Union[DamageEvent, HealEvent, DeathEvent, FleeEvent, AbilityUsedEvent, ItemUsedEvent],
    Field(discriminator="type"),
]

EventAdapter: TypeAdapter[Event] = TypeAdapter(Event)


def event_to_json(event: Event) -> str:
    """Serialize an event to its compact wire JSON."""
    return event.model_dump_json(by_alias=True, exclude_none=True)


def event_from_json(data: str | bytes) -> Event:
    """Parse wire JSON back into the matching event variant."""
    return EventAdapter.validate_json(data)
