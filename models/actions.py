"""Action models: the five things a character can do on its turn."""

from typing import Annotated, Literal, Union

from pydantic import Field, TypeAdapter

from models.characters import CamelModel


class AttackAction(CamelModel):
    """Strike a target with one of the attacker's weapons."""
    kind: Literal["Attack"] = "Attack"
    attacker: str
    target: str
    weapon: str


class DefendAction(CamelModel):
    """Raise defense until the bonus wears off."""
    kind: Literal["Defend"] = "Defend"
    actor: str


class AbilityAction(CamelModel):
    """Use an ability, optionally on a target."""
    kind: Literal["Ability"] = "Ability"
    actor: str
    ability: str
    target: str | None = None       # Required for damage abilities


class UseItemAction(CamelModel):
    """Consume an item from the actor's inventory."""
    kind: Literal["UseItem"] = "UseItem"
    actor: str
    item: str


class FleeAction(CamelModel):
    """Attempt to escape the encounter."""
    kind: Literal["Flee"] = "Flee"
    actor: str


Action = Annotated[
    Union[AttackAction, DefendAction, AbilityAction, UseItemAction, FleeAction],
    Field(discriminator="kind"),
]

ActionAdapter: TypeAdapter[Action] = TypeAdapter(Action)


def actor_id(action: Action) -> str:
    """Return the id of the character performing the action."""
    if isinstance(action, AttackAction):
        return action.attacker
    return action.actor
