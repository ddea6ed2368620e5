"""Equipment carried by a character.

Items reference reference-table entries through ``item_id``; everything the
engine needs for bulk (bulk, quantity, container fields) is stored on the
item itself so a missing reference entry never breaks encumbrance.
Container membership is an explicit relation (``container_id`` pointing at
an item whose ``is_container`` is true), never inferred from item names.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import Field, field_validator

from pf2e_builder.models.components import Component, NonNegativeInt


# =============================================================================
# Runes & Customization
# =============================================================================


class ItemRunes(Component):
    """Fundamental and property runes etched onto a weapon, armor or shield.

    Attributes:
        potency: Weapon (+1..+4) or armor (+1..+4) potency rune.
        striking: Striking tier (0 none, 1 striking, 2 greater, 3 major).
        resilient: Resilient tier (0 none, 1 resilient, 2 greater, 3 major).
        property_runes: Property rune ids, kept for display only.
    """

    potency: int = Field(default=0, ge=0, le=4)
    striking: int = Field(default=0, ge=0, le=3)
    resilient: int = Field(default=0, ge=0, le=3)
    property_runes: list[str] = Field(default_factory=list)

    @field_validator("potency", "striking", "resilient", mode="before")
    @classmethod
    def clamp_tier(cls, value: Any, info: Any) -> Any:
        """Clamp rune tiers into their legal range."""
        if value is None:
            return 0
        if isinstance(value, int) and not isinstance(value, bool):
            upper = 4 if info.field_name == "potency" else 3
            return max(0, min(value, upper))
        return value


class ItemCustomization(Component):
    """Player overrides applied on top of reference item data."""

    custom_name: str | None = None
    bonus_ac: int = 0
    dex_cap_override: int | None = None
    bonus_attack: int = 0
    bonus_damage: int = 0
    max_hp_override: int | None = Field(default=None, ge=0)
    hardness_override: int | None = Field(default=None, ge=0)
    bulk_override: float | None = Field(default=None, ge=0)


class Wielded(Component):
    """How an item is held."""

    hands: Literal[1, 2] = 1


# =============================================================================
# Equipped Items
# =============================================================================


class EquippedItem(Component):
    """One entry of a character's equipment list.

    Attributes:
        id: Instance id, unique within the character.
        item_id: Reference-table id (weapon, armor, shield or gear).
        name: Display name.
        bulk: Bulk of a single unit.
        quantity: Stack size.
        worn: Whether the item is worn.
        wielded: Hands used when wielded.
        invested: Whether the item is invested.
        container_id: Instance id of the container holding this item.
        is_container: Whether this item can hold other items.
        bulk_reduction: Bulk ignored for the container's contents.
        capacity: Bulk the container can hold.
        runes: Etched runes.
        customization: Player overrides.
    """

    id: str
    item_id: str | None = None
    name: str = ""
    bulk: float = 0.0
    quantity: NonNegativeInt = 1
    worn: bool = False
    wielded: Wielded | None = None
    invested: bool = False
    container_id: str | None = None
    is_container: bool = False
    bulk_reduction: float = 0.0
    capacity: float | None = None
    runes: ItemRunes = Field(default_factory=ItemRunes)
    customization: ItemCustomization = Field(default_factory=ItemCustomization)

    @field_validator("bulk", "bulk_reduction", mode="before")
    @classmethod
    def clamp_bulk(cls, value: Any) -> Any:
        """Treat missing or negative bulk as zero."""
        if value is None:
            return 0.0
        if isinstance(value, (int, float)) and not isinstance(value, bool) and value < 0:
            return 0.0
        return value

    @field_validator("quantity", mode="before")
    @classmethod
    def default_quantity(cls, value: Any) -> Any:
        """A missing quantity means a single item."""
        return 1 if value is None else value

    @property
    def display_name(self) -> str:
        return self.customization.custom_name or self.name or self.item_id or self.id

    @property
    def unit_bulk(self) -> float:
        """Bulk of one unit, honouring a customization override."""
        if self.customization.bulk_override is not None:
            return self.customization.bulk_override
        return self.bulk


class ShieldState(Component):
    """Hit points and stance of the equipped shield.

    ``current_hp=None`` means "undamaged" and resolves to the shield's
    maximum on recalculation.
    """

    current_hp: int | None = None
    raised: bool = False

    @field_validator("current_hp", mode="before")
    @classmethod
    def floor_hp(cls, value: Any) -> Any:
        """Clamp negative shield HP at zero."""
        if isinstance(value, int) and not isinstance(value, bool) and value < 0:
            return 0
        return value


__all__ = [
    "ItemRunes",
    "ItemCustomization",
    "Wielded",
    "EquippedItem",
    "ShieldState",
]
