"""The Character aggregate.

A character snapshot holds the player's raw choices (identity, boosts,
training, equipment, active effects, resource counters) plus the
``derived`` block the recalculator writes. Snapshots are immutable; every
edit produces a new Character.

Example:
    >>> character = Character(name="Valeros", level=3, ability_scores={})
    >>> character.ability_scores.strength
    10
"""

from __future__ import annotations

from typing import Any

from pydantic import Field, TypeAdapter, ValidationInfo, field_validator
from pydantic import ValidationError as PydanticValidationError

from pf2e_builder.core.constants import MAX_LEVEL, MIN_LEVEL, SKILL_INCREASE_LEVELS
from pf2e_builder.core.logging import get_logger
from pf2e_builder.models.components import (
    AbilityScoreSet,
    BoostLedger,
    CharacterFeat,
    Component,
    CustomResource,
    Currency,
    HitPoints,
    ProficiencySet,
    RestCooldowns,
    Spellcasting,
    VariantRules,
    clamp,
)
from pf2e_builder.models.derived import DerivedStats
from pf2e_builder.models.effects import ActiveCondition, Buff
from pf2e_builder.models.equipment import EquippedItem, ShieldState
from pf2e_builder.models.enums import Skill


logger = get_logger(__name__)

_ENTRY_ADAPTERS: dict[str, TypeAdapter[Any]] = {
    "conditions": TypeAdapter(ActiveCondition),
    "buffs": TypeAdapter(Buff),
    "custom_resources": TypeAdapter(CustomResource),
    "feats": TypeAdapter(CharacterFeat),
    "equipment": TypeAdapter(EquippedItem),
}
"""Validators for list fields whose bad entries are dropped one by one."""


class Character(Component):
    """A full character snapshot.

    Attributes:
        id: Stable character id assigned by the persistence layer.
        name: Character name.
        level: Character level, clamped into 1-20.
        ancestry_id: Ancestry reference id.
        heritage_id: Heritage reference id.
        background_id: Background reference id.
        class_id: Class reference id.
        ability_scores: Final ability scores (required; rewritten by the
            recalculator from the boost ledger).
        boosts: Boost choices by source.
        hit_points: Hit point counters.
        proficiencies: Non-skill proficiency ranks.
        skill_training: Skills trained manually (e.g. Intelligence bonus).
        skill_increases: Skill raised at each skill-increase level.
        feats: Feats taken.
        equipment: Carried items.
        equipped_armor: Instance id of the worn armor.
        equipped_shield: Instance id of the held shield.
        shield: Shield hit points and stance.
        spellcasting: Spellcasting block, if the character casts.
        conditions: Active conditions.
        buffs: Active buffs.
        custom_resources: Player-tracked resources.
        currency: Coins carried.
        rest: Rest cooldown timestamps.
        variant_rules: Optional campaign rules.
        derived: Derived statistics written by the recalculator.
    """

    id: str = ""
    name: str = ""
    level: int = MIN_LEVEL

    ancestry_id: str | None = None
    heritage_id: str | None = None
    background_id: str | None = None
    class_id: str | None = None

    ability_scores: AbilityScoreSet
    boosts: BoostLedger = Field(default_factory=BoostLedger)
    hit_points: HitPoints = Field(default_factory=HitPoints)
    proficiencies: ProficiencySet = Field(default_factory=ProficiencySet)
    skill_training: list[Skill] = Field(default_factory=list)
    skill_increases: dict[int, Skill] = Field(default_factory=dict)
    feats: list[CharacterFeat] = Field(default_factory=list)

    equipment: list[EquippedItem] = Field(default_factory=list)
    equipped_armor: str | None = None
    equipped_shield: str | None = None
    shield: ShieldState = Field(default_factory=ShieldState)

    spellcasting: Spellcasting | None = None
    conditions: list[ActiveCondition] = Field(default_factory=list)
    buffs: list[Buff] = Field(default_factory=list)
    custom_resources: list[CustomResource] = Field(default_factory=list)
    currency: Currency = Field(default_factory=Currency)
    rest: RestCooldowns = Field(default_factory=RestCooldowns)
    variant_rules: VariantRules = Field(default_factory=VariantRules)

    derived: DerivedStats | None = None

    @field_validator("level", mode="before")
    @classmethod
    def clamp_level(cls, value: Any) -> Any:
        """Clamp the level into 1-20; a missing level means level 1."""
        if value is None:
            return MIN_LEVEL
        if isinstance(value, int) and not isinstance(value, bool):
            return clamp(value, MIN_LEVEL, MAX_LEVEL)
        return value

    @field_validator("skill_training", mode="before")
    @classmethod
    def filter_skill_training(cls, value: Any) -> list[str]:
        """Drop unknown skill ids and duplicates."""
        known = {skill.value for skill in Skill}
        kept: list[str] = []
        for item in value or []:
            key = str(item).strip().lower()
            if key in known and key not in kept:
                kept.append(key)
        return kept

    @field_validator("skill_increases", mode="before")
    @classmethod
    def filter_skill_increases(cls, value: Any) -> dict[int, str]:
        """Keep only valid skills chosen at skill-increase levels."""
        known = {skill.value for skill in Skill}
        kept: dict[int, str] = {}
        for level, skill in dict(value or {}).items():
            try:
                level_number = int(level)
            except (TypeError, ValueError):
                continue
            key = str(skill).strip().lower()
            if level_number in SKILL_INCREASE_LEVELS and key in known:
                kept[level_number] = key
        return dict(sorted(kept.items()))

    @field_validator("currency", mode="before")
    @classmethod
    def default_currency(cls, value: Any) -> Any:
        return {} if value is None else value

    @field_validator("conditions", "buffs", "custom_resources", "feats", "equipment", mode="before")
    @classmethod
    def drop_invalid_entries(cls, value: Any, info: ValidationInfo) -> Any:
        """Drop null and malformed entries from hand-edited lists.

        A value that is not a list at all is left for field validation to
        reject.
        """
        if value is None:
            return []
        if not isinstance(value, (list, tuple)):
            return value
        adapter = _ENTRY_ADAPTERS[info.field_name]
        kept: list[Any] = []
        for entry in value:
            if entry is None:
                continue
            try:
                kept.append(adapter.validate_python(entry))
            except PydanticValidationError as exc:
                logger.debug(
                    "Dropping malformed list entry",
                    field=info.field_name,
                    errors=exc.error_count(),
                )
        return kept

    def item(self, instance_id: str | None) -> EquippedItem | None:
        """Look up an equipment entry by instance id."""
        if not instance_id:
            return None
        return next((item for item in self.equipment if item.id == instance_id), None)

    def condition(self, condition_id: str) -> ActiveCondition | None:
        """Look up an active condition by id."""
        key = condition_id.strip().lower()
        return next((condition for condition in self.conditions if condition.id == key), None)


__all__ = [
    "Character",
]
