"""Component models composed into the Character aggregate.

Components are frozen pydantic models: every edit produces a new instance.
Out-of-range numbers coming from hand-edited or stale data are clamped by
``mode="before"`` validators instead of being rejected, so a snapshot always
loads.

Components:
    AbilityScoreSet: The six ability scores with modifier helpers.
    BoostLedger: Ordered boost choices, one list per boost source.
    HitPoints: Current, maximum and temporary hit points.
    ProficiencySet: Ranks for saves, perception, spells, armor and weapons.
    SpellSlot / FocusPool / InnateSpell / Spellcasting: Casting resources.
    CustomResource: Player-tracked limited-use resources.
    RestCooldowns: Timestamps gating short-rest activities.
    VariantRules: Optional campaign rules.
"""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Any

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)

from pf2e_builder.core.constants import (
    BASE_ABILITY_SCORE,
    BOOST_MILESTONE_LEVELS,
    BOOST_SLOTS,
    COPPER_PER_COIN,
    MIN_ABILITY_SCORE,
)
from pf2e_builder.models.enums import Ability, ProficiencyRank, ResourceFrequency


# =============================================================================
# Validators and Type Definitions
# =============================================================================


def calculate_modifier(score: int) -> int:
    """Calculate the ability modifier from an ability score.

    The modifier is calculated as: (score - 10) // 2

    Example:
        >>> calculate_modifier(18)
        4
        >>> calculate_modifier(7)
        -2
    """
    return (score - 10) // 2


def clamp(value: int, low: int, high: int) -> int:
    """Clamp an integer into the inclusive range [low, high]."""
    return max(low, min(value, high))


def _filter_abilities(value: Any) -> list[Ability]:
    """Drop unknown ability ids and None entries from a boost list."""
    if value is None:
        return []
    if isinstance(value, (str, Ability)):
        value = [value]
    parsed = (Ability.parse(item) for item in value)
    return [ability for ability in parsed if ability is not None]


def _non_negative(value: Any) -> Any:
    """Clamp numeric input at zero, leaving other input to pydantic."""
    if isinstance(value, (int, float)) and not isinstance(value, bool) and value < 0:
        return 0
    return value


AbilityList = Annotated[list[Ability], BeforeValidator(_filter_abilities)]
Rank = Annotated[ProficiencyRank, BeforeValidator(ProficiencyRank.parse)]
NonNegativeInt = Annotated[int, BeforeValidator(_non_negative), Field(ge=0)]


class Component(BaseModel):
    """Base class for all snapshot components.

    Components are immutable; engine operations return updated copies.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
    )


# =============================================================================
# Ability Scores
# =============================================================================


class AbilityScoreSet(Component):
    """The six ability scores. Missing scores default to 10.

    Example:
        >>> scores = AbilityScoreSet(strength=16, dexterity=14)
        >>> scores.modifier(Ability.STR)
        3
    """

    strength: int = Field(default=BASE_ABILITY_SCORE, alias="str")
    dexterity: int = Field(default=BASE_ABILITY_SCORE, alias="dex")
    constitution: int = Field(default=BASE_ABILITY_SCORE, alias="con")
    intelligence: int = Field(default=BASE_ABILITY_SCORE, alias="int")
    wisdom: int = Field(default=BASE_ABILITY_SCORE, alias="wis")
    charisma: int = Field(default=BASE_ABILITY_SCORE, alias="cha")

    @field_validator(
        "strength", "dexterity", "constitution", "intelligence", "wisdom", "charisma",
        mode="before",
    )
    @classmethod
    def clamp_score(cls, value: Any) -> Any:
        """Replace missing scores with 10 and raise sub-1 scores to 1."""
        if value is None:
            return BASE_ABILITY_SCORE
        if isinstance(value, int) and not isinstance(value, bool) and value < MIN_ABILITY_SCORE:
            return MIN_ABILITY_SCORE
        return value

    def get(self, ability: Ability) -> int:
        """Get the score for a specific ability."""
        return getattr(self, _ABILITY_FIELDS[ability])

    def modifier(self, ability: Ability) -> int:
        """Get the modifier for a specific ability."""
        return calculate_modifier(self.get(ability))

    def modifiers(self) -> dict[Ability, int]:
        """Get every ability modifier keyed by ability."""
        return {ability: self.modifier(ability) for ability in Ability}

    @classmethod
    def from_mapping(cls, scores: dict[Ability, int]) -> AbilityScoreSet:
        """Build a score set from an ability-keyed mapping."""
        return cls(**{_ABILITY_FIELDS[ability]: value for ability, value in scores.items()})


_ABILITY_FIELDS: dict[Ability, str] = {
    Ability.STR: "strength",
    Ability.DEX: "dexterity",
    Ability.CON: "constitution",
    Ability.INT: "intelligence",
    Ability.WIS: "wisdom",
    Ability.CHA: "charisma",
}


# =============================================================================
# Boost Ledger
# =============================================================================


class BoostLedger(Component):
    """Ordered record of ability boost choices, one list per source.

    Ancestry fixed boosts and flaws come from reference data and are not
    stored here. Each list holds at most its source's slot count; adding a
    boost to a full source drops that source's oldest entry.

    Attributes:
        ancestry_free: Free ancestry boosts.
        background_choice: The boost picked from the background's two options.
        background_free: The background's free boost (not one of the options).
        class_key: The class key ability boost.
        creation_free: The four free boosts at character creation.
        level_up: Four free boosts per milestone level (5, 10, 15, 20).
    """

    ancestry_free: AbilityList = Field(default_factory=list)
    background_choice: AbilityList = Field(default_factory=list)
    background_free: AbilityList = Field(default_factory=list)
    class_key: AbilityList = Field(default_factory=list)
    creation_free: AbilityList = Field(default_factory=list)
    level_up: dict[int, AbilityList] = Field(default_factory=dict)

    @field_validator("level_up", mode="before")
    @classmethod
    def filter_milestones(cls, value: Any) -> dict[int, Any]:
        """Drop level-up entries that are not milestone levels."""
        if not value:
            return {}
        kept: dict[int, Any] = {}
        for level, boosts in dict(value).items():
            try:
                level_number = int(level)
            except (TypeError, ValueError):
                continue
            if level_number in BOOST_MILESTONE_LEVELS:
                kept[level_number] = boosts
        return kept

    @model_validator(mode="after")
    def enforce_slot_counts(self) -> "BoostLedger":
        """Trim over-full sources to their newest entries."""
        for source in (
            "ancestry_free",
            "background_choice",
            "background_free",
            "class_key",
            "creation_free",
        ):
            entries = getattr(self, source)
            limit = BOOST_SLOTS[source]
            if len(entries) > limit:
                object.__setattr__(self, source, entries[-limit:])
        limit = BOOST_SLOTS["level_up"]
        if any(len(entries) > limit for entries in self.level_up.values()):
            trimmed = {level: entries[-limit:] for level, entries in self.level_up.items()}
            object.__setattr__(self, "level_up", trimmed)
        return self

    def with_boost(
        self,
        source: str,
        ability: Ability | str,
        *,
        level: int | None = None,
        capacity: int | None = None,
    ) -> BoostLedger:
        """Return a ledger with one more boost recorded for a source.

        Invalid abilities, unknown sources and non-milestone levels leave the
        ledger unchanged.

        Args:
            source: One of the ledger's source field names.
            ability: Ability to boost.
            level: Milestone level, required when source is 'level_up'.
            capacity: Slot count override (e.g. an ancestry's free boosts).

        Returns:
            Updated ledger, or self when the boost was rejected.
        """
        parsed = Ability.parse(ability)
        if parsed is None or source not in BOOST_SLOTS:
            return self
        limit = capacity if capacity is not None else BOOST_SLOTS[source]
        if limit <= 0:
            return self

        if source == "level_up":
            if level not in BOOST_MILESTONE_LEVELS:
                return self
            entries = [*self.level_up.get(level, []), parsed][-limit:]
            return self.model_copy(update={"level_up": {**self.level_up, level: entries}})

        entries = [*getattr(self, source), parsed][-limit:]
        return self.model_copy(update={source: entries})

    def without_boost(self, source: str, ability: Ability | str, *, level: int | None = None) -> BoostLedger:
        """Return a ledger with the newest matching boost removed from a source."""
        parsed = Ability.parse(ability)
        if parsed is None or source not in BOOST_SLOTS:
            return self
        entries = list(self.level_up.get(level, [])) if source == "level_up" else list(getattr(self, source))
        if parsed not in entries:
            return self
        index = len(entries) - 1 - entries[::-1].index(parsed)
        del entries[index]
        if source == "level_up":
            return self.model_copy(update={"level_up": {**self.level_up, level: entries}})
        return self.model_copy(update={source: entries})


# =============================================================================
# Health
# =============================================================================


class HitPoints(Component):
    """Hit point tracking.

    ``current=None`` means "not yet computed" and resolves to the maximum
    on the next recalculation.
    """

    current: int | None = Field(default=None, description="Current hit points")
    max: NonNegativeInt = Field(default=0, description="Maximum hit points")
    temporary: NonNegativeInt = Field(default=0, description="Temporary hit points")

    @field_validator("current", mode="before")
    @classmethod
    def floor_current(cls, value: Any) -> Any:
        """Clamp negative current HP at zero."""
        return _non_negative(value)

    def take_damage(self, amount: int) -> HitPoints:
        """Apply damage, temporary hit points first. Current HP never drops below 0."""
        if amount <= 0:
            return self
        absorbed = min(self.temporary, amount)
        remaining = amount - absorbed
        current = self.max if self.current is None else self.current
        return self.model_copy(
            update={
                "temporary": self.temporary - absorbed,
                "current": max(0, current - remaining),
            }
        )

    def heal(self, amount: int) -> HitPoints:
        """Heal up to the maximum."""
        if amount <= 0:
            return self
        current = self.max if self.current is None else self.current
        return self.model_copy(update={"current": min(current + amount, self.max)})


# =============================================================================
# Proficiencies
# =============================================================================


class ProficiencySet(Component):
    """Proficiency ranks for every non-skill track. Missing ranks are untrained."""

    fortitude: Rank = ProficiencyRank.UNTRAINED
    reflex: Rank = ProficiencyRank.UNTRAINED
    will: Rank = ProficiencyRank.UNTRAINED
    perception: Rank = ProficiencyRank.UNTRAINED
    spell: Rank = ProficiencyRank.UNTRAINED
    class_dc: Rank = ProficiencyRank.UNTRAINED
    armor: dict[str, Rank] = Field(default_factory=dict, description="Rank per armor category")
    weapons: dict[str, Rank] = Field(default_factory=dict, description="Rank per weapon category")

    def weapon_rank(self, category: str) -> ProficiencyRank:
        """Rank for a weapon category, falling back to an 'all' entry."""
        return self.weapons.get(category, self.weapons.get("all", ProficiencyRank.UNTRAINED))

    def armor_rank(self, category: str) -> ProficiencyRank:
        """Rank for an armor category."""
        return self.armor.get(category, ProficiencyRank.UNTRAINED)


# =============================================================================
# Spellcasting Resources
# =============================================================================


class SpellSlot(Component):
    """Slots for one spell rank. ``used`` is clamped into [0, max]."""

    max: NonNegativeInt = 0
    used: NonNegativeInt = 0

    @model_validator(mode="before")
    @classmethod
    def clamp_used(cls, data: Any) -> Any:
        """Clamp ``used`` at ``max``."""
        if isinstance(data, dict):
            maximum = max(0, int(data.get("max") or 0))
            used = int(data.get("used") or 0)
            return {**data, "max": maximum, "used": clamp(used, 0, maximum)}
        return data

    @property
    def remaining(self) -> int:
        return self.max - self.used


class FocusPool(Component):
    """Focus points. ``current`` is clamped into [0, max]."""

    current: NonNegativeInt = 0
    max: NonNegativeInt = 0

    @model_validator(mode="before")
    @classmethod
    def clamp_current(cls, data: Any) -> Any:
        """Clamp ``current`` at ``max``."""
        if isinstance(data, dict):
            maximum = max(0, int(data.get("max") or 0))
            current = int(data.get("current") or 0)
            return {**data, "max": maximum, "current": clamp(current, 0, maximum)}
        return data


class InnateSpell(Component):
    """A limited-use spell granted by a heritage, background, feat or item."""

    spell_id: str
    uses: NonNegativeInt = 1
    max_uses: NonNegativeInt = 1
    at_will: bool = False
    source: str = ""

    @model_validator(mode="before")
    @classmethod
    def clamp_uses(cls, data: Any) -> Any:
        """Clamp ``uses`` at ``max_uses``."""
        if isinstance(data, dict):
            maximum = max(0, int(data.get("max_uses", 1) or 0))
            uses = int(data.get("uses", maximum) or 0)
            return {**data, "max_uses": maximum, "uses": clamp(uses, 0, maximum)}
        return data


class Spellcasting(Component):
    """A character's spellcasting block."""

    tradition: str = "arcane"
    key_ability: Ability = Ability.INT
    spell_slots: dict[int, SpellSlot] = Field(default_factory=dict)
    focus_pool: FocusPool | None = None
    focus_spells: list[str] = Field(default_factory=list)
    known_spells: list[str] = Field(default_factory=list)
    innate_spells: list[InnateSpell] = Field(default_factory=list)

    @field_validator("key_ability", mode="before")
    @classmethod
    def default_key_ability(cls, value: Any) -> Any:
        """Fall back to Intelligence for an unknown key ability."""
        return Ability.parse(value) or Ability.INT

    @field_validator("spell_slots", mode="before")
    @classmethod
    def filter_slot_ranks(cls, value: Any) -> dict[int, Any]:
        """Keep only ranks 1-10; cantrips never use slots."""
        if not value:
            return {}
        kept: dict[int, Any] = {}
        for rank, slot in dict(value).items():
            try:
                rank_number = int(rank)
            except (TypeError, ValueError):
                continue
            if 1 <= rank_number <= 10 and slot is not None:
                kept[rank_number] = slot
        return kept


# =============================================================================
# Other Resources
# =============================================================================


class CustomResource(Component):
    """A player-declared limited resource (e.g. a daily item power)."""

    id: str
    name: str = ""
    current: NonNegativeInt = 0
    max: NonNegativeInt = 0
    frequency: ResourceFrequency | str = ResourceFrequency.DAILY
    description: str = ""

    @model_validator(mode="before")
    @classmethod
    def clamp_current(cls, data: Any) -> Any:
        """Clamp ``current`` at ``max``."""
        if isinstance(data, dict):
            maximum = max(0, int(data.get("max") or 0))
            current = int(data.get("current") or 0)
            return {**data, "max": maximum, "current": clamp(current, 0, maximum)}
        return data

    @property
    def is_daily(self) -> bool:
        return self.frequency == ResourceFrequency.DAILY


class Currency(Component):
    """Coins carried, by denomination.

    Example:
        >>> purse = Currency(gp=15, sp=4)
        >>> purse.gold_value
        15.4
        >>> purse.deduct(2.5)
        Currency(cp=0, sp=9, gp=2, pp=1)
    """

    cp: NonNegativeInt = 0
    sp: NonNegativeInt = 0
    gp: NonNegativeInt = 0
    pp: NonNegativeInt = 0

    @property
    def coin_count(self) -> int:
        return self.cp + self.sp + self.gp + self.pp

    @property
    def copper_value(self) -> int:
        return sum(getattr(self, denomination) * copper for denomination, copper in COPPER_PER_COIN.items())

    @property
    def gold_value(self) -> float:
        """Total wealth in gold pieces."""
        return self.copper_value / COPPER_PER_COIN["gp"]

    def can_afford(self, cost_gp: float) -> bool:
        return self.copper_value >= round(cost_gp * COPPER_PER_COIN["gp"])

    def deduct(self, cost_gp: float) -> Currency | None:
        """Pay a cost in gold pieces, making change from the whole purse.

        The remainder is regrouped into the largest denominations.

        Args:
            cost_gp: Cost in gold pieces.

        Returns:
            The remaining coins, or None when the purse cannot cover the cost.
        """
        cost = round(cost_gp * COPPER_PER_COIN["gp"])
        if cost < 0 or cost > self.copper_value:
            return None
        remaining = self.copper_value - cost
        coins: dict[str, int] = {}
        for denomination in ("pp", "gp", "sp", "cp"):
            coins[denomination], remaining = divmod(remaining, COPPER_PER_COIN[denomination])
        return Currency(**coins)


class RestCooldowns(Component):
    """Timestamps of the last successful short-rest activities."""

    last_treat_wounds_at: datetime | None = None
    last_refocus_at: datetime | None = None


class VariantRules(Component):
    """Optional campaign variant rules."""

    proficiency_without_level: bool = False
    automatic_bonus_progression: bool = False


class CharacterFeat(Component):
    """A feat taken at a given level."""

    feat_id: str
    level: int = 1


__all__ = [
    "calculate_modifier",
    "clamp",
    "AbilityList",
    "Rank",
    "NonNegativeInt",
    "Component",
    "AbilityScoreSet",
    "BoostLedger",
    "HitPoints",
    "ProficiencySet",
    "SpellSlot",
    "FocusPool",
    "InnateSpell",
    "Spellcasting",
    "CustomResource",
    "Currency",
    "RestCooldowns",
    "VariantRules",
    "CharacterFeat",
]
