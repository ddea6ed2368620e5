"""Read-only reference tables the engine looks entries up in by id.

The tables are supplied by an external data loader. Every lookup returns
None for an unknown id so callers can filter stale references instead of
failing. Tables may be given as id-keyed mappings or as plain lists of
entries; lists are indexed by each entry's ``id``.

Example:
    >>> refs = ReferenceTables(classes=[{"id": "fighter", "hp": 10}])
    >>> refs.class_("fighter").hp
    10
    >>> refs.class_("unknown") is None
    True
"""

from __future__ import annotations

from typing import Any, TypeVar

from pydantic import Field, field_validator, model_validator

from pf2e_builder.core.constants import DEFAULT_SPEED
from pf2e_builder.core.exceptions import ReferenceDataError
from pf2e_builder.models.components import AbilityList, Component
from pf2e_builder.models.enums import (
    Ability,
    ArmorCategory,
    ProficiencyTrack,
    Selector,
    Skill,
)


def _filter_skills(value: Any) -> list[Skill]:
    """Drop unknown skill ids."""
    skills: list[Skill] = []
    for item in value or []:
        try:
            skills.append(Skill(str(item).strip().lower()))
        except ValueError:
            continue
    return skills


class Entry(Component):
    """Base class for reference-table entries."""

    id: str
    name: str = ""


# =============================================================================
# Character Options
# =============================================================================


class AncestryEntry(Entry):
    """An ancestry: hit points, speed and fixed boosts/flaws."""

    hp: int = 0
    speed: int = DEFAULT_SPEED
    boosts: AbilityList = Field(default_factory=list)
    flaws: AbilityList = Field(default_factory=list)
    free_boosts: int = Field(default=2, ge=0)


class HeritageEntry(Entry):
    """A heritage belonging to one ancestry."""

    ancestry_id: str | None = None
    hp_bonus: int = 0


class BackgroundEntry(Entry):
    """A background: two boost options and trained skills."""

    boost_options: AbilityList = Field(default_factory=list)
    trained_skills: list[Skill] = Field(default_factory=list)

    @field_validator("trained_skills", mode="before")
    @classmethod
    def filter_skills(cls, value: Any) -> list[Skill]:
        return _filter_skills(value)


class RankCeiling(Component):
    """Levels at which master and legendary become available on a track.

    None means the rank never unlocks on this track.
    """

    master_level: int | None = 7
    legendary_level: int | None = 15


class ClassEntry(Entry):
    """A class: hit points, key abilities and progression tables.

    Attributes:
        hp: Hit points per level.
        key_abilities: Legal choices for the class key boost.
        trained_skills: Skills the class trains automatically.
        rank_ceilings: Per-track ceiling overrides.
        spell_slots: Level -> spell rank -> slot count progression.
        spellcasting_ability: Key spellcasting ability, if the class casts.
        tradition: Spell tradition, if the class casts.
        focus_points: Focus points granted by class features.
    """

    hp: int = 0
    key_abilities: AbilityList = Field(default_factory=list)
    trained_skills: list[Skill] = Field(default_factory=list)
    rank_ceilings: dict[ProficiencyTrack, RankCeiling] = Field(default_factory=dict)
    spell_slots: dict[int, dict[int, int]] = Field(default_factory=dict)
    spellcasting_ability: Ability | None = None
    tradition: str | None = None
    focus_points: int = Field(default=0, ge=0)

    @field_validator("trained_skills", mode="before")
    @classmethod
    def filter_skills(cls, value: Any) -> list[Skill]:
        return _filter_skills(value)

    @field_validator("rank_ceilings", mode="before")
    @classmethod
    def filter_tracks(cls, value: Any) -> dict[str, Any]:
        """Ignore ceilings for unknown tracks."""
        tracks = {track.value for track in ProficiencyTrack}
        return {key: ceiling for key, ceiling in dict(value or {}).items() if key in tracks}

    def ceiling(self, track: ProficiencyTrack) -> RankCeiling | None:
        """Ceiling override for a track, if the class defines one."""
        return self.rank_ceilings.get(track)

    def slots_at(self, level: int) -> dict[int, int]:
        """Slot counts for the highest progression row at or below a level."""
        rows = [row_level for row_level in self.spell_slots if row_level <= level]
        if not rows:
            return {}
        return dict(self.spell_slots[max(rows)])


class FeatEntry(Entry):
    """A feat and the numeric effects the engine understands.

    Attributes:
        level: Feat level.
        grants_focus_pool: Feat grants a focus spell (one focus point each).
        additional_focus_points: Extra focus points granted.
        hp_per_level: Hit points gained per character level (e.g. Toughness).
        hp_bonus: Flat hit points gained.
        trained_skills: Skills trained by the feat.
    """

    level: int = 1
    grants_focus_pool: bool = False
    additional_focus_points: int = Field(default=0, ge=0)
    hp_per_level: int = 0
    hp_bonus: int = 0
    trained_skills: list[Skill] = Field(default_factory=list)

    @field_validator("trained_skills", mode="before")
    @classmethod
    def filter_skills(cls, value: Any) -> list[Skill]:
        return _filter_skills(value)


class SpellEntry(Entry):
    """A spell. Rank 0 is a cantrip."""

    rank: int = Field(default=1, ge=0, le=10)
    traditions: list[str] = Field(default_factory=list)
    traits: list[str] = Field(default_factory=list)
    focus: bool = False

    @property
    def is_cantrip(self) -> bool:
        return self.rank == 0 or "cantrip" in self.traits


# =============================================================================
# Equipment
# =============================================================================


class WeaponEntry(Entry):
    """A weapon's static statistics."""

    category: str = "simple"
    group: str = ""
    damage_die: str = "d4"
    damage_type: str = "bludgeoning"
    traits: list[str] = Field(default_factory=list)
    ranged: bool = False
    bulk: float = 0.0

    @property
    def is_finesse(self) -> bool:
        return "finesse" in self.traits

    @property
    def is_agile(self) -> bool:
        return "agile" in self.traits


class ArmorEntry(Entry):
    """An armor's static statistics. ``dex_cap=None`` means uncapped."""

    category: ArmorCategory = ArmorCategory.LIGHT
    ac_bonus: int = 0
    dex_cap: int | None = None
    check_penalty: int = 0
    speed_penalty: int = 0
    strength: int | None = None
    bulk: float = 0.0


class ShieldEntry(Entry):
    """A shield's static statistics."""

    hardness: int = 0
    hp: int = Field(default=0, ge=0)
    bulk: float = 0.0

    @property
    def broken_threshold(self) -> int:
        return self.hp // 2


# =============================================================================
# Conditions
# =============================================================================


class ConditionRule(Component):
    """One modifier a condition applies.

    ``value=None`` scales with the condition: a valued condition applies
    minus its value, a static condition applies -1.
    """

    selector: Selector
    value: int | None = None

    def amount(self, condition_value: int) -> int:
        """Signed modifier for a condition at the given value."""
        if self.value is None:
            return -condition_value
        return self.value


class ConditionDefinition(Entry):
    """A condition's rules.

    Attributes:
        valued: Whether instances carry a value.
        family: Stacking family; penalties of the same family on the same
            target do not stack. Defaults to the condition id.
        rules: Modifiers applied while the condition is active.
    """

    valued: bool = False
    family: str | None = None
    rules: list[ConditionRule] = Field(default_factory=list)

    @property
    def stacking_family(self) -> str:
        return self.family or self.id


def _condition(
    condition_id: str,
    *rules: tuple[Selector, int | None],
    valued: bool = False,
) -> ConditionDefinition:
    return ConditionDefinition(
        id=condition_id,
        name=condition_id.replace("-", " ").title(),
        valued=valued,
        rules=[ConditionRule(selector=selector, value=value) for selector, value in rules],
    )


DEFAULT_CONDITIONS: tuple[ConditionDefinition, ...] = (
    _condition("frightened", (Selector.ALL, None), valued=True),
    _condition("sickened", (Selector.ALL, None), valued=True),
    _condition("clumsy", (Selector.DEX_BASED, None), valued=True),
    _condition("enfeebled", (Selector.STR_BASED, None), valued=True),
    _condition(
        "stupefied",
        (Selector.INT_BASED, None),
        (Selector.WIS_BASED, None),
        (Selector.CHA_BASED, None),
        (Selector.SPELL_DC, None),
        valued=True,
    ),
    _condition("drained", (Selector.CON_BASED, None), valued=True),
    _condition("fatigued", (Selector.AC, -1), (Selector.SAVING_THROW, -1)),
    _condition("off-guard", (Selector.AC, -2)),
    _condition("prone", (Selector.ATTACK, -2), (Selector.AC, -2)),
    _condition("blinded", (Selector.PERCEPTION, -4)),
    _condition(
        "unconscious",
        (Selector.AC, -4),
        (Selector.PERCEPTION, -4),
        (Selector.DEX_BASED, -4),
    ),
    _condition("doomed", valued=True),
    _condition("dying", valued=True),
    _condition("wounded", valued=True),
    _condition("slowed", valued=True),
    _condition("stunned", valued=True),
    _condition("quickened"),
    _condition("cursed"),
    _condition("grabbed", (Selector.AC, -2)),
    _condition("restrained", (Selector.AC, -2)),
)
"""Built-in catalog of common conditions used when no table is supplied."""


# =============================================================================
# Reference Tables
# =============================================================================


EntryT = TypeVar("EntryT", bound=Entry)

_TABLE_NAMES = (
    "ancestries",
    "heritages",
    "backgrounds",
    "classes",
    "feats",
    "spells",
    "weapons",
    "armor",
    "shields",
    "conditions",
)


def _index_entries(value: Any) -> Any:
    """Accept a list of entries and index it by id."""
    if value is None:
        return {}
    if isinstance(value, (list, tuple)):
        indexed: dict[str, Any] = {}
        for entry in value:
            entry_id = entry.get("id") if isinstance(entry, dict) else getattr(entry, "id", None)
            if entry_id:
                indexed[entry_id] = entry
        return indexed
    return value


class ReferenceTables(Component):
    """All read-only lookup tables, keyed by stable string ids."""

    ancestries: dict[str, AncestryEntry] = Field(default_factory=dict)
    heritages: dict[str, HeritageEntry] = Field(default_factory=dict)
    backgrounds: dict[str, BackgroundEntry] = Field(default_factory=dict)
    classes: dict[str, ClassEntry] = Field(default_factory=dict)
    feats: dict[str, FeatEntry] = Field(default_factory=dict)
    spells: dict[str, SpellEntry] = Field(default_factory=dict)
    weapons: dict[str, WeaponEntry] = Field(default_factory=dict)
    armor: dict[str, ArmorEntry] = Field(default_factory=dict)
    shields: dict[str, ShieldEntry] = Field(default_factory=dict)
    conditions: dict[str, ConditionDefinition] = Field(
        default_factory=lambda: {condition.id: condition for condition in DEFAULT_CONDITIONS}
    )

    @field_validator(
        "ancestries", "heritages", "backgrounds", "classes", "feats",
        "spells", "weapons", "armor", "shields", "conditions",
        mode="before",
    )
    @classmethod
    def index_lists(cls, value: Any) -> Any:
        return _index_entries(value)

    @model_validator(mode="after")
    def check_keys_match_ids(self) -> "ReferenceTables":
        """Ensure every table key equals its entry's id.

        Raises:
            ReferenceDataError: If a key and its entry's id differ.
        """
        for table_name in _TABLE_NAMES:
            for key, entry in getattr(self, table_name).items():
                if key != entry.id:
                    raise ReferenceDataError(
                        f"Reference entry keyed {key!r} has id {entry.id!r}",
                        table=table_name,
                        entry_id=key,
                    )
        return self

    @staticmethod
    def _lookup(table: dict[str, EntryT], entry_id: str | None) -> EntryT | None:
        if not entry_id:
            return None
        return table.get(entry_id)

    def ancestry(self, entry_id: str | None) -> AncestryEntry | None:
        return self._lookup(self.ancestries, entry_id)

    def heritage(self, entry_id: str | None) -> HeritageEntry | None:
        return self._lookup(self.heritages, entry_id)

    def background(self, entry_id: str | None) -> BackgroundEntry | None:
        return self._lookup(self.backgrounds, entry_id)

    def class_(self, entry_id: str | None) -> ClassEntry | None:
        return self._lookup(self.classes, entry_id)

    def feat(self, entry_id: str | None) -> FeatEntry | None:
        return self._lookup(self.feats, entry_id)

    def spell(self, entry_id: str | None) -> SpellEntry | None:
        return self._lookup(self.spells, entry_id)

    def weapon(self, entry_id: str | None) -> WeaponEntry | None:
        return self._lookup(self.weapons, entry_id)

    def armor_entry(self, entry_id: str | None) -> ArmorEntry | None:
        return self._lookup(self.armor, entry_id)

    def shield(self, entry_id: str | None) -> ShieldEntry | None:
        return self._lookup(self.shields, entry_id)

    def condition(self, entry_id: str | None) -> ConditionDefinition | None:
        return self._lookup(self.conditions, entry_id)


__all__ = [
    "Entry",
    "AncestryEntry",
    "HeritageEntry",
    "BackgroundEntry",
    "RankCeiling",
    "ClassEntry",
    "FeatEntry",
    "SpellEntry",
    "WeaponEntry",
    "ArmorEntry",
    "ShieldEntry",
    "ConditionRule",
    "ConditionDefinition",
    "DEFAULT_CONDITIONS",
    "ReferenceTables",
]
