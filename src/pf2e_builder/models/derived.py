"""Derived views written by the recalculator.

Everything in this module is output: the recalculator rebuilds it from the
character's raw choices on every call, so stale values in an incoming
snapshot are simply replaced.
"""

from __future__ import annotations

from pydantic import Field

from pf2e_builder.models.components import Component, Rank
from pf2e_builder.models.enums import Ability, ProficiencyRank, SaveKind, Skill


# =============================================================================
# Modifier Targets
# =============================================================================

ATTACK = "attack"
AC = "ac"
PERCEPTION = "perception"
SPELL_DC = "spell_dc"
SPEED = "speed"


def skill_target(ability: Ability) -> str:
    """Target key for checks based on an ability (e.g. 'skill:dex')."""
    return f"skill:{ability.value}"


def save_target(kind: SaveKind) -> str:
    """Target key for a saving throw (e.g. 'save:reflex')."""
    return f"save:{kind.value}"


ALL_TARGETS: tuple[str, ...] = (
    ATTACK,
    *(skill_target(ability) for ability in Ability),
    AC,
    PERCEPTION,
    *(save_target(kind) for kind in SaveKind),
    SPELL_DC,
    SPEED,
)


class ModifierSet(Component):
    """Net condition and buff modifier per target.

    Targets without an entry have a modifier of 0.
    """

    values: dict[str, int] = Field(default_factory=dict)

    def get(self, target: str) -> int:
        return self.values.get(target, 0)

    def skill(self, ability: Ability) -> int:
        return self.get(skill_target(ability))

    def save(self, kind: SaveKind) -> int:
        return self.get(save_target(kind))


# =============================================================================
# Statistics
# =============================================================================


class Statistic(Component):
    """A check modifier with its breakdown."""

    rank: Rank = ProficiencyRank.UNTRAINED
    ability_modifier: int = 0
    proficiency_bonus: int = 0
    item_bonus: int = 0
    modifier_bonus: int = 0
    total: int = 0


class ArmorClass(Component):
    """Armor class with its breakdown."""

    total: int = 10
    dex_modifier: int = 0
    dex_cap: int = 99
    rank: Rank = ProficiencyRank.UNTRAINED
    proficiency_bonus: int = 0
    item_bonus: int = 0
    modifier_bonus: int = 0
    shield_bonus: int = 0


class ShieldStatus(Component):
    """State of the equipped shield."""

    item_id: str
    max_hp: int = 0
    current_hp: int = 0
    hardness: int = 0
    broken_threshold: int = 0
    is_broken: bool = False
    is_destroyed: bool = False
    raised: bool = False


class ContainerLoad(Component):
    """Bulk held by one container."""

    container_id: str
    contents_bulk: float = 0.0
    reduction: float = 0.0
    capacity: float | None = None
    over_capacity: bool = False


class Encumbrance(Component):
    """Bulk totals and thresholds."""

    max_bulk: int = 5
    encumbered_threshold: int = 0
    coin_bulk: int = 0
    raw_bulk: float = 0.0
    total_reduction: float = 0.0
    current_bulk: float = 0.0
    encumbered: bool = False
    overloaded: bool = False
    containers: list[ContainerLoad] = Field(default_factory=list)


class Strike(Component):
    """Attack and damage for one wielded weapon.

    Attributes:
        item_id: Equipment instance id.
        weapon_id: Weapon reference id.
        attack_bonus: Bonus on the first attack.
        multiple_attack_penalty: Bonuses for the first, second and third attack.
        damage_dice: Number of weapon damage dice.
        damage_die: Die size (e.g. 'd8').
        damage_bonus: Flat damage bonus.
    """

    item_id: str
    weapon_id: str
    name: str = ""
    rank: Rank = ProficiencyRank.UNTRAINED
    attack_ability: Ability = Ability.STR
    attack_bonus: int = 0
    multiple_attack_penalty: tuple[int, int, int] = (0, -5, -10)
    damage_dice: int = 1
    damage_die: str = "d4"
    damage_bonus: int = 0
    damage_type: str = ""

    @property
    def damage(self) -> str:
        """Damage expression, e.g. '2d8+4'."""
        if self.damage_bonus:
            return f"{self.damage_dice}{self.damage_die}{self.damage_bonus:+d}"
        return f"{self.damage_dice}{self.damage_die}"


class SpellcastingStats(Component):
    """Spell DC, spell attack and the spells known to reference data."""

    tradition: str = ""
    key_ability: Ability = Ability.INT
    rank: Rank = ProficiencyRank.UNTRAINED
    spell_dc: int = 10
    spell_attack: int = 0
    known_spells: list[str] = Field(default_factory=list)
    focus_spells: list[str] = Field(default_factory=list)
    innate_spells: list[str] = Field(default_factory=list)


class DerivedStats(Component):
    """Every number the character sheet displays."""

    ability_modifiers: dict[Ability, int] = Field(default_factory=dict)
    max_hp: int = 0
    armor_class: ArmorClass = Field(default_factory=ArmorClass)
    saves: dict[SaveKind, Statistic] = Field(default_factory=dict)
    perception: Statistic = Field(default_factory=Statistic)
    skills: dict[Skill, Statistic] = Field(default_factory=dict)
    class_dc: int = 10
    spellcasting: SpellcastingStats | None = None
    strikes: list[Strike] = Field(default_factory=list)
    encumbrance: Encumbrance = Field(default_factory=Encumbrance)
    shield: ShieldStatus | None = None
    modifiers: ModifierSet = Field(default_factory=ModifierSet)
    speed: int = 25
    max_focus_points: int = 0
    feats: list[str] = Field(default_factory=list)
    wealth_gp: float = 0.0


__all__ = [
    "ATTACK",
    "AC",
    "PERCEPTION",
    "SPELL_DC",
    "SPEED",
    "ALL_TARGETS",
    "skill_target",
    "save_target",
    "ModifierSet",
    "Statistic",
    "ArmorClass",
    "ShieldStatus",
    "ContainerLoad",
    "Encumbrance",
    "Strike",
    "SpellcastingStats",
    "DerivedStats",
]
