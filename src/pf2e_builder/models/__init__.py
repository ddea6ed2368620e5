"""Pydantic V2 schemas for the PF2e character builder engine.

This module provides the data model layer: the Character snapshot, its
components, the read-only reference tables, and the derived views the
recalculator writes. All snapshot models are frozen.

Submodules:
    enums: Enumeration types (Ability, Skill, ProficiencyRank, Selector, etc.)
    components: Snapshot components (AbilityScoreSet, BoostLedger, HitPoints, etc.)
    equipment: Equipped items, runes and shield state
    effects: Tagged condition variants and buffs
    reference: Reference tables and the default condition catalog
    derived: Derived statistics
    character: The Character aggregate

Example:
    >>> from pf2e_builder.models import Ability, Character
    >>> character = Character(level=5, ability_scores={"dex": 16})
    >>> character.ability_scores.modifier(Ability.DEX)
    3
"""

from __future__ import annotations

# =============================================================================
# Enumerations
# =============================================================================
from pf2e_builder.models.enums import (
    Ability,
    ArmorCategory,
    BonusType,
    DegreeOfSuccess,
    ProficiencyRank,
    ProficiencyTrack,
    ResourceFrequency,
    RestAction,
    RestState,
    SaveKind,
    Selector,
    Skill,
)

# =============================================================================
# Components
# =============================================================================
from pf2e_builder.models.components import (
    AbilityScoreSet,
    BoostLedger,
    CharacterFeat,
    CustomResource,
    Currency,
    FocusPool,
    HitPoints,
    InnateSpell,
    ProficiencySet,
    RestCooldowns,
    Spellcasting,
    SpellSlot,
    VariantRules,
    calculate_modifier,
)
from pf2e_builder.models.effects import (
    ActiveCondition,
    Buff,
    BuffModifier,
    StaticCondition,
    ValuedCondition,
)
from pf2e_builder.models.equipment import (
    EquippedItem,
    ItemCustomization,
    ItemRunes,
    ShieldState,
    Wielded,
)

# =============================================================================
# Reference Data
# =============================================================================
from pf2e_builder.models.reference import (
    DEFAULT_CONDITIONS,
    AncestryEntry,
    ArmorEntry,
    BackgroundEntry,
    ClassEntry,
    ConditionDefinition,
    ConditionRule,
    FeatEntry,
    HeritageEntry,
    RankCeiling,
    ReferenceTables,
    ShieldEntry,
    SpellEntry,
    WeaponEntry,
)

# =============================================================================
# Derived Views & Aggregate
# =============================================================================
from pf2e_builder.models.derived import (
    ArmorClass,
    ContainerLoad,
    DerivedStats,
    Encumbrance,
    ModifierSet,
    ShieldStatus,
    SpellcastingStats,
    Statistic,
    Strike,
)
from pf2e_builder.models.character import Character


__all__ = [
    # Enums
    "Ability",
    "ArmorCategory",
    "BonusType",
    "DegreeOfSuccess",
    "ProficiencyRank",
    "ProficiencyTrack",
    "ResourceFrequency",
    "RestAction",
    "RestState",
    "SaveKind",
    "Selector",
    "Skill",
    # Components
    "AbilityScoreSet",
    "BoostLedger",
    "CharacterFeat",
    "CustomResource",
    "Currency",
    "FocusPool",
    "HitPoints",
    "InnateSpell",
    "ProficiencySet",
    "RestCooldowns",
    "Spellcasting",
    "SpellSlot",
    "VariantRules",
    "calculate_modifier",
    # Effects
    "ActiveCondition",
    "Buff",
    "BuffModifier",
    "StaticCondition",
    "ValuedCondition",
    # Equipment
    "EquippedItem",
    "ItemCustomization",
    "ItemRunes",
    "ShieldState",
    "Wielded",
    # Reference data
    "DEFAULT_CONDITIONS",
    "AncestryEntry",
    "ArmorEntry",
    "BackgroundEntry",
    "ClassEntry",
    "ConditionDefinition",
    "ConditionRule",
    "FeatEntry",
    "HeritageEntry",
    "RankCeiling",
    "ReferenceTables",
    "ShieldEntry",
    "SpellEntry",
    "WeaponEntry",
    # Derived
    "ArmorClass",
    "ContainerLoad",
    "DerivedStats",
    "Encumbrance",
    "ModifierSet",
    "ShieldStatus",
    "SpellcastingStats",
    "Statistic",
    "Strike",
    # Aggregate
    "Character",
]
