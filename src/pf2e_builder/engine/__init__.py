"""Derived-stat engine for the PF2e character builder.

Every operation is a pure function over Character snapshots: it returns a
new snapshot and never mutates its input.

Submodules:
    proficiency: Proficiency bonuses, rank ceilings, skill rank derivation
    abilities: Ability score resolution from the boost ledger
    conditions: Condition/buff aggregation and effect edits
    encumbrance: Bulk, encumbrance and speed
    defense: Armor class, saving throws and shield actions
    offense: Skills, Perception, class DC, spell DC and Strikes
    spellcasting: Spell slots, focus pool and innate spells
    normalize: Snapshot loading and default resolution
    recalculator: Full-snapshot recalculation
    rest: Treat Wounds, Refocus and long rest

Example:
    >>> from pf2e_builder.engine import recalculate, long_rest
    >>> character = recalculate(snapshot, refs)
    >>> rested = long_rest(character, refs)
"""

from __future__ import annotations

# =============================================================================
# Building Blocks
# =============================================================================
from pf2e_builder.engine.proficiency import (
    bonus as proficiency_bonus,
    clamp_rank,
    derive_skill_ranks,
    max_rank,
)
from pf2e_builder.engine.abilities import apply_boost, resolve_ability_scores
from pf2e_builder.engine.conditions import (
    add_buff,
    add_condition,
    advance_round,
    aggregate_modifiers,
    remove_buff,
    remove_condition,
    set_condition_value,
)
from pf2e_builder.engine.encumbrance import calculate_encumbrance, calculate_speed
from pf2e_builder.engine.defense import (
    calculate_armor_class,
    calculate_saves,
    damage_shield,
    repair_shield,
    set_shield_raised,
    shield_status,
)
from pf2e_builder.engine.spellcasting import (
    cast_focus_spell,
    consume_innate_spell,
    consume_spell_slot,
    max_focus_points,
)

# =============================================================================
# Orchestration
# =============================================================================
from pf2e_builder.engine.normalize import load_character
from pf2e_builder.engine.recalculator import CharacterRecalculator, recalculate
from pf2e_builder.engine.rest import (
    RestResolver,
    apply_treat_wounds,
    long_rest,
    refocus,
)


__all__ = [
    # Proficiency
    "proficiency_bonus",
    "max_rank",
    "clamp_rank",
    "derive_skill_ranks",
    # Abilities
    "apply_boost",
    "resolve_ability_scores",
    # Conditions
    "aggregate_modifiers",
    "add_condition",
    "remove_condition",
    "set_condition_value",
    "add_buff",
    "remove_buff",
    "advance_round",
    # Encumbrance
    "calculate_encumbrance",
    "calculate_speed",
    # Defense
    "calculate_armor_class",
    "calculate_saves",
    "shield_status",
    "damage_shield",
    "repair_shield",
    "set_shield_raised",
    # Spellcasting
    "consume_spell_slot",
    "cast_focus_spell",
    "consume_innate_spell",
    "max_focus_points",
    # Orchestration
    "load_character",
    "CharacterRecalculator",
    "recalculate",
    "RestResolver",
    "apply_treat_wounds",
    "refocus",
    "long_rest",
]
