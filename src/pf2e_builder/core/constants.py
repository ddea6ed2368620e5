"""Rules constants for the PF2e character builder engine.

Values here are fixed by the published rules. Values that campaigns are
expected to tweak live in core/config.py instead.
"""

from __future__ import annotations

# =============================================================================
# Ability Scores
# =============================================================================

BASE_ABILITY_SCORE = 10
"""Every ability score starts here before flaws and boosts."""

BOOST_SOFT_CAP = 18
"""A boost applied to a score at or above this raises it by 1 instead of 2."""

MIN_ABILITY_SCORE = 1
"""Floor for any ability score after flaws."""

FLAW_PENALTY = 2
"""Amount an ability flaw lowers a score."""

BOOST_MILESTONE_LEVELS = (5, 10, 15, 20)
"""Levels that grant four free ability boosts."""

BOOST_SLOTS = {
    "ancestry_free": 2,
    "background_choice": 1,
    "background_free": 1,
    "class_key": 1,
    "creation_free": 4,
    "level_up": 4,
}
"""Default number of entries each boost source can hold."""

# =============================================================================
# Levels & Proficiency
# =============================================================================

MIN_LEVEL = 1
MAX_LEVEL = 20

SKILL_INCREASE_LEVELS = (3, 5, 7, 9, 11, 13, 15, 17, 19)
"""Levels at which a character gains a skill increase."""

# =============================================================================
# Defense
# =============================================================================

BASE_ARMOR_CLASS = 10
RAISED_SHIELD_AC_BONUS = 2
BASE_SPELL_DC = 10
BASE_BULK_LIMIT = 5
"""Maximum Bulk is this plus the Strength modifier."""
COINS_PER_BULK = 1000
"""Coins of any denomination that add up to 1 Bulk."""
COPPER_PER_COIN = {"cp": 1, "sp": 10, "gp": 100, "pp": 1000}
"""Value of each coin denomination in copper pieces."""

DEFAULT_SPEED = 25

# =============================================================================
# Automatic Bonus Progression (variant rule)
# =============================================================================

ABP_ATTACK_POTENCY = {
    1: 0, 2: 1, 3: 1, 4: 1, 5: 1, 6: 1, 7: 1, 8: 1, 9: 1, 10: 2,
    11: 2, 12: 2, 13: 2, 14: 2, 15: 2, 16: 3, 17: 3, 18: 3, 19: 3, 20: 3,
}
"""Attack potency by level."""

ABP_DEFENSE_POTENCY = {
    1: 0, 2: 0, 3: 0, 4: 0, 5: 1, 6: 1, 7: 1, 8: 1, 9: 1, 10: 1,
    11: 2, 12: 2, 13: 2, 14: 2, 15: 2, 16: 2, 17: 2, 18: 3, 19: 3, 20: 3,
}
"""Armor potency by level."""

ABP_SAVING_THROW_POTENCY = {
    1: 0, 2: 0, 3: 0, 4: 0, 5: 0, 6: 0, 7: 0, 8: 1, 9: 1, 10: 1,
    11: 1, 12: 1, 13: 1, 14: 2, 15: 2, 16: 2, 17: 2, 18: 2, 19: 2, 20: 3,
}
"""Saving throw potency (resilient equivalent) by level."""

# =============================================================================
# Treat Wounds
# =============================================================================

TREAT_WOUNDS_HEALING = {15: 10, 20: 20, 30: 30, 40: 40}
"""Base healing for each Treat Wounds DC."""


__all__ = [
    "BASE_ABILITY_SCORE",
    "BOOST_SOFT_CAP",
    "MIN_ABILITY_SCORE",
    "FLAW_PENALTY",
    "BOOST_MILESTONE_LEVELS",
    "BOOST_SLOTS",
    "MIN_LEVEL",
    "MAX_LEVEL",
    "SKILL_INCREASE_LEVELS",
    "BASE_ARMOR_CLASS",
    "RAISED_SHIELD_AC_BONUS",
    "BASE_SPELL_DC",
    "BASE_BULK_LIMIT",
    "COINS_PER_BULK",
    "COPPER_PER_COIN",
    "DEFAULT_SPEED",
    "ABP_ATTACK_POTENCY",
    "ABP_DEFENSE_POTENCY",
    "ABP_SAVING_THROW_POTENCY",
    "TREAT_WOUNDS_HEALING",
]
