"""Enumeration types for the PF2e character builder engine.

This module defines the closed vocabularies the engine works with:
abilities, skills, saves, proficiency ranks, degrees of success, and the
penalty/bonus selectors used by conditions and buffs.
"""

from __future__ import annotations

from enum import IntEnum, StrEnum


class Ability(StrEnum):
    """The six ability scores, keyed by their short ids."""

    STR = "str"
    DEX = "dex"
    CON = "con"
    INT = "int"
    WIS = "wis"
    CHA = "cha"

    @property
    def full_name(self) -> str:
        """Get the full name of the ability (e.g., 'Strength' for STR)."""
        names = {
            Ability.STR: "Strength",
            Ability.DEX: "Dexterity",
            Ability.CON: "Constitution",
            Ability.INT: "Intelligence",
            Ability.WIS: "Wisdom",
            Ability.CHA: "Charisma",
        }
        return names[self]

    @classmethod
    def parse(cls, value: object) -> Ability | None:
        """Look up an ability by id, returning None for unknown ids.

        Args:
            value: Candidate ability id (e.g. 'dex', 'DEX', Ability.DEX).

        Returns:
            The matching Ability or None.
        """
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return None
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None


class Skill(StrEnum):
    """Core skills and their key abilities."""

    ACROBATICS = "acrobatics"
    ARCANA = "arcana"
    ATHLETICS = "athletics"
    CRAFTING = "crafting"
    DECEPTION = "deception"
    DIPLOMACY = "diplomacy"
    INTIMIDATION = "intimidation"
    MEDICINE = "medicine"
    NATURE = "nature"
    OCCULTISM = "occultism"
    PERFORMANCE = "performance"
    RELIGION = "religion"
    SOCIETY = "society"
    STEALTH = "stealth"
    SURVIVAL = "survival"
    THIEVERY = "thievery"

    @property
    def ability(self) -> Ability:
        """Get the key ability for this skill.

        Returns:
            The Ability enum value associated with this skill.
        """
        skill_abilities: dict[Skill, Ability] = {
            # Strength
            Skill.ATHLETICS: Ability.STR,
            # Dexterity
            Skill.ACROBATICS: Ability.DEX,
            Skill.STEALTH: Ability.DEX,
            Skill.THIEVERY: Ability.DEX,
            # Intelligence
            Skill.ARCANA: Ability.INT,
            Skill.CRAFTING: Ability.INT,
            Skill.OCCULTISM: Ability.INT,
            Skill.SOCIETY: Ability.INT,
            # Wisdom
            Skill.MEDICINE: Ability.WIS,
            Skill.NATURE: Ability.WIS,
            Skill.RELIGION: Ability.WIS,
            Skill.SURVIVAL: Ability.WIS,
            # Charisma
            Skill.DECEPTION: Ability.CHA,
            Skill.DIPLOMACY: Ability.CHA,
            Skill.INTIMIDATION: Ability.CHA,
            Skill.PERFORMANCE: Ability.CHA,
        }
        return skill_abilities[self]


class SaveKind(StrEnum):
    """Saving throws and their linked abilities."""

    FORTITUDE = "fortitude"
    REFLEX = "reflex"
    WILL = "will"

    @property
    def ability(self) -> Ability:
        """Get the ability linked to this saving throw."""
        return {
            SaveKind.FORTITUDE: Ability.CON,
            SaveKind.REFLEX: Ability.DEX,
            SaveKind.WILL: Ability.WIS,
        }[self]


class ProficiencyRank(IntEnum):
    """Proficiency ranks, ordered by tier (0-4)."""

    UNTRAINED = 0
    TRAINED = 1
    EXPERT = 2
    MASTER = 3
    LEGENDARY = 4

    @property
    def label(self) -> str:
        """Lower-case rank name (e.g. 'expert')."""
        return self.name.lower()

    @classmethod
    def parse(cls, value: object) -> ProficiencyRank:
        """Convert a rank name or tier into a rank.

        Unknown values resolve to UNTRAINED, matching the default-resolution
        rule for missing proficiencies.

        Args:
            value: Rank name ('expert'), tier (2), or ProficiencyRank.

        Returns:
            The matching rank, or UNTRAINED.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, bool):
            return cls.UNTRAINED
        if isinstance(value, int):
            return cls(min(max(value, 0), 4))
        if isinstance(value, str):
            try:
                return cls[value.strip().upper()]
            except KeyError:
                return cls.UNTRAINED
        return cls.UNTRAINED


class ProficiencyTrack(StrEnum):
    """Proficiency tracks that carry their own rank ceiling."""

    SKILL = "skill"
    SAVE = "save"
    PERCEPTION = "perception"
    ARMOR = "armor"
    WEAPON = "weapon"
    SPELL = "spell"
    CLASS_DC = "class_dc"


class DegreeOfSuccess(StrEnum):
    """Outcome tier of a check against a DC."""

    CRITICAL_FAILURE = "criticalFailure"
    FAILURE = "failure"
    SUCCESS = "success"
    CRITICAL_SUCCESS = "criticalSuccess"


class ResourceFrequency(StrEnum):
    """How often a custom resource refreshes."""

    DAILY = "daily"
    PER_ENCOUNTER = "per-encounter"


class BonusType(StrEnum):
    """Typed bonus categories for buffs."""

    STATUS = "status"
    CIRCUMSTANCE = "circumstance"
    ITEM = "item"
    UNTYPED = "untyped"


class Selector(StrEnum):
    """Rule selectors that expand into one or more modifier targets."""

    ALL = "all"
    STR_BASED = "str-based"
    DEX_BASED = "dex-based"
    CON_BASED = "con-based"
    INT_BASED = "int-based"
    WIS_BASED = "wis-based"
    CHA_BASED = "cha-based"
    ATTACK = "attack"
    AC = "ac"
    SAVING_THROW = "saving-throw"
    ALL_SAVES = "all-saves"
    PERCEPTION = "perception"
    SPELL_DC = "spell-dc"
    SPEED = "speed"


class ArmorCategory(StrEnum):
    """Armor proficiency categories."""

    UNARMORED = "unarmored"
    LIGHT = "light"
    MEDIUM = "medium"
    HEAVY = "heavy"


class RestState(StrEnum):
    """States of the rest resolver. Every action returns to IDLE."""

    IDLE = "idle"


class RestAction(StrEnum):
    """Named rest actions."""

    TREAT_WOUNDS = "treat_wounds"
    REFOCUS = "refocus"
    LONG_REST = "long_rest"


__all__ = [
    "Ability",
    "Skill",
    "SaveKind",
    "ProficiencyRank",
    "ProficiencyTrack",
    "DegreeOfSuccess",
    "ResourceFrequency",
    "BonusType",
    "Selector",
    "ArmorCategory",
    "RestState",
    "RestAction",
]
