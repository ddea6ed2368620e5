"""Pytest configuration and shared fixtures.

This module provides common fixtures and configuration for all tests
in the PF2e character builder test suite.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import pytest


if TYPE_CHECKING:
    from collections.abc import Generator

    from pf2e_builder.models import ReferenceTables


# =============================================================================
# Configuration Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def reset_settings_cache() -> Generator[None, None, None]:
    """Reset the settings cache before and after each test."""
    from pf2e_builder.core.config import clear_settings_cache

    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture
def mock_env_vars(monkeypatch: pytest.MonkeyPatch) -> dict[str, str]:
    """Set up mock environment variables for testing.

    Returns:
        Dictionary of environment variables that were set.
    """
    env_vars = {
        "PF2E_BUILDER_JSON_LOGS": "true",
        "PF2E_BUILDER_LOG_LEVEL": "DEBUG",
        "PF2E_BUILDER_ENGINE_TREAT_WOUNDS_COOLDOWN_MINUTES": "60",
        "PF2E_BUILDER_ENGINE_REFOCUS_COOLDOWN_MINUTES": "10",
    }
    for key, value in env_vars.items():
        monkeypatch.setenv(key, value)
    return env_vars


# =============================================================================
# Reference Data Fixtures
# =============================================================================


@pytest.fixture
def reference_data() -> dict[str, Any]:
    """Provide a small reference data set covering every table.

    Returns:
        Dictionary of reference tables as the data loader would supply them.
    """
    return {
        "ancestries": [
            {"id": "human", "name": "Human", "hp": 8, "speed": 25, "free_boosts": 2},
            {
                "id": "dwarf",
                "name": "Dwarf",
                "hp": 10,
                "speed": 20,
                "boosts": ["con", "wis"],
                "flaws": ["cha"],
                "free_boosts": 1,
            },
        ],
        "heritages": [
            {"id": "versatile-human", "ancestry_id": "human"},
            {"id": "rock-dwarf", "ancestry_id": "dwarf", "hp_bonus": 2},
        ],
        "backgrounds": [
            {
                "id": "acolyte",
                "name": "Acolyte",
                "boost_options": ["int", "wis"],
                "trained_skills": ["religion"],
            },
            {
                "id": "warrior",
                "name": "Warrior",
                "boost_options": ["str", "con"],
                "trained_skills": ["intimidation"],
            },
        ],
        "classes": [
            {
                "id": "fighter",
                "name": "Fighter",
                "hp": 10,
                "key_abilities": ["str", "dex"],
                "trained_skills": ["athletics"],
            },
            {
                "id": "cleric",
                "name": "Cleric",
                "hp": 8,
                "key_abilities": ["wis"],
                "trained_skills": ["religion"],
                "spellcasting_ability": "wis",
                "tradition": "divine",
                "focus_points": 1,
                "spell_slots": {1: {1: 2}, 2: {1: 3}, 3: {1: 3, 2: 2}},
            },
        ],
        "feats": [
            {"id": "toughness", "name": "Toughness", "hp_per_level": 1},
            {"id": "domain-initiate", "name": "Domain Initiate", "grants_focus_pool": True},
            {"id": "advanced-domain", "name": "Advanced Domain", "grants_focus_pool": True},
            {"id": "assurance", "name": "Assurance", "trained_skills": ["medicine"]},
        ],
        "spells": [
            {"id": "heal", "name": "Heal", "rank": 1, "traditions": ["divine", "primal"]},
            {"id": "bless", "name": "Bless", "rank": 1, "traditions": ["divine"]},
            {"id": "divine-lance", "name": "Divine Lance", "rank": 0, "traditions": ["divine"]},
            {"id": "fire-ray", "name": "Fire Ray", "rank": 1, "focus": True},
        ],
        "weapons": [
            {
                "id": "longsword",
                "name": "Longsword",
                "category": "martial",
                "damage_die": "d8",
                "damage_type": "slashing",
                "traits": ["versatile-p"],
                "bulk": 1,
            },
            {
                "id": "rapier",
                "name": "Rapier",
                "category": "martial",
                "damage_die": "d6",
                "damage_type": "piercing",
                "traits": ["deadly-d8", "disarm", "finesse"],
                "bulk": 1,
            },
            {
                "id": "dagger",
                "name": "Dagger",
                "category": "simple",
                "damage_die": "d4",
                "damage_type": "piercing",
                "traits": ["agile", "finesse", "thrown-10"],
                "bulk": 0.1,
            },
            {
                "id": "shortbow",
                "name": "Shortbow",
                "category": "martial",
                "damage_die": "d6",
                "damage_type": "piercing",
                "traits": ["deadly-d10"],
                "ranged": True,
                "bulk": 1,
            },
        ],
        "armor": [
            {
                "id": "studded-leather",
                "name": "Studded Leather Armor",
                "category": "light",
                "ac_bonus": 1,
                "dex_cap": 2,
                "check_penalty": -1,
                "strength": 12,
                "bulk": 1,
            },
            {
                "id": "full-plate",
                "name": "Full Plate",
                "category": "heavy",
                "ac_bonus": 6,
                "dex_cap": 0,
                "check_penalty": -3,
                "speed_penalty": -10,
                "strength": 18,
                "bulk": 4,
            },
        ],
        "shields": [
            {"id": "steel-shield", "name": "Steel Shield", "hardness": 5, "hp": 20, "bulk": 1},
            {"id": "wooden-shield", "name": "Wooden Shield", "hardness": 3, "hp": 12, "bulk": 1},
        ],
    }


@pytest.fixture
def refs(reference_data: dict[str, Any]) -> ReferenceTables:
    """Create ReferenceTables from the sample reference data.

    Args:
        reference_data: Raw reference tables.

    Returns:
        ReferenceTables instance with the default condition catalog.
    """
    from pf2e_builder.models import ReferenceTables

    return ReferenceTables.model_validate(reference_data)


# =============================================================================
# Character Fixtures
# =============================================================================


@pytest.fixture
def fighter_data() -> dict[str, Any]:
    """Provide a level 3 human fighter snapshot.

    Strength 18 (ancestry free, background choice, class key, creation free),
    Dexterity 14, Constitution/Intelligence/Wisdom 12, Charisma 10.

    Returns:
        Dictionary of character data.
    """
    return {
        "id": "char-fighter",
        "name": "Valeros",
        "level": 3,
        "ancestry_id": "human",
        "heritage_id": "versatile-human",
        "background_id": "warrior",
        "class_id": "fighter",
        "ability_scores": {},
        "boosts": {
            "ancestry_free": ["str", "dex"],
            "background_choice": ["str"],
            "background_free": ["wis"],
            "class_key": ["str"],
            "creation_free": ["str", "dex", "con", "int"],
        },
        "proficiencies": {
            "fortitude": "expert",
            "reflex": "expert",
            "will": "trained",
            "perception": "expert",
            "class_dc": "trained",
            "armor": {"unarmored": "trained", "light": "trained", "heavy": "trained"},
            "weapons": {"simple": "expert", "martial": "expert"},
        },
        "equipment": [
            {"id": "sword-1", "item_id": "longsword", "name": "Longsword", "bulk": 1, "wielded": {"hands": 1}},
            {
                "id": "shield-1",
                "item_id": "steel-shield",
                "name": "Steel Shield",
                "bulk": 1,
                "wielded": None,
            },
            {
                "id": "armor-1",
                "item_id": "studded-leather",
                "name": "Studded Leather",
                "bulk": 1,
                "worn": True,
            },
        ],
        "equipped_armor": "armor-1",
        "equipped_shield": "shield-1",
    }


@pytest.fixture
def cleric_data() -> dict[str, Any]:
    """Provide a level 1 dwarf cleric snapshot with focus feats.

    Returns:
        Dictionary of character data.
    """
    return {
        "id": "char-cleric",
        "name": "Kyra",
        "level": 1,
        "ancestry_id": "dwarf",
        "background_id": "acolyte",
        "class_id": "cleric",
        "ability_scores": {},
        "boosts": {
            "ancestry_free": ["str"],
            "background_choice": ["wis"],
            "background_free": ["con"],
            "class_key": ["wis"],
            "creation_free": ["wis", "con", "cha", "str"],
        },
        "proficiencies": {"spell": "trained", "will": "expert", "perception": "trained"},
        "feats": [
            {"feat_id": "domain-initiate", "level": 1},
            {"feat_id": "advanced-domain", "level": 1},
        ],
        "spellcasting": {
            "tradition": "divine",
            "key_ability": "wis",
            "known_spells": ["heal", "bless", "not-a-spell"],
            "focus_spells": ["fire-ray"],
        },
    }


@pytest.fixture
def blank_character() -> Any:
    """Create a level 1 character with no reference links.

    Returns:
        Character instance.
    """
    from pf2e_builder.models import Character

    return Character(id="blank", name="Blank", ability_scores={})
