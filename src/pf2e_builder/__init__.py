"""PF2e Character Builder - derived-stat engine.

Turns a character's raw choices (ability boosts, class, equipment, active
conditions, spellcasting resources) into the numbers a Pathfinder Second
Edition character sheet displays, as a pure snapshot transform:

    recalculate(character, reference_tables) -> character

Example:
    >>> from pf2e_builder import ReferenceTables, recalculate
    >>> refs = ReferenceTables(classes=[{"id": "fighter", "hp": 10}])
    >>> sheet = recalculate({"class_id": "fighter", "level": 3, "ability_scores": {}}, refs)
    >>> sheet.derived.max_hp
    30

Modules:
    core: Configuration, logging, and base exceptions.
    models: Pydantic V2 snapshot, reference and derived-view schemas.
    engine: Calculators, the recalculator and rest actions.
"""

from __future__ import annotations

# Core
from pf2e_builder.core.config import Settings, get_settings
from pf2e_builder.core.exceptions import MalformedCharacterError, Pf2eBuilderError
from pf2e_builder.core.logging import configure_logging, configure_logging_from_settings, get_logger

# Models
from pf2e_builder.models.character import Character
from pf2e_builder.models.derived import DerivedStats
from pf2e_builder.models.reference import ReferenceTables

# Engine
from pf2e_builder.engine.recalculator import CharacterRecalculator, recalculate
from pf2e_builder.engine.rest import RestResolver, apply_treat_wounds, long_rest, refocus


__version__ = "0.1.0"
__all__ = [
    # Version info
    "__version__",
    # Core
    "Pf2eBuilderError",
    "MalformedCharacterError",
    "Settings",
    "get_settings",
    "configure_logging",
    "configure_logging_from_settings",
    "get_logger",
    # Models
    "Character",
    "DerivedStats",
    "ReferenceTables",
    # Engine
    "CharacterRecalculator",
    "recalculate",
    "RestResolver",
    "apply_treat_wounds",
    "refocus",
    "long_rest",
]
