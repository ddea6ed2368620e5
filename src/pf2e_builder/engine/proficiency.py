"""Proficiency bonuses, rank ceilings and skill rank derivation.

Example:
    >>> bonus(ProficiencyRank.EXPERT, 5)
    9
    >>> bonus(ProficiencyRank.LEGENDARY, 20)
    28
    >>> max_rank(6)
    <ProficiencyRank.EXPERT: 2>
"""

from __future__ import annotations

from collections.abc import Iterable

from pf2e_builder.core.config import ProficiencySettings, get_settings
from pf2e_builder.core.logging import get_logger
from pf2e_builder.models.components import ProficiencySet
from pf2e_builder.models.enums import ProficiencyRank, ProficiencyTrack, Skill
from pf2e_builder.models.reference import ClassEntry, RankCeiling


logger = get_logger(__name__)


def _proficiency_settings(settings: ProficiencySettings | None) -> ProficiencySettings:
    return settings if settings is not None else get_settings().proficiency


def bonus(
    rank: ProficiencyRank,
    level: int,
    *,
    without_level: bool = False,
    settings: ProficiencySettings | None = None,
) -> int:
    """Numeric proficiency bonus for a rank at a level.

    Untrained is always 0. Otherwise the bonus is ``tier * 2 + level``, or
    the configured level-independent value under the proficiency without
    level variant.

    Args:
        rank: Proficiency rank.
        level: Character level.
        without_level: Apply the proficiency without level variant.
        settings: Proficiency settings (defaults to the global settings).

    Returns:
        The proficiency bonus.
    """
    if rank == ProficiencyRank.UNTRAINED:
        return 0
    if without_level:
        table = _proficiency_settings(settings).without_level_bonuses
        return table.get(rank.label, rank * 2)
    return rank * 2 + level


def default_ceiling(settings: ProficiencySettings | None = None) -> RankCeiling:
    """The ceiling used when reference data supplies none."""
    config = _proficiency_settings(settings)
    return RankCeiling(master_level=config.master_level, legendary_level=config.legendary_level)


def ceiling_for(
    track: ProficiencyTrack,
    class_entry: ClassEntry | None,
    settings: ProficiencySettings | None = None,
) -> RankCeiling:
    """Ceiling for a track: the class override, else the configured default."""
    if class_entry is not None:
        override = class_entry.ceiling(track)
        if override is not None:
            return override
    return default_ceiling(settings)


def max_rank(
    level: int,
    ceiling: RankCeiling | None = None,
    *,
    settings: ProficiencySettings | None = None,
) -> ProficiencyRank:
    """Highest rank available at a level.

    Expert is always available; master and legendary unlock at the
    ceiling's levels (7 and 15 by default).

    Args:
        level: Character level.
        ceiling: Track-specific ceiling, or None for the default.
        settings: Proficiency settings (defaults to the global settings).

    Returns:
        The maximum legal rank.
    """
    ceiling = ceiling if ceiling is not None else default_ceiling(settings)
    if ceiling.legendary_level is not None and level >= ceiling.legendary_level:
        return ProficiencyRank.LEGENDARY
    if ceiling.master_level is not None and level >= ceiling.master_level:
        return ProficiencyRank.MASTER
    return ProficiencyRank.EXPERT


def clamp_rank(
    rank: ProficiencyRank,
    level: int,
    ceiling: RankCeiling | None = None,
    *,
    settings: ProficiencySettings | None = None,
) -> ProficiencyRank:
    """Lower a rank to the maximum available at a level."""
    highest = max_rank(level, ceiling, settings=settings)
    if rank > highest:
        logger.debug("Clamping proficiency rank", rank=rank.label, ceiling=highest.label, character_level=level)
        return highest
    return rank


def clamp_proficiencies(
    proficiencies: ProficiencySet,
    level: int,
    class_entry: ClassEntry | None = None,
    settings: ProficiencySettings | None = None,
) -> ProficiencySet:
    """Clamp every non-skill rank to its track ceiling.

    Args:
        proficiencies: Stored ranks.
        level: Character level.
        class_entry: Class reference entry supplying track ceilings.
        settings: Proficiency settings (defaults to the global settings).

    Returns:
        Proficiencies with no rank above its ceiling.
    """

    def clamp(rank: ProficiencyRank, track: ProficiencyTrack) -> ProficiencyRank:
        return clamp_rank(rank, level, ceiling_for(track, class_entry, settings), settings=settings)

    return proficiencies.model_copy(
        update={
            "fortitude": clamp(proficiencies.fortitude, ProficiencyTrack.SAVE),
            "reflex": clamp(proficiencies.reflex, ProficiencyTrack.SAVE),
            "will": clamp(proficiencies.will, ProficiencyTrack.SAVE),
            "perception": clamp(proficiencies.perception, ProficiencyTrack.PERCEPTION),
            "spell": clamp(proficiencies.spell, ProficiencyTrack.SPELL),
            "class_dc": clamp(proficiencies.class_dc, ProficiencyTrack.CLASS_DC),
            "armor": {
                category: clamp(rank, ProficiencyTrack.ARMOR)
                for category, rank in proficiencies.armor.items()
            },
            "weapons": {
                category: clamp(rank, ProficiencyTrack.WEAPON)
                for category, rank in proficiencies.weapons.items()
            },
        }
    )


def derive_skill_ranks(
    level: int,
    *,
    trained: Iterable[Skill],
    increases: dict[int, Skill],
    class_entry: ClassEntry | None = None,
    settings: ProficiencySettings | None = None,
) -> dict[Skill, ProficiencyRank]:
    """Derive every skill's rank from training and skill increases.

    Training sources make a skill trained. Each skill increase at a level no
    higher than the current level then raises its skill one step, never past
    the maximum rank available at the level the increase was taken.

    Args:
        level: Character level.
        trained: Skills trained by class, background, feats or manual choice.
        increases: Skill chosen at each skill-increase level.
        class_entry: Class reference entry supplying the skill ceiling.
        settings: Proficiency settings (defaults to the global settings).

    Returns:
        Rank for every skill, in skill order.
    """
    ranks = {skill: ProficiencyRank.UNTRAINED for skill in Skill}
    for skill in trained:
        ranks[skill] = ProficiencyRank.TRAINED

    ceiling = ceiling_for(ProficiencyTrack.SKILL, class_entry, settings)
    for increase_level in sorted(increases):
        if increase_level > level:
            continue
        skill = increases[increase_level]
        highest = max_rank(increase_level, ceiling, settings=settings)
        if ranks[skill] >= highest:
            logger.debug(
                "Skill increase blocked by rank ceiling",
                skill=skill.value,
                level=increase_level,
                ceiling=highest.label,
            )
            continue
        ranks[skill] = ProficiencyRank(ranks[skill] + 1)
    return ranks


__all__ = [
    "bonus",
    "default_ceiling",
    "ceiling_for",
    "max_rank",
    "clamp_rank",
    "clamp_proficiencies",
    "derive_skill_ranks",
]
