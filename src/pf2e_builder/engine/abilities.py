"""Ability score resolution.

Scores are replayed from base 10 on every call: ancestry flaws first, then
every boost in the ledger in a fixed canonical order. Boost size depends on
the running score (+2 below 18, +1 from 18), so the order matters and is
never changed.

Example:
    >>> ledger = BoostLedger(class_key=["str"], creation_free=["str", "dex"])
    >>> resolve_ability_scores(ledger, level=1).strength
    14
"""

from __future__ import annotations

from collections.abc import Iterator

from pf2e_builder.core.constants import (
    BASE_ABILITY_SCORE,
    BOOST_SLOTS,
    BOOST_SOFT_CAP,
    FLAW_PENALTY,
    MIN_ABILITY_SCORE,
)
from pf2e_builder.core.logging import get_logger
from pf2e_builder.models.components import AbilityScoreSet, BoostLedger
from pf2e_builder.models.enums import Ability
from pf2e_builder.models.reference import AncestryEntry, BackgroundEntry, ClassEntry


logger = get_logger(__name__)


def apply_boost(score: int) -> int:
    """Raise a score by one boost: +2 below 18, +1 at 18 or above.

    Example:
        >>> apply_boost(16)
        18
        >>> apply_boost(18)
        19
    """
    return score + (1 if score >= BOOST_SOFT_CAP else 2)


def apply_flaw(score: int) -> int:
    """Lower a score by one flaw, never below 1."""
    return max(MIN_ABILITY_SCORE, score - FLAW_PENALTY)


def iter_boosts(
    ledger: BoostLedger,
    *,
    level: int,
    ancestry: AncestryEntry | None = None,
    background: BackgroundEntry | None = None,
    class_entry: ClassEntry | None = None,
) -> Iterator[tuple[str, Ability]]:
    """Yield ``(source, ability)`` for every boost that applies, in canonical order.

    Background and class entries that contradict a known reference entry are
    skipped, as are level-up boosts from milestones above the current level.

    Args:
        ledger: The character's boost choices.
        level: Current character level.
        ancestry: Ancestry reference entry, if known.
        background: Background reference entry, if known.
        class_entry: Class reference entry, if known.

    Yields:
        Source name and boosted ability.
    """
    if ancestry is not None:
        for ability in ancestry.boosts:
            yield "ancestry_fixed", ability
        free_slots = min(ancestry.free_boosts, BOOST_SLOTS["ancestry_free"])
    else:
        free_slots = BOOST_SLOTS["ancestry_free"]
    for ability in ledger.ancestry_free[-free_slots:] if free_slots else []:
        yield "ancestry_free", ability

    options = set(background.boost_options) if background is not None else None
    for ability in ledger.background_choice:
        if options is None or ability in options:
            yield "background_choice", ability
        else:
            logger.debug("Skipping background boost outside options", ability=ability.value)
    for ability in ledger.background_free:
        if options is None or ability not in options:
            yield "background_free", ability
        else:
            logger.debug("Skipping background free boost inside options", ability=ability.value)

    key_abilities = set(class_entry.key_abilities) if class_entry is not None else set()
    for ability in ledger.class_key:
        if not key_abilities or ability in key_abilities:
            yield "class_key", ability
        else:
            logger.debug("Skipping class key boost outside key abilities", ability=ability.value)

    for ability in ledger.creation_free:
        yield "creation_free", ability

    for milestone in sorted(ledger.level_up):
        if milestone > level:
            continue
        for ability in ledger.level_up[milestone]:
            yield "level_up", ability


def resolve_ability_scores(
    ledger: BoostLedger,
    *,
    level: int,
    ancestry: AncestryEntry | None = None,
    background: BackgroundEntry | None = None,
    class_entry: ClassEntry | None = None,
) -> AbilityScoreSet:
    """Compute final ability scores from flaws and the boost ledger.

    Args:
        ledger: The character's boost choices.
        level: Current character level.
        ancestry: Ancestry reference entry, if known.
        background: Background reference entry, if known.
        class_entry: Class reference entry, if known.

    Returns:
        The resolved ability scores.
    """
    scores = {ability: BASE_ABILITY_SCORE for ability in Ability}

    if ancestry is not None:
        for ability in ancestry.flaws:
            scores[ability] = apply_flaw(scores[ability])

    for _source, ability in iter_boosts(
        ledger,
        level=level,
        ancestry=ancestry,
        background=background,
        class_entry=class_entry,
    ):
        scores[ability] = apply_boost(scores[ability])

    return AbilityScoreSet.from_mapping(scores)


__all__ = [
    "apply_boost",
    "apply_flaw",
    "iter_boosts",
    "resolve_ability_scores",
]
