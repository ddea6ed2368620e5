"""Spell slots, the focus pool and innate spell charges.

Consumption only ever moves counters toward empty; they refill through the
rest actions in :mod:`pf2e_builder.engine.rest`. Cantrips and at-will
spells are never tracked.
"""

from __future__ import annotations

from pf2e_builder.core.config import EngineSettings, get_settings
from pf2e_builder.core.logging import get_logger
from pf2e_builder.models.character import Character
from pf2e_builder.models.components import FocusPool, Spellcasting, SpellSlot
from pf2e_builder.models.enums import Ability
from pf2e_builder.models.reference import ClassEntry, ReferenceTables


logger = get_logger(__name__)


def _with_spellcasting(character: Character, spellcasting: Spellcasting) -> Character:
    return character.model_copy(update={"spellcasting": spellcasting})


# =============================================================================
# Consumption
# =============================================================================


def consume_spell_slot(character: Character, rank: int) -> Character:
    """Mark one slot of a spell rank as used.

    Rank 0 (cantrips) is exempt. A rank with no slots left, or no slots at
    all, is left unchanged.
    """
    spellcasting = character.spellcasting
    if rank <= 0 or spellcasting is None:
        return character
    slot = spellcasting.spell_slots.get(rank)
    if slot is None or slot.used >= slot.max:
        logger.debug("No spell slot available", rank=rank)
        return character
    slots = {**spellcasting.spell_slots, rank: slot.model_copy(update={"used": slot.used + 1})}
    return _with_spellcasting(character, spellcasting.model_copy(update={"spell_slots": slots}))


def cast_focus_spell(character: Character) -> Character:
    """Spend one focus point; an empty pool is left unchanged."""
    spellcasting = character.spellcasting
    if spellcasting is None or spellcasting.focus_pool is None:
        return character
    pool = spellcasting.focus_pool
    if pool.current <= 0:
        logger.debug("Focus pool empty")
        return character
    pool = pool.model_copy(update={"current": pool.current - 1})
    return _with_spellcasting(character, spellcasting.model_copy(update={"focus_pool": pool}))


def regain_focus_point(character: Character) -> Character:
    """Regain one focus point. Blocked when the pool is already full."""
    spellcasting = character.spellcasting
    if spellcasting is None or spellcasting.focus_pool is None:
        return character
    pool = spellcasting.focus_pool
    if pool.current >= pool.max:
        logger.debug("Focus pool already full", current=pool.current, max=pool.max)
        return character
    pool = pool.model_copy(update={"current": pool.current + 1})
    return _with_spellcasting(character, spellcasting.model_copy(update={"focus_pool": pool}))


def consume_innate_spell(character: Character, spell_id: str) -> Character:
    """Spend one use of an innate spell. At-will spells are exempt."""
    spellcasting = character.spellcasting
    if spellcasting is None:
        return character
    innate_spells = list(spellcasting.innate_spells)
    for index, innate in enumerate(innate_spells):
        if innate.spell_id != spell_id:
            continue
        if innate.at_will or innate.uses <= 0:
            return character
        innate_spells[index] = innate.model_copy(update={"uses": innate.uses - 1})
        return _with_spellcasting(character, spellcasting.model_copy(update={"innate_spells": innate_spells}))
    return character


def restore_spellcasting(spellcasting: Spellcasting) -> Spellcasting:
    """Long-rest reset: every slot unused, focus and innate uses full."""
    slots = {rank: slot.model_copy(update={"used": 0}) for rank, slot in spellcasting.spell_slots.items()}
    pool = spellcasting.focus_pool
    if pool is not None:
        pool = pool.model_copy(update={"current": pool.max})
    innate_spells = [innate.model_copy(update={"uses": innate.max_uses}) for innate in spellcasting.innate_spells]
    return spellcasting.model_copy(
        update={"spell_slots": slots, "focus_pool": pool, "innate_spells": innate_spells}
    )


# =============================================================================
# Maxima
# =============================================================================


def max_focus_points(
    character: Character,
    refs: ReferenceTables,
    settings: EngineSettings | None = None,
) -> int:
    """Maximum focus points.

    One point from the class if it grants focus spells, one per distinct
    focus-granting feat, plus any additional-focus feats, capped at the
    configured maximum (3 by default). Unknown feat ids are ignored.
    """
    config = settings if settings is not None else get_settings().engine
    class_entry = refs.class_(character.class_id)
    points = class_entry.focus_points if class_entry is not None else 0

    focus_feats: set[str] = set()
    for feat in character.feats:
        entry = refs.feat(feat.feat_id)
        if entry is None:
            continue
        if entry.grants_focus_pool:
            focus_feats.add(entry.id)
        points += entry.additional_focus_points
    return min(points + len(focus_feats), config.max_focus_points)


def sync_spellcasting(
    character: Character,
    class_entry: ClassEntry | None,
    focus_max: int,
    default_key_ability: Ability,
) -> Spellcasting | None:
    """Apply class slot maxima and the focus maximum to the spellcasting block.

    Slot maxima come from the class progression when it has one; stored
    maxima are kept otherwise. Used counters are clamped to the new maxima.
    A block is created for a class that casts, or when focus points exist.

    Args:
        character: Character snapshot.
        class_entry: Class reference entry, if known.
        focus_max: Maximum focus points.
        default_key_ability: Key ability for a newly created block.

    Returns:
        The synchronised block, or None for a non-caster.
    """
    spellcasting = character.spellcasting
    progression = class_entry.slots_at(character.level) if class_entry is not None else {}

    if spellcasting is None:
        if not progression and focus_max <= 0:
            return None
        key = class_entry.spellcasting_ability if class_entry is not None else None
        spellcasting = Spellcasting(
            tradition=(class_entry.tradition if class_entry is not None else None) or "",
            key_ability=key or default_key_ability,
        )

    slots = dict(spellcasting.spell_slots)
    if progression:
        slots = {}
        for rank in sorted(progression):
            count = progression[rank]
            if count <= 0 or not 1 <= rank <= 10:
                continue
            existing = spellcasting.spell_slots.get(rank)
            used = existing.used if existing is not None else 0
            slots[rank] = SpellSlot(max=count, used=min(used, count))
    else:
        slots = dict(sorted(slots.items()))

    if focus_max > 0:
        pool = spellcasting.focus_pool
        current = focus_max if pool is None else min(pool.current, focus_max)
        focus_pool: FocusPool | None = FocusPool(current=current, max=focus_max)
    else:
        focus_pool = None

    return spellcasting.model_copy(update={"spell_slots": slots, "focus_pool": focus_pool})


__all__ = [
    "consume_spell_slot",
    "cast_focus_spell",
    "regain_focus_point",
    "consume_innate_spell",
    "restore_spellcasting",
    "max_focus_points",
    "sync_spellcasting",
]
