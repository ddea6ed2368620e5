"""Armor class, saving throws and shield actions.

AC = 10 + min(Dex modifier, armor Dex cap) + armor proficiency
     + item bonus + AC modifiers + raised shield bonus

The raised shield bonus (+2) applies only while the shield is raised and
neither broken nor destroyed.
"""

from __future__ import annotations

from pf2e_builder.core.config import Settings, get_settings
from pf2e_builder.core.constants import (
    ABP_DEFENSE_POTENCY,
    ABP_SAVING_THROW_POTENCY,
    BASE_ARMOR_CLASS,
    RAISED_SHIELD_AC_BONUS,
)
from pf2e_builder.core.logging import get_logger
from pf2e_builder.engine import proficiency
from pf2e_builder.models.character import Character
from pf2e_builder.models.components import AbilityScoreSet
from pf2e_builder.models.derived import AC, ArmorClass, ModifierSet, ShieldStatus, Statistic
from pf2e_builder.models.enums import Ability, ArmorCategory, SaveKind
from pf2e_builder.models.equipment import EquippedItem
from pf2e_builder.models.reference import ArmorEntry, ReferenceTables


logger = get_logger(__name__)


def worn_armor(character: Character, refs: ReferenceTables) -> tuple[EquippedItem, ArmorEntry] | None:
    """The equipped armor item and its reference entry, if both exist."""
    item = character.item(character.equipped_armor)
    if item is None:
        return None
    entry = refs.armor_entry(item.item_id)
    if entry is None:
        return None
    return item, entry


# =============================================================================
# Armor Class
# =============================================================================


def calculate_armor_class(
    character: Character,
    refs: ReferenceTables,
    scores: AbilityScoreSet,
    modifiers: ModifierSet,
    settings: Settings | None = None,
) -> ArmorClass:
    """Compute armor class.

    Args:
        character: Character snapshot.
        refs: Reference tables.
        scores: Resolved ability scores.
        modifiers: Aggregated condition and buff modifiers.
        settings: Application settings (defaults to the global settings).

    Returns:
        Armor class with its breakdown.
    """
    config = settings if settings is not None else get_settings()
    level = character.level
    variants = character.variant_rules
    dex_cap = config.engine.unlimited_dex_cap
    category = ArmorCategory.UNARMORED.value
    item_bonus = 0

    armor = worn_armor(character, refs)
    if armor is not None:
        item, entry = armor
        category = entry.category.value
        if item.customization.dex_cap_override is not None:
            dex_cap = item.customization.dex_cap_override
        elif entry.dex_cap is not None:
            dex_cap = entry.dex_cap
        potency = 0 if variants.automatic_bonus_progression else item.runes.potency
        item_bonus = entry.ac_bonus + potency + item.customization.bonus_ac
    if variants.automatic_bonus_progression:
        item_bonus += ABP_DEFENSE_POTENCY.get(level, 0)

    rank = character.proficiencies.armor_rank(category)
    proficiency_bonus = proficiency.bonus(
        rank,
        level,
        without_level=variants.proficiency_without_level,
        settings=config.proficiency,
    )
    dex_modifier = min(scores.modifier(Ability.DEX), dex_cap)

    status = shield_status(character, refs)
    shield_bonus = RAISED_SHIELD_AC_BONUS if status is not None and status.raised else 0

    modifier_bonus = modifiers.get(AC)
    total = BASE_ARMOR_CLASS + dex_modifier + proficiency_bonus + item_bonus + modifier_bonus + shield_bonus
    return ArmorClass(
        total=total,
        dex_modifier=dex_modifier,
        dex_cap=dex_cap,
        rank=rank,
        proficiency_bonus=proficiency_bonus,
        item_bonus=item_bonus,
        modifier_bonus=modifier_bonus,
        shield_bonus=shield_bonus,
    )


# =============================================================================
# Saving Throws
# =============================================================================


def calculate_saves(
    character: Character,
    refs: ReferenceTables,
    scores: AbilityScoreSet,
    modifiers: ModifierSet,
    settings: Settings | None = None,
) -> dict[SaveKind, Statistic]:
    """Compute all three saving throws.

    The item bonus is the worn armor's resilient rune, or the automatic
    bonus progression value when that variant is on.
    """
    config = settings if settings is not None else get_settings()
    level = character.level
    variants = character.variant_rules

    if variants.automatic_bonus_progression:
        item_bonus = ABP_SAVING_THROW_POTENCY.get(level, 0)
    else:
        armor = worn_armor(character, refs)
        item_bonus = armor[0].runes.resilient if armor is not None else 0

    saves: dict[SaveKind, Statistic] = {}
    for kind in SaveKind:
        rank = getattr(character.proficiencies, kind.value)
        ability_modifier = scores.modifier(kind.ability)
        proficiency_bonus = proficiency.bonus(
            rank,
            level,
            without_level=variants.proficiency_without_level,
            settings=config.proficiency,
        )
        modifier_bonus = modifiers.save(kind)
        saves[kind] = Statistic(
            rank=rank,
            ability_modifier=ability_modifier,
            proficiency_bonus=proficiency_bonus,
            item_bonus=item_bonus,
            modifier_bonus=modifier_bonus,
            total=ability_modifier + proficiency_bonus + item_bonus + modifier_bonus,
        )
    return saves


# =============================================================================
# Shield
# =============================================================================


def shield_status(character: Character, refs: ReferenceTables) -> ShieldStatus | None:
    """Resolve the equipped shield's hit points and broken/destroyed state.

    Returns None when no shield is equipped or its maximum HP is unknown.
    """
    item = character.item(character.equipped_shield)
    if item is None:
        return None
    entry = refs.shield(item.item_id)
    if item.customization.max_hp_override is not None:
        max_hp = item.customization.max_hp_override
    elif entry is not None:
        max_hp = entry.hp
    else:
        return None
    if item.customization.hardness_override is not None:
        hardness = item.customization.hardness_override
    else:
        hardness = entry.hardness if entry is not None else 0

    stored = character.shield.current_hp
    current_hp = max_hp if stored is None else max(0, min(stored, max_hp))
    threshold = max_hp // 2
    is_destroyed = current_hp == 0
    is_broken = 0 < current_hp <= threshold
    return ShieldStatus(
        item_id=item.id,
        max_hp=max_hp,
        current_hp=current_hp,
        hardness=hardness,
        broken_threshold=threshold,
        is_broken=is_broken,
        is_destroyed=is_destroyed,
        raised=character.shield.raised and not (is_broken or is_destroyed),
    )


def damage_shield(character: Character, amount: int, refs: ReferenceTables) -> Character:
    """Apply damage (after hardness) to the equipped shield.

    HP is clamped at 0. A shield that becomes broken or destroyed is lowered.
    """
    status = shield_status(character, refs)
    if status is None or amount <= 0:
        return character
    current_hp = max(0, status.current_hp - amount)
    lowered = 0 < current_hp <= status.broken_threshold or current_hp == 0
    if lowered and character.shield.raised:
        logger.debug("Shield lowered after breaking", shield=status.item_id, current_hp=current_hp)
    shield = character.shield.model_copy(
        update={"current_hp": current_hp, "raised": character.shield.raised and not lowered}
    )
    return character.model_copy(update={"shield": shield})


def repair_shield(character: Character, amount: int, refs: ReferenceTables) -> Character:
    """Restore shield HP, clamped at the shield's maximum."""
    status = shield_status(character, refs)
    if status is None or amount <= 0:
        return character
    shield = character.shield.model_copy(
        update={"current_hp": min(status.max_hp, status.current_hp + amount)}
    )
    return character.model_copy(update={"shield": shield})


def set_shield_raised(character: Character, raised: bool, refs: ReferenceTables) -> Character:
    """Raise or lower the shield.

    Raising is rejected when no shield is equipped or the shield is broken
    or destroyed. Lowering is always allowed.
    """
    status = shield_status(character, refs)
    if status is None:
        logger.debug("No shield to raise")
        return character
    if raised and (status.is_broken or status.is_destroyed):
        logger.debug("Cannot raise a broken or destroyed shield", shield=status.item_id)
        return character
    if character.shield.raised == raised:
        return character
    return character.model_copy(update={"shield": character.shield.model_copy(update={"raised": raised})})


__all__ = [
    "worn_armor",
    "calculate_armor_class",
    "calculate_saves",
    "shield_status",
    "damage_shield",
    "repair_shield",
    "set_shield_raised",
]
