"""Skills, Perception, class DC, spell DC and Strikes.

Check modifiers share one shape: ability modifier + proficiency bonus +
item bonus + condition/buff modifiers. Spell DC and spell attack both read
the ``spell_dc`` modifier target; Strikes read the ``attack`` target.
"""

from __future__ import annotations

from pf2e_builder.core.config import Settings, get_settings
from pf2e_builder.core.constants import ABP_ATTACK_POTENCY, BASE_SPELL_DC
from pf2e_builder.engine import proficiency
from pf2e_builder.engine.defense import worn_armor
from pf2e_builder.models.character import Character
from pf2e_builder.models.components import AbilityScoreSet
from pf2e_builder.models.derived import (
    ATTACK,
    PERCEPTION,
    SPELL_DC,
    ModifierSet,
    SpellcastingStats,
    Statistic,
    Strike,
)
from pf2e_builder.models.enums import Ability, ProficiencyRank, Skill
from pf2e_builder.models.equipment import EquippedItem
from pf2e_builder.models.reference import ClassEntry, ReferenceTables, WeaponEntry


ABP_DEVASTATING_LEVELS = ((19, 4), (12, 3), (4, 2))
"""Weapon damage dice granted by automatic bonus progression, by level."""


def _proficiency_bonus(character: Character, rank: ProficiencyRank, settings: Settings) -> int:
    return proficiency.bonus(
        rank,
        character.level,
        without_level=character.variant_rules.proficiency_without_level,
        settings=settings.proficiency,
    )


# =============================================================================
# Skills & Perception
# =============================================================================


def calculate_skills(
    character: Character,
    refs: ReferenceTables,
    scores: AbilityScoreSet,
    ranks: dict[Skill, ProficiencyRank],
    modifiers: ModifierSet,
    settings: Settings | None = None,
) -> dict[Skill, Statistic]:
    """Compute every skill modifier.

    Worn armor's check penalty applies to Strength and Dexterity skills
    unless the character meets the armor's Strength requirement.
    """
    config = settings if settings is not None else get_settings()
    check_penalty = 0
    armor = worn_armor(character, refs)
    if armor is not None:
        _item, entry = armor
        if entry.strength is None or scores.strength < entry.strength:
            check_penalty = -abs(entry.check_penalty)

    skills: dict[Skill, Statistic] = {}
    for skill in Skill:
        rank = ranks.get(skill, ProficiencyRank.UNTRAINED)
        ability_modifier = scores.modifier(skill.ability)
        proficiency_bonus = _proficiency_bonus(character, rank, config)
        item_bonus = check_penalty if skill.ability in (Ability.STR, Ability.DEX) else 0
        modifier_bonus = modifiers.skill(skill.ability)
        skills[skill] = Statistic(
            rank=rank,
            ability_modifier=ability_modifier,
            proficiency_bonus=proficiency_bonus,
            item_bonus=item_bonus,
            modifier_bonus=modifier_bonus,
            total=ability_modifier + proficiency_bonus + item_bonus + modifier_bonus,
        )
    return skills


def calculate_perception(
    character: Character,
    scores: AbilityScoreSet,
    modifiers: ModifierSet,
    settings: Settings | None = None,
) -> Statistic:
    """Compute the Perception modifier."""
    config = settings if settings is not None else get_settings()
    rank = character.proficiencies.perception
    ability_modifier = scores.modifier(Ability.WIS)
    proficiency_bonus = _proficiency_bonus(character, rank, config)
    modifier_bonus = modifiers.get(PERCEPTION)
    return Statistic(
        rank=rank,
        ability_modifier=ability_modifier,
        proficiency_bonus=proficiency_bonus,
        modifier_bonus=modifier_bonus,
        total=ability_modifier + proficiency_bonus + modifier_bonus,
    )


def key_ability(character: Character, class_entry: ClassEntry | None) -> Ability:
    """The class key ability: the chosen key boost, else the class default."""
    if character.boosts.class_key:
        return character.boosts.class_key[-1]
    if class_entry is not None and class_entry.key_abilities:
        return class_entry.key_abilities[0]
    return Ability.STR


def calculate_class_dc(
    character: Character,
    class_entry: ClassEntry | None,
    scores: AbilityScoreSet,
    settings: Settings | None = None,
) -> int:
    """Class DC = 10 + key ability modifier + class DC proficiency."""
    config = settings if settings is not None else get_settings()
    ability = key_ability(character, class_entry)
    return (
        BASE_SPELL_DC
        + scores.modifier(ability)
        + _proficiency_bonus(character, character.proficiencies.class_dc, config)
    )


# =============================================================================
# Spellcasting
# =============================================================================


def calculate_spellcasting(
    character: Character,
    refs: ReferenceTables,
    scores: AbilityScoreSet,
    modifiers: ModifierSet,
    settings: Settings | None = None,
) -> SpellcastingStats | None:
    """Compute spell DC and spell attack, and filter unknown spell ids.

    Returns None for characters without a spellcasting block.
    """
    spellcasting = character.spellcasting
    if spellcasting is None:
        return None
    config = settings if settings is not None else get_settings()

    rank = character.proficiencies.spell
    ability_modifier = scores.modifier(spellcasting.key_ability)
    proficiency_bonus = _proficiency_bonus(character, rank, config)
    modifier_bonus = modifiers.get(SPELL_DC)

    def known(spell_ids: list[str]) -> list[str]:
        return [spell_id for spell_id in spell_ids if refs.spell(spell_id) is not None]

    return SpellcastingStats(
        tradition=spellcasting.tradition,
        key_ability=spellcasting.key_ability,
        rank=rank,
        spell_dc=BASE_SPELL_DC + ability_modifier + proficiency_bonus + modifier_bonus,
        spell_attack=ability_modifier + proficiency_bonus + modifier_bonus,
        known_spells=known(spellcasting.known_spells),
        focus_spells=known(spellcasting.focus_spells),
        innate_spells=known([innate.spell_id for innate in spellcasting.innate_spells]),
    )


# =============================================================================
# Strikes
# =============================================================================


def attack_ability(weapon: WeaponEntry, scores: AbilityScoreSet) -> Ability:
    """Ranged weapons use Dexterity; finesse weapons use the better of Str and Dex."""
    if weapon.ranged:
        return Ability.DEX
    if weapon.is_finesse and scores.modifier(Ability.DEX) > scores.modifier(Ability.STR):
        return Ability.DEX
    return Ability.STR


def damage_ability_bonus(weapon: WeaponEntry, scores: AbilityScoreSet) -> int:
    """Strength to damage: full for melee and thrown, half (if positive) for propulsive."""
    strength = scores.modifier(Ability.STR)
    if not weapon.ranged or any(trait.startswith("thrown") for trait in weapon.traits):
        return strength
    if "propulsive" in weapon.traits:
        return strength // 2 if strength > 0 else strength
    return 0


def _damage_dice(item: EquippedItem, level: int, automatic_bonus_progression: bool) -> int:
    if automatic_bonus_progression:
        return next((dice for threshold, dice in ABP_DEVASTATING_LEVELS if level >= threshold), 1)
    return 1 + item.runes.striking


def calculate_strikes(
    character: Character,
    refs: ReferenceTables,
    scores: AbilityScoreSet,
    modifiers: ModifierSet,
    settings: Settings | None = None,
) -> list[Strike]:
    """Compute a Strike for every wielded weapon known to reference data.

    Wielded items whose weapon id is unknown are left out.
    """
    config = settings if settings is not None else get_settings()
    abp = character.variant_rules.automatic_bonus_progression
    strikes: list[Strike] = []
    for item in character.equipment:
        if item.wielded is None:
            continue
        weapon = refs.weapon(item.item_id)
        if weapon is None:
            continue

        ability = attack_ability(weapon, scores)
        rank = character.proficiencies.weapon_rank(weapon.category)
        potency = ABP_ATTACK_POTENCY.get(character.level, 0) if abp else item.runes.potency
        attack_bonus = (
            scores.modifier(ability)
            + _proficiency_bonus(character, rank, config)
            + potency
            + item.customization.bonus_attack
            + modifiers.get(ATTACK)
        )
        step = 4 if weapon.is_agile else 5
        strikes.append(
            Strike(
                item_id=item.id,
                weapon_id=weapon.id,
                name=item.customization.custom_name or weapon.name or item.name,
                rank=rank,
                attack_ability=ability,
                attack_bonus=attack_bonus,
                multiple_attack_penalty=(attack_bonus, attack_bonus - step, attack_bonus - 2 * step),
                damage_dice=_damage_dice(item, character.level, abp),
                damage_die=weapon.damage_die,
                damage_bonus=damage_ability_bonus(weapon, scores) + item.customization.bonus_damage,
                damage_type=weapon.damage_type,
            )
        )
    return strikes


__all__ = [
    "ABP_DEVASTATING_LEVELS",
    "calculate_skills",
    "calculate_perception",
    "key_ability",
    "calculate_class_dc",
    "calculate_spellcasting",
    "attack_ability",
    "damage_ability_bonus",
    "calculate_strikes",
]
