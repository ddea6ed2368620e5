"""Full-snapshot recalculation.

The recalculator is a pure function ``(Character, ReferenceTables) ->
Character``. It always recomputes the whole dependency chain in one order:

    normalize -> ability scores -> condition/buff modifiers
    -> proficiency clamps and skill ranks -> hit points and shield
    -> defense -> offense -> spellcasting -> encumbrance and speed

Running it on its own output changes nothing, down to the serialized JSON.

Example:
    >>> refs = ReferenceTables(classes=[{"id": "fighter", "hp": 10}])
    >>> character = recalculate({"class_id": "fighter", "ability_scores": {}}, refs)
    >>> character.hit_points.max
    10
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pf2e_builder.core.config import Settings, get_settings
from pf2e_builder.core.constants import DEFAULT_SPEED
from pf2e_builder.core.logging import get_logger
from pf2e_builder.engine.abilities import resolve_ability_scores
from pf2e_builder.engine.conditions import aggregate_modifiers
from pf2e_builder.engine.defense import (
    calculate_armor_class,
    calculate_saves,
    shield_status,
    worn_armor,
)
from pf2e_builder.engine.encumbrance import calculate_encumbrance, calculate_speed
from pf2e_builder.engine.normalize import load_character, normalize_character
from pf2e_builder.engine.offense import (
    calculate_class_dc,
    calculate_perception,
    calculate_skills,
    calculate_spellcasting,
    calculate_strikes,
    key_ability,
)
from pf2e_builder.engine.proficiency import clamp_proficiencies, derive_skill_ranks
from pf2e_builder.engine.spellcasting import max_focus_points, sync_spellcasting
from pf2e_builder.models.character import Character
from pf2e_builder.models.components import AbilityScoreSet, HitPoints
from pf2e_builder.models.derived import SPEED, DerivedStats
from pf2e_builder.models.enums import Ability, Skill
from pf2e_builder.models.reference import ReferenceTables


logger = get_logger(__name__)


class CharacterRecalculator:
    """Run every calculator in dependency order.

    The recalculator keeps no state between calls; one instance can serve
    any number of characters sharing the same reference tables.

    Attributes:
        refs: Reference tables.
        settings: Application settings.
    """

    def __init__(self, refs: ReferenceTables, settings: Settings | None = None) -> None:
        """Initialize the recalculator.

        Args:
            refs: Reference tables.
            settings: Application settings (defaults to the global settings).
        """
        self.refs = refs
        self.settings = settings if settings is not None else get_settings()

    def recalculate(self, snapshot: Character | Mapping[str, Any]) -> Character:
        """Return a fully consistent copy of a character snapshot.

        Args:
            snapshot: A Character or JSON-like mapping.

        Returns:
            The recalculated Character.

        Raises:
            MalformedCharacterError: If the snapshot is structurally unusable.
        """
        refs = self.refs
        character = normalize_character(load_character(snapshot), refs)

        ancestry = refs.ancestry(character.ancestry_id)
        heritage = refs.heritage(character.heritage_id)
        background = refs.background(character.background_id)
        class_entry = refs.class_(character.class_id)
        known_feats = [entry for entry in (refs.feat(feat.feat_id) for feat in character.feats) if entry]

        scores = resolve_ability_scores(
            character.boosts,
            level=character.level,
            ancestry=ancestry,
            background=background,
            class_entry=class_entry,
        )
        modifiers = aggregate_modifiers(character.conditions, character.buffs, refs)

        proficiencies = clamp_proficiencies(
            character.proficiencies,
            character.level,
            class_entry,
            self.settings.proficiency,
        )
        trained: list[Skill] = [*character.skill_training]
        if class_entry is not None:
            trained.extend(class_entry.trained_skills)
        if background is not None:
            trained.extend(background.trained_skills)
        for feat in known_feats:
            trained.extend(feat.trained_skills)
        skill_ranks = derive_skill_ranks(
            character.level,
            trained=trained,
            increases=character.skill_increases,
            class_entry=class_entry,
            settings=self.settings.proficiency,
        )

        max_hp = self._max_hit_points(character, scores)
        hit_points = self._clamp_hit_points(character.hit_points, max_hp)

        character = character.model_copy(
            update={
                "ability_scores": scores,
                "proficiencies": proficiencies,
                "hit_points": hit_points,
            }
        )

        shield = shield_status(character, refs)
        if shield is not None:
            shield_state = character.shield.model_copy(
                update={"current_hp": shield.current_hp, "raised": shield.raised}
            )
        else:
            shield_state = character.shield.model_copy(update={"raised": False})
        character = character.model_copy(update={"shield": shield_state})

        focus_max = max_focus_points(character, refs, self.settings.engine)
        spellcasting = sync_spellcasting(
            character,
            class_entry,
            focus_max,
            default_key_ability=key_ability(character, class_entry),
        )
        character = character.model_copy(update={"spellcasting": spellcasting})

        encumbrance = calculate_encumbrance(
            character.equipment,
            scores.modifier(Ability.STR),
            self.settings.engine,
            coins=character.currency.coin_count,
        )
        armor = worn_armor(character, refs)
        speed = calculate_speed(
            ancestry.speed if ancestry is not None else DEFAULT_SPEED,
            armor=armor[1] if armor is not None else None,
            strength_score=scores.strength,
            encumbrance=encumbrance,
            speed_modifier=modifiers.get(SPEED),
            settings=self.settings.engine,
        )

        derived = DerivedStats(
            ability_modifiers=scores.modifiers(),
            max_hp=max_hp,
            armor_class=calculate_armor_class(character, refs, scores, modifiers, self.settings),
            saves=calculate_saves(character, refs, scores, modifiers, self.settings),
            perception=calculate_perception(character, scores, modifiers, self.settings),
            skills=calculate_skills(character, refs, scores, skill_ranks, modifiers, self.settings),
            class_dc=calculate_class_dc(character, class_entry, scores, self.settings),
            spellcasting=calculate_spellcasting(character, refs, scores, modifiers, self.settings),
            strikes=calculate_strikes(character, refs, scores, modifiers, self.settings),
            encumbrance=encumbrance,
            shield=shield,
            modifiers=modifiers,
            speed=speed,
            max_focus_points=focus_max,
            feats=[feat.id for feat in known_feats],
            wealth_gp=character.currency.gold_value,
        )

        logger.debug(
            "Character recalculated",
            character=character.name or character.id,
            character_level=character.level,
            max_hp=max_hp,
            armor_class=derived.armor_class.total,
        )
        return character.model_copy(update={"derived": derived})

    def _max_hit_points(self, character: Character, scores: AbilityScoreSet) -> int:
        """Ancestry HP + heritage HP + (class HP + Con modifier) x level + feat HP."""
        refs = self.refs
        level = character.level
        ancestry = refs.ancestry(character.ancestry_id)
        heritage = refs.heritage(character.heritage_id)
        class_entry = refs.class_(character.class_id)

        total = ancestry.hp if ancestry is not None else 0
        total += heritage.hp_bonus if heritage is not None else 0
        class_hp = class_entry.hp if class_entry is not None else 0
        total += (class_hp + scores.modifier(Ability.CON)) * level
        for feat in character.feats:
            entry = refs.feat(feat.feat_id)
            if entry is not None:
                total += entry.hp_bonus + entry.hp_per_level * level
        return max(0, total)

    @staticmethod
    def _clamp_hit_points(hit_points: HitPoints, max_hp: int) -> HitPoints:
        """Set the new maximum; an uncomputed current HP starts full."""
        current = max_hp if hit_points.current is None else min(hit_points.current, max_hp)
        return hit_points.model_copy(update={"max": max_hp, "current": max(0, current)})


def recalculate(
    character: Character | Mapping[str, Any],
    refs: ReferenceTables,
    settings: Settings | None = None,
) -> Character:
    """Recalculate a character snapshot. See :class:`CharacterRecalculator`."""
    return CharacterRecalculator(refs, settings).recalculate(character)


__all__ = [
    "CharacterRecalculator",
    "recalculate",
]
