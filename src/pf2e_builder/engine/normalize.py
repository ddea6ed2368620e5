"""Snapshot loading and the single default-resolution pass.

Every "missing or inconsistent field means a sensible default" rule lives
here, so the calculators that run afterwards can rely on a fully populated
snapshot:

    * duplicate equipment ids keep their first entry
    * container links that point at nothing, at a non-container, at the
      item itself, or that would nest a container are dropped
    * equipped armor/shield ids that match no item are cleared
    * duplicate conditions merge (more severe value wins), expired
      conditions and buffs are dropped, duplicate buffs keep the latest
    * ancestry free boosts are trimmed to the ancestry's slot count
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from pf2e_builder.core.exceptions import MalformedCharacterError
from pf2e_builder.core.logging import get_logger
from pf2e_builder.engine.conditions import merge_condition
from pf2e_builder.models.character import Character
from pf2e_builder.models.effects import ActiveCondition, Buff
from pf2e_builder.models.equipment import EquippedItem
from pf2e_builder.models.reference import ReferenceTables


logger = get_logger(__name__)


def load_character(data: Character | Mapping[str, Any]) -> Character:
    """Validate a snapshot into a Character.

    Args:
        data: A Character, or a JSON-like mapping.

    Returns:
        The validated Character.

    Raises:
        MalformedCharacterError: If the input is not an object, lacks its
            ability-score aggregate, or has fields of the wrong shape.
    """
    if isinstance(data, Character):
        return data
    if not isinstance(data, Mapping):
        raise MalformedCharacterError(
            f"Character snapshot must be an object, got {type(data).__name__}",
        )
    scores = data.get("ability_scores")
    if not isinstance(scores, Mapping) and not hasattr(scores, "model_dump"):
        raise MalformedCharacterError(
            "Character snapshot has no ability score object",
            missing_field="ability_scores",
        )
    try:
        return Character.model_validate(dict(data))
    except PydanticValidationError as exc:
        raise MalformedCharacterError(
            f"Character snapshot is malformed: {exc.error_count()} validation error(s)",
            details={"errors": exc.errors(include_url=False)},
        ) from exc


def _normalize_equipment(equipment: list[EquippedItem]) -> list[EquippedItem]:
    unique: list[EquippedItem] = []
    seen: set[str] = set()
    for item in equipment:
        if item.id in seen:
            logger.debug("Dropping duplicate equipment id", item_id=item.id)
            continue
        seen.add(item.id)
        unique.append(item)

    containers = {item.id for item in unique if item.is_container}
    normalized: list[EquippedItem] = []
    for item in unique:
        link = item.container_id
        if link is not None and (
            item.is_container or link == item.id or link not in containers
        ):
            logger.debug("Dropping invalid container link", item_id=item.id, container_id=link)
            item = item.model_copy(update={"container_id": None})
        normalized.append(item)
    return normalized


def _merge_conditions(conditions: list[ActiveCondition]) -> list[ActiveCondition]:
    merged: dict[str, ActiveCondition] = {}
    for condition in conditions:
        if condition.is_expired:
            continue
        existing = merged.get(condition.id)
        merged[condition.id] = condition if existing is None else merge_condition(existing, condition)
    return list(merged.values())


def _dedupe_buffs(buffs: list[Buff]) -> list[Buff]:
    latest: dict[str, Buff] = {}
    for buff in buffs:
        if buff.is_expired:
            continue
        latest.pop(buff.id, None)
        latest[buff.id] = buff
    return list(latest.values())


def normalize_character(character: Character, refs: ReferenceTables) -> Character:
    """Resolve defaults and drop inconsistent links.

    Args:
        character: Validated character snapshot.
        refs: Reference tables.

    Returns:
        A snapshot the calculators can use without further checks.
    """
    equipment = _normalize_equipment(character.equipment)
    item_ids = {item.id for item in equipment}

    boosts = character.boosts
    ancestry = refs.ancestry(character.ancestry_id)
    if ancestry is not None and len(boosts.ancestry_free) > ancestry.free_boosts:
        kept = boosts.ancestry_free[-ancestry.free_boosts:] if ancestry.free_boosts else []
        boosts = boosts.model_copy(update={"ancestry_free": kept})

    return character.model_copy(
        update={
            "equipment": equipment,
            "equipped_armor": character.equipped_armor if character.equipped_armor in item_ids else None,
            "equipped_shield": character.equipped_shield if character.equipped_shield in item_ids else None,
            "conditions": _merge_conditions(character.conditions),
            "buffs": _dedupe_buffs(character.buffs),
            "boosts": boosts,
        }
    )


__all__ = [
    "load_character",
    "normalize_character",
]
