"""Bulk, encumbrance and speed.

Example:
    With a Strength modifier of +2 the character can carry 7 Bulk and is
    encumbered above 2. Eight Bulk of gear, five of it in a worn backpack
    that ignores 2 Bulk, leaves 6 Bulk: encumbered but not overloaded.
"""

from __future__ import annotations

from collections.abc import Sequence

from pf2e_builder.core.config import EngineSettings, get_settings
from pf2e_builder.core.constants import BASE_BULK_LIMIT, COINS_PER_BULK
from pf2e_builder.models.derived import ContainerLoad, Encumbrance
from pf2e_builder.models.equipment import EquippedItem
from pf2e_builder.models.reference import ArmorEntry


def _engine_settings(settings: EngineSettings | None) -> EngineSettings:
    return settings if settings is not None else get_settings().engine


def item_bulk(item: EquippedItem, settings: EngineSettings | None = None) -> float:
    """Total bulk of a stack, treating negligible items as 0."""
    unit = item.unit_bulk
    if unit < _engine_settings(settings).negligible_bulk_threshold:
        return 0.0
    return unit * item.quantity


def container_applies_reduction(item: EquippedItem, settings: EngineSettings | None = None) -> bool:
    """A container reduces bulk when magical, or otherwise only while worn."""
    if not item.is_container or item.bulk_reduction <= 0:
        return False
    return item.bulk_reduction >= _engine_settings(settings).magical_container_threshold or item.worn


def calculate_encumbrance(
    equipment: Sequence[EquippedItem],
    strength_modifier: int,
    settings: EngineSettings | None = None,
    *,
    coins: int = 0,
) -> Encumbrance:
    """Compute carried bulk and thresholds.

    Each container subtracts at most the bulk of its own contents; unused
    reduction does not carry over to other containers. Every full 1000
    coins add 1 Bulk.

    Args:
        equipment: All carried items.
        strength_modifier: Strength modifier.
        settings: Engine settings (defaults to the global settings).
        coins: Number of coins carried, of any denomination.

    Returns:
        Encumbrance totals with a per-container breakdown.
    """
    config = _engine_settings(settings)
    max_bulk = BASE_BULK_LIMIT + strength_modifier
    threshold = max_bulk - BASE_BULK_LIMIT

    coin_bulk = max(0, coins) // COINS_PER_BULK
    raw_bulk = sum(item_bulk(item, config) for item in equipment) + coin_bulk

    containers: list[ContainerLoad] = []
    total_reduction = 0.0
    for container in equipment:
        if not container.is_container:
            continue
        contents = sum(
            item_bulk(item, config)
            for item in equipment
            if item.container_id == container.id and item.id != container.id and not item.is_container
        )
        reduction = (
            min(container.bulk_reduction, contents)
            if container_applies_reduction(container, config)
            else 0.0
        )
        total_reduction += reduction
        containers.append(
            ContainerLoad(
                container_id=container.id,
                contents_bulk=round(contents, 2),
                reduction=round(reduction, 2),
                capacity=container.capacity,
                over_capacity=container.capacity is not None and contents > container.capacity,
            )
        )

    current_bulk = max(0.0, round(raw_bulk - total_reduction, 2))
    return Encumbrance(
        max_bulk=max_bulk,
        encumbered_threshold=threshold,
        coin_bulk=coin_bulk,
        raw_bulk=round(raw_bulk, 2),
        total_reduction=round(total_reduction, 2),
        current_bulk=current_bulk,
        encumbered=current_bulk > threshold,
        overloaded=current_bulk > max_bulk,
        containers=containers,
    )


def calculate_speed(
    base_speed: int,
    *,
    armor: ArmorEntry | None,
    strength_score: int,
    encumbrance: Encumbrance,
    speed_modifier: int = 0,
    settings: EngineSettings | None = None,
) -> int:
    """Land speed after armor, encumbrance and effect modifiers.

    Meeting the armor's Strength requirement reduces its speed penalty by 5.

    Args:
        base_speed: Ancestry speed.
        armor: Worn armor reference entry, if any.
        strength_score: Strength score.
        encumbrance: Current encumbrance.
        speed_modifier: Net condition and buff modifier to speed.
        settings: Engine settings (defaults to the global settings).

    Returns:
        Speed in feet, never below 0.
    """
    speed = base_speed + speed_modifier
    if armor is not None and armor.speed_penalty:
        penalty = abs(armor.speed_penalty)
        if armor.strength is not None and strength_score >= armor.strength:
            penalty = max(0, penalty - 5)
        speed -= penalty
    if encumbrance.encumbered:
        speed -= _engine_settings(settings).encumbered_speed_penalty
    return max(0, speed)


__all__ = [
    "item_bulk",
    "container_applies_reduction",
    "calculate_encumbrance",
    "calculate_speed",
]
