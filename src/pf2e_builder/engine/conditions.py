"""Condition and buff aggregation, plus edits to the active-effect lists.

Stacking rules:
    * A condition rule's selector expands to one or more targets.
    * For each (target, stacking family) only the largest-magnitude
      modifier applies.
    * Different families on the same target sum.
    * Buff modifiers always sum, with each other and with conditions.

Round advance decrements every duration (removing the effect at 0) and,
independently, lowers frightened by 1 while its value is above 1.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable

from pf2e_builder.core.logging import get_logger
from pf2e_builder.models.character import Character
from pf2e_builder.models.derived import (
    AC,
    ALL_TARGETS,
    ATTACK,
    PERCEPTION,
    SPEED,
    SPELL_DC,
    ModifierSet,
    save_target,
    skill_target,
)
from pf2e_builder.models.effects import ActiveCondition, Buff, StaticCondition, ValuedCondition
from pf2e_builder.models.enums import Ability, SaveKind, Selector
from pf2e_builder.models.reference import ReferenceTables


logger = get_logger(__name__)

ROUND_DECAY_CONDITIONS = frozenset({"frightened"})
"""Valued conditions whose value drops by 1 at the end of each round."""

_ALL_SAVES = tuple(save_target(kind) for kind in SaveKind)

SELECTOR_TARGETS: dict[Selector, tuple[str, ...]] = {
    Selector.ALL: (
        ATTACK,
        *(skill_target(ability) for ability in Ability),
        AC,
        PERCEPTION,
        *_ALL_SAVES,
        SPELL_DC,
    ),
    Selector.STR_BASED: (skill_target(Ability.STR),),
    Selector.DEX_BASED: (skill_target(Ability.DEX), AC, save_target(SaveKind.REFLEX)),
    Selector.CON_BASED: (skill_target(Ability.CON), save_target(SaveKind.FORTITUDE)),
    Selector.INT_BASED: (skill_target(Ability.INT),),
    Selector.WIS_BASED: (skill_target(Ability.WIS), PERCEPTION, save_target(SaveKind.WILL)),
    Selector.CHA_BASED: (skill_target(Ability.CHA),),
    Selector.ATTACK: (ATTACK,),
    Selector.AC: (AC,),
    Selector.SAVING_THROW: _ALL_SAVES,
    Selector.ALL_SAVES: _ALL_SAVES,
    Selector.PERCEPTION: (PERCEPTION,),
    Selector.SPELL_DC: (SPELL_DC,),
    Selector.SPEED: (SPEED,),
}


def expand_selector(selector: str) -> tuple[str, ...]:
    """Expand a selector or explicit target key into target keys.

    Unknown selectors expand to nothing.

    Example:
        >>> expand_selector("con-based")
        ('skill:con', 'save:fortitude')
        >>> expand_selector("save:will")
        ('save:will',)
    """
    if selector in ALL_TARGETS:
        return (selector,)
    try:
        return SELECTOR_TARGETS[Selector(selector)]
    except ValueError:
        return ()


# =============================================================================
# Aggregation
# =============================================================================


def aggregate_modifiers(
    conditions: Iterable[ActiveCondition],
    buffs: Iterable[Buff],
    refs: ReferenceTables,
) -> ModifierSet:
    """Collapse active conditions and buffs into one modifier per target.

    Args:
        conditions: Active conditions.
        buffs: Active buffs.
        refs: Reference tables holding condition definitions.

    Returns:
        Net modifier per target, omitting zero entries.
    """
    strongest: dict[tuple[str, str], int] = {}
    for condition in conditions:
        definition = refs.condition(condition.id)
        if definition is None or condition.is_expired:
            continue
        family = definition.stacking_family
        for rule in definition.rules:
            amount = rule.amount(condition.severity)
            if amount == 0:
                continue
            for target in expand_selector(rule.selector):
                key = (target, family)
                current = strongest.get(key)
                if current is None or abs(amount) > abs(current):
                    strongest[key] = amount

    totals: dict[str, int] = defaultdict(int)
    for (target, _family), amount in strongest.items():
        totals[target] += amount

    for buff in buffs:
        if buff.is_expired:
            continue
        for modifier in buff.modifiers:
            for target in expand_selector(modifier.selector):
                totals[target] += modifier.value

    return ModifierSet(values={target: totals[target] for target in ALL_TARGETS if totals.get(target)})


# =============================================================================
# Condition Edits
# =============================================================================


def merge_condition(existing: ActiveCondition, incoming: ActiveCondition) -> ActiveCondition:
    """Keep the more severe value and the longer duration (None is indefinite)."""
    if existing.duration is None or incoming.duration is None:
        duration = None
    else:
        duration = max(existing.duration, incoming.duration)
    if isinstance(existing, ValuedCondition) or isinstance(incoming, ValuedCondition):
        return ValuedCondition(
            id=existing.id,
            value=max(existing.severity, incoming.severity),
            duration=duration,
        )
    return existing.model_copy(update={"duration": duration})


def add_condition(
    character: Character,
    condition_id: str,
    *,
    value: int | None = None,
    duration: int | None = None,
    refs: ReferenceTables | None = None,
) -> Character:
    """Add a condition, or strengthen the existing instance of it.

    Re-adding an active condition keeps the more severe value rather than
    stacking. A condition the reference table marks as valued defaults to
    value 1.

    Args:
        character: Character snapshot.
        condition_id: Condition id.
        value: Condition value, for valued conditions.
        duration: Remaining rounds, or None for indefinite.
        refs: Reference tables used to tell valued conditions apart.

    Returns:
        Updated character; unchanged when the value is not positive.
    """
    key = condition_id.strip().lower()
    definition = refs.condition(key) if refs is not None else None
    valued = value is not None or (definition is not None and definition.valued)

    if valued:
        if value is not None and value <= 0:
            logger.debug("Ignoring non-positive condition value", condition=key, value=value)
            return character
        incoming: ActiveCondition = ValuedCondition(id=key, value=value or 1, duration=duration)
    else:
        incoming = StaticCondition(id=key, duration=duration)
    if incoming.is_expired:
        return character

    conditions = list(character.conditions)
    for index, existing in enumerate(conditions):
        if existing.id == key:
            conditions[index] = merge_condition(existing, incoming)
            break
    else:
        conditions.append(incoming)
    return character.model_copy(update={"conditions": conditions})


def remove_condition(character: Character, condition_id: str) -> Character:
    """Remove a condition by id. Missing ids are a no-op."""
    key = condition_id.strip().lower()
    conditions = [condition for condition in character.conditions if condition.id != key]
    if len(conditions) == len(character.conditions):
        return character
    return character.model_copy(update={"conditions": conditions})


def set_condition_value(character: Character, condition_id: str, value: int) -> Character:
    """Set a valued condition's value; a value of 0 or less removes it.

    Unlike :func:`add_condition` this overwrites the value, so it can lower
    a condition as well as raise it.
    """
    key = condition_id.strip().lower()
    if value <= 0:
        return remove_condition(character, key)
    existing = character.condition(key)
    if existing is None:
        return character.model_copy(
            update={"conditions": [*character.conditions, ValuedCondition(id=key, value=value)]}
        )
    replacement = ValuedCondition(id=key, value=value, duration=existing.duration)
    conditions = [replacement if condition.id == key else condition for condition in character.conditions]
    return character.model_copy(update={"conditions": conditions})


# =============================================================================
# Buff Edits
# =============================================================================


def add_buff(character: Character, buff: Buff) -> Character:
    """Add a buff, replacing any buff with the same id."""
    if buff.is_expired:
        return character
    buffs = [existing for existing in character.buffs if existing.id != buff.id]
    buffs.append(buff)
    return character.model_copy(update={"buffs": buffs})


def remove_buff(character: Character, buff_id: str) -> Character:
    """Remove a buff by id. Missing ids are a no-op."""
    buffs = [buff for buff in character.buffs if buff.id != buff_id]
    if len(buffs) == len(character.buffs):
        return character
    return character.model_copy(update={"buffs": buffs})


# =============================================================================
# Round Advance
# =============================================================================


def _tick_condition(condition: ActiveCondition) -> ActiveCondition:
    update: dict[str, int | None] = {}
    if condition.duration is not None:
        update["duration"] = condition.duration - 1
    if (
        isinstance(condition, ValuedCondition)
        and condition.id in ROUND_DECAY_CONDITIONS
        and condition.value > 1
    ):
        update["value"] = condition.value - 1
    return condition.model_copy(update=update) if update else condition


def advance_round(character: Character) -> Character:
    """Advance one round: tick durations, decay frightened, drop expired effects.

    Args:
        character: Character snapshot.

    Returns:
        Updated character.
    """
    conditions = [
        ticked for ticked in (_tick_condition(condition) for condition in character.conditions)
        if not ticked.is_expired
    ]
    buffs = [
        buff.model_copy(update={"duration": buff.duration - 1}) if buff.duration is not None else buff
        for buff in character.buffs
    ]
    buffs = [buff for buff in buffs if not buff.is_expired]

    expired = len(character.conditions) - len(conditions) + len(character.buffs) - len(buffs)
    if expired:
        logger.debug("Effects expired at end of round", count=expired)
    return character.model_copy(update={"conditions": conditions, "buffs": buffs})


__all__ = [
    "ROUND_DECAY_CONDITIONS",
    "SELECTOR_TARGETS",
    "expand_selector",
    "merge_condition",
    "aggregate_modifiers",
    "add_condition",
    "remove_condition",
    "set_condition_value",
    "add_buff",
    "remove_buff",
    "advance_round",
]
